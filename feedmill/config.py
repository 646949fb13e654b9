import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from feedmill.errors import ConfigError

# pick up a local .env before reading the environment
load_dotenv(override=True)

REFRESH_INTERVAL_MINUTES = 10
STORY_CACHE_HOURS = 24
STORY_WORKERS = 50
URL_WORKERS = 10
BATCH_TIMEOUT_SECONDS = 10.0
REQUEST_TIMEOUT_SECONDS = 10.0


def _number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    twitter_token: Optional[str] = None
    twitter_screen_name: str = "atlasobscura"
    twitter_feed_title: str = "Atlas Obscura"
    feed_url: str = "https://example.com"
    feed_author: str = "feedmill"
    feed_author_email: str = ""
    refresh_interval_minutes: float = REFRESH_INTERVAL_MINUTES
    story_cache_hours: float = STORY_CACHE_HOURS
    story_workers: int = STORY_WORKERS
    url_workers: int = URL_WORKERS
    batch_timeout: float = BATCH_TIMEOUT_SECONDS
    request_timeout: float = REQUEST_TIMEOUT_SECONDS
    port: int = 8080
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            twitter_token=os.getenv("TWITTER_BEARER_TOKEN") or None,
            twitter_screen_name=os.getenv("TWITTER_SCREEN_NAME", "atlasobscura"),
            twitter_feed_title=os.getenv("TWITTER_FEED_TITLE", "Atlas Obscura"),
            feed_url=os.getenv("FEED_URL", "https://example.com"),
            feed_author=os.getenv("FEED_AUTHOR", "feedmill"),
            feed_author_email=os.getenv("FEED_AUTHOR_EMAIL", ""),
            refresh_interval_minutes=_number("REFRESH_INTERVAL_MINUTES", REFRESH_INTERVAL_MINUTES, float),
            story_cache_hours=_number("STORY_CACHE_HOURS", STORY_CACHE_HOURS, float),
            story_workers=_number("STORY_WORKERS", STORY_WORKERS, int),
            url_workers=_number("URL_WORKERS", URL_WORKERS, int),
            batch_timeout=_number("BATCH_TIMEOUT_SECONDS", BATCH_TIMEOUT_SECONDS, float),
            request_timeout=_number("REQUEST_TIMEOUT_SECONDS", REQUEST_TIMEOUT_SECONDS, float),
            port=_number("PORT", 8080, int),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
