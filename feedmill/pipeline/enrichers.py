import logging
import re
from typing import List, Optional
from urllib.parse import urlsplit, urlunsplit

import requests

from feedmill.errors import EnrichmentError
from feedmill.sources.hackernews import HackerNewsSource
from feedmill.sources.http import build_session
from feedmill.storage.cache import LookupCache
from feedmill.storage.models import NormalizedRecord, Story, StoryID
from feedmill.utils.time_utils import Deadline

logger = logging.getLogger(__name__)

TRACKING_PARAM_RE = re.compile(r"^utm_", re.IGNORECASE)
TWITTER_RE = re.compile(r"^https://(?:www\.)?(?:twitter|x)\.com/(.*)")
THREADER_URL = "https://nitter.net/{path}"


def strip_tracking(url: str) -> str:
    """Drop utm_* query parameters, leaving every other part of the URL as is."""
    parts = urlsplit(url)
    if not parts.query:
        return url
    segments = parts.query.split("&")
    # kept segments are copied verbatim so their encoding survives
    kept = [s for s in segments if not TRACKING_PARAM_RE.match(s.split("=", 1)[0])]
    if len(kept) == len(segments):
        return url
    return urlunsplit(parts._replace(query="&".join(kept)))


class UrlResolver:
    """Follows a link's redirects and stores the final, untracked URL on the record."""

    TIMEOUT = 10

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or build_session()

    def __call__(self, record: NormalizedRecord, deadline: Deadline) -> NormalizedRecord:
        if not record.url:
            raise EnrichmentError(f"no link to resolve for {record.title!r}")
        try:
            response = self.session.head(
                record.url,
                allow_redirects=True,
                timeout=deadline.timeout(cap=self.TIMEOUT),
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise EnrichmentError(f"resolving {record.url} failed: {e}") from e
        return record.model_copy(update={"url": strip_tracking(response.url)})


class StoryFetcher:
    """Story lookup through the per-item cache; the network is only hit on a miss."""

    def __init__(self, source: HackerNewsSource, cache: LookupCache):
        self.source = source
        self.cache = cache

    def __call__(self, story_id: StoryID, deadline: Deadline) -> Story:
        key = str(story_id)
        story = self.cache.get(key)
        if story is None:
            logger.debug("Fetching story %d", story_id)
            story = self.source.fetch_story(story_id, deadline)
            self.cache.set(key, story)
        return story


def unroll_twitter_thread(stories: List[Story], template: str = THREADER_URL) -> List[Story]:
    """Point twitter.com / x.com links at a thread reader. Cached stories are not modified."""
    out = []
    for story in stories:
        m = TWITTER_RE.match(story.url or "")
        if m:
            story = story.model_copy(update={"url": template.format(path=m.group(1))})
        out.append(story)
    return out
