import logging
from typing import List, Optional

import requests

from feedmill.errors import SourceError
from feedmill.sources.base import BaseSource
from feedmill.sources.http import build_session
from feedmill.storage.models import RawTweet
from feedmill.utils.time_utils import Deadline

logger = logging.getLogger(__name__)


class TwitterTimelineSource(BaseSource):
    BASE_URL = "https://api.twitter.com/1.1/statuses/user_timeline.json"
    TIMEOUT = 10

    def __init__(self, token: str, screen_name: str, max_items: int = 20,
                 session: Optional[requests.Session] = None, base_url: Optional[str] = None):
        self.token: str = token
        self.screen_name: str = screen_name
        self.max_items: int = max_items
        self.session = session or build_session()
        self.base_url = base_url or self.BASE_URL

    def fetch(self, deadline: Deadline) -> List[RawTweet]:
        params = {
            "screen_name": self.screen_name,
            "count": str(self.max_items),
        }
        try:
            response = self.session.get(
                self.base_url,
                params=params,
                headers={"Authorization": f"Bearer {self.token}"},
                timeout=deadline.timeout(cap=self.TIMEOUT),
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            raise SourceError(f"timeline fetch failed for @{self.screen_name}: {e}") from e

        if not isinstance(payload, list):
            raise SourceError(f"unexpected timeline payload for @{self.screen_name}: {type(payload).__name__}")

        tweets = []
        for item in payload:
            if not isinstance(item, dict):
                raise SourceError(f"unexpected tweet in timeline for @{self.screen_name}: {item!r}")
            text = item.get("full_text") or item.get("text") or ""
            try:
                tweets.append(RawTweet(text=text, created_at=item.get("created_at") or ""))
            except ValueError as e:
                raise SourceError(f"malformed tweet for @{self.screen_name}: {e}") from e
        logger.info("Fetched %d tweets for @%s", len(tweets), self.screen_name)
        return tweets
