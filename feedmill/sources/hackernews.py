import logging
from dataclasses import dataclass
from typing import List, Optional

import requests

from feedmill.errors import EnrichmentError, SourceError
from feedmill.sources.base import BaseSource
from feedmill.sources.http import build_session
from feedmill.storage.models import Story, StoryID
from feedmill.utils.time_utils import Deadline

logger = logging.getLogger(__name__)

STORY_LIST_URL = "https://hacker-news.firebaseio.com/v0/beststories.json"
STORY_URL = "https://hacker-news.firebaseio.com/v0/item/{id}.json"
HN_SOURCE_URL = "https://news.ycombinator.com/item?id={id}"


@dataclass(frozen=True)
class HackerNewsAPI:
    story_list: str = STORY_LIST_URL
    story: str = STORY_URL


class HackerNewsSource(BaseSource):
    TIMEOUT = 10

    def __init__(self, api: Optional[HackerNewsAPI] = None, session: Optional[requests.Session] = None):
        self.api = api or HackerNewsAPI()
        self.session = session or build_session()

    def fetch(self, deadline: Deadline) -> List[StoryID]:
        try:
            response = self.session.get(self.api.story_list, timeout=deadline.timeout(cap=self.TIMEOUT))
            response.raise_for_status()
            ids = response.json() or []
        except (requests.RequestException, ValueError) as e:
            raise SourceError(f"story list fetch failed: {e}") from e
        if not isinstance(ids, list):
            raise SourceError(f"unexpected story list payload: {type(ids).__name__}")
        try:
            return sorted(int(i) for i in ids)
        except (TypeError, ValueError) as e:
            raise SourceError(f"malformed story id in list: {e}") from e

    def fetch_story(self, story_id: StoryID, deadline: Deadline) -> Story:
        url = self.api.story.format(id=story_id)
        try:
            response = self.session.get(url, timeout=deadline.timeout(cap=self.TIMEOUT))
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise EnrichmentError(f"story {story_id} fetch failed: {e}") from e
        # deleted or unknown items come back as a literal null
        if not data:
            raise EnrichmentError(f"story {story_id} not found")
        try:
            story = Story.model_validate(data)
        except ValueError as e:
            raise EnrichmentError(f"story {story_id} is malformed: {e}") from e
        story.id = story_id
        return story
