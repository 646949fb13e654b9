# feedmill/tests/conftest.py
from datetime import datetime, timezone

import pytest
import requests

from feedmill.builder.atom import FeedInfo
from feedmill.errors import EnrichmentError
from feedmill.storage.models import Story

FEED_TIME = datetime(2021, 5, 25, 8, 29, 48, tzinfo=timezone.utc)

STORIES = {
    101: {"id": 101, "by": "alice", "score": 120, "time": 1621900000, "title": "Older story",
          "url": "https://blog.example/older"},
    102: {"id": 102, "by": "bob", "score": 80, "time": 1621930000, "title": "Ask HN: Newest",
          "text": "<p>What do you think?</p>"},
    103: {"id": 103, "by": "carol", "score": 300, "time": 1621910000, "title": "A thread",
          "url": "https://twitter.com/someone/status/1402388133086367751"},
}


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:
    def __init__(self, url="", status_code=200, payload=None):
        self.url = url
        self.status_code = status_code
        self._payload = payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}")

    def json(self):
        return self._payload


class FakeSession:
    """Minimal requests.Session stand-in keyed by URL."""

    def __init__(self, routes=None, error=None):
        self.routes = routes or {}
        self.error = error
        self.calls = []

    def _respond(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.routes[url]

    def get(self, url, **kwargs):
        return self._respond("GET", url, **kwargs)

    def head(self, url, **kwargs):
        return self._respond("HEAD", url, **kwargs)


class StubStorySource:
    """Hacker News source that serves STORIES and counts detail lookups."""

    def __init__(self, ids=None, stories=None, fail_ids=()):
        self.stories = STORIES if stories is None else stories
        self.ids = sorted(self.stories) if ids is None else ids
        self.fail_ids = set(fail_ids)
        self.fetched = []

    def fetch(self, deadline):
        return list(self.ids)

    def fetch_story(self, story_id, deadline):
        self.fetched.append(story_id)
        if story_id in self.fail_ids:
            raise EnrichmentError(f"story {story_id} fetch failed")
        return Story(**self.stories[story_id])


class ExplodingSource:
    """Fails the test if anything tries to reach the network."""

    def fetch(self, deadline):
        raise AssertionError("source should not be called")

    def fetch_story(self, story_id, deadline):
        raise AssertionError(f"story {story_id} should have come from the cache")


class DummyScheduler:
    def __init__(self):
        self.jobs = []
        self.started = False

    def add_job(self, func, *a, **k):
        self.jobs.append((func, a, k))

    def start(self):
        self.started = True

    def shutdown(self, wait=False):
        self.started = False


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def hn_info():
    return FeedInfo(title="Hacker News", link="https://news.ycombinator.com/best",
                    description="Hacker News Top Stories", author_name="feedmill")


@pytest.fixture()
def tweet_info():
    return FeedInfo(title="Atlas Obscura", link="http://example.com",
                    description="Atlas Obscura Tweets", author_name="feedmill")
