# feedmill/tests/test_sources.py
import pytest
import requests

from conftest import FakeResponse, FakeSession
from feedmill.errors import BatchTimeoutError, EnrichmentError, SourceError
from feedmill.sources import HackerNewsAPI, HackerNewsSource, TwitterTimelineSource
from feedmill.utils.time_utils import Deadline

API = HackerNewsAPI(story_list="http://hn.test/best.json", story="http://hn.test/{id}.json")


def test_story_ids_are_sorted():
    session = FakeSession({API.story_list: FakeResponse(payload=[27284800, 27270877, 27279421])})
    ids = HackerNewsSource(API, session).fetch(Deadline(5))
    assert ids == [27270877, 27279421, 27284800]


def test_story_list_failure_is_source_error():
    session = FakeSession(error=requests.ConnectionError("down"))
    with pytest.raises(SourceError):
        HackerNewsSource(API, session).fetch(Deadline(5))


def test_fetch_story_sets_id():
    payload = {"by": "dang", "score": 10, "time": 1621930000, "title": "Hello", "type": "story", "kids": [1, 2]}
    session = FakeSession({"http://hn.test/42.json": FakeResponse(payload=payload)})
    story = HackerNewsSource(API, session).fetch_story(42, Deadline(5))
    assert story.id == 42
    assert story.by == "dang"
    assert story.url == ""
    assert story.created.year == 2021


def test_deleted_story_is_enrichment_error():
    session = FakeSession({"http://hn.test/42.json": FakeResponse(payload=None)})
    with pytest.raises(EnrichmentError, match="not found"):
        HackerNewsSource(API, session).fetch_story(42, Deadline(5))


def test_story_http_error_is_enrichment_error():
    session = FakeSession({"http://hn.test/42.json": FakeResponse(status_code=500)})
    with pytest.raises(EnrichmentError):
        HackerNewsSource(API, session).fetch_story(42, Deadline(5))


def test_expired_deadline_stops_before_request():
    session = FakeSession({"http://hn.test/42.json": FakeResponse(payload={})})
    with pytest.raises(BatchTimeoutError):
        HackerNewsSource(API, session).fetch_story(42, Deadline(0))
    assert session.calls == []


def test_timeline_fetch_sends_bearer_token():
    url = "http://twitter.test/timeline.json"
    payload = [
        {"text": "Foo http://example.com", "created_at": "Sun May 23 19:30:00 +0200 2021"},
        {"full_text": "Bar https://t.co/x", "text": "Bar https://t.co/…", "created_at": "Sat May 22 09:15:00 +0000 2021"},
    ]
    session = FakeSession({url: FakeResponse(payload=payload)})
    tweets = TwitterTimelineSource("secret", "atlasobscura", session=session, base_url=url).fetch(Deadline(5))

    assert [t.text for t in tweets] == ["Foo http://example.com", "Bar https://t.co/x"]
    _, _, kwargs = session.calls[0]
    assert kwargs["headers"]["Authorization"] == "Bearer secret"
    assert kwargs["params"]["screen_name"] == "atlasobscura"


def test_timeline_failure_is_source_error():
    url = "http://twitter.test/timeline.json"
    session = FakeSession({url: FakeResponse(status_code=401)})
    with pytest.raises(SourceError):
        TwitterTimelineSource("bad", "atlasobscura", session=session, base_url=url).fetch(Deadline(5))


@pytest.mark.parametrize("payload", [{"errors": ["rate limited"]}, [1, "two"], ["x", 5]])
def test_malformed_story_list_is_source_error(payload):
    session = FakeSession({API.story_list: FakeResponse(payload=payload)})
    with pytest.raises(SourceError):
        HackerNewsSource(API, session).fetch(Deadline(5))


@pytest.mark.parametrize("payload", [{"errors": [{"code": 88}]}, ["not a tweet"], [{"text": ["a"]}]])
def test_malformed_timeline_is_source_error(payload):
    url = "http://twitter.test/timeline.json"
    session = FakeSession({url: FakeResponse(payload=payload)})
    with pytest.raises(SourceError):
        TwitterTimelineSource("t", "atlasobscura", session=session, base_url=url).fetch(Deadline(5))
