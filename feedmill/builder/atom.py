from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from feedgen.feed import FeedGenerator

from feedmill.sources.hackernews import HN_SOURCE_URL
from feedmill.storage.models import NormalizedRecord, Story

ATOM_CONTENT_TYPE = "application/atom+xml"


@dataclass(frozen=True)
class FeedInfo:
    title: str
    link: str
    description: str
    author_name: str
    author_email: str = ""


def _generator(info: FeedInfo, created: datetime) -> FeedGenerator:
    fg = FeedGenerator()
    fg.id(info.link)
    fg.title(info.title)
    fg.link(href=info.link, rel="alternate")
    fg.subtitle(info.description)
    author = {"name": info.author_name}
    if info.author_email:
        author["email"] = info.author_email
    fg.author(author)
    fg.updated(created)
    return fg


def _render(fg: FeedGenerator) -> str:
    return fg.atom_str(pretty=True).decode("utf-8")


def build_feed(records: Iterable[NormalizedRecord], info: FeedInfo, created: datetime) -> str:
    """Atom document for link records, entries in the order given."""
    fg = _generator(info, created)
    for record in records:
        fe = fg.add_entry(order="append")
        fe.id(record.url)
        # atom requires a non-empty title; a bare link is its own title
        fe.title(record.title or record.url)
        fe.link(href=record.url)
        fe.updated(record.created)
    return _render(fg)


def build_story_feed(stories: Iterable[Story], info: FeedInfo, created: datetime,
                     source_template: str = HN_SOURCE_URL) -> str:
    """
    Atom document for Hacker News stories.

    Text posts have no URL of their own and link to the discussion page,
    which is also used as the entry id.
    """
    fg = _generator(info, created)
    for story in stories:
        source = source_template.format(id=story.id)
        link = story.url or source
        fe = fg.add_entry(order="append")
        fe.id(source)
        fe.title(story.title or source)
        fe.link(href=link)
        if story.by:
            fe.author({"name": story.by})
        if story.text:
            fe.content(story.text, type="html")
        fe.updated(story.created)
    return _render(fg)
