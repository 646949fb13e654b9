from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from feedmill.utils.time_utils import from_unix

StoryID = int


class RawTweet(BaseModel):
    text: str
    created_at: str = ""


class NormalizedRecord(BaseModel):
    title: str
    url: Optional[str] = None  # rewritten in place of the short link once resolved
    created: datetime


class Story(BaseModel):
    # field names follow the Hacker News item API
    id: StoryID = 0
    by: str = ""
    score: int = 0
    time: int = 0
    title: str = ""
    url: str = ""
    text: str = ""

    @property
    def created(self) -> datetime:
        return from_unix(self.time)
