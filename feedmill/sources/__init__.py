from .hackernews import HackerNewsAPI, HackerNewsSource
from .twitter import TwitterTimelineSource

from .base import BaseSource

__all__ = ["HackerNewsAPI", "HackerNewsSource", "TwitterTimelineSource", "BaseSource"]
