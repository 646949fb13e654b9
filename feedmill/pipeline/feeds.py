import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from feedmill.builder.atom import FeedInfo, build_feed, build_story_feed
from feedmill.pipeline.enrichers import THREADER_URL, StoryFetcher, UrlResolver, unroll_twitter_thread
from feedmill.pipeline.normalizer import normalize_tweets
from feedmill.pipeline.pool import EnrichmentPool
from feedmill.sources.hackernews import HackerNewsSource
from feedmill.sources.twitter import TwitterTimelineSource
from feedmill.storage.cache import LookupCache
from feedmill.storage.models import NormalizedRecord, Story
from feedmill.utils.time_utils import Deadline, utc_now

logger = logging.getLogger(__name__)


class _Feed(ABC):
    def __init__(self, info: FeedInfo, pool: EnrichmentPool, created_override: Optional[datetime] = None):
        self.info = info
        self.pool = pool
        # fixed feed timestamp for tests
        self.created_override = created_override

    def created(self) -> datetime:
        return self.created_override or utc_now()

    @abstractmethod
    def produce(self) -> str:
        pass


class HackerNewsFeed(_Feed):
    """Best stories: id list -> cached story lookups -> Atom."""

    def __init__(self, source: HackerNewsSource, story_cache: LookupCache, pool: EnrichmentPool,
                 info: FeedInfo, threader_url: str = THREADER_URL,
                 created_override: Optional[datetime] = None):
        super().__init__(info, pool, created_override)
        self.source = source
        self.story_cache = story_cache
        self.fetcher = StoryFetcher(source, story_cache)
        self.threader_url = threader_url

    def collect(self) -> List[Story]:
        purged = self.story_cache.purge_expired()
        if purged:
            logger.debug("Dropped %d expired stories", purged)
        ids = self.source.fetch(Deadline(self.pool.timeout))
        stories = self.pool.run(ids, self.fetcher, key=lambda s: s.time)
        return unroll_twitter_thread(stories, self.threader_url)

    def produce(self) -> str:
        stories = self.collect()
        logger.info("Built Hacker News feed with %d stories", len(stories))
        return build_story_feed(stories, self.info, self.created())


class TimelineFeed(_Feed):
    """Tweets: normalize -> resolve every link -> Atom."""

    def __init__(self, source: TwitterTimelineSource, resolver: UrlResolver, pool: EnrichmentPool,
                 info: FeedInfo, created_override: Optional[datetime] = None):
        super().__init__(info, pool, created_override)
        self.source = source
        self.resolver = resolver

    def collect(self) -> List[NormalizedRecord]:
        raws = self.source.fetch(Deadline(self.pool.timeout))
        records = normalize_tweets(raws)
        return self.pool.run(records, self.resolver, key=lambda r: r.created)

    def produce(self) -> str:
        records = self.collect()
        logger.info("Built @%s feed with %d items", self.source.screen_name, len(records))
        return build_feed(records, self.info, self.created())
