import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from apscheduler.schedulers.background import BackgroundScheduler

from feedmill.errors import FeedError
from feedmill.storage.cache import LookupCache
from feedmill.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


class FeedRefresher:
    """
    Keeps one feed document in the feed cache.

    refresh() is the background path: failures are logged and whatever is
    cached stays put. serve() is the request path: a hit costs no I/O, a miss
    builds the feed inline and lets errors reach the caller. Nothing stops
    both paths from building the same feed at once; the last write wins.
    """

    def __init__(self, name: str, produce: Callable[[], str], cache: LookupCache,
                 cache_key: Optional[str] = None):
        self.name = name
        self.produce = produce
        self.cache = cache
        self.cache_key = cache_key or f"feed::{name}"
        self.last_refreshed: Optional[datetime] = None

    def _fill(self) -> str:
        document = self.produce()
        self.cache.set(self.cache_key, document, ttl=None)
        self.last_refreshed = utc_now()
        return document

    def refresh(self) -> bool:
        try:
            self._fill()
        except FeedError as e:
            logger.error("Refresh of %s failed, keeping cached feed: %s", self.name, e)
            return False
        except Exception:
            logger.exception("Refresh of %s crashed, keeping cached feed", self.name)
            return False
        logger.info("Refreshed %s", self.name)
        return True

    def serve(self) -> str:
        document = self.cache.get(self.cache_key)
        if document is not None:
            return document
        logger.info("%s not cached yet, building inline", self.name)
        built = self._fill()
        document = self.cache.get(self.cache_key)
        return document if document is not None else built


class RefreshScheduler:
    """Warms every feed once at startup, then refreshes them on a fixed interval."""

    def __init__(self, refreshers: Iterable[FeedRefresher], interval_seconds: float,
                 scheduler: Optional[BackgroundScheduler] = None):
        self.refreshers: List[FeedRefresher] = list(refreshers)
        self.interval_seconds = interval_seconds
        # avoid piling up runs of the same job
        self.scheduler = scheduler or BackgroundScheduler(
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": 30,
            }
        )

    def start(self) -> None:
        for refresher in self.refreshers:
            refresher.refresh()
        for refresher in self.refreshers:
            self.scheduler.add_job(
                refresher.refresh, "interval", seconds=self.interval_seconds, id=f"refresh_{refresher.name}"
            )
        self.scheduler.start()

    def shutdown(self) -> None:
        self.scheduler.shutdown(wait=False)
