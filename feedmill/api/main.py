import asyncio
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import PlainTextResponse

from feedmill.builder.atom import ATOM_CONTENT_TYPE, FeedInfo
from feedmill.config import Settings
from feedmill.errors import FeedError
from feedmill.pipeline.enrichers import UrlResolver
from feedmill.pipeline.feeds import HackerNewsFeed, TimelineFeed
from feedmill.pipeline.pool import EnrichmentPool
from feedmill.scheduler.refresher import FeedRefresher, RefreshScheduler
from feedmill.sources import HackerNewsSource, TwitterTimelineSource
from feedmill.sources.http import build_session
from feedmill.storage.cache import LookupCache
from feedmill.utils.log import configure_logging

logger = logging.getLogger(__name__)

HN_FEED_URL = "https://news.ycombinator.com/best"


def build_refreshers(settings: Settings, feed_cache: Optional[LookupCache] = None) -> List[FeedRefresher]:
    """Wire sources, pools and caches for every configured feed."""
    if feed_cache is None:
        feed_cache = LookupCache()
    session = build_session(pool_maxsize=max(settings.story_workers, settings.url_workers))

    story_cache = LookupCache(default_ttl=settings.story_cache_hours * 3600)
    hn = HackerNewsFeed(
        source=HackerNewsSource(session=session),
        story_cache=story_cache,
        pool=EnrichmentPool(settings.story_workers, settings.batch_timeout),
        info=FeedInfo(
            title="Hacker News",
            link=HN_FEED_URL,
            description="Hacker News Top Stories",
            author_name=settings.feed_author,
            author_email=settings.feed_author_email,
        ),
    )
    refreshers = [FeedRefresher("hackernews", hn.produce, feed_cache)]

    if settings.twitter_token:
        timeline = TimelineFeed(
            source=TwitterTimelineSource(settings.twitter_token, settings.twitter_screen_name, session=session),
            resolver=UrlResolver(session),
            pool=EnrichmentPool(settings.url_workers, settings.batch_timeout),
            info=FeedInfo(
                title=settings.twitter_feed_title,
                link=settings.feed_url,
                description=f"{settings.twitter_feed_title} Tweets",
                author_name=settings.feed_author,
                author_email=settings.feed_author_email,
            ),
        )
        refreshers.append(FeedRefresher(settings.twitter_screen_name.lower(), timeline.produce, feed_cache))
    else:
        logger.info("TWITTER_BEARER_TOKEN not set, timeline feed disabled")

    return refreshers


def create_app(settings: Optional[Settings] = None, refreshers: Optional[List[FeedRefresher]] = None,
               scheduler: Optional[RefreshScheduler] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    if refreshers is None:
        refreshers = build_refreshers(settings)
    scheduler = scheduler or RefreshScheduler(refreshers, settings.refresh_interval_minutes * 60)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # first refresh runs before the server accepts connections
        await run_in_threadpool(scheduler.start)
        yield
        scheduler.shutdown()

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    app.state.refreshers = refreshers

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=512)

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "feeds": {
                r.name: r.last_refreshed.isoformat() if r.last_refreshed else None for r in refreshers
            },
        }

    for refresher in refreshers:
        app.add_api_route(f"/{refresher.name}", _feed_endpoint(refresher, settings.request_timeout),
                          methods=["GET"], name=refresher.name)

    return app


def _feed_endpoint(refresher: FeedRefresher, request_timeout: float):
    async def serve_feed():
        try:
            # executor future so the wait can be abandoned while the fill keeps running
            loop = asyncio.get_running_loop()
            document = await asyncio.wait_for(loop.run_in_executor(None, refresher.serve), timeout=request_timeout)
        except asyncio.TimeoutError:
            return PlainTextResponse("Timeout!\n", status_code=503)
        except FeedError as e:
            raise HTTPException(500, str(e))
        return Response(content=document, media_type=ATOM_CONTENT_TYPE)

    return serve_feed


if __name__ == "__main__":
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)
