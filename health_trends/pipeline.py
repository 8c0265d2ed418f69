import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Optional

import httpx
from databases import Database
from sqlalchemy import create_engine

from . import config
from .fetcher import fetch_articles
from .llm import GeminiClient
from .models import PipelineResult, metadata
from .relevance import filter_disease_articles
from .sampler import build_batch
from .store import TrendStore
from .summarizer import summarize_articles

logger = logging.getLogger(__name__)


def build_http_client(settings: config.Settings, **kwargs) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={"User-Agent": settings.USER_AGENT},
        timeout=settings.HTTP_TIMEOUT,
        follow_redirects=True,
        **kwargs,
    )


async def run_pipeline(
    settings: config.Settings,
    db: Database,
    client: httpx.AsyncClient,
    rng: Optional[random.Random] = None,
) -> PipelineResult:
    """Run one ingestion: fetch, filter, sample, summarize, store, prune.

    Feed and model failures degrade the run. Missing configuration and store
    errors propagate.
    """
    settings.require_runtime()
    store = TrendStore(db)
    store.check_dialect()
    rng = rng or random.Random()
    llm = GeminiClient(
        client,
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        base_url=settings.GEMINI_BASE_URL,
    )

    logger.info("Fetching health and disease feeds")
    lifestyle, disease_pool = await fetch_articles(
        client, settings.LIFESTYLE_FEEDS, settings.DISEASE_FEEDS
    )

    disease = await filter_disease_articles(
        llm, disease_pool, limit=settings.MAX_DISEASE_ARTICLES, rng=rng
    )
    batch = build_batch(
        lifestyle,
        disease,
        quota=settings.MAX_ARTICLES,
        pad=settings.PAD_TO_QUOTA,
        rng=rng,
    )
    enriched = await summarize_articles(llm, batch)

    written = await store.upsert(enriched, inserted_at=datetime.now(tz=timezone.utc))
    await store.prune(settings.RETENTION_CAP)
    logger.info("health_trends holds %d rows", await store.count())

    disease_links = {a.link for a in disease}
    published_disease = len({a.link for a in batch} & disease_links)
    result = PipelineResult(written=written, disease_verified=published_disease)
    logger.info(result.message)
    return result


async def main():
    settings = config.Settings()  # type: ignore
    logging.basicConfig(level=settings.LOG_LEVEL)

    db = Database(settings.DB_URL)
    await db.connect()

    engine = create_engine(settings.DB_URL)
    metadata.create_all(engine)

    try:
        async with build_http_client(settings) as client:
            await run_pipeline(settings, db, client)
    finally:
        await db.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
