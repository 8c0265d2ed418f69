import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Tuple

import httpx

from .models import Article
from .parser import parse_feed

logger = logging.getLogger(__name__)


async def fetch_feed(client: httpx.AsyncClient, feed_url: str) -> Optional[str]:
    try:
        resp = await client.get(feed_url)
        resp.raise_for_status()
    except Exception as e:
        logger.exception("Failed to fetch feed %s: %s", feed_url, e)
        return None
    return resp.text


async def fetch_feeds(
    client: httpx.AsyncClient, feed_urls: Sequence[str]
) -> Dict[str, str]:
    """Fetch every feed concurrently; sources that fail are left out."""
    unique_urls = list(dict.fromkeys(feed_urls))
    bodies = await asyncio.gather(*(fetch_feed(client, url) for url in unique_urls))

    documents: Dict[str, str] = {}
    for url, body in zip(unique_urls, bodies):
        if body is not None:
            documents[url] = body

    logger.info("Fetched %d of %d feeds", len(documents), len(unique_urls))
    return documents


def collect_articles(documents: Dict[str, str]) -> List[Article]:
    articles: List[Article] = []
    for url, text in documents.items():
        parsed = parse_feed(text)
        logger.debug("Parsed %d articles from %s", len(parsed), url)
        articles.extend(parsed)
    return articles


async def fetch_articles(
    client: httpx.AsyncClient,
    lifestyle_feeds: Sequence[str],
    disease_feeds: Sequence[str],
) -> Tuple[List[Article], List[Article]]:
    lifestyle_docs, disease_docs = await asyncio.gather(
        fetch_feeds(client, lifestyle_feeds),
        fetch_feeds(client, disease_feeds),
    )
    lifestyle = collect_articles(lifestyle_docs)
    disease = collect_articles(disease_docs)
    logger.info(
        "Parsed %d lifestyle and %d disease articles", len(lifestyle), len(disease)
    )
    return lifestyle, disease
