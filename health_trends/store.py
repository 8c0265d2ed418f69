import logging
import random
from datetime import datetime, timezone
from typing import List, Optional, Sequence

import sqlalchemy
from databases import Database
from sqlalchemy.dialects import postgresql, sqlite

from .config import ConfigurationError
from .models import EnrichedArticle, TrendPreview, health_trends

logger = logging.getLogger(__name__)

UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "postgres": postgresql.insert,
    "sqlite": sqlite.insert,
}


class TrendStore:
    """Reads and reconciles the ``health_trends`` table.

    Rows are identified by ``link``; writing an article whose link is
    already stored updates that row in place.
    """

    def __init__(self, db: Database):
        self.db = db

    def check_dialect(self) -> None:
        dialect = self.db.url.dialect
        if dialect not in UPSERT_DIALECTS:
            raise ConfigurationError(f"Upsert is not supported for {dialect}")

    def _insert(self):
        self.check_dialect()
        return UPSERT_DIALECTS[self.db.url.dialect](health_trends)

    def _upsert_query(self, article: EnrichedArticle, inserted_at: datetime):
        values = {
            "title": article.title,
            "link": article.link,
            "description": article.description,
            "image_url": article.image_url,
            "category": article.category,
            "short_summary": article.short_summary,
            "is_published": article.is_published,
            "inserted_at": inserted_at,
        }
        stmt = self._insert().values(**values)
        return stmt.on_conflict_do_update(
            index_elements=[health_trends.c.link],
            set_={k: v for k, v in values.items() if k != "link"},
        )

    async def upsert(
        self,
        articles: Sequence[EnrichedArticle],
        inserted_at: Optional[datetime] = None,
    ) -> int:
        inserted_at = inserted_at or datetime.now(tz=timezone.utc)
        async with self.db.transaction():
            for article in articles:
                await self.db.execute(self._upsert_query(article, inserted_at))
        logger.info("Upserted %d articles", len(articles))
        return len(articles)

    async def count(self) -> int:
        query = sqlalchemy.select(sqlalchemy.func.count()).select_from(health_trends)
        return await self.db.fetch_val(query)

    async def prune(self, cap: int) -> int:
        """Delete the oldest rows until at most ``cap`` remain."""
        query = sqlalchemy.select(health_trends.c.id).order_by(
            health_trends.c.inserted_at.asc(), health_trends.c.id.asc()
        )
        rows = await self.db.fetch_all(query)
        excess = len(rows) - cap
        if excess <= 0:
            return 0

        delete_ids = [row["id"] for row in rows[:excess]]
        await self.db.execute(
            health_trends.delete().where(health_trends.c.id.in_(delete_ids))
        )
        logger.info("Deleted %d old articles", len(delete_ids))
        return len(delete_ids)

    async def random_published(
        self, limit: int, rng: Optional[random.Random] = None
    ) -> List[TrendPreview]:
        query = sqlalchemy.select(
            health_trends.c.id,
            health_trends.c.title,
            health_trends.c.description,
            health_trends.c.link,
            health_trends.c.image_url,
        ).where(health_trends.c.is_published.is_(True))
        rows = await self.db.fetch_all(query)
        rng = rng or random.Random()
        picked = rng.sample(list(rows), min(limit, len(rows)))
        return [TrendPreview.from_row(row) for row in picked]
