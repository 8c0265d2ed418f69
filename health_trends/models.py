from typing import Optional

from pydantic import BaseModel
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)

metadata = MetaData()

health_trends = Table(
    "health_trends",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("title", Text, nullable=False),
    Column("link", String(1000), unique=True, nullable=False),
    Column("description", Text, nullable=False),
    Column("image_url", String(1000)),
    Column("category", String(64)),
    Column("short_summary", Text),
    Column("is_published", Boolean, default=True),
    Column("inserted_at", DateTime(timezone=True)),
)


class Article(BaseModel):
    title: str
    link: str
    description: str
    image_url: Optional[str] = None


class EnrichedArticle(Article):
    category: str
    short_summary: str
    is_published: bool = True


class TrendPreview(BaseModel):
    """Row shape read by the blog listing and preview views."""

    id: int
    title: str
    description: str
    link: str
    image_url: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "TrendPreview":
        return cls(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            link=row["link"],
            image_url=row["image_url"],
        )


class PipelineResult(BaseModel):
    written: int
    disease_verified: int

    @property
    def message(self) -> str:
        return (
            f"Scraping complete. {self.written} new articles "
            f"(incl. {self.disease_verified} verified disease-related)."
        )
