import logging
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

from .config import FALLBACK_CATEGORY, FALLBACK_SUMMARY, VALID_CATEGORIES
from .llm import GeminiClient
from .models import Article, EnrichedArticle

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = """
You are a health journalist AI. For each article, write a 2-line short summary and pick a category from:
{categories}.
Return JSON: [{{"title":"...","category":"...","summary":"..."}}]

Articles:
{articles}
"""

_CATEGORY_LOOKUP = {c.casefold(): c for c in VALID_CATEGORIES}


class Annotation(NamedTuple):
    category: str
    summary: str


def build_summary_prompt(articles: Sequence[Article]) -> str:
    listing = "\n".join(
        f"{i}. {a.title} - {a.description}" for i, a in enumerate(articles, start=1)
    )
    return SUMMARY_PROMPT.format(
        categories=", ".join(VALID_CATEGORIES), articles=listing
    )


def normalize_category(value: Any) -> str:
    if isinstance(value, str):
        return _CATEGORY_LOOKUP.get(value.strip().casefold(), FALLBACK_CATEGORY)
    return FALLBACK_CATEGORY


def parse_annotation(item: Any) -> Optional[Annotation]:
    """Read one entry of the model's array, or ``None`` if it is unusable."""
    if not isinstance(item, dict) or not isinstance(item.get("title"), str):
        return None

    summary = item.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        summary = FALLBACK_SUMMARY
    return Annotation(normalize_category(item.get("category")), summary.strip())


def annotations_by_title(items: Sequence[Any]) -> Dict[str, Annotation]:
    lookup: Dict[str, Annotation] = {}
    skipped = 0
    for item in items:
        annotation = parse_annotation(item)
        if annotation is None:
            skipped += 1
            continue
        lookup[item["title"].strip()] = annotation

    if skipped:
        logger.warning("Skipped %d malformed summary entries", skipped)
    return lookup


def enrich(article: Article, annotation: Optional[Annotation]) -> EnrichedArticle:
    annotation = annotation or Annotation(FALLBACK_CATEGORY, FALLBACK_SUMMARY)
    return EnrichedArticle(
        **article.model_dump(),
        category=annotation.category,
        short_summary=annotation.summary,
        is_published=True,
    )


async def summarize_articles(
    llm: GeminiClient, articles: Sequence[Article]
) -> List[EnrichedArticle]:
    """Categorize and summarize the whole batch with a single model call.

    Articles the model leaves out, and every article when the call fails,
    get the fallback category and summary.
    """
    lookup: Dict[str, Annotation] = {}
    if articles:
        try:
            items = await llm.generate_json_array(build_summary_prompt(articles))
            lookup = annotations_by_title(items)
        except Exception as e:
            logger.error("Summarization failed, using fallback metadata: %s", e)

    enriched = [enrich(a, lookup.get(a.title)) for a in articles]
    missing = sum(1 for a in articles if a.title not in lookup)
    if missing:
        logger.info("%d of %d articles use fallback metadata", missing, len(articles))
    return enriched
