"""Two-stage disease relevance filter.

A permissive keyword pass narrows the disease feeds down to candidates, and
the model is then asked which of those titles describe a real, ongoing
health event. If that answer cannot be obtained, no disease article is
published for the run.
"""

import logging
import random
import re
from typing import List, Optional, Sequence, Set

from .llm import GeminiClient
from .models import Article

logger = logging.getLogger(__name__)

DISEASE_TERMS = [
    r"covid",
    r"corona",
    r"dengue",
    r"virus",
    r"flu",
    r"infection",
    r"outbreak",
    r"malaria",
    r"nipah",
    r"ebola",
    r"zika",
    r"avian\s+flu",
    r"respiratory",
    r"disease",
    r"public\s+health",
    r"illness",
    r"fever",
    r"epidemic",
    r"pandemic",
    r"vaccine",
    r"variant",
    r"health\s+alert",
    r"health\s+emergency",
    r"who",
    r"cdc",
]

# Plain substring match: "flu" must hit "Influenza" and "virus" must hit
# "Norovirus". Ordinary words such as "whole" also match; verification
# weeds those out.
DISEASE_RE = re.compile("|".join(DISEASE_TERMS), re.IGNORECASE)

VERIFY_PROMPT = """
You are a medical news verifier.
For each title below, return true if it reports a real ongoing disease, outbreak, infection, or health emergency currently affecting people, based on the title content.
Return JSON: [{{"title":"...","is_real":true/false}}]

Titles:
{titles}
"""


def mentions_disease(article: Article) -> bool:
    text = f"{article.title} {article.description}"
    return bool(DISEASE_RE.search(text))


def keyword_candidates(articles: Sequence[Article]) -> List[Article]:
    return [article for article in articles if mentions_disease(article)]


def build_verify_prompt(candidates: Sequence[Article]) -> str:
    titles = "\n".join(f"{i}. {a.title}" for i, a in enumerate(candidates, start=1))
    return VERIFY_PROMPT.format(titles=titles)


def _is_true(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


def verified_titles(items: Sequence) -> Set[str]:
    titles: Set[str] = set()
    for item in items:
        if not isinstance(item, dict):
            logger.warning("Ignoring malformed verification entry: %r", item)
            continue
        title = item.get("title")
        if isinstance(title, str) and _is_true(item.get("is_real")):
            titles.add(title.strip())
    return titles


async def verify_candidates(
    llm: GeminiClient, candidates: Sequence[Article]
) -> List[Article]:
    """Keep the candidates the model confirms as real health events.

    Any failure of the call or of its response drops every candidate.
    """
    if not candidates:
        return []

    try:
        items = await llm.generate_json_array(build_verify_prompt(candidates))
    except Exception as e:
        logger.error("Disease verification failed, excluding all candidates: %s", e)
        return []

    confirmed = verified_titles(items)
    return [a for a in candidates if a.title in confirmed]


def cap_articles(
    articles: Sequence[Article], limit: int, rng: Optional[random.Random] = None
) -> List[Article]:
    rng = rng or random.Random()
    if len(articles) <= limit:
        picked = list(articles)
        rng.shuffle(picked)
        return picked
    return rng.sample(list(articles), limit)


async def filter_disease_articles(
    llm: GeminiClient,
    articles: Sequence[Article],
    limit: int = 3,
    rng: Optional[random.Random] = None,
) -> List[Article]:
    candidates = keyword_candidates(articles)
    logger.info(
        "%d of %d disease feed articles matched keywords", len(candidates), len(articles)
    )
    verified = await verify_candidates(llm, candidates)
    capped = cap_articles(verified, limit, rng)
    logger.info("Verified %d real disease-related articles", len(capped))
    return capped
