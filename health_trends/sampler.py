import logging
import random
from itertools import cycle, islice
from typing import Dict, Iterable, List, Optional

from .models import Article

logger = logging.getLogger(__name__)


def dedupe_by_link(articles: Iterable[Article]) -> List[Article]:
    """Drop repeated links; the last article seen for a link wins."""
    by_link: Dict[str, Article] = {}
    for article in articles:
        by_link[article.link] = article
    return list(by_link.values())


def fill_quota(
    articles: List[Article],
    quota: int,
    pad: bool = True,
    rng: Optional[random.Random] = None,
) -> List[Article]:
    """Shuffle ``articles`` and cut or pad them to exactly ``quota`` entries.

    Padding repeats the shuffled pool from the start, so the result holds
    duplicates whenever the pool is short. With ``pad=False`` a short pool is
    returned as is. An empty pool cannot be padded and stays empty.
    """
    rng = rng or random.Random()
    pool = list(articles)
    rng.shuffle(pool)

    if len(pool) >= quota:
        return pool[:quota]

    if not pad or not pool:
        logger.warning("Only %d articles available for a quota of %d", len(pool), quota)
        return pool

    logger.warning("Only %d found, repeating entries to reach %d", len(pool), quota)
    return list(islice(cycle(pool), quota))


def build_batch(
    lifestyle: Iterable[Article],
    disease: Iterable[Article],
    quota: int = 30,
    pad: bool = True,
    rng: Optional[random.Random] = None,
) -> List[Article]:
    merged = dedupe_by_link([*lifestyle, *disease])
    batch = fill_quota(merged, quota, pad=pad, rng=rng)
    logger.info("Total articles prepared: %d", len(batch))
    return batch
