"""Lenient RSS/Atom item extraction.

Feeds in the wild are frequently not well-formed XML, so instead of an XML
parser this module scans for ``<item>``/``<entry>`` blocks with regular
expressions and pulls the handful of fields we need out of each block.
Nothing in here raises on malformed input: a block that does not yield a
title, a link and a description is dropped.
"""

import html
import logging
import re
from typing import List, Optional

from .models import Article

logger = logging.getLogger(__name__)

BLOCK_RE = re.compile(r"<(item|entry)\b[^>]*>(.*?)</\1\s*>", re.DOTALL | re.IGNORECASE)

TITLE_RE = re.compile(r"<title\b[^>]*>(.*?)</title\s*>", re.DOTALL | re.IGNORECASE)
LINK_TEXT_RE = re.compile(r"<link\b[^>]*>(.*?)</link\s*>", re.DOTALL | re.IGNORECASE)
LINK_HREF_RE = re.compile(
    r"<link\b[^>]*?\bhref\s*=\s*[\"']([^\"']+)[\"']", re.DOTALL | re.IGNORECASE
)
GUID_RE = re.compile(r"<guid\b[^>]*>(.*?)</guid\s*>", re.DOTALL | re.IGNORECASE)
ID_RE = re.compile(r"<id\b[^>]*>(.*?)</id\s*>", re.DOTALL | re.IGNORECASE)
DESCRIPTION_RE = re.compile(
    r"<description\b[^>]*>(.*?)</description\s*>", re.DOTALL | re.IGNORECASE
)
SUMMARY_RE = re.compile(r"<summary\b[^>]*>(.*?)</summary\s*>", re.DOTALL | re.IGNORECASE)

IMAGE_RES = [
    re.compile(r"<media:content\b[^>]*?\burl\s*=\s*[\"']([^\"']+)[\"']", re.DOTALL | re.IGNORECASE),
    re.compile(r"<enclosure\b[^>]*?\burl\s*=\s*[\"']([^\"']+)[\"']", re.DOTALL | re.IGNORECASE),
    re.compile(r"<img\b[^>]*?\bsrc\s*=\s*[\"']([^\"']+)[\"']", re.DOTALL | re.IGNORECASE),
]

CDATA_RE = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)
TAG_RE = re.compile(r"<[^>]*>")
WHITESPACE_RE = re.compile(r"\s+")


def strip_cdata(text: str) -> str:
    text = CDATA_RE.sub(r"\1", text)
    # Unterminated markers are left behind by truncated feeds.
    return text.replace("<![CDATA[", "").replace("]]>", "")


def clean_text(raw: Optional[str]) -> str:
    if not raw:
        return ""
    text = TAG_RE.sub("", strip_cdata(raw))
    # Entity-encoded markup only becomes a tag after unescaping.
    text = TAG_RE.sub("", html.unescape(text))
    return WHITESPACE_RE.sub(" ", text).strip()


def _first(pattern: re.Pattern, content: str) -> Optional[str]:
    match = pattern.search(content)
    return match.group(1) if match else None


def _extract_link(content: str) -> str:
    for pattern in (LINK_TEXT_RE, LINK_HREF_RE, GUID_RE, ID_RE):
        link = clean_text(_first(pattern, content))
        if link:
            return link
    return ""


def _extract_image(content: str) -> Optional[str]:
    # Inline <img> tags usually sit inside CDATA sections.
    content = strip_cdata(content)
    for pattern in IMAGE_RES:
        url = _first(pattern, content)
        if url and url.strip():
            return url.strip()
    return None


def parse_block(content: str) -> Optional[Article]:
    """Build an article from the inside of one ``<item>``/``<entry>`` block.

    Returns ``None`` when the title, link or description is missing.
    """
    title = clean_text(_first(TITLE_RE, content))
    link = _extract_link(content)
    description = clean_text(_first(DESCRIPTION_RE, content)) or clean_text(
        _first(SUMMARY_RE, content)
    )

    if not (title and link and description):
        return None

    return Article(
        title=title,
        link=link,
        description=description,
        image_url=_extract_image(content),
    )


def parse_feed(text: Optional[str]) -> List[Article]:
    """Return the articles found in a raw feed document, in document order."""
    items: List[Article] = []
    if not text:
        return items

    dropped = 0
    for match in BLOCK_RE.finditer(text):
        article = parse_block(match.group(2))
        if article is None:
            dropped += 1
            continue
        items.append(article)

    if dropped:
        logger.debug("Dropped %d incomplete feed entries", dropped)
    return items
