"""Author, publish-date and excerpt extraction.

Each field is an ordered fallback chain of CSS selectors; the first element
yielding a non-empty value wins.

    author:  meta[name=author] -> [rel=author] -> byline / author classes
    date:    article:published_time -> meta[name=date] -> <time datetime>
             -> date classes
    excerpt: first paragraph -> full text, truncated
"""

from __future__ import annotations

import logging
import re
from typing import Any

import dateparser
from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

AUTHOR_SELECTORS: tuple[str, ...] = (
    'meta[name="author"]',
    '[rel="author"]',
    ".author",
    ".byline",
    ".post-author",
    ".entry-author",
)

DATE_SELECTORS: tuple[str, ...] = (
    'meta[property="article:published_time"]',
    'meta[name="date"]',
    "time[datetime]",
    ".post-date",
    ".entry-date",
    ".publish-date",
    ".date",
)

ELLIPSIS = "..."

_WHITESPACE_RE = re.compile(r"\s+")


def _safe_str(val: Any, default: str = "") -> str:
    """Safely convert a BeautifulSoup attribute value (str | list | None) to str."""
    if val is None:
        return default
    if isinstance(val, list):
        return " ".join(str(v) for v in val)
    return str(val)


def _element_value(el: Tag) -> str:
    """``content`` attribute, then ``datetime``, then visible text."""
    for attr in ("content", "datetime"):
        value = _safe_str(el.get(attr)).strip()
        if value:
            return value
    return _WHITESPACE_RE.sub(" ", el.get_text(separator=" ")).strip()


def _first_match(soup: BeautifulSoup, selectors: tuple[str, ...]) -> str:
    for selector in selectors:
        el = soup.select_one(selector)
        if el is None or not isinstance(el, Tag):
            continue
        value = _element_value(el)
        if value:
            logger.debug("Metadata matched %r", selector)
            return value
    return ""


def truncate(text: str, limit: int = 200) -> str:
    text = text.strip()
    if len(text) > limit:
        return text[:limit] + ELLIPSIS
    return text


def parse_date(raw: str | None) -> str | None:
    """Parse a date string to ISO 8601.

    Returns None on failure or when the year falls outside 1990-2099
    (catches epoch defaults like 1970-01-01 and far-future typos).
    """
    if not raw:
        return None
    raw = _WHITESPACE_RE.sub(" ", raw.strip())
    try:
        parsed = dateparser.parse(
            raw,
            settings={
                "RETURN_AS_TIMEZONE_AWARE": True,
                "PREFER_DAY_OF_MONTH": "first",
                "PREFER_LOCALE_DATE_ORDER": False,
            },
        )
    except Exception as exc:
        logger.debug("Date parse failed for %r: %s", raw, exc)
        return None
    if parsed is None or not (1990 <= parsed.year <= 2099):
        return None
    return parsed.isoformat()


class MetadataExtractor:
    """Byline, date and excerpt lookups over a parsed document."""

    def __init__(self, excerpt_length: int = 200) -> None:
        self._excerpt_length = excerpt_length

    def author(self, soup: BeautifulSoup) -> str:
        return _first_match(soup, AUTHOR_SELECTORS)

    def publish_date(self, soup: BeautifulSoup) -> str:
        return _first_match(soup, DATE_SELECTORS)

    def excerpt(self, soup: BeautifulSoup) -> str:
        first_p = soup.find("p")
        if isinstance(first_p, Tag):
            text = _WHITESPACE_RE.sub(" ", first_p.get_text(separator=" ")).strip()
            if text:
                return truncate(text, self._excerpt_length)
        text = _WHITESPACE_RE.sub(" ", soup.get_text(separator=" ")).strip()
        return truncate(text, self._excerpt_length)
