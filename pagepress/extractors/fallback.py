"""Structural fallback extractor.

Used when the readability-style extractor fails or its output is rejected by
the quality gate.  Content is found by walking a fixed, ordered list of
stages; the first stage whose output qualifies wins, even if a later stage
would have produced more text:

1. content-region selectors (semantic container, known content classes,
   landmarks, ids); the first match whose inner markup is long enough;
2. a copy of ``<body>`` with navigation, sidebars, comments and ads removed;
3. the raw ``<body>`` as a last resort.

Stages are plain data (:class:`Stage`); :data:`_PRODUCERS` maps each kind to
the function that renders its candidate markup.
"""

from __future__ import annotations

import copy
import logging
import re
from collections.abc import Callable
from enum import StrEnum
from typing import NamedTuple

from bs4 import BeautifulSoup, Tag

from pagepress.errors import FallbackExhausted
from pagepress.items import ExtractionCandidate, SourceDocument

logger = logging.getLogger(__name__)

CONTENT_SELECTORS: tuple[str, ...] = (
    "article",
    ".post-content",
    ".article-content",
    ".content",
    ".main-content",
    ".post-body",
    ".entry-content",
    '[role="main"]',
    "main",
    "#content",
    "#main",
)

NOISE_SELECTORS: tuple[str, ...] = (
    "nav",
    "header",
    "footer",
    ".nav",
    ".navigation",
    ".sidebar",
    ".comments",
    ".comment-area",
    ".share-buttons",
    ".related-posts",
    ".breadcrumb",
    ".ads",
    ".advertisement",
    "script",
    "style",
)

TITLE_SELECTORS: tuple[str, ...] = (
    "article h1",
    ".post-title",
    ".entry-title",
    ".post__title",
)

# Site-name suffixes: "Post | Site", "Post — Site", "Post - Site", "Post_Site"
_TITLE_SUFFIX_RE = re.compile(r"\s*[|—_].*$|\s+-\s+.*$", re.DOTALL)


class StageKind(StrEnum):
    SELECTOR     = "selector"
    CLEANED_BODY = "cleaned-body"
    RAW_BODY     = "raw-body"


class Stage(NamedTuple):
    kind: StageKind
    min_length: int     # inner markup must be longer than this
    selector: str = ""  # only for SELECTOR stages


class FallbackResult(NamedTuple):
    html: str
    stage: Stage


def build_stages(selector_min_length: int = 500, cleaned_min_length: int = 1_000) -> tuple[Stage, ...]:
    return (
        *(Stage(StageKind.SELECTOR, selector_min_length, sel) for sel in CONTENT_SELECTORS),
        Stage(StageKind.CLEANED_BODY, cleaned_min_length),
        Stage(StageKind.RAW_BODY, 0),
    )


# ---------------------------------------------------------------------------
# Stage producers
# ---------------------------------------------------------------------------

def _select_region(soup: BeautifulSoup, stage: Stage) -> str | None:
    try:
        el = soup.select_one(stage.selector)
    except Exception as exc:
        logger.debug("CSS selector %r failed: %s", stage.selector, exc)
        return None
    return el.decode_contents() if isinstance(el, Tag) else None


def _cleaned_body(soup: BeautifulSoup, stage: Stage) -> str | None:
    body = soup.body
    if body is None:
        return None
    clone = copy.copy(body)
    for selector in NOISE_SELECTORS:
        for el in clone.select(selector):
            if isinstance(el, Tag) and not el.decomposed:
                el.decompose()
    return clone.decode_contents()


def _raw_body(soup: BeautifulSoup, stage: Stage) -> str | None:
    body = soup.body
    return body.decode_contents() if body is not None else None


_PRODUCERS: dict[StageKind, Callable[[BeautifulSoup, Stage], str | None]] = {
    StageKind.SELECTOR: _select_region,
    StageKind.CLEANED_BODY: _cleaned_body,
    StageKind.RAW_BODY: _raw_body,
}


# ---------------------------------------------------------------------------
# Title chain
# ---------------------------------------------------------------------------

def _text(el: Tag | None) -> str:
    if not isinstance(el, Tag):
        return ""
    return " ".join(el.get_text(separator=" ").split())


def _title_from_h1(soup: BeautifulSoup) -> str:
    for h1 in soup.find_all("h1"):
        text = _text(h1)
        if text:
            return text
    return ""


def _title_from_classes(soup: BeautifulSoup) -> str:
    for selector in TITLE_SELECTORS:
        text = _text(soup.select_one(selector))
        if text:
            return text
    return ""


def _title_from_og(soup: BeautifulSoup) -> str:
    og = soup.find("meta", attrs={"property": "og:title"})
    if isinstance(og, Tag):
        return str(og.get("content") or "").strip()
    return ""


def _title_from_title_tag(soup: BeautifulSoup) -> str:
    return strip_site_suffix(_text(soup.find("title")))


def strip_site_suffix(title: str) -> str:
    """Drop a trailing ``| Site``, ``— Site``, `` - Site`` or ``_Site`` suffix."""
    return _TITLE_SUFFIX_RE.sub("", title.strip()).strip()


TITLE_CHAIN: tuple[tuple[str, Callable[[BeautifulSoup], str]], ...] = (
    ("h1", _title_from_h1),
    ("title-class", _title_from_classes),
    ("og:title", _title_from_og),
    ("title-tag", _title_from_title_tag),
)


# ---------------------------------------------------------------------------
# Extractor
# ---------------------------------------------------------------------------

class StructuralFallbackExtractor:
    """Deterministic selector cascade over a parsed page."""

    def __init__(self, selector_min_length: int = 500, cleaned_min_length: int = 1_000) -> None:
        self.stages = build_stages(selector_min_length, cleaned_min_length)

    def extract_content(self, soup: BeautifulSoup) -> FallbackResult:
        for stage in self.stages:
            html = _PRODUCERS[stage.kind](soup, stage)
            if html is None:
                continue
            if html.strip() and len(html) > stage.min_length:
                logger.debug(
                    "Fallback stage %s%s qualified (%d chars)",
                    stage.kind.value,
                    f" {stage.selector!r}" if stage.selector else "",
                    len(html),
                )
                return FallbackResult(html=html, stage=stage)
            logger.debug(
                "Fallback stage %s%s too short (%d chars, need > %d)",
                stage.kind.value,
                f" {stage.selector!r}" if stage.selector else "",
                len(html),
                stage.min_length,
            )
        raise FallbackExhausted("No content region, cleaned body or raw body found")

    def extract_title(self, soup: BeautifulSoup) -> str:
        for name, producer in TITLE_CHAIN:
            title = producer(soup)
            if title:
                logger.debug("Fallback title from %s: %r", name, title)
                return title
        return ""

    def extract(self, document: SourceDocument) -> ExtractionCandidate:
        soup = BeautifulSoup(document.html or "", "lxml")
        try:
            result = self.extract_content(soup)
        except FallbackExhausted as exc:
            exc.url = document.url
            raise
        logger.info(
            "Structural fallback used %s for %s (%d chars)",
            result.stage.selector or result.stage.kind.value,
            document.url,
            len(result.html),
        )
        return ExtractionCandidate(title=self.extract_title(soup), content_html=result.html)
