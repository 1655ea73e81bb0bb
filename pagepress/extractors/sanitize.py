"""HTML fragment sanitizer.

Removes a fixed denylist of elements and attributes and re-serializes the
fragment through BeautifulSoup/lxml, so the output is well-formed markup that
can be embedded verbatim in a larger document.  The transformation is a
fixed point: sanitizing already-sanitized markup returns it unchanged.
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup, Comment, Tag

from pagepress.errors import SanitizationError

logger = logging.getLogger(__name__)

FORBIDDEN_TAGS: tuple[str, ...] = ("script", "style", "iframe", "object", "embed")

# Page-chrome elements; only stripped from structural-fallback content,
# where they were not already filtered by the primary extractor.
LAYOUT_TAGS: tuple[str, ...] = ("nav", "header", "footer")

_URL_ATTRS: frozenset[str] = frozenset({"href", "src", "action", "formaction", "xlink:href"})

# Lazy-loading attributes whose value is promoted to ``src`` when ``src`` is empty
_LAZY_SRC_ATTRS: tuple[str, ...] = ("data-src", "data-lazy-src", "data-original")

_SCRIPT_URL_RE = re.compile(r"^\s*(?:javascript|vbscript):", re.IGNORECASE)
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x20]+")


def is_forbidden_attr(name: str) -> bool:
    """Return True for inline event handlers, inline style and data attributes."""
    lower = name.lower()
    return lower.startswith("on") or lower == "style" or lower.startswith("data-")


def _promote_lazy_src(img: Tag) -> None:
    if str(img.get("src") or "").strip():
        return
    for attr in _LAZY_SRC_ATTRS:
        value = str(img.get(attr) or "").strip()
        if value:
            img["src"] = value
            return


def _is_script_url(value: str) -> bool:
    return bool(_SCRIPT_URL_RE.match(_CONTROL_CHARS_RE.sub("", value)))


def sanitize_html(html: str, *, strip_layout: bool = False) -> str:
    """Return a sanitized copy of the HTML fragment *html*.

    Args:
        html:         Markup to clean (fragment or full document; only the
                      body's contents are returned).
        strip_layout: Also drop ``<nav>``, ``<header>`` and ``<footer>``.

    Raises:
        SanitizationError: If *html* is not a string or cannot be parsed.
    """
    if not isinstance(html, str):
        raise SanitizationError(f"Expected markup string, got {type(html).__name__}")
    if not html.strip():
        return ""

    try:
        soup = BeautifulSoup(html, "lxml")
    except Exception as exc:
        raise SanitizationError(f"Could not parse markup: {exc}") from exc

    root = soup.body
    if root is None:
        return ""

    forbidden = FORBIDDEN_TAGS + LAYOUT_TAGS if strip_layout else FORBIDDEN_TAGS
    removed = 0
    for el in root.find_all(list(forbidden)):
        if isinstance(el, Tag) and not el.decomposed:
            el.decompose()
            removed += 1

    for comment in root.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    for img in root.find_all("img"):
        if isinstance(img, Tag):
            _promote_lazy_src(img)

    for el in root.find_all(True):
        if not isinstance(el, Tag):
            continue
        for attr in list(el.attrs):
            if is_forbidden_attr(attr):
                del el[attr]
            elif attr.lower() in _URL_ATTRS and _is_script_url(str(el.get(attr) or "")):
                del el[attr]

    cleaned = root.decode_contents().strip()
    logger.debug(
        "Sanitized fragment: %d -> %d chars, %d elements removed",
        len(html), len(cleaned), removed,
    )
    return cleaned
