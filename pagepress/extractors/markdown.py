"""Markdown rendering of a normalized article.

Headings keep the anchor ids assigned by the structure annotator, written as
``{#h2-0}`` attribute blocks (understood by pandoc and most e-book
toolchains), so the contents list can link to them.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from bs4 import BeautifulSoup, Tag
from markdownify import markdownify  # type: ignore[import-untyped]

from pagepress.extractors.structure import HEADING_TAGS

logger = logging.getLogger(__name__)

_BLANK_RUN_RE = re.compile(r"\n{3,}")
_LINE_END_SPACE_RE = re.compile(r"[ \t]+$", re.MULTILINE)


def _code_language(pre: Tag) -> str:
    """``language-xxx`` class on ``<pre>`` or its ``<code>`` child."""
    code = pre.find("code")
    for el in (pre, code):
        if not isinstance(el, Tag):
            continue
        for cls in el.get("class") or []:
            if cls.startswith("language-"):
                return cls.removeprefix("language-")
    return ""


def _tag_heading_anchors(soup: BeautifulSoup) -> int:
    tagged = 0
    for heading in soup.find_all(list(HEADING_TAGS)):
        anchor_id = heading.get("id") if isinstance(heading, Tag) else None
        if anchor_id:
            heading.append(f" {{#{anchor_id}}}")
            tagged += 1
    return tagged


def html_to_markdown(html: str) -> str:
    """Convert annotated article *html* to Markdown, keeping heading anchors."""
    if not html or not html.strip():
        return ""

    soup = BeautifulSoup(html, "lxml")
    tagged = _tag_heading_anchors(soup)
    root = soup.body or soup
    md = markdownify(
        root.decode_contents(),
        heading_style="ATX",
        bullets="-",
        escape_misc=False,
        code_language_callback=_code_language,
    )
    logger.debug("Rendered %d chars of markdown (%d anchored headings)", len(md), tagged)

    md = _LINE_END_SPACE_RE.sub("", md)
    return _BLANK_RUN_RE.sub("\n\n", md).strip()


def format_markdown_article(
    title: str,
    author: str | None,
    published_at: str | None,
    summary: str | None,
    content_markdown: str,
    contents: Sequence[tuple[int, str, str]] = (),
) -> str:
    """Assemble the Markdown document: title, byline, excerpt, contents, body.

    *contents* holds ``(level, title, anchor_id)`` triples; each becomes a
    link to its heading, indented relative to the shallowest level.
    """
    lines: list[str] = [f"# {title or 'Untitled Article'}", ""]

    byline = [
        f"**{label}:** {value}"
        for label, value in (("Author", author), ("Published", published_at))
        if value
    ]
    if byline:
        lines += [*byline, ""]

    if summary:
        lines += [f"> {summary}", ""]

    if contents:
        top = min(level for level, _, _ in contents)
        lines += ["**Contents**", ""]
        lines += [
            f"{'  ' * (level - top)}- [{heading}](#{anchor_id})"
            for level, heading, anchor_id in contents
        ]
        lines.append("")

    lines += ["---", "", content_markdown]
    return "\n".join(lines)
