"""Data model: source documents, extraction candidates and the normalized article."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Strategy(StrEnum):
    USE_PRIMARY_EXTRACTOR = "use-primary-extractor"
    USE_HEADLESS_RENDER   = "use-headless-render"


class ExtractionMethod(StrEnum):
    PRIMARY                 = "primary"
    FALLBACK_STRUCTURAL     = "fallback-structural"
    HEADLESS_RENDER         = "headless-render"
    HEADLESS_RENDER_FALLBACK = "headless-render+fallback"

    @property
    def uses_renderer(self) -> bool:
        return self in (ExtractionMethod.HEADLESS_RENDER, ExtractionMethod.HEADLESS_RENDER_FALLBACK)

    @property
    def is_fallback(self) -> bool:
        return self in (
            ExtractionMethod.FALLBACK_STRUCTURAL,
            ExtractionMethod.HEADLESS_RENDER_FALLBACK,
        )


# ---------------------------------------------------------------------------
# Pipeline-internal values
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SourceDocument:
    """Raw markup of a fetched or rendered page."""
    html: str
    url: str


@dataclass(frozen=True)
class ExtractionCandidate:
    """Main-content guess produced by the primary or fallback extractor."""
    title: str
    content_html: str
    byline: str = ""
    published_time: str = ""
    excerpt: str = ""

    @property
    def length(self) -> int:
        return len(self.content_html)


# ---------------------------------------------------------------------------
# Output schema (camelCase on the wire)
# ---------------------------------------------------------------------------

class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TocEntry(_WireModel):
    level: int = Field(ge=1, le=6)
    title: str
    anchor_id: str = Field(alias="id")


class ImageRef(_WireModel):
    id: str
    rewritten_src: str
    original_src: str


class NormalizedArticle(_WireModel):
    """Canonical output record handed to the packaging step."""

    title: str = ""
    content: str
    author: str = ""
    publish_date: str = ""
    publish_date_iso: str | None = None
    excerpt: str = ""
    url: str
    extracted_at: str
    extraction_method: ExtractionMethod
    content_length: int
    toc_structure: list[TocEntry] = Field(default_factory=list)
    images: list[ImageRef] = Field(default_factory=list)

    @field_validator("title", "author", "publish_date", "excerpt", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v or ""

    @model_validator(mode="after")
    def check_content_length(self) -> NormalizedArticle:
        if self.content_length != len(self.content):
            raise ValueError(
                f"content_length={self.content_length} does not match "
                f"len(content)={len(self.content)}",
            )
        return self

    def to_dict(self) -> dict[str, Any]:
        """Return the camelCase record consumed by the packaging collaborator."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)

    def to_markdown(self) -> str:
        """Render the article as a Markdown document with a metadata header."""
        from pagepress.extractors.markdown import format_markdown_article, html_to_markdown
        return format_markdown_article(
            title=self.title,
            author=self.author or None,
            published_at=self.publish_date_iso or self.publish_date or None,
            summary=self.excerpt or None,
            content_markdown=html_to_markdown(self.content),
            contents=[(e.level, e.title, e.anchor_id) for e in self.toc_structure],
        )
