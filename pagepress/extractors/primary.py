"""Primary (readability-style) content extractors.

Both implementations satisfy the single-method :class:`PrimaryExtractor`
protocol so the orchestrator can be tested with deterministic fakes:

* :class:`ReadabilityExtractor`: readability-lxml (Mozilla Readability)
* :class:`TrafilaturaExtractor`: trafilatura, which also reports byline,
  date and description
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from pagepress.errors import ExtractionFailure
from pagepress.items import ExtractionCandidate, SourceDocument

logger = logging.getLogger(__name__)


@runtime_checkable
class PrimaryExtractor(Protocol):
    """Turns a source document into a main-content candidate."""

    name: str

    def extract(self, document: SourceDocument) -> ExtractionCandidate:
        """Return a candidate, or raise :class:`ExtractionFailure`."""
        ...


class ReadabilityExtractor:
    name = "readability"

    def extract(self, document: SourceDocument) -> ExtractionCandidate:
        try:
            from readability import Document  # type: ignore[import-untyped]

            doc = Document(document.html, url=document.url or None)
            content = doc.summary(html_partial=True)
            title = doc.short_title() or ""
        except ImportError as exc:
            raise ExtractionFailure(
                "readability-lxml is not installed: pip install readability-lxml",
                url=document.url,
            ) from exc
        except Exception as exc:
            raise ExtractionFailure(
                f"readability failed for {document.url}: {exc}", url=document.url,
            ) from exc

        if not content or not content.strip():
            raise ExtractionFailure(
                f"readability found no content for {document.url}", url=document.url,
            )
        logger.debug("readability extracted %d chars from %s", len(content), document.url)
        return ExtractionCandidate(title=title.strip(), content_html=content)


class TrafilaturaExtractor:
    name = "trafilatura"

    def extract(self, document: SourceDocument) -> ExtractionCandidate:
        try:
            import trafilatura  # type: ignore[import-untyped]

            content = trafilatura.extract(
                document.html,
                include_links=True,
                include_images=True,
                include_tables=True,
                output_format="html",
                url=document.url or None,
                favor_recall=True,
            )
            meta = trafilatura.extract_metadata(document.html, default_url=document.url or None)
        except ImportError as exc:
            raise ExtractionFailure(
                "trafilatura is not installed: pip install trafilatura", url=document.url,
            ) from exc
        except Exception as exc:
            raise ExtractionFailure(
                f"trafilatura failed for {document.url}: {exc}", url=document.url,
            ) from exc

        if not content or not content.strip():
            raise ExtractionFailure(
                f"trafilatura found no content for {document.url}", url=document.url,
            )
        logger.debug("trafilatura extracted %d chars from %s", len(content), document.url)
        return ExtractionCandidate(
            title=str(getattr(meta, "title", "") or "").strip(),
            content_html=content,
            byline=str(getattr(meta, "author", "") or "").strip(),
            published_time=str(getattr(meta, "date", "") or "").strip(),
            excerpt=str(getattr(meta, "description", "") or "").strip(),
        )


def build_primary_extractor(name: str) -> PrimaryExtractor:
    if name == "readability":
        return ReadabilityExtractor()
    if name == "trafilatura":
        return TrafilaturaExtractor()
    raise ValueError(f"Unknown primary extractor {name!r}; expected 'readability' or 'trafilatura'")
