"""Extraction orchestrator.

Sequences strategy selection, source acquisition (plain fetch or headless
render), primary extraction, the quality gate, the structural fallback and
final assembly into a :class:`~pagepress.items.NormalizedArticle`.

State machine (over strategies, not time)::

    Start -> StrategySelected -> PrimaryAttempted
        -> QualityGatePassed -> Done
        -> QualityGateFailed -> FallbackAttempted -> Done
    (headless strategy failing as a whole -> primary-extractor strategy)
    -> Failure once every attempted method has failed

A forced method runs exactly that method and surfaces its failure, with no
fallback edge.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import UTC, datetime
from typing import NamedTuple
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from pagepress.config import ExtractionConfig
from pagepress.errors import (
    ExtractionFailure,
    FallbackExhausted,
    FetchError,
    InputError,
    QualityGateRejected,
    RenderingError,
)
from pagepress.extractors.fallback import StructuralFallbackExtractor
from pagepress.extractors.metadata import MetadataExtractor, parse_date
from pagepress.extractors.primary import PrimaryExtractor, build_primary_extractor
from pagepress.extractors.sanitize import sanitize_html
from pagepress.extractors.structure import StructureAnnotator
from pagepress.fetcher import Fetcher, HttpFetcher
from pagepress.items import (
    ExtractionCandidate,
    ExtractionMethod,
    NormalizedArticle,
    SourceDocument,
    Strategy,
)
from pagepress.renderers import Renderer, build_renderer
from pagepress.strategy import StrategySelector

logger = logging.getLogger(__name__)

UNTITLED = "Untitled Article"

_INVALID_HOST_RE = re.compile(r'[\s<>"{}|\\^`]')

Sanitizer = Callable[..., str]


class _Outcome(NamedTuple):
    document: SourceDocument
    candidate: ExtractionCandidate
    method: ExtractionMethod


def validate_url(url: object) -> str:
    """Return the stripped URL or raise :class:`InputError`."""
    if not isinstance(url, str) or not url.strip():
        raise InputError("URL is required")
    url = url.strip()
    try:
        parsed = urlparse(url)
        host = parsed.hostname
        parsed.port  # out-of-range or non-numeric ports raise ValueError
    except ValueError as exc:
        raise InputError(f"Invalid URL format: {url!r}", url=url) from exc
    if parsed.scheme not in ("http", "https"):
        raise InputError(f"Unsupported URL scheme {parsed.scheme!r}: {url!r}", url=url)
    if not host:
        raise InputError(f"URL has no host: {url!r}", url=url)
    if _INVALID_HOST_RE.search(host):
        raise InputError(f"Invalid characters in URL host: {url!r}", url=url)
    return url


def _all_failed(url: str, attempted: list[str]) -> ExtractionFailure:
    return ExtractionFailure(
        f"All extraction methods failed for {url or '<html>'} (tried: {', '.join(attempted)})",
        url=url,
        attempted_methods=attempted,
    )


def coerce_method(value: ExtractionMethod | str) -> ExtractionMethod:
    try:
        return ExtractionMethod(value)
    except ValueError as exc:
        allowed = ", ".join(m.value for m in ExtractionMethod)
        raise InputError(f"Unknown extraction method {value!r}; expected one of: {allowed}") from exc


class Orchestrator:
    """Turn a URL into a :class:`NormalizedArticle`.

    Every collaborator can be replaced (e.g. by a deterministic fake in
    tests); those not supplied are built from *config*.  The orchestrator
    holds no per-request state, so one instance may serve concurrent calls.
    """

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        *,
        selector: StrategySelector | None = None,
        fetcher: Fetcher | None = None,
        renderer: Renderer | None = None,
        primary: PrimaryExtractor | None = None,
        fallback: StructuralFallbackExtractor | None = None,
        sanitizer: Sanitizer | None = None,
        annotator: StructureAnnotator | None = None,
        metadata: MetadataExtractor | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        cfg = config or ExtractionConfig()
        self.config = cfg
        self._selector = selector or StrategySelector(cfg.headless_domain_patterns)
        self._fetcher = fetcher or HttpFetcher(
            timeout=cfg.fetch_timeout,
            max_bytes=cfg.fetch_max_bytes,
            user_agent=cfg.user_agent,
        )
        self._renderer = renderer or build_renderer(
            cfg.renderer,
            single_file_command=cfg.single_file_command,
            user_agent=cfg.user_agent,
            min_chars=cfg.render_min_chars,
        )
        self._primary = primary or build_primary_extractor(cfg.primary_extractor)
        self._fallback = fallback or StructuralFallbackExtractor(
            cfg.fallback_min_selector_length, cfg.fallback_min_cleaned_length,
        )
        self._sanitize = sanitizer or sanitize_html
        self._annotator = annotator or StructureAnnotator(cfg.image_placeholder)
        self._metadata = metadata or MetadataExtractor(cfg.excerpt_length)
        self._clock = clock or (lambda: datetime.now(UTC))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def extract(
        self,
        url: str,
        force_method: ExtractionMethod | str | None = None,
    ) -> NormalizedArticle:
        """Extract the article at *url*.

        Args:
            url:          Absolute http(s) URL.
            force_method: Run only this method and surface its failure
                          directly instead of falling back.

        Raises:
            InputError:        Malformed URL or unknown forced method.
            ExtractionFailure: Every attempted method failed (or, when
                               forced, the forced method failed).
            FetchError, RenderingError: Forced method could not obtain
                               the page.
        """
        url = validate_url(url)
        if force_method is not None:
            method = coerce_method(force_method)
            logger.info("Extracting %s with forced method %s", url, method.value)
            outcome = self._run_forced(url, method)
        else:
            outcome = self._run_selected(url)
        return self._assemble(outcome)

    def extract_html(
        self,
        html: str,
        url: str = "",
        method: ExtractionMethod | str = ExtractionMethod.PRIMARY,
    ) -> NormalizedArticle:
        """Run the pipeline over pre-fetched *html* (no network).

        ``primary`` tries the primary extractor with fallback on rejection;
        ``fallback-structural`` uses the structural extractor only.
        """
        if url:
            url = validate_url(url)
        chosen = coerce_method(method)
        if chosen.uses_renderer:
            raise InputError(f"Method {chosen.value!r} needs a URL to render, not markup", url=url)
        document = SourceDocument(html=html, url=url)
        if chosen is ExtractionMethod.FALLBACK_STRUCTURAL:
            outcome = _Outcome(document, self._fallback.extract(document), chosen)
        else:
            attempted = [chosen.value]
            try:
                outcome = self._extract_with_fallback(document, attempted, rendered=False)
            except ExtractionFailure as exc:
                raise _all_failed(url, attempted) from exc
        return self._assemble(outcome)

    # ------------------------------------------------------------------
    # Strategy execution
    # ------------------------------------------------------------------

    def _run_selected(self, url: str) -> _Outcome:
        strategy = self._selector.select(url)
        logger.info("Extracting %s (strategy=%s)", url, strategy.value)
        attempted: list[str] = []

        if strategy is Strategy.USE_HEADLESS_RENDER:
            try:
                return self._run_strategy(url, attempted, rendered=True)
            except (RenderingError, ExtractionFailure) as exc:
                logger.warning(
                    "Headless strategy failed for %s: %s; trying primary extractor", url, exc,
                )

        try:
            return self._run_strategy(url, attempted, rendered=False)
        except (FetchError, ExtractionFailure) as exc:
            raise _all_failed(url, attempted) from exc

    def _run_strategy(self, url: str, attempted: list[str], *, rendered: bool) -> _Outcome:
        attempted.append(
            (ExtractionMethod.HEADLESS_RENDER if rendered else ExtractionMethod.PRIMARY).value,
        )
        document = self._acquire(url, rendered=rendered)
        return self._extract_with_fallback(document, attempted, rendered=rendered)

    def _extract_with_fallback(
        self,
        document: SourceDocument,
        attempted: list[str],
        *,
        rendered: bool,
    ) -> _Outcome:
        if rendered:
            primary_method = ExtractionMethod.HEADLESS_RENDER
            fallback_method = ExtractionMethod.HEADLESS_RENDER_FALLBACK
        else:
            primary_method = ExtractionMethod.PRIMARY
            fallback_method = ExtractionMethod.FALLBACK_STRUCTURAL

        try:
            return _Outcome(document, self._extract_primary(document), primary_method)
        except QualityGateRejected as exc:
            logger.info("%s; using structural fallback", exc)
        except ExtractionFailure as exc:
            logger.warning("Primary extraction failed for %s: %s", document.url, exc)

        attempted.append(fallback_method.value)
        return _Outcome(document, self._fallback.extract(document), fallback_method)

    def _run_forced(self, url: str, method: ExtractionMethod) -> _Outcome:
        document = self._acquire(url, rendered=method.uses_renderer)
        if method.is_fallback:
            candidate = self._fallback.extract(document)
        else:
            candidate = self._extract_primary(document)
        return _Outcome(document, candidate, method)

    def _acquire(self, url: str, *, rendered: bool) -> SourceDocument:
        if not rendered:
            return self._fetcher.fetch(url)
        html = self._renderer.render(
            url,
            timeout=self.config.render_timeout,
            max_bytes=self.config.render_max_bytes,
        )
        return SourceDocument(html=html, url=url)

    def _extract_primary(self, document: SourceDocument) -> ExtractionCandidate:
        candidate = self._primary.extract(document)
        threshold = self.config.min_primary_length
        if candidate.length < threshold:
            raise QualityGateRejected(
                f"Primary candidate for {document.url or '<html>'} is {candidate.length} chars "
                f"(minimum {threshold})",
                url=document.url,
                length=candidate.length,
                threshold=threshold,
            )
        logger.debug("Quality gate passed (%d chars) for %s", candidate.length, document.url)
        return candidate

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def _assemble(self, outcome: _Outcome) -> NormalizedArticle:
        document, candidate, method = outcome

        content = self._sanitize(candidate.content_html, strip_layout=method.is_fallback)
        annotated = self._annotator.annotate(content, base_url=document.url)
        if not annotated.html.strip():
            raise FallbackExhausted(
                f"Extracted content for {document.url or '<html>'} is empty after sanitization",
                url=document.url,
                attempted_methods=[method.value],
            )

        source_soup = BeautifulSoup(document.html or "", "lxml")
        content_soup = BeautifulSoup(annotated.html, "lxml")

        title = candidate.title or self._fallback.extract_title(source_soup) or UNTITLED
        author = candidate.byline or self._metadata.author(source_soup)
        publish_date = candidate.published_time or self._metadata.publish_date(source_soup)
        excerpt = candidate.excerpt or self._metadata.excerpt(content_soup)

        article = NormalizedArticle(
            title=title,
            content=annotated.html,
            author=author,
            publish_date=publish_date,
            publish_date_iso=parse_date(publish_date),
            excerpt=excerpt,
            url=document.url,
            extracted_at=self._clock().isoformat(),
            extraction_method=method,
            content_length=len(annotated.html),
            toc_structure=annotated.toc,
            images=annotated.images,
        )
        logger.info(
            "Extracted %s via %s: %d chars, %d headings, %d images",
            document.url or "<html>",
            method.value,
            article.content_length,
            len(article.toc_structure),
            len(article.images),
        )
        return article
