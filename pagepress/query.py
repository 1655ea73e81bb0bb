"""pagepress.query - one-call extraction API.

Basic usage::

    from pagepress import extract_article

    article = extract_article("https://example.com/blog/some-post")
    print(article.title)
    print(article.extraction_method)
    print([entry.title for entry in article.toc_structure])

    # The camelCase record consumed by the e-book packager
    record = article.to_dict()

Forcing a method (failures are raised instead of falling back)::

    article = extract_article(url, force_method="headless-render")

Pre-fetched markup (no network)::

    from pagepress import extract_html

    article = extract_html(html, url="https://example.com/blog/post")
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from pagepress.config import ExtractionConfig
from pagepress.items import ExtractionMethod, NormalizedArticle
from pagepress.pipeline import Orchestrator

logger = logging.getLogger(__name__)


def extract_article(
    url: str,
    *,
    force_method: ExtractionMethod | str | None = None,
    config: ExtractionConfig | None = None,
) -> NormalizedArticle:
    """Fetch or render *url* and return its :class:`NormalizedArticle`.

    Args:
        url:          Fully-qualified HTTP/HTTPS URL.
        force_method: Optional extraction method to run exclusively.
        config:       Extraction settings; defaults to
                      :meth:`ExtractionConfig.from_env`.

    Raises:
        :class:`~pagepress.errors.InputError`: Malformed URL.
        :class:`~pagepress.errors.ExtractionFailure`: Every method failed.
    """
    orchestrator = Orchestrator(config or ExtractionConfig.from_env())
    return orchestrator.extract(url, force_method=force_method)


def extract_html(
    html: str,
    *,
    url: str = "",
    method: ExtractionMethod | str = ExtractionMethod.PRIMARY,
    config: ExtractionConfig | None = None,
) -> NormalizedArticle:
    """Normalize pre-fetched *html* without any network access."""
    orchestrator = Orchestrator(config or ExtractionConfig.from_env())
    return orchestrator.extract_html(html, url=url, method=method)


def extract_batch(
    urls: list[str],
    *,
    max_workers: int = 4,
    on_error: str = "skip",
    config: ExtractionConfig | None = None,
) -> list[NormalizedArticle | None]:
    """Extract several URLs concurrently, preserving input order.

    Each URL is an independent request: duplicates are extracted twice and
    nothing is cached between them.

    Args:
        urls:        URLs to extract.
        max_workers: Maximum number of concurrent extraction threads.
        on_error:    ``"skip"`` (default) omits failed URLs; ``"raise"``
                     re-raises the first failure; ``"include"`` keeps a
                     ``None`` placeholder for each failure.
        config:      Extraction settings shared by every request.

    Raises:
        :class:`ValueError`: For unknown *on_error* values.
    """
    if on_error not in ("skip", "raise", "include"):
        raise ValueError(f"on_error must be 'skip', 'raise', or 'include'; got {on_error!r}")

    orchestrator = Orchestrator(config or ExtractionConfig.from_env())
    results: list[NormalizedArticle | None] = [None] * len(urls)

    def _extract_one(idx: int, url: str) -> tuple[int, NormalizedArticle | None]:
        try:
            return idx, orchestrator.extract(url)
        except Exception as exc:
            if on_error == "raise":
                raise
            logger.warning("extract_batch: failed to extract %s: %s", url, exc)
            return idx, None

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(_extract_one, i, url) for i, url in enumerate(urls)]
        for future in as_completed(futures):
            idx, article = future.result()
            results[idx] = article

    if on_error == "include":
        return results
    return [r for r in results if r is not None]
