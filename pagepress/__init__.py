"""pagepress - turn any web page into a normalized, e-book-ready article.

Quick single-URL usage::

    from pagepress import extract_article

    article = extract_article("https://example.com/blog/some-post")
    print(article.title, article.extraction_method)
    for entry in article.toc_structure:
        print(entry.level, entry.title, entry.anchor_id)

Custom collaborators (e.g. a different renderer)::

    from pagepress import ExtractionConfig, Orchestrator
    from pagepress.renderers import SingleFileRenderer

    orchestrator = Orchestrator(
        ExtractionConfig(min_primary_length=20_000),
        renderer=SingleFileRenderer(),
    )
    article = orchestrator.extract("https://someone.github.io/post/")
"""

from pagepress.config import ExtractionConfig, load_config
from pagepress.errors import (
    ExtractionFailure,
    FallbackExhausted,
    FetchError,
    InputError,
    PagePressError,
    QualityGateRejected,
    RenderingBufferExceeded,
    RenderingError,
    RenderingProcessError,
    RenderingTimeout,
    SanitizationError,
)
from pagepress.items import (
    ExtractionMethod,
    ImageRef,
    NormalizedArticle,
    Strategy,
    TocEntry,
)
from pagepress.pipeline import Orchestrator
from pagepress.query import extract_article, extract_batch, extract_html

__version__ = "0.1.0"
__all__ = [
    "ExtractionConfig",
    "ExtractionFailure",
    "ExtractionMethod",
    "FallbackExhausted",
    "FetchError",
    "ImageRef",
    "InputError",
    "NormalizedArticle",
    "Orchestrator",
    "PagePressError",
    "QualityGateRejected",
    "RenderingBufferExceeded",
    "RenderingError",
    "RenderingProcessError",
    "RenderingTimeout",
    "SanitizationError",
    "Strategy",
    "TocEntry",
    "extract_article",
    "extract_batch",
    "extract_html",
    "load_config",
]
