"""pagepress.errors - exception taxonomy for the extraction pipeline.

Every exception carries the URL it relates to so callers can log or report
failures without threading the URL through separately.
"""

from __future__ import annotations


class PagePressError(RuntimeError):
    """Base class for all pagepress errors.

    Attributes:
        url -- the URL being processed ("" when unknown)
    """

    def __init__(self, message: str, url: str = "") -> None:
        super().__init__(message)
        self.url = url


class InputError(PagePressError, ValueError):
    """Raised before any work starts when the input URL is unusable."""


class FetchError(PagePressError):
    """Raised when the source page cannot be downloaded.

    Attributes:
        status -- HTTP status code (0 if no response was received)
    """

    def __init__(self, message: str, url: str = "", status: int = 0) -> None:
        super().__init__(message, url=url)
        self.status = status


# ---------------------------------------------------------------------------
# Headless rendering
# ---------------------------------------------------------------------------

class RenderingError(PagePressError):
    """Base class for headless-render collaborator failures."""


class RenderingTimeout(RenderingError):
    """The renderer did not finish within its time budget."""


class RenderingBufferExceeded(RenderingError):
    """The renderer produced more output than the configured limit."""

    def __init__(self, message: str, url: str = "", size: int = 0, limit: int = 0) -> None:
        super().__init__(message, url=url)
        self.size = size
        self.limit = limit


class RenderingProcessError(RenderingError):
    """The renderer exited abnormally or produced unusable output."""


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

class ExtractionFailure(PagePressError):
    """No usable article could be produced.

    Attributes:
        attempted_methods -- extraction methods tried before giving up
    """

    def __init__(
        self,
        message: str,
        url: str = "",
        attempted_methods: list[str] | None = None,
    ) -> None:
        super().__init__(message, url=url)
        self.attempted_methods = list(attempted_methods or [])


class QualityGateRejected(ExtractionFailure):
    """A candidate was produced but is shorter than the quality threshold."""

    def __init__(self, message: str, url: str = "", length: int = 0, threshold: int = 0) -> None:
        super().__init__(message, url=url)
        self.length = length
        self.threshold = threshold


class FallbackExhausted(ExtractionFailure):
    """Neither a selector, the cleaned body, nor the raw body yielded content."""


class SanitizationError(PagePressError):
    """Markup could not be parsed for sanitization."""
