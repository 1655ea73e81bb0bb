"""Plain HTTP page fetch for the primary-extractor strategy.

Uses only the stdlib (``urllib``).  One attempt per call: the pipeline's only
recovery path is the primary -> fallback sequence, so transient errors are
reported rather than retried here.
"""

from __future__ import annotations

import gzip
import logging
import urllib.error
import urllib.request
import zlib
from email.message import Message
from typing import Protocol, runtime_checkable
from urllib.parse import urlparse

from pagepress.config import DEFAULT_USER_AGENT
from pagepress.errors import FetchError
from pagepress.items import SourceDocument

logger = logging.getLogger(__name__)

_HEADERS = {
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;"
        "q=0.9,image/avif,image/webp,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "DNT": "1",
    "Upgrade-Insecure-Requests": "1",
}


@runtime_checkable
class Fetcher(Protocol):
    """Downloads a page and returns it as a :class:`SourceDocument`."""

    def fetch(self, url: str) -> SourceDocument:
        ...


def _decode_body(raw: bytes, headers: Message | None, url: str) -> str:
    encoding = ""
    if headers is not None:
        encoding = str(headers.get("Content-Encoding", "") or "").lower().strip()

    try:
        if encoding == "gzip":
            raw = gzip.decompress(raw)
        elif encoding in ("deflate", "zlib"):
            raw = zlib.decompress(raw)
    except (OSError, zlib.error) as exc:
        raise FetchError(f"{encoding} decompression failed for {url}: {exc}", url=url) from exc
    if encoding == "br":
        raise FetchError(f"Brotli-encoded response from {url} is not supported", url=url)

    charset = "utf-8"
    if headers is not None:
        charset = headers.get_content_charset("utf-8") or "utf-8"
    try:
        return raw.decode(charset, errors="replace")
    except LookupError:
        return raw.decode("utf-8", errors="replace")


class HttpFetcher:
    """Fetch pages with browser-like headers, a timeout and a size cap."""

    def __init__(
        self,
        timeout: float = 15.0,
        max_bytes: int = 10 * 1024 * 1024,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._timeout = timeout
        self._max_bytes = max_bytes
        self._user_agent = user_agent

    def fetch(self, url: str) -> SourceDocument:
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https"):
            raise FetchError(f"Unsupported URL scheme: {parsed.scheme!r}", url=url)

        req = urllib.request.Request(url, headers={"User-Agent": self._user_agent, **_HEADERS})
        logger.debug("GET %s (timeout=%.1fs)", url, self._timeout)
        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:
                raw: bytes = resp.read(self._max_bytes + 1)
                if len(raw) > self._max_bytes:
                    raise FetchError(
                        f"Response from {url} exceeds {self._max_bytes} bytes", url=url,
                    )
                html = _decode_body(raw, resp.headers, url)
        except urllib.error.HTTPError as exc:
            raise FetchError(
                f"HTTP {exc.code} fetching {url}: {exc.reason}", url=url, status=exc.code,
            ) from exc
        except urllib.error.URLError as exc:
            raise FetchError(f"URL error fetching {url}: {exc.reason}", url=url) from exc
        except TimeoutError as exc:
            raise FetchError(f"Timed out fetching {url}", url=url) from exc
        except OSError as exc:
            raise FetchError(f"Network error fetching {url}: {exc}", url=url) from exc

        if not html.strip():
            raise FetchError(f"Empty response body from {url}", url=url)
        return SourceDocument(html=html, url=url)
