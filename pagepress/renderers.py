"""Headless rendering adapters.

A renderer turns a URL into a fully rendered HTML snapshot within a time
budget and an output-size budget.  On any violation it raises one of the
:class:`~pagepress.errors.RenderingError` subclasses; partial output is never
returned.

Two adapters are provided:

* :class:`PlaywrightRenderer`: headless Chromium via Playwright's sync API
  (``pip install playwright && playwright install chromium``).
* :class:`SingleFileRenderer`: the SingleFile CLI run as a subprocess
  (``npm install -g single-file-cli`` or ``npx single-file``).
"""

from __future__ import annotations

import contextlib
import logging
import shlex
import subprocess
import tempfile
import time
from pathlib import Path
from typing import Protocol, runtime_checkable

from pagepress.errors import (
    RenderingBufferExceeded,
    RenderingProcessError,
    RenderingTimeout,
)

logger = logging.getLogger(__name__)

_NETWORKIDLE_MAX_MS = 10_000

_CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


@runtime_checkable
class Renderer(Protocol):
    """Produces a rendered HTML snapshot of *url*."""

    def render(self, url: str, *, timeout: float, max_bytes: int) -> str:
        ...


def _check_snapshot(html: str, url: str, max_bytes: int, min_chars: int) -> str:
    size = len(html.encode("utf-8"))
    if size > max_bytes:
        raise RenderingBufferExceeded(
            f"Rendered snapshot of {url} is {size} bytes (limit {max_bytes})",
            url=url,
            size=size,
            limit=max_bytes,
        )
    if len(html) < min_chars:
        raise RenderingProcessError(
            f"Renderer produced insufficient content for {url}: "
            f"only {len(html)} characters",
            url=url,
        )
    return html


# ---------------------------------------------------------------------------
# SingleFile CLI
# ---------------------------------------------------------------------------

class SingleFileRenderer:
    """Render pages with the SingleFile command-line tool."""

    def __init__(self, command: str = "npx single-file", min_chars: int = 1_000) -> None:
        self._command = shlex.split(command)
        self._min_chars = min_chars

    def build_command(self, url: str, output_path: Path) -> list[str]:
        return [
            *self._command,
            url,
            str(output_path),
            "--browser-headless", "true",
            "--block-scripts", "true",
            "--block-videos", "true",
            "--block-audios", "true",
            "--compress-content", "false",
        ]

    def render(self, url: str, *, timeout: float, max_bytes: int) -> str:
        with tempfile.TemporaryDirectory(prefix="pagepress-") as tmp:
            output_path = Path(tmp) / "snapshot.html"
            cmd = self.build_command(url, output_path)
            logger.debug("Running SingleFile: %s", shlex.join(cmd))
            try:
                proc = subprocess.run(
                    cmd,
                    capture_output=True,
                    timeout=timeout,
                    check=False,
                )
            except subprocess.TimeoutExpired as exc:
                raise RenderingTimeout(
                    f"SingleFile timed out after {timeout:.0f}s for {url}", url=url,
                ) from exc
            except OSError as exc:
                raise RenderingProcessError(
                    f"Could not start SingleFile for {url}: {exc}", url=url,
                ) from exc

            captured = len(proc.stdout or b"") + len(proc.stderr or b"")
            if captured > max_bytes:
                raise RenderingBufferExceeded(
                    f"SingleFile output for {url} exceeded {max_bytes} bytes",
                    url=url,
                    size=captured,
                    limit=max_bytes,
                )
            if proc.stderr:
                logger.warning(
                    "SingleFile stderr for %s: %s",
                    url, proc.stderr.decode("utf-8", errors="replace").strip()[:500],
                )
            if proc.returncode != 0:
                raise RenderingProcessError(
                    f"SingleFile exited with status {proc.returncode} for {url}", url=url,
                )
            if not output_path.exists():
                raise RenderingProcessError(f"SingleFile wrote no snapshot for {url}", url=url)

            size = output_path.stat().st_size
            if size > max_bytes:
                raise RenderingBufferExceeded(
                    f"Rendered snapshot of {url} is {size} bytes (limit {max_bytes})",
                    url=url,
                    size=size,
                    limit=max_bytes,
                )
            html = output_path.read_text(encoding="utf-8", errors="replace")

        logger.info("SingleFile rendered %d characters for %s", len(html), url)
        return _check_snapshot(html, url, max_bytes, self._min_chars)


# ---------------------------------------------------------------------------
# Playwright
# ---------------------------------------------------------------------------

class PlaywrightRenderer:
    """Render pages in headless Chromium through Playwright."""

    def __init__(self, user_agent: str | None = None, min_chars: int = 1_000) -> None:
        self._user_agent = user_agent
        self._min_chars = min_chars

    def render(self, url: str, *, timeout: float, max_bytes: int) -> str:
        try:
            from playwright.sync_api import Error as PlaywrightError
            from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
            from playwright.sync_api import sync_playwright
        except ImportError as exc:
            raise RenderingProcessError(
                "Playwright rendering requires playwright: pip install playwright && "
                "playwright install chromium",
                url=url,
            ) from exc

        deadline = time.monotonic() + timeout

        # Playwright reads timeout=0 as "no timeout", so never go below 1 ms
        def _remaining_ms() -> int:
            return max(int((deadline - time.monotonic()) * 1_000), 1)

        try:
            with sync_playwright() as p:
                browser = p.chromium.launch(
                    headless=True, args=_CHROMIUM_ARGS, timeout=_remaining_ms(),
                )
                try:
                    ctx_kwargs: dict = {
                        "java_script_enabled": True,
                        "viewport": {"width": 1280, "height": 1024},
                    }
                    if self._user_agent:
                        ctx_kwargs["user_agent"] = self._user_agent
                    page = browser.new_context(**ctx_kwargs).new_page()
                    page.set_default_timeout(_remaining_ms())
                    page.goto(url, timeout=_remaining_ms(), wait_until="load")
                    # Give SPAs a bounded chance to settle within what is
                    # left of the budget; not reaching networkidle is not an error.
                    with contextlib.suppress(PlaywrightTimeoutError):
                        page.wait_for_load_state(
                            "networkidle", timeout=min(_remaining_ms(), _NETWORKIDLE_MAX_MS),
                        )
                    html: str = page.content()
                finally:
                    with contextlib.suppress(PlaywrightError):
                        browser.close()
        except PlaywrightTimeoutError as exc:
            raise RenderingTimeout(
                f"Playwright timed out after {timeout:.0f}s for {url}", url=url,
            ) from exc
        except PlaywrightError as exc:
            raise RenderingProcessError(f"Playwright error rendering {url}: {exc}", url=url) from exc

        logger.info("Playwright rendered %d characters for %s", len(html), url)
        return _check_snapshot(html, url, max_bytes, self._min_chars)


def build_renderer(name: str, *, single_file_command: str = "npx single-file",
                   user_agent: str | None = None, min_chars: int = 1_000) -> Renderer:
    """Return the renderer registered under *name*."""
    if name == "playwright":
        return PlaywrightRenderer(user_agent=user_agent, min_chars=min_chars)
    if name == "single-file":
        return SingleFileRenderer(command=single_file_command, min_chars=min_chars)
    raise ValueError(f"Unknown renderer {name!r}; expected 'playwright' or 'single-file'")
