"""URL -> extraction strategy routing.

Pure function of the URL and the configured domain patterns; no network.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import urlparse

from pagepress.config import DEFAULT_HEADLESS_DOMAIN_PATTERNS
from pagepress.items import Strategy

logger = logging.getLogger(__name__)


class StrategySelector:
    """Route URLs on JS-heavy or heavily templated hosts to headless rendering."""

    def __init__(self, patterns: tuple[str, ...] = DEFAULT_HEADLESS_DOMAIN_PATTERNS) -> None:
        self._patterns: tuple[re.Pattern[str], ...] = tuple(
            re.compile(p, re.IGNORECASE) for p in patterns
        )

    def needs_headless(self, url: str) -> bool:
        host = (urlparse(url).hostname or "").lower()
        if not host:
            return False
        return any(p.search(host) for p in self._patterns)

    def select(self, url: str) -> Strategy:
        if self.needs_headless(url):
            logger.debug("Headless rendering selected for %s", url)
            return Strategy.USE_HEADLESS_RENDER
        return Strategy.USE_PRIMARY_EXTRACTOR
