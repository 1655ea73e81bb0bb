"""Extraction configuration.

Thresholds, timeouts and the headless-domain list live in one immutable
:class:`ExtractionConfig` that is handed to the orchestrator at construction.
Values come from the dataclass defaults, an optional YAML file and
``PAGEPRESS_*`` environment variables, in increasing order of precedence.

YAML layout::

    default:
      min_primary_length: 20000
      renderer: single-file
    domains:
      example.com:
        min_primary_length: 5000
"""

from __future__ import annotations

import dataclasses
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml

logger = logging.getLogger(__name__)

# Sites whose articles only become complete after client-side rendering
# (static-site generators, JS-heavy platforms, aggregators).
DEFAULT_HEADLESS_DOMAIN_PATTERNS: tuple[str, ...] = (
    r"github\.io",
    r"medium\.com",
    r"substack\.com",
    r"dev\.to",
    r"hashnode\.com",
    r"blog\.google",
    r"developers\.google\.com",
    r"stackoverflow\.com",
    r"reddit\.com",
    r"wikipedia\.org",
    r"news\.ycombinator\.com",
)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

_ENV_PREFIX = "PAGEPRESS_"


@dataclass(frozen=True)
class ExtractionConfig:
    # Quality gate: primary candidates shorter than this (characters of
    # content markup) are replaced by the structural fallback.
    min_primary_length: int = 50_000

    # Structural fallback thresholds (characters of inner markup)
    fallback_min_selector_length: int = 500
    fallback_min_cleaned_length: int = 1_000

    excerpt_length: int = 200

    # Primary extractor: "readability" | "trafilatura"
    primary_extractor: str = "readability"

    # Headless rendering: "playwright" | "single-file"
    renderer: str = "playwright"
    render_timeout: float = 60.0
    render_max_bytes: int = 10 * 1024 * 1024
    render_min_chars: int = 1_000
    single_file_command: str = "npx single-file"

    # Plain HTTP fetch for the primary-extractor strategy
    fetch_timeout: float = 15.0
    fetch_max_bytes: int = 10 * 1024 * 1024
    user_agent: str = DEFAULT_USER_AGENT

    headless_domain_patterns: tuple[str, ...] = field(
        default=DEFAULT_HEADLESS_DOMAIN_PATTERNS,
    )

    image_placeholder: str = "images/{id}.jpg"

    def replace(self, **changes: Any) -> ExtractionConfig:
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ExtractionConfig:
        """Build a config from a plain mapping, ignoring unknown keys."""
        return cls().merge(data)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ExtractionConfig:
        return cls().with_env(environ)

    def merge(self, data: Mapping[str, Any]) -> ExtractionConfig:
        known = {f.name: f for f in dataclasses.fields(self)}
        changes: dict[str, Any] = {}
        for key, value in data.items():
            name = str(key).lower().replace("-", "_")
            if name not in known:
                logger.warning("Ignoring unknown config key %r", key)
                continue
            changes[name] = _coerce(name, value, getattr(self, name))
        return dataclasses.replace(self, **changes)

    def with_env(self, environ: Mapping[str, str] | None = None) -> ExtractionConfig:
        env = os.environ if environ is None else environ
        overrides = {
            key[len(_ENV_PREFIX):].lower(): value
            for key, value in env.items()
            if key.startswith(_ENV_PREFIX)
        }
        return self.merge(overrides) if overrides else self


def _coerce(name: str, value: Any, current: Any) -> Any:
    """Convert *value* to the type of the field's current value."""
    try:
        if isinstance(current, tuple):
            if isinstance(value, str):
                return tuple(p.strip() for p in value.split(",") if p.strip())
            return tuple(str(v) for v in value)
        if isinstance(current, bool):
            if isinstance(value, str):
                return value.strip().lower() in ("1", "true", "yes", "on")
            return bool(value)
        if isinstance(current, int):
            return int(value)
        if isinstance(current, float):
            return float(value)
        return str(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid value for config key {name!r}: {value!r}") from exc


def load_config(
    path: str | Path | None = None,
    url: str = "",
    environ: Mapping[str, str] | None = None,
) -> ExtractionConfig:
    """Load an :class:`ExtractionConfig` from YAML *path* plus environment.

    When *url* is given, the most specific matching ``domains`` entry is
    merged over ``default``.
    """
    config = ExtractionConfig()
    if path is not None:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
        default = data.get("default", {}) if isinstance(data, dict) else {}
        domains = data.get("domains", {}) if isinstance(data, dict) else {}
        if isinstance(default, dict):
            config = config.merge(default)
        if url and isinstance(domains, dict):
            config = config.merge(_best_domain_match(domains, url))
    return config.with_env(environ)


def _best_domain_match(domains: dict[str, Any], url: str) -> dict[str, Any]:
    netloc = urlparse(url).netloc.lower()
    best_key = ""
    best_cfg: dict[str, Any] = {}
    for key, cfg in domains.items():
        if not isinstance(key, str) or not isinstance(cfg, dict):
            continue
        key_lower = key.lower()
        if (netloc == key_lower or netloc.endswith("." + key_lower)) and (
            len(key_lower) > len(best_key)
        ):
            best_key = key_lower
            best_cfg = cfg
    return best_cfg
