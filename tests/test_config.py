"""Tests for pagepress.config."""

from __future__ import annotations

import pytest

from pagepress.config import DEFAULT_HEADLESS_DOMAIN_PATTERNS, ExtractionConfig, load_config


class TestDefaults:
    def test_quality_gate_default(self):
        assert ExtractionConfig().min_primary_length == 50_000

    def test_fallback_thresholds(self):
        cfg = ExtractionConfig()
        assert cfg.fallback_min_selector_length == 500
        assert cfg.fallback_min_cleaned_length == 1_000

    def test_frozen(self):
        with pytest.raises(AttributeError):
            ExtractionConfig().min_primary_length = 1  # type: ignore[misc]

    def test_replace(self):
        cfg = ExtractionConfig().replace(renderer="single-file")
        assert cfg.renderer == "single-file"
        assert ExtractionConfig().renderer == "playwright"


class TestMerge:
    def test_types_coerced(self):
        cfg = ExtractionConfig.from_mapping({"min_primary_length": "1200", "render_timeout": "5"})
        assert cfg.min_primary_length == 1200
        assert cfg.render_timeout == 5.0

    def test_dashed_keys(self):
        cfg = ExtractionConfig.from_mapping({"excerpt-length": 80})
        assert cfg.excerpt_length == 80

    def test_unknown_key_ignored(self, caplog):
        cfg = ExtractionConfig.from_mapping({"no_such_setting": 1})
        assert cfg == ExtractionConfig()
        assert "no_such_setting" in caplog.text

    def test_tuple_from_list(self):
        cfg = ExtractionConfig.from_mapping({"headless_domain_patterns": [r"a\.com", r"b\.com"]})
        assert cfg.headless_domain_patterns == (r"a\.com", r"b\.com")

    def test_invalid_number(self):
        with pytest.raises(ValueError, match="min_primary_length"):
            ExtractionConfig.from_mapping({"min_primary_length": "lots"})


class TestEnv:
    def test_env_overrides(self):
        env = {
            "PAGEPRESS_MIN_PRIMARY_LENGTH": "1000",
            "PAGEPRESS_RENDERER": "single-file",
            "PAGEPRESS_HEADLESS_DOMAIN_PATTERNS": r"x\.com, y\.com",
            "UNRELATED": "1",
        }
        cfg = ExtractionConfig.from_env(env)
        assert cfg.min_primary_length == 1000
        assert cfg.renderer == "single-file"
        assert cfg.headless_domain_patterns == (r"x\.com", r"y\.com")

    def test_empty_env(self):
        assert ExtractionConfig.from_env({}) == ExtractionConfig()


class TestLoadConfig:
    def test_no_file(self):
        cfg = load_config(environ={})
        assert cfg.headless_domain_patterns == DEFAULT_HEADLESS_DOMAIN_PATTERNS

    def test_yaml_default_section(self, tmp_path):
        path = tmp_path / "pagepress.yaml"
        path.write_text("default:\n  min_primary_length: 20000\n", encoding="utf-8")
        assert load_config(path, environ={}).min_primary_length == 20_000

    def test_domain_section_most_specific_wins(self, tmp_path):
        path = tmp_path / "pagepress.yaml"
        path.write_text(
            "default:\n"
            "  excerpt_length: 100\n"
            "domains:\n"
            "  example.com:\n"
            "    min_primary_length: 5000\n"
            "  blog.example.com:\n"
            "    min_primary_length: 3000\n",
            encoding="utf-8",
        )
        cfg = load_config(path, url="https://blog.example.com/post", environ={})
        assert cfg.min_primary_length == 3_000
        assert cfg.excerpt_length == 100

        other = load_config(path, url="https://www.example.com/post", environ={})
        assert other.min_primary_length == 5_000

        unrelated = load_config(path, url="https://elsewhere.org/", environ={})
        assert unrelated.min_primary_length == 50_000

    def test_env_beats_yaml(self, tmp_path):
        path = tmp_path / "pagepress.yaml"
        path.write_text("default:\n  min_primary_length: 20000\n", encoding="utf-8")
        cfg = load_config(path, environ={"PAGEPRESS_MIN_PRIMARY_LENGTH": "7"})
        assert cfg.min_primary_length == 7

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path, environ={}) == ExtractionConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_config(tmp_path / "missing.yaml", environ={})
