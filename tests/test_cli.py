"""Tests for the pagepress command-line entry point."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest

from pagepress.__main__ import main
from pagepress.errors import ExtractionFailure, InputError
from pagepress.items import ExtractionMethod, NormalizedArticle

URL = "https://example.com/blog/post"


def _article() -> NormalizedArticle:
    content = '<h2 id="h2-0">Intro</h2><p>Hello world.</p>'
    return NormalizedArticle(
        title="Hello",
        content=content,
        url=URL,
        extracted_at="2024-02-01T12:00:00+00:00",
        extraction_method=ExtractionMethod.PRIMARY,
        content_length=len(content),
    )


def _patched(result=None, error: Exception | None = None):
    instance = MagicMock()
    if error is not None:
        instance.extract.side_effect = error
    else:
        instance.extract.return_value = result
    return patch("pagepress.__main__.Orchestrator", MagicMock(return_value=instance))


class TestMain:
    def test_json_to_stdout(self, capsys):
        with _patched(_article()):
            code = main(["--url", URL, "--quiet"])
        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["title"] == "Hello"
        assert data["extractionMethod"] == "primary"

    def test_markdown_to_file(self, tmp_path):
        out = tmp_path / "article.md"
        with _patched(_article()):
            code = main(["--url", URL, "--format", "markdown", "--out", str(out), "--quiet"])
        assert code == 0
        assert out.read_text(encoding="utf-8").startswith("# Hello")

    def test_force_method_passed_through(self):
        with _patched(_article()) as orchestrator_cls:
            main(["--url", URL, "--force-method", "headless-render", "--quiet"])
        orchestrator_cls.return_value.extract.assert_called_once_with(
            URL, force_method="headless-render",
        )

    def test_invalid_force_method_rejected_by_parser(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["--url", URL, "--force-method", "magic"])
        assert exc_info.value.code == 2

    def test_input_error_exit_code(self):
        with _patched(error=InputError("bad url")):
            assert main(["--url", "nope", "--quiet"]) == 2

    def test_extraction_failure_exit_code(self):
        with _patched(error=ExtractionFailure("all failed", attempted_methods=["primary"])):
            assert main(["--url", URL, "--quiet"]) == 1

    def test_bad_config_file(self, tmp_path):
        assert main(["--url", URL, "--config", str(tmp_path / "missing.yaml")]) == 2

    def test_summary_panel(self, capsys):
        with _patched(_article()):
            main(["--url", URL])
        assert "Hello" in capsys.readouterr().err
