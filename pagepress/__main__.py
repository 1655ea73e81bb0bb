"""CLI entry point: python -m pagepress --url URL [options]"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml

from pagepress.config import load_config
from pagepress.errors import InputError, PagePressError
from pagepress.items import ExtractionMethod, NormalizedArticle
from pagepress.pipeline import Orchestrator

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagepress",
        description=(
            "Extract a web page into a normalized article record\n"
            "(title, sanitized content, metadata, table of contents, images)."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--url", required=True, metavar="URL",
                        help="Article URL to extract")
    parser.add_argument("--force-method", default=None,
                        choices=[m.value for m in ExtractionMethod],
                        metavar="{" + ",".join(m.value for m in ExtractionMethod) + "}",
                        help="Run only this extraction method; fail instead of falling back")
    parser.add_argument("--config", default=None, metavar="FILE",
                        help="YAML configuration file (default/domains sections)")
    parser.add_argument("--format", dest="output_format", default="json",
                        choices=["json", "markdown"],
                        help="Output format (default: json)")
    parser.add_argument("--out", default=None, metavar="FILE",
                        help="Write output to FILE instead of stdout")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        metavar="{DEBUG,INFO,WARNING,ERROR}",
                        help="Logging level (default: INFO)")
    parser.add_argument("--quiet", action="store_true", default=False,
                        help="Suppress the summary panel")
    return parser


def _print_summary(article: NormalizedArticle) -> None:
    from rich.console import Console
    from rich.panel import Panel

    console = Console(stderr=True)
    console.print(
        Panel.fit(
            f"[bold cyan]{article.title}[/bold cyan]\n"
            f"URL:      [green]{article.url}[/green]\n"
            f"Method:   [yellow]{article.extraction_method.value}[/yellow]\n"
            f"Author:   {article.author or '-'}\n"
            f"Date:     {article.publish_date or '-'}\n"
            f"Length:   {article.content_length} chars\n"
            f"Headings: {len(article.toc_structure)}   Images: {len(article.images)}",
            title="pagepress",
        ),
    )


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)

    try:
        orchestrator = Orchestrator(load_config(args.config, url=args.url))
    except (OSError, ValueError, yaml.YAMLError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    try:
        article = orchestrator.extract(args.url, force_method=args.force_method)
    except InputError as exc:
        logger.error("%s", exc)
        return 2
    except PagePressError as exc:
        logger.error("Extraction failed: %s", exc)
        return 1

    if args.output_format == "markdown":
        output = article.to_markdown()
    else:
        output = article.to_json()

    if args.out:
        Path(args.out).write_text(output + "\n", encoding="utf-8")
        logger.info("Wrote %s", args.out)
    else:
        sys.stdout.write(output + "\n")

    if not args.quiet:
        _print_summary(article)
    return 0


if __name__ == "__main__":
    sys.exit(main())
