"""Extraction sub-package: sanitization, annotation, metadata and content extractors."""

from .fallback import StructuralFallbackExtractor
from .markdown import html_to_markdown
from .metadata import MetadataExtractor, parse_date
from .primary import PrimaryExtractor, ReadabilityExtractor, TrafilaturaExtractor
from .sanitize import sanitize_html
from .structure import AnnotatedContent, StructureAnnotator

__all__ = [
    "AnnotatedContent",
    "MetadataExtractor",
    "PrimaryExtractor",
    "ReadabilityExtractor",
    "StructuralFallbackExtractor",
    "StructureAnnotator",
    "TrafilaturaExtractor",
    "html_to_markdown",
    "parse_date",
    "sanitize_html",
]
