"""Tests for pagepress.extractors.metadata."""

from __future__ import annotations

from bs4 import BeautifulSoup

from pagepress.extractors.metadata import ELLIPSIS, MetadataExtractor, parse_date, truncate


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


class TestAuthor:
    def test_meta_author_first(self, article_html):
        assert MetadataExtractor().author(_soup(article_html)) == "Jane Smith"

    def test_rel_author(self):
        soup = _soup('<p>By <a rel="author" href="/me">Sam Lee</a></p>')
        assert MetadataExtractor().author(soup) == "Sam Lee"

    def test_byline_class(self):
        soup = _soup('<div class="byline">  Alex\n Doe </div>')
        assert MetadataExtractor().author(soup) == "Alex Doe"

    def test_meta_wins_over_byline(self):
        soup = _soup('<meta name="author" content="Meta Name"><span class="author">Other</span>')
        assert MetadataExtractor().author(soup) == "Meta Name"

    def test_empty_meta_skipped(self):
        soup = _soup('<meta name="author" content=""><span class="author">Fallback</span>')
        assert MetadataExtractor().author(soup) == "Fallback"

    def test_missing(self):
        assert MetadataExtractor().author(_soup("<p>nothing</p>")) == ""


class TestPublishDate:
    def test_published_time_meta(self, article_html):
        assert MetadataExtractor().publish_date(_soup(article_html)) == "2024-01-15T10:00:00+00:00"

    def test_meta_name_date(self, post_content_html):
        assert MetadataExtractor().publish_date(_soup(post_content_html)) == "2023-06-01"

    def test_time_datetime_attribute(self):
        soup = _soup('<time datetime="2022-03-04">March 4</time>')
        assert MetadataExtractor().publish_date(soup) == "2022-03-04"

    def test_date_class_text(self):
        soup = _soup('<span class="post-date">May 5, 2021</span>')
        assert MetadataExtractor().publish_date(soup) == "May 5, 2021"

    def test_missing(self):
        assert MetadataExtractor().publish_date(_soup("<p>x</p>")) == ""


class TestExcerpt:
    def test_first_paragraph(self):
        soup = _soup("<h1>T</h1><p>First   paragraph\ntext.</p><p>Second.</p>")
        assert MetadataExtractor().excerpt(soup) == "First paragraph text."

    def test_truncated_with_ellipsis(self):
        soup = _soup(f"<p>{'word ' * 100}</p>")
        excerpt = MetadataExtractor(excerpt_length=50).excerpt(soup)
        assert excerpt.endswith(ELLIPSIS)
        assert len(excerpt) == 50 + len(ELLIPSIS)

    def test_falls_back_to_full_text(self):
        soup = _soup("<div>No paragraphs <b>here</b></div>")
        assert MetadataExtractor().excerpt(soup) == "No paragraphs here"

    def test_empty_paragraph_falls_back(self):
        soup = _soup("<p> </p><div>Body text</div>")
        assert MetadataExtractor().excerpt(soup) == "Body text"


class TestTruncate:
    def test_short_text_unchanged(self):
        assert truncate("short", 10) == "short"

    def test_exact_limit_unchanged(self):
        assert truncate("a" * 10, 10) == "a" * 10

    def test_long_text(self):
        assert truncate("a" * 11, 10) == "a" * 10 + ELLIPSIS


class TestParseDate:
    def test_iso_timestamp(self):
        result = parse_date("2024-01-15T10:00:00+00:00")
        assert result is not None
        assert result.startswith("2024-01-15")

    def test_human_date(self):
        result = parse_date("March 4, 2022")
        assert result is not None
        assert result.startswith("2022-03-04")

    def test_empty(self):
        assert parse_date("") is None
        assert parse_date(None) is None

    def test_garbage(self):
        assert parse_date("????") is None

    def test_epoch_default_rejected(self):
        assert parse_date("1970-01-01") is None
