"""Tests for pagepress.extractors.structure."""

from __future__ import annotations

from bs4 import BeautifulSoup

from pagepress.extractors.structure import IMAGE_STYLE, StructureAnnotator, resolve_image_source


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


class TestHeadings:
    def test_ids_are_per_tag_counters(self):
        html = "<h1>A</h1><h2>B</h2><h2>C</h2><h3>D</h3><h2>E</h2>"
        result = StructureAnnotator().annotate(html)
        ids = [entry.anchor_id for entry in result.toc]
        assert ids == ["h1-0", "h2-0", "h2-1", "h3-0", "h2-2"]

    def test_toc_in_document_order(self):
        html = "<h2>First</h2><p>x</p><h1>Second</h1><div><h3>Third</h3></div>"
        result = StructureAnnotator().annotate(html)
        assert [(e.level, e.title) for e in result.toc] == [
            (2, "First"), (1, "Second"), (3, "Third"),
        ]

    def test_id_written_to_markup(self):
        result = StructureAnnotator().annotate('<h2 id="old">Intro</h2>')
        h2 = _soup(result.html).find("h2")
        assert h2["id"] == "h2-0"

    def test_toc_entries_resolve_to_headings(self):
        html = "<h1>T</h1><h2>A</h2><h3>B</h3><h2>C</h2>"
        result = StructureAnnotator().annotate(html)
        soup = _soup(result.html)
        for entry in result.toc:
            el = soup.find(id=entry.anchor_id)
            assert el is not None
            assert el.name == f"h{entry.level}"
            assert el.get_text() == entry.title

    def test_heading_text_whitespace_normalized(self):
        result = StructureAnnotator().annotate("<h2>  Multi\n   line <em>title</em> </h2>")
        assert result.toc[0].title == "Multi line title"

    def test_empty_heading_skipped_but_counted(self):
        html = "<h2>   </h2><h2>Real</h2>"
        result = StructureAnnotator().annotate(html)
        assert len(result.toc) == 1
        assert result.toc[0].anchor_id == "h2-1"
        first = _soup(result.html).find("h2")
        assert not first.has_attr("id")

    def test_no_headings(self):
        result = StructureAnnotator().annotate("<p>Just text</p>")
        assert result.toc == []


class TestImages:
    def test_src_rewritten_to_placeholder(self):
        html = '<p>x</p><img src="https://cdn.example.com/a.png" alt="a">'
        result = StructureAnnotator().annotate(html)
        img = _soup(result.html).find("img")
        assert img["src"] == "images/img-0.jpg"
        assert img["style"] == IMAGE_STYLE
        assert img["alt"] == "a"
        assert result.images[0].original_src == "https://cdn.example.com/a.png"
        assert result.images[0].rewritten_src == "images/img-0.jpg"

    def test_ids_follow_document_order(self):
        html = '<img src="/1.png"><h2>H</h2><img src="/2.png"><img src="/3.png">'
        result = StructureAnnotator().annotate(html, base_url="https://example.com/post")
        assert [i.id for i in result.images] == ["img-0", "img-1", "img-2"]
        assert [i.original_src for i in result.images] == [
            "https://example.com/1.png",
            "https://example.com/2.png",
            "https://example.com/3.png",
        ]

    def test_relative_source_kept_without_base_url(self):
        result = StructureAnnotator().annotate('<img src="/a.png">')
        assert result.images[0].original_src == "/a.png"

    def test_srcset_and_lazy_attributes_removed(self):
        html = '<img src="/a.png" srcset="/a-2x.png 2x" loading="lazy" sizes="100vw">'
        result = StructureAnnotator().annotate(html)
        img = _soup(result.html).find("img")
        for attr in ("srcset", "loading", "sizes"):
            assert attr not in img.attrs

    def test_image_without_source_skipped_but_counted(self):
        html = '<img alt="broken"><img src="/ok.png">'
        result = StructureAnnotator().annotate(html)
        assert len(result.images) == 1
        assert result.images[0].id == "img-1"
        assert result.images[0].rewritten_src == "images/img-1.jpg"
        broken = _soup(result.html).find("img", alt="broken")
        assert not broken.has_attr("src")

    def test_custom_placeholder(self):
        result = StructureAnnotator("assets/{id}.png").annotate('<img src="/a.png">')
        assert result.images[0].rewritten_src == "assets/img-0.png"

    def test_rewritten_sources_match_manifest(self):
        html = '<img src="/a.png"><p><img src="/b.png"></p>'
        result = StructureAnnotator().annotate(html)
        srcs = [img["src"] for img in _soup(result.html).find_all("img")]
        assert srcs == [ref.rewritten_src for ref in result.images]


class TestResolveImageSource:
    def test_prefers_src(self):
        img = _soup('<img src="/a.png" data-src="/b.png">').find("img")
        assert resolve_image_source(img) == "/a.png"

    def test_data_src_when_src_missing(self):
        img = _soup('<img data-src="/b.png">').find("img")
        assert resolve_image_source(img) == "/b.png"

    def test_data_src_wins_over_srcset(self):
        img = _soup('<img src="" data-src="https://x/y.png" srcset="a.png 1x, b.png 2x">').find("img")
        assert resolve_image_source(img) == "https://x/y.png"

    def test_first_srcset_candidate(self):
        img = _soup('<img srcset="/small.png 1x, /large.png 2x">').find("img")
        assert resolve_image_source(img) == "/small.png"

    def test_nothing(self):
        img = _soup("<img>").find("img")
        assert resolve_image_source(img) == ""


class TestEmptyInput:
    def test_empty_string(self):
        result = StructureAnnotator().annotate("")
        assert result.html == ""
        assert result.toc == []
        assert result.images == []
