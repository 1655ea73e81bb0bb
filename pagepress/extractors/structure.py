"""Structural annotation of sanitized content.

A single document-order walk that

* gives every non-empty heading a stable ``<tag>-<n>`` anchor id and records
  it in the table of contents, and
* catalogs images, rewriting each ``src`` to a placeholder path that the
  packaging step later fills with the downloaded file.  Image ids count
  every ``<img>``, so one without a source still consumes its number.
"""

from __future__ import annotations

import logging
from typing import NamedTuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from pagepress.items import ImageRef, TocEntry

logger = logging.getLogger(__name__)

HEADING_TAGS: tuple[str, ...] = ("h1", "h2", "h3", "h4", "h5", "h6")

IMAGE_STYLE = "max-width: 100%; height: auto; display: block; margin: 1em 0;"

# Attributes that would let a reader load something other than the rewritten src
_IMAGE_ATTRS_TO_STRIP: tuple[str, ...] = (
    "loading",
    "srcset",
    "sizes",
    "data-src",
    "data-srcset",
    "data-lazy-src",
    "data-original",
    "data-original-src",
)


class AnnotatedContent(NamedTuple):
    html: str
    toc: list[TocEntry]
    images: list[ImageRef]


def resolve_image_source(img: Tag) -> str:
    """Return the best source for *img*: ``src`` -> ``data-src`` -> first ``srcset`` URL."""
    src = str(img.get("src") or "").strip()
    if src:
        return src
    data_src = str(img.get("data-src") or "").strip()
    if data_src:
        return data_src
    srcset = str(img.get("srcset") or "").strip()
    if srcset:
        first = srcset.split(",")[0].split()
        if first:
            return first[0]
    return ""


class StructureAnnotator:
    """Assign heading anchors and build the image manifest."""

    def __init__(self, image_placeholder: str = "images/{id}.jpg") -> None:
        self._image_placeholder = image_placeholder

    def annotate(self, html: str, base_url: str = "") -> AnnotatedContent:
        soup = BeautifulSoup(html or "", "lxml")
        root = soup.body
        if root is None:
            return AnnotatedContent(html="", toc=[], images=[])

        toc: list[TocEntry] = []
        images: list[ImageRef] = []
        per_tag: dict[str, int] = {}
        img_index = 0

        for el in root.find_all([*HEADING_TAGS, "img"]):
            if not isinstance(el, Tag):
                continue
            if el.name == "img":
                ref = self._rewrite_image(el, img_index, base_url)
                img_index += 1
                if ref is not None:
                    images.append(ref)
                continue

            index = per_tag.get(el.name, 0)
            per_tag[el.name] = index + 1
            title = " ".join(el.get_text(separator=" ").split())
            if not title:
                continue
            anchor_id = f"{el.name}-{index}"
            el["id"] = anchor_id
            toc.append(TocEntry(level=int(el.name[1]), title=title, anchor_id=anchor_id))

        logger.debug("Annotated %d headings and %d images", len(toc), len(images))
        return AnnotatedContent(html=root.decode_contents(), toc=toc, images=images)

    def _rewrite_image(self, img: Tag, index: int, base_url: str) -> ImageRef | None:
        source = resolve_image_source(img)
        if not source:
            return None
        if base_url and not source.startswith("data:"):
            source = urljoin(base_url, source)

        image_id = f"img-{index}"
        placeholder = self._image_placeholder.format(id=image_id)
        img["src"] = placeholder
        for attr in _IMAGE_ATTRS_TO_STRIP:
            if attr in img.attrs:
                del img[attr]
        img["style"] = IMAGE_STYLE
        return ImageRef(id=image_id, rewritten_src=placeholder, original_src=source)
