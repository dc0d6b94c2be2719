from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Callable, Optional

from lxml import etree as LXML_ET

from .document import OpfDocument
from .models import CoverImage

logger = logging.getLogger("colophon.cover")

SUPPORTED_COVER_MEDIA_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/svg+xml"})
SUPPORTED_COVER_EXTENSIONS = MappingProxyType(
    {
        "jpeg": "image/jpeg",
        "jpg": "image/jpeg",
        "png": "image/png",
        "gif": "image/gif",
        "svg": "image/svg+xml",
    }
)


def cover_media_type(node: Optional[LXML_ET._Element]) -> Optional[str]:
    """Media type of a supported cover image element, else ``None``.

    Without a ``media-type`` attribute the type is guessed from the
    ``href`` extension.
    """
    if node is None:
        return None
    media_type = OpfDocument.get_attribute(node, "media-type")
    if not media_type:
        href = OpfDocument.get_attribute(node, "href")
        if not href or "." not in href:
            return None
        return SUPPORTED_COVER_EXTENSIONS.get(href.rsplit(".", 1)[1].lower())
    if media_type in SUPPORTED_COVER_MEDIA_TYPES:
        return media_type
    return None


def is_valid_cover_image_element(node: Optional[LXML_ET._Element]) -> bool:
    return cover_media_type(node) is not None


def _manifest_cover_property(doc: OpfDocument) -> Optional[LXML_ET._Element]:
    # <item properties="cover-image nav"> ; properties is a space separated list
    matches = doc.select_token("manifest", "item", "properties", "cover-image")
    return matches[0] if matches else None


def _meta_cover_image(doc: OpfDocument) -> Optional[LXML_ET._Element]:
    # The <meta> itself is validated here, its content= is never followed.
    return doc.select_first("metadata", "meta", name="cover-image")


def _meta_cover(doc: OpfDocument) -> Optional[LXML_ET._Element]:
    # <meta name="cover" content="item-id"> pointing into the manifest
    meta = doc.select_first("metadata", "meta", name="cover")
    if meta is None or is_valid_cover_image_element(meta):
        return meta
    item_id = doc.get_attribute(meta, "content")
    if not item_id:
        return meta
    return doc.select_first("manifest", "item", id=item_id)


def _manifest_cover_id(doc: OpfDocument) -> Optional[LXML_ET._Element]:
    for item_id in ("cover-image", "cover"):
        node = doc.select_first("manifest", "item", id=item_id)
        if is_valid_cover_image_element(node):
            return node
    return None


COVER_STRATEGIES: tuple[Callable[[OpfDocument], Optional[LXML_ET._Element]], ...] = (
    _manifest_cover_property,
    _meta_cover_image,
    _meta_cover,
    _manifest_cover_id,
)


def parse_cover_image(doc: OpfDocument) -> CoverImage:
    for strategy in COVER_STRATEGIES:
        node = strategy(doc)
        media_type = cover_media_type(node)
        if node is None or media_type is None:
            continue
        return CoverImage(path=doc.get_attribute(node, "href"), media_type=media_type)
    logger.debug("no cover image found")
    return CoverImage()


def get_cover_page(doc: OpfDocument) -> Optional[str]:
    # <guide><reference href="text/titlepage.xhtml" title="Cover" type="cover"/></guide>
    node = doc.select_first("guide", "reference", type="cover")
    if node is None:
        return None
    return doc.get_attribute(node, "href")
