from __future__ import annotations

import logging
from typing import Optional

from .document import OpfDocument
from .models import Spine

logger = logging.getLogger("colophon.spine")


def parse_manifest(doc: OpfDocument) -> dict[str, str]:
    """``<item id="cover" href="cover.jpeg"/>`` -> ``{"cover": "cover.jpeg"}``."""
    items: dict[str, str] = {}
    for node in doc.select("manifest", "item"):
        item_id = doc.get_attribute(node, "id")
        href = doc.get_attribute(node, "href")
        if not item_id or not href:
            continue
        items[item_id] = href
    return items


def parse_spine(doc: OpfDocument, manifest: Optional[dict[str, str]] = None) -> Optional[Spine]:
    spines = doc.section("spine")
    if not spines:
        return None
    spine = spines[0]
    if manifest is None:
        manifest = parse_manifest(doc)

    hrefs: list[str] = []
    for itemref in doc.select("spine", "itemref"):
        idref = doc.get_attribute(itemref, "idref")
        if not idref:
            continue
        if doc.get_attribute(itemref, "linear") == "no":
            continue
        href = manifest.get(idref)
        if not href:
            logger.debug("spine itemref %r has no manifest entry", idref)
            continue
        hrefs.append(href)

    return Spine(
        items=tuple(hrefs),
        toc=doc.get_attribute(spine, "toc"),
        page_progression_direction=doc.get_attribute(spine, "page-progression-direction") or "ltr",
    )
