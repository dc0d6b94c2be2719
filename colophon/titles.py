from __future__ import annotations

from .document import OpfDocument, get_metas
from .refine import RefineMode, refine_meta


def parse_titles(doc: OpfDocument) -> dict[str, str]:
    """Map title types to titles, e.g. ``{"main": ..., "subtitle": ...}``.

    The type comes from a ``title-type`` attribute or refinement. The first
    untyped title stands in for ``main`` when nothing is explicitly marked
    as such; later untyped titles are ignored.
    """
    titles: dict[str, str] = {}
    for node in get_metas(doc, "dc:title"):
        view = refine_meta(doc, node, RefineMode.FLAT, drop_schemes=True)
        title_type = view.get("title-type")
        if not title_type:
            if not titles.get("main"):
                titles["main"] = doc.text_content(node)
            continue
        titles[title_type] = doc.text_content(node)
    return titles
