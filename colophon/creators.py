from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping

from .document import OpfDocument, get_metas
from .models import Creator, CreatorSet
from .refine import RefineMode, refine_meta

logger = logging.getLogger("colophon.creators")

UNKNOWN_ROLE = "unknown"
AUTHOR_ROLE = "aut"


def parse_creators(doc: OpfDocument) -> CreatorSet:
    groups: dict[str, list[Creator]] = {}
    for node in get_metas(doc, "dc:creator"):
        attrs = dict(refine_meta(doc, node, RefineMode.FLAT, drop_schemes=True).values)
        name = doc.text_content(node)
        attrs["name"] = name
        role = attrs.get("role") or UNKNOWN_ROLE
        attrs["role"] = role
        groups.setdefault(role, []).append(Creator(name=name, role=role, attributes=MappingProxyType(attrs)))

    creators: CreatorSet = {
        role: tuple(sorted(group, key=lambda creator: creator.display_seq)) for role, group in groups.items()
    }

    if UNKNOWN_ROLE in creators and AUTHOR_ROLE not in creators:
        logger.debug("treating %d creator(s) without a role as authors", len(creators[UNKNOWN_ROLE]))
        # Only the group key changes; each record keeps the role it was parsed with.
        creators[AUTHOR_ROLE] = creators.pop(UNKNOWN_ROLE)
    return creators


def filing_name(creator: Creator) -> str:
    """``Jane Q. Doe`` -> ``Doe, Jane Q.`` unless a ``for-filing`` refinement names the form."""
    explicit = creator.for_filing
    if explicit:
        return explicit
    parts = creator.name.split()
    if len(parts) <= 1:
        return creator.name
    return f"{parts[-1]}, {' '.join(parts[:-1])}"


def get_authors(creators: Mapping[str, tuple[Creator, ...]], for_filing: bool = False) -> list[str]:
    authors = creators.get(AUTHOR_ROLE, ())
    if for_filing:
        return [filing_name(author) for author in authors]
    return [author.name for author in authors]
