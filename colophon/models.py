from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from langcodes import Language

from .identifiers import get_isbn

LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class Creator:
    name: str
    role: str = "unknown"
    attributes: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def display_seq(self) -> int:
        match = LEADING_INT_RE.match(self.attributes.get("display-seq") or "")
        return int(match.group(1)) if match else 0

    @property
    def for_filing(self) -> Optional[str]:
        return self.attributes.get("for-filing") or None


CreatorSet = dict[str, tuple[Creator, ...]]


@dataclass(frozen=True)
class Spine:
    items: tuple[str, ...] = ()
    toc: Optional[str] = None
    page_progression_direction: str = "ltr"


@dataclass(frozen=True)
class CoverImage:
    path: Optional[str] = None
    media_type: Optional[str] = None

    def __bool__(self) -> bool:
        return bool(self.path and self.media_type)


@dataclass(frozen=True)
class MetadataRecord:
    titles: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    description: Optional[str] = None
    publication_date: Optional[dt.date] = None
    publisher: Optional[str] = None
    identifiers: Mapping[str, Union[str, tuple[str, ...]]] = field(default_factory=lambda: MappingProxyType({}))
    creators: Mapping[str, tuple[Creator, ...]] = field(default_factory=lambda: MappingProxyType({}))
    authors: tuple[str, ...] = ()
    authors_for_filing: tuple[str, ...] = ()
    language: Optional[Language] = None
    cover_image: CoverImage = field(default_factory=CoverImage)
    copyright: Optional[str] = None
    cover_page: Optional[str] = None
    spine: Optional[Spine] = None
    manifest: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    subjects: tuple[str, ...] = ()
    series: Optional[str] = None

    @property
    def title(self) -> Optional[str]:
        return self.titles.get("main")

    @property
    def subtitle(self) -> Optional[str]:
        return self.titles.get("subtitle")

    @property
    def isbn(self) -> Optional[str]:
        return get_isbn(self.identifiers)


def creator_to_dict(creator: Creator) -> dict:
    return {
        "name": creator.name,
        "role": creator.role,
        "attributes": dict(creator.attributes),
    }


def spine_to_dict(spine: Optional[Spine]) -> Optional[dict]:
    if spine is None:
        return None
    return {
        "toc": spine.toc,
        "page_progression_direction": spine.page_progression_direction,
        "items": list(spine.items),
    }


def metadata_to_dict(meta: MetadataRecord) -> dict:
    identifiers: dict[str, Any] = {}
    for key, value in meta.identifiers.items():
        identifiers[key] = list(value) if isinstance(value, tuple) else value
    return {
        "title": meta.title,
        "subtitle": meta.subtitle,
        "titles": dict(meta.titles),
        "description": meta.description,
        "publication_date": meta.publication_date.isoformat() if meta.publication_date else None,
        "publisher": meta.publisher,
        "identifiers": identifiers,
        "isbn": meta.isbn,
        "creators": {role: [creator_to_dict(c) for c in group] for role, group in meta.creators.items()},
        "authors": list(meta.authors),
        "authors_for_filing": list(meta.authors_for_filing),
        "language": str(meta.language) if meta.language is not None else None,
        "cover_image": {"path": meta.cover_image.path, "media_type": meta.cover_image.media_type},
        "copyright": meta.copyright,
        "cover_page": meta.cover_page,
        "spine": spine_to_dict(meta.spine),
        "manifest": dict(meta.manifest),
        "subjects": list(meta.subjects),
        "series": meta.series,
    }
