from __future__ import annotations

import datetime as dt
import logging
import re
from types import MappingProxyType
from typing import Optional, Union

from .cover import get_cover_page, parse_cover_image
from .creators import get_authors, parse_creators
from .document import OpfDocument, OpfParseError, get_meta, get_metas, parse_document
from .identifiers import parse_identifiers
from .language import parse_language
from .models import MetadataRecord
from .spine import parse_manifest, parse_spine
from .titles import parse_titles

__all__ = ["OpfParseError", "parse_opf", "parse_publication_date", "resolve_document"]

logger = logging.getLogger("colophon.opf")

DATE_RE = re.compile(r"^\s*(\d{4})(?:-(\d{1,2})(?:-(\d{1,2}))?)?(?:[T\s].*)?\s*$")


def parse_publication_date(raw: Optional[str]) -> Optional[dt.date]:
    """``2017``, ``2017-05`` and ``2017-05-03T10:00:00Z`` style ``dc:date`` values."""
    if not raw:
        return None
    match = DATE_RE.match(raw)
    if not match:
        logger.debug("unparseable publication date %r", raw)
        return None
    year, month, day = match.groups()
    try:
        return dt.date(int(year), int(month or 1), int(day or 1))
    except ValueError:
        logger.debug("publication date %r is not a calendar date", raw)
        return None


def _text_meta(doc: OpfDocument, tag_name: str) -> Optional[str]:
    value = get_meta(doc, tag_name, text=True)
    return value if isinstance(value, str) else None


def _subjects(doc: OpfDocument) -> tuple[str, ...]:
    values = (doc.text_content(node).strip() for node in get_metas(doc, "dc:subject"))
    return tuple(value for value in values if value)


def _series(doc: OpfDocument) -> Optional[str]:
    for node in doc.select("metadata", "meta", property="belongs-to-collection"):
        value = doc.text_content(node).strip()
        if value:
            return value
    node = doc.select_first("metadata", "meta", name="calibre:series")
    if node is not None:
        return (doc.get_attribute(node, "content") or "").strip() or None
    return None


def resolve_document(doc: OpfDocument) -> MetadataRecord:
    manifest = parse_manifest(doc)
    creators = parse_creators(doc)
    return MetadataRecord(
        titles=MappingProxyType(parse_titles(doc)),
        description=_text_meta(doc, "dc:description"),
        publication_date=parse_publication_date(_text_meta(doc, "dc:date")),
        publisher=_text_meta(doc, "dc:publisher"),
        identifiers=MappingProxyType(parse_identifiers(doc)),
        creators=MappingProxyType(creators),
        authors=tuple(get_authors(creators)),
        authors_for_filing=tuple(get_authors(creators, for_filing=True)),
        language=parse_language(_text_meta(doc, "dc:language")),
        cover_image=parse_cover_image(doc),
        copyright=_text_meta(doc, "dc:rights"),
        cover_page=get_cover_page(doc),
        spine=parse_spine(doc, manifest),
        manifest=MappingProxyType(manifest),
        subjects=_subjects(doc),
        series=_series(doc),
    )


def parse_opf(source: Union[str, bytes]) -> MetadataRecord:
    """Resolve a Package Document into a :class:`MetadataRecord`.

    Raises :class:`OpfParseError` when the text is not well-formed XML;
    everything after the parse degrades to empty values instead of failing.
    """
    doc = parse_document(source)
    return resolve_document(doc)
