from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Union

from isbnlib import NotValidISBNError, is_isbn10, is_isbn13, mask
from lxml import etree as LXML_ET

from .document import OpfDocument, get_metas
from .refine import GroupedRefinement, RefineMode, refine_meta

logger = logging.getLogger("colophon.identifiers")

IdentifierSet = dict[str, Union[str, tuple[str, ...]]]

NON_DIGIT_RE = re.compile(r"[^\d]+")
ISBN_ID_RE = re.compile(r"^isbn", re.IGNORECASE)
ONIX_SCHEME = "onix:codelist5"

# https://www.stison.com/onix/codelists/onix-codelist-5.htm
ONIX_CODE_LIST_5 = MappingProxyType(
    {
        "1": "Proprietary",
        "2": "ISBN-10",
        "3": "GTIN-13",
        "4": "UPC",
        "5": "ISMN-10",
        "6": "DOI",
        "13": "LCCN",
        "14": "GTIN-14",
        "15": "ISBN-13",
        "17": "Legal deposit number",
        "22": "URN",
        "23": "OCLC number",
        "25": "ISMN-13",
        "26": "ISBN-A",
        "27": "JP e-code",
        "28": "OLCC number",
        "29": "JP Magazine ID",
        "30": "UPC12+5",
        "31": "BNF Control number",
        "35": "ARK",
    }
)
ISBN_LABELS = frozenset({"ISBN-10", "ISBN-13"})


def digits_only(value: str) -> str:
    return NON_DIGIT_RE.sub("", value or "")


def is_valid_isbn(digits: str) -> bool:
    return bool(is_isbn10(digits) or is_isbn13(digits))


def format_isbn(digits: str) -> str:
    """Hyphenate a bare ISBN, keeping the digits when the range table cannot.

    A 10 or 13 digit string whose check digit is wrong is returned as is,
    without hyphens: isbnlib only masks valid numbers.
    """
    if not is_valid_isbn(digits):
        logger.debug("checksum failed for %r, keeping digits", digits)
        return digits
    try:
        formatted = mask(digits)
    except NotValidISBNError:
        logger.debug("cannot hyphenate %r, keeping digits", digits)
        return digits
    return formatted or digits


def set_isbn(identifiers: IdentifierSet, text: str) -> None:
    digits = digits_only(text)
    if len(digits) == 10:
        identifiers["ISBN-10"] = format_isbn(digits)
    elif len(digits) == 13:
        identifiers["ISBN-13"] = format_isbn(digits)
    else:
        logger.debug("discarding ISBN candidate %r with %d digits", text, len(digits))


def _scheme_isbn(doc: OpfDocument, node: LXML_ET._Element, identifiers: IdentifierSet) -> bool:
    # <dc:identifier opf:scheme="ISBN">0-330-32002-5</dc:identifier>
    scheme = doc.get_attribute(node, "opf:scheme")
    if not scheme or scheme.upper() != "ISBN":
        return False
    set_isbn(identifiers, doc.text_content(node))
    return True


def _onix_identifier(doc: OpfDocument, node: LXML_ET._Element, identifiers: IdentifierSet) -> bool:
    # <dc:identifier id="isbn13">urn:isbn:9780741014559</dc:identifier>
    # <meta refines="#isbn13" property="identifier-type" scheme="onix:codelist5">15</meta>
    view = refine_meta(doc, node, RefineMode.GROUPED)
    if not isinstance(view, GroupedRefinement):
        return False
    code = view.scheme(ONIX_SCHEME).get("identifier-type")
    if not code:
        return False
    label = ONIX_CODE_LIST_5.get(code.strip())
    if not label:
        logger.debug("unknown ONIX code list 5 identifier type %r", code)
        return False
    text = doc.text_content(node)
    identifiers[label] = format_isbn(digits_only(text)) if label in ISBN_LABELS else text
    return True


def _isbn_like_id(doc: OpfDocument, node: LXML_ET._Element, identifiers: IdentifierSet) -> bool:
    # <dc:identifier id="isbn9781509830718">9781509830718</dc:identifier>
    element_id = doc.get_attribute(node, "id")
    if not element_id or not ISBN_ID_RE.match(element_id):
        return False
    set_isbn(identifiers, doc.text_content(node))
    return True


IDENTIFIER_STRATEGIES: tuple[Callable[[OpfDocument, LXML_ET._Element, IdentifierSet], bool], ...] = (
    _scheme_isbn,
    _onix_identifier,
    _isbn_like_id,
)


def parse_identifiers(doc: OpfDocument) -> IdentifierSet:
    """Collect the EPUB UUID, URIs, ISBNs and any other ONIX code list 5 identifiers.

    Returns e.g. ``{"UUID": "124214214", "ISBN-10": "0-330-32002-5",
    "DOI": "10.1038/nature04586"}``.
    """
    package = doc.package
    if package is None:
        return {}
    nodes = get_metas(doc, "dc:identifier")
    if not nodes:
        return {}

    # <package unique-identifier="..."> names the <dc:identifier> holding the UUID.
    epub_id = doc.get_attribute(package, "unique-identifier")
    identifiers: IdentifierSet = {}
    for node in nodes:
        if epub_id and doc.get_attribute(node, "id") == epub_id:
            identifiers["UUID"] = doc.text_content(node)

        if doc.get_attribute(node, "opf:scheme") == "URI":
            uris = identifiers.get("URIs", ())
            if isinstance(uris, tuple):
                identifiers["URIs"] = (*uris, doc.text_content(node))

        for strategy in IDENTIFIER_STRATEGIES:
            if strategy(doc, node, identifiers):
                break

    # Some books use the ISBN as their UUID; only trust it when the checksum holds.
    uuid = identifiers.get("UUID")
    if isinstance(uuid, str) and "ISBN-10" not in identifiers and "ISBN-13" not in identifiers:
        digits = digits_only(uuid)
        if is_valid_isbn(digits):
            set_isbn(identifiers, digits)
    return identifiers


def get_isbn(identifiers: Mapping[str, Union[str, tuple[str, ...]]]) -> Optional[str]:
    for key in ("ISBN-13", "ISBN-10"):
        value = identifiers.get(key)
        if isinstance(value, str) and value:
            return value
    return None
