from __future__ import annotations

import logging
import posixpath
import zipfile
from pathlib import Path, PurePosixPath

from lxml import etree as LXML_ET

from .document import iter_descendants_by_local_name, tag_local_name
from .models import MetadataRecord
from .opf import parse_opf

logger = logging.getLogger("colophon.container")

CONTAINER_PATH = "META-INF/container.xml"


class EpubContainerError(ValueError):
    pass


def _canonical_zip_member(name: str) -> str:
    normalized = posixpath.normpath((name or "").replace("\\", "/")).lstrip("/")
    while normalized.startswith("../"):
        normalized = normalized[3:]
    return "" if normalized in {"", "."} else normalized


def _zip_member_index(zf: zipfile.ZipFile) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for info in zf.infolist():
        canonical = _canonical_zip_member(info.filename)
        if canonical and canonical not in mapping:
            mapping[canonical] = info.filename
    return mapping


def resolve_href(opf_path: str, href: str) -> str:
    """Archive member path of a manifest ``href`` relative to the Package Document."""
    opf_dir = PurePosixPath(opf_path).parent
    joined = posixpath.normpath(posixpath.join(opf_dir.as_posix(), href.split("#", 1)[0]))
    return _canonical_zip_member(joined)


def _opf_path_from_container(zf: zipfile.ZipFile, index: dict[str, str]) -> str:
    member = index.get(CONTAINER_PATH)
    if member is None:
        raise EpubContainerError(f"Missing {CONTAINER_PATH}")
    parser = LXML_ET.XMLParser(resolve_entities=False, no_network=True)
    try:
        root = LXML_ET.fromstring(zf.read(member), parser=parser)
    except LXML_ET.XMLSyntaxError as exc:
        raise EpubContainerError(f"Malformed {CONTAINER_PATH}: {exc}") from exc

    rootfiles = [root] if tag_local_name(root.tag) == "rootfile" else []
    rootfiles.extend(iter_descendants_by_local_name(root, "rootfile"))
    if not rootfiles:
        raise EpubContainerError(f"No representations listed in {CONTAINER_PATH}")
    if len(rootfiles) > 1:
        logger.info("%d representations in %s, using the first", len(rootfiles), CONTAINER_PATH)

    full_path = _canonical_zip_member((rootfiles[0].attrib.get("full-path") or "").strip())
    if not full_path:
        raise EpubContainerError("Failed to find the Package Document (.opf) path")
    return full_path


def read_container_opf(epub_file: Path) -> tuple[str, bytes]:
    """Return the Package Document path and raw bytes of an ``.epub``."""
    try:
        with zipfile.ZipFile(epub_file, "r") as zf:
            index = _zip_member_index(zf)
            opf_path = _opf_path_from_container(zf, index)
            member = index.get(opf_path)
            if member is None:
                raise EpubContainerError(f"Package Document {opf_path} not found in archive")
            return opf_path, zf.read(member)
    except zipfile.BadZipFile as exc:
        raise EpubContainerError(f"{epub_file} is not a zip archive") from exc


def parse_epub(epub_file: Path) -> tuple[str, MetadataRecord]:
    opf_path, raw = read_container_opf(epub_file)
    return opf_path, parse_opf(raw)
