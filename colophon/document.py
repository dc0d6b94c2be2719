from __future__ import annotations

from typing import Iterator, Optional, Union

from lxml import etree as LXML_ET

XML_NS = "http://www.w3.org/XML/1998/namespace"


class OpfParseError(ValueError):
    pass


def tag_local_name(tag: object) -> str:
    if not tag or not isinstance(tag, str):
        return ""
    if "}" in tag:
        return tag.split("}", 1)[1]
    return tag


def _tag_namespace(tag: str) -> Optional[str]:
    if tag.startswith("{") and "}" in tag:
        return tag[1:].split("}", 1)[0]
    return None


def qualified_name(node: LXML_ET._Element) -> str:
    """Return the tag name as written in the source, e.g. ``dc:title``."""
    local = tag_local_name(node.tag)
    if node.prefix:
        return f"{node.prefix}:{local}"
    return local


def _attribute_prefix(node: LXML_ET._Element, namespace: str) -> Optional[str]:
    if namespace == XML_NS:
        return "xml"
    for prefix, uri in node.nsmap.items():
        if prefix and uri == namespace:
            return prefix
    return None


def _iter_children_by_local_name(node: LXML_ET._Element, local_name: str) -> list[LXML_ET._Element]:
    return [child for child in node if tag_local_name(child.tag) == local_name]


def iter_descendants_by_local_name(node: LXML_ET._Element, local_name: str) -> Iterator[LXML_ET._Element]:
    for child in node.iterdescendants():
        if tag_local_name(child.tag) == local_name:
            yield child


class OpfDocument:
    """Read-only, namespace-unaware view over a parsed Package Document.

    Selection works on local names only (``package > metadata title``
    matches ``dc:title`` as well as ``title``); callers that care about
    the prefix compare :func:`qualified_name` afterwards.
    """

    def __init__(self, root: LXML_ET._Element) -> None:
        self._root = root
        if tag_local_name(root.tag) == "package":
            self._package: Optional[LXML_ET._Element] = root
        else:
            self._package = next(iter_descendants_by_local_name(root, "package"), None)

    @property
    def root(self) -> LXML_ET._Element:
        return self._root

    @property
    def package(self) -> Optional[LXML_ET._Element]:
        return self._package

    def section(self, name: str) -> list[LXML_ET._Element]:
        """Direct children of ``package`` named *name* (``package > name``)."""
        if self._package is None:
            return []
        return _iter_children_by_local_name(self._package, name)

    def select(self, section: str, local_name: str, **attrs: str) -> list[LXML_ET._Element]:
        """Equivalent of ``package > section local_name[attr=value]...``."""
        found: list[LXML_ET._Element] = []
        for container in self.section(section):
            for node in iter_descendants_by_local_name(container, local_name):
                if all(self.get_attribute(node, key) == value for key, value in attrs.items()):
                    found.append(node)
        return found

    def select_first(self, section: str, local_name: str, **attrs: str) -> Optional[LXML_ET._Element]:
        matches = self.select(section, local_name, **attrs)
        return matches[0] if matches else None

    def select_token(self, section: str, local_name: str, attr: str, token: str) -> list[LXML_ET._Element]:
        """Equivalent of ``package > section local_name[attr~=token]``."""
        found: list[LXML_ET._Element] = []
        for node in self.select(section, local_name):
            value = self.get_attribute(node, attr)
            if value is not None and token in value.split():
                found.append(node)
        return found

    @staticmethod
    def attributes(node: LXML_ET._Element) -> dict[str, str]:
        """Attributes keyed by their written name (``opf:scheme``, ``id``)."""
        attrs: dict[str, str] = {}
        for key, value in node.attrib.items():
            namespace = _tag_namespace(key)
            local = tag_local_name(key)
            if namespace is None:
                attrs[local] = str(value)
                continue
            prefix = _attribute_prefix(node, namespace)
            attrs[f"{prefix}:{local}" if prefix else local] = str(value)
        return attrs

    @classmethod
    def get_attribute(cls, node: LXML_ET._Element, name: str) -> Optional[str]:
        if ":" not in name:
            value = node.attrib.get(name)
            return None if value is None else str(value)
        return cls.attributes(node).get(name)

    @staticmethod
    def text_content(node: Optional[LXML_ET._Element]) -> str:
        if node is None:
            return ""
        # string() skips comments and processing instructions.
        return str(node.xpath("string()"))


def parse_document(source: Union[str, bytes]) -> OpfDocument:
    if isinstance(source, str):
        raw = source.encode("utf-8")
        # lxml refuses str input carrying an encoding declaration.
        parser = LXML_ET.XMLParser(resolve_entities=False, no_network=True, encoding="utf-8")
    else:
        raw = source
        parser = LXML_ET.XMLParser(resolve_entities=False, no_network=True)
    if not raw.strip():
        raise OpfParseError("Package Document is empty")
    try:
        root = LXML_ET.fromstring(raw, parser=parser)
    except (LXML_ET.XMLSyntaxError, ValueError) as exc:
        raise OpfParseError(f"Malformed Package Document: {exc}") from exc
    return OpfDocument(root)


def get_metas(doc: OpfDocument, tag_name: str) -> list[LXML_ET._Element]:
    """All ``package > metadata`` descendants matching *tag_name*.

    ``dc:title`` selects on the local name ``title`` and keeps only the
    elements actually written as ``dc:title``.
    """
    prefixed = ":" in tag_name
    local_name = tag_name
    if prefixed:
        local_name = tag_name.split(":", 1)[1]
        if not local_name:
            return []
    nodes = doc.select("metadata", local_name)
    if not prefixed:
        return nodes
    return [node for node in nodes if qualified_name(node) == tag_name]


def get_meta(doc: OpfDocument, tag_name: str, text: bool = False) -> Union[LXML_ET._Element, str, None]:
    nodes = get_metas(doc, tag_name)
    if not nodes:
        return None
    if text:
        return doc.text_content(nodes[0])
    return nodes[0]
