from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Optional, Union

from lxml import etree as LXML_ET

from .document import OpfDocument

NO_SCHEME = "noScheme"
SCHEME_PREFIX_RE = re.compile(r"^.+:")


class RefineMode(enum.Enum):
    FLAT = "flat"
    GROUPED = "grouped"


@dataclass
class FlatRefinement:
    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    @property
    def element_id(self) -> Optional[str]:
        return self.values.get("id")


@dataclass
class GroupedRefinement:
    schemes: dict[str, dict[str, str]] = field(default_factory=lambda: {NO_SCHEME: {}})

    def scheme(self, name: str) -> dict[str, str]:
        return self.schemes.get(name, {})

    @property
    def element_id(self) -> Optional[str]:
        return self.schemes.get(NO_SCHEME, {}).get("id")


RefinementView = Union[FlatRefinement, GroupedRefinement]


def _strip_scheme(name: str) -> str:
    return SCHEME_PREFIX_RE.sub("", name)


def refine_meta(
    doc: OpfDocument,
    node: LXML_ET._Element,
    mode: RefineMode = RefineMode.GROUPED,
    drop_schemes: bool = False,
) -> RefinementView:
    """Merge an element's attributes with the ``<meta refines="#id">`` declarations that extend it.

    Given::

        <dc:identifier id="foo" opf:some-prop="florp">txt</dc:identifier>
        <meta refines="#foo" property="my-prop" scheme="my:scheme">some-val</meta>
        <meta refines="#foo" property="my-prop3">some-val3</meta>

    grouped mode yields ``{"noScheme": {"id": "foo", "opf:some-prop": "florp",
    "my-prop3": "some-val3"}, "my:scheme": {"my-prop": "some-val"}}`` while
    flat mode merges every property into one mapping. ``drop_schemes``
    turns ``opf:some-prop`` into ``some-prop``.
    """
    base: dict[str, str] = {}
    for name, value in doc.attributes(node).items():
        if drop_schemes:
            name = _strip_scheme(name)
        base[name] = value

    view: RefinementView
    if mode is RefineMode.FLAT:
        view = FlatRefinement(values=base)
    else:
        view = GroupedRefinement(schemes={NO_SCHEME: base})

    element_id = base.get("id")
    if not element_id:
        return view

    for meta in doc.select("metadata", "meta", refines=f"#{element_id}"):
        prop = doc.get_attribute(meta, "property")
        if not prop:
            continue
        if drop_schemes:
            prop = _strip_scheme(prop)
        value = doc.text_content(meta)
        if isinstance(view, FlatRefinement):
            view.values[prop] = value
        else:
            scheme = doc.get_attribute(meta, "scheme") or NO_SCHEME
            view.schemes.setdefault(scheme, {})[prop] = value
    return view
