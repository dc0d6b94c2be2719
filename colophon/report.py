from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .container import resolve_href
from .models import MetadataRecord, metadata_to_dict

REPORT_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


@lru_cache(maxsize=1)
def _report_template_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(REPORT_TEMPLATES_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


def render_report(meta: MetadataRecord, opf_path: Optional[str] = None) -> str:
    """Plain-text summary of a record; hrefs become archive paths when *opf_path* is known."""

    def member(href: Optional[str]) -> Optional[str]:
        if not href or not opf_path:
            return href
        return resolve_href(opf_path, href)

    spine_members = [member(href) for href in meta.spine.items] if meta.spine else []
    return _report_template_env().get_template("report.txt.j2").render(
        meta=meta,
        cover_member=member(meta.cover_image.path),
        spine_members=spine_members,
    )


def render_json(meta: MetadataRecord, opf_path: Optional[str] = None) -> str:
    data = metadata_to_dict(meta)
    if opf_path:
        data["opf_path"] = opf_path
    return json.dumps(data, ensure_ascii=False, indent=2)
