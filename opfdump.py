#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from colophon.config import load_settings
from colophon.container import EpubContainerError, parse_epub
from colophon.opf import OpfParseError, parse_opf
from colophon.report import render_json, render_report


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Print the metadata of an EPUB Package Document (.opf) or EPUB file."
    )
    parser.add_argument("input", help="Input .opf or .epub file path")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a text report")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log skipped metadata")
    return parser.parse_args(argv)


def main(argv: list[str]) -> int:
    settings = load_settings()
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Input file not found: {input_path}", file=sys.stderr)
        return 1

    opf_path: Optional[str] = None
    try:
        if input_path.suffix.lower() == ".epub":
            opf_path, meta = parse_epub(input_path)
        else:
            meta = parse_opf(input_path.read_bytes())
    except (OpfParseError, EpubContainerError) as exc:
        print(f"Failed to read {input_path}: {exc}", file=sys.stderr)
        return 1

    if args.json or settings.output == "json":
        print(render_json(meta, opf_path))
    else:
        print(render_report(meta, opf_path), end="")
    return 0


def run() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
