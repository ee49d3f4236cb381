#!/usr/bin/env python3
"""Citation list command line: add sources, list, remove, export."""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from citekit.core.config import EXPORT_FORMATS, CiteConfig, load_config
from citekit.core.models import CanonicalRecord, Style
from citekit.core.store import LIST_ORDERS, CitationStore
from citekit.exporters import export_all
from citekit.formatting.styles import format_citation
from citekit.parsing.extractor import extract
from citekit.sources.builder import build
from citekit.sources.models import CrossrefWork, ManualForm, OpenLibraryBook

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("cite")

DEFAULT_CONFIG = PROJECT_ROOT / "config" / "default.yaml"


# ── Add Commands ─────────────────────────────────────────────────────


def cmd_html(args, config: CiteConfig) -> None:
    html = Path(args.file).read_text(encoding="utf-8", errors="replace")
    partial = extract(html, url=args.url, final_url=args.final_url)
    _add_and_print(build(partial), args, config)


def cmd_crossref(args, config: CiteConfig) -> None:
    payload = _load_json(args.file)
    _add_and_print(build(CrossrefWork.from_response(payload)), args, config)


def cmd_openlibrary(args, config: CiteConfig) -> None:
    payload = _load_json(args.file)
    _add_and_print(build(OpenLibraryBook.from_response(payload, args.isbn)), args, config)


def cmd_manual(args, config: CiteConfig) -> None:
    with open(args.file) as f:
        form = yaml.safe_load(f) or {}
    _add_and_print(build(ManualForm.model_validate(form)), args, config)


def _add_and_print(record: CanonicalRecord, args, config: CiteConfig) -> None:
    style = _style(args, config)
    store = CitationStore(config.store.path)
    try:
        record_id = store.add(record)
    finally:
        store.close()
    print(f"[{record_id}] {format_citation(record, style)}")


# ── List Commands ────────────────────────────────────────────────────


def cmd_list(args, config: CiteConfig) -> None:
    style = _style(args, config)
    store = CitationStore(config.store.path)
    try:
        entries = store.entries(args.order)
    finally:
        store.close()

    if not entries:
        logger.info("No citations stored in %s", config.store.path)
        return
    for record_id, record in entries:
        print(f"[{record_id}] {format_citation(record, style)}")


def cmd_remove(args, config: CiteConfig) -> None:
    store = CitationStore(config.store.path)
    try:
        store.remove(args.id)
    finally:
        store.close()


def cmd_clear(args, config: CiteConfig) -> None:
    store = CitationStore(config.store.path)
    try:
        store.clear()
    finally:
        store.close()


def cmd_export(args, config: CiteConfig) -> None:
    context = config.context()
    if args.style:
        context = context.model_copy(update={"style": Style.parse(args.style)})

    store = CitationStore(config.store.path)
    try:
        records = store.records(args.order)
    finally:
        store.close()

    output_dir = args.dir or config.export.dir
    formats = args.formats or config.export.formats
    paths = export_all(records, context, output_dir, emphasis=config.emphasis, formats=formats)
    for name, path in paths.items():
        logger.info("  %s: %s", name, path)


# ── Helpers ──────────────────────────────────────────────────────────


def _style(args, config: CiteConfig) -> Style:
    return Style.parse(args.style) if args.style else config.style


def _load_json(path: str) -> dict:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


# ── CLI ──────────────────────────────────────────────────────────────


def main():
    parser = argparse.ArgumentParser(description="Build and format citations")
    parser.add_argument(
        "--config", default=str(DEFAULT_CONFIG), help="Path to config YAML file"
    )
    parser.add_argument(
        "--style",
        choices=[s.value for s in Style],
        default=None,
        help="Citation style (overrides config)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("html", help="Extract a saved web page")
    p.add_argument("file", help="HTML file")
    p.add_argument("--url", default=None, help="Address the page was requested from")
    p.add_argument("--final-url", default=None, help="Address after redirects")
    p.set_defaults(func=cmd_html)

    p = sub.add_parser("crossref", help="Add a DOI registry works response")
    p.add_argument("file", help="JSON file")
    p.set_defaults(func=cmd_crossref)

    p = sub.add_parser("openlibrary", help="Add a book registry response")
    p.add_argument("file", help="JSON file")
    p.add_argument("--isbn", required=True, help="ISBN the response was requested for")
    p.set_defaults(func=cmd_openlibrary)

    p = sub.add_parser("manual", help="Add a manual entry form (YAML or JSON)")
    p.add_argument("file", help="Form file")
    p.set_defaults(func=cmd_manual)

    p = sub.add_parser("list", help="Print stored citations")
    p.add_argument("--order", choices=LIST_ORDERS, default="recent")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("remove", help="Remove one stored citation")
    p.add_argument("id", help="Citation id")
    p.set_defaults(func=cmd_remove)

    p = sub.add_parser("clear", help="Remove every stored citation")
    p.set_defaults(func=cmd_clear)

    p = sub.add_parser("export", help="Write the bibliography to files")
    p.add_argument("--dir", default=None, help="Output directory (overrides config)")
    p.add_argument(
        "--formats", nargs="+", choices=EXPORT_FORMATS, default=None,
        help="Formats to write (overrides config)",
    )
    p.add_argument("--order", choices=LIST_ORDERS, default="added")
    p.set_defaults(func=cmd_export)

    args = parser.parse_args()
    config = load_config(args.config)

    try:
        args.func(args, config)
    except ValueError as exc:
        logger.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
