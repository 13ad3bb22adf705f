#!/usr/bin/env python3
"""Generate asset label sheets from an inventory file."""

from __future__ import annotations

import argparse
import logging
import os
import re
from pathlib import Path
from typing import List, Optional, Sequence

from dotenv import load_dotenv

from domain_types import InventoryItem
from inventory_store import InventoryError, InventoryStore
from label_templates import get_template, template_ids
from label_templates.label_data import build_label_records
from label_templates.label_generation import render_pdf
from label_templates.label_types import LabelSettings
from label_templates.printing import compose, layout_profile

DEFAULT_OUTPUTS = {
    "print": "etiquetas.html",
    "export": "etiquetas_a4.html",
    "pdf": "etiquetas.pdf",
}


def filter_items_by_code(
    items: Sequence[InventoryItem],
    pattern: Optional[str],
) -> List[InventoryItem]:
    """Apply the code regex filter declared by the user."""

    if not pattern:
        return list(items)

    try:
        code_re = re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        raise SystemExit(
            f"Invalid --code-pattern regex '{pattern}': {exc}") from exc

    return [item for item in items if code_re.search(item.code)]


def generate(
    store: InventoryStore,
    settings: LabelSettings,
    output_format: str,
    output_path: Optional[str],
    code_pattern: Optional[str] = None,
    skip: int = 0,
    draw_outline: bool = False,
) -> str:
    """Build the label batch and write it in ``output_format``."""

    items = filter_items_by_code(store.list_items(), code_pattern)
    records = build_label_records(items, settings, store.location_name)
    output_path = output_path or DEFAULT_OUTPUTS[output_format]

    if not records:
        return "No items matched the provided filters; no output generated."

    if output_format == "pdf":
        return render_pdf(
            output_path,
            records,
            settings.template,
            include_qr=settings.include_qr,
            include_location=settings.include_location,
            include_date=settings.include_date,
            skip=skip,
            draw_outline=draw_outline,
        )

    if skip or draw_outline:
        raise SystemExit("--skip and --draw-outline are only supported with --format pdf.")

    document = compose(
        records,
        settings.template,
        layout_profile(output_format),
        include_qr=settings.include_qr,
        include_location=settings.include_location,
        include_date=settings.include_date,
    )
    Path(output_path).write_text(document, encoding="utf-8")
    return f"Wrote {len(records)} label(s) to {output_path}"


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for generating asset labels."""

    parser = argparse.ArgumentParser(
        description="Inventory -> printable asset labels (HTML or PDF)"
    )
    parser.add_argument(
        "--data",
        default=os.getenv("ASSET_LABELS_DATA_FILE"),
        help=(
            "Inventory JSON file (defaults to ASSET_LABELS_DATA_FILE from the "
            "environment/.env)."
        ),
    )
    parser.add_argument("-o", "--output")
    parser.add_argument(
        "-t", "--template",
        default="standard",
        choices=list(template_ids()),
        help="Label template identifier (default: standard).",
    )
    parser.add_argument(
        "-f", "--format",
        default="print",
        choices=sorted(DEFAULT_OUTPUTS),
        help=(
            "print: browser print page, export: A4 page for print-to-file, "
            "pdf: PDF document (default: print)."
        ),
    )
    parser.add_argument("--no-qr", action="store_true", help="Leave out the QR code.")
    parser.add_argument(
        "--no-location", action="store_true", help="Leave out the location line.")
    parser.add_argument("--no-date", action="store_true", help="Leave out the date line.")
    parser.add_argument(
        "-c", "--code-pattern",
        help="Case-insensitive regex filter applied to item codes.",
    )
    parser.add_argument(
        "-s", "--skip",
        type=int,
        default=0,
        help="Number of labels to skip at start of first sheet (pdf only)",
    )
    parser.add_argument(
        "-d", "--draw-outline",
        action="store_true",
        help="Draw outline around every label (pdf only)",
    )
    parser.add_argument(
        "--web",
        action="store_true",
        help="Start the local web UI instead of writing a file.",
    )
    parser.add_argument(
        "--web-host",
        default="127.0.0.1",
        help="Host/IP for the web UI (default: 127.0.0.1).",
    )
    parser.add_argument(
        "--web-port",
        type=int,
        default=4000,
        help="Port for the web UI (default: 4000).",
    )
    parser.add_argument("-v", "--verbose", action="store_true")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else os.getenv(
            "ASSET_LABELS_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    if args.skip < 0:
        raise SystemExit("--skip must not be negative.")

    try:
        store = InventoryStore.from_json_file(args.data) if args.data else InventoryStore()
    except InventoryError as exc:
        raise SystemExit(str(exc)) from exc

    if args.web:
        from asset_labels_web import run_web_app

        run_web_app(store=store, host=args.web_host, port=args.web_port)
        return 0

    if not args.data:
        raise SystemExit("An inventory file is required (--data or ASSET_LABELS_DATA_FILE).")

    settings = LabelSettings(
        template=get_template(args.template).id,
        include_qr=not args.no_qr,
        include_location=not args.no_location,
        include_date=not args.no_date,
    )
    message = generate(
        store,
        settings,
        args.format,
        args.output,
        code_pattern=args.code_pattern,
        skip=args.skip,
        draw_outline=args.draw_outline,
    )

    print(message)
    return 0


if __name__ == "__main__":

    load_dotenv()

    main()
