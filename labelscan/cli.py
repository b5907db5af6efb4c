"""CLI entry point for labelscan."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from .capture import active_definitions
from .config import LabelscanConfig, load_config
from .display import classify_barcode
from .ocr import LABEL_FORMATS, OCR_PROVIDERS, filter_label_text
from .ocr.formats import collapse_whitespace
from .scan import ScanResult, scan_barcode, scan_fields, scan_text


def main(argv: list[str] | None = None) -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="labelscan",
        description="Normalize barcode, OCR and label-capture scans into a label record",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="path to the configuration file (TOML)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="log decoding decisions"
    )

    sub = parser.add_subparsers(dest="command")

    # barcode
    barcode_parser = sub.add_parser("barcode", help="decode a barcode payload")
    barcode_parser.add_argument("payload", help="raw payload; '|' stands for GS")
    barcode_parser.add_argument("--json", action="store_true", help="output JSON")

    # ocr
    ocr_parser = sub.add_parser("ocr", help="extract a label record from OCR text")
    ocr_parser.add_argument(
        "file", nargs="?", default="-", help="text file, or '-' for stdin"
    )
    ocr_parser.add_argument(
        "--provider", choices=OCR_PROVIDERS, default=None,
        help="OCR engine that produced the text",
    )
    ocr_parser.add_argument(
        "--no-correct", action="store_true",
        help="skip the batch digit/letter correction",
    )
    ocr_parser.add_argument(
        "--no-filter", action="store_true",
        help="keep noisy lines in the OCR text",
    )
    ocr_parser.add_argument(
        "--explain", action="store_true", help="show every format's candidate"
    )
    ocr_parser.add_argument("--json", action="store_true", help="output JSON")

    # fields
    fields_parser = sub.add_parser(
        "fields", help="map label-capture fields from a JSON file"
    )
    fields_parser.add_argument("file", help="JSON array of capture fields")
    fields_parser.add_argument("--json", action="store_true", help="output JSON")

    # formats / definitions
    sub.add_parser("formats", help="list OCR label formats")
    sub.add_parser("definitions", help="list label-capture field definitions")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    match args.command:
        case "barcode":
            _cmd_barcode(config, args)
        case "ocr":
            _cmd_ocr(config, args)
        case "fields":
            _cmd_fields(config, args)
        case "formats":
            _cmd_formats()
        case "definitions":
            _cmd_definitions(config)


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        print(f"Cannot read {path}: {e}", file=sys.stderr)
        sys.exit(1)


def _print_result(config: LabelscanConfig, result: ScanResult, as_json: bool) -> None:
    if as_json:
        data = {
            "kind": result.kind,
            "record": result.record.to_dict(),
            "raw": result.raw_text,
        }
        if result.provider:
            data["provider"] = result.provider
        print(json.dumps(data, ensure_ascii=False, indent=config.output.indent))
        return

    if result.record.is_empty():
        print("No label fields found.")
    else:
        print(result.record.summary())
    if result.raw_text:
        print()
        print(result.raw_text)


def _cmd_barcode(config: LabelscanConfig, args) -> None:
    report = classify_barcode(args.payload)
    result = scan_barcode(args.payload)
    if args.json:
        data = {"barcode": report.to_dict(), "record": result.record.to_dict()}
        print(json.dumps(data, ensure_ascii=False, indent=config.output.indent))
        return
    print(f"Type: {report.type}")
    _print_result(config, result, as_json=False)


def _cmd_ocr(config: LabelscanConfig, args) -> None:
    text = _read_input(args.file)
    filter_text = config.ocr.filter_text and not args.no_filter

    if args.explain:
        t = filter_label_text(text) if filter_text else text
        collapsed = collapse_whitespace(t)
        for fmt in LABEL_FORMATS:
            candidate = fmt.match(collapsed)
            print(
                f"  {fmt.id:<28} score={candidate.score()}  "
                f"{candidate.summary() or '-'}"
            )
        print()

    result = scan_text(
        text,
        provider=args.provider or config.ocr.provider,
        correct_batch=config.ocr.correct_batch and not args.no_correct,
        filter_text=filter_text,
    )
    _print_result(config, result, args.json)


def _cmd_fields(config: LabelscanConfig, args) -> None:
    try:
        data = json.loads(_read_input(args.file))
    except json.JSONDecodeError as e:
        print(f"Invalid JSON in {args.file}: {e}", file=sys.stderr)
        sys.exit(1)
    if not isinstance(data, list) or not all(isinstance(d, dict) for d in data):
        print(f"{args.file} must hold a JSON array of field objects", file=sys.stderr)
        sys.exit(1)

    definitions = active_definitions(config.capture.disabled_fields)
    result = scan_fields(data, definitions)
    _print_result(config, result, args.json)


def _cmd_formats() -> None:
    print(f"OCR label formats: {len(LABEL_FORMATS)}")
    for fmt in LABEL_FORMATS:
        print(f"  {fmt.id:<28} {fmt.name}")


def _cmd_definitions(config: LabelscanConfig) -> None:
    definitions = active_definitions(config.capture.disabled_fields)
    print(f"Field definitions: {len(definitions)}")
    for d in definitions:
        roles = ", ".join(r.value for r in d.roles)
        print(f"  {d.name:<28} [{roles}]  {d.pattern()}")
