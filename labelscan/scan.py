"""One entry point per input shape, all ending in a reconciled record."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Iterable

from .capture.fields import FIELD_DEFINITIONS, FieldDefinition
from .capture.mapper import CaptureField, field_from_dict, map_fields
from .display import GS1_TYPES, classify_barcode, format_gs1_lines
from .models import LabelRecord
from .ocr import ocr_text_to_label
from .reconcile import reconcile


@dataclass
class ScanResult:
    kind: str  # "barcode" | "ocr" | "capture"
    record: LabelRecord = field(default_factory=LabelRecord)
    raw_text: str = ""
    provider: str = ""
    source: str = ""  # barcode payload as scanned

    def to_payload(self, timestamp: int | None = None) -> dict:
        """Scan message as the viewer consumes it.

        Barcodes travel as their raw payload; OCR and capture results travel
        as the JSON record under the ``ocr`` type.
        """
        if timestamp is None:
            timestamp = int(time.time() * 1000)
        if self.kind == "barcode":
            return {
                "type": "barcode",
                "value": self.source,
                "raw": self.source,
                "timestamp": timestamp,
            }
        return {
            "type": "ocr",
            "value": json.dumps(self.record.to_dict(), ensure_ascii=False),
            "raw": self.raw_text or "(label capture)",
            "timestamp": timestamp,
        }


def scan_barcode(raw: str) -> ScanResult:
    report = classify_barcode(raw)
    is_gs1 = report.type in GS1_TYPES
    record = LabelRecord(
        batch_no=report.batch,
        lot_no=report.batch,
        expiry=report.expiry,
        product_id=report.product_id if report.type != "UNKNOWN" else None,
        serial=report.serial or None,
    )
    raw_text = format_gs1_lines(report) if is_gs1 else (raw or "").strip()
    return ScanResult(
        kind="barcode",
        record=reconcile(record),
        raw_text=raw_text,
        source=raw or "",
    )


def scan_text(
    text: str,
    provider: str = "tesseract",
    *,
    correct_batch: bool = True,
    filter_text: bool = True,
) -> ScanResult:
    record = ocr_text_to_label(
        text, correct_batch=correct_batch, filter_text=filter_text
    )
    return ScanResult(
        kind="ocr",
        record=reconcile(record),
        raw_text=(text or "").strip(),
        provider=provider,
    )


def scan_fields(
    fields: Iterable[CaptureField | dict],
    definitions: tuple[FieldDefinition, ...] = FIELD_DEFINITIONS,
) -> ScanResult:
    """Map capture fields; plain dicts are converted with :func:`field_from_dict`."""
    typed = [f if not isinstance(f, dict) else field_from_dict(f) for f in fields]
    record, raw = map_fields(typed, definitions)
    return ScanResult(kind="capture", record=record, raw_text=raw, provider="capture")
