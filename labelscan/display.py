"""Barcode classification and viewer-facing text for decoded barcodes."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .expiry import format_expiry_display
from .gs1 import decode_gs1, preprocess

# Longer GS1 payloads are printed as DataMatrix rather than linear symbols
GS1_DATAMATRIX_LENGTH_THRESHOLD = 40

GS1_TYPES = ("GS1_DATAMATRIX", "GS1_LINEAR")


@dataclass
class BarcodeReport:
    product_id: str
    type: str  # GS1_DATAMATRIX | GS1_LINEAR | UPC | EAN | UNKNOWN
    batch: str = ""
    expiry: str = ""
    serial: str = ""
    raw: str = ""

    def to_dict(self) -> dict[str, str]:
        data = {"upc_gtin": self.product_id, "type": self.type}
        if self.batch:
            data["batch"] = self.batch
        if self.expiry:
            data["expiry"] = self.expiry
        if self.serial:
            data["serial"] = self.serial
        return data


def infer_raw_type(normalized: str) -> str:
    """Guess UPC/EAN from the digit count of a non-GS1 payload."""
    n = len(re.sub(r"\D", "", normalized))
    if n == 8:
        return "EAN"
    if 0 < n <= 18:
        return "UPC"
    return "UNKNOWN"


def classify_barcode(raw: str) -> BarcodeReport:
    normalized = preprocess(raw)
    if not normalized:
        return BarcodeReport(product_id="", type="UNKNOWN")

    gs1 = decode_gs1(raw)
    if gs1 is None:
        return BarcodeReport(
            product_id=normalized, type=infer_raw_type(normalized), raw=raw
        )

    if gs1.ai_count() >= 3 or len(normalized) > GS1_DATAMATRIX_LENGTH_THRESHOLD:
        kind = "GS1_DATAMATRIX"
    else:
        kind = "GS1_LINEAR"
    return BarcodeReport(
        product_id=gs1.gtin or normalized,
        type=kind,
        batch=gs1.batch,
        expiry=gs1.expiry,
        serial=gs1.serial,
        raw=raw,
    )


def format_gs1_lines(report: BarcodeReport) -> str:
    """Tab-separated ``(AI) TITLE<TAB>value`` lines for the viewer."""
    lines: list[str] = []
    if report.product_id and report.type in GS1_TYPES:
        lines.append(f"(01) GTIN\t{report.product_id}")
    if report.expiry:
        lines.append(f"(17) EXPIRY\t{format_expiry_display(report.expiry)}")
    if report.batch:
        lines.append(f"(10) BATCH/LOT\t{report.batch}")
    if report.serial:
        lines.append(f"(21) SERIAL\t{report.serial}")
    return "\n".join(lines)
