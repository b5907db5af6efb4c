"""Map structured label-capture fields to a canonical label record.

A capture engine reports each field as free text, a date split into parts, or
the payload of a barcode found inside the label. Text fields are routed to
record roles through the field definition table; barcode payloads are
collected and decoded as GS1 after all text fields, and override what the
text produced because the barcode channel is far less noisy.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Union

from ..expiry import MONTH_ALTERNATION, format_date_parts, is_likely_yymmdd, normalize_expiry
from ..gs1 import decode_gs1
from ..models import LabelRecord
from ..reconcile import reconcile
from .fields import (
    BARCODE,
    BUILTIN_DATE_FIELDS,
    FIELD_DEFINITIONS,
    NUMERIC_BATCH_LOT,
    PRODUCT_CODE,
    FieldDefinition,
    OutputRole,
    roles_by_name,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextField:
    name: str
    text: str


@dataclass(frozen=True)
class DateField:
    name: str
    day: int | None = None
    month: int | str | None = None  # engines may report a month name
    year: int | str | None = None


@dataclass(frozen=True)
class BarcodeField:
    name: str
    data: str


CaptureField = Union[TextField, DateField, BarcodeField]

_ROLE_ATTRS: dict[OutputRole, str] = {
    OutputRole.BATCH_NO: "batch_no",
    OutputRole.LOT_NO: "lot_no",
    OutputRole.EXPIRY: "expiry",
    OutputRole.SERIAL: "serial",
    OutputRole.REF: "reference",
}

# Label keywords that OCR segmented as a product code (Lot -> L0T, Layout -> Lay0ut)
_MISREAD = re.compile(r"^(?:L0?T|LOT|EXP?|E1P|LAY0?UT|LAYOUT)$")

_GTIN_AI = re.compile(r"\(?01\)?\d{14}")
_SHORT_BARCODE = re.compile(r"^\d{5,7}$")
_GTIN_FROM_AI = re.compile(r"^\(?01\)?\s*(\d{13,14})$")
_PLAIN_CODE = re.compile(r"^\d{6,14}$")
_PRIMARY_MIN_LENGTH = 20
_GS1_MIN_LENGTH = 14

_RAW_LOT = re.compile(
    r"(?:Lot\s*(?:No\.?|Number|#)?\s*:?|LOT\s*NO\.?\s*:?|LOT\s*NUMBER\s*:?|LOT\s+)"
    r"\s*([0-9A-Za-z]{4,15})",
    re.I,
)
_RAW_SIX_DIGITS = re.compile(r"\b(\d{6})\b")
_RAW_EXPIRY = re.compile(
    r"(?:Exp\.?|Expiry|Expiration(?:\s*DATE)?|Use\s*[- ]?By|EXP\s+)\s*:?\s*"
    r"(?P<date>\d{4}-\d{2}(?:-\d{2})?"
    r"|\d{4}/\d{1,2}(?:/\d{2,4})?"
    rf"|\d{{4}}-(?:{MONTH_ALTERNATION})"
    rf"|(?:{MONTH_ALTERNATION})\s+\d{{4}}"
    rf"|(?:{MONTH_ALTERNATION})\d{{4}}"
    r"|\d{1,2}/\d{1,2}/\d{4}"
    r"|\d{1,2}-\d{1,2}-\d{4})",
    re.I,
)
_RAW_YYYY_MMM = re.compile(rf"\b(\d{{4}}-(?:{MONTH_ALTERNATION}))\b", re.I)
_RAW_MMM_YYYY = re.compile(rf"\b(?:EXP\s+)?({MONTH_ALTERNATION})\s+(\d{{4}})\b", re.I)
_RAW_EXP_MMMYYYY = re.compile(rf"\bEXP\s+({MONTH_ALTERNATION})(\d{{4}})\b", re.I)
_RAW_EXP_MM_YY = re.compile(r"\bEXP\s*(\d{1,2}/\d{2})\b", re.I)
_RAW_SERIAL = re.compile(
    r"(?:Serial\s*(?:No\.?|Number|#)?\s*:?|SN\s*:?|S/N\s*:?)\s*([A-Za-z0-9]{8,20})",
    re.I,
)


def field_value(field: CaptureField) -> str:
    """Render any capture field kind as the string the mapper works on."""
    match field:
        case DateField(day=day, month=month, year=year):
            return format_date_parts(day, month, year)
        case BarcodeField(data=data):
            return data or ""
        case TextField(text=text):
            return text or ""
    raise TypeError(f"unsupported capture field: {field!r}")


def field_from_dict(data: dict) -> CaptureField:
    """Build a capture field from a capture engine's field object.

    Expected keys: ``name`` and one of ``date`` (``{day, month, year}``),
    ``barcode`` (``{data}`` or the payload itself) or ``text``. A date wins
    over a barcode, which wins over text. A field named ``Barcode`` is always
    a barcode. Values of an unexpected shape are treated as absent.
    """
    name = str(data.get("name") or "")
    date = data.get("date")
    barcode = data.get("barcode")
    text = data.get("text") or data.get("value")

    if isinstance(date, dict):
        return DateField(
            name=name,
            day=date.get("day"),
            month=date.get("month"),
            year=date.get("year"),
        )
    if isinstance(date, str) and date.strip():
        return TextField(name=name, text=date)

    if isinstance(barcode, dict):
        barcode = barcode.get("data")
    if isinstance(barcode, (str, int)):
        return BarcodeField(name=name, data=str(barcode))
    if name == BARCODE:
        return BarcodeField(name=name, data=str(text or ""))
    return TextField(name=name, text=str(text or ""))


def is_product_code_misread(value: str) -> bool:
    """True for product code values that are really misread label keywords."""
    s = value.strip()
    if len(s) <= 3:
        return True
    return bool(_MISREAD.match(s.upper()))


def _compact(value: str) -> str:
    return re.sub(r"\s", "", value)


def parse_lot_and_expiry_from_raw(
    raw: str, skip: set[str] | frozenset[str] = frozenset()
) -> tuple[str, str]:
    """Recover lot and expiry from the raw field dump.

    Standalone 6-digit numbers listed in ``skip`` (values already identified
    as dates) are not taken as the lot.
    """
    lot = ""
    if m := _RAW_LOT.search(raw):
        lot = m.group(1).strip()
    if not lot:
        lot = next((s for s in _RAW_SIX_DIGITS.findall(raw) if s not in skip), "")

    expiry = ""
    if m := _RAW_EXPIRY.search(raw):
        expiry = normalize_expiry(m.group("date"))
    elif m := _RAW_YYYY_MMM.search(raw):
        expiry = normalize_expiry(m.group(1))
    elif m := _RAW_MMM_YYYY.search(raw):
        expiry = normalize_expiry(f"{m.group(1)} {m.group(2)}")
    elif m := _RAW_EXP_MMMYYYY.search(raw):
        expiry = normalize_expiry(f"{m.group(1)}{m.group(2)}")
    elif m := _RAW_EXP_MM_YY.search(raw):
        expiry = normalize_expiry(m.group(1))
    return lot, expiry


def parse_serial_from_raw(raw: str) -> str:
    m = _RAW_SERIAL.search(raw)
    return m.group(1).strip() if m else ""


def _is_gs1_candidate(barcode: str) -> bool:
    c = _compact(barcode)
    return len(c) >= _PRIMARY_MIN_LENGTH and bool(_GTIN_AI.search(c))


def _apply_barcodes(record: LabelRecord, barcodes: list[str]) -> None:
    # max() keeps the first of equally long values
    primary = max(
        (b for b in barcodes if _is_gs1_candidate(b)), key=len, default=None
    )
    barcode = primary if primary is not None else max(barcodes, key=len, default="")

    short = next((b for b in barcodes if _SHORT_BARCODE.match(_compact(b))), None)
    if not record.reference and short and primary:
        record.reference = short.strip()

    if len(barcode) >= _GS1_MIN_LENGTH:
        gs1 = decode_gs1(barcode)
        if gs1 is not None:
            logger.debug("Barcode %r decoded as GS1; overriding text fields", barcode)
            if gs1.batch:
                record.batch_no = gs1.batch
                record.lot_no = gs1.batch
            if gs1.expiry:
                record.expiry = gs1.expiry
            if gs1.gtin:
                record.product_id = gs1.gtin
            if gs1.serial:
                record.serial = gs1.serial

    if not record.product_id and barcode:
        if m := _GTIN_FROM_AI.match(barcode.strip()):
            record.product_id = m.group(1)
        elif _PLAIN_CODE.match(_compact(barcode)):
            record.product_id = _compact(barcode)


def map_fields(
    fields: Iterable[CaptureField],
    definitions: tuple[FieldDefinition, ...] = FIELD_DEFINITIONS,
) -> tuple[LabelRecord, str]:
    """Map capture fields to a label record and a ``name: value`` text dump.

    Misread product codes are left out of both. Barcode payloads are decoded
    after the text fields and take precedence over them. Lot, expiry and
    serial missing from the fields are searched for in the text dump.
    """
    roles = roles_by_name(definitions)
    record = LabelRecord()
    lines: list[str] = []
    barcodes: list[str] = []
    date_like: set[str] = set()

    for field in fields:
        value = field_value(field)
        v = value.strip()
        misread = field.name == PRODUCT_CODE and is_product_code_misread(v)
        if misread:
            logger.debug("Dropped misread product code %r", v)
        else:
            lines.append(f"{field.name}: {value}")

        if isinstance(field, BarcodeField):
            barcodes.append(v)
            continue
        if misread:
            continue

        field_roles = roles.get(field.name)
        if field_roles:
            if field.name == NUMERIC_BATCH_LOT and is_likely_yymmdd(v):
                logger.debug("Numeric batch/lot %s reads as YYMMDD; used as expiry", v)
                record.expiry = normalize_expiry(v)
                date_like.add(v)
                continue
            if OutputRole.EXPIRY in field_roles:
                v = normalize_expiry(v)
            for role in field_roles:
                setattr(record, _ROLE_ATTRS[role], v)
            continue

        if field.name in BUILTIN_DATE_FIELDS:
            record.expiry = normalize_expiry(v)

    _apply_barcodes(record, barcodes)

    raw = "\n".join(lines)
    if record.serial:
        raw = f"{raw}\nSerial: {record.serial}" if raw else f"Serial: {record.serial}"

    if not record.lot_no or not record.expiry:
        lot, expiry = parse_lot_and_expiry_from_raw(raw, skip=date_like)
        if not record.lot_no and lot:
            record.lot_no = lot
        if not record.expiry and expiry:
            record.expiry = expiry
    if not record.serial:
        record.serial = parse_serial_from_raw(raw) or None

    return reconcile(record), raw


def map_field_values(
    pairs: Iterable[tuple[str, str]],
    definitions: tuple[FieldDefinition, ...] = FIELD_DEFINITIONS,
) -> tuple[LabelRecord, str]:
    """:func:`map_fields` for plain ``(name, value)`` pairs.

    A pair named ``Barcode`` is treated as an embedded barcode payload.
    """
    fields: list[CaptureField] = [
        BarcodeField(name, value or "") if name == BARCODE else TextField(name, value or "")
        for name, value in pairs
    ]
    return map_fields(fields, definitions)
