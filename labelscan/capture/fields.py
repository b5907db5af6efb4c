"""Field definitions presented to the structured label-capture engine.

Each definition names a capture field, the anchor text that must precede its
value (none for standalone values), the value shapes it accepts and the
record roles it fills. Anchored fields come before unanchored ones so the
capture engine matches labeled lines first.

Supporting a new label convention means adding rows here; the mapper reads
roles from this table and never branches on field names for them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from ..expiry import MONTH_ALTERNATION


class OutputRole(str, Enum):
    BATCH_NO = "batch_no"
    LOT_NO = "lot_no"
    EXPIRY = "expiry"
    SERIAL = "serial"
    REF = "ref"


@dataclass(frozen=True)
class FieldDefinition:
    name: str
    anchors: tuple[str, ...]  # empty = standalone value
    values: tuple[str, ...]
    roles: tuple[OutputRole, ...]
    optional: bool = True

    def pattern(self) -> str:
        """Anchor and value grammar as one regular expression."""
        value = "|".join(f"(?:{v})" for v in self.values)
        if not self.anchors:
            return f"(?P<value>{value})"
        anchor = "|".join(f"(?:{a})" for a in self.anchors)
        return f"(?:{anchor})(?P<value>{value})"

    def matches(self, text: str) -> bool:
        return re.search(self.pattern(), text, re.I) is not None


PRODUCT_CODE = "Product code"
NUMERIC_BATCH_LOT = "Batch/Lot (numeric)"
BARCODE = "Barcode"

# Capture-engine date fields that are not in the table
BUILTIN_DATE_FIELDS = ("Expiry Date", "Expiration Date", "Best Before Date")

_MMM = f"(?:{MONTH_ALTERNATION})"

FIELD_DEFINITIONS: tuple[FieldDefinition, ...] = (
    # GS1-style: Lot No.: 20054138, Exp.: 2027-02, product code B0Z7
    FieldDefinition(
        name="Lot no",
        anchors=(r"Lot\s*(No\.?|Number|#)?\s*:?\s*",),
        values=(r"[0-9]{4,14}", r"[0-9A-Za-z]{4,14}"),
        roles=(OutputRole.LOT_NO,),
    ),
    FieldDefinition(
        name="Expiry",
        anchors=(r"(Exp\.?|Expiry|Expiration|Use\s*[- ]?By)\s*:?\s*",),
        values=(
            r"[0-9]{4}-[0-9]{2}(-[0-9]{2})?",
            r"[0-9]{2}/[0-9]{2}/[0-9]{4}",
            r"[0-9]{2}-[0-9]{2}-[0-9]{4}",
        ),
        roles=(OutputRole.EXPIRY,),
    ),
    FieldDefinition(
        name=PRODUCT_CODE,
        anchors=(),
        values=(r"[A-Za-z]+[0-9][A-Za-z0-9]{2,}",),
        roles=(OutputRole.BATCH_NO, OutputRole.LOT_NO),
    ),
    FieldDefinition(
        name="Batch no",
        anchors=(r"Batch\s*no\s*:?",),
        values=(r"[0-9A-Za-z]{3,15}",),
        roles=(OutputRole.BATCH_NO,),
    ),
    # REF 456085, Reference: 456085
    FieldDefinition(
        name="Ref no",
        anchors=(r"REF\s*(No\.?|Number|#)?\s*:?\s*", r"Reference\s*:?\s*"),
        values=(r"[0-9]{4,12}", r"[A-Za-z0-9]{4,15}"),
        roles=(OutputRole.REF,),
    ),
    # Standalone 6-digit batch/lot (402655) with 2027-MAR expiry; a value that
    # reads as YYMMDD is redirected to expiry by the mapper
    FieldDefinition(
        name=NUMERIC_BATCH_LOT,
        anchors=(),
        values=(r"[0-9]{6}",),
        roles=(OutputRole.BATCH_NO, OutputRole.LOT_NO),
    ),
    FieldDefinition(
        name="Expiry (YYYY-MMM)",
        anchors=(),
        values=(rf"[0-9]{{4}}-{_MMM}",),
        roles=(OutputRole.EXPIRY,),
    ),
    # LOT 693453, LOT 84325040027
    FieldDefinition(
        name="Lot no (LOT prefix)",
        anchors=(r"LOT\s+",),
        values=(r"[0-9]{6,15}",),
        roles=(OutputRole.LOT_NO,),
    ),
    FieldDefinition(
        name="Expiry (EXP MMM YYYY)",
        anchors=(r"EXP\s+",),
        values=(rf"{_MMM}\s+[0-9]{{4}}", rf"{_MMM}[0-9]{{4}}"),
        roles=(OutputRole.EXPIRY,),
    ),
    # 230572 with EXP 06/27; the lot is covered by the numeric batch/lot row
    FieldDefinition(
        name="Expiry (EXP MM/YY)",
        anchors=(r"EXP\s+",),
        values=(r"[0-9]{1,2}/[0-9]{2}",),
        roles=(OutputRole.EXPIRY,),
    ),
    # LOT NUMBER: F809XA01X / EXPIRATION DATE: 2028/05
    FieldDefinition(
        name="Lot no (LOT NUMBER)",
        anchors=(r"LOT\s*NUMBER\s*:?\s*",),
        values=(r"[A-Z0-9]{6,15}",),
        roles=(OutputRole.LOT_NO,),
    ),
    # Serial: 10104541514812, SN: 10104541514812
    FieldDefinition(
        name="Serial no",
        anchors=(
            r"Serial\s*(No\.?|Number|#)?\s*:?\s*",
            r"SN\s*:?\s*",
            r"S/N\s*:?\s*",
        ),
        values=(r"[0-9]{10,20}", r"[A-Za-z0-9]{8,20}"),
        roles=(OutputRole.SERIAL,),
    ),
    FieldDefinition(
        name="Expiry (EXPIRATION DATE)",
        anchors=(r"EXPIRATION\s*DATE\s*:?\s*",),
        values=(r"[0-9]{4}/[0-9]{2}", r"[0-9]{4}-[0-9]{2}"),
        roles=(OutputRole.EXPIRY,),
    ),
)


def active_definitions(
    disabled: list[str] | tuple[str, ...] = (),
) -> tuple[FieldDefinition, ...]:
    """Field definitions minus the ones switched off in configuration."""
    off = set(disabled)
    return tuple(d for d in FIELD_DEFINITIONS if d.name not in off)


def roles_by_name(
    definitions: tuple[FieldDefinition, ...] = FIELD_DEFINITIONS,
) -> dict[str, tuple[OutputRole, ...]]:
    return {d.name: d.roles for d in definitions}
