"""Registry of manufacturer label formats for OCR text.

Each format is a pure function from whitespace-collapsed OCR text to a partial
:class:`LabelRecord` holding only the fields it clearly found. All formats run
on every text and the one that fills the most of batch, lot and expiry wins.

Support for a new manufacturer is one more :class:`FormatMatcher` in
``LABEL_FORMATS``; the selection in :func:`best_match` never changes.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

from ..expiry import MONTH_ALTERNATION, normalize_expiry
from ..models import LabelRecord
from ..reconcile import reconcile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormatMatcher:
    id: str
    name: str
    match: Callable[[str], LabelRecord]


_YYYY_MM = re.compile(r"\d{4}-\d{2}(-\d{2})?")
_LOT_NO = re.compile(r"Lot\s*No\.?\s*:?\s*(\d{6,14})", re.I)
_LONG_DIGITS = re.compile(r"\d{6,14}")
_MIXED_WORD = re.compile(r"\b([A-Za-z][A-Za-z0-9]{2,7})\b")
_SIX_DIGITS = re.compile(r"\b(\d{6})\b")
_YYYY_MMM = re.compile(rf"\b(\d{{4}}-(?:{MONTH_ALTERNATION}))\b", re.I)
_LOT_SIX = re.compile(r"LOT\s+(\d{6})", re.I)
_EXP_MMM_YYYY = re.compile(rf"EXP\s+({MONTH_ALTERNATION})\s+(\d{{4}})", re.I)
_EXP_MMMYYYY = re.compile(rf"EXP\s+({MONTH_ALTERNATION})(\d{{4}})", re.I)
_LOT_NUMBER = re.compile(r"LOT\s*NUMBER\s*:?\s*([A-Z0-9]{6,15})", re.I)
_EXPIRATION_DATE = re.compile(r"EXPIRATION\s*DATE\s*:?\s*(\d{4}/\d{1,2})", re.I)
_LOT_HASH = re.compile(r"LOT\s*#?\s*:?\s*([A-Za-z0-9]{4,14})", re.I)
_EXP_SLASH = re.compile(r"(?:EXP?\.?\s*:?\s*)?(\d{1,2}/\d{4})(?:\s|$)", re.I)
_MM_SLASH_YYYY = re.compile(r"(\d{1,2}/\d{4})")
_SHORT_DIGITS = re.compile(r"\b(\d{3,5})\b")
_FIRST_LINE_CODE = re.compile(r"^[A-Z0-9]{2,10}$", re.I)


def _digits_of(expiry: str) -> str:
    return expiry.replace("-", "").replace("/", "")


def _mixed_code(t: str) -> str:
    """First 3-8 char word that starts with a letter and contains a digit."""
    for word in _MIXED_WORD.findall(t):
        if any(c.isdigit() for c in word):
            return word.upper()
    return ""


def _short_number(t: str, lot: str, expiry_digits: str) -> str:
    """First standalone 3-5 digit number that is neither the lot nor the expiry."""
    for s in _SHORT_DIGITS.findall(t):
        if s != lot and not expiry_digits.startswith(s):
            return s
    return ""


def _longest_number(t: str, expiry_digits: str, *, skip_prefixes: bool) -> str:
    candidates = [
        s
        for s in _LONG_DIGITS.findall(t)
        if s != expiry_digits
        and not (skip_prefixes and expiry_digits.startswith(s))
    ]
    candidates.sort(key=len, reverse=True)
    return candidates[0] if candidates else ""


def _match_gs1_style(t: str) -> LabelRecord:
    """``Lot No.: 20054138``, ``Exp.: 2027-02``, product code like ``B0Z7``."""
    out = LabelRecord()
    if m := _YYYY_MM.search(t):
        out.expiry = m.group(0)[:7]

    if m := _LOT_NO.search(t):
        out.lot_no = m.group(1)
    else:
        out.lot_no = _longest_number(t, _digits_of(out.expiry), skip_prefixes=False)

    out.batch_no = _mixed_code(t)
    return out


def _match_numeric_lot_yyyy_mmm(t: str) -> LabelRecord:
    """Standalone 6-digit batch/lot (``402655``) with ``2027-MAR`` expiry."""
    out = LabelRecord()
    if m := _SIX_DIGITS.search(t):
        out.batch_no = out.lot_no = m.group(1)
    if m := _YYYY_MMM.search(t):
        out.expiry = normalize_expiry(m.group(1))
    return out


def _match_lot_exp_mmm_yyyy(t: str) -> LabelRecord:
    """Embossed ``LOT 693453`` with ``EXP MAR 2027`` or ``EXP MAR2027``."""
    out = LabelRecord()
    if m := _LOT_SIX.search(t):
        out.lot_no = m.group(1)
    if m := _EXP_MMM_YYYY.search(t):
        out.expiry = normalize_expiry(f"{m.group(1)} {m.group(2)}")
    elif m := _EXP_MMMYYYY.search(t):
        out.expiry = normalize_expiry(f"{m.group(1)}{m.group(2)}")
    return out


def _match_lot_number_expiration_date(t: str) -> LabelRecord:
    """``LOT NUMBER: F809XA01X`` with ``EXPIRATION DATE: 2028/05``."""
    out = LabelRecord()
    if m := _LOT_NUMBER.search(t):
        out.lot_no = m.group(1).strip()
    if m := _EXPIRATION_DATE.search(t):
        out.expiry = normalize_expiry(m.group(1))
    return out


def _match_lot_hash_exp_slash(t: str) -> LabelRecord:
    """``LOT # 250767C``, ``EXP 12/2026`` and a standalone batch like ``1004``."""
    out = LabelRecord()
    if m := _LOT_HASH.search(t):
        out.lot_no = m.group(1).upper()

    m = _EXP_SLASH.search(t) or _MM_SLASH_YYYY.search(t)
    if m:
        out.expiry = normalize_expiry(m.group(1))

    out.batch_no = _short_number(t, out.lot_no, _digits_of(out.expiry))
    return out


def _match_fallback(t: str) -> LabelRecord:
    """Generic expiry, lot and batch shapes; always tried last."""
    out = LabelRecord()
    if m := _YYYY_MM.search(t):
        out.expiry = m.group(0)[:7]
    elif m := _MM_SLASH_YYYY.search(t):
        out.expiry = normalize_expiry(m.group(1))

    expiry_digits = _digits_of(out.expiry)
    if m := _LOT_HASH.search(t):
        out.lot_no = m.group(1).upper()
    else:
        out.lot_no = _longest_number(t, expiry_digits, skip_prefixes=True)

    out.batch_no = _mixed_code(t) or _short_number(t, out.lot_no, expiry_digits)
    return out


# Priority order; ties in score keep the earlier entry
LABEL_FORMATS: tuple[FormatMatcher, ...] = (
    FormatMatcher("gs1_style", "GS1-style (Lot No., Exp. YYYY-MM)", _match_gs1_style),
    FormatMatcher(
        "numeric_lot_yyyy_mmm",
        "6-digit batch/lot, YYYY-MMM expiry",
        _match_numeric_lot_yyyy_mmm,
    ),
    FormatMatcher(
        "lot_exp_mmm_yyyy", "LOT 6digits / EXP MMM YYYY", _match_lot_exp_mmm_yyyy
    ),
    FormatMatcher(
        "lot_number_expiration_date",
        "LOT NUMBER / EXPIRATION DATE YYYY/MM",
        _match_lot_number_expiration_date,
    ),
    FormatMatcher(
        "lot_hash_exp_slash", "LOT # / EXP MM/YYYY", _match_lot_hash_exp_slash
    ),
    FormatMatcher("fallback", "Fallback (generic patterns)", _match_fallback),
)


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def best_match(
    text: str, formats: tuple[FormatMatcher, ...] = LABEL_FORMATS
) -> tuple[FormatMatcher | None, LabelRecord]:
    """Run every format and return the winner with its record.

    The winner is ``None`` when no format found anything.
    """
    t = collapse_whitespace(text)
    best: LabelRecord = LabelRecord()
    winner: FormatMatcher | None = None
    best_score = 0

    for fmt in formats:
        result = fmt.match(t)
        s = result.score()
        if s > best_score:
            best_score = s
            best = result
            winner = fmt

    if winner is not None:
        logger.debug("OCR format %s won with score %d", winner.id, best_score)
    return winner, best


def extract_label(
    text: str, formats: tuple[FormatMatcher, ...] = LABEL_FORMATS
) -> LabelRecord:
    """Extract batch, lot and expiry from free OCR text.

    When no batch was found, a short code on the first line (a product code
    printed above the labeled fields) is taken as the batch.
    """
    _, best = best_match(text, formats)

    lines = [s.strip() for s in re.split(r"\r?\n", text) if s.strip()]
    first = lines[0] if lines else ""
    if (
        not best.batch_no
        and _FIRST_LINE_CODE.match(first)
        and first != best.lot_no
        and first != best.expiry
    ):
        best.batch_no = first

    return reconcile(
        LabelRecord(
            batch_no=best.batch_no.strip(),
            lot_no=best.lot_no.strip(),
            expiry=best.expiry.strip(),
        )
    )
