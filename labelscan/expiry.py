"""Expiry date normalization to the canonical YYYY-MM[-DD] form."""

from __future__ import annotations

import re

# Two-digit years at or above the pivot belong to the 1900s
YEAR_PIVOT = 50

MONTH_NAMES: dict[str, int] = {
    "JAN": 1,
    "FEB": 2,
    "MAR": 3,
    "APR": 4,
    "MAY": 5,
    "JUN": 6,
    "JUL": 7,
    "AUG": 8,
    "SEP": 9,
    "OCT": 10,
    "NOV": 11,
    "DEC": 12,
}

MONTH_ALTERNATION = "|".join(MONTH_NAMES)

_CANONICAL = re.compile(r"^\d{4}-(0[1-9]|1[0-2])(-(0[1-9]|[12]\d|3[01]))?$")

_YYYY_MMM = re.compile(rf"^(\d{{4}})-({MONTH_ALTERNATION})$", re.I)
_MMM_YYYY = re.compile(rf"^({MONTH_ALTERNATION})\s+(\d{{4}})$", re.I)
_MMMYYYY = re.compile(rf"^({MONTH_ALTERNATION})(\d{{4}})$", re.I)
_MM_DD_YYYY = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_MM_YYYY = re.compile(r"^(\d{1,2})/(\d{4})$")
_YYYY_MM = re.compile(r"^(\d{4})/(\d{1,2})$")
_YYYY_MM_DD = re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$")
_MM_YY = re.compile(r"^(\d{1,2})/(\d{2})$")
_YYYY_M_D = re.compile(r"^(\d{4})-(\d{1,2})(?:-(\d{1,2}))?$")
_DD_MM_YYYY = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")
_YYMMDD = re.compile(r"^\d{6}$")


def expand_two_digit_year(yy: int) -> int:
    """Map a two-digit year onto a four-digit one using the fixed pivot."""
    return 1900 + yy if yy >= YEAR_PIVOT else 2000 + yy


def is_canonical(value: str) -> bool:
    return bool(_CANONICAL.match(value))


def is_likely_yymmdd(s: str) -> bool:
    """True when a 6-digit string reads as YYMMDD (month 1-12, day 1-31)."""
    if not _YYMMDD.match(s):
        return False
    mm = int(s[2:4])
    dd = int(s[4:6])
    return 1 <= mm <= 12 and 1 <= dd <= 31


def _ym(year: int | str, month: int | str) -> str | None:
    m = int(month)
    if not 1 <= m <= 12:
        return None
    return f"{int(year):04d}-{m:02d}"


def _ymd(year: int | str, month: int | str, day: int | str) -> str | None:
    ym = _ym(year, month)
    d = int(day)
    if ym is None or not 1 <= d <= 31:
        return None
    return f"{ym}-{d:02d}"


def _month_of(name: str) -> int:
    return MONTH_NAMES[name.upper()]


def normalize_expiry(raw: str) -> str:
    """Normalize an expiry notation to ``YYYY-MM`` or ``YYYY-MM-DD``.

    Recognized notations, in priority order: ``YYYY-MMM``, ``MMM YYYY``,
    ``MMMYYYY``, ``MM/DD/YYYY``, ``MM/YYYY``, ``YYYY/MM``, ``MM/YY``, then
    unpadded ``YYYY-M[-D]``, ``YYYY/MM/DD``, ``DD-MM-YYYY`` and compact
    ``YYMMDD``.

    Never fails: anything unrecognized is returned stripped but otherwise
    unchanged.
    """
    if not raw:
        return raw
    v = raw.strip()
    if is_canonical(v):
        return v

    result: str | None = None
    if m := _YYYY_MMM.match(v):
        result = _ym(m.group(1), _month_of(m.group(2)))
    elif m := _MMM_YYYY.match(v):
        result = _ym(m.group(2), _month_of(m.group(1)))
    elif m := _MMMYYYY.match(v):
        result = _ym(m.group(2), _month_of(m.group(1)))
    elif m := _MM_DD_YYYY.match(v):
        result = _ymd(m.group(3), m.group(1), m.group(2))
    elif m := _MM_YYYY.match(v):
        result = _ym(m.group(2), m.group(1))
    elif m := _YYYY_MM.match(v):
        result = _ym(m.group(1), m.group(2))
    elif m := _MM_YY.match(v):
        result = _ym(expand_two_digit_year(int(m.group(2))), m.group(1))
    elif m := _YYYY_M_D.match(v):
        if m.group(3):
            result = _ymd(m.group(1), m.group(2), m.group(3))
        else:
            result = _ym(m.group(1), m.group(2))
    elif m := _YYYY_MM_DD.match(v):
        result = _ymd(m.group(1), m.group(2), m.group(3))
    elif m := _DD_MM_YYYY.match(v):
        result = _ymd(m.group(3), m.group(2), m.group(1))
    elif is_likely_yymmdd(v):
        result = _ymd(expand_two_digit_year(int(v[0:2])), v[2:4], v[4:6])

    return result if result is not None else v


def _month_number(month: int | str) -> int:
    if isinstance(month, str) and month.strip()[:3].upper() in MONTH_NAMES:
        return MONTH_NAMES[month.strip()[:3].upper()]
    return int(month)


def format_date_parts(
    day: int | None, month: int | str | None, year: int | str | None
) -> str:
    """Format a structured capture date as ``YYYY-MM``.

    The day is dropped to match the granularity of OCR-derived expiries.
    Two-digit years are expanded with the usual pivot and month names are
    accepted. Returns ``""`` without a usable year or for an invalid month,
    and the bare year without a month.
    """
    if year is None:
        return ""
    try:
        y = int(year)
        m = _month_number(month) if month is not None else None
    except (TypeError, ValueError):
        return ""
    if 0 <= y < 100:
        y = expand_two_digit_year(y)
    if not 1000 <= y <= 9999:
        return ""
    if m is None:
        return f"{y:04d}"
    if not 1 <= m <= 12:
        return ""
    return f"{y:04d}-{m:02d}"


_MONTH_ABBR = list(MONTH_NAMES)


def format_expiry_display(expiry: str) -> str:
    """Render a canonical expiry as ``DD MMM YYYY`` or ``MMM YYYY``."""
    if not expiry or not expiry.strip():
        return ""
    m = re.match(r"^(\d{4})-(\d{2})(?:-(\d{2}))?", expiry.strip())
    if not m:
        return expiry
    year, month, day = m.groups()
    idx = int(month) - 1
    if not 0 <= idx <= 11:
        return expiry
    if day:
        return f"{day} {_MONTH_ABBR[idx]} {year}"
    return f"{_MONTH_ABBR[idx]} {year}"
