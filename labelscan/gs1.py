"""GS1 Application Identifier decoding for label barcodes.

Decodes GS1 element strings (DataMatrix, GS1-128, DataBar) into the fields
a label record needs: GTIN (01), batch/lot (10), expiry (17) and serial (21).

Two inputs are accepted by the grammar decoder:

* the human-readable bracketed form, ``(01)12345678901231(17)271231(10)ABC``
* the transmitted form, where variable-length fields are terminated by the
  ASCII 29 group separator (scanners often send ``|`` instead)

Scanners that drop the group separator produce a concatenated digit stream
that the grammar cannot split. For those, :func:`decode_gs1` falls back to a
positional scan that relies on the usual AI order (17, then 10, then 21).
"""

from __future__ import annotations

import calendar
import logging
import re

from .expiry import expand_two_digit_year
from .models import GS1Result

logger = logging.getLogger(__name__)

GROUP_SEPARATOR = "\x1d"

# AI -> (title, fixed length or None, max length, numeric only)
_AI_TABLE: dict[str, tuple[str, int | None, int, bool]] = {
    "00": ("SSCC", 18, 18, True),
    "01": ("GTIN", 14, 14, True),
    "02": ("CONTENT", 14, 14, True),
    "10": ("BATCH/LOT", None, 20, False),
    "11": ("PROD DATE", 6, 6, True),
    "12": ("DUE DATE", 6, 6, True),
    "13": ("PACK DATE", 6, 6, True),
    "15": ("BEST BEFORE", 6, 6, True),
    "16": ("SELL BY", 6, 6, True),
    "17": ("USE BY", 6, 6, True),
    "20": ("VARIANT", 2, 2, True),
    "21": ("SERIAL", None, 20, False),
    "22": ("CPV", None, 20, False),
    "30": ("VAR. COUNT", None, 8, True),
    "37": ("COUNT", None, 8, True),
    "240": ("ADDITIONAL ID", None, 30, False),
    "241": ("CUST. PART No.", None, 30, False),
    "250": ("SECONDARY SERIAL", None, 30, False),
    "251": ("REF. TO SOURCE", None, 30, False),
    "400": ("ORDER NUMBER", None, 30, False),
    "710": ("NHRN PZN", None, 20, False),
    "711": ("NHRN CIP", None, 20, False),
    "712": ("NHRN CN", None, 20, False),
    "713": ("NHRN DRN", None, 20, False),
    "714": ("NHRN AIM", None, 20, False),
    "90": ("INTERNAL", None, 30, False),
    **{f"9{n}": ("INTERNAL", None, 90, False) for n in range(1, 10)},
    **{f"310{n}": ("NET WEIGHT (kg)", 6, 6, True) for n in range(6)},
}

# Longest prefix first so 3- and 4-digit AIs win over 2-digit ones
_SORTED_AIS = sorted(_AI_TABLE, key=len, reverse=True)

_SYMBOLOGY_PREFIX = re.compile(r"^\][A-Za-z]\d")
_BRACKETED = re.compile(r"^(?:\(\d{2,4}\)[^()]*)+$")
_BRACKETED_ELEMENT = re.compile(r"\((\d{2,4})\)([^()]*)")

_FALLBACK_MIN_LENGTH = 20
_FALLBACK_GTIN = re.compile(r"01(\d{14})")
_FALLBACK_SERIAL = re.compile(r"21([A-Za-z0-9]{1,20})")
_FALLBACK_EXPIRY = re.compile(r"17(\d{6})")
_FALLBACK_BATCH_BEFORE_SERIAL = re.compile(r"17\d{6}10([A-Za-z0-9]+?)21")
_FALLBACK_BATCH_TO_END = re.compile(r"17\d{6}10([A-Za-z0-9]+)")


class GS1SyntaxError(ValueError):
    """Raised by the grammar decoder for a malformed element string."""


def preprocess(raw: str) -> str:
    """Turn pipe delimiters into group separators and trim."""
    if not raw or not isinstance(raw, str):
        return ""
    s = raw.replace("|", GROUP_SEPARATOR).strip()
    return _SYMBOLOGY_PREFIX.sub("", s)


def parse_element_string(s: str) -> dict[str, str]:
    """Split a GS1 element string into an ``{ai: value}`` map.

    Raises:
        GS1SyntaxError: on unknown AIs, truncated or over-long fields, or
            non-numeric data in a numeric field.
    """
    if not s:
        raise GS1SyntaxError("empty element string")
    if s.startswith("("):
        return _parse_bracketed(s)
    return _parse_transmitted(s)


def _check_value(ai: str, value: str) -> None:
    _, fixed, max_len, numeric = _AI_TABLE[ai]
    if not value:
        raise GS1SyntaxError(f"AI ({ai}) has no data")
    if fixed is not None and len(value) != fixed:
        raise GS1SyntaxError(
            f"AI ({ai}) expects {fixed} characters, got {len(value)}"
        )
    if len(value) > max_len:
        raise GS1SyntaxError(
            f"AI ({ai}) allows at most {max_len} characters, got {len(value)}"
        )
    if numeric and not value.isdigit():
        raise GS1SyntaxError(f"AI ({ai}) must be numeric: {value!r}")


def _parse_bracketed(s: str) -> dict[str, str]:
    compact = s.replace(GROUP_SEPARATOR, "")
    if not _BRACKETED.match(compact):
        raise GS1SyntaxError(f"malformed bracketed element string: {s!r}")
    result: dict[str, str] = {}
    for ai, value in _BRACKETED_ELEMENT.findall(compact):
        if ai not in _AI_TABLE:
            raise GS1SyntaxError(f"unknown AI ({ai})")
        value = value.strip()
        _check_value(ai, value)
        result[ai] = value
    return result


def _parse_transmitted(s: str) -> dict[str, str]:
    result: dict[str, str] = {}
    pos = 0
    while pos < len(s):
        if s[pos] == GROUP_SEPARATOR:
            pos += 1
            continue

        ai = next((p for p in _SORTED_AIS if s.startswith(p, pos)), None)
        if ai is None:
            raise GS1SyntaxError(f"unknown AI at position {pos}: {s[pos:pos + 4]!r}")

        _, fixed, _, _ = _AI_TABLE[ai]
        start = pos + len(ai)
        if fixed is not None:
            end = start + fixed
        else:
            gs = s.find(GROUP_SEPARATOR, start)
            end = len(s) if gs == -1 else gs
        value = s[start:end]
        _check_value(ai, value)
        result[ai] = value
        pos = end
    return result


def yymmdd_to_iso(value: str) -> str:
    """Convert a GS1 YYMMDD date to ``YYYY-MM-DD``.

    Day ``00`` stands for the last day of the month.

    Raises:
        GS1SyntaxError: if the value is not a valid calendar date.
    """
    if len(value) != 6 or not value.isdigit():
        raise GS1SyntaxError(f"date must be YYMMDD: {value!r}")
    year = expand_two_digit_year(int(value[0:2]))
    month = int(value[2:4])
    day = int(value[4:6])
    if not 1 <= month <= 12:
        raise GS1SyntaxError(f"invalid month in {value!r}")
    last_day = calendar.monthrange(year, month)[1]
    if day == 0:
        day = last_day
    if day > last_day:
        raise GS1SyntaxError(f"invalid day in {value!r}")
    return f"{year:04d}-{month:02d}-{day:02d}"


def _decode_grammar(s: str) -> GS1Result:
    ais = parse_element_string(s)
    expiry = yymmdd_to_iso(ais["17"]) if "17" in ais else ""
    return GS1Result(
        gtin=ais.get("01", ""),
        batch=ais.get("10", ""),
        expiry=expiry,
        serial=ais.get("21", ""),
        ais=ais,
    )


def decode_concatenated(s: str) -> GS1Result | None:
    """Positional decode of a GS1 stream that lost its group separators.

    Only AI (10) needs a boundary: it is read after ``17YYMMDD`` and stops at a
    following ``21`` when there is one, so a ``10`` inside the GTIN is never
    taken for a batch and the serial is not swallowed into it.
    """
    t = re.sub(r"[\s\x1d]", "", s)
    if len(t) < _FALLBACK_MIN_LENGTH:
        return None

    gtin_m = _FALLBACK_GTIN.search(t)
    serial_m = _FALLBACK_SERIAL.search(t)
    expiry_m = _FALLBACK_EXPIRY.search(t)
    batch_m = _FALLBACK_BATCH_BEFORE_SERIAL.search(t) or _FALLBACK_BATCH_TO_END.search(t)

    expiry = ""
    if expiry_m:
        yymmdd = expiry_m.group(1)
        year = expand_two_digit_year(int(yymmdd[0:2]))
        expiry = f"{year:04d}-{yymmdd[2:4]}-{yymmdd[4:6]}"

    result = GS1Result(
        gtin=gtin_m.group(1) if gtin_m else "",
        batch=batch_m.group(1) if batch_m else "",
        expiry=expiry,
        serial=serial_m.group(1) if serial_m else "",
        fallback=True,
    )
    return result if result.has_data() else None


def decode_gs1(raw: str) -> GS1Result | None:
    """Decode a barcode payload into GS1 label fields.

    Tries the AI grammar first and the positional fallback second. Returns
    ``None`` when neither finds a GTIN, batch, expiry or serial. Never raises.
    """
    s = preprocess(raw)
    if not s:
        return None

    try:
        result = _decode_grammar(s)
        if result.has_data():
            return result
        logger.debug("GS1 grammar found no label AIs in %r", s)
    except GS1SyntaxError as e:
        logger.debug("GS1 grammar decode failed (%s); trying positional fallback", e)

    result = decode_concatenated(s)
    if result is not None:
        logger.debug("GS1 positional fallback decoded %r", s)
    return result
