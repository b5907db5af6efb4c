"""OCR text cleanup before and after format extraction."""

from __future__ import annotations

import re

_SENSIBLE_CHARS = re.compile(r"[0-9A-Za-z\-/.,:()@# ]")
_HAS_WORD = re.compile(r"\d{2,}|[A-Za-z]{3,}")
_LOT_LINE = re.compile(r"Lot\s*No\.?\s*:?\s*\d+", re.I)
_EXP_LINE = re.compile(r"Exp\.?\s*:?\s*\d", re.I)
_BATCH_DIGITS = re.compile(r"^\d{3,5}$")

# OCR reads B as 8 and Z as 2 in short product codes (B0Z7 -> 8027)
_BATCH_CONFUSIONS = str.maketrans({"8": "B", "2": "Z"})


def filter_label_text(raw: str) -> str:
    """Drop OCR garbage lines, keeping lines that look like label content.

    A line survives when it has a 2+ digit run or a 3+ letter run and is
    mostly made of label characters, or when it reads like a lot or expiry
    line regardless of noise around it.
    """
    kept: list[str] = []
    for line in (s.strip() for s in re.split(r"\r?\n", raw or "")):
        if len(line) < 2:
            continue
        looks_like_lot_or_exp = bool(_LOT_LINE.search(line) or _EXP_LINE.search(line))
        has_word = bool(_HAS_WORD.search(line))
        mostly_sensible = len(_SENSIBLE_CHARS.findall(line)) / len(line) > 0.6
        if (has_word and mostly_sensible) or looks_like_lot_or_exp:
            kept.append(line)
    return "\n".join(kept).strip()


def correct_batch_ocr(batch: str) -> str:
    """Undo digit-for-letter misreads in a purely numeric 3-5 digit batch.

    Anything else is returned unchanged.
    """
    if not _BATCH_DIGITS.match(batch):
        return batch
    return batch.translate(_BATCH_CONFUSIONS).upper()
