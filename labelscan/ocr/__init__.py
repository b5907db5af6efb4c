"""OCR text to label record extraction."""

from __future__ import annotations

import logging

from ..models import LabelRecord
from .cleanup import correct_batch_ocr, filter_label_text
from .formats import LABEL_FORMATS, FormatMatcher, best_match, extract_label

logger = logging.getLogger(__name__)

# Providers whose text the engine is known to receive
OCR_PROVIDERS = ("tesseract", "vision", "paddle")


def ocr_text_to_label(
    text: str, *, correct_batch: bool = True, filter_text: bool = True
) -> LabelRecord:
    """Filter OCR text, extract a record and correct a numeric batch code."""
    t = filter_label_text(text) if filter_text else (text or "").strip()
    if not t:
        return LabelRecord()

    record = extract_label(t)
    if correct_batch and record.batch_no:
        corrected = correct_batch_ocr(record.batch_no)
        if corrected != record.batch_no:
            logger.debug("Batch %s corrected to %s", record.batch_no, corrected)
            record.batch_no = corrected
    return record


__all__ = [
    "FormatMatcher",
    "LABEL_FORMATS",
    "OCR_PROVIDERS",
    "best_match",
    "correct_batch_ocr",
    "extract_label",
    "filter_label_text",
    "ocr_text_to_label",
]
