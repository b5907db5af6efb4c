"""Final clean-up applied to every candidate label record."""

from __future__ import annotations

import logging

from .expiry import is_canonical, normalize_expiry
from .models import LabelRecord

logger = logging.getLogger(__name__)


def reconcile(record: LabelRecord) -> LabelRecord:
    """Return a copy of ``record`` that satisfies the record invariants.

    A value may fill only one role. On collision the lower-priority role is
    cleared, in the order product id > reference > batch/lot. Expiry leaves in
    canonical form, or empty when it cannot be normalized.
    """
    out = record.copy()

    if out.reference and out.reference == out.product_id:
        logger.debug("Reference %s duplicates product id; cleared", out.reference)
        out.reference = None

    for ident in (out.product_id, out.reference):
        if not ident:
            continue
        if out.batch_no == ident:
            logger.debug("Batch %s duplicates an identifier; cleared", ident)
            out.batch_no = ""
        if out.lot_no == ident:
            logger.debug("Lot %s duplicates an identifier; cleared", ident)
            out.lot_no = ""

    if out.expiry:
        expiry = normalize_expiry(out.expiry)
        if not is_canonical(expiry):
            logger.debug("Expiry %r is not a recognized date; dropped", out.expiry)
            expiry = ""
        out.expiry = expiry

    return out
