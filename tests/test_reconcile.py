"""Tests for record reconciliation."""

import pytest

from labelscan.models import LabelRecord
from labelscan.reconcile import reconcile


class TestReconcile:
    def test_reference_equal_to_product_id_cleared(self):
        out = reconcile(LabelRecord(product_id="456085", reference="456085"))
        assert out.product_id == "456085"
        assert out.reference is None

    def test_lot_equal_to_product_id_cleared(self):
        out = reconcile(LabelRecord(lot_no="00350111561014", product_id="00350111561014"))
        assert out.lot_no == ""
        assert out.product_id == "00350111561014"

    def test_batch_equal_to_reference_cleared(self):
        out = reconcile(LabelRecord(batch_no="456085", lot_no="A1", reference="456085"))
        assert out.batch_no == ""
        assert out.lot_no == "A1"
        assert out.reference == "456085"

    def test_batch_and_lot_may_share_a_value(self):
        out = reconcile(LabelRecord(batch_no="402655", lot_no="402655"))
        assert out.batch_no == out.lot_no == "402655"

    def test_expiry_normalized(self):
        assert reconcile(LabelRecord(expiry="MAR 2027")).expiry == "2027-03"

    def test_unrecognized_expiry_dropped(self):
        assert reconcile(LabelRecord(expiry="soon")).expiry == ""

    def test_input_not_mutated(self):
        record = LabelRecord(lot_no="X1", product_id="X1", expiry="03/27")
        reconcile(record)
        assert record.lot_no == "X1"
        assert record.expiry == "03/27"

    @pytest.mark.parametrize(
        "record",
        [
            LabelRecord(batch_no="A", lot_no="A", product_id="A", reference="A"),
            LabelRecord(batch_no="B", lot_no="A", reference="A"),
            LabelRecord(batch_no="P", lot_no="R", product_id="P", reference="R"),
            LabelRecord(lot_no="L", product_id="L", reference="P"),
        ],
    )
    def test_identifiers_unique(self, record):
        out = reconcile(record)
        ids = [v for v in (out.product_id, out.reference) if v]
        assert len(ids) == len(set(ids))
        for v in (out.batch_no, out.lot_no):
            assert not v or v not in ids
