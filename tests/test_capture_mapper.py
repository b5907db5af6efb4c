"""Tests for mapping label-capture fields to a label record."""

import pytest

from labelscan.capture.fields import FIELD_DEFINITIONS, active_definitions
from labelscan.capture.mapper import (
    BarcodeField,
    DateField,
    TextField,
    field_from_dict,
    field_value,
    is_product_code_misread,
    map_field_values,
    map_fields,
    parse_lot_and_expiry_from_raw,
    parse_serial_from_raw,
)

GS1_PAYLOAD = "(01)12345678901231(17)271231(10)ABC123(21)SN42"
CONCATENATED = "0100350111561014211010454151481217270531107981055"


class TestFieldValue:
    def test_text(self):
        assert field_value(TextField("Lot no", "20054138")) == "20054138"

    def test_date(self):
        assert field_value(DateField("Expiry Date", day=15, month=3, year=2027)) == "2027-03"

    def test_barcode(self):
        assert field_value(BarcodeField("Barcode", "012345678905")) == "012345678905"


class TestFieldFromDict:
    def test_date_wins(self):
        field = field_from_dict(
            {"name": "Expiry Date", "text": "x", "date": {"day": 1, "month": 3, "year": 2027}}
        )
        assert field == DateField("Expiry Date", day=1, month=3, year=2027)

    def test_barcode(self):
        field = field_from_dict({"name": "Barcode", "barcode": {"data": GS1_PAYLOAD}})
        assert field == BarcodeField("Barcode", GS1_PAYLOAD)

    def test_barcode_by_value(self):
        assert field_from_dict({"name": "Barcode", "value": "456085"}) == BarcodeField(
            "Barcode", "456085"
        )

    def test_text(self):
        assert field_from_dict({"name": "Lot no", "text": "20054138"}) == TextField(
            "Lot no", "20054138"
        )

    def test_missing_text(self):
        assert field_from_dict({"name": "Lot no"}) == TextField("Lot no", "")

    def test_barcode_as_plain_string(self):
        assert field_from_dict({"name": "Barcode", "barcode": "456085"}) == BarcodeField(
            "Barcode", "456085"
        )

    def test_barcode_name_with_text(self):
        assert field_from_dict({"name": "Barcode", "text": "456085"}) == BarcodeField(
            "Barcode", "456085"
        )

    def test_date_as_string(self):
        assert field_from_dict({"name": "Expiry Date", "date": "03/2027"}) == TextField(
            "Expiry Date", "03/2027"
        )

    def test_unexpected_shapes_are_absent(self):
        assert field_from_dict({"name": "Lot no", "date": 5, "barcode": None}) == TextField(
            "Lot no", ""
        )


class TestMisread:
    @pytest.mark.parametrize("value", ["L0T", "LT", "lot", "EXP", "E1P", "LAY0UT", "Layout", "B0"])
    def test_misreads(self, value):
        assert is_product_code_misread(value)

    @pytest.mark.parametrize("value", ["B0Z7", "F809XA01X", "EXP1"])
    def test_real_codes(self, value):
        assert not is_product_code_misread(value)

    def test_misread_product_code_dropped(self):
        record, raw = map_fields(
            [
                TextField("Product code", "L0T"),
                TextField("Lot no", "20054138"),
                TextField("Expiry", "2027-02"),
            ]
        )
        assert record.batch_no == ""
        assert record.lot_no == "20054138"
        assert record.expiry == "2027-02"
        assert "L0T" not in raw
        assert raw == "Lot no: 20054138\nExpiry: 2027-02"

    def test_real_product_code_kept(self):
        record, raw = map_fields([TextField("Product code", "B0Z7")])
        assert record.batch_no == record.lot_no == "B0Z7"
        assert raw == "Product code: B0Z7"


class TestYymmddRedirect:
    def test_date_like_value_becomes_expiry(self):
        record, raw = map_fields([TextField("Batch/Lot (numeric)", "261201")])
        assert record.expiry == "2026-12-01"
        assert record.batch_no == ""
        assert record.lot_no == ""
        assert raw == "Batch/Lot (numeric): 261201"

    def test_non_date_value_stays_batch_lot(self):
        record, _ = map_fields([TextField("Batch/Lot (numeric)", "999999")])
        assert record.batch_no == record.lot_no == "999999"
        assert record.expiry == ""


class TestBarcodes:
    def test_gs1_barcode_overrides_text(self):
        record, raw = map_fields(
            [
                TextField("Lot no", "11111111"),
                BarcodeField("Barcode", GS1_PAYLOAD),
            ]
        )
        assert record.product_id == "12345678901231"
        assert record.batch_no == record.lot_no == "ABC123"
        assert record.expiry == "2027-12-31"
        assert record.serial == "SN42"
        assert raw.endswith("\nSerial: SN42")
        assert f"Barcode: {GS1_PAYLOAD}" in raw

    def test_primary_barcode_and_short_reference(self):
        record, _ = map_fields(
            [
                BarcodeField("Barcode", "456085"),
                BarcodeField("Barcode", CONCATENATED),
            ]
        )
        assert record.product_id == "00350111561014"
        assert record.reference == "456085"
        assert record.lot_no == "7981055"
        assert record.expiry == "2027-05-31"

    def test_longest_qualifying_barcode_is_primary(self):
        record, _ = map_fields(
            [
                BarcodeField("Barcode", "0112345678901231" + "10AAAA"),
                BarcodeField("Barcode", "011234567890123117271231" + "10BBB|21SN42"),
            ]
        )
        assert record.lot_no == "BBB"
        assert record.expiry == "2027-12-31"
        assert record.serial == "SN42"

    def test_equally_long_barcodes_keep_first(self):
        record, _ = map_fields(
            [
                BarcodeField("Barcode", "0112345678901231" + "10AAAA"),
                BarcodeField("Barcode", "0112345678901231" + "10BBBB"),
            ]
        )
        assert record.lot_no == "AAAA"

    def test_bracketed_primary_with_short_reference(self):
        record, _ = map_fields(
            [BarcodeField("Barcode", "456085"), BarcodeField("Barcode", GS1_PAYLOAD)]
        )
        assert record.reference == "456085"
        assert record.product_id == "12345678901231"
        assert record.lot_no == "ABC123"

    def test_plain_product_code(self):
        record, _ = map_fields([BarcodeField("Barcode", "012345678905")])
        assert record.product_id == "012345678905"

    def test_gtin_with_ai_prefix(self):
        record, _ = map_fields([BarcodeField("Barcode", "(01) 1234567890123")])
        assert record.product_id == "1234567890123"


class TestDates:
    def test_builtin_date_field(self):
        record, raw = map_fields([DateField("Expiry Date", day=15, month=3, year=2027)])
        assert record.expiry == "2027-03"
        assert raw == "Expiry Date: 2027-03"

    def test_table_expiry_normalized(self):
        record, _ = map_fields([TextField("Expiry (EXP MMM YYYY)", "MAR 2027")])
        assert record.expiry == "2027-03"


class TestRawFallbacks:
    def test_lot_and_expiry_from_raw(self):
        record, _ = map_fields([TextField("Notes", "LOT 693453 EXP MAR 2027")])
        assert record.lot_no == "693453"
        assert record.expiry == "2027-03"

    def test_serial_from_raw(self):
        record, _ = map_fields([TextField("Notes", "SN: AB12345678")])
        assert record.serial == "AB12345678"

    def test_serial_field_appended_to_raw(self):
        record, raw = map_fields([TextField("Serial no", "10104541514812")])
        assert record.serial == "10104541514812"
        assert raw == "Serial no: 10104541514812\nSerial: 10104541514812"

    def test_parse_helpers(self):
        assert parse_lot_and_expiry_from_raw("Lot No.: 20054138 Exp.: 2027-02") == (
            "20054138",
            "2027-02",
        )
        assert parse_lot_and_expiry_from_raw("Printed 402655") == ("402655", "")
        assert parse_lot_and_expiry_from_raw("Printed 261201", skip={"261201"}) == ("", "")
        assert parse_serial_from_raw("S/N 12345678") == "12345678"
        assert parse_serial_from_raw("nothing") == ""


class TestInvariants:
    def test_reference_beats_batch_lot(self):
        record, _ = map_fields(
            [
                TextField("Ref no", "456085"),
                TextField("Batch/Lot (numeric)", "456085"),
            ]
        )
        assert record.reference == "456085"
        assert record.batch_no == ""
        assert record.lot_no == ""

    def test_disabled_definition_not_routed(self):
        definitions = active_definitions(["Ref no"])
        record, raw = map_fields([TextField("Ref no", "REF-9")], definitions)
        assert record.reference is None
        assert raw == "Ref no: REF-9"

    def test_empty_input(self):
        record, raw = map_fields([])
        assert record.is_empty()
        assert raw == ""


class TestMapFieldValues:
    def test_pairs(self):
        record, _ = map_field_values(
            [("Lot no", "20054138"), ("Barcode", "012345678905")], FIELD_DEFINITIONS
        )
        assert record.lot_no == "20054138"
        assert record.product_id == "012345678905"
