"""Tests for the scan entry points and their viewer payloads."""

import json

from labelscan.scan import ScanResult, scan_barcode, scan_fields, scan_text

GS1_PAYLOAD = "(01)12345678901231(17)271231(10)ABC123(21)SN42"


class TestScanBarcode:
    def test_gs1(self):
        result = scan_barcode(GS1_PAYLOAD)
        assert result.kind == "barcode"
        assert result.record.product_id == "12345678901231"
        assert result.record.batch_no == result.record.lot_no == "ABC123"
        assert result.record.expiry == "2027-12-31"
        assert result.record.serial == "SN42"
        assert result.raw_text.startswith("(01) GTIN\t12345678901231")

    def test_plain_upc(self):
        result = scan_barcode("012345678905")
        assert result.record.product_id == "012345678905"
        assert result.raw_text == "012345678905"

    def test_unreadable(self):
        result = scan_barcode("hello")
        assert result.record.is_empty()

    def test_payload_carries_raw_barcode(self):
        payload = scan_barcode(GS1_PAYLOAD).to_payload(timestamp=1700000000000)
        assert payload == {
            "type": "barcode",
            "value": GS1_PAYLOAD,
            "raw": GS1_PAYLOAD,
            "timestamp": 1700000000000,
        }


class TestScanText:
    def test_record_and_provider(self):
        result = scan_text("Lot No.: 20054138\nExp.: 2027-02", provider="vision")
        assert result.kind == "ocr"
        assert result.provider == "vision"
        assert result.record.lot_no == "20054138"

    def test_payload_value_is_record_json(self):
        payload = scan_text("Lot No.: 20054138\nExp.: 2027-02\n").to_payload(timestamp=5)
        assert payload["type"] == "ocr"
        assert payload["raw"] == "Lot No.: 20054138\nExp.: 2027-02"
        assert json.loads(payload["value"]) == {
            "batch_no": "",
            "lot_no": "20054138",
            "expiry": "2027-02",
        }

    def test_default_timestamp(self):
        payload = scan_text("LOT 693453").to_payload()
        assert isinstance(payload["timestamp"], int)
        assert payload["timestamp"] > 0


class TestScanFields:
    def test_dict_fields(self):
        result = scan_fields(
            [
                {"name": "Lot no", "text": "20054138"},
                {"name": "Expiry Date", "date": {"day": 1, "month": 3, "year": 2027}},
            ]
        )
        assert result.kind == "capture"
        assert result.record.lot_no == "20054138"
        assert result.record.expiry == "2027-03"
        assert result.raw_text == "Lot no: 20054138\nExpiry Date: 2027-03"

    def test_capture_sent_as_ocr(self):
        payload = scan_fields([{"name": "Lot no", "text": "20054138"}]).to_payload(timestamp=1)
        assert payload["type"] == "ocr"
        assert json.loads(payload["value"])["lot_no"] == "20054138"

    def test_empty_capture_placeholder(self):
        payload = ScanResult(kind="capture").to_payload(timestamp=1)
        assert payload["raw"] == "(label capture)"

    def test_plain_string_barcode(self):
        result = scan_fields([{"name": "Barcode", "barcode": "0112345678901231"}])
        assert result.record.product_id == "12345678901231"

    def test_month_name_in_date(self):
        result = scan_fields([{"name": "Expiry Date", "date": {"month": "MAR", "year": 2027}}])
        assert result.record.expiry == "2027-03"

    def test_malformed_date_parts_ignored(self):
        result = scan_fields(
            [
                {"name": "Expiry Date", "date": {"month": "??", "year": 2027}},
                {"name": "Lot no", "date": "soon"},
            ]
        )
        assert result.record.expiry == ""
        assert result.record.lot_no == "soon"
