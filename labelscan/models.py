"""Data models for decoded barcodes and canonical label records."""

from __future__ import annotations

from dataclasses import dataclass, field, replace


@dataclass
class LabelRecord:
    """Canonical label record shared by every input path.

    Serialized with the viewer's key names: ``batch_no``, ``lot_no``,
    ``expiry``, and the optional ``upc_gtin``, ``serial``, ``ref``.
    """

    batch_no: str = ""
    lot_no: str = ""
    expiry: str = ""  # "", YYYY-MM or YYYY-MM-DD
    product_id: str | None = None  # GTIN / UPC digits
    serial: str | None = None
    reference: str | None = None  # REF number, never batch or lot

    def score(self) -> int:
        """Number of filled fields among batch, lot and expiry."""
        return sum(
            1 for v in (self.batch_no, self.lot_no, self.expiry) if v.strip()
        )

    def is_empty(self) -> bool:
        return not any(
            (
                self.batch_no,
                self.lot_no,
                self.expiry,
                self.product_id,
                self.serial,
                self.reference,
            )
        )

    def copy(self, **changes) -> LabelRecord:
        return replace(self, **changes)

    def to_dict(self) -> dict[str, str]:
        data = {
            "batch_no": self.batch_no,
            "lot_no": self.lot_no,
            "expiry": self.expiry,
        }
        if self.product_id:
            data["upc_gtin"] = self.product_id
        if self.serial:
            data["serial"] = self.serial
        if self.reference:
            data["ref"] = self.reference
        return data

    @classmethod
    def from_dict(cls, data: dict) -> LabelRecord:
        return cls(
            batch_no=str(data.get("batch_no") or ""),
            lot_no=str(data.get("lot_no") or ""),
            expiry=str(data.get("expiry") or ""),
            product_id=data.get("upc_gtin") or None,
            serial=data.get("serial") or None,
            reference=data.get("ref") or None,
        )

    def summary(self) -> str:
        """One-line summary for terminal output."""
        parts = [
            self.batch_no and f"Batch: {self.batch_no}",
            self.lot_no and f"Lot: {self.lot_no}",
            self.expiry and f"Exp: {self.expiry}",
            self.product_id and f"UPC: {self.product_id}",
            self.serial and f"Serial: {self.serial}",
            self.reference and f"Ref: {self.reference}",
        ]
        return ", ".join(p for p in parts if p)


@dataclass
class GS1Result:
    """Fields decoded from a GS1 element string before record mapping."""

    gtin: str = ""  # AI (01)
    batch: str = ""  # AI (10)
    expiry: str = ""  # AI (17), YYYY-MM-DD
    serial: str = ""  # AI (21)
    ais: dict[str, str] = field(default_factory=dict)  # empty on fallback
    fallback: bool = False

    def has_data(self) -> bool:
        return bool(self.gtin or self.batch or self.expiry or self.serial)

    def ai_count(self) -> int:
        return sum(1 for v in (self.gtin, self.batch, self.expiry, self.serial) if v)

    def to_record(self) -> LabelRecord:
        return LabelRecord(
            batch_no=self.batch,
            lot_no=self.batch,
            expiry=self.expiry,
            product_id=self.gtin or None,
            serial=self.serial or None,
        )
