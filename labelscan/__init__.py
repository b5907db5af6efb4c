"""labelscan - normalize barcode, OCR and label-capture scans into one record."""

from .config import LabelscanConfig, load_config
from .expiry import normalize_expiry
from .gs1 import decode_gs1
from .models import GS1Result, LabelRecord
from .reconcile import reconcile
from .scan import ScanResult, scan_barcode, scan_fields, scan_text

__version__ = "0.1.0"

__all__ = [
    "GS1Result",
    "LabelscanConfig",
    "LabelRecord",
    "ScanResult",
    "decode_gs1",
    "load_config",
    "normalize_expiry",
    "reconcile",
    "scan_barcode",
    "scan_fields",
    "scan_text",
]
