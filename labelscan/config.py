"""TOML configuration loader for labelscan."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .ocr import OCR_PROVIDERS

PROVIDER_ENV = "LABELSCAN_OCR_PROVIDER"


@dataclass
class OcrConfig:
    provider: str = "tesseract"
    correct_batch: bool = True
    filter_text: bool = True


@dataclass
class CaptureConfig:
    disabled_fields: list[str] = field(default_factory=list)


@dataclass
class OutputConfig:
    indent: int = 2


@dataclass
class LabelscanConfig:
    ocr: OcrConfig = field(default_factory=OcrConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def load_config(path: str | Path | None = None) -> LabelscanConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    The OCR provider can be supplied through ``LABELSCAN_OCR_PROVIDER`` when
    the file leaves it out.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    ocr = raw.get("ocr", {})
    cap = raw.get("capture", {})
    out = raw.get("output", {})

    # config file → environment variable → default
    provider = ocr.get("provider", "") or os.environ.get(PROVIDER_ENV, "") or "tesseract"
    if provider not in OCR_PROVIDERS:
        raise ValueError(
            f"Unknown OCR provider {provider!r}; expected one of {', '.join(OCR_PROVIDERS)}"
        )

    return LabelscanConfig(
        ocr=OcrConfig(
            provider=provider,
            correct_batch=ocr.get("correct_batch", True),
            filter_text=ocr.get("filter_text", True),
        ),
        capture=CaptureConfig(
            disabled_fields=list(cap.get("disabled_fields", [])),
        ),
        output=OutputConfig(
            indent=out.get("indent", 2),
        ),
    )
