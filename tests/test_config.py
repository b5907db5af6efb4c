"""Tests for labelscan config loading."""

import pytest

from labelscan.config import LabelscanConfig, load_config


@pytest.fixture(autouse=True)
def _no_provider_env(monkeypatch):
    monkeypatch.delenv("LABELSCAN_OCR_PROVIDER", raising=False)


def _write(tmp_path, content: str):
    path = tmp_path / "labelscan.toml"
    path.write_text(content, encoding="utf-8")
    return path


def test_load_config_defaults():
    """Loading with no path returns all defaults."""
    config = load_config()
    assert isinstance(config, LabelscanConfig)
    assert config.ocr.provider == "tesseract"
    assert config.ocr.correct_batch is True
    assert config.ocr.filter_text is True
    assert config.capture.disabled_fields == []
    assert config.output.indent == 2


def test_load_config_nonexistent_file():
    """Loading a nonexistent file returns defaults."""
    config = load_config("/nonexistent/path.toml")
    assert config.ocr.provider == "tesseract"


def test_load_config_from_toml(tmp_path):
    path = _write(
        tmp_path,
        """\
[ocr]
provider = "paddle"
correct_batch = false

[capture]
disabled_fields = ["Lot no (LOT prefix)"]

[output]
indent = 4
""",
    )
    config = load_config(path)
    assert config.ocr.provider == "paddle"
    assert config.ocr.correct_batch is False
    assert config.ocr.filter_text is True
    assert config.capture.disabled_fields == ["Lot no (LOT prefix)"]
    assert config.output.indent == 4


def test_provider_from_environment(monkeypatch):
    monkeypatch.setenv("LABELSCAN_OCR_PROVIDER", "vision")
    assert load_config().ocr.provider == "vision"


def test_file_provider_beats_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("LABELSCAN_OCR_PROVIDER", "vision")
    path = _write(tmp_path, '[ocr]\nprovider = "paddle"\n')
    assert load_config(path).ocr.provider == "paddle"


def test_unknown_provider(tmp_path):
    path = _write(tmp_path, '[ocr]\nprovider = "abbyy"\n')
    with pytest.raises(ValueError, match="Unknown OCR provider"):
        load_config(path)


def test_invalid_toml_is_value_error(tmp_path):
    path = _write(tmp_path, "[ocr\nprovider = ")
    with pytest.raises(ValueError):
        load_config(path)
