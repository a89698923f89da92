"""Unit tests for MIME type → strategy detection."""

from __future__ import annotations

import pytest

from file_ingestion.detector import FormatDetector, normalize_mime_type
from file_ingestion.models import ExtractionStrategy


@pytest.fixture
def detector() -> FormatDetector:
    return FormatDetector()


@pytest.mark.parametrize(
    ("mime_type", "expected"),
    [
        ("application/pdf", ExtractionStrategy.PDF),
        ("application/msword", ExtractionStrategy.WORD),
        (
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            ExtractionStrategy.WORD,
        ),
        ("application/vnd.ms-excel", ExtractionStrategy.SPREADSHEET),
        (
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            ExtractionStrategy.SPREADSHEET,
        ),
        ("text/plain", ExtractionStrategy.PLAIN_TEXT),
        ("text/csv", ExtractionStrategy.PLAIN_TEXT),
        ("image/jpeg", ExtractionStrategy.IMAGE_OCR),
        ("image/png", ExtractionStrategy.IMAGE_OCR),
        ("image/gif", ExtractionStrategy.IMAGE_OCR),
        ("image/webp", ExtractionStrategy.IMAGE_OCR),
    ],
)
def test_supported_types(detector: FormatDetector, mime_type: str, expected: ExtractionStrategy) -> None:
    assert detector.detect(mime_type) is expected


@pytest.mark.parametrize(
    "mime_type",
    [
        "application/zip",
        "application/octet-stream",
        "text/html",
        "image/bmp",
        "image/svg+xml",
        "video/mp4",
        "not a mime type",
        "",
        None,
    ],
)
def test_unknown_types_fall_back(detector: FormatDetector, mime_type) -> None:
    assert detector.detect(mime_type) is ExtractionStrategy.FALLBACK


def test_parameters_and_case_are_ignored(detector: FormatDetector) -> None:
    assert detector.detect("text/plain; charset=utf-8") is ExtractionStrategy.PLAIN_TEXT
    assert detector.detect("Application/PDF") is ExtractionStrategy.PDF
    assert detector.detect("  image/PNG ") is ExtractionStrategy.IMAGE_OCR


def test_is_image_covers_whole_family() -> None:
    assert FormatDetector.is_image("image/bmp")
    assert FormatDetector.is_image("image/png")
    assert not FormatDetector.is_image("application/pdf")
    assert not FormatDetector.is_image(None)


def test_normalize_mime_type() -> None:
    assert normalize_mime_type("Text/CSV; charset=latin-1") == "text/csv"
    assert normalize_mime_type(None) == ""
