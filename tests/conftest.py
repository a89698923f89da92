"""Shared fixtures: in-memory documents built with the real format libraries."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Callable

import fitz
import pytest
import xlwt
from docx import Document
from openpyxl import Workbook
from PIL import Image, ImageDraw

from file_ingestion.config import IngestionConfig, OCRConfig, ThumbnailConfig
from file_ingestion.models import UploadedFile

MakeUpload = Callable[..., UploadedFile]


@pytest.fixture
def uploads_dir(tmp_path: Path) -> Path:
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def ocr_temp_dir(tmp_path: Path) -> Path:
    path = tmp_path / "ocr"
    path.mkdir()
    return path


@pytest.fixture
def make_upload(uploads_dir: Path) -> MakeUpload:
    """Write bytes into the uploads dir and describe them as an UploadedFile."""

    def _make(data: bytes, file_name: str, mime_type: str) -> UploadedFile:
        path = uploads_dir / file_name
        path.write_bytes(data)
        return UploadedFile(path=path, mime_type=mime_type, file_name=file_name, size=len(data))

    return _make


@pytest.fixture
def config(ocr_temp_dir: Path) -> IngestionConfig:
    return IngestionConfig(
        ocr=OCRConfig(temp_dir=str(ocr_temp_dir)),
        thumbnail=ThumbnailConfig(),
    )


@pytest.fixture
def fake_tesseract(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Replace Tesseract with a stub returning "Recognized text".

    Returns the list of image paths the stub was called with.
    """
    import pytesseract

    calls: list[str] = []

    def _image_to_string(image, lang=None, config=None):
        calls.append(image)
        return "Recognized text\n"

    monkeypatch.setattr(pytesseract, "image_to_string", _image_to_string)
    return calls


def _build_pdf(*pages: str, **save_options) -> bytes:
    document = fitz.open()
    for text in pages:
        page = document.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = document.tobytes(**save_options)
    document.close()
    return data


def _build_png(size: tuple[int, int] = (400, 300), mode: str = "RGB") -> bytes:
    image = Image.new(mode, size, "white")
    ImageDraw.Draw(image).rectangle((10, 10, size[0] // 2, size[1] // 2), fill="black")
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    return _build_pdf("First page text.", "Second page text.", "Third page text.")


@pytest.fixture
def sample_docx_bytes() -> bytes:
    document = Document()
    document.add_paragraph("First paragraph of the document.")
    document.add_paragraph("")
    document.add_paragraph("Second paragraph with more detail.")
    table = document.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "Name"
    table.cell(0, 1).text = "Value"
    table.cell(1, 0).text = "alpha"
    table.cell(1, 1).text = "1"
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


@pytest.fixture
def sample_xlsx_bytes() -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Sheet1"
    sheet.append(["a", "b"])
    sheet.append(["c", "d"])
    buf = io.BytesIO()
    workbook.save(buf)
    return buf.getvalue()


@pytest.fixture
def sample_xls_bytes() -> bytes:
    """Legacy BIFF workbook; xlrd reads every number back as a float."""
    workbook = xlwt.Workbook()
    totals = workbook.add_sheet("Totals")
    totals.write(0, 0, "region")
    totals.write(0, 1, "amount")
    totals.write(2, 0, "north")
    totals.write(2, 1, 12)
    totals.write(3, 0, "south")
    totals.write(3, 1, 3.5)
    workbook.add_sheet("Notes").write(0, 0, "checked")
    buf = io.BytesIO()
    workbook.save(buf)
    return buf.getvalue()


@pytest.fixture
def sample_png_bytes() -> bytes:
    return _build_png()


@pytest.fixture
def pdf_factory() -> Callable[..., bytes]:
    """Build a PDF with one page per text argument (empty string = blank page)."""
    return _build_pdf


@pytest.fixture
def png_factory() -> Callable[..., bytes]:
    return _build_png
