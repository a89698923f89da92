"""Format extractors for PDF, Word, spreadsheet and plain text uploads."""

import csv
import io
import shutil
import subprocess
import tempfile
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional

import fitz  # PyMuPDF
import pymupdf4llm
import pytesseract
import xlrd
from docx import Document
from docx.table import Table
from openpyxl import load_workbook
from PIL import Image

from file_ingestion.config import IngestionConfig, OCRConfig
from file_ingestion.exceptions import ExtractionError
from file_ingestion.logger import Timer, get_logger
from file_ingestion.models import ExtractedText, UploadedFile

logger = get_logger(__name__)


OLE_SIGNATURE = b"\xd0\xcf\x11\xe0"  # Legacy Office container (.doc/.xls)
ZIP_SIGNATURE = b"PK\x03\x04"  # OOXML package (.docx/.xlsx)

SheetRows = tuple[str, Iterable[Iterable[Any]]]


class Extractor(ABC):
    """Converts one file format into text.

    Subclasses implement :meth:`_extract`; any exception raised there is
    logged and re-raised as :class:`ExtractionError` prefixed with
    ``failure_message``.
    """

    failure_message = "File processing failed"
    reads_content = True

    def extract(self, upload: UploadedFile) -> ExtractedText:
        log = logger.bind(file_name=upload.file_name, extractor=type(self).__name__)

        try:
            with Timer("extraction") as timer:
                data = upload.read_bytes() if self.reads_content else b""
                result = self._extract(upload, data)
        except Exception as exc:
            log.error(
                "Extraction failed",
                extra_data={"error_type": type(exc).__name__, "error": str(exc)},
                exc_info=True,
            )
            error_cls = type(exc) if isinstance(exc, ExtractionError) else ExtractionError
            raise error_cls(f"{self.failure_message}: {exc}") from exc

        log.debug(
            "Extraction completed",
            extra_data={
                "file_size_bytes": len(data),
                "characters_extracted": len(result.text),
                "ocr_used": result.ocr_used,
                "extraction_time_ms": timer.get_elapsed_ms(),
            },
        )
        return result

    @abstractmethod
    def _extract(self, upload: UploadedFile, data: bytes) -> ExtractedText: ...


class PdfExtractor(Extractor):
    """Concatenates the text of every page in document order.

    Optionally renders markdown through pymupdf4llm and falls back to
    Tesseract for scanned documents whose text layer is too sparse.
    """

    failure_message = "PDF processing failed"

    def __init__(self, config: Optional[IngestionConfig] = None):
        self.config = config or IngestionConfig()

    @property
    def ocr_config(self) -> OCRConfig:
        return self.config.ocr

    def _extract(self, upload: UploadedFile, data: bytes) -> ExtractedText:
        with fitz.open(stream=data, filetype="pdf") as document:
            if document.needs_pass:
                raise ExtractionError("document is encrypted")

            page_count = document.page_count
            if page_count == 0:
                raise ExtractionError("document has no pages")
            if self.config.pdf_markdown:
                text = pymupdf4llm.to_markdown(
                    document,
                    table_strategy=self.config.table_strategy,
                    force_text=True,
                    write_images=False,
                    ignore_images=True,
                    ignore_code=False,
                    fontsize_limit=self.config.fontsize_limit,
                )
            else:
                pages = (page.get_text("text").strip() for page in document)
                text = "\n\n".join(page for page in pages if page)

        text = text.strip()
        if self.ocr_config.pdf_ocr_fallback and self._should_ocr_pdf(
            len(text), page_count, len(data)
        ):
            logger.info(
                "Triggering OCR fallback for PDF",
                extra_data={
                    "file_name": upload.file_name,
                    "native_characters": len(text),
                    "page_count": page_count,
                },
            )
            ocr_text = self._ocr_pdf(data, page_count, upload.file_name)
            # Prefer OCR output if it is longer than the native extraction
            if len(ocr_text) > len(text):
                return ExtractedText(ocr_text, ocr_used=True)

        return ExtractedText(text)

    def _should_ocr_pdf(
        self, native_char_count: int, page_count: int, file_size_bytes: int
    ) -> bool:
        """Decide whether to run OCR fallback after native extraction."""
        if native_char_count == 0:
            return True

        # Very little text per page likely means a scanned PDF
        if page_count > 0 and (
            native_char_count / page_count
        ) < self.ocr_config.pdf_ocr_min_chars_per_page:
            return True

        return (
            native_char_count < self.ocr_config.pdf_ocr_min_chars
            and file_size_bytes >= self.ocr_config.pdf_ocr_min_file_size_bytes
        )

    def _ocr_page(self, data: bytes, page_num: int, file_name: str) -> str:
        try:
            with fitz.open(stream=data, filetype="pdf") as document:
                pix = document[page_num].get_pixmap(dpi=self.ocr_config.dpi)
                image = Image.open(io.BytesIO(pix.tobytes("png")))

            page_text = pytesseract.image_to_string(
                image,
                lang=self.ocr_config.languages,
                config=self.ocr_config.tesseract_args(),
            )
            return page_text.strip()
        except Exception as exc:
            # One unreadable page must not discard the others
            logger.error(
                f"OCR failed for page {page_num + 1}",
                extra_data={
                    "file_name": file_name,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
                exc_info=True,
            )
            return ""

    def _ocr_pdf(self, data: bytes, page_count: int, file_name: str) -> str:
        with Timer("pdf_ocr") as timer:
            with ThreadPoolExecutor(max_workers=self.ocr_config.max_workers) as executor:
                # map() keeps page order
                page_texts = list(
                    executor.map(
                        lambda page_num: self._ocr_page(data, page_num, file_name),
                        range(page_count),
                    )
                )

        total_text = "\n\n".join(text for text in page_texts if text)
        logger.info(
            "PDF OCR completed",
            extra_data={
                "file_name": file_name,
                "page_count": page_count,
                "total_characters": len(total_text),
                "ocr_time_ms": timer.get_elapsed_ms(),
            },
        )
        return total_text


class WordExtractor(Extractor):
    """Raw paragraph and table text from Word documents."""

    failure_message = "Word document processing failed"

    def _extract(self, upload: UploadedFile, data: bytes) -> ExtractedText:
        if data.startswith(OLE_SIGNATURE):
            return ExtractedText(self._convert_legacy_doc(data, upload.file_name))

        document = Document(io.BytesIO(data))
        parts = []
        # Body order: tables stay where they appear between paragraphs
        for block in document.iter_inner_content():
            text = self._table_text(block) if isinstance(block, Table) else block.text.strip()
            if text:
                parts.append(text)

        return ExtractedText("\n\n".join(parts))

    @staticmethod
    def _table_text(table: Table) -> str:
        rows = ["\t".join(cell.text.strip() for cell in row.cells) for row in table.rows]
        return "\n".join(row for row in rows if row.strip())

    def _convert_legacy_doc(self, data: bytes, file_name: str) -> str:
        """Convert a binary .doc through textutil (macOS) or LibreOffice."""
        with tempfile.TemporaryDirectory(prefix="doc_convert_") as tmp_dir:
            source = Path(tmp_dir) / "document.doc"
            source.write_bytes(data)

            if shutil.which("textutil"):
                result = subprocess.run(
                    ["textutil", "-convert", "txt", str(source), "-stdout"],
                    capture_output=True,
                    text=True,
                    timeout=120,
                )
                if result.returncode == 0 and result.stdout.strip():
                    logger.info(
                        "DOC extraction completed via textutil",
                        extra_data={"file_name": file_name},
                    )
                    return result.stdout.strip()

            soffice = shutil.which("soffice") or shutil.which("libreoffice")
            if soffice:
                conversion = subprocess.run(
                    [
                        soffice,
                        "--headless",
                        "--convert-to",
                        "txt:Text",
                        str(source),
                        "--outdir",
                        tmp_dir,
                    ],
                    capture_output=True,
                    text=True,
                    timeout=120,
                )
                out_path = Path(tmp_dir) / "document.txt"
                if conversion.returncode == 0 and out_path.exists():
                    logger.info(
                        "DOC extraction completed via soffice",
                        extra_data={"file_name": file_name},
                    )
                    return out_path.read_text(encoding="utf-8", errors="ignore").strip()

        raise ExtractionError(
            "legacy .doc format requires textutil or LibreOffice; convert to DOCX"
        )


class SpreadsheetExtractor(Extractor):
    """Tab-separated rows for every sheet, each under a ``Sheet: <name>`` header."""

    failure_message = "Excel processing failed"

    def _extract(self, upload: UploadedFile, data: bytes) -> ExtractedText:
        if data.startswith(OLE_SIGNATURE):
            return ExtractedText(render_sheets(self._read_xls(data)))
        if not data.startswith(ZIP_SIGNATURE):
            # Browsers often label .csv uploads as application/vnd.ms-excel
            text = decode_text(data, upload.file_name)
            return ExtractedText(render_sheets([("Sheet1", self._read_csv(text))]))

        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
        try:
            return ExtractedText(render_sheets(self._read_xlsx(workbook)))
        finally:
            workbook.close()

    @staticmethod
    def _read_xlsx(workbook) -> Iterator[SheetRows]:
        for sheet in workbook.worksheets:
            yield sheet.title, sheet.iter_rows(values_only=True)

    @staticmethod
    def _read_xls(data: bytes) -> Iterator[SheetRows]:
        workbook = xlrd.open_workbook(file_contents=data)
        for sheet in workbook.sheets():
            yield sheet.name, (sheet.row_values(i) for i in range(sheet.nrows))

    @staticmethod
    def _read_csv(text: str) -> Iterator[list[str]]:
        return csv.reader(io.StringIO(text))


def render_sheets(sheets: Iterable[SheetRows]) -> str:
    parts: list[str] = []
    for name, rows in sheets:
        parts.append(f"Sheet: {name}\n")
        for row in rows:
            cells = [_cell_text(value) for value in row]
            while cells and not cells[-1]:
                cells.pop()
            if cells:
                parts.append("\t".join(cells) + "\n")
        parts.append("\n")
    return "".join(parts)


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def decode_text(data: bytes, file_name: str) -> str:
    """Decode UTF-8 (BOM dropped), replacing undecodable bytes with U+FFFD."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        logger.warning(
            "Text is not valid UTF-8, replacing undecodable bytes",
            extra_data={"file_name": file_name, "byte_offset": exc.start},
        )
    return data.decode("utf-8-sig", errors="replace")


class TextExtractor(Extractor):
    failure_message = "Text file processing failed"

    def _extract(self, upload: UploadedFile, data: bytes) -> ExtractedText:
        return ExtractedText(decode_text(data, upload.file_name))


class FallbackExtractor(Extractor):
    """Placeholder text for formats without an extractor."""

    reads_content = False

    def _extract(self, upload: UploadedFile, data: bytes) -> ExtractedText:
        return ExtractedText(
            f'File "{upload.file_name}" uploaded successfully. '
            f"Content type: {upload.mime_type}"
        )
