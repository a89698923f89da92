"""Configuration classes for file ingestion."""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class OCRConfig:
    """Configuration for image OCR and the optional scanned-PDF fallback.

    Examples:
        >>> # Defaults: English, automatic page segmentation
        >>> config = OCRConfig()

        >>> # Multilingual recognition, scratch files on a RAM disk
        >>> config = OCRConfig(languages="eng+deu", temp_dir="/dev/shm")
    """

    tesseract_cmd: str = "tesseract"
    """Path to tesseract binary. Default: "tesseract" (assumes in PATH)."""

    tessdata_prefix: Optional[str] = None
    """Optional path to tessdata directory. If None, uses system default."""

    languages: str = "eng"
    """OCR languages in Tesseract format (e.g., "eng", "eng+fra")."""

    psm_mode: int = 3
    """Page segmentation mode (0-13). Default: 3 (fully automatic).

    Common modes:
    - 3: Fully automatic page segmentation (photos, screenshots)
    - 6: Uniform block of text (scanned documents)
    - 11: Sparse text
    """

    use_oem_1: bool = True
    """Use Tesseract OEM 1 (LSTM engine only)."""

    max_dimension: int = 2000
    """Images are shrunk to fit inside max_dimension x max_dimension before OCR.
    Smaller images are never upscaled."""

    contrast_cutoff: float = 0
    """Percent of lightest/darkest pixels ignored by contrast normalization."""

    temp_dir: Optional[str] = None
    """Directory for pre-processed OCR images. If None, uses the system temp dir."""

    dpi: int = 150
    """Render DPI for scanned-PDF OCR."""

    max_workers: int = 3
    """Parallel page workers for scanned-PDF OCR."""

    pdf_ocr_fallback: bool = False
    """Run OCR on PDFs whose native text layer looks too sparse."""

    pdf_ocr_min_chars: int = 500
    """Minimum characters extracted from native PDF to skip OCR."""

    pdf_ocr_min_chars_per_page: int = 150
    """Minimum average characters per page from native PDF to skip OCR."""

    pdf_ocr_min_file_size_bytes: int = 200_000
    """Small files with little text are assumed to be text-based PDFs."""

    def tesseract_args(self) -> str:
        """Command line flags passed to Tesseract."""
        args = f"--psm {self.psm_mode}"
        if self.use_oem_1:
            args = f"--oem 1 {args}"
        return args


@dataclass
class ThumbnailConfig:
    """Configuration for image previews."""

    size: tuple[int, int] = (200, 200)
    quality: int = 80
    output_dir: Optional[str] = None
    """Directory for thumbnails. If None, thumbnails are written next to the upload."""


@dataclass
class IngestionConfig:
    """Configuration for batch ingestion."""

    ocr: OCRConfig = field(default_factory=OCRConfig)
    thumbnail: ThumbnailConfig = field(default_factory=ThumbnailConfig)

    max_batch_size: int = 5
    """Upper bound on files per batch (the upload transport accepts at most 5)."""

    max_workers: int = 4
    """Files processed concurrently within one batch."""

    batch_timeout_seconds: Optional[float] = None
    """Files still running after this many seconds get a timeout outcome."""

    pdf_markdown: bool = False
    """Render PDFs as markdown through pymupdf4llm instead of plain page text."""

    table_strategy: str = "lines_strict"
    fontsize_limit: int = 3

    discard_uploads: bool = False
    """Delete the uploaded file once its outcome has been produced."""

    @classmethod
    def from_env(cls) -> "IngestionConfig":
        """Build a config from ``INGEST_*`` environment variables."""
        timeout = os.getenv("INGEST_BATCH_TIMEOUT_SECONDS")
        ocr = OCRConfig(
            tesseract_cmd=os.getenv("INGEST_TESSERACT_CMD", "tesseract"),
            tessdata_prefix=os.getenv("INGEST_TESSDATA_PREFIX") or None,
            languages=os.getenv("INGEST_OCR_LANGUAGES", "eng"),
            temp_dir=os.getenv("INGEST_TEMP_DIR") or None,
            pdf_ocr_fallback=_env_bool("INGEST_PDF_OCR_FALLBACK", False),
        )
        thumbnail = ThumbnailConfig(
            quality=int(os.getenv("INGEST_THUMBNAIL_QUALITY", "80")),
            output_dir=os.getenv("INGEST_THUMBNAIL_DIR") or None,
        )
        return cls(
            ocr=ocr,
            thumbnail=thumbnail,
            max_batch_size=int(os.getenv("INGEST_MAX_BATCH_SIZE", "5")),
            max_workers=int(os.getenv("INGEST_MAX_WORKERS", "4")),
            batch_timeout_seconds=float(timeout) if timeout else None,
            pdf_markdown=_env_bool("INGEST_PDF_MARKDOWN", False),
            discard_uploads=_env_bool("INGEST_DISCARD_UPLOADS", False),
        )


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}
