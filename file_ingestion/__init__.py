"""Upload ingestion: text extraction and thumbnails for uploaded files."""

from file_ingestion.config import IngestionConfig, OCRConfig, ThumbnailConfig
from file_ingestion.detector import FormatDetector
from file_ingestion.exceptions import (
    ExtractionError,
    IngestionError,
    InvalidBatchError,
)
from file_ingestion.extractor import (
    Extractor,
    FallbackExtractor,
    PdfExtractor,
    SpreadsheetExtractor,
    TextExtractor,
    WordExtractor,
)
from file_ingestion.ingest import ingest_paths, upload_from_path
from file_ingestion.models import (
    ExtractedText,
    ExtractionOutcome,
    ExtractionStrategy,
    SourceInfo,
    ThumbnailResult,
    ThumbnailStatus,
    UploadedFile,
)
from file_ingestion.ocr import ImageOcrExtractor
from file_ingestion.processor import IngestionProcessor
from file_ingestion.prompt_context import (
    AttachedFile,
    inline_attachment_context,
    system_attachment_context,
)
from file_ingestion.thumbnail import ThumbnailGenerator

__version__ = "0.1.0"

__all__ = [
    # High-level API
    "ingest_paths",
    "upload_from_path",
    # Core classes
    "IngestionProcessor",
    "FormatDetector",
    "ThumbnailGenerator",
    "Extractor",
    "PdfExtractor",
    "WordExtractor",
    "SpreadsheetExtractor",
    "TextExtractor",
    "ImageOcrExtractor",
    "FallbackExtractor",
    # Data models
    "UploadedFile",
    "ExtractionOutcome",
    "ExtractionStrategy",
    "ExtractedText",
    "SourceInfo",
    "ThumbnailResult",
    "ThumbnailStatus",
    # Prompt context
    "AttachedFile",
    "inline_attachment_context",
    "system_attachment_context",
    # Configuration
    "IngestionConfig",
    "OCRConfig",
    "ThumbnailConfig",
    # Exceptions
    "IngestionError",
    "ExtractionError",
    "InvalidBatchError",
]
