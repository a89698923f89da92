"""Data models for file ingestion."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class ExtractionStrategy(str, Enum):
    PDF = "pdf"
    WORD = "word"
    SPREADSHEET = "spreadsheet"
    PLAIN_TEXT = "plain_text"
    IMAGE_OCR = "image_ocr"
    FALLBACK = "fallback"


class ThumbnailStatus(str, Enum):
    GENERATED = "generated"
    NOT_APPLICABLE = "not_applicable"
    FAILED = "failed"


@dataclass(frozen=True)
class UploadedFile:
    """A stored upload as handed over by the upload transport."""

    path: Path  # stored bytes
    mime_type: str  # declared by the client
    file_name: str  # original name
    size: int  # declared size, informational only

    def read_bytes(self) -> bytes:
        return Path(self.path).read_bytes()


@dataclass(frozen=True)
class ExtractedText:
    """Text produced by a single extractor."""

    text: str
    ocr_used: bool = False


@dataclass(frozen=True)
class SourceInfo:
    name: str
    mime_type: str
    size: int

    @classmethod
    def of(cls, upload: UploadedFile) -> "SourceInfo":
        return cls(name=upload.file_name, mime_type=upload.mime_type, size=upload.size)


@dataclass(frozen=True)
class ThumbnailResult:
    status: ThumbnailStatus
    path: Optional[Path] = None


@dataclass
class ExtractionOutcome:
    """Result of ingesting one uploaded file.

    ``extracted_text`` is never empty: failed files carry a diagnostic instead
    of content, and ``error_message`` is set iff ``success`` is false.
    """

    success: bool
    extracted_text: str
    source: SourceInfo
    strategy: ExtractionStrategy
    error_message: Optional[str] = None
    thumbnail: ThumbnailResult = field(
        default_factory=lambda: ThumbnailResult(ThumbnailStatus.NOT_APPLICABLE)
    )
    ocr_used: bool = False
    elapsed_ms: int = 0

    @property
    def character_count(self) -> int:
        return len(self.extracted_text) if self.success else 0

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation for upload responses."""
        return {
            "success": self.success,
            "extracted_text": self.extracted_text,
            "error": self.error_message,
            "file": {
                "name": self.source.name,
                "type": self.source.mime_type,
                "size": self.source.size,
            },
            "strategy": self.strategy.value,
            "thumbnail": {
                "status": self.thumbnail.status.value,
                "path": str(self.thumbnail.path) if self.thumbnail.path else None,
            },
            "ocr_used": self.ocr_used,
            "character_count": self.character_count,
            "elapsed_ms": self.elapsed_ms,
        }
