"""MIME type to extraction strategy mapping."""

from typing import Optional

from file_ingestion.logger import get_logger
from file_ingestion.models import ExtractionStrategy

logger = get_logger(__name__)


STRATEGIES: dict[str, ExtractionStrategy] = {
    "application/pdf": ExtractionStrategy.PDF,
    "application/msword": ExtractionStrategy.WORD,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ExtractionStrategy.WORD,
    "application/vnd.ms-excel": ExtractionStrategy.SPREADSHEET,
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": ExtractionStrategy.SPREADSHEET,
    "text/plain": ExtractionStrategy.PLAIN_TEXT,
    "text/csv": ExtractionStrategy.PLAIN_TEXT,
    "image/jpeg": ExtractionStrategy.IMAGE_OCR,
    "image/jpg": ExtractionStrategy.IMAGE_OCR,  # non-standard, sent by some browsers
    "image/png": ExtractionStrategy.IMAGE_OCR,
    "image/gif": ExtractionStrategy.IMAGE_OCR,
    "image/webp": ExtractionStrategy.IMAGE_OCR,
}


def normalize_mime_type(mime_type: Optional[str]) -> str:
    """Lower-case a content type and drop parameters such as ``charset``."""
    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


class FormatDetector:
    """Maps a declared content type to an extraction strategy.

    Every input maps to some strategy; unknown types get FALLBACK.
    """

    def detect(self, mime_type: Optional[str]) -> ExtractionStrategy:
        normalized = normalize_mime_type(mime_type)
        strategy = STRATEGIES.get(normalized, ExtractionStrategy.FALLBACK)

        if strategy is ExtractionStrategy.FALLBACK:
            logger.debug(
                "No extractor for MIME type, using fallback",
                extra_data={"mime_type": mime_type},
            )
        return strategy

    @staticmethod
    def is_image(mime_type: Optional[str]) -> bool:
        return normalize_mime_type(mime_type).startswith("image/")
