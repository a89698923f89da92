"""Batch ingestion orchestration."""

import contextvars
import re
from concurrent.futures import Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Mapping, Optional, Sequence

from file_ingestion.config import IngestionConfig
from file_ingestion.detector import FormatDetector
from file_ingestion.exceptions import InvalidBatchError
from file_ingestion.extractor import (
    Extractor,
    FallbackExtractor,
    PdfExtractor,
    SpreadsheetExtractor,
    TextExtractor,
    WordExtractor,
)
from file_ingestion.logger import Timer, batch_id_var, get_logger, new_batch_id
from file_ingestion.models import (
    ExtractionOutcome,
    ExtractionStrategy,
    SourceInfo,
    ThumbnailResult,
    ThumbnailStatus,
    UploadedFile,
)
from file_ingestion.ocr import ImageOcrExtractor
from file_ingestion.thumbnail import ThumbnailGenerator

logger = get_logger(__name__)

# C0 controls, DEL and C1 controls, except tab and newline
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")
# NEL and the Unicode line/paragraph separators end a line
_LINE_BREAKS = re.compile("\r\n|[\r\x85\u2028\u2029]")


def sanitize_text(text: str) -> str:
    """Normalize line endings and drop control characters that break prompts."""
    return _CONTROL_CHARS.sub("", _LINE_BREAKS.sub("\n", text))


def default_extractors(config: IngestionConfig) -> dict[ExtractionStrategy, Extractor]:
    return {
        ExtractionStrategy.PDF: PdfExtractor(config),
        ExtractionStrategy.WORD: WordExtractor(),
        ExtractionStrategy.SPREADSHEET: SpreadsheetExtractor(),
        ExtractionStrategy.PLAIN_TEXT: TextExtractor(),
        ExtractionStrategy.IMAGE_OCR: ImageOcrExtractor(config.ocr),
        ExtractionStrategy.FALLBACK: FallbackExtractor(),
    }


class IngestionProcessor:
    """Turns a batch of uploaded files into one outcome per file.

    A failing file never affects its siblings: every per-file fault ends up
    in that file's outcome. The processor holds no per-batch state, so one
    instance can serve concurrent requests.
    """

    def __init__(
        self,
        config: Optional[IngestionConfig] = None,
        detector: Optional[FormatDetector] = None,
        extractors: Optional[Mapping[ExtractionStrategy, Extractor]] = None,
        thumbnails: Optional[ThumbnailGenerator] = None,
    ) -> None:
        """Initialize the processor.

        Args:
            config: Ingestion configuration. If None, uses defaults.
            detector: MIME type detector. If None, creates default.
            extractors: Strategy registry. Missing strategies use the defaults.
            thumbnails: Thumbnail generator. If None, creates one from config.
        """
        self.config = config or IngestionConfig()
        self.detector = detector or FormatDetector()
        self.extractors = {**default_extractors(self.config), **(extractors or {})}
        self.thumbnails = thumbnails or ThumbnailGenerator(self.config.thumbnail)

    def process_batch(self, files: Sequence[UploadedFile]) -> list[ExtractionOutcome]:
        """Process a batch, returning outcomes in input order.

        Raises:
            InvalidBatchError: If the batch is empty or larger than max_batch_size
        """
        if not files:
            raise InvalidBatchError("No files uploaded")
        if len(files) > self.config.max_batch_size:
            raise InvalidBatchError(
                f"Too many files: {len(files)} (maximum {self.config.max_batch_size})"
            )

        token = batch_id_var.set(new_batch_id())
        try:
            with Timer("batch") as timer:
                outcomes = self._run(files)

            failed = sum(1 for outcome in outcomes if not outcome.success)
            logger.info(
                "Batch processed",
                extra_data={
                    "file_count": len(files),
                    "failed": failed,
                    "batch_time_ms": timer.get_elapsed_ms(),
                },
            )
            return outcomes
        finally:
            batch_id_var.reset(token)

    def _run(self, files: Sequence[UploadedFile]) -> list[ExtractionOutcome]:
        workers = max(1, min(self.config.max_workers, len(files)))
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ingest")
        try:
            # Each worker runs in a copy of this context so logs keep the batch ID
            futures: list[Future] = [
                executor.submit(contextvars.copy_context().run, self.process_file, upload)
                for upload in files
            ]
            wait(futures, timeout=self.config.batch_timeout_seconds)
            return [
                self._collect(future, upload) for future, upload in zip(futures, files)
            ]
        finally:
            # Timed-out pipelines keep running in the background; do not block on them
            executor.shutdown(wait=False, cancel_futures=True)

    def _collect(self, future: Future, upload: UploadedFile) -> ExtractionOutcome:
        if not future.done():
            future.cancel()
            message = f"Processing timed out after {self.config.batch_timeout_seconds}s"
            logger.warning(
                "File processing timed out",
                extra_data={"file_name": upload.file_name},
            )
            return self._failure(upload, self.detector.detect(upload.mime_type), message)

        try:
            return future.result()
        except Exception as exc:
            logger.error(
                "Unexpected error in file pipeline",
                extra_data={"file_name": upload.file_name, "error": str(exc)},
                exc_info=True,
            )
            return self._failure(upload, ExtractionStrategy.FALLBACK, str(exc))

    def process_file(self, upload: UploadedFile) -> ExtractionOutcome:
        """Run detection, extraction and thumbnailing for a single file."""
        log = logger.bind(file_name=upload.file_name, mime_type=upload.mime_type)

        with Timer("file") as timer:
            strategy = self.detector.detect(upload.mime_type)
            try:
                extracted = self.extractors[strategy].extract(upload)
            except Exception as exc:
                outcome = self._failure(upload, strategy, str(exc))
            else:
                text = sanitize_text(extracted.text)
                if not text.strip():
                    log.warning("No text content extracted from file")
                    text = f'No text content found in "{upload.file_name}"'
                outcome = ExtractionOutcome(
                    success=True,
                    extracted_text=text,
                    source=SourceInfo.of(upload),
                    strategy=strategy,
                    ocr_used=extracted.ocr_used,
                )

            outcome.thumbnail = self._thumbnail(upload)

        outcome.elapsed_ms = timer.get_elapsed_ms()
        if self.config.discard_uploads:
            self._discard(upload, log)

        log.info(
            "File processed",
            extra_data={
                "strategy": strategy.value,
                "success": outcome.success,
                "character_count": outcome.character_count,
                "thumbnail": outcome.thumbnail.status.value,
                "elapsed_ms": outcome.elapsed_ms,
            },
        )
        return outcome

    def _thumbnail(self, upload: UploadedFile) -> ThumbnailResult:
        if not self.detector.is_image(upload.mime_type):
            return ThumbnailResult(ThumbnailStatus.NOT_APPLICABLE)

        try:
            path = self.thumbnails.generate(upload.path, upload.mime_type)
        except Exception as exc:
            logger.warning(
                "Thumbnail generator raised",
                extra_data={"file_name": upload.file_name, "error": str(exc)},
            )
            path = None

        if path is None:
            return ThumbnailResult(ThumbnailStatus.FAILED)
        return ThumbnailResult(ThumbnailStatus.GENERATED, path)

    @staticmethod
    def _discard(upload: UploadedFile, log) -> None:
        try:
            Path(upload.path).unlink(missing_ok=True)
        except OSError as exc:
            log.warning("Could not delete uploaded file", extra_data={"error": str(exc)})

    @staticmethod
    def _failure(
        upload: UploadedFile, strategy: ExtractionStrategy, message: str
    ) -> ExtractionOutcome:
        message = message or "unknown error"
        return ExtractionOutcome(
            success=False,
            extracted_text=sanitize_text(f"Error processing file: {message}"),
            error_message=message,
            source=SourceInfo.of(upload),
            strategy=strategy,
        )
