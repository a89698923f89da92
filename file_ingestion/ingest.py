"""High-level API for ingesting files from disk."""

import mimetypes
from pathlib import Path
from typing import Optional, Sequence, Union

from file_ingestion.config import IngestionConfig
from file_ingestion.models import ExtractionOutcome, UploadedFile
from file_ingestion.processor import IngestionProcessor

DEFAULT_MIME_TYPE = "application/octet-stream"


def upload_from_path(
    file_path: Union[str, Path], mime_type: Optional[str] = None
) -> UploadedFile:
    """Describe a file on disk the way the upload transport would.

    Raises:
        ValueError: If the file does not exist
    """
    path = Path(file_path)
    if not path.is_file():
        raise ValueError(f"File not found: {file_path}")

    if not mime_type:
        guessed_type, _ = mimetypes.guess_type(path.name)
        mime_type = guessed_type or DEFAULT_MIME_TYPE

    return UploadedFile(
        path=path,
        mime_type=mime_type,
        file_name=path.name,
        size=path.stat().st_size,
    )


def ingest_paths(
    file_paths: Sequence[Union[str, Path]],
    mime_type: Optional[str] = None,
    config: Optional[IngestionConfig] = None,
    processor: Optional[IngestionProcessor] = None,
) -> list[ExtractionOutcome]:
    """Ingest files from disk as one batch.

    Args:
        file_paths: Paths of the files to ingest
        mime_type: MIME type applied to every file (guessed from extension if omitted)
        config: Ingestion configuration (ignored when processor is given)
        processor: Processor to reuse across calls

    Returns:
        One ExtractionOutcome per path, in order

    Raises:
        ValueError: If a path does not exist
        InvalidBatchError: If the batch is empty or too large

    Examples:
        >>> outcomes = ingest_paths(["report.pdf", "scan.png"])
        >>> [o.success for o in outcomes]
        [True, True]
    """
    uploads = [upload_from_path(path, mime_type) for path in file_paths]
    processor = processor or IngestionProcessor(config=config)
    return processor.process_batch(uploads)
