"""Custom exceptions for file ingestion."""


class IngestionError(Exception):
    """Base exception for file ingestion errors."""

    pass


class ExtractionError(IngestionError):
    """Raised when text extraction fails for a single file."""

    pass


class InvalidBatchError(IngestionError):
    """Raised when a batch is empty or exceeds the configured size."""

    pass
