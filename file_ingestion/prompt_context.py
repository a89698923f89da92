"""Formatting extracted file text as chat prompt context."""

from dataclasses import dataclass
from typing import Iterable, Optional

from file_ingestion.models import ExtractionOutcome
from file_ingestion.processor import sanitize_text


@dataclass(frozen=True)
class AttachedFile:
    """A previously ingested file referenced from a chat message."""

    name: str
    extracted_text: Optional[str] = None

    @classmethod
    def from_outcome(cls, outcome: ExtractionOutcome) -> "AttachedFile":
        return cls(
            name=outcome.source.name,
            extracted_text=outcome.extracted_text if outcome.success else None,
        )


def inline_attachment_context(files: Iterable[AttachedFile]) -> str:
    """Suffix appended to the user's message, or "" when nothing is attached."""
    lines = [f"- {f.name}: {sanitize_text(f.extracted_text or '...')}" for f in files]
    if not lines:
        return ""
    return "\n\nAttached files:\n" + "\n".join(lines)


def system_attachment_context(files: Iterable[AttachedFile]) -> Optional[str]:
    """System message exposing attached file contents to the model."""
    blocks = [
        f"File: {f.name}\nContent: {sanitize_text(f.extracted_text or 'Binary file')}"
        for f in files
    ]
    if not blocks:
        return None
    return (
        "You have access to the following files:\n\n"
        + "\n\n".join(blocks)
        + "\n\nUse this information to answer the user's questions."
    )
