"""
Core data types for the ingestion pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from pydantic import BaseModel, Field

from .errors import ErrorKind


class DocumentFormat(str, Enum):
    """Closed set of formats the detector can report."""

    PLAIN_TEXT = "plain_text"
    PDF = "pdf"
    WORD = "word"
    EXCEL = "excel"
    POWERPOINT = "powerpoint"
    UNSUPPORTED = "unsupported"


class ExtractionVariant(str, Enum):
    """Full (high fidelity) or Fast (bounded cost) extraction."""

    FULL = "full"
    FAST = "fast"


@dataclass(frozen=True)
class SourceDocument:
    """An uploaded document: raw bytes plus the declared filename."""

    data: bytes = field(repr=False)
    filename: str
    declared_size: Optional[int] = None

    @property
    def size(self) -> int:
        """Declared size if the uploader gave one, else the buffer length."""
        if self.declared_size is not None:
            return self.declared_size
        return len(self.data)


@dataclass(frozen=True)
class Success:
    """Extraction produced text (possibly empty)."""

    text: str = field(repr=False)
    method: str = "unknown"
    format: DocumentFormat = DocumentFormat.UNSUPPORTED
    variant: ExtractionVariant = ExtractionVariant.FULL

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Extraction failed; reason embeds the underlying cause."""

    reason: str
    kind: ErrorKind = ErrorKind.EXTRACTION_FAILURE
    format: DocumentFormat = DocumentFormat.UNSUPPORTED

    @property
    def ok(self) -> bool:
        return False


ExtractionOutcome = Union[Success, Failure]

# (document filename, outcome) in the order documents were submitted
BatchItem = Tuple[str, ExtractionOutcome]


class DocumentRecord(BaseModel):
    """Value handed to storage for each successfully extracted document."""

    name: str
    mime_type: str
    format: DocumentFormat
    size: int = Field(..., ge=0)
    extracted_text: str


__all__ = [
    "BatchItem",
    "DocumentFormat",
    "DocumentRecord",
    "ExtractionOutcome",
    "ExtractionVariant",
    "Failure",
    "SourceDocument",
    "Success",
]
