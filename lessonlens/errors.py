"""
Custom exceptions for LessonLens.

Every error carries an ErrorKind tag assigned where the failure happens,
so callers decide on retries and status codes from the tag rather than
from the message text.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Tagged error categories."""

    UNSUPPORTED_FORMAT = "unsupported_format"
    EXTRACTION_FAILURE = "extraction_failure"
    RESOURCE_FAILURE = "resource_failure"
    UPLOAD_LIMIT = "upload_limit"
    MISSING_DOCUMENTS = "missing_documents"
    RATE_LIMITED = "rate_limited"
    AUTHENTICATION = "authentication"
    INVALID_RESPONSE = "invalid_response"
    ANALYSIS_FAILURE = "analysis_failure"
    ANALYSIS_NOT_FOUND = "analysis_not_found"

    @property
    def retryable(self) -> bool:
        """Only rate limiting is worth retrying."""
        return self is ErrorKind.RATE_LIMITED

    @property
    def is_client_error(self) -> bool:
        """True for failures caused by the caller's input (4xx-equivalent)."""
        return self in {
            ErrorKind.UNSUPPORTED_FORMAT,
            ErrorKind.UPLOAD_LIMIT,
            ErrorKind.MISSING_DOCUMENTS,
            ErrorKind.ANALYSIS_NOT_FOUND,
        }


class LessonLensError(Exception):
    """Base exception for all LessonLens errors."""

    kind: ErrorKind = ErrorKind.EXTRACTION_FAILURE

    def __init__(
        self,
        message: str,
        kind: Optional[ErrorKind] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ExtractionError(LessonLensError):
    """An extraction method could not produce text."""

    kind = ErrorKind.EXTRACTION_FAILURE


class ResourceError(LessonLensError):
    """A temporary artifact could not be written or removed."""

    kind = ErrorKind.RESOURCE_FAILURE


class UploadLimitError(LessonLensError):
    """Upload exceeds the configured file count or file size ceiling."""

    kind = ErrorKind.UPLOAD_LIMIT


class MissingDocumentsError(LessonLensError):
    """A required document category is absent from an analysis request."""

    kind = ErrorKind.MISSING_DOCUMENTS

    def __init__(self, category: str) -> None:
        super().__init__(f"No {category} files found", details={"category": category})
        self.category = category


class AnalysisError(LessonLensError):
    """The LLM analysis service failed."""

    kind = ErrorKind.ANALYSIS_FAILURE
