"""
Extraction orchestrator.

Stages uploaded bytes as a temporary artifact, runs the format detector,
size-aware dispatcher and extractor fallback chain, then compresses and
truncates the result. Each call is single-shot: retries belong to callers.
"""

import dataclasses
import logging
import re
import time
import uuid
from contextlib import contextmanager
from pathlib import Path, PurePath
from typing import Iterator, Optional

from .compressor import TextCompressor
from .config import LessonLensSettings
from .detector import detect_format, file_extension
from .dispatcher import choose_variant, truncate_text
from .errors import ErrorKind, ResourceError
from .extractors import ExtractorRegistry, build_registry
from .models import DocumentFormat, ExtractionOutcome, Failure, SourceDocument, Success

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_MAX_FILENAME_LENGTH = 100


def sanitize_filename(filename: str) -> str:
    """Reduce an uploaded filename to a safe basename, keeping its extension."""
    name = PurePath(filename.replace("\\", "/")).name
    name = _UNSAFE_FILENAME_CHARS.sub("_", name).strip("._") or "upload"
    if len(name) > _MAX_FILENAME_LENGTH:
        suffix = PurePath(name).suffix[:16]
        name = name[: _MAX_FILENAME_LENGTH - len(suffix)] + suffix
    return name


class ExtractionOrchestrator:
    """Turns uploaded bytes into bounded, compressed text."""

    def __init__(self, config: LessonLensSettings, registry: Optional[ExtractorRegistry] = None):
        """Initialize the orchestrator."""
        self.config = config
        self.registry = registry or build_registry(config.extraction)
        self.compressor = TextCompressor(config.compression)

    def _artifact_path(self, filename: str) -> Path:
        """Unique staging path: timestamp plus random suffix plus the original name."""
        unique = f"{time.time_ns()}-{uuid.uuid4().hex[:8]}"
        return self.config.extraction.temp_dir / f"{unique}-{sanitize_filename(filename)}"

    def _remove_artifact(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("Failed to remove temporary artifact %s: %s", path, e)

    @contextmanager
    def staged_artifact(self, data: bytes, filename: str) -> Iterator[Path]:
        """Write data to a temporary file that is removed on every exit path."""
        path = self._artifact_path(filename)
        created = False
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "xb") as f:
                created = True
                f.write(data)
        except OSError as e:
            # Never remove a file this call did not create
            if created:
                self._remove_artifact(path)
            raise ResourceError(
                f"Failed to stage temporary file for {filename}: {e}",
                details={"path": str(path)},
            ) from e

        try:
            yield path
        finally:
            self._remove_artifact(path)

    def _finalize(self, outcome: Success) -> Success:
        """Compress, then bound the text length."""
        text = outcome.text
        if self.config.compression.enabled:
            compressed, _ = self.compressor.compress_with_stats(text)
            # A document made only of short paragraphs keeps its normalized text
            text = compressed or self.compressor.normalize(text)
        max_length = self.config.extraction.max_text_length
        if len(text) > max_length:
            logger.warning("Truncating %d chars of extracted text to %d", len(text), max_length)
            text = truncate_text(text, max_length)
        return dataclasses.replace(outcome, text=text)

    def extract(self, file_bytes: bytes, file_name: str) -> ExtractionOutcome:
        """Extract text from an uploaded file. Never raises."""
        fmt = detect_format(file_name)
        if fmt is DocumentFormat.UNSUPPORTED:
            extension = file_extension(file_name) or "(none)"
            logger.info("Rejecting %s: unsupported extension %s", file_name, extension)
            return Failure(
                reason=f"Unsupported file type: {extension}",
                kind=ErrorKind.UNSUPPORTED_FORMAT,
                format=fmt,
            )

        variant = choose_variant(fmt, len(file_bytes), self.config.extraction.fast_thresholds)
        try:
            extractor = self.registry.get(fmt)
            with self.staged_artifact(file_bytes, file_name) as artifact:
                outcome = extractor.extract(artifact, variant)
            if isinstance(outcome, Failure):
                logger.warning("Extraction failed for %s: %s", file_name, outcome.reason)
                return outcome
            result = self._finalize(outcome)
        except ResourceError as e:
            logger.error("%s", e)
            return Failure(reason=e.message, kind=ErrorKind.RESOURCE_FAILURE, format=fmt)
        except Exception as e:
            logger.exception("Unexpected error extracting %s", file_name)
            return Failure(
                reason=f"Failed to extract text: {type(e).__name__}: {e}",
                kind=ErrorKind.EXTRACTION_FAILURE,
                format=fmt,
            )

        logger.info(
            "Extracted %s (%s, %s via %s): %d chars",
            file_name, fmt.value, variant.value, result.method, len(result.text),
        )
        return result

    def extract_document(self, document: SourceDocument) -> ExtractionOutcome:
        """Extract text from a SourceDocument."""
        return self.extract(document.data, document.filename)
