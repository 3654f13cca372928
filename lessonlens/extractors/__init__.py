"""
Text extraction modules.

Each format has one extractor with a primary method and a fallback. The
fallback for every format is the raw printable-string scan, so a document
only fails when both methods raise.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List

from ..config import ExtractionSettings
from ..errors import ErrorKind
from ..models import DocumentFormat, ExtractionOutcome, ExtractionVariant, Failure, Success
from .raw import RAW_SCAN_METHOD, scan_printable_strings

logger = logging.getLogger(__name__)


class BaseExtractor(ABC):
    """Abstract base class for per-format extractors."""

    def __init__(self, settings: ExtractionSettings):
        self.settings = settings

    @property
    @abstractmethod
    def format(self) -> DocumentFormat:
        """Return the format this extractor handles."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of the primary extraction method."""
        pass

    @abstractmethod
    def try_primary(self, file_path: Path, variant: ExtractionVariant) -> str:
        """Extract text with the format-aware method. May raise."""
        pass

    def primary_method(self, variant: ExtractionVariant) -> str:
        """Name of the method try_primary uses for this variant."""
        return self.name

    def try_fallback(self, file_path: Path, variant: ExtractionVariant) -> str:
        """Degraded extraction shared by every format."""
        return scan_printable_strings(
            file_path,
            min_run=self.settings.raw_scan_min_run,
            max_bytes=self.settings.raw_scan_max_bytes,
        )

    def _run_primary(self, file_path: Path, variant: ExtractionVariant) -> str:
        if self.settings.isolate_primary:
            from ..extract_worker import run_primary_isolated

            return run_primary_isolated(self.format, file_path, variant, self.settings)
        return self.try_primary(file_path, variant)

    def extract(self, file_path: Path, variant: ExtractionVariant) -> ExtractionOutcome:
        """Run the primary method, falling back to the raw scan on failure."""
        method = self.primary_method(variant)
        try:
            text = self._run_primary(file_path, variant)
            return Success(text=text, method=method, format=self.format, variant=variant)
        except Exception as e:
            primary_error = f"{type(e).__name__}: {e}"

        if method == RAW_SCAN_METHOD:
            return Failure(
                reason=f"Failed to extract text: {primary_error}",
                kind=ErrorKind.EXTRACTION_FAILURE,
                format=self.format,
            )

        logger.warning("%s failed on %s (%s); falling back to raw scan", method, file_path.name, primary_error)
        try:
            text = self.try_fallback(file_path, variant)
        except Exception as e:
            return Failure(
                reason=(
                    f"Failed to extract text: {method} failed ({primary_error}); "
                    f"{RAW_SCAN_METHOD} fallback failed ({type(e).__name__}: {e})"
                ),
                kind=ErrorKind.EXTRACTION_FAILURE,
                format=self.format,
            )
        return Success(text=text, method=RAW_SCAN_METHOD, format=self.format, variant=variant)


class ExtractorRegistry:
    """Registry mapping each format to its extractor."""

    def __init__(self):
        self._extractors: Dict[DocumentFormat, BaseExtractor] = {}

    def register(self, extractor: BaseExtractor) -> None:
        """Register an extractor, replacing any previous one for its format."""
        self._extractors[extractor.format] = extractor

    def get(self, fmt: DocumentFormat) -> BaseExtractor:
        """Get the extractor for a format."""
        try:
            return self._extractors[fmt]
        except KeyError:
            raise LookupError(f"No extractor registered for {fmt.value}") from None

    def formats(self) -> List[DocumentFormat]:
        """Formats with a registered extractor."""
        return list(self._extractors)


def build_registry(settings: ExtractionSettings) -> ExtractorRegistry:
    """Create a registry holding one extractor per supported format."""
    from .excel import ExcelExtractor
    from .pdf import PdfExtractor
    from .powerpoint import PowerPointExtractor
    from .text import PlainTextExtractor
    from .word import WordExtractor

    registry = ExtractorRegistry()
    registry.register(PlainTextExtractor(settings))
    registry.register(PdfExtractor(settings))
    registry.register(WordExtractor(settings))
    registry.register(ExcelExtractor(settings))
    registry.register(PowerPointExtractor(settings))
    return registry


__all__ = ["BaseExtractor", "ExtractorRegistry", "build_registry"]
