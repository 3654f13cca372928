"""
PDF extractor.

Full extraction parses the document with pypdf. Large PDFs go straight to
the raw string scan, which has a bounded cost regardless of structure.
"""

import logging
from pathlib import Path

from pypdf import PdfReader

from ..errors import ExtractionError
from ..models import DocumentFormat, ExtractionVariant
from . import BaseExtractor
from .raw import RAW_SCAN_METHOD

logger = logging.getLogger(__name__)


class PdfExtractor(BaseExtractor):
    """PDF text extractor using pypdf."""

    @property
    def format(self) -> DocumentFormat:
        return DocumentFormat.PDF

    @property
    def name(self) -> str:
        return "pypdf"

    def primary_method(self, variant: ExtractionVariant) -> str:
        if variant is ExtractionVariant.FAST:
            return RAW_SCAN_METHOD
        return self.name

    def try_primary(self, file_path: Path, variant: ExtractionVariant) -> str:
        if variant is ExtractionVariant.FAST:
            return self.try_fallback(file_path, variant)
        return self._parse(file_path)

    def _parse(self, file_path: Path) -> str:
        """Extract text from every page with pypdf."""
        reader = PdfReader(str(file_path))

        if reader.is_encrypted:
            raise ExtractionError("PDF is encrypted/password-protected")

        text_parts = []
        for page_number, page in enumerate(reader.pages, start=1):
            try:
                page_text = page.extract_text()
            except Exception as e:
                # One broken page should not lose the rest of the document
                logger.debug("Skipping page %d of %s: %s", page_number, file_path.name, e)
                continue
            if page_text and page_text.strip():
                text_parts.append(page_text)

        text = "\n\n".join(text_parts)
        if not text.strip():
            raise ExtractionError("No text extracted (possibly scanned PDF without OCR)")
        return text
