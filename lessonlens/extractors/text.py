"""
Plain text file extractor.
"""

from pathlib import Path

import chardet

from ..models import DocumentFormat, ExtractionVariant
from . import BaseExtractor


class PlainTextExtractor(BaseExtractor):
    """Plain text extractor: UTF-8 first, detected encoding otherwise."""

    @property
    def format(self) -> DocumentFormat:
        return DocumentFormat.PLAIN_TEXT

    @property
    def name(self) -> str:
        return "text"

    def _detect_encoding(self, raw_data: bytes) -> str:
        """Detect encoding using chardet on the first 10KB."""
        result = chardet.detect(raw_data[:10000])
        return result.get("encoding") or "utf-8"

    def try_primary(self, file_path: Path, variant: ExtractionVariant) -> str:
        """Read the file; only I/O errors raise."""
        raw_data = file_path.read_bytes()
        try:
            return raw_data.decode("utf-8")
        except UnicodeDecodeError:
            encoding = self._detect_encoding(raw_data)
            try:
                return raw_data.decode(encoding, errors="replace")
            except LookupError:
                # chardet can name codecs Python doesn't ship
                return raw_data.decode("utf-8", errors="replace")
