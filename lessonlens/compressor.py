"""
Text compression for extracted documents.

Reduces token cost before text reaches the LLM by normalizing whitespace,
dropping short and duplicate paragraphs, and biasing toward paragraphs
that look like instructional content. Paragraph order is preserved: later
prompts show lessons in sequence.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .config import CompressionSettings

logger = logging.getLogger(__name__)

_HORIZONTAL_WHITESPACE = re.compile(r"[ \t\f\v]+")
_EXTRA_BLANK_LINES = re.compile(r"\n{3,}")


@dataclass(frozen=True)
class CompressionStats:
    """Before/after measurements for one compression run."""

    original_length: int
    compressed_length: int
    paragraphs_in: int
    paragraphs_out: int
    relevance_filter_applied: bool

    @property
    def ratio(self) -> float:
        if self.original_length == 0:
            return 1.0
        return self.compressed_length / self.original_length


class TextCompressor:
    """Deterministic, order-preserving text compressor."""

    def __init__(self, settings: Optional[CompressionSettings] = None):
        self.settings = settings or CompressionSettings()
        self._keywords = [k.lower() for k in self.settings.keywords if k]

    @staticmethod
    def normalize(text: str) -> str:
        """Unify line endings and collapse whitespace to at most one blank line."""
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        lines = [_HORIZONTAL_WHITESPACE.sub(" ", line).strip() for line in text.split("\n")]
        return _EXTRA_BLANK_LINES.sub("\n\n", "\n".join(lines)).strip()

    @staticmethod
    def split_paragraphs(text: str) -> List[str]:
        """Blank-line delimited paragraphs of normalized text."""
        return [p for p in text.split("\n\n") if p]

    def is_relevant(self, paragraph: str) -> bool:
        """Keyword hit or long enough to be substantive on its own."""
        if len(paragraph) > self.settings.long_paragraph_length:
            return True
        lowered = paragraph.lower()
        return any(keyword in lowered for keyword in self._keywords)

    def _select(self, text: str) -> Tuple[List[str], int, bool]:
        paragraphs = self.split_paragraphs(self.normalize(text))
        total = len(paragraphs)

        seen = set()
        unique: List[str] = []
        for paragraph in paragraphs:
            if len(paragraph) < self.settings.min_paragraph_length:
                continue
            if paragraph in seen:
                continue
            seen.add(paragraph)
            unique.append(paragraph)

        relevant = [p for p in unique if self.is_relevant(p)]
        if len(relevant) < self.settings.min_retained_paragraphs:
            return unique, total, False
        return relevant, total, True

    def compress(self, text: str) -> str:
        """Compress text; output is never longer than the input."""
        kept, _, _ = self._select(text)
        return "\n\n".join(kept)

    def compress_with_stats(self, text: str) -> Tuple[str, CompressionStats]:
        """Compress text and report what was removed."""
        kept, total, filtered = self._select(text)
        compressed = "\n\n".join(kept)
        stats = CompressionStats(
            original_length=len(text),
            compressed_length=len(compressed),
            paragraphs_in=total,
            paragraphs_out=len(kept),
            relevance_filter_applied=filtered,
        )
        logger.debug(
            "Compressed %d -> %d chars (%d -> %d paragraphs, filter %s)",
            stats.original_length, stats.compressed_length,
            stats.paragraphs_in, stats.paragraphs_out,
            "applied" if filtered else "skipped",
        )
        return compressed, stats


def compress_text(text: str, settings: Optional[CompressionSettings] = None) -> str:
    """Compress text with the given (or default) settings."""
    return TextCompressor(settings).compress(text)
