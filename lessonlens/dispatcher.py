"""
Size-aware dispatch: choose an extraction variant and bound output length.
"""

import logging
from typing import Mapping, Optional

from .models import DocumentFormat, ExtractionVariant

logger = logging.getLogger(__name__)


def choose_variant(
    fmt: DocumentFormat,
    size_bytes: int,
    thresholds: Optional[Mapping[str, int]] = None,
) -> ExtractionVariant:
    """
    Pick Full or Fast extraction for a document.

    Fast is chosen only when the format has a configured threshold and the
    input is strictly larger than it. Formats without a threshold always
    get Full.
    """
    threshold = (thresholds or {}).get(fmt.value)
    if threshold is not None and size_bytes > threshold:
        logger.debug("%s input of %d bytes exceeds %d; using fast extraction", fmt.value, size_bytes, threshold)
        return ExtractionVariant.FAST
    return ExtractionVariant.FULL


def truncation_marker(max_length: int) -> str:
    return f"\n\n[... text truncated to {max_length} characters ...]\n\n"


def truncate_text(text: str, max_length: int) -> str:
    """Truncate text to max_length, preserving beginning and end."""
    if len(text) <= max_length:
        return text

    marker = truncation_marker(max_length)
    available = max_length - len(marker)
    if available <= 0:
        return text[:max_length]

    # Head gets the extra character when the budget is odd
    head_length = available - available // 2
    tail_length = available // 2
    head = text[:head_length]
    tail = text[-tail_length:] if tail_length else ""
    return f"{head}{marker}{tail}"
