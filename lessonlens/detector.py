"""
Format detection from upload filenames.
"""

import mimetypes
from pathlib import PurePath
from typing import Dict

from .models import DocumentFormat

EXTENSION_FORMATS: Dict[str, DocumentFormat] = {
    ".txt": DocumentFormat.PLAIN_TEXT,
    ".text": DocumentFormat.PLAIN_TEXT,
    ".md": DocumentFormat.PLAIN_TEXT,
    ".markdown": DocumentFormat.PLAIN_TEXT,
    ".pdf": DocumentFormat.PDF,
    ".docx": DocumentFormat.WORD,
    ".doc": DocumentFormat.WORD,
    ".xlsx": DocumentFormat.EXCEL,
    ".xlsm": DocumentFormat.EXCEL,
    ".xls": DocumentFormat.EXCEL,
    ".pptx": DocumentFormat.POWERPOINT,
    ".ppt": DocumentFormat.POWERPOINT,
}

_FALLBACK_MIME_TYPES = {
    DocumentFormat.PLAIN_TEXT: "text/plain",
    DocumentFormat.PDF: "application/pdf",
    DocumentFormat.WORD: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    DocumentFormat.EXCEL: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    DocumentFormat.POWERPOINT: "application/vnd.openxmlformats-officedocument.presentationml.presentation",
}


def file_extension(filename: str) -> str:
    """Lower-cased extension including the dot, or "" if there is none."""
    # PurePath handles both separators the browser may send
    return PurePath(filename.replace("\\", "/")).suffix.lower()


def detect_format(filename: str) -> DocumentFormat:
    """Map a filename to a format tag. Never raises."""
    return EXTENSION_FORMATS.get(file_extension(filename), DocumentFormat.UNSUPPORTED)


def guess_mime_type(filename: str) -> str:
    """MIME type for storage records."""
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type:
        return mime_type
    return _FALLBACK_MIME_TYPES.get(detect_format(filename), "application/octet-stream")
