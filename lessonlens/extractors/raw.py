"""
Raw byte-level string scan.

Degraded but always-available extraction: reads the file as bytes and keeps
runs of printable ASCII, the way `strings` does. Used as the fallback for
every format and as the fast path for large PDFs.
"""

import re
from pathlib import Path

RAW_SCAN_METHOD = "raw_scan"


def scan_printable_strings(file_path: Path, min_run: int = 4, max_bytes: int = 50 * 1024 * 1024) -> str:
    """Return printable ASCII runs of at least min_run bytes, one per line."""
    with open(file_path, "rb") as f:
        data = f.read(max_bytes)

    pattern = re.compile(rb"[\x20-\x7e]{%d,}" % min_run)
    runs = (match.group().decode("ascii").strip() for match in pattern.finditer(data))
    return "\n".join(run for run in runs if run)
