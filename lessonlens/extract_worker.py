"""
Subprocess worker for primary extraction methods.

Runs a format extractor's primary method in a spawned process so a parser
that hangs or balloons can be cut off. The parent enforces a timeout and an
output ceiling; exceeding either is an ordinary extraction failure and feeds
the normal fallback path.
"""

import contextlib
import multiprocessing
import os
import sys
from pathlib import Path
from typing import Any, Dict, Tuple

from .config import ExtractionSettings
from .errors import ExtractionError
from .models import DocumentFormat, ExtractionVariant


def extract_primary_for_pool(args_tuple: tuple) -> Tuple[str, str]:
    """
    Worker function for multiprocessing.Pool.

    This is a module-level function that can be pickled.
    Accepts a tuple of (format value, file path, variant value, settings dict).
    Returns ("success", text) or ("failed", error message).

    Suppresses stderr so parser warnings don't interleave with the parent's output.
    """
    format_value, path_str, variant_value, settings_dict = args_tuple

    with open(os.devnull, "w") as devnull:
        with contextlib.redirect_stderr(devnull):
            try:
                # Imported here so the spawned process only loads what it needs
                from .extractors import build_registry

                settings = ExtractionSettings(**{**settings_dict, "isolate_primary": False})
                extractor = build_registry(settings).get(DocumentFormat(format_value))
                text = extractor.try_primary(Path(path_str), ExtractionVariant(variant_value))
            except Exception as e:
                return ("failed", f"{type(e).__name__}: {e}")

    # Checked here so oversized text is never pickled back to the parent
    if len(text) > settings.max_output_chars:
        return ("failed", f"Output of {len(text)} chars exceeds ceiling of {settings.max_output_chars}")
    return ("success", text)


def run_primary_isolated(
    fmt: DocumentFormat,
    file_path: Path,
    variant: ExtractionVariant,
    settings: ExtractionSettings,
) -> str:
    """Run one primary extraction in a worker process; raise ExtractionError on failure."""
    settings_dict: Dict[str, Any] = settings.model_dump(mode="json")
    pool_arg = (fmt.value, str(file_path), variant.value, settings_dict)

    context = multiprocessing.get_context("spawn")
    pool = context.Pool(processes=1)
    try:
        async_result = pool.apply_async(extract_primary_for_pool, args=(pool_arg,))
        try:
            status, payload = async_result.get(timeout=settings.subprocess_timeout)
        except multiprocessing.TimeoutError:
            raise ExtractionError(
                f"Isolated extraction timed out after {settings.subprocess_timeout}s",
                details={"path": str(file_path)},
            ) from None
    finally:
        # terminate() also kills a worker that is still stuck in the parser
        pool.terminate()
        pool.join()

    if status != "success":
        raise ExtractionError(payload, details={"path": str(file_path)})
    if len(payload) > settings.max_output_chars:
        raise ExtractionError(f"Output of {len(payload)} chars exceeds ceiling of {settings.max_output_chars}")
    return payload


if __name__ == "__main__":
    # Allow running as standalone script for testing
    import json

    if len(sys.argv) < 3:
        print("Usage: extract_worker.py <format> <file_path> [full|fast]")
        sys.exit(1)

    variant_arg = sys.argv[3] if len(sys.argv) > 3 else "full"
    result = extract_primary_for_pool(
        (sys.argv[1], sys.argv[2], variant_arg, ExtractionSettings().model_dump(mode="json"))
    )
    print(json.dumps({"status": result[0], "payload": result[1]}))
