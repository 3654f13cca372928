"""
Tests for isolated primary extraction.
"""

import os
import sys

import pytest

from conftest import build_docx
from lessonlens.config import ExtractionSettings
from lessonlens.errors import ExtractionError
from lessonlens.extract_worker import extract_primary_for_pool, run_primary_isolated
from lessonlens.extractors import build_registry
from lessonlens.extractors.raw import RAW_SCAN_METHOD
from lessonlens.models import DocumentFormat, ExtractionVariant


def _args(fmt, path, settings, variant=ExtractionVariant.FULL):
    return (fmt.value, str(path), variant.value, settings.model_dump(mode="json"))


class TestPoolWorker:
    """extract_primary_for_pool runs in-process here."""

    def test_success(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("Students compare fractions.", encoding="utf-8")

        status, payload = extract_primary_for_pool(_args(DocumentFormat.PLAIN_TEXT, path, ExtractionSettings()))

        assert status == "success"
        assert payload == "Students compare fractions."

    def test_parser_error_reported(self, tmp_path):
        path = tmp_path / "broken.docx"
        path.write_bytes(b"not a zip file")

        status, payload = extract_primary_for_pool(_args(DocumentFormat.WORD, path, ExtractionSettings()))

        assert status == "failed"
        assert payload

    def test_output_ceiling(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("x" * 500, encoding="utf-8")
        settings = ExtractionSettings(max_output_chars=100)

        status, payload = extract_primary_for_pool(_args(DocumentFormat.PLAIN_TEXT, path, settings))

        assert status == "failed"
        assert "exceeds ceiling" in payload


class TestIsolatedExtraction:
    """Runs the primary method in a spawned process."""

    def test_isolated_docx(self, tmp_path):
        path = tmp_path / "lesson.docx"
        path.write_bytes(build_docx(["Students model division with area diagrams."]))

        text = run_primary_isolated(DocumentFormat.WORD, path, ExtractionVariant.FULL, ExtractionSettings())

        assert text == "Students model division with area diagrams."

    def test_isolated_failure_raises(self, tmp_path):
        path = tmp_path / "broken.docx"
        path.write_bytes(b"not a zip file")

        with pytest.raises(ExtractionError):
            run_primary_isolated(DocumentFormat.WORD, path, ExtractionVariant.FULL, ExtractionSettings())

    @pytest.mark.skipif(sys.platform == "win32" or not hasattr(os, "mkfifo"), reason="needs a FIFO")
    def test_timeout_raises(self, tmp_path):
        # Opening a FIFO with no writer blocks the worker forever
        path = tmp_path / "stuck.txt"
        os.mkfifo(path)
        settings = ExtractionSettings(subprocess_timeout=2)

        with pytest.raises(ExtractionError, match="timed out after 2s"):
            run_primary_isolated(DocumentFormat.PLAIN_TEXT, path, ExtractionVariant.FULL, settings)

    def test_oversized_output_falls_back(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("Students write long essays. " * 40, encoding="utf-8")
        settings = ExtractionSettings(isolate_primary=True, max_output_chars=100)

        outcome = build_registry(settings).get(DocumentFormat.PLAIN_TEXT).extract(path, ExtractionVariant.FULL)

        assert outcome.ok
        assert outcome.method == RAW_SCAN_METHOD
        assert "Students write long essays." in outcome.text
