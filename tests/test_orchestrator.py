"""
Integration tests for the extraction orchestrator and batch extraction.
"""

import asyncio
import json
import os

import pytest

from conftest import build_docx, build_xlsx
from lessonlens.batch import BatchExtractor, check_upload_limits, to_records
from lessonlens.config import ExtractionSettings, LessonLensSettings
from lessonlens.dispatcher import truncation_marker
from lessonlens.errors import ErrorKind, UploadLimitError
from lessonlens.extractors import BaseExtractor, ExtractorRegistry
from lessonlens.models import DocumentFormat, ExtractionVariant, Failure, SourceDocument, Success
from lessonlens.orchestrator import ExtractionOrchestrator, sanitize_filename


@pytest.fixture
def orchestrator(config):
    return ExtractionOrchestrator(config)


class CrashingExtractor(BaseExtractor):
    """Raises straight out of extract(), bypassing the fallback chain."""

    @property
    def format(self):
        return DocumentFormat.PLAIN_TEXT

    @property
    def name(self):
        return "crashing"

    def try_primary(self, file_path, variant):
        raise AssertionError("not used")

    def extract(self, file_path, variant):
        assert file_path.exists()
        raise RuntimeError("extractor blew up")


# =============================================================================
# Single Document Tests
# =============================================================================

class TestExtract:
    """Tests for ExtractionOrchestrator.extract."""

    def test_every_supported_format_succeeds(self, orchestrator, sample_documents):
        for filename, data in sample_documents.items():
            outcome = orchestrator.extract(data, filename)
            assert isinstance(outcome, Success), f"{filename}: {outcome}"
            assert outcome.text.strip(), filename

    @pytest.mark.parametrize("filename", ["photo.jpg", "archive.tar.gz", "README"])
    def test_unsupported_extension(self, orchestrator, staging_dir, filename):
        outcome = orchestrator.extract(b"whatever", filename)

        assert isinstance(outcome, Failure)
        assert "Unsupported" in outcome.reason
        assert outcome.kind == ErrorKind.UNSUPPORTED_FORMAT
        assert outcome.kind.is_client_error
        assert list(staging_dir.iterdir()) == []

    def test_unsupported_reason_names_extension(self, orchestrator):
        outcome = orchestrator.extract(b"", "image.PNG")
        assert outcome.reason == "Unsupported file type: .png"

    def test_corrupted_pdf_still_succeeds(self, orchestrator):
        data = b"garbage header\x00\x00(Students will analyze the causes of the war) Tj\x00\xff\xfe"
        outcome = orchestrator.extract(data, "broken.pdf")
        assert isinstance(outcome, Success)
        assert "Students will analyze the causes of the war" in outcome.text

    def test_large_excel_uses_fast_row_cap(self, staging_dir):
        config = LessonLensSettings(
            extraction=ExtractionSettings(
                temp_dir=staging_dir,
                fast_thresholds={"excel": 1024},
                excel_fast_row_limit=25,
            )
        )
        config.compression.enabled = False
        rows = [[f"Student {i}", i % 100, "Standard 6.RP.1"] for i in range(500)]
        data = build_xlsx(["Student", "Score", "Standard"], rows)
        assert len(data) > 1024

        outcome = ExtractionOrchestrator(config).extract(data, "responses.xlsx")

        assert isinstance(outcome, Success)
        assert outcome.variant == ExtractionVariant.FAST
        assert len(json.loads(outcome.text)) == 25

    def test_oversized_text_is_truncated(self, staging_dir):
        config = LessonLensSettings(extraction=ExtractionSettings(temp_dir=staging_dir))
        ceiling = config.extraction.max_text_length
        text = "\n\n".join(f"Paragraph {i:06d} " + "x" * 120 for i in range(45_000))
        assert len(text) > 6_000_000

        outcome = ExtractionOrchestrator(config).extract(text.encode("utf-8"), "huge.txt")

        assert isinstance(outcome, Success)
        assert truncation_marker(ceiling) in outcome.text
        assert len(outcome.text) <= ceiling
        assert outcome.text.startswith("Paragraph 000000")
        assert outcome.text.endswith("x" * 120)

    def test_compression_applied(self, orchestrator):
        text = "Page 1\n\nStudents learn fractions today.\n\nPage 2\n\nStudents learn fractions today."
        outcome = orchestrator.extract(text.encode("utf-8"), "lesson.txt")
        assert outcome.text == "Students learn fractions today."

    @pytest.mark.parametrize("data", [b"Hello", b"Hi\n\nOk", b"  Quiz 1\r\n"])
    def test_short_document_keeps_text(self, orchestrator, data):
        outcome = orchestrator.extract(data, "note.txt")
        assert isinstance(outcome, Success)
        assert outcome.text == data.decode().replace("\r\n", "\n").strip()

    def test_compression_can_be_disabled(self, config):
        config.compression.enabled = False
        text = "Page 1\n\nStudents learn fractions today."
        outcome = ExtractionOrchestrator(config).extract(text.encode("utf-8"), "lesson.txt")
        assert outcome.text == text

    def test_extract_document(self, orchestrator):
        document = SourceDocument(data=b"Students evaluate primary sources.", filename="lesson.txt")
        outcome = orchestrator.extract_document(document)
        assert outcome.text == "Students evaluate primary sources."


# =============================================================================
# Temporary Artifact Lifecycle Tests
# =============================================================================

class TestArtifactLifecycle:
    """The staged copy is removed on every exit path."""

    def test_removed_after_success(self, orchestrator, staging_dir, sample_documents):
        orchestrator.extract(sample_documents["lesson.docx"], "lesson.docx")
        assert list(staging_dir.iterdir()) == []

    def test_removed_after_fallback(self, orchestrator, staging_dir):
        outcome = orchestrator.extract(b"\x00\x01\x02", "corrupt.xlsx")
        assert isinstance(outcome, Success)
        assert outcome.text == ""
        assert list(staging_dir.iterdir()) == []

    def test_removed_after_exception(self, config, staging_dir):
        registry = ExtractorRegistry()
        registry.register(CrashingExtractor(config.extraction))
        outcome = ExtractionOrchestrator(config, registry=registry).extract(b"data", "notes.txt")

        assert isinstance(outcome, Failure)
        assert outcome.kind == ErrorKind.EXTRACTION_FAILURE
        assert "extractor blew up" in outcome.reason
        assert list(staging_dir.iterdir()) == []

    def test_staging_failure_is_resource_failure(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file in the way")
        config = LessonLensSettings(extraction=ExtractionSettings(temp_dir=blocker))

        outcome = ExtractionOrchestrator(config).extract(b"Students learn.", "notes.txt")

        assert isinstance(outcome, Failure)
        assert outcome.kind == ErrorKind.RESOURCE_FAILURE

    def test_artifact_names_are_unique(self, orchestrator):
        paths = {orchestrator._artifact_path("lesson.pdf") for _ in range(1000)}
        assert len(paths) == 1000

    def test_sanitize_filename(self):
        assert sanitize_filename("../../etc/passwd") == "passwd"
        assert sanitize_filename("Unit 1: Fractions (v2).docx") == "Unit_1_Fractions_v2_.docx"
        assert sanitize_filename("...") == "upload"
        long_name = sanitize_filename("a" * 300 + ".pptx")
        assert len(long_name) <= 100
        assert long_name.endswith(".pptx")


# =============================================================================
# Batch Tests
# =============================================================================

def _mixed_documents(count):
    documents = []
    for i in range(count):
        if i % 5 == 0:
            documents.append(SourceDocument(build_docx([f"Lesson {i}: students learn ratios."]), f"lesson-{i}.docx"))
        elif i % 7 == 0:
            documents.append(SourceDocument(b"binary", f"image-{i}.png"))
        else:
            documents.append(SourceDocument(f"Lesson {i}: students learn ratios.".encode(), f"lesson-{i}.txt"))
    return documents


class TestBatch:
    """Tests for bounded-concurrency batch extraction."""

    def test_concurrent_extraction_leaves_no_artifacts(self, orchestrator, staging_dir):
        before = sorted(os.listdir(staging_dir))
        documents = _mixed_documents(50)

        items = BatchExtractor(orchestrator, max_workers=8).extract_all(documents)

        assert sorted(os.listdir(staging_dir)) == before
        assert [name for name, _ in items] == [d.filename for d in documents]

    def test_one_failure_does_not_abort_others(self, orchestrator):
        documents = _mixed_documents(15)
        items = BatchExtractor(orchestrator, max_workers=4).extract_all(documents)

        failures = [name for name, outcome in items if not outcome.ok]
        assert failures == ["image-7.png", "image-14.png"]
        assert sum(1 for _, outcome in items if outcome.ok) == 13

    def test_async_extraction(self, orchestrator, staging_dir):
        documents = _mixed_documents(20)
        items = asyncio.run(BatchExtractor(orchestrator, max_workers=3).extract_all_async(documents))

        assert [name for name, _ in items] == [d.filename for d in documents]
        assert list(staging_dir.iterdir()) == []

    def test_empty_batch(self, orchestrator):
        assert BatchExtractor(orchestrator).extract_all([]) == []

    def test_to_records(self, orchestrator):
        documents = _mixed_documents(8)
        items = BatchExtractor(orchestrator).extract_all(documents)
        records = to_records(items, documents)

        assert len(records) == 7
        assert records[0].name == "lesson-0.docx"
        assert records[0].format == DocumentFormat.WORD
        assert records[0].size == len(documents[0].data)
        assert records[1].mime_type == "text/plain"


class TestUploadLimits:

    def test_within_limits(self, config):
        check_upload_limits([SourceDocument(b"abc", "a.txt")], config.upload)

    def test_too_many_files(self, config):
        documents = [SourceDocument(b"abc", f"{i}.txt") for i in range(11)]
        with pytest.raises(UploadLimitError) as exc_info:
            check_upload_limits(documents, config.upload)
        assert exc_info.value.kind == ErrorKind.UPLOAD_LIMIT

    def test_file_too_large(self, config):
        config.upload.max_file_size = 10
        with pytest.raises(UploadLimitError):
            check_upload_limits([SourceDocument(b"x" * 11, "big.txt")], config.upload)

    def test_declared_size_is_used(self, config):
        config.upload.max_file_size = 10
        with pytest.raises(UploadLimitError):
            check_upload_limits([SourceDocument(b"x", "big.txt", declared_size=50)], config.upload)
