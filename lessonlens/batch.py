"""
Batch extraction for multi-file uploads.

Documents are independent: each one is extracted by the orchestrator on
its own, with a bounded number in flight so peak memory stays predictable.
A failed document is reported alongside the others and never aborts them.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from .config import UploadSettings
from .detector import guess_mime_type
from .errors import UploadLimitError
from .models import BatchItem, DocumentRecord, SourceDocument, Success
from .orchestrator import ExtractionOrchestrator

logger = logging.getLogger(__name__)


def check_upload_limits(documents: Sequence[SourceDocument], settings: UploadSettings) -> None:
    """Raise UploadLimitError if the upload breaks the count or size ceilings."""
    if len(documents) > settings.max_files:
        raise UploadLimitError(
            f"Too many files: {len(documents)} uploaded, maximum is {settings.max_files}",
            details={"count": len(documents), "max_files": settings.max_files},
        )
    for document in documents:
        if document.size > settings.max_file_size:
            raise UploadLimitError(
                f"File '{document.filename}' is {document.size} bytes, maximum is {settings.max_file_size}",
                details={"filename": document.filename, "size": document.size},
            )


class BatchExtractor:
    """Runs the orchestrator over many documents with bounded concurrency."""

    def __init__(self, orchestrator: ExtractionOrchestrator, max_workers: Optional[int] = None):
        self.orchestrator = orchestrator
        self.max_workers = max(1, max_workers or orchestrator.config.extraction.max_workers)

    def _extract_one(self, document: SourceDocument) -> BatchItem:
        return document.filename, self.orchestrator.extract_document(document)

    def extract_all(self, documents: Sequence[SourceDocument]) -> List[BatchItem]:
        """Extract every document; results keep the input order."""
        if not documents:
            return []
        workers = min(self.max_workers, len(documents))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="lessonlens-extract") as pool:
            items = list(pool.map(self._extract_one, documents))
        self._log_summary(items)
        return items

    async def extract_all_async(self, documents: Sequence[SourceDocument]) -> List[BatchItem]:
        """Async variant: one awaitable per document, gated by a semaphore."""
        semaphore = asyncio.Semaphore(self.max_workers)

        async def run(document: SourceDocument) -> BatchItem:
            async with semaphore:
                return await asyncio.to_thread(self._extract_one, document)

        items = list(await asyncio.gather(*(run(document) for document in documents)))
        self._log_summary(items)
        return items

    @staticmethod
    def _log_summary(items: List[BatchItem]) -> None:
        failed = [(name, outcome) for name, outcome in items if not outcome.ok]
        for name, outcome in failed:
            logger.warning("%s: %s", name, outcome.reason)
        logger.info("Batch extraction: %d succeeded, %d failed", len(items) - len(failed), len(failed))


def to_records(items: Sequence[BatchItem], documents: Sequence[SourceDocument]) -> List[DocumentRecord]:
    """Storage records for the successful items of a batch."""
    records = []
    for (name, outcome), document in zip(items, documents):
        if not isinstance(outcome, Success):
            continue
        records.append(
            DocumentRecord(
                name=name,
                mime_type=guess_mime_type(name),
                format=outcome.format,
                size=document.size,
                extracted_text=outcome.text,
            )
        )
    return records
