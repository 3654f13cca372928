"""
Word document extractor using python-docx.
"""

from pathlib import Path
from typing import Iterator

from docx import Document
from docx.oxml.ns import qn
from docx.table import Table
from docx.text.paragraph import Paragraph

from ..models import DocumentFormat, ExtractionVariant
from . import BaseExtractor


def _body_blocks(document) -> Iterator[str]:
    """Paragraph and table-row text in document order."""
    for child in document.element.body.iterchildren():
        if child.tag == qn("w:p"):
            text = Paragraph(child, document).text
            if text and text.strip():
                yield text
        elif child.tag == qn("w:tbl"):
            for row in Table(child, document).rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text and cell.text.strip()]
                if cells:
                    yield " | ".join(cells)


class WordExtractor(BaseExtractor):
    """Converts the document body (paragraphs and tables) to plain text."""

    @property
    def format(self) -> DocumentFormat:
        return DocumentFormat.WORD

    @property
    def name(self) -> str:
        return "python-docx"

    def try_primary(self, file_path: Path, variant: ExtractionVariant) -> str:
        document = Document(str(file_path))
        return "\n\n".join(_body_blocks(document))
