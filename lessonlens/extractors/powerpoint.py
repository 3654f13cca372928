"""
PowerPoint extractor using python-pptx.
"""

from pathlib import Path
from typing import List

from pptx import Presentation

from ..models import DocumentFormat, ExtractionVariant
from . import BaseExtractor


def _shape_texts(shape) -> List[str]:
    """Text held by a shape, descending into groups and tables."""
    texts: List[str] = []
    if getattr(shape, "shapes", None) is not None:
        for child in shape.shapes:
            texts.extend(_shape_texts(child))
        return texts

    if getattr(shape, "has_text_frame", False) and shape.text_frame.text.strip():
        texts.append(shape.text_frame.text.strip())

    if getattr(shape, "has_table", False):
        for row in shape.table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                texts.append(" | ".join(cells))
    return texts


class PowerPointExtractor(BaseExtractor):
    """Slide text extractor; the fast variant caps the slide count."""

    @property
    def format(self) -> DocumentFormat:
        return DocumentFormat.POWERPOINT

    @property
    def name(self) -> str:
        return "python-pptx"

    def try_primary(self, file_path: Path, variant: ExtractionVariant) -> str:
        presentation = Presentation(str(file_path))
        limit = self.settings.powerpoint_fast_slide_limit if variant is ExtractionVariant.FAST else None

        slides: List[str] = []
        for index, slide in enumerate(presentation.slides):
            if limit is not None and index >= limit:
                break
            texts: List[str] = []
            for shape in slide.shapes:
                texts.extend(_shape_texts(shape))
            if texts:
                slides.append("\n".join(texts))

        return "\n\n".join(slides)
