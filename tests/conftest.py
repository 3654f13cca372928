"""
Shared fixtures: sample documents for every supported format.
"""

import io
from typing import List

import pytest
from docx import Document
from openpyxl import Workbook
from pptx import Presentation

from lessonlens.config import ExtractionSettings, LessonLensSettings


def build_pdf(text: str) -> bytes:
    """Minimal single-page PDF showing text in Helvetica."""
    content = f"BT /F1 24 Tf 72 720 Td ({text}) Tj ET".encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_offset = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_offset)
    return bytes(out)


def build_docx(paragraphs: List[str]) -> bytes:
    document = Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def build_xlsx(header: List[str], rows: List[list], extra_sheet: bool = False) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Scores"
    sheet.append(header)
    for row in rows:
        sheet.append(row)
    if extra_sheet:
        other = workbook.create_sheet("Hidden")
        other.append(["secret"])
        other.append(["second sheet content"])
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def build_pptx(slides: List[tuple]) -> bytes:
    """slides: list of (title, body) pairs."""
    presentation = Presentation()
    layout = presentation.slide_layouts[1]
    for title, body in slides:
        slide = presentation.slides.add_slide(layout)
        slide.shapes.title.text = title
        slide.placeholders[1].text = body
    buffer = io.BytesIO()
    presentation.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def staging_dir(tmp_path):
    path = tmp_path / "staging"
    path.mkdir()
    return path


@pytest.fixture
def config(staging_dir):
    """Test configuration staging artifacts in a private directory."""
    return LessonLensSettings(extraction=ExtractionSettings(temp_dir=staging_dir))


@pytest.fixture
def sample_documents():
    """One well-formed minimal document per supported format."""
    return {
        "notes.txt": "Students will learn to compare fractions with unlike denominators.".encode("utf-8"),
        "lesson.pdf": build_pdf("Students learn fractions"),
        "lesson.docx": build_docx(["Objective: students understand equivalent fractions."]),
        "scores.xlsx": build_xlsx(["Student", "Score"], [["Ana", 91], ["Ben", 78]]),
        "slides.pptx": build_pptx([("Fractions Unit", "Students analyze parts of a whole.")]),
    }
