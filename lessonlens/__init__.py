"""
LessonLens: Curriculum Document Ingestion

Extracts and compresses text from uploaded curriculum documents (text, PDF,
Word, Excel, PowerPoint) so it can be analyzed against instructional standards.
"""

__version__ = "0.1.0"
__license__ = "MIT"
