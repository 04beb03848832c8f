"""
Text acquisition backends for PDF documents.
"""
from .pdf_text_extractor import PDFTextExtractor, DEFAULT_BACKENDS, acquire
from .stream_fallback import extract_text_from_streams

__all__ = [
    'PDFTextExtractor',
    'DEFAULT_BACKENDS',
    'acquire',
    'extract_text_from_streams',
]
