"""
RFQ Extractor Package
=====================

Turns uploaded furniture/design RFQ documents (PDF) into structured line
items with per-item review flags.

Main Components:
- extractors: PDF text acquisition backends
- parsers: normalization, segmentation, field extraction and validation
- models: Data models for items and results
- services: High-level extraction orchestration and collaborator glue
- utils: Helper functions
"""

__version__ = "1.0.0"

# Convenience imports for common use cases
from rfq_extractor.config import ExtractionConfig
from rfq_extractor.extractors import PDFTextExtractor
from rfq_extractor.models import ExtractionResult, ItemRecord
from rfq_extractor.services import ExtractionServiceFactory

__all__ = [
    'ExtractionConfig',
    'PDFTextExtractor',
    'ExtractionResult',
    'ItemRecord',
    'ExtractionServiceFactory',
]
