"""
Data models for RFQ extraction results.
Imports all models for easy access.
"""
from .item import (
    ItemStatus,
    ItemSection,
    ItemRecord,
)
from .result import (
    ExtractedText,
    AcquisitionFailure,
    ExtractionStatus,
    ExtractionResult,
)

__all__ = [
    # Item models
    'ItemStatus',
    'ItemSection',
    'ItemRecord',
    # Stage outcome models
    'ExtractedText',
    'AcquisitionFailure',
    'ExtractionStatus',
    'ExtractionResult',
]
