"""
Parsers for turning extracted PDF text into structured RFQ items.
"""
from .normalizer import normalize, is_fragmented, fragmentation_ratio
from .segmenter import segment, find_item_sections, whole_text
from .fields import extract, extract_item
from .formats import parse_formatted_items, FORMAT_PARSERS
from .validator import validate, validate_items, CRITICAL_FIELD_CHECKS

__all__ = [
    'normalize',
    'is_fragmented',
    'fragmentation_ratio',
    'segment',
    'find_item_sections',
    'whole_text',
    'extract',
    'extract_item',
    'parse_formatted_items',
    'FORMAT_PARSERS',
    'validate',
    'validate_items',
    'CRITICAL_FIELD_CHECKS',
]
