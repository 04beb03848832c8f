"""
Utility functions and helpers for RFQ extraction.
"""
from .helpers import (
    save_json,
    load_json,
    combine_pages_text,
    collapse_whitespace,
    clean_value,
    to_float,
    to_dimension,
    to_quantity,
)

__all__ = [
    'save_json',
    'load_json',
    'combine_pages_text',
    'collapse_whitespace',
    'clean_value',
    'to_float',
    'to_dimension',
    'to_quantity',
]
