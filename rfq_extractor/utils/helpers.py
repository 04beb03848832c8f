"""
Utility functions and helpers for RFQ extraction.
"""
import json
import math
import re
from pathlib import Path
from typing import List, Dict, Any, Optional


_WHITESPACE_RE = re.compile(r'\s+')
_NUMBER_RE = re.compile(r'\d+(?:\.\d+)?')


def save_json(data: Dict[str, Any], output_path: str | Path) -> None:
    """
    Save data to JSON file.

    Args:
        data: Data to save
        output_path: Path to output JSON file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def load_json(input_path: str | Path) -> Dict[str, Any]:
    """
    Load data from JSON file.

    Args:
        input_path: Path to input JSON file

    Returns:
        Loaded data dictionary
    """
    input_path = Path(input_path)
    with open(input_path, 'r', encoding='utf-8') as f:
        return json.load(f)


def combine_pages_text(pages: List[Optional[str]]) -> str:
    """
    Combine text from multiple pages.

    Args:
        pages: Page texts in page order (None for pages without text)

    Returns:
        Combined text from all pages
    """
    return '\n\n'.join(page or '' for page in pages)


def collapse_whitespace(text: str) -> str:
    """Collapse every whitespace run to a single space and trim."""
    return _WHITESPACE_RE.sub(' ', text or '').strip()


def clean_value(text: Optional[str], keep: str = '') -> str:
    """
    Shared cleanup for captured field values.

    Collapses whitespace and drops every character outside
    ``[A-Za-z0-9 _.-]`` plus the characters listed in ``keep``.

    Args:
        text: Raw captured text
        keep: Extra punctuation to preserve (e.g. ',!?()')

    Returns:
        Cleaned single-line string
    """
    if not text:
        return ''
    allowed = re.escape(keep) if keep else ''
    text = collapse_whitespace(text)
    text = re.sub(rf'[^A-Za-z0-9 _.\-{allowed}]', '', text)
    return collapse_whitespace(text)


def _positive_float(value: Any) -> float:
    """float(value) when it is finite and above zero, else 0.0."""
    try:
        number = float(value)
    except OverflowError:
        return 0.0
    return number if math.isfinite(number) and number > 0 else 0.0


def to_float(value: Any) -> float:
    """
    Coerce a value to a non-negative, finite float.

    Numbers pass through, strings yield their first number, anything else
    (a negative number, NaN or a value too large for a float) yields 0.0.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return _positive_float(value)
    if isinstance(value, str):
        match = _NUMBER_RE.search(value)
        if match:
            return _positive_float(match.group(0))
    return 0.0


def to_dimension(value: Any) -> float:
    """
    Coerce a dimension to inches as a non-negative float.

    A range such as "28.5 - 48.0" yields its lower bound.
    """
    if isinstance(value, str):
        range_match = re.match(r'\s*(\d+(?:\.\d+)?)\s*-\s*\d+(?:\.\d+)?', value)
        if range_match:
            return _positive_float(range_match.group(1))
    return to_float(value)


def to_quantity(value: Any) -> int:
    """Coerce a quantity to a non-negative int (unparsable -> 0)."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value if value > 0 else 0
    if isinstance(value, float):
        return int(value) if math.isfinite(value) and value > 0 else 0
    if isinstance(value, str):
        match = re.search(r'\d+', value)
        if match:
            try:
                return int(match.group(0))
            except ValueError:
                # longer than the interpreter allows for int conversion
                return 0
    return 0
