"""
Split normalized RFQ text into candidate item sections.

Strategies are tried in a fixed order and the first one that yields at
least one accepted section wins:

1. explicit item markers ("Item 1:", "ITEM 1:", "Line 1:")
2. separator lines ("==========" / "----------")
3. blank lines
4. the whole text as a single section
"""
import logging
import re
from typing import Callable, List, Optional, Tuple

from rfq_extractor.config import ExtractionConfig, DEFAULT_CONFIG
from rfq_extractor.models import ItemSection
from rfq_extractor.utils.helpers import collapse_whitespace

logger = logging.getLogger(__name__)


SEPARATOR_PATTERN = r'={10,}|-{10,}'

# Marker families, one regex each. Group 1 is the item number, group 2 the section body.
MARKER_PATTERNS: List[Tuple[str, str]] = [
    ('Item', r'Item\s+(\d+)\s*[:.]\s*(.*?)(?=Item\s+\d+\s*[:.]|' + SEPARATOR_PATTERN + r'|\Z)'),
    ('ITEM', r'ITEM\s+(\d+)\s*[:.]\s*(.*?)(?=ITEM\s+\d+\s*[:.]|' + SEPARATOR_PATTERN + r'|\Z)'),
    ('Line', r'Line\s+(\d+)\s*[:.]\s*(.*?)(?=Line\s+\d+\s*[:.]|SUBTOTAL|TOTAL|' + SEPARATOR_PATTERN + r'|\Z)'),
]

# A split section must mention at least one field to count as an item
SEPARATOR_KEYWORD_PATTERN = (
    r'\b(?:Length|Depth|Height|(?:Primary\s+)?Material|Quantity|Construction\s+Notes)\b'
)
BLANK_LINE_KEYWORD_PATTERN = r'\bProduct\s+Name\b|' + SEPARATOR_KEYWORD_PATTERN

_MARKER_RES = [(name, re.compile(pattern, re.DOTALL)) for name, pattern in MARKER_PATTERNS]
_SEPARATOR_RE = re.compile(SEPARATOR_PATTERN)
_BLANK_LINE_RE = re.compile(r'\n[ \t]*\n\s*')
_SEPARATOR_KEYWORD_RE = re.compile(SEPARATOR_KEYWORD_PATTERN, re.IGNORECASE)
_BLANK_LINE_KEYWORD_RE = re.compile(BLANK_LINE_KEYWORD_PATTERN, re.IGNORECASE)


def _to_sections(texts: List[str]) -> List[ItemSection]:
    return [ItemSection(text=text, ordinal=index) for index, text in enumerate(texts, start=1)]


def split_by_markers(text: str, config: Optional[ExtractionConfig] = None) -> List[ItemSection]:
    """
    Sections delimited by explicit "Item N:" / "ITEM N:" / "Line N:" markers.

    The first marker family with an accepted section wins.
    """
    config = config or DEFAULT_CONFIG
    for name, pattern in _MARKER_RES:
        accepted = []
        for match in pattern.finditer(text):
            body = match.group(2).strip()
            if len(collapse_whitespace(body)) > config.min_marker_section_length:
                accepted.append(body)
        if accepted:
            logger.debug("Found %d section(s) with %s markers", len(accepted), name)
            return _to_sections(accepted)
    return []


def _split_and_filter(
    pieces: List[str],
    keyword_re: re.Pattern,
    config: ExtractionConfig
) -> List[ItemSection]:
    accepted = []
    for piece in pieces:
        piece = piece.strip()
        if len(collapse_whitespace(piece)) > config.min_split_section_length and keyword_re.search(piece):
            accepted.append(piece)
    return _to_sections(accepted)


def split_by_separators(text: str, config: Optional[ExtractionConfig] = None) -> List[ItemSection]:
    """Sections between separator lines that mention at least one field."""
    config = config or DEFAULT_CONFIG
    if not _SEPARATOR_RE.search(text):
        return []
    return _split_and_filter(_SEPARATOR_RE.split(text), _SEPARATOR_KEYWORD_RE, config)


def split_by_blank_lines(text: str, config: Optional[ExtractionConfig] = None) -> List[ItemSection]:
    """
    Paragraphs separated by blank lines that mention at least one field.

    Normalized text never has more than one blank line in a row, so a single
    blank line is the paragraph break.
    """
    config = config or DEFAULT_CONFIG
    if not _BLANK_LINE_RE.search(text):
        return []
    return _split_and_filter(_BLANK_LINE_RE.split(text), _BLANK_LINE_KEYWORD_RE, config)


def whole_text(text: str, config: Optional[ExtractionConfig] = None) -> List[ItemSection]:
    """Fallback: the entire text as one section (none for empty text)."""
    text = text.strip()
    return _to_sections([text]) if text else []


# Section strategies in priority order; whole_text is applied separately
SEGMENTATION_STRATEGIES: List[Tuple[str, Callable[..., List[ItemSection]]]] = [
    ('markers', split_by_markers),
    ('separators', split_by_separators),
    ('blank_lines', split_by_blank_lines),
]


def find_item_sections(
    text: str,
    config: Optional[ExtractionConfig] = None
) -> Tuple[Optional[str], List[ItemSection]]:
    """
    Run the section strategies in priority order.

    Args:
        text: Normalized text
        config: Extraction thresholds

    Returns:
        (strategy name, sections) for the first strategy with accepted
        sections, or (None, []) when none applies
    """
    config = config or DEFAULT_CONFIG
    for name, strategy in SEGMENTATION_STRATEGIES:
        sections = strategy(text, config)
        if sections:
            logger.info("Segmented text into %d section(s) using %s", len(sections), name)
            return name, sections
    return None, []


def segment(text: str, config: Optional[ExtractionConfig] = None) -> List[ItemSection]:
    """
    Split normalized text into ordered item sections.

    Falls back to a single whole-text section when no strategy applies.

    Args:
        text: Normalized text
        config: Extraction thresholds

    Returns:
        Item sections with 1-based ordinals
    """
    _, sections = find_item_sections(text, config)
    if sections:
        return sections
    logger.info("No item structure found, treating the whole text as one section")
    return whole_text(text, config)
