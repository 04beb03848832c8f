"""
Format-specific item parsers.

Used when the section strategies find no item structure. Each parser
recognises one common RFQ layout and returns fully formed ItemRecords:

- table:   "1 | Oak Table | 24 x 30 x 28 | Oak, Steel | Matte | 2"
- lines:   invoice style "Line 1 ... Description: ... Model: ..."
- catalog: "Product Code: ABC-123" blocks
- list:    "1. Oak Table" followed by "Size:", "Material:", ... lines

The first parser that produces at least one item wins.
"""
import logging
import re
from typing import Callable, List, Optional, Tuple

from rfq_extractor.models import ItemRecord, ItemStatus
from rfq_extractor.utils.helpers import clean_value, to_quantity

from .fields import (
    DEFAULT_TITLE,
    MIN_TITLE_LENGTH,
    NOTES_PUNCTUATION,
    LINE_VALUE_STOP,
    clean_title,
    extract_combined_dimensions,
    extract_item,
    is_default_title,
)

logger = logging.getLogger(__name__)


TABLE_ROW_PATTERN = (
    r'^[ \t]*\d+[ \t]*\|'
    r'[ \t]*([^|\n]+?)[ \t]*\|'     # title
    r'[ \t]*([^|\n]+?)[ \t]*\|'     # dimensions
    r'[ \t]*([^|\n]+?)[ \t]*\|'     # materials
    r'[ \t]*([^|\n]+?)[ \t]*\|'     # finishes
    r'[ \t]*(\d+)\b'                # quantity
)
LINE_ITEM_PATTERN = r'Line\s+(\d+)[:\s]+(.*?)(?=Line\s+\d+[:\s]|SUBTOTAL|TOTAL|\Z)'
CATALOG_PATTERN = r'Product\s+Code\s*:?\s*([A-Za-z0-9][\w./-]*)(.*?)(?=Product\s+Code|\Z)'
DESCRIPTION_PATTERN = r'Description\s*:\s*(.*?)\s*' + LINE_VALUE_STOP
MODEL_PATTERN = r'Model\s*(?:No\.?|#)?\s*:\s*(.*?)\s*' + LINE_VALUE_STOP

LIST_ITEM_START_PATTERN = r'^\s*(\d+)[.)]\s+(\S.*)$'
LIST_ATTRIBUTE_PATTERNS = [
    ('size', r'^\s*(?:Size|Dimensions)\s*:\s*(.+)$'),
    ('primary_material', r'^\s*(?:Primary\s+)?Material\s*:\s*(.+)$'),
    ('finishes', r'^\s*(?:Color\s*/\s*Finish|Finish(?:es)?)\s*:\s*(.+)$'),
    ('quantity', r'^\s*(?:Quantity|Qty\.?)\s*:\s*(\d+)'),
    ('construction_notes', r'^\s*(?:Construction\s+)?Notes?\s*:\s*(.+)$'),
]

_TABLE_ROW_RE = re.compile(TABLE_ROW_PATTERN, re.MULTILINE)
_LINE_ITEM_RE = re.compile(LINE_ITEM_PATTERN, re.DOTALL)
_CATALOG_RE = re.compile(CATALOG_PATTERN, re.IGNORECASE | re.DOTALL)
_DESCRIPTION_RE = re.compile(DESCRIPTION_PATTERN, re.IGNORECASE)
_MODEL_RE = re.compile(MODEL_PATTERN, re.IGNORECASE)
_LIST_ITEM_START_RE = re.compile(LIST_ITEM_START_PATTERN)
_LIST_ATTRIBUTE_RES = [
    (name, re.compile(pattern, re.IGNORECASE)) for name, pattern in LIST_ATTRIBUTE_PATTERNS
]


def _title_or_default(raw: str, ordinal: int) -> str:
    title = clean_title(raw)
    return title if len(title) >= MIN_TITLE_LENGTH else DEFAULT_TITLE.format(ordinal=ordinal)


def _first_entry(raw: str) -> str:
    """First entry of a comma or semicolon separated list, cleaned."""
    return clean_value(re.split(r'[,;]', raw)[0])


def _with_title(item: ItemRecord, title: str) -> ItemRecord:
    """Replace a draft's title, clearing the default-title review flag."""
    return item.model_copy(update={
        'title': title,
        'status': ItemStatus.EXTRACTED,
        'review_reason': None,
    })


def _labelled_title(text: str) -> str:
    """Title built from "Description:" and "Model:" labels ('' if neither)."""
    description = _DESCRIPTION_RE.search(text)
    model = _MODEL_RE.search(text)
    parts = [clean_title(m.group(1)) for m in (description, model) if m]
    return ' - '.join(part for part in parts if part)


def _has_content(item: ItemRecord, ordinal: int) -> bool:
    return not is_default_title(item, ordinal) or item.length > 0 or item.depth > 0


def parse_table_format(text: str) -> List[ItemRecord]:
    """Pipe-separated rows: number | title | dimensions | materials | finishes | quantity."""
    items = []
    for match in _TABLE_ROW_RE.finditer(text):
        ordinal = len(items) + 1
        title, dimensions, materials, finishes, quantity = match.groups()
        length, depth, height = extract_combined_dimensions(dimensions) or (0.0, 0.0, 0.0)
        items.append(ItemRecord(
            title=_title_or_default(title, ordinal),
            length=length,
            depth=depth,
            height=height,
            quantity=to_quantity(quantity),
            primary_material=_first_entry(materials),
            finishes=clean_value(finishes),
        ))
    return items


def parse_line_item_format(text: str) -> List[ItemRecord]:
    """Invoice style "Line N" entries titled by Description / Model labels."""
    items = []
    for match in _LINE_ITEM_RE.finditer(text):
        ordinal = len(items) + 1
        body = match.group(2)
        item = extract_item(body, ordinal)
        title = _labelled_title(body)
        if len(title) >= MIN_TITLE_LENGTH:
            item = _with_title(item, title)
        if _has_content(item, ordinal):
            items.append(item)
    return items


def parse_catalog_format(text: str) -> List[ItemRecord]:
    """Blocks introduced by "Product Code:"."""
    items = []
    for match in _CATALOG_RE.finditer(text):
        ordinal = len(items) + 1
        body = match.group(2)
        item = extract_item(body, ordinal)
        if is_default_title(item, ordinal):
            title = _labelled_title(body)
            if len(title) >= MIN_TITLE_LENGTH:
                item = _with_title(item, title)
        if _has_content(item, ordinal):
            items.append(item)
    return items


def _list_blocks(text: str) -> List[Tuple[str, List[str]]]:
    """Group lines under the numbered line ("1. Title") that precedes them."""
    blocks = []
    for line in text.split('\n'):
        start = _LIST_ITEM_START_RE.match(line)
        if start:
            blocks.append((start.group(2), []))
        elif blocks:
            blocks[-1][1].append(line)
    return blocks


def parse_list_format(text: str) -> List[ItemRecord]:
    """Numbered list entries with Size / Material / Finish / Quantity / Notes lines."""
    items = []
    for raw_title, lines in _list_blocks(text):
        attributes = {}
        for line in lines:
            for name, pattern in _LIST_ATTRIBUTE_RES:
                match = pattern.match(line)
                if match and name not in attributes:
                    attributes[name] = match.group(1)
        # A bare numbered line is prose, not an item
        if not attributes:
            continue

        ordinal = len(items) + 1
        dimensions = extract_combined_dimensions(attributes.get('size', '')) or (0.0, 0.0, 0.0)
        items.append(ItemRecord(
            title=_title_or_default(raw_title, ordinal),
            length=dimensions[0],
            depth=dimensions[1],
            height=dimensions[2],
            quantity=to_quantity(attributes.get('quantity')),
            primary_material=clean_value(attributes.get('primary_material')),
            finishes=clean_value(attributes.get('finishes')),
            construction_notes=clean_value(
                attributes.get('construction_notes'), keep=NOTES_PUNCTUATION
            ),
        ))
    return items


FORMAT_PARSERS: List[Tuple[str, Callable[[str], List[ItemRecord]]]] = [
    ('table', parse_table_format),
    ('line_items', parse_line_item_format),
    ('catalog', parse_catalog_format),
    ('list', parse_list_format),
]


def parse_formatted_items(text: str) -> Tuple[Optional[str], List[ItemRecord]]:
    """
    Try the format parsers in order.

    Args:
        text: Normalized text

    Returns:
        (format name, items) for the first parser with items, or (None, [])
    """
    for name, parser in FORMAT_PARSERS:
        items = parser(text)
        if items:
            logger.info("Parsed %d item(s) using %s format", len(items), name)
            return name, items
    return None, []
