"""
Per-field pattern cascades for turning an item section into an ItemRecord.

Each field has an ordered list of regexes. The first pattern that matches
and yields a usable value (non-empty text, number > 0) wins and later
patterns are not tried. The tables are plain data so each field can be
tested on its own.
"""
import logging
import re
from typing import Callable, List, Optional, Tuple

from rfq_extractor.models import ItemRecord, ItemSection, ItemStatus
from rfq_extractor.utils.helpers import clean_value, collapse_whitespace, to_dimension, to_quantity

logger = logging.getLogger(__name__)


NUMBER = r'\d+(?:\.\d+)?'

# Labels that end a captured value when they follow it
KNOWN_LABELS = [
    r'Product\s+Name',
    r'Product\s+Code',
    r'Product',
    r'Length\s*(?:\(?in\)?)?',
    r'Depth\s*(?:\(?in\)?)?',
    r'Height\s*(?:\(?in\)?)?',
    r'Quantity',
    r'Qty\.?',
    r'Primary\s+Material',
    r'Material',
    r'Finishes',
    r'Color\s*/\s*Finish',
    r'Finish',
    r'Construction\s+Notes?',
    r'Notes?',
    r'Description',
    r'Model',
    r'Size',
    r'Dimensions',
    r'Unit\s+Price',
    r'Price',
]
LABEL = r'(?:' + '|'.join(KNOWN_LABELS) + r')\s*:'
ITEM_BOUNDARY = r'(?-i:Item|ITEM|Line)\s+\d+'
SEPARATOR = r'={10,}|-{10,}'

# Where a text value ends; it may wrap over several lines
VALUE_STOP = r'(?=' + LABEL + r'|' + ITEM_BOUNDARY + r'|' + SEPARATOR + r'|\Z)'
# Where a value that never wraps ends
LINE_VALUE_STOP = r'(?=' + LABEL + r'|' + ITEM_BOUNDARY + r'|' + SEPARATOR + r'|\n|\Z)'
# Where a numeric value ends (units and list punctuation allowed in between)
NUMBER_STOP = (
    r'\s*(?:"|inches\b|in\b)?\s*'
    r'(?=' + LABEL + r'|' + ITEM_BOUNDARY + r'|' + SEPARATOR + r'|[,;\n]|\Z)'
)
QUANTITY_STOP = (
    r'\s*(?:(?:pcs|pieces|ea|each|units?)\b\.?)?\s*'
    r'(?=' + LABEL + r'|' + ITEM_BOUNDARY + r'|' + SEPARATOR + r'|[,;\n]|\Z)'
)
# Notes run to the next item marker, separator or end of section
NOTES_STOP = r'(?=' + ITEM_BOUNDARY + r'|' + SEPARATOR + r'|\Z)'

TITLE_PATTERNS = [
    r'Product\s+Name\s*:\s*(.*?)\s*' + VALUE_STOP,
    r'Product\s*:\s*(.*?)\s*' + VALUE_STOP,
]

DIMENSION_PATTERNS = {
    'length': [
        r'Length\s*\(in\)\s*:\s*(' + NUMBER + r')' + NUMBER_STOP,
        r'Length\s*(?:\(?in\)?)?\s*:\s*(' + NUMBER + r')' + NUMBER_STOP,
    ],
    'depth': [
        r'Depth\s*\(in\)\s*:\s*(' + NUMBER + r')' + NUMBER_STOP,
        r'Depth\s*(?:\(?in\)?)?\s*:\s*(' + NUMBER + r')' + NUMBER_STOP,
    ],
    # Height accepts a range ("28.5 - 48.0"); the lower bound is kept
    'height': [
        r'Height\s*\(in\)\s*:\s*(' + NUMBER + r'(?:\s*-\s*' + NUMBER + r')?)' + NUMBER_STOP,
        r'Height\s*(?:\(?in\)?)?\s*:\s*(' + NUMBER + r'(?:\s*-\s*' + NUMBER + r')?)' + NUMBER_STOP,
    ],
}

COMBINED_DIMENSIONS_PATTERN = (
    r'(' + NUMBER + r')\s*"?\s*x\s*(' + NUMBER + r')\s*"?\s*x\s*(' + NUMBER + r')'
)
# A combined token directly after one of these labels is that label's own value
DIMENSION_LABEL_BEFORE_PATTERN = r'(?:Length|Depth|Height)\s*(?:\(?in\)?)?\s*:\s*$'

QUANTITY_PATTERNS = [
    r'Quantity\s*:\s*(\d+)' + QUANTITY_STOP,
    r'Qty\.?\s*:\s*(\d+)' + QUANTITY_STOP,
]

PRIMARY_MATERIAL_PATTERNS = [
    r'Primary\s+Material\s*:\s*(.*?)\s*' + VALUE_STOP,
]
GENERIC_MATERIAL_PATTERN = r'Material\s*:\s*(.*?)\s*' + VALUE_STOP

FINISH_PATTERNS = [
    r'Finishes\s*:\s*(.*?)\s*' + VALUE_STOP,
    r'Finish\s*:\s*(.*?)\s*' + VALUE_STOP,
]

CONSTRUCTION_NOTES_PATTERNS = [
    r'Construction\s+Notes?\s*:\s*(.*?)\s*' + NOTES_STOP,
]
NOTES_PUNCTUATION = ',!?()'

MIN_TITLE_LENGTH = 3
DEFAULT_TITLE = "Item {ordinal}"
DEFAULT_TITLE_REASON = "Missing or unclear title"


def _compile(patterns: List[str], flags: int = re.IGNORECASE) -> List[re.Pattern]:
    return [re.compile(pattern, flags) for pattern in patterns]


_TITLE_RES = _compile(TITLE_PATTERNS, re.IGNORECASE | re.DOTALL)
_DIMENSION_RES = {name: _compile(patterns) for name, patterns in DIMENSION_PATTERNS.items()}
_COMBINED_RE = re.compile(COMBINED_DIMENSIONS_PATTERN, re.IGNORECASE)
_DIMENSION_LABEL_BEFORE_RE = re.compile(DIMENSION_LABEL_BEFORE_PATTERN, re.IGNORECASE)
_QUANTITY_RES = _compile(QUANTITY_PATTERNS)
_PRIMARY_MATERIAL_RES = _compile(PRIMARY_MATERIAL_PATTERNS, re.IGNORECASE | re.DOTALL)
_GENERIC_MATERIAL_RE = re.compile(GENERIC_MATERIAL_PATTERN, re.IGNORECASE | re.DOTALL)
_FINISH_RES = _compile(FINISH_PATTERNS, re.IGNORECASE | re.DOTALL)
_NOTES_RES = _compile(CONSTRUCTION_NOTES_PATTERNS, re.IGNORECASE | re.DOTALL)


def first_match(patterns: List[re.Pattern], text: str, convert: Callable, accept: Callable):
    """
    Run an ordered pattern cascade.

    Args:
        patterns: Compiled patterns, each with the value in group 1
        text: Section text
        convert: Turns the captured string into a field value
        accept: Returns True for a usable value

    Returns:
        The first accepted value, or None
    """
    for pattern in patterns:
        match = pattern.search(text)
        if not match:
            continue
        value = convert(match.group(1))
        if accept(value):
            return value
    return None


def split_merged_words(text: str) -> str:
    """"OfficeChair" -> "Office Chair"."""
    return re.sub(r'([a-z])([A-Z])', r'\1 \2', text)


def clean_title(raw: str) -> str:
    return split_merged_words(clean_value(raw))


def extract_title(text: str) -> str:
    """Product name, or '' when none is usable (2 characters or fewer)."""
    title = first_match(_TITLE_RES, text, clean_title, lambda v: len(v) >= MIN_TITLE_LENGTH)
    return title or ''


def extract_dimension(text: str, name: str) -> float:
    """Label-anchored dimension in inches, 0.0 when absent."""
    value = first_match(_DIMENSION_RES[name], text, to_dimension, lambda v: v > 0)
    return value or 0.0


def extract_combined_dimensions(text: str) -> Optional[Tuple[float, float, float]]:
    """
    First "L x D x H" token that is not the value of a dimension label.

    Returns:
        (length, depth, height) or None
    """
    for match in _COMBINED_RE.finditer(text):
        if _DIMENSION_LABEL_BEFORE_RE.search(text[:match.start()]):
            continue
        return tuple(to_dimension(group) for group in match.groups())
    return None


def extract_quantity(text: str) -> int:
    value = first_match(_QUANTITY_RES, text, to_quantity, lambda v: v > 0)
    return value or 0


def extract_primary_material(text: str) -> str:
    """Primary material, falling back to the first entry of a generic Material label."""
    material = first_match(_PRIMARY_MATERIAL_RES, text, clean_value, bool)
    if material:
        return material

    match = _GENERIC_MATERIAL_RE.search(text)
    if match:
        first_entry = re.split(r'[,;]', match.group(1))[0]
        return clean_value(first_entry)
    return ''


def extract_finishes(text: str) -> str:
    return first_match(_FINISH_RES, text, clean_value, bool) or ''


def extract_construction_notes(text: str) -> str:
    def convert(raw):
        return clean_value(collapse_whitespace(raw), keep=NOTES_PUNCTUATION)
    return first_match(_NOTES_RES, text, convert, bool) or ''


def extract_item(text: str, ordinal: int) -> ItemRecord:
    """
    Parse one section of text into a draft ItemRecord.

    The draft is marked needs_review only when the title had to be
    defaulted; the Validator assigns the final status.

    Args:
        text: Section text
        ordinal: 1-based section position, used for the default title

    Returns:
        Draft ItemRecord
    """
    title = extract_title(text)
    defaulted = not title
    if defaulted:
        title = DEFAULT_TITLE.format(ordinal=ordinal)
        logger.debug("No usable title in section %d, using '%s'", ordinal, title)

    length = extract_dimension(text, 'length')
    depth = extract_dimension(text, 'depth')
    height = extract_dimension(text, 'height')

    if not (length or depth or height):
        combined = extract_combined_dimensions(text)
        if combined:
            length, depth, height = combined
            logger.debug("Section %d: used combined dimensions %s", ordinal, combined)

    item = ItemRecord(
        title=title,
        length=length,
        depth=depth,
        height=height,
        quantity=extract_quantity(text),
        primary_material=extract_primary_material(text),
        finishes=extract_finishes(text),
        construction_notes=extract_construction_notes(text),
        status=ItemStatus.NEEDS_REVIEW if defaulted else ItemStatus.EXTRACTED,
        review_reason=DEFAULT_TITLE_REASON if defaulted else None,
    )
    logger.debug(
        "Section %d: title=%r length=%s depth=%s height=%s quantity=%s material=%r",
        ordinal, item.title, item.length, item.depth, item.height,
        item.quantity, item.primary_material
    )
    return item


def extract(section: ItemSection) -> ItemRecord:
    """Parse an ItemSection into a draft ItemRecord."""
    return extract_item(section.text, section.ordinal)


def is_default_title(item: ItemRecord, ordinal: int) -> bool:
    return item.title == DEFAULT_TITLE.format(ordinal=ordinal)
