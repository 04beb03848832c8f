"""
Text normalization and fragmentation repair.

PDF text extraction often returns "character-fragmented" text where every
letter is separated by spaces or newlines ("P r o d u c t  N a m e :").
normalize() detects that case, rebuilds the known field labels, glues the
characters back together and then applies the usual whitespace cleanup.
"""
import logging
import re
import unicodedata
from typing import List, Tuple, Optional

from rfq_extractor.config import ExtractionConfig, DEFAULT_CONFIG

logger = logging.getLogger(__name__)


# Typographic characters that NFKC leaves alone but the field patterns need in ASCII
CHARACTER_MAP = {
    '×': 'x',                                    # multiplication sign
    '‘': "'", '’': "'", '‚': "'", '′': "'",
    '“': '"', '”': '"', '„': '"', '″': '"',
    '‐': '-', '‑': '-', '‒': '-', '–': '-', '—': '-', '−': '-',
    ' ': ' ', ' ': ' ', ' ': ' ',      # no-break and thin spaces
    '•': '-',                                    # bullet
}

_CONTROL_CHARS_RE = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')
_NON_PRINTABLE_RE = re.compile(r'[^\x20-\x7e\n\t]')
_SINGLE_CHAR_WORD_RE = re.compile(r'\b\w\b')
_WORD_RE = re.compile(r'\b\w+\b')


def _spaced(word: str) -> str:
    """Regex matching `word` with arbitrary whitespace between its characters."""
    return r'\s*'.join(re.escape(ch) for ch in word)


# Fragmented label -> canonical label. Order matters: "Product Name" before
# anything that could consume its letters.
FIELD_LABEL_FIXES: List[Tuple[str, str]] = [
    (_spaced('Item') + r'\s*(\d(?:\s*\d)*)\s*[:.]', 'Item {number}:'),
    (_spaced('ProductName') + r'\s*:', 'Product Name:'),
    (_spaced('Length') + r'\s*\(?\s*' + _spaced('in') + r'\s*\)?\s*:', 'Length (in):'),
    (_spaced('Depth') + r'\s*\(?\s*' + _spaced('in') + r'\s*\)?\s*:', 'Depth (in):'),
    (_spaced('Height') + r'\s*\(?\s*' + _spaced('in') + r'\s*\)?\s*:', 'Height (in):'),
    (_spaced('Quantity') + r'\s*:', 'Quantity:'),
    (_spaced('PrimaryMaterial') + r'\s*:', 'Primary Material:'),
    (_spaced('Finishes') + r'\s*:', 'Finishes:'),
    (_spaced('ConstructionNotes') + r'\s*:', 'Construction Notes:'),
]

# Canonical labels as written by FIELD_LABEL_FIXES
CANONICAL_LABEL_PATTERN = (
    r'(?:Item \d+:|Product Name:|Length \(in\):|Depth \(in\):|Height \(in\):'
    r'|Quantity:|Primary Material:|Finishes:|Construction Notes:)'
)

_COMPILED_LABEL_FIXES = [
    (re.compile(pattern, re.IGNORECASE), replacement)
    for pattern, replacement in FIELD_LABEL_FIXES
]
_CANONICAL_LABEL_RE = re.compile(CANONICAL_LABEL_PATTERN)
_FRAGMENT_NEWLINE_RE = re.compile(
    r'(?<=[A-Za-z0-9])[ \t]*\n+[ \t]*(?=[A-Za-z0-9])(?!' + CANONICAL_LABEL_PATTERN + r')'
)
_CHARACTER_GAP_RE = re.compile(r'(?<=\S)[ \t](?=\S)')


def clean_characters(text: str) -> str:
    """
    Map typographic characters to ASCII, strip control characters,
    unify line endings and drop anything outside printable ASCII.
    """
    for char, replacement in CHARACTER_MAP.items():
        text = text.replace(char, replacement)
    text = unicodedata.normalize('NFKC', text)
    text = _CONTROL_CHARS_RE.sub('', text)
    text = text.replace('\r\n', '\n').replace('\r', '\n')
    return _NON_PRINTABLE_RE.sub('', text)


def fragmentation_ratio(text: str) -> float:
    """Share of word tokens that are a single character (0.0 for no words)."""
    total_words = len(_WORD_RE.findall(text))
    if total_words == 0:
        return 0.0
    return len(_SINGLE_CHAR_WORD_RE.findall(text)) / total_words


def is_fragmented(text: str, config: Optional[ExtractionConfig] = None) -> bool:
    config = config or DEFAULT_CONFIG
    return fragmentation_ratio(text) > config.fragmentation_ratio


def fix_field_labels(text: str) -> str:
    """Rewrite fragmented field labels to their canonical "Label:" form."""
    for pattern, replacement in _COMPILED_LABEL_FIXES:
        if '{number}' in replacement:
            text = pattern.sub(
                lambda m, r=replacement: r.format(number=re.sub(r'\s+', '', m.group(1))),
                text
            )
        else:
            text = pattern.sub(replacement, text)
    return text


def _outside_labels(text: str, transform) -> str:
    """Apply `transform` to the text between canonical labels, leaving labels intact."""
    parts = []
    last = 0
    for match in _CANONICAL_LABEL_RE.finditer(text):
        parts.append(transform(text[last:match.start()]))
        parts.append(match.group(0))
        last = match.end()
    parts.append(transform(text[last:]))
    return ''.join(parts)


def repair_fragmentation(text: str) -> str:
    """
    Glue fragmented characters back into words.

    Runs of two or more spaces are treated as real word gaps; a single
    space or tab between two visible characters is a fragmentation artifact.
    """
    text = fix_field_labels(text)
    text = _FRAGMENT_NEWLINE_RE.sub('', text)
    text = _outside_labels(text, lambda chunk: _CHARACTER_GAP_RE.sub('', chunk))
    text = re.sub(r'([A-Za-z])(\d)', r'\1 \2', text)
    text = re.sub(r'(\d)([A-Za-z])', r'\1 \2', text)
    text = re.sub(r'\s*:\s*', ': ', text)
    text = re.sub(r'([a-z])([A-Z])', r'\1 \2', text)
    return text


def collapse_layout(text: str) -> str:
    """Collapse spaces/tabs, trim around newlines and cap blank lines at one."""
    text = re.sub(r'[ \t]+', ' ', text)
    text = re.sub(r' ?\n ?', '\n', text)
    text = re.sub(r'\n{3,}', '\n\n', text)
    return text.strip()


def _normalize_once(text: str, config: ExtractionConfig) -> str:
    text = clean_characters(text)
    if is_fragmented(text, config):
        logger.debug("Text looks fragmented (ratio %.2f), repairing", fragmentation_ratio(text))
        text = repair_fragmentation(text)
    return collapse_layout(text)


def normalize(text: str, config: Optional[ExtractionConfig] = None) -> str:
    """
    Normalize extracted PDF text.

    Repeats the normalization pass until the text stops changing so that
    normalize(normalize(x)) == normalize(x).

    Args:
        text: Raw extracted text
        config: Extraction thresholds (defaults to DEFAULT_CONFIG)

    Returns:
        Normalized text
    """
    config = config or DEFAULT_CONFIG
    if not text:
        return ''

    current = text
    for _ in range(config.max_normalize_passes):
        normalized = _normalize_once(current, config)
        if normalized == current:
            break
        current = normalized
    else:
        logger.debug("Normalization did not settle after %d passes", config.max_normalize_passes)

    return current
