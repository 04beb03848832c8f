"""
Critical-field policy for extracted items.
"""
import logging
from typing import Callable, List, Optional, Tuple

from rfq_extractor.models import ItemRecord, ItemStatus

from .fields import MIN_TITLE_LENGTH

logger = logging.getLogger(__name__)


def has_clear_title(item: ItemRecord) -> bool:
    """At least 3 characters once trimmed."""
    return len(item.title.strip()) >= MIN_TITLE_LENGTH


# Checked in this order; only the first failure is reported
CRITICAL_FIELD_CHECKS: List[Tuple[str, Callable[[ItemRecord], bool]]] = [
    ("Missing Length", lambda item: item.length > 0),
    ("Missing Depth", lambda item: item.depth > 0),
    ("Missing Height", lambda item: item.height > 0),
    ("Missing Primary Material", lambda item: bool(item.primary_material.strip())),
    ("Missing Quantity", lambda item: item.quantity > 0),
    ("Missing or unclear title", has_clear_title),
]


def first_failure(item: ItemRecord) -> Optional[str]:
    """Review reason of the first failing critical-field check, or None."""
    for reason, check in CRITICAL_FIELD_CHECKS:
        if not check(item):
            return reason
    return None


def validate(item: ItemRecord) -> ItemRecord:
    """
    Assign the final review status of an item.

    Args:
        item: Draft item from the field extractor or a format parser

    Returns:
        New ItemRecord with status and review_reason set
    """
    reason = first_failure(item)
    if reason:
        logger.debug("Item '%s' needs review: %s", item.title, reason)
        return item.model_copy(update={'status': ItemStatus.NEEDS_REVIEW, 'review_reason': reason})
    return item.model_copy(update={'status': ItemStatus.EXTRACTED, 'review_reason': None})


def validate_items(items: List[ItemRecord]) -> List[ItemRecord]:
    return [validate(item) for item in items]
