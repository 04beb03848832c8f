"""
Interfaces to the application around the pipeline (item storage, review
flags, notifications) and the glue that feeds extraction outcomes to them.

The pipeline itself never imports an implementation of these protocols;
callers pass them in explicitly.
"""
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

from pydantic import BaseModel, Field

from rfq_extractor.models import AcquisitionFailure, ExtractionResult, ItemRecord

logger = logging.getLogger(__name__)


NO_VALID_ITEMS_MESSAGE = "No valid items were extracted from PDF."


class ItemStore(Protocol):
    """Persists a project's confirmed items."""

    def save_items(self, project_id: int, items: List[ItemRecord]) -> None: ...

    def set_extraction_mode(self, project_id: int, enabled: bool) -> None: ...


class ReviewFlagRecorder(Protocol):
    """Registers a reviewable flag on one item of a project."""

    def add_flag(self, project_id: int, item_index: int, reason: str) -> None: ...


class Notifier(Protocol):
    """Delivers extraction notices to administrators and users."""

    def notify_extraction_failed(self, project_id: int, message: str) -> None: ...

    def notify_extraction_requires_review(
        self, project_id: int, needs_review_count: int, total_count: int
    ) -> None: ...


class ConfirmationResult(BaseModel):
    """Outcome of confirming extracted items for a project."""

    saved_count: int = Field(default=0, ge=0, description="Number of items saved")
    flagged_indices: List[int] = Field(
        default_factory=list,
        description="Indices (in the saved list) of items flagged for review"
    )
    error: Optional[str] = Field(default=None, description="Set when nothing could be saved")

    @property
    def ok(self) -> bool:
        return self.error is None


def notify_outcome(
    project_id: int,
    outcome: Union[ExtractionResult, AcquisitionFailure],
    notifier: Optional[Notifier]
) -> bool:
    """
    Send the administrator notice for an acquisition failure.

    Args:
        project_id: Project the document belongs to
        outcome: Return value of ExtractionService.extract()
        notifier: Notification collaborator (no-op when None)

    Returns:
        True if a notice was sent
    """
    if notifier is None or outcome.ok:
        return False
    notifier.notify_extraction_failed(project_id, outcome.message)
    return True


def _as_item(item: Union[ItemRecord, Dict[str, Any]]) -> ItemRecord:
    return item if isinstance(item, ItemRecord) else ItemRecord.model_validate(item)


def confirm_extraction(
    project_id: int,
    items: Sequence[Union[ItemRecord, Dict[str, Any]]],
    store: ItemStore,
    flags: Optional[ReviewFlagRecorder] = None,
    notifier: Optional[Notifier] = None
) -> ConfirmationResult:
    """
    Save reviewed items and register their review flags.

    Items without a title are skipped. Items still marked needs_review are
    flagged by their index in the saved list, and the uploading user is
    told how many need review.

    Args:
        project_id: Project to attach the items to
        items: Items from an ExtractionResult (or their JSON form after editing)
        store: Persistence collaborator
        flags: Review-flag collaborator
        notifier: Notification collaborator

    Returns:
        ConfirmationResult
    """
    confirmed = [item for item in map(_as_item, items) if item.title.strip()]
    if not confirmed:
        logger.warning("Project %s: no items with a title to confirm", project_id)
        return ConfirmationResult(error=NO_VALID_ITEMS_MESSAGE)

    store.save_items(project_id, confirmed)
    store.set_extraction_mode(project_id, True)

    flagged = []
    for index, item in enumerate(confirmed):
        if not item.needs_review:
            continue
        flagged.append(index)
        if flags is not None:
            flags.add_flag(project_id, index, item.review_reason)

    if flagged and notifier is not None:
        notifier.notify_extraction_requires_review(project_id, len(flagged), len(confirmed))

    logger.info(
        "Project %s: saved %d item(s), %d flagged for review",
        project_id, len(confirmed), len(flagged)
    )
    return ConfirmationResult(saved_count=len(confirmed), flagged_indices=flagged)
