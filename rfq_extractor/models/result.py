"""
Stage outcome models: acquired text, acquisition failures and the final
extraction result handed to callers.
"""
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from .item import ItemRecord


SUCCESS_MESSAGE = "Successfully extracted {count} item(s) from PDF."
FAILURE_MESSAGE = "No items could be extracted from PDF. Please check the format."


class ExtractedText(BaseModel):
    """Raw text produced by one acquisition backend."""

    ok: Literal[True] = True
    text: str = Field(..., description="Text as returned by the backend")
    backend: str = Field(..., description="Name of the backend that produced the text")


class AcquisitionFailure(BaseModel):
    """No acquisition backend produced usable text."""

    ok: Literal[False] = False
    reason: str = Field(..., description="Machine-readable failure code")
    message: str = Field(..., description="Human-readable diagnostic")
    attempts: List[str] = Field(
        default_factory=list,
        description="One diagnostic line per backend attempt, in order"
    )


class ExtractionStatus(str, Enum):
    """Overall outcome of a pipeline run."""

    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"
    FULL_FAILURE = "full_failure"


class ExtractionResult(BaseModel):
    """Items extracted from one document plus outcome status."""

    items_detected: int = Field(..., ge=0, description="Number of items in `items`")
    items: List[ItemRecord] = Field(default_factory=list, description="Items in document order")
    status: ExtractionStatus = Field(..., description="Overall outcome")
    message: str = Field(..., description="Human-readable summary")
    errors: List[str] = Field(default_factory=list, description="Non-fatal error messages")

    @model_validator(mode='after')
    def check_item_count(self):
        if self.items_detected != len(self.items):
            raise ValueError(
                f"items_detected ({self.items_detected}) does not match "
                f"number of items ({len(self.items)})"
            )
        return self

    @classmethod
    def from_items(cls, items: List[ItemRecord], errors: Optional[List[str]] = None) -> "ExtractionResult":
        """
        Assemble a result from validated items.

        Args:
            items: Validated items in section order
            errors: Optional non-fatal error messages

        Returns:
            ExtractionResult with status and message derived from the item count
        """
        count = len(items)
        return cls(
            items_detected=count,
            items=list(items),
            status=ExtractionStatus.SUCCESS if count > 0 else ExtractionStatus.FULL_FAILURE,
            message=SUCCESS_MESSAGE.format(count=count) if count > 0 else FAILURE_MESSAGE,
            errors=list(errors or []),
        )

    @property
    def ok(self) -> bool:
        """Text was acquired (mirrors the AcquisitionFailure discriminant)."""
        return True

    @property
    def needs_review_count(self) -> int:
        return sum(1 for item in self.items if item.needs_review)
