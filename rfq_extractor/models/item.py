"""
Models for a single RFQ line item and the text section it came from.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from rfq_extractor.utils.helpers import to_dimension, to_quantity


class ItemStatus(str, Enum):
    """Review state of an extracted item."""

    EXTRACTED = "extracted"
    NEEDS_REVIEW = "needs_review"


class ItemSection(BaseModel):
    """Contiguous piece of normalized text believed to describe one item."""

    text: str = Field(..., description="Section text as it appears in the normalized document")
    ordinal: int = Field(..., ge=1, description="1-based position of the section in the document")


class ItemRecord(BaseModel):
    """Structured line item recovered from an RFQ document."""

    title: str = Field(default="", description="Product name or default 'Item N' title")
    length: float = Field(default=0.0, ge=0, description="Length in inches")
    depth: float = Field(default=0.0, ge=0, description="Depth in inches")
    height: float = Field(default=0.0, ge=0, description="Height in inches")
    quantity: int = Field(default=0, ge=0, description="Requested quantity")
    primary_material: str = Field(default="", description="Main material (e.g. Oak, Steel)")
    finishes: str = Field(default="", description="Finish description")
    construction_notes: str = Field(default="", description="Free-form construction notes")
    status: ItemStatus = Field(default=ItemStatus.EXTRACTED, description="Review status")
    review_reason: Optional[str] = Field(
        default=None,
        description="First missing critical field, set only when status is needs_review"
    )

    @field_validator('length', 'depth', 'height', mode='before')
    @classmethod
    def coerce_dimension(cls, v):
        """Unparsable or negative dimensions become 0.0."""
        return to_dimension(v)

    @field_validator('quantity', mode='before')
    @classmethod
    def coerce_quantity(cls, v):
        """Unparsable or negative quantities become 0."""
        return to_quantity(v)

    @field_validator('title', 'primary_material', 'finishes', 'construction_notes', mode='before')
    @classmethod
    def coerce_text(cls, v):
        if v is None:
            return ""
        return str(v).strip()

    @model_validator(mode='after')
    def check_review_reason(self):
        """review_reason is present exactly when the item needs review."""
        if self.status == ItemStatus.NEEDS_REVIEW and not self.review_reason:
            raise ValueError("review_reason is required when status is needs_review")
        if self.status == ItemStatus.EXTRACTED and self.review_reason is not None:
            raise ValueError("review_reason must be empty when status is extracted")
        return self

    @property
    def needs_review(self) -> bool:
        return self.status == ItemStatus.NEEDS_REVIEW
