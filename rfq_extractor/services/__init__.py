"""
Service classes for orchestrating RFQ extraction workflows.
"""
from .extraction_service import (
    ExtractionService,
    ExtractionServiceFactory,
)
from .collaborators import (
    ItemStore,
    ReviewFlagRecorder,
    Notifier,
    ConfirmationResult,
    confirm_extraction,
    notify_outcome,
)

__all__ = [
    'ExtractionService',
    'ExtractionServiceFactory',
    'ItemStore',
    'ReviewFlagRecorder',
    'Notifier',
    'ConfirmationResult',
    'confirm_extraction',
    'notify_outcome',
]
