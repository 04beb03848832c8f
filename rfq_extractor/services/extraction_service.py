"""
Extraction service that runs the RFQ item pipeline:

    acquire -> normalize -> segment -> extract fields -> validate -> result
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Union

from rfq_extractor.config import ExtractionConfig, DEFAULT_CONFIG
from rfq_extractor.extractors import PDFTextExtractor
from rfq_extractor.extractors.pdf_text_extractor import Document
from rfq_extractor.models import (
    AcquisitionFailure,
    ExtractionResult,
    ItemRecord,
)
from rfq_extractor.parsers import (
    extract,
    find_item_sections,
    normalize,
    parse_formatted_items,
    validate_items,
    whole_text,
)

logger = logging.getLogger(__name__)


PostProcessor = Callable[[ExtractionResult, Document], Optional[ExtractionResult]]


class ExtractionService:
    """Service class that orchestrates RFQ item extraction."""

    def __init__(
        self,
        extractor: Optional[PDFTextExtractor] = None,
        config: Optional[ExtractionConfig] = None,
        post_processor: Optional[PostProcessor] = None
    ):
        """
        Initialize extraction service.

        Args:
            extractor: PDFTextExtractor instance (built from config if omitted)
            config: Extraction thresholds
            post_processor: Optional hook that may replace the result of extract()
        """
        self.config = config or (extractor.config if extractor else DEFAULT_CONFIG)
        self.extractor = extractor or PDFTextExtractor(self.config)
        self.post_processor = post_processor

    def extract(self, document: Document) -> Union[ExtractionResult, AcquisitionFailure]:
        """
        Extract items from a PDF document.

        Args:
            document: Filesystem path or PDF bytes

        Returns:
            ExtractionResult, or AcquisitionFailure when no text could be read
        """
        acquired = self.extractor.acquire(document)
        if not acquired.ok:
            logger.warning("Text acquisition failed: %s", acquired.message)
            return acquired

        result = self.extract_from_text(acquired.text)
        return self._post_process(result, document)

    def extract_from_text(self, text: str) -> ExtractionResult:
        """
        Run normalization, segmentation, field extraction and validation.

        Args:
            text: Raw extracted text

        Returns:
            ExtractionResult with validated items in document order
        """
        normalized = normalize(text, self.config)
        items = self.parse_items(normalized)
        result = ExtractionResult.from_items(validate_items(items))
        logger.info(
            "%s (%d need review)", result.message, result.needs_review_count
        )
        return result

    def parse_items(self, normalized: str) -> List[ItemRecord]:
        """Draft items from normalized text using the first applicable strategy."""
        _, sections = find_item_sections(normalized, self.config)
        if not sections:
            _, items = parse_formatted_items(normalized)
            if items:
                return items
            sections = whole_text(normalized, self.config)
        return [extract(section) for section in sections]

    def _post_process(self, result: ExtractionResult, document: Document) -> ExtractionResult:
        if self.post_processor is None:
            return result
        processed = self.post_processor(result, document)
        if isinstance(processed, ExtractionResult):
            return processed
        if processed is not None:
            logger.warning(
                "Post-processor returned %s, keeping original result", type(processed).__name__
            )
        return result

    def get_summary(self, result: Union[ExtractionResult, AcquisitionFailure]) -> Dict[str, Any]:
        """Get summary information from an extraction outcome."""
        if not result.ok:
            return {'status': 'acquisition_failed', 'message': result.message}
        return {
            'status': result.status.value,
            'total_items': result.items_detected,
            'items_extracted': result.items_detected - result.needs_review_count,
            'items_needing_review': result.needs_review_count,
            'review_reasons': [
                (index, item.review_reason)
                for index, item in enumerate(result.items, start=1)
                if item.needs_review
            ],
        }


class ExtractionServiceFactory:
    """Factory class for creating extraction services."""

    @staticmethod
    def create_rfq_service(
        config: Optional[ExtractionConfig] = None,
        post_processor: Optional[PostProcessor] = None
    ) -> ExtractionService:
        """
        Create extraction service for RFQ documents.

        Args:
            config: Thresholds; read from RFQ_EXTRACT_* environment variables if omitted
            post_processor: Optional result hook

        Returns:
            ExtractionService configured for RFQ item extraction
        """
        config = config or ExtractionConfig.from_env()
        extractor = PDFTextExtractor(config)
        return ExtractionService(extractor=extractor, config=config, post_processor=post_processor)
