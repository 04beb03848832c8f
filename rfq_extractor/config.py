"""
Tunable thresholds for the extraction pipeline.

Every heuristic number used by acquisition, normalization and segmentation
lives here as a named default so callers can override it per run.
"""
import os
from typing import List, Optional

from pydantic import BaseModel, Field


MIN_TEXT_LENGTH = 50
SUBPROCESS_TIMEOUT = 30.0
FRAGMENTATION_RATIO = 0.3
MIN_MARKER_SECTION_LENGTH = 20
MIN_SPLIT_SECTION_LENGTH = 50
MAX_NORMALIZE_PASSES = 5
TJ_SPACE_THRESHOLD = 200
SCRIPT_INTERPRETER = "python3"
PDFTOTEXT_PATHS = [
    "pdftotext",
    "/usr/bin/pdftotext",
    "/usr/local/bin/pdftotext",
    "/opt/local/bin/pdftotext",
]

ENV_PREFIX = "RFQ_EXTRACT_"


class ExtractionConfig(BaseModel):
    """Thresholds and external tool settings for one pipeline instance."""

    min_text_length: int = Field(
        MIN_TEXT_LENGTH, ge=0,
        description="Acquired text must be longer than this (after trimming) to be accepted"
    )
    subprocess_timeout: float = Field(
        SUBPROCESS_TIMEOUT, gt=0,
        description="Seconds before an external extraction command is abandoned"
    )
    fragmentation_ratio: float = Field(
        FRAGMENTATION_RATIO, ge=0, le=1,
        description="Single-character word share above which text counts as fragmented"
    )
    min_marker_section_length: int = Field(
        MIN_MARKER_SECTION_LENGTH, ge=0,
        description="Minimum collapsed length of a marker-delimited section"
    )
    min_split_section_length: int = Field(
        MIN_SPLIT_SECTION_LENGTH, ge=0,
        description="Minimum collapsed length of a separator or blank-line section"
    )
    max_normalize_passes: int = Field(
        MAX_NORMALIZE_PASSES, ge=1,
        description="Upper bound on normalization passes while searching for a fixpoint"
    )
    tj_space_threshold: float = Field(
        TJ_SPACE_THRESHOLD, ge=0,
        description="TJ kerning offset (thousandths of an em) treated as a word gap"
    )
    pdftotext_paths: List[str] = Field(
        default_factory=lambda: list(PDFTOTEXT_PATHS),
        description="Candidate locations of the pdftotext executable, in lookup order"
    )
    script_interpreter: str = Field(
        SCRIPT_INTERPRETER,
        description="Interpreter used by the script extraction backend"
    )

    @classmethod
    def from_env(cls, **overrides) -> "ExtractionConfig":
        """
        Build a config from RFQ_EXTRACT_* environment variables.

        Args:
            **overrides: Values that take precedence over the environment

        Returns:
            ExtractionConfig instance
        """
        env_fields = {
            'min_text_length': 'MIN_TEXT_LENGTH',
            'subprocess_timeout': 'SUBPROCESS_TIMEOUT',
            'fragmentation_ratio': 'FRAGMENTATION_RATIO',
            'min_marker_section_length': 'MIN_MARKER_SECTION',
            'min_split_section_length': 'MIN_SPLIT_SECTION',
            'script_interpreter': 'SCRIPT_INTERPRETER',
        }
        values = {}
        for field_name, suffix in env_fields.items():
            raw: Optional[str] = os.getenv(ENV_PREFIX + suffix)
            if raw is not None and raw.strip():
                values[field_name] = raw.strip()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


DEFAULT_CONFIG = ExtractionConfig()
