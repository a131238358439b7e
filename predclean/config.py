"""Pipeline configuration for the prediction dataset cleaner."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# Default policy constants
DEFAULT_Z_THRESHOLD = 3.0
DEFAULT_TOP_K = 8
DEFAULT_DELIMITER = ","
DEFAULT_TARGET_COLUMN = "prediction"
DEFAULT_SAMPLE_ROWS = 100

SUPPORTED_DELIMITERS = ",\t;|"


@dataclass
class PipelineConfig:
    """Tunable parameters for a single pipeline invocation.

    Attributes:
        z_threshold: Absolute z-score above which a value is capped.
        top_k: Maximum number of entries in the influence ranking.
        delimiter: Cell delimiter used when ingesting raw text.
        target_column: Column the influence ranking correlates against.
        candidate_columns: Feature subset to rank. ``None`` ranks every
            non-role column.
        fallback_to_sample: Substitute the generated sample dataset when the
            input source is unreadable or yields no rows.
        sample_rows: Size of the fallback sample dataset.
        sample_seed: Seed for the fallback sample dataset.
    """

    z_threshold: float = DEFAULT_Z_THRESHOLD
    top_k: int = DEFAULT_TOP_K
    delimiter: str = DEFAULT_DELIMITER
    target_column: str = DEFAULT_TARGET_COLUMN
    candidate_columns: Optional[list[str]] = None
    fallback_to_sample: bool = True
    sample_rows: int = DEFAULT_SAMPLE_ROWS
    sample_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.z_threshold > 0:
            raise ValueError(
                f"Invalid z_threshold {self.z_threshold!r}. Must be positive."
            )
        if self.top_k < 1:
            raise ValueError(f"Invalid top_k {self.top_k!r}. Must be at least 1.")
        if not isinstance(self.delimiter, str) or len(self.delimiter) != 1:
            raise ValueError(
                f"Invalid delimiter {self.delimiter!r}. Must be a single character."
            )
        if self.sample_rows < 0:
            raise ValueError(
                f"Invalid sample_rows {self.sample_rows!r}. Must be non-negative."
            )
        if self.candidate_columns is not None:
            self.candidate_columns = [str(c).strip() for c in self.candidate_columns]
