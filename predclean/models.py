"""Core data models for the prediction dataset cleaner."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

import pandas as pd
from typing_extensions import TypedDict

# Canonical column names for the recognised roles
TIMESTAMP = "timestamp"
PREDICTION = "prediction"
ACTUAL = "actual"
ROLE_COLUMNS = (TIMESTAMP, PREDICTION, ACTUAL)

ColumnRole = Literal["timestamp", "prediction", "actual", "feature"]
EventType = Literal["missing", "abnormal", "type"]


@dataclass(frozen=True)
class ColumnRoles:
    """Column indices assigned to each role by header inference (-1 = none)."""

    headers: tuple[str, ...]
    timestamp: int = -1
    prediction: int = -1
    actual: int = -1

    def role_of(self, index: int) -> ColumnRole:
        if index == self.timestamp:
            return "timestamp"
        if index == self.prediction:
            return "prediction"
        if index == self.actual:
            return "actual"
        return "feature"

    @property
    def feature_indices(self) -> list[int]:
        claimed = {self.timestamp, self.prediction, self.actual}
        return [i for i in range(len(self.headers)) if i not in claimed]


@dataclass(frozen=True)
class ColumnStats:
    """Population mean and standard deviation of a column's valid values."""

    mean: float = 0.0
    std: float = 0.0


@dataclass(frozen=True)
class CleaningEvent:
    """Record of a single automatic repair applied to one cell."""

    type: EventType
    row: int
    column: str
    original: Any
    processed: float

    @property
    def key(self) -> str:
        return event_key(self.row, self.column)


def event_key(row: int, column: str) -> str:
    """Return the audit-log key for a cell."""
    return f"{row}-{column}"


@dataclass(frozen=True)
class CleaningSummary:
    """Aggregate counts of the audit log."""

    missing: int = 0
    abnormal: int = 0
    type_converted: int = 0

    @property
    def total(self) -> int:
        return self.missing + self.abnormal + self.type_converted

    def to_dict(self) -> dict[str, int]:
        return {
            "missing": self.missing,
            "abnormal": self.abnormal,
            "typeConverted": self.type_converted,
        }


@dataclass
class CleaningResult:
    """Cleaned dataset together with the audit log that annotates it."""

    df: pd.DataFrame
    events: dict[str, CleaningEvent] = field(default_factory=dict)
    summary: CleaningSummary = field(default_factory=CleaningSummary)


@dataclass(frozen=True)
class CorrelationWeight:
    """Absolute correlation of one feature column with the target column."""

    name: str
    weight: float

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "weight": self.weight}


@dataclass(frozen=True)
class DatasetSummary:
    """Headline statistics of the cleaned, ordered dataset."""

    mean_prediction: float = 0.0
    mean_actual: float = 0.0
    prediction_actual_correlation: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "meanPrediction": self.mean_prediction,
            "meanActual": self.mean_actual,
            "predictionActualCorrelation": self.prediction_actual_correlation,
        }


class PipelineResult(TypedDict, total=False):
    """Everything a renderer consumes from one pipeline invocation."""

    # Input
    source_info: str
    raw_df: pd.DataFrame

    # Cleaning
    stats: dict[str, ColumnStats]
    cleaned_df: pd.DataFrame
    events: dict[str, CleaningEvent]
    cleaning_summary: CleaningSummary

    # Analysis
    influence: list[CorrelationWeight]
    dataset_summary: DatasetSummary

    # Traceability
    errors: list[str]
