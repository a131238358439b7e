"""Cell-level cleaning with a full audit trail, plus ordering and filtering.

``clean`` repairs every cell of every profiled column and records one
CleaningEvent per repaired cell. ``finalize`` drops unusable records and
sorts the remainder chronologically.
"""

from __future__ import annotations

import logging
import math
import numbers
from collections import Counter
from typing import Any, Optional

import numpy as np
import pandas as pd

from predclean.config import DEFAULT_Z_THRESHOLD
from predclean.models import (
    ACTUAL,
    PREDICTION,
    TIMESTAMP,
    CleaningEvent,
    CleaningResult,
    CleaningSummary,
    ColumnStats,
    event_key,
)
from predclean.parsing import is_absent, parse_number

logger = logging.getLogger(__name__)


def _repair_cell(
    value: Any, row: int, column: str, stats: ColumnStats, z_threshold: float
) -> tuple[float, Optional[CleaningEvent]]:
    """Apply the first matching repair branch to one cell.

    Branches, in priority order: missing, type, abnormal, none.
    """
    number = parse_number(value)

    if is_absent(value) or number is None:
        filled = stats.mean if math.isfinite(stats.mean) else 0.0
        if not isinstance(value, str) and is_absent(value):
            value = None
        return filled, CleaningEvent("missing", row, column, value, filled)

    if isinstance(value, str):
        return number, CleaningEvent("type", row, column, value, number)

    if stats.std > 0:
        z = abs(number - stats.mean) / stats.std
        if z > z_threshold:
            capped = stats.mean + math.copysign(z_threshold * stats.std, number - stats.mean)
            # A value already sitting on the cap is not re-flagged
            if capped != number:
                return capped, CleaningEvent("abnormal", row, column, value, capped)

    return number, None


def clean(
    df: pd.DataFrame,
    stats: dict[str, ColumnStats],
    z_threshold: float = DEFAULT_Z_THRESHOLD,
) -> CleaningResult:
    """Repair every cell of the profiled columns.

    Each cell gets at most one event: ``missing`` (absent, blank or
    unparseable; filled with the column mean), ``type`` (numeric text;
    replaced by the parsed number) or ``abnormal`` (|z| above the threshold;
    capped at exactly ``z_threshold`` standard deviations, sign preserved).
    Columns absent from ``stats`` pass through untouched.

    Args:
        df: Raw records. Not modified.
        stats: Column statistics of the raw records.
        z_threshold: Outlier threshold in standard deviations.

    Returns:
        CleaningResult with the cleaned frame (row index = input row number),
        the audit log keyed ``"{row}-{column}"`` and the aggregate counts.

    Raises:
        ValueError: If z_threshold is not positive.
    """
    if not z_threshold > 0:
        raise ValueError(f"Invalid z_threshold {z_threshold!r}. Must be positive.")

    cleaned = df.reset_index(drop=True)
    events: dict[str, CleaningEvent] = {}

    for column, column_stats in stats.items():
        if column not in cleaned.columns:
            continue
        repaired: list[float] = []
        for row, value in enumerate(cleaned[column].tolist()):
            new_value, event = _repair_cell(value, row, column, column_stats, z_threshold)
            repaired.append(new_value)
            if event is not None:
                events[event.key] = event
        cleaned[column] = pd.Series(repaired, index=cleaned.index, dtype="float64")

    counts = Counter(event.type for event in events.values())
    summary = CleaningSummary(
        missing=counts["missing"],
        abnormal=counts["abnormal"],
        type_converted=counts["type"],
    )
    logger.debug(
        "Cleaned %d row(s): %d missing, %d abnormal, %d type conversions",
        len(cleaned),
        summary.missing,
        summary.abnormal,
        summary.type_converted,
    )
    return CleaningResult(df=cleaned, events=events, summary=summary)


def _is_finite_number(value: Any) -> bool:
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def parse_timestamps(series: pd.Series) -> pd.Series:
    """Parse timestamps to UTC datetimes; unparseable values become NaT."""
    return pd.to_datetime(series, errors="coerce", utc=True, format="mixed")


def finalize(df: pd.DataFrame) -> pd.DataFrame:
    """Drop unusable records and sort the rest chronologically.

    A record is dropped when its prediction is not a finite number, or when
    its actual is present but not a finite number. Records without an actual
    are kept. The sort is stable, so equal timestamps keep input order, and
    unparseable timestamps go last. Row index labels are preserved so audit
    keys still address the sorted rows.
    """
    if df.empty or PREDICTION not in df.columns:
        return df.iloc[0:0].copy()

    keep = np.array([_is_finite_number(v) for v in df[PREDICTION]], dtype=bool)
    if ACTUAL in df.columns:
        keep &= np.array(
            [is_absent(v) or _is_finite_number(v) for v in df[ACTUAL]], dtype=bool
        )

    kept = df[keep]
    if TIMESTAMP not in kept.columns or kept.empty:
        return kept.copy()

    timestamps = parse_timestamps(kept[TIMESTAMP]).reset_index(drop=True)
    order = timestamps.sort_values(kind="mergesort", na_position="last").index
    result = kept.iloc[np.asarray(order)].copy()

    logger.debug("Finalized %d of %d row(s)", len(result), len(df))
    return result
