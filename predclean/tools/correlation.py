"""Correlation, influence ranking and dataset summary.

The influence weight is the absolute Pearson correlation of a feature with
the target column. It is a ranking aid, not a causal estimate.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import Optional

import numpy as np
import pandas as pd

from predclean.config import DEFAULT_TARGET_COLUMN, DEFAULT_TOP_K
from predclean.models import (
    ACTUAL,
    PREDICTION,
    ROLE_COLUMNS,
    TIMESTAMP,
    CorrelationWeight,
    DatasetSummary,
)
from predclean.parsing import parse_number

logger = logging.getLogger(__name__)


def correlate(xs: Sequence[float], ys: Sequence[float]) -> float:
    """Pearson correlation over the first ``min(len(xs), len(ys))`` elements.

    Returns 0.0 when fewer than two pairs are available or either sequence is
    constant. A zero denominator is replaced by 1, which yields 0.0.
    """
    x = np.asarray(xs, dtype="float64")
    y = np.asarray(ys, dtype="float64")
    n = min(len(x), len(y))
    if n <= 1:
        return 0.0

    x, y = x[:n], y[:n]
    # The mean of a constant float sequence can be off by an ulp
    if (x == x[0]).all() or (y == y[0]).all():
        return 0.0

    # r is scale invariant; unit scaling keeps the dot products finite
    x = x / np.max(np.abs(x))
    y = y / np.max(np.abs(y))
    dx = x - x.mean()
    dy = y - y.mean()
    numerator = float(np.dot(dx, dy))
    denominator = math.sqrt(float(np.dot(dx, dx)) * float(np.dot(dy, dy))) or 1.0
    r = numerator / denominator
    if not math.isfinite(r):
        return 0.0
    return float(np.clip(r, -1.0, 1.0))


def numeric_column(series: pd.Series, default: float = 0.0) -> list[float]:
    """Parse a column to floats, substituting ``default`` for non-finite cells."""
    out = []
    for value in series:
        number = parse_number(value)
        out.append(default if number is None else number)
    return out


def rank_influence(
    df: pd.DataFrame,
    target_column: str = DEFAULT_TARGET_COLUMN,
    candidate_columns: Optional[Sequence[str]] = None,
    top_k: int = DEFAULT_TOP_K,
) -> list[CorrelationWeight]:
    """Rank feature columns by absolute correlation with the target column.

    Args:
        df: Cleaned, ordered records.
        target_column: Column to correlate against.
        candidate_columns: Columns to rank. None or an empty list ranks every
            column except timestamp, prediction and actual. Names not in
            ``df`` are ignored.
        top_k: Maximum number of entries returned.

    Returns:
        CorrelationWeight list sorted by descending weight (ties keep column
        order), at most ``top_k`` long.

    Raises:
        ValueError: If top_k is less than 1.
    """
    if top_k < 1:
        raise ValueError(f"Invalid top_k {top_k!r}. Must be at least 1.")
    if df.empty or target_column not in df.columns:
        return []

    if not candidate_columns:
        excluded = set(ROLE_COLUMNS) | {target_column}
        names = [c for c in df.columns if c not in excluded]
    else:
        excluded = {TIMESTAMP, target_column}
        names = []
        for name in candidate_columns:
            if name in df.columns and name not in excluded and name not in names:
                names.append(name)

    target = numeric_column(df[target_column])
    weights = []
    for name in names:
        weight = abs(correlate(numeric_column(df[name]), target))
        weights.append(CorrelationWeight(name=name, weight=weight if math.isfinite(weight) else 0.0))

    weights.sort(key=lambda w: w.weight, reverse=True)
    logger.debug("Ranked %d candidate column(s) against %r", len(weights), target_column)
    return weights[:top_k]


def summarize(df: pd.DataFrame) -> DatasetSummary:
    """Mean prediction, mean actual and their correlation.

    Rows without a usable actual fall back to their prediction. Empty input
    gives an all-zero summary.
    """
    if df.empty or PREDICTION not in df.columns:
        return DatasetSummary()

    predictions = numeric_column(df[PREDICTION])
    if ACTUAL in df.columns:
        actuals = []
        for value, prediction in zip(df[ACTUAL], predictions):
            number = parse_number(value)
            actuals.append(prediction if number is None else number)
    else:
        actuals = list(predictions)

    return DatasetSummary(
        mean_prediction=float(np.mean(predictions)),
        mean_actual=float(np.mean(actuals)),
        prediction_actual_correlation=correlate(predictions, actuals),
    )
