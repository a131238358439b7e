"""Column profiling: per-column statistics over the raw dataset."""

from __future__ import annotations

import logging

import pandas as pd

from predclean.models import TIMESTAMP, ColumnStats
from predclean.parsing import parse_number

logger = logging.getLogger(__name__)


def parsed_values(series: pd.Series) -> pd.Series:
    """Return the series parsed cell-by-cell to floats (NaN where unparseable)."""
    return pd.Series(
        [parse_number(v) for v in series], index=series.index, dtype="float64"
    )


def profile_columns(df: pd.DataFrame) -> dict[str, ColumnStats]:
    """Compute population mean and std of every numeric-eligible column.

    A column is eligible when at least one of its cells parses to a finite
    number; ``timestamp`` is never profiled. Statistics use only the valid
    values of the raw (uncleaned) data with denominator ``n``.

    Args:
        df: Raw records.

    Returns:
        Mapping of column name to ColumnStats, in column order.
    """
    stats: dict[str, ColumnStats] = {}
    for col in df.columns:
        if col == TIMESTAMP:
            continue
        valid = parsed_values(df[col]).dropna()
        if valid.empty:
            continue
        mean = float(valid.mean())
        # A single distinct value has no spread, whatever the rounding of mean
        std = float(valid.std(ddof=0)) if valid.nunique() > 1 else 0.0
        stats[col] = ColumnStats(mean=mean, std=std)

    logger.debug("Profiled %d numeric column(s): %s", len(stats), list(stats))
    return stats
