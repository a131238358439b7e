"""Figures for the report: prediction/actual series and influence ranking."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend for headless rendering

import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402
import seaborn as sns  # noqa: E402

from predclean.models import (  # noqa: E402
    ACTUAL,
    PREDICTION,
    TIMESTAMP,
    CorrelationWeight,
    PipelineResult,
)
from predclean.tools.cleaning import parse_timestamps  # noqa: E402
from predclean.tools.correlation import numeric_column  # noqa: E402

logger = logging.getLogger(__name__)


def plot_timeseries(df: pd.DataFrame, path: str) -> str:
    """Line chart of prediction (and actual, when present) over time."""
    fig, ax = plt.subplots(figsize=(10, 4))
    try:
        x = parse_timestamps(df[TIMESTAMP]) if TIMESTAMP in df.columns else None
        if x is None or x.isna().any():
            x = pd.Series(range(len(df)), index=df.index)
        else:
            x = x.dt.tz_convert(None)
        if ACTUAL in df.columns:
            ax.plot(x, numeric_column(df[ACTUAL]), label="actual", color="#60a5fa")
        ax.plot(x, numeric_column(df[PREDICTION]), label="prediction", color="#f59e0b")
        ax.set_title("Prediction vs Actual")
        ax.set_xlabel(TIMESTAMP)
        ax.legend()
        fig.autofmt_xdate()
        fig.savefig(path, bbox_inches="tight")
    finally:
        plt.close(fig)
    return path


def plot_influence(weights: list[CorrelationWeight], path: str) -> str:
    """Horizontal bar chart of influence weights, strongest first."""
    fig, ax = plt.subplots(figsize=(6, max(3, 0.5 * len(weights) + 1)))
    try:
        sns.barplot(
            x=[w.weight for w in weights],
            y=[w.name for w in weights],
            orient="h",
            color="#6366f1",
            ax=ax,
        )
        ax.set_xlim(0, 1)
        ax.set_title("Influence Weight (|correlation| with prediction)")
        ax.set_xlabel("weight")
        fig.savefig(path, bbox_inches="tight")
    finally:
        plt.close(fig)
    return path


def generate_plots(result: PipelineResult, output_dir: str) -> list[str]:
    """Render the report figures into *output_dir*.

    Plots generated:
    - ``timeseries.png`` when the cleaned dataset has rows
    - ``influence.png`` when the influence ranking is non-empty

    A figure that fails to render is logged and skipped.

    Returns:
        List of file paths for all saved figures.
    """
    Path(output_dir).mkdir(parents=True, exist_ok=True)
    saved_paths: list[str] = []

    cleaned = result.get("cleaned_df")
    if cleaned is not None and not cleaned.empty:
        try:
            saved_paths.append(
                plot_timeseries(cleaned, os.path.join(output_dir, "timeseries.png"))
            )
        except (ValueError, TypeError) as exc:
            logger.warning("Skipping time-series plot: %s", exc)

    weights = result.get("influence") or []
    if weights:
        try:
            saved_paths.append(
                plot_influence(weights, os.path.join(output_dir, "influence.png"))
            )
        except (ValueError, TypeError) as exc:
            logger.warning("Skipping influence plot: %s", exc)

    return saved_paths
