"""Pipeline runner: ingest, profile, clean, finalize, rank and summarize.

Each stage function accepts the PipelineResult state (and the config) and
returns the updated state. Data problems never raise: unreadable sources are
recorded in ``state["errors"]`` and, when configured, replaced by the
generated sample dataset.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

import pandas as pd

from predclean.config import PipelineConfig
from predclean.csv_loader import ingest_records, ingest_text, load_csv
from predclean.models import CleaningSummary, DatasetSummary, PipelineResult
from predclean.sample_data import generate_sample_data
from predclean.tools.cleaning import clean, finalize
from predclean.tools.correlation import rank_influence, summarize
from predclean.tools.profiling import profile_columns

logger = logging.getLogger(__name__)

Source = Union[str, "os.PathLike[str]", pd.DataFrame, Iterable[Mapping[str, Any]], None]


def _append_error(state: PipelineResult, error_msg: str) -> None:
    """Append an error message to state."""
    if "errors" not in state or state["errors"] is None:
        state["errors"] = []
    state["errors"].append(error_msg)


def _use_sample(state: PipelineResult, config: PipelineConfig, reason: str) -> None:
    df = generate_sample_data(n_rows=config.sample_rows, seed=config.sample_seed)
    state["raw_df"] = ingest_records(df)
    state["source_info"] = f"{reason}; using generated sample dataset ({len(df)} rows)"


# ---------------------------------------------------------------------------
# Stage: load
# ---------------------------------------------------------------------------


def load_stage(
    state: PipelineResult,
    config: PipelineConfig,
    source: Source = None,
    text: Optional[str] = None,
) -> PipelineResult:
    """Ingest the input into ``raw_df`` and describe where it came from."""
    if text is not None:
        state["raw_df"] = ingest_text(text, delimiter=config.delimiter)
        state["source_info"] = "Loaded from delimited text"
    elif source is None:
        _use_sample(state, config, "No input provided")
        return state
    elif isinstance(source, (str, os.PathLike)):
        path = os.fspath(source)
        result = load_csv(path)
        if result["error"]:
            _append_error(state, f"CSV load error: {result['error']}")
            if config.fallback_to_sample:
                logger.warning("Could not load %s (%s)", path, result["error"])
                _use_sample(state, config, f"Could not load {path}")
                return state
            state["raw_df"] = ingest_text("")
            state["source_info"] = f"Could not load {path}"
            return state
        state["raw_df"] = result["df"]
        state["source_info"] = f"Loaded from {path}"
    else:
        state["raw_df"] = ingest_records(source)
        state["source_info"] = "Loaded from in-memory records"

    if state["raw_df"].empty and config.fallback_to_sample:
        logger.warning("Input yielded no rows; falling back to sample data")
        _use_sample(state, config, "Input contained no data rows")
    return state


# ---------------------------------------------------------------------------
# Stage: clean
# ---------------------------------------------------------------------------


def clean_stage(state: PipelineResult, config: PipelineConfig) -> PipelineResult:
    """Profile the raw records, repair every cell and order the result."""
    raw = state["raw_df"]
    stats = profile_columns(raw)
    result = clean(raw, stats, z_threshold=config.z_threshold)

    state["stats"] = stats
    state["events"] = result.events
    state["cleaning_summary"] = result.summary
    state["cleaned_df"] = finalize(result.df)
    return state


# ---------------------------------------------------------------------------
# Stage: analyze
# ---------------------------------------------------------------------------


def analyze_stage(state: PipelineResult, config: PipelineConfig) -> PipelineResult:
    """Rank feature influence and compute the headline summary."""
    cleaned = state["cleaned_df"]
    state["influence"] = rank_influence(
        cleaned,
        target_column=config.target_column,
        candidate_columns=config.candidate_columns,
        top_k=config.top_k,
    )
    state["dataset_summary"] = summarize(cleaned)
    return state


def run_pipeline(
    source: Source = None,
    config: Optional[PipelineConfig] = None,
    text: Optional[str] = None,
) -> PipelineResult:
    """Run the full pipeline on a file path, records, a DataFrame or text.

    Args:
        source: CSV file path, DataFrame or iterable of record mappings.
            ``None`` with no ``text`` uses the generated sample dataset.
        config: Pipeline parameters; defaults to ``PipelineConfig()``.
        text: Raw delimited text, used instead of ``source`` when given.

    Returns:
        PipelineResult with every stage's output.
    """
    config = config or PipelineConfig()
    state: PipelineResult = {
        "source_info": "",
        "errors": [],
        "stats": {},
        "events": {},
        "cleaning_summary": CleaningSummary(),
        "influence": [],
        "dataset_summary": DatasetSummary(),
    }

    state = load_stage(state, config, source=source, text=text)
    state = clean_stage(state, config)
    state = analyze_stage(state, config)

    logger.info(
        "Pipeline finished: %d raw row(s), %d kept, %d cleaning event(s)",
        len(state["raw_df"]),
        len(state["cleaned_df"]),
        len(state["events"]),
    )
    return state
