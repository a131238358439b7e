"""Report generator that compiles pipeline results into a Markdown report."""

from __future__ import annotations

import math
import os
from pathlib import Path
from typing import Any, Iterable

from predclean.models import CleaningEvent, CorrelationWeight, PipelineResult

EVENT_LABELS = {
    "missing": "Missing value filled",
    "abnormal": "Outlier capped",
    "type": "Type converted",
}


def _format_value(value: Any) -> str:
    if value is None:
        return "(absent)"
    if isinstance(value, float):
        return "NaN" if math.isnan(value) else f"{value:.4g}"
    if isinstance(value, str):
        return f'"{value}"'
    return str(value)


def _format_summary_cards(result: PipelineResult) -> str:
    """Format the headline statistics as a Markdown list."""
    summary = result.get("dataset_summary")
    if summary is None:
        return "No summary available.\n"
    lines = [
        f"- **Mean prediction**: {summary.mean_prediction:.4f}",
        f"- **Mean actual**: {summary.mean_actual:.4f}",
        f"- **Prediction/actual correlation**: "
        f"{summary.prediction_actual_correlation:.4f}",
        "",
    ]
    return "\n".join(lines)


def _format_cleaning_badges(result: PipelineResult) -> str:
    summary = result.get("cleaning_summary")
    if summary is None:
        return "No cleaning performed.\n"
    lines = [
        f"- **Missing filled**: {summary.missing}",
        f"- **Outliers capped**: {summary.abnormal}",
        f"- **Types converted**: {summary.type_converted}",
        "",
    ]
    return "\n".join(lines)


def _format_influence(weights: list[CorrelationWeight]) -> str:
    """Format the influence ranking as a Markdown table."""
    if not weights:
        return "No feature columns to rank.\n"
    lines = ["| Rank | Feature | Weight |", "|------|---------|--------|"]
    for rank, w in enumerate(weights, 1):
        lines.append(f"| {rank} | {w.name} | {w.weight:.4f} |")
    lines.append("")
    lines.append(
        "_Weight is the absolute correlation with the prediction; "
        "it does not imply causation._\n"
    )
    return "\n".join(lines)


def _format_events(events: Iterable[CleaningEvent], limit: int) -> str:
    """Format the per-cell audit log as a Markdown table."""
    events = sorted(events, key=lambda e: (e.row, e.column))
    if not events:
        return "No cells were modified.\n"
    lines = [
        "| Cell | Action | Original | Processed |",
        "|------|--------|----------|-----------|",
    ]
    for event in events[:limit]:
        lines.append(
            f"| {event.key} | {EVENT_LABELS[event.type]} | "
            f"{_format_value(event.original)} | {_format_value(event.processed)} |"
        )
    if len(events) > limit:
        lines.append("")
        lines.append(f"_{len(events) - limit} more event(s) not shown._")
    lines.append("")
    return "\n".join(lines)


def generate_report(
    result: PipelineResult,
    output_dir: str,
    figure_paths: Iterable[str] = (),
    max_events: int = 200,
) -> str:
    """Generate a Markdown report and save to output_dir/report.md.

    Args:
        result: Output of ``run_pipeline``.
        output_dir: Directory to save the report.
        figure_paths: Paths to figures to embed.
        max_events: Maximum number of audit rows to list.

    Returns:
        The path to the saved report file.
    """
    os.makedirs(output_dir, exist_ok=True)

    sections: list[str] = []

    # Title
    sections.append("# Prediction Analysis Report\n")

    # Dataset Overview
    raw = result.get("raw_df")
    cleaned = result.get("cleaned_df")
    rows_in = 0 if raw is None else len(raw)
    rows_kept = 0 if cleaned is None else len(cleaned)
    sections.append("## Dataset Overview\n")
    sections.append(f"- **Source**: {result.get('source_info') or 'unknown'}")
    sections.append(f"- **Rows ingested**: {rows_in}")
    sections.append(f"- **Rows kept**: {rows_kept}")
    sections.append(f"- **Rows dropped**: {rows_in - rows_kept}\n")

    errors = result.get("errors") or []
    if errors:
        sections.append("### Errors\n")
        for err in errors:
            sections.append(f"- {err}")
        sections.append("")

    # Headline statistics
    sections.append("## Key Statistics\n")
    sections.append(_format_summary_cards(result))

    # Cleaning
    sections.append("## Automatic Cleaning\n")
    sections.append(_format_cleaning_badges(result))
    sections.append("### Cell Audit Log\n")
    sections.append(_format_events((result.get("events") or {}).values(), max_events))

    # Influence
    sections.append("## Influence Ranking\n")
    sections.append(_format_influence(result.get("influence") or []))

    # Figures
    figure_paths = list(figure_paths)
    if figure_paths:
        sections.append("## Figures\n")
        report_dir = Path(output_dir)
        for fig_path in figure_paths:
            fig = Path(fig_path)
            try:
                rel_path = fig.relative_to(report_dir)
            except ValueError:
                rel_path = fig
            fig_name = fig.stem.replace("_", " ").title()
            sections.append(f"![{fig_name}]({rel_path})\n")

    report_content = "\n".join(sections)
    report_path = os.path.join(output_dir, "report.md")
    with open(report_path, "w", encoding="utf-8") as f:
        f.write(report_content)

    return report_path
