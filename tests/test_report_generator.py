"""Unit tests for the report generator module."""

from __future__ import annotations

import os
import tempfile

import pandas as pd
import pytest

from predclean.models import (
    CleaningEvent,
    CleaningSummary,
    CorrelationWeight,
    DatasetSummary,
)
from predclean.report_generator import generate_report


@pytest.fixture
def sample_result() -> dict:
    events = [
        CleaningEvent("missing", 1, "prediction", "", 12.0),
        CleaningEvent("type", 0, "prediction", "12", 12.0),
        CleaningEvent("abnormal", 3, "actual", 1000.0, 42.5),
    ]
    return {
        "source_info": "Loaded from data.csv",
        "raw_df": pd.DataFrame({"prediction": [1, 2, 3, 4, 5]}),
        "cleaned_df": pd.DataFrame({"prediction": [1, 2, 3, 4]}),
        "events": {e.key: e for e in events},
        "cleaning_summary": CleaningSummary(missing=1, abnormal=1, type_converted=1),
        "influence": [CorrelationWeight("temp", 0.91), CorrelationWeight("load", 0.12)],
        "dataset_summary": DatasetSummary(12.25, 11.5, 0.8765),
        "errors": [],
    }


class TestGenerateReport:
    """Tests for the generate_report function."""

    def test_returns_report_path(self, sample_result):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = generate_report(sample_result, tmpdir)
            assert path == os.path.join(tmpdir, "report.md")
            assert os.path.isfile(path)

    def test_report_sections(self, sample_result, tmp_path):
        content = open(generate_report(sample_result, str(tmp_path)), encoding="utf-8").read()
        assert content.startswith("# Prediction Analysis Report")
        for heading in (
            "## Dataset Overview",
            "## Key Statistics",
            "## Automatic Cleaning",
            "### Cell Audit Log",
            "## Influence Ranking",
        ):
            assert heading in content
        assert "## Figures" not in content
        assert "### Errors" not in content

    def test_overview_counts(self, sample_result, tmp_path):
        content = open(generate_report(sample_result, str(tmp_path)), encoding="utf-8").read()
        assert "**Source**: Loaded from data.csv" in content
        assert "**Rows ingested**: 5" in content
        assert "**Rows kept**: 4" in content
        assert "**Rows dropped**: 1" in content

    def test_statistics_and_badges(self, sample_result, tmp_path):
        content = open(generate_report(sample_result, str(tmp_path)), encoding="utf-8").read()
        assert "**Mean prediction**: 12.2500" in content
        assert "**Prediction/actual correlation**: 0.8765" in content
        assert "**Missing filled**: 1" in content
        assert "**Outliers capped**: 1" in content
        assert "**Types converted**: 1" in content

    def test_audit_log_sorted_by_cell(self, sample_result, tmp_path):
        content = open(generate_report(sample_result, str(tmp_path)), encoding="utf-8").read()
        assert '| 0-prediction | Type converted | "12" | 12 |' in content
        assert '| 1-prediction | Missing value filled | "" | 12 |' in content
        assert "| 3-actual | Outlier capped | 1000 | 42.5 |" in content
        assert content.index("0-prediction") < content.index("1-prediction") < content.index("3-actual")

    def test_audit_log_truncated(self, sample_result, tmp_path):
        content = open(
            generate_report(sample_result, str(tmp_path), max_events=1), encoding="utf-8"
        ).read()
        assert "2 more event(s) not shown" in content
        assert "3-actual" not in content

    def test_influence_table(self, sample_result, tmp_path):
        content = open(generate_report(sample_result, str(tmp_path)), encoding="utf-8").read()
        assert "| 1 | temp | 0.9100 |" in content
        assert "| 2 | load | 0.1200 |" in content
        assert "does not imply causation" in content

    def test_errors_listed(self, sample_result, tmp_path):
        sample_result["errors"] = ["CSV load error: File not found: x.csv"]
        content = open(generate_report(sample_result, str(tmp_path)), encoding="utf-8").read()
        assert "### Errors" in content
        assert "- CSV load error: File not found: x.csv" in content

    def test_figures_use_relative_paths(self, sample_result, tmp_path):
        fig = tmp_path / "figures" / "influence.png"
        content = open(
            generate_report(sample_result, str(tmp_path), figure_paths=[str(fig)]),
            encoding="utf-8",
        ).read()
        assert "## Figures" in content
        assert "![Influence](figures/influence.png)" in content

    def test_empty_result(self, tmp_path):
        content = open(generate_report({}, str(tmp_path)), encoding="utf-8").read()
        assert "**Source**: unknown" in content
        assert "**Rows ingested**: 0" in content
        assert "No cells were modified." in content
        assert "No feature columns to rank." in content

    def test_creates_output_dir(self, sample_result, tmp_path):
        out = tmp_path / "nested" / "dir"
        generate_report(sample_result, str(out))
        assert (out / "report.md").is_file()
