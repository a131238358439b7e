"""Tests for the CLI entry point (predclean/main.py)."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from predclean.main import main, parse_args


# ---------------------------------------------------------------------------
# parse_args tests
# ---------------------------------------------------------------------------


class TestParseArgs:
    """Unit tests for CLI argument parsing."""

    def test_positional_csv_file(self):
        args = parse_args(["data.csv"])
        assert args.csv_file == "data.csv"

    def test_csv_file_optional(self):
        assert parse_args([]).csv_file is None

    def test_defaults(self):
        args = parse_args(["data.csv"])
        assert args.output_dir == "output"
        assert args.z_threshold == 3.0
        assert args.top_k == 8
        assert args.features is None
        assert args.seed is None
        assert not args.no_fallback
        assert not args.no_plots
        assert not args.verbose

    def test_features_flag(self):
        args = parse_args(["data.csv", "--features", "temp, load,,humidity"])
        assert args.features == ["temp", "load", "humidity"]

    def test_all_flags_combined(self):
        args = parse_args([
            "input.csv",
            "--output-dir", "results",
            "--z-threshold", "2.5",
            "--top-k", "3",
            "--seed", "7",
            "--no-fallback",
            "--no-plots",
            "-v",
        ])
        assert args.csv_file == "input.csv"
        assert args.output_dir == "results"
        assert args.z_threshold == 2.5
        assert args.top_k == 3
        assert args.seed == 7
        assert args.no_fallback
        assert args.no_plots
        assert args.verbose

    def test_non_numeric_threshold_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["data.csv", "--z-threshold", "high"])


# ---------------------------------------------------------------------------
# main() tests
# ---------------------------------------------------------------------------


class TestMain:
    """Unit tests for the main() entry point."""

    def test_nonexistent_file_exits(self):
        """main() should exit with code 1 when the CSV file doesn't exist."""
        with pytest.raises(SystemExit) as exc_info:
            main(["nonexistent_file_abc123.csv"])
        assert exc_info.value.code == 1

    def test_successful_run(self, tmp_path, capsys):
        """main() should write the report and print its path."""
        csv_file = tmp_path / "test.csv"
        csv_file.write_text(
            "time,pred,actual,temp\n"
            "2024-01-02,12,11,20\n"
            "2024-01-01,,10,18\n"
            "2024-01-03,13,14,22\n"
        )
        output_dir = tmp_path / "output"

        main([str(csv_file), "--output-dir", str(output_dir), "--no-plots"])

        report = output_dir / "report.md"
        assert report.is_file()
        assert f"Report saved to: {report}" in capsys.readouterr().out
        content = report.read_text(encoding="utf-8")
        assert "# Prediction Analysis Report" in content
        assert "1-prediction" in content

    def test_sample_data_without_file(self, tmp_path):
        output_dir = tmp_path / "output"
        main(["--output-dir", str(output_dir), "--no-plots", "--seed", "1"])
        content = (output_dir / "report.md").read_text(encoding="utf-8")
        assert "generated sample dataset" in content

    def test_figures_written(self, tmp_path):
        output_dir = tmp_path / "output"
        main(["--output-dir", str(output_dir), "--seed", "1"])
        assert (output_dir / "figures" / "timeseries.png").is_file()
        assert (output_dir / "figures" / "influence.png").is_file()
        assert "figures/timeseries.png" in (output_dir / "report.md").read_text()

    def test_config_passed_to_pipeline(self, tmp_path):
        csv_file = tmp_path / "test.csv"
        csv_file.write_text("time,pred\n2024-01-01,1\n")

        with patch("predclean.pipeline.run_pipeline", side_effect=RuntimeError("stop")) as mock_run:
            with pytest.raises(SystemExit):
                main([
                    str(csv_file),
                    "--output-dir", str(tmp_path / "out"),
                    "--z-threshold", "2",
                    "--top-k", "4",
                    "--features", "a,b",
                    "--no-fallback",
                ])

        config = mock_run.call_args.kwargs["config"]
        assert config.z_threshold == 2.0
        assert config.top_k == 4
        assert config.candidate_columns == ["a", "b"]
        assert config.fallback_to_sample is False

    def test_empty_features_flag_ranks_all(self, tmp_path):
        output_dir = tmp_path / "output"
        main(["--output-dir", str(output_dir), "--no-plots", "--seed", "1", "--features", ""])
        content = (output_dir / "report.md").read_text(encoding="utf-8")
        for name in ("featureA", "featureB", "featureC"):
            assert f"| {name} |" in content

    def test_invalid_threshold_exits(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--output-dir", str(tmp_path / "out"), "--z-threshold", "0"])
        assert exc_info.value.code == 1
        assert "z_threshold" in capsys.readouterr().err

    def test_exception_in_pipeline_exits(self, tmp_path):
        """main() should catch unexpected exceptions and exit with code 1."""
        with patch("predclean.pipeline.run_pipeline", side_effect=RuntimeError("boom")):
            with pytest.raises(SystemExit) as exc_info:
                main(["--output-dir", str(tmp_path / "out")])
            assert exc_info.value.code == 1

    def test_keyboard_interrupt_exits_130(self, tmp_path):
        with patch("predclean.pipeline.run_pipeline", side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as exc_info:
                main(["--output-dir", str(tmp_path / "out")])
            assert exc_info.value.code == 130
