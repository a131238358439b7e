"""CLI entry point for the prediction dataset cleaner."""

from __future__ import annotations

import argparse
import logging
import os
import sys

from predclean.config import DEFAULT_TOP_K, DEFAULT_Z_THRESHOLD


def _feature_list(value: str) -> list[str]:
    return [name.strip() for name in value.split(",") if name.strip()]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list (defaults to sys.argv[1:] when None).

    Returns:
        Parsed namespace with csv_file, output_dir, z_threshold, top_k,
        features, seed, no_fallback, no_plots and verbose.
    """
    parser = argparse.ArgumentParser(
        description="Prediction dataset cleaner: "
        "load a prediction/actual CSV, repair it cell by cell, rank feature "
        "influence, and write a Markdown report.",
    )
    parser.add_argument(
        "csv_file",
        nargs="?",
        default=None,
        help="Path to the CSV file to process (generated sample data when omitted).",
    )
    parser.add_argument(
        "--output-dir",
        default="output",
        help="Output directory for report and figures (default: output).",
    )
    parser.add_argument(
        "--z-threshold",
        type=float,
        default=DEFAULT_Z_THRESHOLD,
        help=f"Outlier threshold in standard deviations (default: {DEFAULT_Z_THRESHOLD}).",
    )
    parser.add_argument(
        "--top-k",
        type=int,
        default=DEFAULT_TOP_K,
        help=f"Number of features in the influence ranking (default: {DEFAULT_TOP_K}).",
    )
    parser.add_argument(
        "--features",
        type=_feature_list,
        default=None,
        help="Comma-separated feature columns to rank (default: all).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for the generated sample dataset.",
    )
    parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Do not substitute sample data when the input has no usable rows.",
    )
    parser.add_argument(
        "--no-plots",
        action="store_true",
        help="Skip rendering figures.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Run the cleaning pipeline and write the report.

    Args:
        argv: Optional argument list for testing; uses sys.argv when None.
    """
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Validate that the CSV file exists early, before heavy imports.
    if args.csv_file is not None and not os.path.isfile(args.csv_file):
        print(f"Error: file not found: {args.csv_file}", file=sys.stderr)
        sys.exit(1)

    try:
        from predclean.config import PipelineConfig
        from predclean.pipeline import run_pipeline
        from predclean.report_generator import generate_report

        config = PipelineConfig(
            z_threshold=args.z_threshold,
            top_k=args.top_k,
            candidate_columns=args.features,
            fallback_to_sample=not args.no_fallback,
            sample_seed=args.seed,
        )

        os.makedirs(args.output_dir, exist_ok=True)
        result = run_pipeline(args.csv_file, config=config)

        figure_paths: list[str] = []
        if not args.no_plots:
            from predclean.tools.plots import generate_plots

            figure_paths = generate_plots(
                result, os.path.join(args.output_dir, "figures")
            )

        report_path = generate_report(result, args.output_dir, figure_paths)
        print(f"Report saved to: {report_path}")

    except KeyboardInterrupt:
        print("\nAborted.", file=sys.stderr)
        sys.exit(130)
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
