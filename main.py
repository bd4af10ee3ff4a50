"""CLI entrypoint for the projection vs. reception report pipeline."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from dotenv import load_dotenv

from config import load_config
from pipeline import format_error_summary, run_pipeline


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(
        description="Compare weekly harvest projections against orchard receptions and publish an Excel report",
    )
    parser.add_argument("--source", type=Path, default=None, help="Projection CSV to read (overrides SOURCE_CSV_PATH)")
    parser.add_argument("--output", type=Path, default=None, help="Where to write the .xlsx report (overrides REPORT_OUTPUT_PATH)")
    parser.add_argument(
        "--no-upload",
        action="store_true",
        help="Write the report locally without uploading it to S3",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging verbosity; DEBUG also lists every dropped row",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Load config, run the pipeline and log the error summary."""
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s %(levelname)s %(message)s")

    overrides: dict[str, object] = {}
    if args.source is not None:
        overrides["source_path"] = args.source
    if args.output is not None:
        overrides["report_path"] = args.output
    if args.no_upload:
        overrides["upload"] = False

    config = load_config(**overrides)
    result = run_pipeline(config)

    summary = format_error_summary(result.errors)
    if result.errors:
        logging.warning(summary)
    else:
        logging.info(summary)


if __name__ == "__main__":
    main()
