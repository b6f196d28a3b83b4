"""CLI entrypoint for the contact datasets pipeline."""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

from config import load_settings
from errors import ConfigError, PipelineError
from pipeline import PipelineRunner


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Build the public contact datasets from Brevo")
    parser.add_argument("--output", default=None, help="Artifact path (overrides OUTPUT_PATH)")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch and aggregate, log the summary, write nothing",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Initialize config and execute the pipeline."""
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(message)s")

    try:
        settings = load_settings(output_path=args.output)
    except ConfigError as exc:
        logging.error("Configuration error: %s", exc)
        sys.exit(1)

    try:
        document = PipelineRunner(settings).run(dry_run=args.dry_run)
    except PipelineError as exc:
        logging.error("Run failed: %s", exc)
        sys.exit(1)

    logging.info("Run complete. contacts=%s generated_at=%s", document.total_contacts, document.generated_at)


if __name__ == "__main__":
    main()
