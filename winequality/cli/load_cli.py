"""
Command-line interface for the full wine data reload.

Usage:
    wine-load [--red <path>] [--white <path>] [options]
    python -m winequality.cli.load_cli [options]
"""

import argparse
import asyncio
import sys
from pathlib import Path

from winequality.config import ConfigurationError, DatabaseConfig
from winequality.core.rules import load_rule_engine
from winequality.ingest import WineLoadPipeline
from winequality.observability import metrics
from winequality.observability.logger import get_logger, setup_logger
from winequality.warehouse import DatabaseConnectionPool, WineStore

logger = get_logger(__name__)

DEFAULT_RED_FILE = "data/winequality-red.csv"
DEFAULT_WHITE_FILE = "data/winequality-white.csv"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wine-load",
        description="Replace the wines table with the contents of the red and white CSV files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Load the default data files using settings from .env
  wine-load --env-file .env

  # Load other files with a 30 second read timeout per file
  wine-load --red data/red.csv --white data/white.csv --read-timeout 30

  # Custom validation rules, human-readable logs
  wine-load --validation-rules config/validation_rules.yaml --log-format text
        """
    )
    parser.add_argument(
        "--red",
        default=DEFAULT_RED_FILE,
        help=f"Path to the red wine CSV file (default: {DEFAULT_RED_FILE})"
    )
    parser.add_argument(
        "--white",
        default=DEFAULT_WHITE_FILE,
        help=f"Path to the white wine CSV file (default: {DEFAULT_WHITE_FILE})"
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="dotenv file with DB_* settings (environment variables take precedence)"
    )
    parser.add_argument(
        "--validation-rules",
        default=None,
        help="Path to validation rules YAML file (default: built-in quality rules)"
    )
    parser.add_argument(
        "--read-timeout",
        type=float,
        default=None,
        help="Per-file read timeout in seconds (default: no timeout)"
    )
    parser.add_argument(
        "--progress-interval",
        type=int,
        default=1000,
        help="Log insert progress every N records (default: 1000)"
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "text"],
        default=None,
        help="Log format (default: LOG_FORMAT env var, then json)"
    )
    parser.add_argument(
        "--metrics-file",
        default=None,
        help="Write Prometheus metrics to this file when the run ends"
    )
    return parser


async def run_load(args, config: DatabaseConfig) -> bool:
    """
    Run one reload.

    Returns:
        True if the records were committed
    """
    rule_engine = load_rule_engine(args.validation_rules)
    logger.info("Validation rules loaded", extra=rule_engine.get_rule_summary())

    pipeline = WineLoadPipeline(
        pool=DatabaseConnectionPool(config),
        red_path=args.red,
        white_path=args.white,
        rule_engine=rule_engine,
        progress_interval=args.progress_interval,
        read_timeout=args.read_timeout,
        store_factory=WineStore,
    )
    result = await pipeline.run()

    logger.info("=" * 60)
    logger.info("LOAD COMPLETE" if result.status == "committed" else "LOAD ABORTED")
    logger.info("=" * 60)
    for wine_type, count in result.accepted_by_type.items():
        logger.info(f"Accepted {wine_type} records: {count}")
    logger.info(f"Accepted records: {result.accepted}")
    logger.info(f"Records inserted: {result.inserted}")
    logger.info(f"Duration: {result.duration_seconds:.2f}s")
    logger.info("=" * 60)

    return result.status == "committed"


def export_metrics(path: str) -> None:
    """Write the metrics file; a failure is logged and never changes the exit status."""
    try:
        metrics.write_metrics(path)
    except OSError as e:
        logger.error(f"Could not write metrics file {path}: {e}")


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    setup_logger(format_type=args.log_format)

    for path in (args.red, args.white):
        if not Path(path).exists():
            logger.error(f"Input file not found: {path}")
            sys.exit(1)

    try:
        config = DatabaseConfig.from_env(env_file=args.env_file)
    except ConfigurationError as e:
        logger.error(f"Invalid database configuration: {e}")
        sys.exit(1)

    logger.info(f"Loading wine data into {config.describe()}")

    try:
        committed = asyncio.run(run_load(args, config))
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Error during wine data load: {e}", exc_info=True)
        sys.exit(1)
    finally:
        if args.metrics_file:
            export_metrics(args.metrics_file)

    if not committed:
        sys.exit(1)


if __name__ == "__main__":
    main()
