"""
Admin CLI for browsing and editing stored wines.

Usage:
    wine-admin list [--page N] [--limit N]
    wine-admin get --id <wine_id>
    wine-admin create --wine-type red --quality 6 [--alcohol 9.4 ...]
    wine-admin update --id <wine_id> [--quality 7 ...]
    wine-admin delete --id <wine_id>
    wine-admin avg-quality [--min-alcohol 12]
"""

import argparse
import asyncio
import json
import sys
from datetime import datetime

from pydantic import ValidationError

from winequality.config import ConfigurationError, DatabaseConfig
from winequality.core.models import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    MEASUREMENT_FIELDS,
    StoredWine,
    WinePatch,
    WineRecord,
)
from winequality.observability.logger import get_logger
from winequality.warehouse import DatabaseConnectionPool, StoredProcedureMissing, WineRepository

logger = get_logger(__name__)


def format_timestamp(ts: datetime | None) -> str:
    """Format timestamp for display."""
    return ts.strftime("%Y-%m-%d %H:%M:%S") if ts else "N/A"


def print_wine(wine: StoredWine) -> None:
    print(json.dumps(wine.model_dump(mode="json"), indent=2))


def wine_fields(args) -> dict:
    """Collect the wine attributes given on the command line."""
    fields = {"wine_type": args.wine_type, "quality": args.quality}
    for name in MEASUREMENT_FIELDS:
        fields[name] = getattr(args, name)
    return {k: v for k, v in fields.items() if v is not None}


async def list_command(repo: WineRepository, args) -> None:
    page = await repo.list_wines(page=args.page, limit=args.limit)
    p = page.pagination

    print(f"\n{'=' * 80}")
    print(f"WINES (page {p.current_page} of {p.total_pages}, {p.total_items} total)")
    print(f"{'=' * 80}\n")
    print(f"{'ID':>6}  {'Type':<6} {'Quality':>7} {'Alcohol':>8} {'pH':>6}  {'Updated'}")
    print(f"{'-' * 80}")
    for wine in page.data:
        alcohol = f"{wine.alcohol:.1f}" if wine.alcohol is not None else "-"
        ph = f"{wine.ph:.2f}" if wine.ph is not None else "-"
        print(
            f"{wine.id:>6}  {wine.wine_type:<6} {wine.quality:>7} {alcohol:>8} {ph:>6}  "
            f"{format_timestamp(wine.updated_at)}"
        )
    print()


async def get_command(repo: WineRepository, args) -> None:
    wine = await repo.get_wine(args.id)
    if wine is None:
        print(f"\nWine not found: {args.id}")
        sys.exit(1)
    print_wine(wine)


async def create_command(repo: WineRepository, args) -> None:
    record = WineRecord.model_validate(wine_fields(args))
    wine = await repo.create_wine(record)
    print(f"\nCreated wine {wine.id}")
    print_wine(wine)


async def update_command(repo: WineRepository, args) -> None:
    patch = WinePatch.model_validate(wine_fields(args))
    if patch.is_empty():
        print("\nNo fields provided for update.")
        sys.exit(1)

    wine = await repo.update_wine(args.id, patch)
    if wine is None:
        print(f"\nWine not found: {args.id}")
        sys.exit(1)
    print(f"\nUpdated wine {wine.id}")
    print_wine(wine)


async def delete_command(repo: WineRepository, args) -> None:
    if not await repo.delete_wine(args.id):
        print(f"\nWine not found: {args.id}")
        sys.exit(1)
    print(f"\nDeleted wine {args.id}")


async def avg_quality_command(repo: WineRepository, args) -> None:
    average = await repo.average_quality(min_alcohol=args.min_alcohol)
    shown = f"{average:.2f}" if average is not None else "N/A"
    print(f"\nAverage quality (alcohol >= {args.min_alcohol}): {shown}")


COMMANDS = {
    "list": list_command,
    "get": get_command,
    "create": create_command,
    "update": update_command,
    "delete": delete_command,
    "avg-quality": avg_quality_command,
}


async def run_command(args, config: DatabaseConfig) -> None:
    async with DatabaseConnectionPool(config) as pool:
        await COMMANDS[args.command](WineRepository(pool), args)


def add_wine_arguments(parser: argparse.ArgumentParser, wine_type_required: bool) -> None:
    parser.add_argument(
        "--wine-type",
        choices=["red", "white"],
        required=wine_type_required,
        help="Wine type"
    )
    parser.add_argument(
        "--quality",
        type=int,
        required=wine_type_required,
        help="Quality score (0-10)"
    )
    for name in MEASUREMENT_FIELDS:
        parser.add_argument(
            f"--{name.replace('_', '-')}",
            dest=name,
            type=float,
            default=None,
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wine-admin",
        description="Browse and edit the wines table",
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="dotenv file with DB_* settings"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    list_parser = subparsers.add_parser("list", help="List wines page by page")
    list_parser.add_argument(
        "--page",
        type=int,
        default=DEFAULT_PAGE,
        help=f"Page number (default: {DEFAULT_PAGE})"
    )
    list_parser.add_argument(
        "--limit",
        type=int,
        default=DEFAULT_LIMIT,
        help=f"Wines per page (default: {DEFAULT_LIMIT})"
    )

    get_parser = subparsers.add_parser("get", help="Show one wine")
    get_parser.add_argument("--id", type=int, required=True, help="Wine ID")

    create_parser = subparsers.add_parser("create", help="Create a wine")
    add_wine_arguments(create_parser, wine_type_required=True)

    update_parser = subparsers.add_parser("update", help="Update fields of a wine")
    update_parser.add_argument("--id", type=int, required=True, help="Wine ID")
    add_wine_arguments(update_parser, wine_type_required=False)

    delete_parser = subparsers.add_parser("delete", help="Delete a wine")
    delete_parser.add_argument("--id", type=int, required=True, help="Wine ID")

    avg_parser = subparsers.add_parser(
        "avg-quality", help="Average quality of wines above an alcohol level"
    )
    avg_parser.add_argument(
        "--min-alcohol",
        type=float,
        default=0.0,
        help="Minimum alcohol level (default: 0)"
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        config = DatabaseConfig.from_env(env_file=args.env_file)
        asyncio.run(run_command(args, config))

    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)

    except (ConfigurationError, ValidationError, ValueError) as e:
        print(f"\nError: {e}")
        sys.exit(1)

    except StoredProcedureMissing as e:
        logger.error(str(e))
        print(f"\nError: {e}")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Error running {args.command}: {e}", exc_info=True)
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
