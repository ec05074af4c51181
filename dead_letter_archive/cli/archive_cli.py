"""
Command-line interface for the dead letter archive.

Usage:
    python -m dead_letter_archive.cli.archive_cli archive --input <event.json> [options]
    python -m dead_letter_archive.cli.archive_cli migrate [--limit N] [options]
"""

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from dead_letter_archive.archive.migration import DeadLetterArchiveMigrator
from dead_letter_archive.config.settings import ArchiveConfig
from dead_letter_archive.core.exceptions import ConfigurationError, DeadLetterArchiveError
from dead_letter_archive.handler import archive_event, build_writer
from dead_letter_archive.observability import metrics
from dead_letter_archive.observability.logger import get_logger

logger = get_logger(__name__)


def load_config(args) -> ArchiveConfig:
    """
    Build the archive config from a YAML file or the environment, with
    command-line overrides applied on top.
    """
    if args.config:
        return ArchiveConfig.from_yaml(
            args.config, system_bucket=args.bucket, stack_name=args.stack_name
        )

    environ = dict(os.environ)
    if args.bucket:
        environ["system_bucket"] = args.bucket
    if args.stack_name:
        environ["stackName"] = args.stack_name
    return ArchiveConfig.from_env(environ)


def archive_command(args) -> int:
    """
    Archive the records of a saved SQS event file.

    Args:
        args: Command-line arguments

    Returns:
        Process exit code
    """
    input_path = Path(args.input)
    if not input_path.exists():
        logger.error(f"Input file not found: {args.input}")
        return 1

    with open(input_path) as f:
        event = json.load(f)
    if isinstance(event, list):
        event = {"Records": event}

    config = load_config(args)
    keys = asyncio.run(archive_event(event, config, writer=build_writer(config)))

    logger.info("=" * 60)
    logger.info("ARCHIVE COMPLETE")
    logger.info("=" * 60)
    logger.info(f"Records archived: {len(keys)}")
    for key in keys:
        logger.info(f"  s3://{config.system_bucket}/{key}")
    return 0


def migrate_command(args) -> int:
    """
    Move legacy archive objects into the date-partitioned layout.

    Returns:
        0 when every object migrated, 1 otherwise
    """
    config = load_config(args)
    writer = build_writer(config)
    migrator = DeadLetterArchiveMigrator(writer, writer.store)
    result = asyncio.run(migrator.migrate(limit=args.limit))

    summary = result.summary()
    logger.info("=" * 60)
    logger.info("MIGRATION COMPLETE")
    logger.info("=" * 60)
    logger.info(f"Migrated: {summary['migrated']}")
    logger.info(f"Failed: {summary['failed']}")
    logger.info(f"Skipped: {summary['skipped']}")
    return 1 if result.failed else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Dead letter archive tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Archive a saved SQS event
  python -m dead_letter_archive.cli.archive_cli archive --input event.json \\
      --bucket my-internal --stack-name my-stack

  # Migrate legacy archive objects, 100 at most
  python -m dead_letter_archive.cli.archive_cli migrate --config config/archive.yaml --limit 100
        """
    )
    parser.add_argument("--env-file", default=".env", help="dotenv file to load (default: .env)")
    parser.add_argument("--config", help="Path to archive YAML configuration")
    parser.add_argument("--bucket", help="System bucket (overrides system_bucket)")
    parser.add_argument("--stack-name", help="Stack name (overrides stackName)")
    parser.add_argument(
        "--metrics-file", help="Write Prometheus metrics to this file when the command finishes"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    archive_parser = subparsers.add_parser("archive", help="Archive records from an SQS event file")
    archive_parser.add_argument("--input", required=True, help="Path to the SQS event JSON file")

    migrate_parser = subparsers.add_parser("migrate", help="Migrate legacy archive objects")
    migrate_parser.add_argument("--limit", type=int, help="Maximum number of objects to migrate")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    load_dotenv(args.env_file)

    commands = {"archive": archive_command, "migrate": migrate_command}
    try:
        return commands[args.command](args)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2
    except DeadLetterArchiveError as e:
        logger.error(f"Error during {args.command}: {e}", exc_info=True)
        return 1
    except Exception as e:
        logger.error(f"Unexpected error during {args.command}: {e}", exc_info=True)
        return 1
    finally:
        if args.metrics_file:
            Path(args.metrics_file).write_bytes(metrics.generate_metrics())


if __name__ == "__main__":
    sys.exit(main())
