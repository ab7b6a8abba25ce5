"""
Script to back up all configured Notion collections
"""

import argparse
import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, ingestion, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.exceptions import BackupException
from core.logging import log_error, setup_logging
from ingestion.extractors.notion_pager import NotionPager
from ingestion.loaders.backup_writer import BackupWriter
from ingestion.runner import BackupRunner
from ingestion.transformers.flattener import PropertyFlattener
from ingestion.transformers.projector import TableProjector

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Back up Notion databases to JSON and TSV files")
    parser.add_argument(
        "--from-raw",
        metavar="PATH",
        help="Rebuild the TSV backup from an existing raw JSON artifact instead of fetching"
    )
    parser.add_argument(
        "--name",
        help="Collection name used for the rebuilt TSV (required with --from-raw)"
    )
    args = parser.parse_args(argv)
    if args.from_raw and not args.name:
        parser.error("--name is required with --from-raw")
    return args


def build_runner() -> BackupRunner:
    """Wire the pipeline from settings"""
    pager = NotionPager(
        token=settings.NOTION_TOKEN,
        api_url=settings.NOTION_API_URL,
        notion_version=settings.NOTION_VERSION,
        page_size=settings.PAGE_SIZE,
        page_delay=settings.PAGE_DELAY_SECONDS,
        timeout=settings.REQUEST_TIMEOUT
    )
    projector = TableProjector(
        flattener=PropertyFlattener(empty_cell=settings.EMPTY_CELL),
        include_original_properties=settings.INCLUDE_ORIGINAL_PROPERTIES
    )
    writer = BackupWriter(settings.DATA_DIR, logs_dir=settings.LOGS_DIR)
    return BackupRunner(pager, writer, projector)


async def run_backup(argv=None) -> int:
    """Run the backup and return the process exit code"""
    args = parse_args(argv)

    # Replaying a local artifact needs no token or collection ids
    if not args.from_raw:
        try:
            settings.check_runnable()
        except BackupException as e:
            print(str(e), file=sys.stderr)
            return 1

    runner = build_runner()

    try:
        runner.writer.prepare_directories()
    except BackupException as e:
        print(str(e), file=sys.stderr)
        return 1

    log_path = runner.writer.log_path()
    setup_logging(log_path)

    if args.from_raw:
        try:
            path = runner.rebuild_table(args.name, args.from_raw)
        except BackupException as e:
            log_error(e, header=f"Rebuild {args.name}")
            print(f"Rebuild failed. See logs: {log_path}", file=sys.stderr)
            return 1
        print(f"Rebuilt {args.name}: {path}")
        return 0

    result = await runner.run(settings.collections())

    for name in result["succeeded"]:
        print(f"OK      {name}: {', '.join(result['artifacts'][name])}")
    for name, message in result["failed"].items():
        print(f"FAILED  {name}: {message}")

    if result["failed"]:
        print(f"Backup finished with failures. See logs: {result['log_path']}", file=sys.stderr)
        return 1

    print("Success!")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(run_backup()))
