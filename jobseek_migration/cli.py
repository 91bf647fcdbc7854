"""Command-line interface for anonymous data migration."""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from .config import Settings
from .models.migration import MigrationProgress
from .orchestrator import build_executor
from .status import StatusTracker
from .collector import MigrationCollector
from .storage.file_store import FileStore

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None):
    """Main entry point for the CLI."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--store", help="Path to the local anonymous store file")
    common.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    parser = argparse.ArgumentParser(
        description="JobSeek migration tool - move anonymous session data to a user account"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("status", parents=[common], help="Show migration status")
    subparsers.add_parser("preview", parents=[common], help="Preview what would be migrated")

    migrate_parser = subparsers.add_parser("migrate", parents=[common], help="Run a migration")
    migrate_parser.add_argument("--user-id", required=True, help="Authenticated user id")
    target = migrate_parser.add_mutually_exclusive_group()
    target.add_argument("--api-url", help="Migrate endpoint URL")
    target.add_argument("--table", help="Write directly to this DynamoDB table")
    target.add_argument("--memory", action="store_true", help="Write to an in-memory store (dry run)")
    migrate_parser.add_argument("--token", help="Bearer token for the migrate endpoint")

    subparsers.add_parser("skip", parents=[common], help="Decline migration for this session")
    subparsers.add_parser("reset", parents=[common], help="Forget the stored migration status")
    subparsers.add_parser("last-result", parents=[common], help="Show the last successful migration result")

    serve_parser = subparsers.add_parser("serve", parents=[common], help="Run the migration API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")

    args = parser.parse_args(argv)

    # Set up logging
    log_level = logging.DEBUG if getattr(args, "verbose", False) else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    if not args.command:
        parser.print_help()
        return

    settings = Settings.from_env()
    if args.store:
        settings.store_path = args.store

    if args.command == "status":
        show_status(settings)
    elif args.command == "preview":
        show_preview(settings)
    elif args.command == "migrate":
        run_migration(args, settings)
    elif args.command == "skip":
        StatusTracker(FileStore(settings.store_path)).skip()
        print("Migration skipped")
    elif args.command == "reset":
        StatusTracker(FileStore(settings.store_path)).reset()
        print("Migration status reset")
    elif args.command == "last-result":
        show_last_result(settings)
    elif args.command == "serve":
        run_server(args)


def show_status(settings: Settings):
    """Print the status and whether the user should be prompted."""
    tracker = StatusTracker(FileStore(settings.store_path))
    print(f"Status: {tracker.get_status().value}")
    print(f"Has anonymous data: {tracker.collector.has_anonymous_data()}")
    print(f"Should prompt: {tracker.should_prompt()}")


def show_preview(settings: Settings):
    """Print counts and size of what would be migrated."""
    collector = MigrationCollector(FileStore(settings.store_path))
    preview = collector.preview()
    print(json.dumps(preview.to_dict(), indent=2))

    for warning in collector.warnings:
        print(f"Warning: {warning}", file=sys.stderr)


def print_progress(progress: MigrationProgress):
    print(
        f"  [{progress.percentage:3d}%] {progress.current_type} "
        f"({progress.processed_items}/{progress.total_items})"
    )


def run_migration(args, settings: Settings):
    """Run a migration for the session in the store."""
    mode = "http"
    if args.memory:
        mode = "memory"
    elif args.table:
        mode = "table"
        settings.users_table = args.table
    elif args.api_url:
        settings.migration_api_url = args.api_url

    executor = build_executor(settings, FileStore(settings.store_path), mode=mode, auth_token=args.token)
    result = asyncio.run(executor.migrate(args.user_id, on_progress=print_progress))

    print("\n" + "=" * 60)
    print("MIGRATION COMPLETE" if result.success else "MIGRATION FAILED")
    print("=" * 60)
    print(json.dumps(result.to_dict(), indent=2))

    if not result.success:
        sys.exit(1)


def show_last_result(settings: Settings):
    store = FileStore(settings.store_path)
    executor = build_executor(settings, store, mode="memory")
    result = executor.get_last_result()
    if result is None:
        print("No migration result recorded")
        return
    print(json.dumps(result.to_dict(), indent=2))


def run_server(args):
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("jobseek_migration.api.main:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
