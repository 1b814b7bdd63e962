"""
Command-line interface for Company Manager.

Provides the `cmgr` command with the following subcommands:
- web: Run the local web UI
- list: Print records, optionally filtered by a search query
- show: Print one record as JSON
- delete: Delete a record after confirmation
- export: Write the stored collection as JSON
- import: Load records from a JSON file
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import Config, ConfigError, load_config
from .errors import (
    EXIT_ERROR,
    EXIT_NOT_FOUND,
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
    CompanyManagerError,
    ValidationError,
)
from .logging_config import level_from_name, setup_logging
from .models import Record
from .paths import get_db_path
from .repository import RecordRepository
from .storage import SlotStorage
from .views import DELETE_PROMPT, ListView

logger = logging.getLogger(__name__)


def _config(args: argparse.Namespace) -> Config:
    return getattr(args, "_config", None) or Config()


def get_storage(args: argparse.Namespace) -> SlotStorage:
    """Slot storage for the database chosen by --db, the config, or the default."""
    config = _config(args)
    if args.db:
        db_path = Path(args.db)
    else:
        db_path = config.resolve_db_path() or get_db_path()
    return SlotStorage(db_path, config.storage.slot)


def web_command(args: argparse.Namespace) -> int:
    """
    Execute the web command (start web server).

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code.
    """
    from .web import run_server

    config = _config(args)
    storage = get_storage(args)

    try:
        run_server(
            host=args.host or config.web.host,
            port=args.port or config.web.port,
            debug=args.debug,
            db_path=storage.db_path,
            config=config,
            allow_unsafe_bind=args.i_know_what_im_doing,
        )
        return EXIT_SUCCESS
    except CompanyManagerError as e:
        logger.error(f"Error starting web server: {e}")
        return e.exit_code


def list_command(args: argparse.Namespace) -> int:
    """Execute the list command."""
    repository = RecordRepository(get_storage(args))
    records = repository.search(args.search or "")

    if args.json:
        print(json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False))
        return EXIT_SUCCESS

    if not records:
        print("No companies added yet." if not args.search else "No matching companies.")
        return EXIT_SUCCESS

    for r in records:
        print(f"{r.id}  {r.company_name}  {r.company_email}  {r.company_phone}  {r.created_at}")
    return EXIT_SUCCESS


def show_command(args: argparse.Namespace) -> int:
    """Execute the show command."""
    record = RecordRepository(get_storage(args)).find_by_id(args.id)
    if record is None:
        logger.error(f"No company with id {args.id}")
        return EXIT_NOT_FOUND
    print(json.dumps(record.to_dict(), indent=2, ensure_ascii=False))
    return EXIT_SUCCESS


def prompt_confirm(record: Record) -> bool:
    """Ask on stdin whether ``record`` should be deleted."""
    try:
        answer = input(f"{DELETE_PROMPT} [{record.company_name}] (y/N): ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def delete_command(args: argparse.Namespace) -> int:
    """Execute the delete command."""
    repository = RecordRepository(get_storage(args))
    confirm = (lambda record: True) if args.yes else prompt_confirm

    if repository.find_by_id(args.id) is None:
        logger.error(f"No company with id {args.id}")
        return EXIT_NOT_FOUND

    try:
        deleted = ListView(repository, confirm).delete(args.id)
    except CompanyManagerError as e:
        logger.error(str(e))
        return e.exit_code

    if deleted:
        print(f"Deleted {args.id}")
    else:
        print("Nothing deleted.")
    return EXIT_SUCCESS


def export_command(args: argparse.Namespace) -> int:
    """Execute the export command."""
    records = get_storage(args).load_all()
    text = json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False)

    if args.output:
        output = Path(args.output)
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(text + "\n", encoding="utf-8")
        except OSError as e:
            logger.error(f"Cannot write {output}: {e}")
            return EXIT_ERROR
        logger.info(f"Exported {len(records)} record(s) to {output}")
        print(f"Exported {len(records)} record(s) to {output}")
    else:
        print(text)
    return EXIT_SUCCESS


def import_command(args: argparse.Namespace) -> int:
    """
    Execute the import command.

    Records are merged by id (an imported record replaces a stored one with
    the same id), or replace the whole collection with --replace.
    """
    source = Path(args.file)
    try:
        data = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Cannot read {source}: {e}")
        return EXIT_ERROR

    if not isinstance(data, list):
        logger.error(f"{source} must hold a JSON array of records")
        return EXIT_VALIDATION_ERROR

    try:
        incoming = [Record.from_dict(item) for item in data]
    except ValidationError as e:
        logger.error(f"Invalid record in {source}: {e}")
        return EXIT_VALIDATION_ERROR

    storage = get_storage(args)
    if args.replace:
        merged = incoming
    else:
        merged = storage.load_all()
        positions = {r.id: idx for idx, r in enumerate(merged)}
        for record in incoming:
            if record.id in positions:
                merged[positions[record.id]] = record
            else:
                positions[record.id] = len(merged)
                merged.append(record)

    try:
        storage.save_all(merged)
    except CompanyManagerError as e:
        logger.error(str(e))
        return e.exit_code

    print(f"Imported {len(incoming)} record(s); {len(merged)} stored.")
    return EXIT_SUCCESS


def create_parser() -> argparse.ArgumentParser:
    """
    Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="cmgr",
        description="Manage company and employee records from a local web UI or the command line.",
        epilog="Example: cmgr web --port 5000",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"cmgr {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output (INFO level logging)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output (DEBUG level logging)",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress output except errors",
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        dest="config_file",
        help="Path to config file (default: company_manager.toml)",
    )
    parser.add_argument(
        "--db",
        type=str,
        help="Path to the SQLite database (default: data/db/companies.db)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands",
    )

    web_parser = subparsers.add_parser(
        "web",
        help="Run the local web UI",
        description="Start the web UI for listing, creating and editing companies.",
    )
    web_parser.add_argument("--host", type=str, default=None, help="Host to bind (default: 127.0.0.1)")
    web_parser.add_argument("--port", "-p", type=int, default=None, help="Port to listen on (default: 5000)")
    web_parser.add_argument(
        "--i-know-what-im-doing",
        action="store_true",
        help="Allow binding to a non-localhost address",
    )
    web_parser.set_defaults(func=web_command)

    list_parser = subparsers.add_parser("list", help="List companies")
    list_parser.add_argument("--search", "-s", type=str, help="Filter by company name, email or phone")
    list_parser.add_argument("--json", action="store_true", help="Print records as JSON")
    list_parser.set_defaults(func=list_command)

    show_parser = subparsers.add_parser("show", help="Show one company as JSON")
    show_parser.add_argument("id", help="Record id")
    show_parser.set_defaults(func=show_command)

    delete_parser = subparsers.add_parser("delete", help="Delete a company")
    delete_parser.add_argument("id", help="Record id")
    delete_parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    delete_parser.set_defaults(func=delete_command)

    export_parser = subparsers.add_parser("export", help="Export all companies as JSON")
    export_parser.add_argument("--output", "-o", type=str, help="Write to this file instead of stdout")
    export_parser.set_defaults(func=export_command)

    import_parser = subparsers.add_parser("import", help="Import companies from a JSON file")
    import_parser.add_argument("file", help="JSON file holding an array of records")
    import_parser.add_argument(
        "--replace",
        action="store_true",
        help="Replace the stored collection instead of merging by id",
    )
    import_parser.set_defaults(func=import_command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv).

    Returns:
        Exit code.
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    config_path = Path(args.config_file) if args.config_file else None
    try:
        config = load_config(config_path)
    except ConfigError as e:
        setup_logging(quiet=args.quiet)
        logger.error(f"Config error: {e}")
        return e.exit_code
    args._config = config

    log_file = Path(config.logging.log_file) if config.logging.log_file else None
    setup_logging(
        verbose=args.verbose,
        debug=args.debug,
        quiet=args.quiet,
        log_file=log_file,
        default_level=level_from_name(config.logging.level),
    )

    if not hasattr(args, "func"):
        parser.print_help()
        return EXIT_SUCCESS

    return args.func(args)


def main_cli() -> None:
    """
    CLI entry point for console_scripts.

    Calls main() and exits with the returned code.
    """
    sys.exit(main())


if __name__ == "__main__":
    main_cli()
