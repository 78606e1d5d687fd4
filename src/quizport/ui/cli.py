from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from quizport.adapters.access import QUIZ_MODERATE
from quizport.app import create_category, import_quizzes
from quizport.config import configure_logging, get_import_config
from quizport.domain.imports import ImportOptions, LimitExceededError
from quizport.domain.model import Actor, ImportFormat, UpsertStrategy

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from quizport.domain.imports import ImportSummary

log = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_LIMIT_EXCEEDED = 3

MODERATOR_PERMISSIONS = frozenset({QUIZ_MODERATE})


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Bulk import quizzes into the catalog")
    subparsers = parser.add_subparsers(dest="command", required=True)

    importer = subparsers.add_parser("import", help="Import quizzes from a JSON or XLSX file")
    importer.add_argument("path", type=Path, help="File to import")
    importer.add_argument(
        "--format",
        dest="import_format",
        choices=[fmt.value for fmt in ImportFormat],
        help="Payload format (defaults to the file extension)",
    )
    importer.add_argument(
        "--strategy",
        choices=[strategy.value for strategy in UpsertStrategy],
        default=UpsertStrategy.CREATE_ONLY.value,
        help="Conflict resolution strategy (default: %(default)s)",
    )
    importer.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and reconcile without persisting anything",
    )
    importer.add_argument(
        "--auto-create-tags",
        action="store_true",
        help="Create tags that do not exist yet",
    )
    importer.add_argument(
        "--auto-create-category",
        action="store_true",
        help="Create categories that do not exist yet",
    )
    importer.add_argument(
        "--max-items",
        type=int,
        help="Maximum number of quizzes per file (defaults to config)",
    )
    importer.add_argument(
        "--actor-id",
        type=str,
        required=True,
        help="Id of the user the quizzes are imported for",
    )
    importer.add_argument(
        "--username",
        type=str,
        default="cli",
        help="Username of the importing user (default: %(default)s)",
    )
    importer.add_argument(
        "--moderator",
        action="store_true",
        help="Import with moderation capability (allows publishing PUBLIC quizzes)",
    )

    category = subparsers.add_parser("category", help="Category management commands")
    category_sub = category.add_subparsers(dest="category_command", required=True)
    category_create = category_sub.add_parser("create", help="Create a category")
    category_create.add_argument(
        "--name",
        type=str,
        required=True,
        help="Category name (unique, case-insensitive)",
    )
    category_create.add_argument(
        "--description",
        type=str,
        help="Optional description",
    )

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _resolve_format(args: argparse.Namespace) -> ImportFormat:
    if args.import_format is not None:
        return ImportFormat(args.import_format)
    suffix = args.path.suffix.lower().lstrip(".")
    try:
        return ImportFormat(suffix)
    except ValueError as exc:
        raise ValueError(f"Cannot infer import format from {args.path}; pass --format") from exc


def _build_options(args: argparse.Namespace) -> ImportOptions:
    max_items = args.max_items if args.max_items is not None else get_import_config().max_items
    if max_items <= 0:
        raise ValueError("--max-items must be positive")
    return ImportOptions(
        strategy=UpsertStrategy(args.strategy),
        dry_run=args.dry_run,
        auto_create_tags=args.auto_create_tags,
        auto_create_category=args.auto_create_category,
        max_items=max_items,
    )


def _build_actor(args: argparse.Namespace) -> Actor:
    return Actor(
        id=_parse_uuid(args.actor_id),
        username=args.username,
        permissions=MODERATOR_PERMISSIONS if args.moderator else frozenset(),
    )


def _log_summary(summary: ImportSummary) -> None:
    log.info(
        "Import summary: total=%s, created=%s, updated=%s, skipped=%s, failed=%s",
        summary.total,
        summary.created,
        summary.updated,
        summary.skipped,
        summary.failed,
    )
    for error in summary.errors:
        log.warning("  record %s: %s (%s)", error.index, error.message, error.code)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command == "import":
            import_format = _resolve_format(parsed_args)
            options = _build_options(parsed_args)
            actor = _build_actor(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(EXIT_USAGE)

    try:
        if parsed_args.command == "import":
            summary = import_quizzes(
                parsed_args.path.read_bytes(),
                import_format=import_format,
                options=options,
                actor=actor,
            )
            _log_summary(summary)
        elif parsed_args.command == "category" and parsed_args.category_command == "create":
            category = create_category(parsed_args.name, parsed_args.description)
            log.info("Created category %s", category.id)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except LimitExceededError:
        log.exception("Import rejected")
        sys.exit(EXIT_LIMIT_EXCEEDED)
    except Exception:
        log.exception("Fatal error during import")
        sys.exit(EXIT_FAILURE)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
