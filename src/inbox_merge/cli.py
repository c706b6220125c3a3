"""Command-line entry point for Inbox Merge."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from inbox_merge.core import (
    AppSettings,
    ExportError,
    GroupingStrategy,
    MergeOptions,
    MergeSortOrder,
    configure_logging,
    load_app_settings,
)
from inbox_merge.export import ExportFormat, export_records
from inbox_merge.ingestion import RecordLoadError, load_records
from inbox_merge.merge import import_incremental, merge_sources

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create and configure the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Merge and deduplicate email archives"
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file containing configuration overrides.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=None,
        help="Override the configured logging level (e.g. DEBUG).",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    merge_parser = commands.add_parser(
        "merge", help="Merge several archives into one deduplicated set."
    )
    merge_parser.add_argument(
        "sources", nargs="+", type=Path, help="mbox files or .eml folders."
    )
    _add_output_arguments(merge_parser)
    merge_parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Similarity threshold in (0, 1] (default from settings: 0.85).",
    )
    merge_parser.add_argument(
        "--sort",
        choices=[order.value for order in MergeSortOrder],
        default=None,
        help="Ordering applied to the merged result.",
    )
    merge_parser.add_argument(
        "--keep-duplicates",
        action="store_true",
        help="Concatenate sources without removing duplicates.",
    )
    merge_parser.add_argument(
        "--transitive",
        action="store_true",
        help="Group duplicates by transitive closure instead of greedy seeding.",
    )
    merge_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Threads used for pairwise similarity scoring.",
    )

    import_parser = commands.add_parser(
        "import", help="Append new records to an existing merged archive."
    )
    import_parser.add_argument("existing", type=Path, help="Existing archive.")
    import_parser.add_argument("incoming", type=Path, help="Archive to absorb.")
    _add_output_arguments(import_parser)
    import_parser.add_argument(
        "--fuzzy",
        action="store_true",
        help="Compare with the similarity scorer instead of exact signatures.",
    )
    return parser


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Destination mbox file or .eml folder.",
    )
    parser.add_argument(
        "--format",
        dest="export_format",
        choices=[fmt.value for fmt in ExportFormat],
        default=ExportFormat.MBOX.value,
        help="Output format (default: mbox).",
    )


def resolve_options(args: argparse.Namespace, settings: AppSettings) -> MergeOptions:
    """Combine configured merge options with command-line overrides."""
    updates: dict[str, Any] = {}
    if getattr(args, "threshold", None) is not None:
        updates["duplicate_threshold"] = args.threshold
    if getattr(args, "sort", None) is not None:
        updates["sort_order"] = args.sort
    if getattr(args, "keep_duplicates", False):
        updates["remove_duplicates"] = False
    if getattr(args, "transitive", False):
        updates["grouping"] = GroupingStrategy.TRANSITIVE
    if getattr(args, "workers", None) is not None:
        updates["workers"] = args.workers
    if getattr(args, "fuzzy", False):
        updates["exact_signatures"] = False
    return MergeOptions.model_validate({**settings.merge.model_dump(), **updates})


def execute(args: argparse.Namespace, settings: AppSettings) -> int:
    """Execute the requested CLI command and return an exit status."""
    try:
        options = resolve_options(args, settings)
    except ValidationError as exc:
        print(f"Invalid options: {exc}")
        return 2

    try:
        if args.command == "merge":
            _run_merge(args, options)
        elif args.command == "import":
            _run_import(args, options)
    except RecordLoadError as exc:
        print(f"Load failed: {exc}")
        return 1
    except ExportError as exc:
        print(f"Export failed for {exc.path}: {exc.reason}")
        return 1
    return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_app_settings(env_file=args.env_file)
    logging_settings = settings.logging
    if args.log_level:
        logging_settings = logging_settings.model_copy(update={"level": args.log_level})
    configure_logging(logging_settings)
    raise SystemExit(execute(args, settings))


def _log_progress(fraction: float, step: str) -> None:
    LOGGER.debug("%s: %.0f%%", step, fraction * 100)


def _run_merge(args: argparse.Namespace, options: MergeOptions) -> None:
    """Merge the given sources and export the result."""
    sources = [load_records(path) for path in args.sources]
    result = merge_sources(
        sources,
        options,
        labels=[path.name for path in args.sources],
        progress=_log_progress,
    )
    export_records(result.records, args.output, ExportFormat(args.export_format))

    print(f"Merged {result.total_before} message(s) into {result.total_after}.")
    print(
        f"Removed {result.duplicates_removed} duplicate(s) "
        f"across {len(result.duplicate_groups)} group(s)."
    )
    print(f"Output written to {args.output}")


def _run_import(args: argparse.Namespace, options: MergeOptions) -> None:
    """Absorb an incoming archive into an existing one and export the result."""
    existing = load_records(args.existing)
    incoming = load_records(args.incoming)
    result = import_incremental(existing, incoming, options, progress=_log_progress)
    export_records(result.records, args.output, ExportFormat(args.export_format))

    print(f"Added {result.new_emails_added} new message(s).")
    print(f"Skipped {result.duplicates_skipped} duplicate(s).")
    print(f"Output written to {args.output}")


__all__ = ["build_parser", "execute", "main", "resolve_options"]
