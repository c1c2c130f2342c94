"""
CLI interface for the rule organizer.

Provides command-line access to scanning, organizing, history and undo.
"""
import argparse
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from rule_organizer.models import ConflictPolicy, MoveStatus
from rule_organizer.organizer import Organizer, configure_logging
from rule_organizer.storage import AppSettings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Rule Organizer - Sort files into folders by name pattern and extension",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Preview where files in Downloads would go
  rule-organizer organize ~/Downloads --dry-run

  # Organize the configured watch paths, skipping existing files
  rule-organizer organize --conflict skip

  # Undo a run
  rule-organizer history
  rule-organizer undo 20260101-120000-1a2b3c4d
        """
    )
    parser.add_argument(
        "--app-dir",
        type=Path,
        help="Application directory holding config, rules and history (default: ~/.rule_organizer)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)"
    )

    subparsers = parser.add_subparsers(dest="command")

    scan_parser = subparsers.add_parser("scan", help="List the files directly inside folders.")
    scan_parser.add_argument("paths", nargs="+", type=Path, help="Folders to scan.")

    organize_parser = subparsers.add_parser("organize", help="Move files into rule target folders.")
    organize_parser.add_argument("paths", nargs="*", type=Path, help="Folders to organize (default: watch paths).")
    organize_parser.add_argument(
        "--conflict",
        choices=[policy.value for policy in ConflictPolicy],
        help="What to do when the destination exists (default: configured conflict mode)."
    )
    organize_parser.add_argument("--dry-run", action="store_true", help="Only show planned moves.")

    subparsers.add_parser("history", help="List recorded transactions.")

    undo_parser = subparsers.add_parser("undo", help="Undo a recorded transaction.")
    undo_parser.add_argument("transaction_id", help="Transaction id from 'history'.")

    subparsers.add_parser("rules", help="Show the active rules.")

    export_parser = subparsers.add_parser("export-rules", help="Write the active rules to a file.")
    export_parser.add_argument("path", type=Path)

    import_parser = subparsers.add_parser("import-rules", help="Replace the active rules from a file.")
    import_parser.add_argument("path", type=Path)

    return parser


def cmd_scan(organizer: Organizer, args: argparse.Namespace) -> int:
    files = organizer.scan_multiple_folders(args.paths)
    for file_info in files:
        print(f"{file_info.size:>12}  {file_info.full_path}")
    print(f"\nFiles found: {len(files)}")
    return 0


def cmd_organize(organizer: Organizer, args: argparse.Namespace) -> int:
    config = organizer.load_config()
    paths = args.paths or [Path(p) for p in config.watch_paths]
    conflict = args.conflict or config.conflict_mode
    schema = organizer.load_schema()

    result = organizer.organize_files(paths, schema, conflict, dry_run=args.dry_run)

    for move in result.results:
        line = f"{move.status.value.upper():<8} {move.source_path} -> {move.target_path}"
        if move.reason:
            line += f" ({move.reason})"
        print(line)

    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)
    if args.dry_run:
        planned = sum(1 for move in result.results if move.status == MoveStatus.PLANNED)
        print(f"Files planned: {planned}")
    print(f"Files moved: {result.moved_count}")
    print(f"Files skipped: {result.skipped_count}")
    print(f"Files failed: {result.failed_count}")
    if result.transaction:
        print(f"Transaction: {result.transaction.id}")
    for error in result.errors:
        print(f"Error: {error}")

    if args.dry_run:
        print("\nDRY-RUN MODE: No files were actually moved")
    return 1 if result.failed_count or result.errors else 0


def cmd_history(organizer: Organizer, args: argparse.Namespace) -> int:
    history = organizer.get_history()
    if not history:
        print("No transactions recorded")
        return 0
    for transaction in history:
        when = datetime.fromtimestamp(transaction.timestamp).strftime("%Y-%m-%d %H:%M:%S")
        print(f"{transaction.id}  {when}  {len(transaction.operations)} file(s)")
    return 0


def cmd_undo(organizer: Organizer, args: argparse.Namespace) -> int:
    result = organizer.undo_by_id(args.transaction_id)
    if result is None:
        print(f"No transaction with id {args.transaction_id}")
        return 0
    print(f"Restored: {len(result.restored)}")
    for failed in result.failed:
        print(f"Failed: {failed.source_path} -> {failed.target_path} ({failed.reason})")
    return 1 if result.failed else 0


def cmd_rules(organizer: Organizer, args: argparse.Namespace) -> int:
    for rule in organizer.load_schema().rules:
        criteria = ", ".join(filter(None, [rule.pattern, " ".join(rule.extensions)]))
        print(f"{rule.name or rule.id}: {criteria or '-'} -> {rule.target_dir}")
    return 0


def cmd_export_rules(organizer: Organizer, args: argparse.Namespace) -> int:
    path = organizer.export_schema(args.path)
    print(f"Rules exported to {path}")
    return 0


def cmd_import_rules(organizer: Organizer, args: argparse.Namespace) -> int:
    schema = organizer.import_schema(args.path)
    organizer.save_schema(schema)
    print(f"Imported {len(schema.rules)} rules from {args.path}")
    return 0


COMMANDS = {
    "scan": cmd_scan,
    "organize": cmd_organize,
    "history": cmd_history,
    "undo": cmd_undo,
    "rules": cmd_rules,
    "export-rules": cmd_export_rules,
    "import-rules": cmd_import_rules,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    if args.command not in COMMANDS:
        parser.print_help()
        return 1

    settings = AppSettings(app_dir=args.app_dir) if args.app_dir else AppSettings()

    try:
        organizer = Organizer(settings)
        return COMMANDS[args.command](organizer, args)
    except (OSError, ValueError) as e:
        print(f"\nError: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
