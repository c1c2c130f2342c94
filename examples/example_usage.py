"""
Example usage of the rule organizer.

This script demonstrates how to use the organizer programmatically: it builds
a throwaway folder, organizes it with a small rule set and then undoes the run.
"""
from pathlib import Path
from tempfile import TemporaryDirectory

from rule_organizer.models import Rule, Schema
from rule_organizer.organizer import Organizer, configure_logging
from rule_organizer.storage import AppSettings


def main():
    """Run example organize/undo cycle."""
    configure_logging("INFO")

    with TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        inbox = root / "inbox"
        inbox.mkdir()
        for name in ("holiday.jpg", "invoice_2024.pdf", "notes.txt", "setup.tmp", "track.mp3"):
            (inbox / name).write_text(name)

        schema = Schema(rules=[
            Rule(id="1", name="Images", extensions=[".jpg", ".png"], target_dir="Pictures"),
            Rule(id="2", name="Docs", extensions=[".pdf", ".txt"], target_dir="Documents"),
            Rule(id="3", name="Invoices", pattern="invoice_*", target_dir="Documents/Invoices"),
            Rule(id="4", name="Temp", pattern="*.tmp", target_dir=str(root / "Trash")),
        ])

        organizer = Organizer(AppSettings(app_dir=root / "app"))

        print("Preview:")
        preview = organizer.organize_files([inbox], schema, "rename", dry_run=True)
        for move in preview.results:
            print(f"  {Path(move.source_path).name} -> {move.target_path}")

        result = organizer.organize_files([inbox], schema, "rename")
        print(f"\nMoved {result.moved_count} files in transaction {result.transaction.id}")

        undo = organizer.undo_by_id(result.transaction.id)
        print(f"Restored {len(undo.restored)} files")
        print(f"History entries left: {len(organizer.get_history())}")


if __name__ == "__main__":
    main()
