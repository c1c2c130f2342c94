"""
Tests for the transaction log and undo engine.
"""
import json
import logging
from pathlib import Path
from tempfile import TemporaryDirectory

from rule_organizer.history import MAX_HISTORY, TransactionLog, new_transaction_id
from rule_organizer.models import MoveOperation
from rule_organizer.undo import UndoEngine


def op(name: str, old: str = "/src", new: str = "/dst") -> MoveOperation:
    return MoveOperation(file_name=name, old_path=f"{old}/{name}", new_path=f"{new}/{name}")


def test_missing_history_is_empty():
    """Test a missing history file reads as empty."""
    with TemporaryDirectory() as tmpdir:
        log = TransactionLog(Path(tmpdir) / "history.json")
        assert log.list() == []


def test_malformed_history_is_empty(caplog):
    """Test unparsable history reads as empty, is logged and is replaced on record."""
    with TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "history.json"
        path.write_text("{not json")
        log = TransactionLog(path)

        assert log.list() == []
        assert f"Ignoring malformed history {path}" in caplog.text

        log.record([op("a.txt")])
        assert len(log.list()) == 1


def test_record_prepends_and_persists_camel_case():
    """Test newest-first order and the on-disk JSON format."""
    with TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "nested" / "history.json"
        log = TransactionLog(path)

        first = log.record([op("a.txt")])
        second = log.record([op("b.txt"), op("c.txt")])

        history = log.list()
        assert [t.id for t in history] == [second.id, first.id]
        assert [o.file_name for o in history[0].operations] == ["b.txt", "c.txt"]

        raw = json.loads(path.read_text())
        assert set(raw[0]) == {"id", "timestamp", "operations"}
        assert raw[0]["operations"][0] == {
            "fileName": "b.txt",
            "oldPath": "/src/b.txt",
            "newPath": "/dst/b.txt",
        }


def test_record_nothing():
    """Test an empty batch records no transaction."""
    with TemporaryDirectory() as tmpdir:
        log = TransactionLog(Path(tmpdir) / "history.json")
        assert log.record([]) is None
        assert not log.history_path.exists()


def test_history_is_capped():
    """Test recording a 31st transaction evicts the oldest."""
    with TemporaryDirectory() as tmpdir:
        log = TransactionLog(Path(tmpdir) / "history.json")
        ids = [log.record([op(f"{i}.txt")]).id for i in range(MAX_HISTORY + 1)]

        history = log.list()
        assert len(history) == MAX_HISTORY
        assert history[0].id == ids[-1]
        assert ids[0] not in {t.id for t in history}


def test_transaction_ids_are_unique():
    """Test ids do not collide within the same second."""
    ids = {new_transaction_id() for _ in range(100)}
    assert len(ids) == 100


def test_find_and_remove():
    """Test lookup and removal by id."""
    with TemporaryDirectory() as tmpdir:
        log = TransactionLog(Path(tmpdir) / "history.json")
        transaction = log.record([op("a.txt")])

        assert log.find(transaction.id) == transaction
        assert log.find("missing") is None
        assert log.remove("missing") is False
        assert log.remove(transaction.id) is True
        assert log.list() == []


def test_undo_restores_files_in_reverse():
    """Test undo moves files back and shortens history by one."""
    with TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        source_dir = root / "source"
        target_dir = root / "target"
        target_dir.mkdir()
        (target_dir / "a.txt").write_text("a")
        (target_dir / "b.txt").write_text("b")

        log = TransactionLog(root / "history.json")
        older = log.record([op("old.txt")])
        transaction = log.record([
            op("a.txt", str(source_dir), str(target_dir)),
            op("b.txt", str(source_dir), str(target_dir)),
        ])

        result = UndoEngine(log).undo(transaction.id)

        assert result.transaction_id == transaction.id
        assert [o.file_name for o in result.restored] == ["b.txt", "a.txt"]
        assert result.failed == []
        assert (source_dir / "a.txt").read_text() == "a"
        assert (source_dir / "b.txt").read_text() == "b"
        assert not (target_dir / "a.txt").exists()
        assert [t.id for t in log.list()] == [older.id]


def test_undo_reports_missing_files():
    """Test a file that vanished is reported and the transaction still removed."""
    with TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "target").mkdir()
        (root / "target" / "a.txt").write_text("a")

        log = TransactionLog(root / "history.json")
        transaction = log.record([
            op("a.txt", str(root / "source"), str(root / "target")),
            op("gone.txt", str(root / "source"), str(root / "target")),
        ])

        result = UndoEngine(log).undo(transaction.id)

        assert len(result.restored) == 1
        assert len(result.failed) == 1
        assert result.failed[0].source_path.endswith("gone.txt")
        assert (root / "source" / "a.txt").exists()
        assert log.list() == []


def test_undo_unknown_id_is_noop(caplog):
    """Test undoing an unknown id changes nothing."""
    with TemporaryDirectory() as tmpdir:
        log = TransactionLog(Path(tmpdir) / "history.json")
        log.record([op("a.txt")])

        with caplog.at_level(logging.INFO, logger="rule_organizer.undo"):
            assert UndoEngine(log).undo("does-not-exist") is None
        assert "No transaction with id does-not-exist" in caplog.text
        assert len(log.list()) == 1
