"""
Tests for the move executor and its copy fallback.
"""
import errno
import os
import shutil
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from rule_organizer.executor import MoveExecutor
from rule_organizer.models import MoveStatus

_real_replace = os.replace


def cross_device_replace(src, dst):
    """Behave like a rename across volumes: only same-directory renames work."""
    if Path(src).parent != Path(dst).parent:
        raise OSError(errno.EXDEV, "Invalid cross-device link")
    return _real_replace(src, dst)


@pytest.fixture
def cross_device(monkeypatch):
    monkeypatch.setattr(os, "replace", cross_device_replace)


def leftovers(directory: Path):
    return sorted(p.name for p in directory.iterdir())


def test_move_creates_directory():
    """Test a plain rename into a new directory."""
    with TemporaryDirectory() as tmpdir:
        source = Path(tmpdir) / "source.txt"
        target = Path(tmpdir) / "sub" / "dir" / "source.txt"
        source.write_text("test")

        result = MoveExecutor().move(source, target)

        assert result.status == MoveStatus.MOVED
        assert not source.exists()
        assert target.read_text() == "test"


def test_move_replaces_existing_file():
    """Test overwrite semantics of the primary path."""
    with TemporaryDirectory() as tmpdir:
        source = Path(tmpdir) / "a.txt"
        target = Path(tmpdir) / "out" / "a.txt"
        source.write_text("new")
        target.parent.mkdir()
        target.write_text("old")

        result = MoveExecutor().move(source, target)

        assert result.status == MoveStatus.MOVED
        assert target.read_text() == "new"


def test_fallback_copy_and_delete(cross_device):
    """Test the copy fallback when rename fails."""
    with TemporaryDirectory() as tmpdir:
        source = Path(tmpdir) / "a.bin"
        target = Path(tmpdir) / "out" / "a.bin"
        source.write_bytes(b"\x00\x01" * 1000)

        result = MoveExecutor().move(source, target)

        assert result.status == MoveStatus.MOVED
        assert not source.exists()
        assert target.read_bytes() == b"\x00\x01" * 1000
        assert leftovers(target.parent) == ["a.bin"]


def test_fallback_copy_replaces_existing_file(cross_device):
    """Test a verified fallback copy overwrites the destination."""
    with TemporaryDirectory() as tmpdir:
        source = Path(tmpdir) / "x.txt"
        target = Path(tmpdir) / "out" / "x.txt"
        source.write_text("incoming")
        target.parent.mkdir()
        target.write_text("existing")

        result = MoveExecutor().move(source, target)

        assert result.status == MoveStatus.MOVED
        assert target.read_text() == "incoming"
        assert not source.exists()


def test_fallback_copy_failure_keeps_existing_destination(cross_device, monkeypatch):
    """Test an unreadable source leaves both the source and the old destination intact."""
    with TemporaryDirectory() as tmpdir:
        source = Path(tmpdir) / "x.txt"
        target = Path(tmpdir) / "out" / "x.txt"
        source.write_text("incoming")
        target.parent.mkdir()
        target.write_text("existing")

        def unreadable_source(src, dst, *args, **kwargs):
            raise PermissionError(errno.EACCES, "Permission denied", str(src))

        monkeypatch.setattr(shutil, "copyfile", unreadable_source)
        result = MoveExecutor().move(source, target)

        assert result.status == MoveStatus.FAILED
        assert "Copy failed" in result.reason
        assert source.read_text() == "incoming"
        assert target.read_text() == "existing"
        assert leftovers(target.parent) == ["x.txt"]


def test_fallback_copy_failure_keeps_source(cross_device, monkeypatch):
    """Test a partially written copy is discarded and the source kept."""
    with TemporaryDirectory() as tmpdir:
        source = Path(tmpdir) / "a.txt"
        target = Path(tmpdir) / "out" / "a.txt"
        source.write_text("data")

        def broken_copy(src, dst, *args, **kwargs):
            Path(dst).write_text("da")
            raise OSError("No space left on device")

        monkeypatch.setattr(shutil, "copyfile", broken_copy)
        result = MoveExecutor().move(source, target)

        assert result.status == MoveStatus.FAILED
        assert source.read_text() == "data"
        assert not target.exists()
        assert leftovers(target.parent) == []


def test_fallback_verification_failure(cross_device, monkeypatch):
    """Test a truncated copy is detected before anything is replaced."""
    with TemporaryDirectory() as tmpdir:
        source = Path(tmpdir) / "a.txt"
        target = Path(tmpdir) / "out" / "a.txt"
        source.write_text("complete data")
        target.parent.mkdir()
        target.write_text("existing")

        def truncating_copy(src, dst, *args, **kwargs):
            Path(dst).write_text("comp")
            return dst

        monkeypatch.setattr(shutil, "copyfile", truncating_copy)
        result = MoveExecutor().move(source, target)

        assert result.status == MoveStatus.FAILED
        assert "Size mismatch" in result.reason
        assert source.exists()
        assert target.read_text() == "existing"
        assert leftovers(target.parent) == ["a.txt"]


def test_fallback_checksum_mismatch(cross_device, monkeypatch):
    """Test a same-size but corrupted copy is detected by checksum."""
    with TemporaryDirectory() as tmpdir:
        source = Path(tmpdir) / "a.txt"
        target = Path(tmpdir) / "out" / "a.txt"
        source.write_text("abcd")

        def corrupting_copy(src, dst, *args, **kwargs):
            Path(dst).write_text("abce")
            return dst

        monkeypatch.setattr(shutil, "copyfile", corrupting_copy)

        result = MoveExecutor(verify_checksum=True).move(source, target)
        assert result.status == MoveStatus.FAILED
        assert result.reason == "Checksum mismatch"
        assert source.exists()
        assert not target.exists()

        result = MoveExecutor(verify_checksum=False).move(source, target)
        assert result.status == MoveStatus.MOVED
        assert target.read_text() == "abce"
