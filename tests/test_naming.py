"""
Unit tests for conversion/naming.py

Run with: pytest tests/test_naming.py -v
"""

from datetime import datetime
from pathlib import Path

from conversion.naming import build_log_path, cfs_path_for, find_edf_files


def touch(path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")
    return path


def test_cfs_path_for():
    assert cfs_path_for("/data/night1.edf") == Path("/data/night1.cfs")
    assert cfs_path_for(Path("a/b.c.EDF")) == Path("a/b.c.cfs")


class TestFindEdfFiles:
    def test_recursive_case_insensitive(self, tmp_path):
        a = touch(tmp_path / "a.edf")
        b = touch(tmp_path / "sub" / "deep" / "B.EDF")
        touch(tmp_path / "notes.txt")
        touch(tmp_path / "a.cfs")
        touch(tmp_path / "edf")
        assert find_edf_files(tmp_path) == sorted([a, b])

    def test_directories_skipped(self, tmp_path):
        (tmp_path / "folder.edf").mkdir()
        assert find_edf_files(tmp_path) == []

    def test_not_a_directory(self, tmp_path):
        assert find_edf_files(tmp_path / "missing") == []
        assert find_edf_files(touch(tmp_path / "x.edf")) == []

    def test_custom_extension(self, tmp_path):
        bdf = touch(tmp_path / "r.bdf")
        touch(tmp_path / "r.edf")
        assert find_edf_files(tmp_path, ".BDF") == [bdf]


def test_build_log_path(tmp_path):
    first = touch(tmp_path / "night1.edf")
    path = build_log_path(first, now=datetime(2024, 3, 5, 9, 7))
    assert path == tmp_path.resolve() / "05-Mar-2024-0907_log.html"
