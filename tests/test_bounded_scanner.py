"""Tests for bounded directory walks."""

import os
import time
from pathlib import Path

from osoptimize.bounded_scanner import (
    ScanCaps,
    all_of,
    find_directories,
    list_children,
    not_excluded,
    older_than,
    walk_files,
)


def _touch(path: Path, content: str = "x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestWalkFiles:
    def test_missing_root_yields_nothing(self, tmp_path):
        assert list(walk_files(tmp_path / "missing")) == []

    def test_lists_nested_files(self, tmp_path):
        _touch(tmp_path / "a.txt")
        _touch(tmp_path / "sub" / "b.txt")
        found = {p.name for p in walk_files(tmp_path)}
        assert found == {"a.txt", "b.txt"}

    def test_prunes_protected_directories(self, tmp_path):
        _touch(tmp_path / ".git" / "config")
        _touch(tmp_path / "keep.txt")
        found = list(walk_files(tmp_path))
        assert found == [tmp_path / "keep.txt"]

    def test_max_results(self, tmp_path):
        for i in range(10):
            _touch(tmp_path / f"f{i}.txt")
        assert len(list(walk_files(tmp_path, caps=ScanCaps(max_results=3)))) == 3

    def test_zero_max_results(self, tmp_path):
        _touch(tmp_path / "f.txt")
        assert list(walk_files(tmp_path, caps=ScanCaps(max_results=0))) == []

    def test_max_depth(self, tmp_path):
        _touch(tmp_path / "top.txt")
        _touch(tmp_path / "one" / "mid.txt")
        _touch(tmp_path / "one" / "two" / "deep.txt")
        found = {p.name for p in walk_files(tmp_path, caps=ScanCaps(max_depth=2))}
        assert found == {"top.txt", "mid.txt"}

    def test_deterministic_order(self, tmp_path):
        for name in ("c.txt", "a.txt", "b.txt"):
            _touch(tmp_path / name)
        first = list(walk_files(tmp_path))
        assert first == list(walk_files(tmp_path))
        assert [p.name for p in first] == ["a.txt", "b.txt", "c.txt"]

    def test_does_not_follow_symlinks(self, tmp_path):
        target = tmp_path / "target"
        _touch(target / "inside.txt")
        root = tmp_path / "root"
        root.mkdir()
        os.symlink(target, root / "link")
        assert list(walk_files(root)) == []

    def test_predicate(self, tmp_path):
        _touch(tmp_path / "a.log")
        _touch(tmp_path / "b.txt")
        only_logs = lambda path, st: path.suffix == ".log"  # noqa: E731
        assert [p.name for p in walk_files(tmp_path, only_logs)] == ["a.log"]

    def test_time_budget_stops_walk(self, tmp_path):
        for i in range(5):
            _touch(tmp_path / f"f{i}.txt")

        def slow(path, st):
            time.sleep(0.05)
            return True

        found = list(walk_files(tmp_path, slow, ScanCaps(time_budget=0.01)))
        assert len(found) < 5


class TestPredicates:
    def test_older_than(self, tmp_path):
        old = _touch(tmp_path / "old.txt")
        new = _touch(tmp_path / "new.txt")
        ten_days_ago = time.time() - 10 * 86400
        os.utime(old, (ten_days_ago, ten_days_ago))

        predicate = older_than(7)
        assert predicate(old, old.stat()) is True
        assert predicate(new, new.stat()) is False

    def test_not_excluded(self, tmp_path):
        path = _touch(tmp_path / "Documents" / ".DS_Store")
        assert not_excluded(path, path.stat()) is False

    def test_all_of_ignores_none(self, tmp_path):
        path = _touch(tmp_path / "f.txt")
        assert all_of(None, not_excluded)(path, path.stat()) is True


class TestFindDirectories:
    def test_finds_without_descending(self, tmp_path):
        (tmp_path / "app" / "node_modules" / "dep" / "node_modules").mkdir(parents=True)
        found = list(find_directories(tmp_path, "node_modules"))
        assert found == [tmp_path / "app" / "node_modules"]

    def test_prunes_protected(self, tmp_path):
        (tmp_path / ".git" / "node_modules").mkdir(parents=True)
        assert list(find_directories(tmp_path, "node_modules")) == []

    def test_max_dirs_sampled(self, tmp_path):
        for i in range(5):
            (tmp_path / f"p{i}" / "node_modules").mkdir(parents=True)
        caps = ScanCaps(max_dirs_sampled=2)
        assert len(list(find_directories(tmp_path, "node_modules", caps))) == 2

    def test_max_depth(self, tmp_path):
        (tmp_path / "a" / "b" / "c" / "node_modules").mkdir(parents=True)
        assert list(find_directories(tmp_path, "node_modules", ScanCaps(max_depth=3))) == []
        assert len(list(find_directories(tmp_path, "node_modules", ScanCaps(max_depth=4)))) == 1


class TestListChildren:
    def test_unreadable_root(self, tmp_path):
        assert list_children(tmp_path / "missing") == []

    def test_sorted(self, tmp_path):
        _touch(tmp_path / "b")
        _touch(tmp_path / "a")
        assert [p.name for p in list_children(tmp_path)] == ["a", "b"]
