"""
Unit tests for the filesystem walker module.

Tests directory traversal, pruning, path prefixes, error recovery
and statistics of the FSWalker class.
"""

import os
import tempfile
import shutil
import time
from pathlib import Path
from unittest.mock import patch
import pytest

from sfind.models.config import SearchConfig
from sfind.models.entry import FileEntry
from sfind.tools.filters import DirectoryAction, accept_file, directory_action
from sfind.tools.fs_walker import FSWalker, walk_path


def _touch(path: Path, days_ago: float = 0) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"Content of {path.name}")
    if days_ago:
        stamp = time.time() - days_ago * 86400
        os.utime(path, (stamp, stamp))


class TestFSWalker:
    """Test cases for the FSWalker class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.test_root = Path(self.temp_dir)
        self.emitted = []

        self._create_test_structure()

    def teardown_method(self):
        """Clean up test fixtures."""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _create_test_structure(self):
        """Create a test directory structure with various file types."""
        test_files = [
            "a.txt",
            ".hidden.txt",
            "sub/.git/cfg",
            "sub/b.py",
            "sub/deep/c.txt",
            "node_modules/pkg/index.txt",
            ".cache/d.txt",
        ]

        for file_path in test_files:
            _touch(self.test_root / file_path)

    def _walker(self, **kwargs):
        return FSWalker(SearchConfig(**kwargs), self.emitted.append)

    def test_scenario_relative_dot_root(self, monkeypatch):
        """Test the canonical scenario: only a.txt survives from a '.' root."""
        shutil.rmtree(self.test_root / "sub" / "deep")
        shutil.rmtree(self.test_root / "node_modules")
        shutil.rmtree(self.test_root / ".cache")
        monkeypatch.chdir(self.test_root)

        walker = self._walker(globs=["*.txt"], excludes=[".git"])
        walker.walk(".")

        assert self.emitted == ["a.txt"]

    def test_relative_root_keeps_prefix(self, monkeypatch):
        """Test that a relative root yields relative paths under that root."""
        monkeypatch.chdir(self.test_root.parent)
        root = self.test_root.name

        walker = self._walker(globs=["*.txt"])
        walker.walk(root)

        assert set(self.emitted) == {
            os.path.join(root, "a.txt"),
            os.path.join(root, "sub", "deep", "c.txt"),
            os.path.join(root, "node_modules", "pkg", "index.txt"),
        }

    def test_absolute_root_yields_absolute_paths(self):
        walker = self._walker(globs=["*.py"])
        walker.walk(str(self.test_root))

        assert self.emitted == [str(self.test_root / "sub" / "b.py")]

    def test_hidden_files_and_directories_skipped(self):
        """Test that hidden files and hidden subtrees never appear."""
        walker = self._walker()
        walker.walk(str(self.test_root))

        names = [Path(p).name for p in self.emitted]
        assert ".hidden.txt" not in names
        assert "cfg" not in names
        assert "d.txt" not in names
        assert "a.txt" in names

    def test_excluded_subtree_skipped(self):
        """Test that nothing beneath an excluded directory is emitted."""
        walker = self._walker(excludes=["node_modules", "deep"])
        walker.walk(str(self.test_root))

        assert not any("node_modules" in p for p in self.emitted)
        assert not any("c.txt" in p for p in self.emitted)
        assert str(self.test_root / "sub" / "b.py") in self.emitted

    def test_root_with_excluded_ancestor_pruned(self):
        """Test that a root below an excluded component yields nothing."""
        walker = self._walker(excludes=["sub"])
        walker.walk(str(self.test_root / "sub" / "deep"))

        assert self.emitted == []
        assert walker.get_stats()["directories_pruned"] == 1

    def test_hidden_root_pruned(self):
        walker = self._walker()
        walker.walk(str(self.test_root / ".cache"))

        assert self.emitted == []

    def test_pruned_directory_never_descended(self):
        """Test that no descendant of a pruned directory reaches a predicate."""
        visited_dirs = []
        visited_files = []

        def spy_directory(path, config):
            visited_dirs.append(path)
            return directory_action(path, config)

        def spy_file(entry, config):
            visited_files.append(entry.path)
            return accept_file(entry, config)

        config = SearchConfig(excludes=["node_modules"])
        walker = FSWalker(config, self.emitted.append, directory_action=spy_directory, accept_file=spy_file)
        walker.walk(str(self.test_root))

        assert not any(".git" + os.sep in p for p in visited_dirs + visited_files)
        assert not any(os.sep + "pkg" in p for p in visited_dirs + visited_files)
        assert str(self.test_root / "node_modules") in visited_dirs

    def test_injected_predicates_decide(self):
        """Test that the walker defers entirely to the injected predicates."""
        walker = FSWalker(
            SearchConfig(),
            self.emitted.append,
            directory_action=lambda path, config: DirectoryAction.DESCEND,
            accept_file=lambda entry, config: entry.name == "cfg",
        )
        walker.walk(str(self.test_root))

        assert self.emitted == [str(self.test_root / "sub" / ".git" / "cfg")]

    def test_file_root(self):
        """Test that a root which is a file is judged on its own."""
        walker = self._walker(globs=["*.py"])
        walker.walk(str(self.test_root / "sub" / "b.py"))
        walker.walk(str(self.test_root / "a.txt"))

        assert self.emitted == [str(self.test_root / "sub" / "b.py")]

    def test_hidden_file_root_rejected(self):
        walker = self._walker()
        walker.walk(str(self.test_root / ".hidden.txt"))

        assert self.emitted == []

    def test_missing_root(self):
        """Test that a missing root yields nothing and does not raise."""
        walker = self._walker()
        walker.walk(str(self.test_root / "does-not-exist"))

        assert self.emitted == []
        assert walker.get_stats()["errors"] == 1

    def test_from_filters_old_files(self):
        """Test that files modified before 'from' are skipped."""
        _touch(self.test_root / "old.txt", days_ago=2)

        walker = self._walker(globs=["*.txt"], **{"from": "yesterday"})
        walker.walk(str(self.test_root))

        names = [Path(p).name for p in self.emitted]
        assert "old.txt" not in names
        assert "a.txt" in names

    def test_casefold(self):
        _touch(self.test_root / "REPORT.TXT")

        self._walker(globs=["report.txt"]).walk(str(self.test_root))
        assert self.emitted == []

        self._walker(globs=["report.txt"], casefold=True).walk(str(self.test_root))
        assert self.emitted == [str(self.test_root / "REPORT.TXT")]

    def test_unreadable_directory_skipped(self):
        """Test that a listing failure only skips the failing directory."""
        _touch(self.test_root / "locked" / "secret.txt")
        real_scandir = os.scandir

        def failing_scandir(path="."):
            if os.path.basename(os.fspath(path)) == "locked":
                raise PermissionError(13, "Permission denied", os.fspath(path))
            return real_scandir(path)

        walker = self._walker(globs=["*.txt"])
        with patch("os.scandir", side_effect=failing_scandir):
            walker.walk(str(self.test_root))

        names = [Path(p).name for p in self.emitted]
        assert "secret.txt" not in names
        assert "a.txt" in names
        assert "c.txt" in names
        assert walker.get_stats()["errors"] >= 1

    def test_stat_failure_skips_file(self):
        """Test that a file that cannot be stat'ed is skipped silently."""
        real_lstat = os.lstat

        def failing_lstat(path, *args, **kwargs):
            if os.path.basename(os.fspath(path)) == "a.txt":
                raise FileNotFoundError(2, "No such file", os.fspath(path))
            return real_lstat(path, *args, **kwargs)

        walker = self._walker(globs=["*.txt"])
        with patch("sfind.models.entry.os.lstat", side_effect=failing_lstat):
            walker.walk(str(self.test_root))

        names = [Path(p).name for p in self.emitted]
        assert "a.txt" not in names
        assert "c.txt" in names
        assert walker.get_stats()["errors"] == 1

    def _symlink_dir(self, name):
        target = self.test_root / "real"
        _touch(target / "inside.txt")
        link = self.test_root / name
        try:
            os.symlink(target, link, target_is_directory=True)
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported")
        return link

    def test_symlinked_directory_reported_as_file(self):
        """Test that a link to a directory is matched by name and never descended."""
        link = self._symlink_dir("link.txt")

        walker = self._walker(globs=["*.txt"], excludes=["real"])
        walker.walk(str(self.test_root))

        assert str(link) in self.emitted
        assert not any("inside.txt" in path for path in self.emitted)

    def test_hidden_symlinked_directory_rejected(self):
        self._symlink_dir(".link.txt")

        walker = self._walker(globs=["*.txt"], excludes=["real"])
        walker.walk(str(self.test_root))

        assert not any(".link.txt" in path for path in self.emitted)

    @pytest.mark.skipif(os.name == "nt", reason="'*' is not allowed in Windows file names")
    def test_escaped_glob_matches_literally(self):
        """Test that a backslash-escaped star only matches a literal star."""
        _touch(self.test_root / "a*b")
        _touch(self.test_root / "aXb")

        walker = self._walker(globs=[r"a\*b"])
        walker.walk(str(self.test_root))

        assert self.emitted == [str(self.test_root / "a*b")]

    def test_each_match_emitted_once(self):
        walker = self._walker()
        walker.walk(str(self.test_root))

        assert len(self.emitted) == len(set(self.emitted))

    def test_idempotent(self):
        """Test that walking an unchanged tree twice gives the same set."""
        first = []
        second = []
        config = SearchConfig(globs=["*.txt", "*.py"])

        FSWalker(config, first.append).walk(str(self.test_root))
        FSWalker(config, second.append).walk(str(self.test_root))

        assert set(first) == set(second)
        assert first

    def test_stats_tracking(self):
        """Test that statistics are properly tracked."""
        walker = self._walker(globs=["*.py"], excludes=["node_modules"])
        walker.walk(str(self.test_root))

        stats = walker.get_stats()

        assert stats["files_matched"] == 1
        assert stats["files_scanned"] == 4
        assert stats["directories_traversed"] == 3
        assert stats["directories_pruned"] == 3
        assert stats["errors"] == 0

    def test_reset_stats(self):
        walker = self._walker()
        walker.walk(str(self.test_root))
        walker.reset_stats()

        assert all(value == 0 for value in walker.get_stats().values())

    def test_walk_path(self):
        stats = walk_path(str(self.test_root), SearchConfig(globs=["b.py"]), self.emitted.append)

        assert self.emitted == [str(self.test_root / "sub" / "b.py")]
        assert stats["files_matched"] == 1


class TestFileEntry:
    """Test cases for the FileEntry model."""

    def test_from_path(self, tmp_path):
        target = tmp_path / "file.txt"
        target.write_text("x")

        entry = FileEntry.from_path(str(target))

        assert entry.path == str(target)
        assert entry.is_dir is False
        assert entry.modified_time.tzinfo is not None
        assert abs(entry.modified_time.timestamp() - target.stat().st_mtime) < 1e-3

    def test_from_path_directory(self, tmp_path):
        assert FileEntry.from_path(str(tmp_path)).is_dir is True

    def test_from_path_missing(self, tmp_path):
        assert FileEntry.from_path(str(tmp_path / "missing")) is None

    @pytest.mark.parametrize("path,name", [
        ("a.txt", "a.txt"),
        (os.path.join("dir", "a.txt"), "a.txt"),
        ("." + os.sep, "."),
        (".", "."),
        ("..", ".."),
        (os.path.join("dir", "sub") + os.sep, "sub"),
    ])
    def test_name(self, path, name):
        assert FileEntry(path).name == name
