#!/usr/bin/env python3
"""
Tests for directory traversal and filtering
"""

import os

import pytest

from lsext.counter import count_extensions
from lsext.walker import FileWalker, RootPathError


def make_tree(root, files):
    """Create files (relative paths) under root"""
    for name in files:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("x")


def names(paths):
    return sorted(os.path.basename(p) for p in paths)


@pytest.fixture(autouse=True)
def isolated_git_config(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))


def test_walks_recursively(tmp_path):
    root = tmp_path / "tree"
    make_tree(root, ["a.py", "b.py", "sub/c.txt", "sub/deeper/d.tar.gz", "README"])

    walker = FileWalker(root)
    found = list(walker.walk())

    assert names(found) == ["README", "a.py", "b.py", "c.txt", "d.tar.gz"]
    assert walker.files_found == 5
    assert count_extensions(found) == {"py": 2, "txt": 1, "gz": 1, "<no extension>": 1}


def test_skips_hidden_entries_unless_all(tmp_path):
    root = tmp_path / "tree"
    make_tree(root, [".env", ".hidden/inside.txt", "visible.txt"])

    assert names(FileWalker(root).walk()) == ["visible.txt"]
    assert names(FileWalker(root, include_all=True).walk()) == [".env", "inside.txt", "visible.txt"]


def test_only_hidden_files(tmp_path):
    root = tmp_path / "tree"
    make_tree(root, [".a", ".b.txt", ".dir/c.md"])

    assert list(FileWalker(root).walk()) == []
    assert len(list(FileWalker(root, include_all=True).walk())) == 3


def test_gitignore_respected_inside_repository(tmp_path):
    root = tmp_path / "repo"
    make_tree(root, ["main.py", "debug.log", "build/out.o", "src/lib.py", "src/trace.log"])
    (root / ".git").mkdir()
    (root / ".gitignore").write_text("*.log\nbuild/\n")

    assert names(FileWalker(root).walk()) == ["lib.py", "main.py"]
    # --all also counts .git contents and the ignore file itself
    all_files = names(FileWalker(root, include_all=True).walk())
    assert "debug.log" in all_files and "out.o" in all_files and ".gitignore" in all_files


def test_gitignore_ignored_outside_repository(tmp_path):
    root = tmp_path / "plain"
    make_tree(root, ["main.py", "debug.log"])
    (root / ".gitignore").write_text("*.log\n")

    assert names(FileWalker(root).walk()) == ["debug.log", "main.py"]


def test_ignore_file_and_negation(tmp_path):
    root = tmp_path / "plain"
    make_tree(root, ["a.log", "keep.log", "data/big.csv", "data/small.csv"])
    (root / ".ignore").write_text("*.log\n!keep.log\n")
    (root / "data" / ".ignore").write_text("big.*\n")

    assert names(FileWalker(root).walk()) == ["keep.log", "small.csv"]


def test_ignored_directory_is_pruned(tmp_path):
    root = tmp_path / "plain"
    make_tree(root, ["node_modules/pkg/index.js", "node_modules/pkg/deep/x.js", "app.js"])
    (root / ".ignore").write_text("node_modules/\n")

    assert names(FileWalker(root).walk()) == ["app.js"]


def test_ancestor_gitignore_applies_to_subdirectory_root(tmp_path):
    repo = tmp_path / "repo"
    make_tree(repo, ["pkg/mod.py", "pkg/mod.pyc"])
    (repo / ".git").mkdir()
    (repo / ".gitignore").write_text("*.pyc\n")

    assert names(FileWalker(repo / "pkg").walk()) == ["mod.py"]


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_symlinks_are_not_counted_or_followed(tmp_path):
    root = tmp_path / "tree"
    make_tree(root, ["real.txt", "elsewhere/other.txt"])
    os.symlink(root / "real.txt", root / "link.txt")
    os.symlink(root / "elsewhere", root / "linked_dir")
    os.symlink(root / "missing.txt", root / "broken.txt")

    assert names(FileWalker(root).walk()) == ["other.txt", "real.txt"]


def test_unreadable_subdirectory_is_skipped(tmp_path, monkeypatch):
    root = tmp_path / "tree"
    make_tree(root, ["ok.py", "locked/secret.py"])
    locked = str(root / "locked")
    real_scandir = os.scandir

    def fake_scandir(path="."):
        if os.fspath(path) == locked:
            raise PermissionError(13, "Permission denied", locked)
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", fake_scandir)

    walker = FileWalker(root)
    assert names(walker.walk()) == ["ok.py"]
    assert walker.skipped_errors == 1


def test_unreadable_root_is_fatal(tmp_path, monkeypatch):
    root = tmp_path / "tree"
    make_tree(root, ["ok.py"])
    real_scandir = os.scandir

    def fake_scandir(path="."):
        if os.fspath(path) == str(root):
            raise PermissionError(13, "Permission denied", str(root))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", fake_scandir)

    with pytest.raises(RootPathError):
        list(FileWalker(root).walk())


def test_missing_root_raises(tmp_path):
    with pytest.raises(RootPathError, match="does not exist"):
        list(FileWalker(tmp_path / "nope").walk())


def test_file_root_counts_itself(tmp_path):
    target = tmp_path / "single.md"
    target.write_text("x")

    assert names(FileWalker(target).walk()) == ["single.md"]


def test_total_matches_files_visited(tmp_path):
    root = tmp_path / "tree"
    files = [f"d{i % 3}/f{i}.{ext}" for i, ext in enumerate(["a", "b", "c", "a", "a", "b", "z", "", "q"])]
    make_tree(root, files)

    walker = FileWalker(root)
    frequencies = count_extensions(walker.walk())
    assert sum(frequencies.values()) == walker.files_found == len(files)
