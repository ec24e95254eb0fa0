"""Tests for filesystem and URL helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from docsite.cache import dump_json, hash_text
from docsite.errors import DocsiteError
from docsite.utils import clean_output_dir, copy_tree, join_url, parse_bool, search_excluded, walk_tree


def test_walk_tree_is_sorted_and_filtered(tmp_path: Path) -> None:
    """Test stable traversal order and filtering."""
    (tmp_path / "b").mkdir()
    for name in ("z.md", "a.txt", "b/c.md"):
        (tmp_path / name).write_text(name, encoding="utf-8")

    found = [p.relative_to(tmp_path).as_posix() for p in walk_tree(tmp_path, lambda p: p.suffix == ".md")]

    assert found == ["b/c.md", "z.md"]


def test_walk_tree_missing_root(tmp_path: Path) -> None:
    """Test that a missing root yields nothing."""
    assert list(walk_tree(tmp_path / "missing")) == []


def test_copy_tree(tmp_path: Path) -> None:
    """Test copying nested files."""
    src = tmp_path / "src"
    (src / "img").mkdir(parents=True)
    (src / "img" / "logo.svg").write_text("<svg/>", encoding="utf-8")

    count = copy_tree(src, tmp_path / "out")

    assert count == 1
    assert (tmp_path / "out" / "img" / "logo.svg").read_text(encoding="utf-8") == "<svg/>"


def test_clean_output_dir(tmp_path: Path) -> None:
    """Test removal of the output directory inside the project."""
    output = tmp_path / "dist"
    output.mkdir()
    (output / "old.html").write_text("old", encoding="utf-8")

    clean_output_dir(output, tmp_path)

    assert not output.exists()


def test_clean_output_dir_refuses_project_root(tmp_path: Path) -> None:
    """Test that the project root and outside directories are never removed."""
    with pytest.raises(DocsiteError):
        clean_output_dir(tmp_path, tmp_path)
    outside = tmp_path / "outside"
    outside.mkdir()
    with pytest.raises(DocsiteError):
        clean_output_dir(outside, tmp_path / "project")


def test_join_url() -> None:
    """Test URL joining."""
    assert join_url("/", "/a.html") == "/a.html"
    assert join_url("/docs/", "a.html") == "/docs/a.html"
    assert join_url("/", "") == "/"
    assert join_url("/docs/", "//cdn.example.com/x.js") == "//cdn.example.com/x.js"


def test_parse_bool() -> None:
    """Test truthy string parsing."""
    assert parse_bool("yes") is True
    assert parse_bool("off") is False
    assert parse_bool(None) is False
    assert parse_bool(1) is True


def test_search_excluded() -> None:
    """Test both search opt-out flags."""
    assert search_excluded({"excludeFromSearch": True}) is True
    assert search_excluded({"searchable": False}) is True
    assert search_excluded({"searchable": True}) is False
    assert search_excluded({}) is False
    assert search_excluded(None) is False


def test_hash_is_stable_for_key_order() -> None:
    """Test that serialized hashes ignore mapping insertion order."""
    assert hash_text(dump_json({"a": 1, "b": 2})) == hash_text(dump_json({"b": 2, "a": 1}))
