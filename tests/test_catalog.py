"""Tests for the directory scan."""

import threading
from pathlib import Path

import pytest

from jbrowse.catalog import CatalogEntry, scan_catalog
from jbrowse.errors import CatalogError, WalkTimeout


@pytest.fixture
def tree(tmp_path):
    for rel in (
        "z.json",
        "a.json",
        "notes.txt",
        "sub/c.json",
        "sub/deeper/d.json",
        "sub/readme.md",
        "upper/E.JSON",
    ):
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("{}", encoding="utf-8")
    (tmp_path / "dir.json").mkdir()
    return tmp_path


class TestScanCatalog:
    def test_lexical_order_and_filter(self, tree):
        paths = [str(e.path).replace("\\", "/") for e in scan_catalog(tree)]
        assert paths == [
            "a.json",
            "sub/c.json",
            "sub/deeper/d.json",
            "z.json",
        ]

    def test_entries_are_relative(self, tree):
        entries = scan_catalog(tree)
        assert all(not e.path.is_absolute() for e in entries)
        assert entries[0] == CatalogEntry(Path("a.json"))
        assert entries[0].name == "a.json"

    def test_custom_extensions(self, tree):
        entries = scan_catalog(tree, extensions=(".md", ".txt"))
        assert [e.name for e in entries] == ["notes.txt", "readme.md"]

    def test_empty_directory(self, tmp_path):
        assert scan_catalog(tmp_path) == []

    def test_cancelled_scan_raises(self, tree):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(WalkTimeout):
            scan_catalog(tree, cancel=cancel)

    def test_expired_deadline_raises(self, tree):
        with pytest.raises(WalkTimeout):
            scan_catalog(tree, timeout=-1)

    def test_no_deadline(self, tree):
        assert len(scan_catalog(tree, timeout=None)) == 4

    def test_missing_root(self, tmp_path):
        with pytest.raises(CatalogError):
            scan_catalog(tmp_path / "missing")

    def test_timeout_status_message(self, tree):
        with pytest.raises(WalkTimeout) as info:
            scan_catalog(tree, timeout=-1)
        assert "Timed out" in info.value.status

    def test_extension_match_is_exact(self, tree):
        names = [e.name for e in scan_catalog(tree)]
        assert "E.JSON" not in names
        assert [e.name for e in scan_catalog(tree, extensions=(".JSON",))] == ["E.JSON"]
