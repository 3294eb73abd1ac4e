"""
Tests for the processed-set store.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from newsrelay.state.store import ProcessedSetStore

if TYPE_CHECKING:
    from pathlib import Path

    import pytest

FP_A = "a" * 64
FP_B = "b" * 64
FP_C = "c" * 64


class TestLoad:
    """Tests for ProcessedSetStore.load."""

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        store = ProcessedSetStore(tmp_path / "missing.json")
        assert store.load() == set()

    def test_empty_file_is_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("   \n")
        assert ProcessedSetStore(path).load() == set()

    def test_corrupt_file_is_empty_with_warning(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = tmp_path / "state.json"
        path.write_text("[not json")

        with caplog.at_level(logging.WARNING, logger="newsrelay.state.store"):
            result = ProcessedSetStore(path).load()

        assert result == set()
        assert any("Unable to parse" in r.message for r in caplog.records)

    def test_non_array_is_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text('{"ids": []}')
        assert ProcessedSetStore(path).load() == set()

    def test_non_string_entries_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text(f'["{FP_A}", 42, null]')
        assert ProcessedSetStore(path).load() == {FP_A}

    def test_directory_path_is_empty(self, tmp_path: Path) -> None:
        """Unreadable path falls back to empty set."""
        assert ProcessedSetStore(tmp_path).load() == set()


class TestSave:
    """Tests for ProcessedSetStore.save."""

    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "dir" / "state.json"
        ProcessedSetStore(path).save({FP_A})
        assert path.exists()

    def test_pretty_printed_with_trailing_newline(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        ProcessedSetStore(path).save({FP_B, FP_A})
        assert path.read_text(encoding="utf-8") == f'[\n  "{FP_A}",\n  "{FP_B}"\n]\n'

    def test_overwrites_previous_content(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        store = ProcessedSetStore(path)
        store.save({FP_A, FP_B})
        store.save({FP_C})
        assert store.load() == {FP_C}

    def test_save_load_save_is_stable(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        store = ProcessedSetStore(path)

        store.save({FP_C, FP_A, FP_B})
        first = path.read_bytes()
        store.save(store.load())

        assert path.read_bytes() == first

    def test_empty_set(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        store = ProcessedSetStore(path)
        store.save(set())
        assert path.read_text() == "[]\n"
        assert store.load() == set()

    def test_reads_legacy_unsorted_file(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text(f'[\n  "{FP_B}",\n  "{FP_A}"\n]\n')
        assert ProcessedSetStore(path).load() == {FP_A, FP_B}
