"""Tests for local directory listing and sort policy."""

from __future__ import annotations

import os
import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from duxfiles.file_model import CachedFileInfo, SortMode, list_directory, sort_entries


def _info(name: str, modified: datetime | None = None, is_dir: bool = False) -> CachedFileInfo:
    return CachedFileInfo(path=Path("/x") / name, is_dir=is_dir, size=0, modified=modified, is_hidden=False)


class ListDirectoryTests(unittest.TestCase):
    def test_lists_directories_before_files_and_counts_hidden(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "b.txt").write_text("bb", encoding="utf-8")
            (root / "A.txt").write_text("a", encoding="utf-8")
            (root / "zdir").mkdir()
            (root / ".secret").write_text("s", encoding="utf-8")

            listing, error = list_directory(root, show_hidden=False)

            self.assertIsNone(error)
            self.assertEqual([info.name for info in listing.directories], ["zdir"])
            self.assertEqual([info.name for info in listing.files], ["A.txt", "b.txt"])
            self.assertEqual([info.name for info in listing.all_items], ["zdir", "A.txt", "b.txt"])
            self.assertEqual(listing.hidden_count, 1)
            self.assertEqual(listing.files[1].size, 2)

    def test_show_hidden_includes_dot_entries(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / ".secret").write_text("s", encoding="utf-8")

            listing, error = list_directory(root, show_hidden=True)

            self.assertIsNone(error)
            self.assertEqual([info.name for info in listing.files], [".secret"])
            self.assertTrue(listing.files[0].is_hidden)
            self.assertEqual(listing.hidden_count, 0)

    def test_missing_directory_reports_scan_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            listing, error = list_directory(Path(tmp) / "missing", show_hidden=False)
            self.assertIsInstance(error, FileNotFoundError)
            self.assertEqual(listing.all_items, [])

    def test_modified_sort_lists_newest_first(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            old = root / "old.txt"
            new = root / "new.txt"
            old.write_text("o", encoding="utf-8")
            new.write_text("n", encoding="utf-8")
            os.utime(old, (1_000_000, 1_000_000))
            os.utime(new, (2_000_000, 2_000_000))

            listing, _error = list_directory(root, show_hidden=False, sort_mode=SortMode.MODIFIED)

            self.assertEqual([info.name for info in listing.files], ["new.txt", "old.txt"])


class SortEntriesTests(unittest.TestCase):
    def test_name_sort_is_case_insensitive(self) -> None:
        items = [_info("beta"), _info("Alpha"), _info("gamma")]
        self.assertEqual([i.name for i in sort_entries(items, SortMode.NAME)], ["Alpha", "beta", "gamma"])

    def test_modified_sort_puts_undated_entries_last(self) -> None:
        items = [
            _info("undated"),
            _info("older", datetime(2020, 1, 1)),
            _info("newer", datetime(2024, 1, 1)),
        ]
        ordered = sort_entries(items, SortMode.MODIFIED)
        self.assertEqual([i.name for i in ordered], ["newer", "older", "undated"])

    def test_type_sort_groups_by_extension(self) -> None:
        items = [_info("b.txt"), _info("Makefile"), _info("a.md"), _info("c.md")]
        ordered = sort_entries(items, SortMode.TYPE)
        self.assertEqual([i.name for i in ordered], ["a.md", "c.md", "b.txt", "Makefile"])


if __name__ == "__main__":
    unittest.main()
