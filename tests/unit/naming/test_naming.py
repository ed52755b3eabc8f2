"""Tests for conflict-free destination naming."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from duxfiles.naming import split_name, unique_child_name, unique_destination


class UniqueDestinationTests(unittest.TestCase):
    def test_free_name_is_returned_unchanged(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            self.assertEqual(unique_destination(root, "file.txt"), root / "file.txt")

    def test_probes_from_two_upward_before_the_extension(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "doc.pdf").write_bytes(b"1")
            (root / "doc 2.pdf").write_bytes(b"2")
            self.assertEqual(unique_destination(root, "doc.pdf"), root / "doc 3.pdf")

    def test_directories_and_extensionless_names_get_plain_counter(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "photos.2024").mkdir()
            (root / "README").write_text("", encoding="utf-8")
            self.assertEqual(unique_destination(root, "photos.2024", is_dir=True), root / "photos.2024 2")
            self.assertEqual(unique_destination(root, "README"), root / "README 2")

    def test_is_deterministic_and_never_creates_entries(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "a.txt").write_text("", encoding="utf-8")
            first = unique_destination(root, "a.txt")
            second = unique_destination(root, "a.txt")
            self.assertEqual(first, second)
            self.assertEqual(sorted(p.name for p in root.iterdir()), ["a.txt"])


class SplitAndChildNameTests(unittest.TestCase):
    def test_split_name_keeps_dotfiles_whole(self) -> None:
        self.assertEqual(split_name(".bashrc"), (".bashrc", ""))
        self.assertEqual(split_name("archive.tar.gz"), ("archive.tar", ".gz"))
        self.assertEqual(split_name("dir.d", is_dir=True), ("dir.d", ""))

    def test_unique_child_name_counts_from_start(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            self.assertEqual(unique_child_name(root, "New Folder"), root / "New Folder")
            (root / "New Folder").mkdir()
            self.assertEqual(unique_child_name(root, "New Folder"), root / "New Folder 1")
            (root / "untitled.txt").write_text("", encoding="utf-8")
            self.assertEqual(unique_child_name(root, "untitled", ".txt"), root / "untitled 1.txt")
            (root / "a copy.txt").write_text("", encoding="utf-8")
            self.assertEqual(unique_child_name(root, "a copy", ".txt", start=2), root / "a copy 2.txt")


if __name__ == "__main__":
    unittest.main()
