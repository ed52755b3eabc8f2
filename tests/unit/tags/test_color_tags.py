"""Tests for the persisted color-tag store."""

from __future__ import annotations

import json
import random
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from duxfiles.notifications import NotificationCenter, NotificationLevel
from duxfiles.tags import ColorTagManager, TagColor, TaggedFile, collapse_home


class ColorTagManagerTests(unittest.TestCase):
    def test_count_matches_list_after_random_mutations(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            manager = ColorTagManager(Path(tmp) / "tags.json")
            rng = random.Random(7)
            paths = [f"/data/file-{index}.txt" for index in range(6)]
            for _ in range(200):
                color = rng.choice(list(TagColor))
                path = rng.choice(paths)
                if rng.random() < 0.6:
                    manager.add(path, color)
                else:
                    manager.remove(path, color)
                for check in TagColor:
                    self.assertEqual(manager.count(check), len(manager.list(check)))

    def test_reload_yields_identical_counts_and_lists(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = Path(tmp) / "tags.json"
            manager = ColorTagManager(store)
            manager.add("/data/b.txt", TagColor.RED)
            manager.add("/data/a.txt", TagColor.RED)
            manager.add("/data/a.txt", TagColor.GREEN)
            self.assertTrue(manager.save())

            reloaded = ColorTagManager(store)

            for color in TagColor:
                self.assertEqual(reloaded.count(color), manager.count(color))
                self.assertEqual(reloaded.list(color), manager.list(color))

    def test_persisted_format_maps_color_names_to_paths(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = Path(tmp) / "nested" / "tags.json"
            manager = ColorTagManager(store)
            manager.add("/data/a.txt", TagColor.BLUE)

            raw = json.loads(store.read_text(encoding="utf-8"))

            self.assertEqual(raw["blue"], ["/data/a.txt"])
            self.assertEqual(raw["red"], [])

    def test_version_counts_only_effective_changes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            manager = ColorTagManager(Path(tmp) / "tags.json")
            manager.add("/data/a.txt", TagColor.RED)
            manager.add("/data/a.txt", TagColor.RED)
            self.assertEqual(manager.version, 1)
            manager.add("/data/a.txt", TagColor.BLUE)
            self.assertTrue(manager.remove_all("/data/a.txt"))
            self.assertEqual(manager.version, 3)
            self.assertFalse(manager.remove_all("/data/a.txt"))
            self.assertFalse(manager.remove("/data/a.txt", TagColor.RED))
            self.assertEqual(manager.version, 3)

    def test_toggle_returns_new_state_and_colors_for_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            manager = ColorTagManager(Path(tmp) / "tags.json")
            self.assertTrue(manager.toggle("/data/a.txt", TagColor.ORANGE))
            manager.add("/data/a.txt", TagColor.RED)
            self.assertEqual(manager.colors_for_file("/data/a.txt"), {TagColor.ORANGE, TagColor.RED})
            self.assertFalse(manager.toggle("/data/a.txt", TagColor.ORANGE))
            self.assertTrue(manager.is_tagged("/data/a.txt", TagColor.RED))
            self.assertEqual(manager.total_count, 1)

    def test_malformed_store_loads_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = Path(tmp) / "tags.json"
            store.write_text("{not json", encoding="utf-8")
            manager = ColorTagManager(store)
            self.assertEqual(manager.total_count, 0)

            store.write_text(json.dumps({"red": ["/a", 3, ""], "purple": ["/b"], "blue": "x"}), encoding="utf-8")
            manager = ColorTagManager(store)
            self.assertEqual(manager.list(TagColor.RED), ["/a"])
            self.assertEqual(manager.total_count, 1)

    def test_failed_save_keeps_memory_and_notifies(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "blocker"
            blocker.write_text("", encoding="utf-8")
            notifications = NotificationCenter()
            manager = ColorTagManager(blocker / "tags.json", notifications=notifications)

            self.assertTrue(manager.add("/data/a.txt", TagColor.RED))

            self.assertEqual(manager.list(TagColor.RED), ["/data/a.txt"])
            current = notifications.current()
            assert current is not None
            self.assertEqual(current.level, NotificationLevel.ERROR)

    def test_files_for_color_sorts_by_name_and_reports_existence(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "beta.txt").write_text("", encoding="utf-8")
            (root / "Alpha").mkdir()
            manager = ColorTagManager(root / "tags.json")
            manager.add(root / "beta.txt", TagColor.GREEN)
            manager.add(root / "gone.txt", TagColor.GREEN)
            manager.add(root / "Alpha", TagColor.GREEN)

            rows = manager.files_for_color(TagColor.GREEN)

            self.assertEqual([row.name for row in rows], ["Alpha", "beta.txt", "gone.txt"])
            self.assertEqual([row.exists for row in rows], [True, True, False])
            self.assertTrue(rows[0].is_dir)


class TaggedFileTests(unittest.TestCase):
    def test_parent_path_collapses_home(self) -> None:
        with mock.patch("pathlib.Path.home", return_value=Path("/home/user")):
            nested = TaggedFile(path=Path("/home/user/docs/a.txt"), exists=True, is_dir=False)
            at_home = TaggedFile(path=Path("/home/user/a.txt"), exists=True, is_dir=False)
            outside = TaggedFile(path=Path("/srv/a.txt"), exists=False, is_dir=False)
            self.assertEqual(nested.parent_path, "~/docs")
            self.assertEqual(at_home.parent_path, "~")
            self.assertEqual(outside.parent_path, "/srv")
            self.assertEqual(nested.id, "/home/user/docs/a.txt")
            self.assertEqual(nested.name, "a.txt")

    def test_collapse_home_does_not_match_sibling_prefix(self) -> None:
        with mock.patch("pathlib.Path.home", return_value=Path("/home/user")):
            self.assertEqual(collapse_home("/home/username/x"), "/home/username/x")

    def test_collapse_home_leaves_paths_alone_when_home_is_root(self) -> None:
        with mock.patch("pathlib.Path.home", return_value=Path("/")):
            self.assertEqual(collapse_home("/etc"), "/etc")
            self.assertEqual(collapse_home("/"), "~")


if __name__ == "__main__":
    unittest.main()
