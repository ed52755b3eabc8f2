"""Tests for recursive name search with fd and the os.walk fallback."""

from __future__ import annotations

import io
import tempfile
import threading
import unittest
from pathlib import Path
from unittest import mock

from duxfiles import search


class FakeProc:
    def __init__(self, stdout_text: str, returncode: int, stderr_text: str = "") -> None:
        self.stdout = io.StringIO(stdout_text)
        self.returncode = returncode
        self._stderr_text = stderr_text
        self.killed = False

    def poll(self):
        return self.returncode

    def kill(self) -> None:
        self.killed = True

    def communicate(self):
        return "", self._stderr_text


class WalkSearchTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.root = Path(tmp.name).resolve()
        (self.root / "Reports").mkdir()
        (self.root / "Reports" / "report-2024.txt").write_text("", encoding="utf-8")
        (self.root / "a_report.md").write_text("", encoding="utf-8")
        (self.root / ".hidden").mkdir()
        (self.root / ".hidden" / "report.secret").write_text("", encoding="utf-8")
        (self.root / "unrelated.txt").write_text("", encoding="utf-8")
        patcher = mock.patch("duxfiles.search._find_fd", return_value=None)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_matches_case_insensitively_with_directories_first(self) -> None:
        results, error = search.search_names(self.root, "REPORT", show_hidden=False)

        self.assertIsNone(error)
        self.assertEqual([info.name for info in results], ["Reports", "a_report.md", "report-2024.txt"])
        self.assertTrue(results[0].is_dir)

    def test_hidden_entries_need_show_hidden(self) -> None:
        results, _error = search.search_names(self.root, "secret", show_hidden=False)
        self.assertEqual(results, [])

        results, _error = search.search_names(self.root, "secret", show_hidden=True)
        self.assertEqual([info.name for info in results], ["report.secret"])

    def test_max_results_caps_output(self) -> None:
        results, _error = search.search_names(self.root, "report", show_hidden=True, max_results=2)
        self.assertEqual(len(results), 2)

    def test_blank_query_and_bad_root(self) -> None:
        self.assertEqual(search.search_names(self.root, "  ", show_hidden=False), ([], None))
        results, error = search.search_names(self.root / "unrelated.txt", "x", show_hidden=False)
        self.assertEqual(results, [])
        self.assertIsNotNone(error)

    def test_cancelled_search_returns_nothing(self) -> None:
        event = threading.Event()
        event.set()
        self.assertEqual(search.search_names(self.root, "report", False, cancel_event=event), ([], None))


class FdSearchTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.root = Path(tmp.name).resolve()
        (self.root / "zeta.txt").write_text("", encoding="utf-8")
        (self.root / "Alpha").mkdir()
        patcher = mock.patch("duxfiles.search._find_fd", return_value="/usr/bin/fd")
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_builds_fixed_string_command_and_sorts_output(self) -> None:
        stdout = f"{self.root / 'zeta.txt'}\n{self.root / 'Alpha'}/\n{self.root / 'vanished.txt'}\n"
        with mock.patch("duxfiles.search.subprocess.Popen", return_value=FakeProc(stdout, 0)) as popen:
            results, error = search.search_names(self.root, "a", show_hidden=False, max_results=5)

        self.assertIsNone(error)
        self.assertEqual([info.name for info in results], ["Alpha", "zeta.txt"])
        cmd = popen.call_args.args[0]
        self.assertEqual(cmd[:3], ["/usr/bin/fd", "--max-results", "5"])
        self.assertIn("--fixed-strings", cmd)
        self.assertNotIn("--hidden", cmd)
        self.assertEqual(cmd[-3:], ["--", "a", str(self.root)])

    def test_show_hidden_adds_flags(self) -> None:
        with mock.patch("duxfiles.search.subprocess.Popen", return_value=FakeProc("", 1)) as popen:
            results, error = search.search_names(self.root, "a", show_hidden=True)

        self.assertEqual((results, error), ([], None))
        cmd = popen.call_args.args[0]
        self.assertIn("--hidden", cmd)
        self.assertIn("--no-ignore", cmd)

    def test_fd_failure_is_reported(self) -> None:
        proc = FakeProc(f"{self.root / 'zeta.txt'}\n", 2, stderr_text="error: bad pattern")
        with mock.patch("duxfiles.search.subprocess.Popen", return_value=proc):
            results, error = search.search_names(self.root, "a", show_hidden=False)

        self.assertEqual(results, [])
        self.assertEqual(error, "error: bad pattern")

    def test_fd_spawn_error_is_reported(self) -> None:
        with mock.patch("duxfiles.search.subprocess.Popen", side_effect=OSError("exec format error")):
            results, error = search.search_names(self.root, "a", show_hidden=False)
        self.assertEqual(results, [])
        assert error is not None
        self.assertIn("failed to run fd", error)


if __name__ == "__main__":
    unittest.main()
