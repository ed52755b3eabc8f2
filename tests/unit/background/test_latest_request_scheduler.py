"""Tests for the latest-request-wins background scheduler."""

from __future__ import annotations

import threading
import time
import unittest

from duxfiles.background import BackgroundRequest, LatestRequestScheduler


def _wait_for_results(
    scheduler: LatestRequestScheduler,
    *,
    expected_count: int,
    timeout_seconds: float = 2.0,
) -> list:
    deadline = time.monotonic() + timeout_seconds
    out: list = []
    while time.monotonic() < deadline:
        out.extend(scheduler.drain_results())
        if len(out) >= expected_count:
            break
        time.sleep(0.01)
    return out


class LatestRequestSchedulerTests(unittest.TestCase):
    def test_runs_job_in_background_and_posts_value(self) -> None:
        scheduler: LatestRequestScheduler[int, int] = LatestRequestScheduler(
            lambda request: request.payload * 2,
            name="test-double",
        )
        request_id = scheduler.schedule(21)

        results = _wait_for_results(scheduler, expected_count=1)

        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].value, 42)
        self.assertEqual(results[0].request.request_id, request_id)

    def test_pending_requests_collapse_to_latest(self) -> None:
        calls: list[int] = []
        first_started = threading.Event()
        allow_first_finish = threading.Event()

        def run(request: BackgroundRequest[int]) -> int:
            if request.payload == 1:
                first_started.set()
                allow_first_finish.wait(timeout=1.0)
            calls.append(request.payload)
            return request.payload

        scheduler: LatestRequestScheduler[int, int] = LatestRequestScheduler(run, name="test-collapse")
        scheduler.schedule(1)
        self.assertTrue(first_started.wait(timeout=1.0))
        scheduler.schedule(2)
        scheduler.schedule(3)
        allow_first_finish.set()

        results = _wait_for_results(scheduler, expected_count=1)

        self.assertEqual([result.value for result in results], [3])
        self.assertEqual(calls, [1, 3])

    def test_debounce_only_runs_last_request_in_window(self) -> None:
        calls: list[str] = []
        scheduler: LatestRequestScheduler[str, str] = LatestRequestScheduler(
            lambda request: calls.append(request.payload) or request.payload,
            name="test-debounce",
            debounce_seconds=0.05,
        )
        scheduler.schedule("a")
        scheduler.schedule("ab")

        results = _wait_for_results(scheduler, expected_count=1)

        self.assertEqual([result.value for result in results], ["ab"])
        self.assertEqual(calls, ["ab"])

    def test_job_errors_are_posted_as_results(self) -> None:
        def run(_request: BackgroundRequest[int]) -> int:
            raise ValueError("boom")

        scheduler: LatestRequestScheduler[int, int] = LatestRequestScheduler(run, name="test-error")
        scheduler.schedule(1)

        results = _wait_for_results(scheduler, expected_count=1)

        self.assertEqual(len(results), 1)
        self.assertIsInstance(results[0].error, ValueError)
        self.assertIsNone(results[0].value)

    def test_cancel_marks_running_request_and_drops_its_result(self) -> None:
        started = threading.Event()
        observed_cancel = threading.Event()

        def run(request: BackgroundRequest[int]) -> int:
            started.set()
            if request.cancel_event.wait(timeout=1.0):
                observed_cancel.set()
            return request.payload

        scheduler: LatestRequestScheduler[int, int] = LatestRequestScheduler(run, name="test-cancel")
        scheduler.schedule(1)
        self.assertTrue(started.wait(timeout=1.0))
        scheduler.cancel()

        self.assertTrue(observed_cancel.wait(timeout=1.0))
        time.sleep(0.05)
        self.assertEqual(scheduler.drain_results(), [])


if __name__ == "__main__":
    unittest.main()
