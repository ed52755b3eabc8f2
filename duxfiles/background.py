"""Latest-request-wins background scheduler.

Search, folder-size computation and device listings all follow the same
shape: the foreground asks for work, a newer request supersedes an older one,
and completed values are posted back through a queue that the foreground
drains. Only the newest request's result is ever reported as current.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from queue import Empty, Queue
from typing import Generic, TypeVar

P = TypeVar("P")
R = TypeVar("R")


@dataclass(frozen=True)
class BackgroundRequest(Generic[P]):
    """One unit of scheduled work plus its cancellation flag."""

    request_id: int
    payload: P
    cancel_event: threading.Event = field(default_factory=threading.Event, compare=False)

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()


@dataclass(frozen=True)
class BackgroundResult(Generic[P, R]):
    """Completed work posted back to the foreground.

    ``error`` is set instead of ``value`` when the job raised.
    """

    request: BackgroundRequest[P]
    value: R | None = None
    error: Exception | None = None


class LatestRequestScheduler(Generic[P, R]):
    """Single-worker scheduler where the newest request always wins.

    ``debounce_seconds`` delays the start of work; every new ``schedule`` call
    restarts the delay. Superseded requests are cancelled through their event,
    and results of cancelled requests are dropped instead of posted.
    """

    def __init__(
        self,
        run: Callable[[BackgroundRequest[P]], R],
        *,
        name: str,
        debounce_seconds: float = 0.0,
    ) -> None:
        self._run = run
        self._name = name
        self.debounce_seconds = max(0.0, debounce_seconds)
        self._lock = threading.Lock()
        self._pending: BackgroundRequest[P] | None = None
        self._active: BackgroundRequest[P] | None = None
        self._timer: threading.Timer | None = None
        self._running = False
        self._next_request_id = 1
        self._latest_request_id = 0
        self._results: Queue[BackgroundResult[P, R]] = Queue()

    @property
    def latest_request_id(self) -> int:
        with self._lock:
            return self._latest_request_id

    def is_current(self, request: BackgroundRequest[P]) -> bool:
        """Return whether ``request`` is the newest one and was not cancelled."""
        with self._lock:
            return request.request_id == self._latest_request_id and not request.cancelled

    def schedule(self, payload: P) -> int:
        """Queue/replace pending work, cancel older work, and return request id."""
        with self._lock:
            request_id = self._next_request_id
            self._next_request_id += 1
            self._latest_request_id = request_id
            self._cancel_locked()
            self._pending = BackgroundRequest(request_id=request_id, payload=payload)
            if self.debounce_seconds > 0:
                timer = threading.Timer(self.debounce_seconds, self._start_worker, args=(request_id,))
                timer.daemon = True
                self._timer = timer
                timer.start()
                return request_id
        self._start_worker()
        return request_id

    def cancel(self) -> None:
        """Cancel pending and running work; nothing scheduled so far is reported."""
        with self._lock:
            self._latest_request_id = self._next_request_id
            self._next_request_id += 1
            self._cancel_locked()
            self._pending = None

    def _cancel_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._pending is not None:
            self._pending.cancel_event.set()
        if self._active is not None:
            self._active.cancel_event.set()

    def _start_worker(self, debounced_request_id: int | None = None) -> None:
        with self._lock:
            if debounced_request_id is not None:
                # A timer that lost the race against a newer schedule() is stale.
                if self._pending is None or self._pending.request_id != debounced_request_id:
                    return
                self._timer = None
            if self._running or self._pending is None:
                return
            self._running = True

        worker = threading.Thread(target=self._worker, name=self._name, daemon=True)
        worker.start()

    def _worker(self) -> None:
        while True:
            with self._lock:
                request = self._pending
                self._pending = None
                if request is None or self._timer is not None:
                    # A debounce window is open again; the timer restarts us.
                    if request is not None:
                        self._pending = request
                    self._active = None
                    self._running = False
                    return
                self._active = request

            if request.cancelled:
                continue
            try:
                value = self._run(request)
            except Exception as exc:
                result: BackgroundResult[P, R] = BackgroundResult(request=request, error=exc)
            else:
                result = BackgroundResult(request=request, value=value)
            if request.cancelled:
                continue
            self._results.put(result)

    def drain_results(self) -> list[BackgroundResult[P, R]]:
        """Drain completed results, dropping those superseded in the meantime."""
        out: list[BackgroundResult[P, R]] = []
        while True:
            try:
                result = self._results.get_nowait()
            except Empty:
                break
            if not self.is_current(result.request):
                continue
            out.append(result)
        return out


__all__ = [
    "BackgroundRequest",
    "BackgroundResult",
    "LatestRequestScheduler",
]
