"""Back/forward history of visited directories.

Locations are resolved directory paths. Adjacent duplicates are suppressed
so repeated reloads never produce no-op back steps.
"""

from __future__ import annotations

from pathlib import Path

MAX_HISTORY = 256


def _normalized(path: Path) -> Path:
    try:
        return path.resolve()
    except OSError:
        return path


class NavigationHistory:
    """Bounded back/forward stacks for directory navigation."""

    def __init__(self, max_entries: int = MAX_HISTORY) -> None:
        self.max_entries = max(1, max_entries)
        self.back: list[Path] = []
        self.forward: list[Path] = []

    def _append_unique(self, stack: list[Path], location: Path) -> None:
        location = _normalized(location)
        if stack and stack[-1] == location:
            return
        stack.append(location)
        overflow = len(stack) - self.max_entries
        if overflow > 0:
            del stack[:overflow]

    def record(self, origin: Path) -> None:
        """Push the directory being left and drop forward history."""
        self._append_unique(self.back, origin)
        self.forward.clear()

    @property
    def can_go_back(self) -> bool:
        return bool(self.back)

    @property
    def can_go_forward(self) -> bool:
        return bool(self.forward)

    def go_back(self, current: Path) -> Path | None:
        current = _normalized(current)
        while self.back and self.back[-1] == current:
            self.back.pop()
        if not self.back:
            return None
        target = self.back.pop()
        self._append_unique(self.forward, current)
        return target

    def go_forward(self, current: Path) -> Path | None:
        current = _normalized(current)
        while self.forward and self.forward[-1] == current:
            self.forward.pop()
        if not self.forward:
            return None
        target = self.forward.pop()
        self._append_unique(self.back, current)
        return target

    def clear(self) -> None:
        self.back.clear()
        self.forward.clear()


__all__ = [
    "MAX_HISTORY",
    "NavigationHistory",
]
