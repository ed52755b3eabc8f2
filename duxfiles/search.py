"""Recursive file-name search below a directory.

Prefers ``fd`` when it is on ``PATH`` and falls back to an ``os.walk``
substring scan otherwise. Both honor the hidden-file policy, cap the number
of results and stop early once a cancel event is set.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import threading
from pathlib import Path

from .file_model import CachedFileInfo, cached_info_for_path, is_hidden_name

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 200
FD_EXECUTABLES = ("fd", "fdfind")


def _find_fd() -> str | None:
    for name in FD_EXECUTABLES:
        found = shutil.which(name)
        if found is not None:
            return found
    return None


def sort_search_results(results: list[CachedFileInfo]) -> list[CachedFileInfo]:
    """Directories first, then case-insensitive name."""
    return sorted(results, key=lambda info: (not info.is_dir, info.name.casefold(), str(info.path)))


def _search_fd(
    executable: str,
    root: Path,
    query: str,
    show_hidden: bool,
    max_results: int,
    cancel_event: threading.Event | None,
) -> tuple[list[CachedFileInfo], str | None]:
    cmd = [executable, "--max-results", str(max_results), "--color", "never", "--absolute-path"]
    if show_hidden:
        cmd.extend(["--hidden", "--no-ignore"])
    cmd.extend(["--fixed-strings", "--ignore-case", "--", query, os.fspath(root)])

    try:
        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as exc:
        return [], f"failed to run fd: {exc}"

    results: list[CachedFileInfo] = []
    cancelled = False
    stderr_text = ""
    try:
        assert proc.stdout is not None
        for raw in proc.stdout:
            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
                break
            line = raw.rstrip("\r\n")
            if not line:
                continue
            info = cached_info_for_path(Path(line.rstrip(os.sep) or line))
            if info is not None:
                results.append(info)
    finally:
        if cancelled and proc.poll() is None:
            proc.kill()
        _stdout_unused, stderr_text = proc.communicate()

    if cancelled:
        return [], None
    if proc.returncode not in (0, 1):
        return [], stderr_text.strip() or f"fd failed with exit code {proc.returncode}"
    return results, None


def _search_walk(
    root: Path,
    query: str,
    show_hidden: bool,
    max_results: int,
    cancel_event: threading.Event | None,
) -> tuple[list[CachedFileInfo], str | None]:
    needle = query.casefold()
    results: list[CachedFileInfo] = []
    for dirpath, dirnames, filenames in os.walk(root):
        if cancel_event is not None and cancel_event.is_set():
            return [], None
        if not show_hidden:
            dirnames[:] = [name for name in dirnames if not is_hidden_name(name)]
            filenames = [name for name in filenames if not is_hidden_name(name)]
        dirnames.sort(key=str.casefold)
        base = Path(dirpath)
        for name in sorted(dirnames + filenames, key=str.casefold):
            if needle not in name.casefold():
                continue
            info = cached_info_for_path(base / name)
            if info is None:
                continue
            results.append(info)
            if len(results) >= max_results:
                return results, None
    return results, None


def search_names(
    root: Path,
    query: str,
    show_hidden: bool,
    max_results: int = DEFAULT_MAX_RESULTS,
    cancel_event: threading.Event | None = None,
) -> tuple[list[CachedFileInfo], str | None]:
    """Find entries below ``root`` whose name contains ``query``.

    Returns ``(results, error)``; ``error`` is a message and ``results`` is
    empty when the search could not run. A cancelled search returns no
    results and no error.
    """
    query = query.strip()
    if not query:
        return [], None
    if not root.is_dir():
        return [], f"not a directory: {root}"

    max_results = max(1, max_results)
    executable = _find_fd()
    if executable is not None:
        results, error = _search_fd(executable, root, query, show_hidden, max_results, cancel_event)
    else:
        logger.debug("fd not found, scanning %s with os.walk", root)
        results, error = _search_walk(root, query, show_hidden, max_results, cancel_event)
    if error is not None:
        return [], error
    return sort_search_results(results), None


__all__ = [
    "DEFAULT_MAX_RESULTS",
    "search_names",
    "sort_search_results",
]
