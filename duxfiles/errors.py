"""Error taxonomy shared by listing, selection, tag and device operations.

Batch operations record these per item; navigation and persistence report
them as notifications. ``from_os_error`` maps filesystem exceptions into the
taxonomy so callers only ever branch on ``DuxError`` subclasses.
"""

from __future__ import annotations

import errno


class DuxError(Exception):
    """Base class for recoverable file-manager failures."""

    def __init__(self, message: str, path: object | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.message}: {self.path}"


class NotFound(DuxError):
    """Path, device or app no longer exists."""


class PermissionDenied(DuxError):
    pass


class AlreadyExists(DuxError):
    """Naming conflict that was not auto-resolved."""


class DeviceUnavailable(DuxError):
    """USB bridge lost or device disconnected."""


class IOFailure(DuxError):
    """Generic read/write/transfer failure."""


class InvalidState(DuxError):
    """Operation not supported for the item's origin or current state."""


def from_os_error(exc: OSError, path: object | None = None) -> DuxError:
    """Translate an ``OSError`` into the matching ``DuxError`` subclass."""
    target = path if path is not None else exc.filename
    detail = exc.strerror or str(exc)
    if isinstance(exc, FileNotFoundError) or exc.errno == errno.ENOENT:
        return NotFound(detail, target)
    if isinstance(exc, PermissionError) or exc.errno in (errno.EACCES, errno.EPERM):
        return PermissionDenied(detail, target)
    if isinstance(exc, FileExistsError) or exc.errno == errno.EEXIST:
        return AlreadyExists(detail, target)
    return IOFailure(detail, target)


__all__ = [
    "DuxError",
    "NotFound",
    "PermissionDenied",
    "AlreadyExists",
    "DeviceUnavailable",
    "IOFailure",
    "InvalidState",
    "from_os_error",
]
