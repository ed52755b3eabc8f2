"""Public package surface for duxfiles.

Exports ``main`` for programmatic CLI invocation.
The file-manager core lives in submodules: ``explorer``, ``selection``,
``tags``, ``folder_sizes``, ``device`` and ``file_model``.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]
