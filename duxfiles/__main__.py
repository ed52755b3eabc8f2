"""Module entrypoint for ``python -m duxfiles``.

All argument parsing and service setup happen in ``duxfiles.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
