"""Command-line front door for duxfiles.

Lists a directory with the folder's sort policy, and exposes search, color
tags, conflict-safe copies and folder sizes as one-shot commands. All work
goes through the same services the interactive front end uses.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from .file_model import CachedFileInfo, SortMode
from .folder_sizes import compute_directory_size
from .search import search_names
from .services import Services, build_services
from .tags import ColorTagManager, TagColor, collapse_home


def _tag_color(value: str) -> TagColor:
    """argparse type for tag color names."""
    try:
        return TagColor(value.strip().lower())
    except ValueError as exc:
        choices = ", ".join(color.value for color in TagColor)
        raise argparse.ArgumentTypeError(f"unknown color {value!r} (choose from {choices})") from exc


def format_size(size: int | None) -> str:
    if size is None:
        return "-"
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            return f"{int(value)} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


def _tag_badges(tags: ColorTagManager, path: Path) -> str:
    colors = tags.colors_for_file(path)
    if not colors:
        return ""
    labels = [color.label for color in TagColor if color in colors]
    return " [" + ", ".join(labels) + "]"


def format_row(info: CachedFileInfo, size: int | None, tags: ColorTagManager) -> str:
    name = info.name + ("/" if info.is_dir else "")
    modified = info.modified.strftime("%Y-%m-%d %H:%M") if info.modified is not None else "-" * 16
    return f"{format_size(size):>10}  {modified}  {name}{_tag_badges(tags, info.path)}"


def _print_listing(services: Services, path: Path, sort: SortMode | None, sizes: bool) -> int:
    explorer = services.explorer
    if not explorer.navigate_to(path):
        _print_notification(services)
        return 1
    if sort is not None:
        explorer.set_sort_mode(sort)

    out = [f"{explorer.display_path}  (sort: {explorer.sort_mode.label})"]
    for info in explorer.all_items:
        size: int | None = info.size
        if info.is_dir:
            size = _folder_size(services, info.path) if sizes else None
        out.append(format_row(info, size, services.tags))
    if explorer.hidden_count:
        out.append(f"({explorer.hidden_count} hidden)")
    sys.stdout.write("\n".join(out) + "\n")
    return 0


def _folder_size(services: Services, path: Path) -> int | None:
    cached = services.folder_sizes.get_cached_size(path)
    if cached is not None:
        return cached
    size = compute_directory_size(path)
    if size is not None:
        services.folder_sizes.set_cached_size(path, size)
    return size


def _print_notification(services: Services) -> None:
    notification = services.notifications.current()
    if notification is not None:
        sys.stderr.write(notification.message + "\n")


def _run_search(services: Services, root: Path, query: str) -> int:
    results, error = search_names(
        root,
        query,
        services.explorer.show_hidden,
        max_results=services.explorer.search_max_results,
    )
    if error is not None:
        sys.stderr.write(f"Search failed: {error}\n")
        return 1
    for info in results:
        suffix = "/" if info.is_dir else ""
        sys.stdout.write(collapse_home(str(info.path)) + suffix + "\n")
    return 0


def _run_tag(services: Services, color: TagColor, paths: Sequence[str]) -> int:
    for raw in paths:
        path = Path(raw).expanduser()
        if not path.exists():
            sys.stderr.write(f"Path not found: {raw}\n")
            return 1
        services.tags.add(path.resolve(), color)
    return 0


def _run_untag(services: Services, paths: Sequence[str]) -> int:
    for raw in paths:
        services.tags.remove_all(Path(raw).expanduser().resolve())
    return 0


def _run_tagged(services: Services, color: TagColor) -> int:
    for row in services.tags.files_for_color(color):
        marker = "" if row.exists else "  (missing)"
        sys.stdout.write(f"{collapse_home(str(row.path))}{'/' if row.is_dir else ''}{marker}\n")
    return 0


def _run_copy(services: Services, sources: Sequence[str], destination: str | None) -> int:
    if destination is None:
        raise SystemExit("--copy requires --to DEST.")
    dest = Path(destination).expanduser()
    if not dest.is_dir():
        raise SystemExit(f"Destination is not a directory: {destination}")
    selection = services.selection
    for raw in sources:
        if not selection.add_local(Path(raw).expanduser()):
            sys.stderr.write(f"Path not found: {raw}\n")
    result = selection.copy_local_items(dest)
    selection.clear()
    for failure in result.failures:
        sys.stderr.write(f"{failure.item.display_path}: {failure.error}\n")
    sys.stdout.write(f"Copied {result.count} item{'s' if result.count != 1 else ''}\n")
    return 0 if result.ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="duxfiles",
        description="List, search, tag and copy files with the duxfiles core.",
    )
    parser.add_argument("path", nargs="?", default=None, help="Directory to list. Defaults to current directory.")
    parser.add_argument(
        "--sort",
        choices=[mode.value for mode in SortMode],
        default=None,
        help="Override the folder's default sort order.",
    )
    parser.add_argument("--all", action="store_true", help="Include hidden entries.")
    parser.add_argument("--sizes", action="store_true", help="Compute recursive folder sizes.")
    parser.add_argument("--search", metavar="QUERY", help="Search names below PATH.")
    parser.add_argument(
        "--tag",
        nargs="+",
        metavar=("COLOR", "PATH"),
        help="Tag one or more paths with COLOR.",
    )
    parser.add_argument("--untag", nargs="+", metavar="PATH", help="Remove every color tag from PATHs.")
    parser.add_argument("--tagged", type=_tag_color, metavar="COLOR", help="List paths tagged with COLOR.")
    parser.add_argument("--copy", nargs="+", metavar="SRC", help="Copy SRC paths without overwriting.")
    parser.add_argument("--to", metavar="DEST", help="Destination directory for --copy.")
    parser.add_argument("--verbose", action="store_true", help="Log debug output to stderr.")
    return parser


def main(argv: Sequence[str] | None = None, default_path: Path | None = None) -> int:
    """Parse CLI arguments and run one command.

    ``default_path`` is primarily for tests; when omitted the current
    working directory is listed.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.tag is not None and len(args.tag) < 2:
        parser.error("--tag needs a color and at least one path")
    tag_color: TagColor | None = None
    if args.tag:
        try:
            tag_color = _tag_color(args.tag[0])
        except argparse.ArgumentTypeError as exc:
            parser.error(str(exc))

    services = build_services(show_hidden=True if args.all else None)
    try:
        root = Path(args.path).expanduser() if args.path else (default_path or Path.cwd())
        if tag_color is not None:
            return _run_tag(services, tag_color, args.tag[1:])
        if args.untag:
            return _run_untag(services, args.untag)
        if args.tagged is not None:
            return _run_tagged(services, args.tagged)
        if args.copy:
            return _run_copy(services, args.copy, args.to)
        if args.search is not None:
            return _run_search(services, root, args.search)
        sort = SortMode(args.sort) if args.sort else None
        return _print_listing(services, root, sort, args.sizes)
    finally:
        services.shutdown()


if __name__ == "__main__":
    raise SystemExit(main())
