from __future__ import annotations

import os
from pathlib import Path

from rcopy.models import Entry, EntryKind


def _raise_walk_error(exc: OSError) -> None:
    raise exc


def traverse(source_root: Path, max_depth: int | None = None, follow_symlinks: bool = False) -> list[Entry]:
    """Enumerate the entries under ``source_root``, parents before children.

    ``max_depth=None`` walks the whole subtree; ``max_depth=1`` yields only the
    root's immediate files. A directory is reported only when its own contents
    fall inside the bound. Any unreadable directory raises the underlying
    ``OSError``; no partial listing is returned.
    """
    if max_depth is not None and max_depth < 1:
        raise ValueError(f"max_depth must be >= 1 or None, got {max_depth}")

    entries: list[Entry] = []
    for root_str, dirs, files in os.walk(
        source_root, topdown=True, onerror=_raise_walk_error, followlinks=follow_symlinks
    ):
        root = Path(root_str)
        root_rel = root.relative_to(source_root)
        depth = len(root_rel.parts)

        dirs.sort()
        if max_depth is not None and depth + 1 >= max_depth:
            dirs[:] = []

        for dir_name in dirs:
            entries.append(Entry(path=root / dir_name, kind=EntryKind.DIRECTORY, relative=root_rel / dir_name))

        for file_name in sorted(files):
            entries.append(Entry(path=root / file_name, kind=EntryKind.FILE, relative=root_rel / file_name))

    return entries


def partition_entries(entries: list[Entry]) -> tuple[list[Entry], list[Entry]]:
    dirs = [entry for entry in entries if entry.is_dir]
    files = [entry for entry in entries if not entry.is_dir]
    return dirs, files
