from __future__ import annotations

from typing import Iterable

from rcopy.models import Entry, ExclusionSet


def file_extension(name: str) -> str | None:
    """Return the case-folded text after the last dot, or None when there is none.

    Names with a single leading dot such as ``.bashrc`` and names ending in a dot
    have no extension.
    """
    stem, dot, extension = name.rpartition(".")
    if not dot or not stem or not extension:
        return None
    return extension.casefold()


def is_excluded(entry: Entry, exclusions: ExclusionSet) -> bool:
    if entry.is_dir or not exclusions:
        return False
    extension = file_extension(entry.path.name)
    if extension is None:
        return False
    return extension in exclusions


def partition_excluded(
    files: Iterable[Entry], exclusions: ExclusionSet
) -> tuple[list[Entry], list[Entry]]:
    kept: list[Entry] = []
    excluded: list[Entry] = []
    for entry in files:
        if is_excluded(entry, exclusions):
            excluded.append(entry)
        else:
            kept.append(entry)
    return kept, excluded
