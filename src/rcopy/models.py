from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class ExecutionMode(str, Enum):
    SEQUENTIAL = "sequential"
    CONCURRENT = "concurrent"


def normalize_extension(token: str) -> str:
    return token.strip().lstrip(".").casefold()


@dataclass(frozen=True, slots=True)
class ExclusionSet:
    """Normalized extension tokens (no leading dot, case-folded)."""

    tokens: frozenset[str] = frozenset()

    @classmethod
    def from_tokens(cls, raw: Iterable[str]) -> "ExclusionSet":
        normalized = {normalize_extension(token) for token in raw}
        normalized.discard("")
        return cls(frozenset(normalized))

    def __contains__(self, extension: object) -> bool:
        if not isinstance(extension, str):
            return False
        return normalize_extension(extension) in self.tokens

    def __bool__(self) -> bool:
        return bool(self.tokens)


@dataclass(frozen=True, slots=True)
class Entry:
    path: Path
    kind: EntryKind
    relative: Path

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


@dataclass(frozen=True, slots=True)
class CopyOptions:
    source: Path
    destination: Path
    recursive: bool = True
    dry_run: bool = False
    show_files: bool = False
    show_dirs: bool = False
    excludes: ExclusionSet = field(default_factory=ExclusionSet)
    mode: ExecutionMode = ExecutionMode.CONCURRENT
    workers: int | None = None
    follow_symlinks: bool = False

    @property
    def max_depth(self) -> int | None:
        return None if self.recursive else 1


@dataclass(slots=True)
class CopyStats:
    files: int = 0
    dirs: int = 0
    excluded: int = 0
    failed: int = 0
