from __future__ import annotations

from dataclasses import dataclass


VERBOSE_OVERRIDES_ONLY = "--verbose overrides --only-files and --only-dirs"
BOTH_ONLY_FLAGS = "--only-files and --only-dirs together show both files and directories"


@dataclass(frozen=True, slots=True)
class Visibility:
    show_files: bool
    show_dirs: bool
    warning: str | None = None


_BOTH = Visibility(show_files=True, show_dirs=True)
_FILES = Visibility(show_files=True, show_dirs=False)
_DIRS = Visibility(show_files=False, show_dirs=True)
_NONE = Visibility(show_files=False, show_dirs=False)
_VERBOSE_CONFLICT = Visibility(show_files=True, show_dirs=True, warning=VERBOSE_OVERRIDES_ONLY)
_ONLY_CONFLICT = Visibility(show_files=True, show_dirs=True, warning=BOTH_ONLY_FLAGS)

# (verbose, only_files, only_dirs, dry_run) -> Visibility
VISIBILITY_TABLE: dict[tuple[bool, bool, bool, bool], Visibility] = {
    (False, False, False, False): _NONE,
    (False, False, False, True): _BOTH,
    (False, True, False, False): _FILES,
    (False, True, False, True): _FILES,
    (False, False, True, False): _DIRS,
    (False, False, True, True): _DIRS,
    (False, True, True, False): _ONLY_CONFLICT,
    (False, True, True, True): _ONLY_CONFLICT,
    (True, False, False, False): _BOTH,
    (True, False, False, True): _BOTH,
    (True, True, False, False): _VERBOSE_CONFLICT,
    (True, True, False, True): _VERBOSE_CONFLICT,
    (True, False, True, False): _VERBOSE_CONFLICT,
    (True, False, True, True): _VERBOSE_CONFLICT,
    (True, True, True, False): _VERBOSE_CONFLICT,
    (True, True, True, True): _VERBOSE_CONFLICT,
}


def resolve_visibility(verbose: bool, only_files: bool, only_dirs: bool, dry_run: bool) -> Visibility:
    return VISIBILITY_TABLE[(bool(verbose), bool(only_files), bool(only_dirs), bool(dry_run))]
