from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import json
import yaml

from rcopy.models import CopyOptions, ExclusionSet, ExecutionMode
from rcopy.visibility import resolve_visibility


KNOWN_KEYS = {
    "exclude",
    "recursive",
    "dryRun",
    "verbose",
    "onlyFiles",
    "onlyDirs",
    "singleThread",
    "workers",
    "followSymlinks",
}


@dataclass(slots=True)
class CopyDefaults:
    excludes: list[str] = field(default_factory=list)
    recursive: bool = True
    dry_run: bool = False
    verbose: bool = False
    only_files: bool = False
    only_dirs: bool = False
    single_thread: bool = False
    workers: int | None = None
    follow_symlinks: bool = False


@dataclass(slots=True)
class CopyRequest:
    source: Path
    destination: Path
    excludes: list[str] = field(default_factory=list)
    no_recursive: bool = False
    dry_run: bool = False
    verbose: bool = False
    only_files: bool = False
    only_dirs: bool = False
    single_thread: bool = False
    workers: int | None = None
    follow_symlinks: bool = False


def _as_bool(value: Any, field_name: str, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    raise ValueError(f"{field_name} must be a boolean")


def _as_list_of_strings(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or any(not isinstance(item, str) for item in value):
        raise ValueError(f"{field_name} must be a list of strings")
    return [item for item in value if item.strip()]


def _as_optional_workers(value: Any, field_name: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{field_name} must be a positive integer")
    return value


def _load_raw_config(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise ValueError(f"Config file does not exist: {config_path}")

    suffix = config_path.suffix.lower()
    text = config_path.read_text(encoding="utf-8")
    if suffix in {".yml", ".yaml"}:
        loaded = yaml.safe_load(text)
    elif suffix == ".json":
        loaded = json.loads(text)
    else:
        raise ValueError("Config file must be .yaml/.yml or .json")

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError("Config root must be an object")
    return loaded


def load_defaults(config_path: Path) -> CopyDefaults:
    raw = _load_raw_config(config_path)

    unknown = sorted(set(raw) - KNOWN_KEYS)
    if unknown:
        raise ValueError(f"Unknown config key(s): {', '.join(unknown)}")

    return CopyDefaults(
        excludes=_as_list_of_strings(raw.get("exclude"), "exclude"),
        recursive=_as_bool(raw.get("recursive"), "recursive", default=True),
        dry_run=_as_bool(raw.get("dryRun"), "dryRun", default=False),
        verbose=_as_bool(raw.get("verbose"), "verbose", default=False),
        only_files=_as_bool(raw.get("onlyFiles"), "onlyFiles", default=False),
        only_dirs=_as_bool(raw.get("onlyDirs"), "onlyDirs", default=False),
        single_thread=_as_bool(raw.get("singleThread"), "singleThread", default=False),
        workers=_as_optional_workers(raw.get("workers"), "workers"),
        follow_symlinks=_as_bool(raw.get("followSymlinks"), "followSymlinks", default=False),
    )


def resolve_options(request: CopyRequest, defaults: CopyDefaults | None = None) -> tuple[CopyOptions, str | None]:
    """Merge command-line flags over file defaults.

    Returns the options and the visibility warning, if the flags conflict.
    """
    base = defaults or CopyDefaults()

    dry_run = base.dry_run or request.dry_run
    visibility = resolve_visibility(
        verbose=base.verbose or request.verbose,
        only_files=base.only_files or request.only_files,
        only_dirs=base.only_dirs or request.only_dirs,
        dry_run=dry_run,
    )
    single_thread = base.single_thread or request.single_thread

    options = CopyOptions(
        source=request.source.expanduser(),
        destination=request.destination.expanduser(),
        recursive=base.recursive and not request.no_recursive,
        dry_run=dry_run,
        show_files=visibility.show_files,
        show_dirs=visibility.show_dirs,
        excludes=ExclusionSet.from_tokens([*base.excludes, *request.excludes]),
        mode=ExecutionMode.SEQUENTIAL if single_thread else ExecutionMode.CONCURRENT,
        workers=request.workers if request.workers is not None else base.workers,
        follow_symlinks=base.follow_symlinks or request.follow_symlinks,
    )
    return options, visibility.warning
