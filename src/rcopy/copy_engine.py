from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
import logging
import os
from pathlib import Path
import shutil
import stat
import tempfile

from rcopy.exclusion import partition_excluded
from rcopy.models import CopyOptions, CopyStats, Entry, ExecutionMode
from rcopy.progress import NullProgress, ProgressReporter
from rcopy.stats import FileOutcome, StatsAggregator
from rcopy.traversal import partition_entries, traverse


DRY_RUN_PREFIX = "[DRY RUN] "
FINISH_MESSAGE = "Done copying."

_default_logger = logging.getLogger("rcopy.engine")


def calculate_worker_limit(workers: int | None) -> int:
    n_cpu = os.cpu_count() or 1
    return max(1, n_cpu) if workers is None else max(1, min(workers, n_cpu))


def _announce(log: logging.Logger, shown: bool, dry_run: bool, message: str, *args: object) -> None:
    if dry_run:
        message = DRY_RUN_PREFIX + message
    log.log(logging.INFO if shown else logging.DEBUG, message, *args)


def _safe_copy(source_file: Path, destination_file: Path) -> None:
    # The parent directory is never created here; a missing parent surfaces as an OSError.
    with tempfile.NamedTemporaryFile(delete=False, dir=str(destination_file.parent)) as tmp:
        tmp_path = Path(tmp.name)
    try:
        shutil.copyfile(source_file, tmp_path)
        shutil.copymode(source_file, tmp_path)
        tmp_path.replace(destination_file)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def _validate_paths(source_root: Path, destination_root: Path, recursive: bool) -> None:
    source_resolved = source_root.resolve()
    destination_resolved = destination_root.resolve()

    if source_resolved == destination_resolved:
        raise ValueError(f"Source and destination paths are the same: {source_root}")

    if recursive and destination_resolved.is_relative_to(source_resolved):
        raise ValueError(f"Destination is inside source, which would recurse: {destination_root}")


def _ensure_owner_writable(directory: Path) -> None:
    mode = directory.stat().st_mode
    if not mode & stat.S_IWUSR:
        directory.chmod(stat.S_IMODE(mode) | stat.S_IWUSR)


def materialize_directories(
    dirs: list[Entry],
    options: CopyOptions,
    stats: StatsAggregator,
    progress: ProgressReporter,
    log: logging.Logger,
) -> list[Entry]:
    """Create every destination directory before any file is written.

    Directories stay owner-writable until ``apply_directory_modes`` runs after the
    file phase. Failures are logged and counted; files beneath a failed directory
    are still attempted and fail on their own. Returns the directories created.
    """
    created: list[Entry] = []
    for entry in dirs:
        destination_dir = options.destination / entry.relative
        failed = False
        if options.dry_run:
            _announce(log, options.show_dirs, True, "[DIR] %s", destination_dir)
        else:
            try:
                destination_dir.mkdir(parents=True, exist_ok=True)
                _ensure_owner_writable(destination_dir)
                created.append(entry)
                _announce(log, options.show_dirs, False, "[DIR] %s", destination_dir)
            except OSError as exc:
                failed = True
                log.error("Failed to create directory %s: %s", destination_dir, exc)
        stats.record_dir(failed=failed)
        progress.increment()
    return created


def apply_directory_modes(
    created: list[Entry],
    options: CopyOptions,
    stats: StatsAggregator,
    log: logging.Logger,
) -> None:
    # Deepest first, so a read-only parent never blocks its children.
    for entry in reversed(created):
        destination_dir = options.destination / entry.relative
        try:
            shutil.copymode(entry.path, destination_dir)
        except OSError as exc:
            stats.record_failure()
            log.error("Failed to set permissions on %s: %s", destination_dir, exc)


def replicate_file(entry: Entry, options: CopyOptions, log: logging.Logger) -> FileOutcome:
    destination_file = options.destination / entry.relative
    if options.dry_run:
        _announce(log, options.show_files, True, "[FILE] %s -> %s", entry.path, destination_file)
        return FileOutcome.SIMULATED

    try:
        _safe_copy(entry.path, destination_file)
    except Exception as exc:
        log.error("Failed to copy %s: %s", entry.path, exc)
        return FileOutcome.FAILED

    _announce(log, options.show_files, False, "[FILE] %s -> %s", entry.path, destination_file)
    return FileOutcome.COPIED


def _run_sequential(
    files: list[Entry],
    options: CopyOptions,
    stats: StatsAggregator,
    progress: ProgressReporter,
    log: logging.Logger,
) -> None:
    for entry in files:
        stats.record_file(replicate_file(entry, options, log))
        progress.increment()


def _run_concurrent(
    files: list[Entry],
    options: CopyOptions,
    stats: StatsAggregator,
    progress: ProgressReporter,
    log: logging.Logger,
) -> None:
    if not files:
        return

    with ThreadPoolExecutor(max_workers=calculate_worker_limit(options.workers)) as executor:
        futures: list[Future[FileOutcome]] = [
            executor.submit(replicate_file, entry, options, log) for entry in files
        ]
        for future in as_completed(futures):
            stats.record_file(future.result())
            progress.increment()


def copy_tree(
    options: CopyOptions,
    progress: ProgressReporter | None = None,
    logger: logging.Logger | None = None,
) -> CopyStats:
    log = logger or _default_logger
    reporter = progress or NullProgress()
    source_root = options.source
    destination_root = options.destination

    if not source_root.is_dir():
        raise NotADirectoryError(f"Source is not a directory: {source_root}")
    _validate_paths(source_root, destination_root, options.recursive)

    entries = traverse(source_root, max_depth=options.max_depth, follow_symlinks=options.follow_symlinks)

    if options.dry_run:
        if destination_root.exists() and not destination_root.is_dir():
            raise NotADirectoryError(f"Destination is not a directory: {destination_root}")
    else:
        destination_root.mkdir(parents=True, exist_ok=True)

    dirs, files = partition_entries(entries)
    reporter.set_total(len(entries))
    stats = StatsAggregator()

    created = materialize_directories(dirs, options, stats, reporter, log)

    kept, excluded = partition_excluded(files, options.excludes)
    for entry in excluded:
        log.debug((DRY_RUN_PREFIX if options.dry_run else "") + "Excluded %s", entry.path)
        stats.record_excluded()
        reporter.increment()

    if options.mode is ExecutionMode.SEQUENTIAL:
        _run_sequential(kept, options, stats, reporter, log)
    else:
        _run_concurrent(kept, options, stats, reporter, log)

    apply_directory_modes(created, options, stats, log)

    reporter.finish(FINISH_MESSAGE)
    return stats.snapshot()


def is_plain_file(path: Path) -> bool:
    """Stat ``path`` (following links); a missing or unreadable source raises."""
    return stat.S_ISREG(path.stat().st_mode)


def resolve_single_target(source_file: Path, destination: Path) -> Path:
    if destination.is_dir():
        return destination / source_file.name
    return destination


def copy_single_file(
    options: CopyOptions,
    logger: logging.Logger | None = None,
) -> tuple[Path, CopyStats]:
    log = logger or _default_logger
    target = resolve_single_target(options.source, options.destination)
    stats = StatsAggregator()

    if options.dry_run:
        _announce(log, options.show_files, True, "[FILE] %s -> %s", options.source, target)
        stats.record_file(FileOutcome.SIMULATED)
        return target, stats.snapshot()

    try:
        shutil.copyfile(options.source, target)
        shutil.copymode(options.source, target)
    except OSError as exc:
        log.error("Error copying file %s -> %s: %s", options.source, target, exc)
        stats.record_file(FileOutcome.FAILED)
        return target, stats.snapshot()

    _announce(log, options.show_files, False, "[FILE] %s -> %s", options.source, target)
    stats.record_file(FileOutcome.COPIED)
    return target, stats.snapshot()


def copy_path(
    options: CopyOptions,
    progress: ProgressReporter | None = None,
    logger: logging.Logger | None = None,
) -> CopyStats:
    """Copy ``options.source`` to ``options.destination``.

    A plain-file source takes the single-file shortcut; anything else is copied
    as a tree. Setup failures (unreadable source, overlapping paths, traversal
    errors, destination root creation) raise before any entry is touched.
    """
    if is_plain_file(options.source):
        _, stats = copy_single_file(options, logger=logger)
        return stats
    return copy_tree(options, progress=progress, logger=logger)
