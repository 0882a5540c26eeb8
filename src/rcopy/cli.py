from __future__ import annotations

import argparse
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys

from tqdm.contrib.logging import logging_redirect_tqdm

from rcopy.config import CopyDefaults, CopyRequest, load_defaults, resolve_options
from rcopy.models import ExecutionMode
from rcopy.progress import TqdmProgress
from rcopy.run_service import (
    EXIT_INVALID_CONFIG,
    EXIT_RUNTIME_OR_CONFIG_ERROR,
    RunReport,
    run_copy,
)


BANNER_WIDTH = 41


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rcopy",
        description=(
            "Recursive copy with progress bars, dry-run mode, "
            "extension exclusion and multi-threaded support."
        ),
    )
    parser.add_argument("source", type=Path, help="Source directory or file")
    parser.add_argument("destination", type=Path, help="Destination directory or file")
    parser.add_argument(
        "-s",
        "--single-thread",
        action="store_true",
        help="Copy files one at a time instead of using a worker pool",
    )
    parser.add_argument(
        "--only-files",
        action="store_true",
        help="Only output file copy operations (--verbose outputs both)",
    )
    parser.add_argument(
        "--only-dirs",
        action="store_true",
        help="Only output directory creation (--verbose outputs both)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show per-file and per-directory output")
    parser.add_argument(
        "-d",
        "--dry-run",
        action="store_true",
        help="Simulate the copy without writing anything (shows all operations unless narrowed)",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="EXT",
        help="Exclude files by extension, repeatable (e.g. --exclude .psd --exclude tmp)",
    )
    parser.add_argument(
        "--no-recursive",
        action="store_true",
        help="Copy only the top-level files of the source directory",
    )
    parser.add_argument("--workers", type=int, default=None, help="Maximum worker threads (default: CPU count)")
    parser.add_argument(
        "--follow-symlinks",
        action="store_true",
        help="Descend into symlinked directories",
    )
    parser.add_argument("--config", type=Path, default=None, help="YAML or JSON file with default options")
    parser.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")
    return parser


def _configure_logging(log_file: Path | None) -> logging.Logger:
    logger = logging.getLogger("rcopy")
    logger.setLevel(logging.DEBUG if log_file else logging.INFO)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
        logger.addHandler(file_handler)

    return logger


def _print_banner(title: str, lines: list[str]) -> None:
    print()
    print(f" {title} ".center(BANNER_WIDTH, "-"))
    print()
    for line in lines:
        print(line)
    print()
    print("-" * BANNER_WIDTH)
    print()


def _print_report(report: RunReport, source: Path) -> None:
    duration = f"Duration: {report.elapsed:.2f}s"
    stats = report.stats

    if report.single_file_target is not None:
        verb = "Would copy" if report.dry_run else "Copied"
        if stats.failed:
            verb = "Failed to copy"
        _print_banner(
            "DRY RUN COMPLETE" if report.dry_run else "COPY COMPLETE",
            [f"{verb}: {source} -> {report.single_file_target}", duration],
        )
        return

    counts = f"{stats.files} file(s), {stats.dirs} directory(ies)"
    if report.dry_run:
        title = "DRY RUN COMPLETE"
        summary = f"{counts} would have been copied."
    else:
        title = "COPY COMPLETE"
        summary = f"{counts} copied."
    lines = [summary]
    if stats.excluded:
        lines.append(f"{stats.excluded} file(s) excluded.")
    if stats.failed:
        lines.append(f"{stats.failed} entry(ies) failed.")
    lines.append(duration)
    _print_banner(title, lines)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logger = _configure_logging(args.log_file)

    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be >= 1")

    if args.source == args.destination:
        print("Error: Source and destination paths are the same!", file=sys.stderr)
        return EXIT_RUNTIME_OR_CONFIG_ERROR

    try:
        defaults = load_defaults(args.config) if args.config else CopyDefaults()
    except Exception as exc:
        print(f"Invalid config: {exc}", file=sys.stderr)
        return EXIT_INVALID_CONFIG

    request = CopyRequest(
        source=args.source,
        destination=args.destination,
        excludes=args.exclude,
        no_recursive=args.no_recursive,
        dry_run=args.dry_run,
        verbose=args.verbose,
        only_files=args.only_files,
        only_dirs=args.only_dirs,
        single_thread=args.single_thread,
        workers=args.workers,
        follow_symlinks=args.follow_symlinks,
    )
    options, warning = resolve_options(request, defaults)
    if warning:
        logger.warning("Warning: %s", warning)

    print("\n--------------RCOPY--------------\n")
    if options.dry_run:
        print("Dry-run mode enabled: no files will be written.\n")
    if options.source.is_dir():
        if options.mode is ExecutionMode.SEQUENTIAL:
            print("Single Threaded Copying...\n")
        else:
            print("Multi-Threaded Copying...\n")

    with logging_redirect_tqdm(loggers=[logger]):
        exit_code, report = run_copy(
            options,
            progress=TqdmProgress(),
            logger=logger.getChild("run"),
            engine_logger=logger.getChild("engine"),
        )

    if report.error is None:
        _print_report(report, options.source)
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
