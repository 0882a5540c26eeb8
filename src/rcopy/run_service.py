from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import logging
import time

from rcopy.copy_engine import copy_path, is_plain_file, resolve_single_target
from rcopy.models import CopyOptions, CopyStats
from rcopy.progress import ProgressReporter


EXIT_SUCCESS = 0
EXIT_RUNTIME_OR_CONFIG_ERROR = 1
EXIT_PARTIAL_FAILURES = 2
EXIT_INVALID_CONFIG = 3


@dataclass(slots=True)
class RunReport:
    stats: CopyStats = field(default_factory=CopyStats)
    elapsed: float = 0.0
    dry_run: bool = False
    single_file_target: Path | None = None
    error: str | None = None

    @property
    def partial_failures(self) -> bool:
        return self.stats.failed > 0


def run_copy(
    options: CopyOptions,
    progress: ProgressReporter | None = None,
    logger: logging.Logger | None = None,
    engine_logger: logging.Logger | None = None,
) -> tuple[int, RunReport]:
    log = logger or logging.getLogger("rcopy.run")
    report = RunReport(dry_run=options.dry_run)
    started = time.perf_counter()

    try:
        if is_plain_file(options.source):
            report.single_file_target = resolve_single_target(options.source, options.destination)
        else:
            log.info("%s mode", "Recursive" if options.recursive else "Non-recursive")
        stats = copy_path(options, progress=progress, logger=engine_logger)
    except (OSError, ValueError) as exc:
        report.elapsed = time.perf_counter() - started
        report.error = str(exc)
        log.error("Error: %s", exc)
        return EXIT_RUNTIME_OR_CONFIG_ERROR, report

    report.stats = stats
    report.elapsed = time.perf_counter() - started
    log.info(
        "%s -> %s | files=%s dirs=%s excluded=%s failed=%s",
        options.source,
        options.destination,
        stats.files,
        stats.dirs,
        stats.excluded,
        stats.failed,
    )

    exit_code = EXIT_PARTIAL_FAILURES if report.partial_failures else EXIT_SUCCESS
    return exit_code, report
