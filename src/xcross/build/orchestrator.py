"""Run one build per target, sequentially or on a thread pool, and aggregate the verdict."""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable

from xcross import output
from xcross.build.executor import Builder
from xcross.build.options import BuildOptions
from xcross.errors import BuildError, XcrossError

log = logging.getLogger(__name__)


@dataclass
class BuildSummary:
    """Successes and failures for one multi-target run. Appends are lock-guarded."""

    successes: list[str] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)
    errors: dict[str, BaseException] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_success(self, target: str) -> None:
        with self._lock:
            self.successes.append(target)

    def record_failure(self, target: str, exc: BaseException) -> None:
        with self._lock:
            self.failures.append(target)
            self.errors[target] = exc

    @property
    def ok(self) -> bool:
        return not self.failures

    def print_summary(self) -> None:
        output.section("Build Summary")
        output.success(f"{len(self.successes)} target(s) built successfully")
        if self.failures:
            output.error(f"{len(self.failures)} target(s) failed")
            for target in self.failures:
                output.error(f"  - {target}: {self.errors[target]}")

    def raise_for_failures(self) -> None:
        if self.failures:
            msg = "Some targets failed to build"
            raise BuildError(msg, suggestion=f"Failed: {', '.join(self.failures)}")


def _build_one(
    target: str,
    options: BuildOptions,
    builder_factory: Callable[[], Builder],
    summary: BuildSummary,
) -> None:
    """Build target with a fresh Builder. XcrossError and OSError are recorded, not raised."""
    try:
        builder_factory().build(options.for_target(target))
    except (XcrossError, OSError) as e:
        log.debug("Build for %s failed", target, exc_info=True)
        output.error(f"Failed to build {target}: {e}")
        summary.record_failure(target, e)
    else:
        summary.record_success(target)


def default_jobs(targets: list[str]) -> int:
    return max(1, min(len(targets), os.cpu_count() or 1))


def build_all(
    targets: list[str],
    options: BuildOptions,
    builder_factory: Callable[[], Builder] = Builder,
    parallel: bool = False,
    jobs: int | None = None,
) -> BuildSummary:
    """Build every target; one failure never stops the others. Returns the summary (already printed)."""
    summary = BuildSummary()
    op = options.operation
    mode = " (parallel)" if parallel else " (multiple targets)"
    output.section(f"xcross {op.value}{mode}")
    output.info(f"{op.description} for {len(targets)} targets")

    if parallel and len(targets) > 1:
        workers = jobs or default_jobs(targets)
        with ThreadPoolExecutor(max_workers=workers) as ex:
            futures = {
                ex.submit(_build_one, t, options, builder_factory, summary): t for t in targets
            }
            for future in as_completed(futures):
                # _build_one records expected failures; anything else is a bug and propagates.
                future.result()
    else:
        for idx, target in enumerate(targets, start=1):
            output.info(f"[{idx}/{len(targets)}] Target: {target}")
            _build_one(target, options, builder_factory, summary)

    summary.print_summary()
    if summary.ok and not parallel and len(targets) > 1:
        output.tip("Use --parallel to build multiple targets concurrently")
    return summary


def run_build_all(
    targets: list[str],
    options: BuildOptions,
    builder_factory: Callable[[], Builder] = Builder,
    parallel: bool = False,
    jobs: int | None = None,
) -> int:
    """Returns 0 when every target built, else the build-failure exit code."""
    summary = build_all(targets, options, builder_factory, parallel=parallel, jobs=jobs)
    if summary.ok:
        return 0
    return int(BuildError.exit_code)
