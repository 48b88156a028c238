"""
Batch conversion driver.

Runs the per-file pipeline over a file list in waves of `workers` files on a
ThreadPoolExecutor. Each wave completes before the next starts; results are
reported in file-list order.
"""

import os
import time
import traceback
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .channels import ChannelRoleMap
from .constants import MIN_WORKERS
from .pipeline import FileResult, convert_file


@dataclass
class BatchResult:
    """Result of a batch conversion."""

    results: List[FileResult] = field(default_factory=list)
    elapsed_s: float = 0.0
    workers: int = 0

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failure_count(self) -> int:
        return sum(1 for r in self.results if not r.success)


def default_worker_count() -> int:
    """Detected CPU parallelism, at least MIN_WORKERS."""
    return max(MIN_WORKERS, os.cpu_count() or MIN_WORKERS)


def _failed_result(path, exc: BaseException) -> FileResult:
    detail = "".join(traceback.format_exception_only(type(exc), exc)).strip()
    return FileResult(
        source_path=Path(path),
        success=False,
        messages=[f"Filename: {path}", f"ERROR: Unexpected failure: {detail}"],
        error=str(exc),
        error_type=type(exc).__name__,
    )


def _report(on_result: Callable[[FileResult], None], result: FileResult) -> None:
    """Run the result callback; a failing callback is reported, not raised."""
    try:
        on_result(result)
    except Exception as e:
        result.messages.append(f"WARNING: result reporting failed: {e}")
        print(f"    ⚠ Could not report result for {result.source_path}: {e}")


def run_batch(
    files: list,
    role_map: ChannelRoleMap,
    *,
    overwrite: bool = False,
    workers: Optional[int] = None,
    on_result: Optional[Callable[[FileResult], None]] = None,
    convert: Callable[..., FileResult] = convert_file,
) -> BatchResult:
    """
    Convert every file in `files`.

    A failing file never aborts the batch or its wave.

    Args:
        files: EDF paths, processed in this order
        role_map: Channel labels shared (read-only) by all tasks
        overwrite: Replace existing .cfs outputs
        workers: Max files converted at once (default: CPU count, min 2)
        on_result: Called once per file in wave order, after its wave completes.
            A raising callback is reported and the batch continues
        convert: Per-file conversion function

    Returns:
        BatchResult with one FileResult per input, in input order
    """
    workers = workers or default_worker_count()
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")

    files = [Path(f) for f in files]
    batch = BatchResult(workers=workers)

    print(f"Processing up to {workers} files simultaneously...")
    t_start = time.perf_counter()

    with ThreadPoolExecutor(max_workers=workers) as executor:
        for i in range(0, len(files), workers):
            wave = files[i:i + workers]
            futures = [
                executor.submit(convert, path, role_map, overwrite=overwrite)
                for path in wave
            ]

            # Wait for the whole wave
            wave_results = []
            for path, future in zip(wave, futures):
                try:
                    wave_results.append(future.result())
                except Exception as e:
                    wave_results.append(_failed_result(path, e))

            for result in wave_results:
                batch.results.append(result)
                if on_result:
                    _report(on_result, result)

    batch.elapsed_s = time.perf_counter() - t_start
    return batch
