"""Batch driver: run one unit of work per animation directory.

Units are independent: each owns its input directory and its output paths,
so they can run on a thread pool without coordination. A failing unit is
recorded with a human-readable reason and never stops the others.
"""

from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from app.errors import AssetPipelineError, MissingResourceError
from app.utils.logging import get_logger
from models.reports import BatchReport, UnitOutcome

logger = get_logger("app.batch")


def discover_animations(animations_root: "Path | str") -> list[Path]:
    """Return every animation directory under *animations_root*, sorted by name.

    Raises:
        MissingResourceError: If *animations_root* is not a directory.
    """
    root = Path(animations_root)
    if not root.is_dir():
        raise MissingResourceError("animations directory not found", root)
    return sorted(p for p in root.iterdir() if p.is_dir() and not p.name.startswith("."))


def _run_unit(unit: Path, work: Callable[[Path], Any]) -> UnitOutcome:
    try:
        result = work(unit)
    except (AssetPipelineError, OSError) as exc:
        logger.error("unit_failed", animation=unit.name, error=str(exc))
        return UnitOutcome(name=unit.name, ok=False, reason=str(exc))

    ok = getattr(result, "ok", True)
    reason = "" if ok else getattr(result, "failure_reason", "failed")
    return UnitOutcome(name=unit.name, ok=ok, reason=reason, result=result)


def run_batch(
    units: Iterable["Path | str"],
    work: Callable[[Path], Any],
    workers: int = 1,
) -> BatchReport:
    """Apply *work* to every unit and collect the outcomes in input order.

    A result object exposing ``ok = False`` (a validation report with
    errors) counts as a failed unit even though nothing was raised.

    Args:
        units:   Animation directories.
        work:    Callable processing one directory.
        workers: Thread count; 1 runs everything inline.
    """
    paths = [Path(u) for u in units]
    if workers <= 1 or len(paths) <= 1:
        outcomes = [_run_unit(p, work) for p in paths]
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(lambda p: _run_unit(p, work), paths))

    report = BatchReport(outcomes=outcomes)
    logger.info(
        "batch_finished",
        total=len(report.outcomes),
        succeeded=report.succeeded,
        failed=report.failed,
    )
    return report
