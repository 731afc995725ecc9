"""
High-level Python API for regsweep.

Example:
    import regsweep

    # Report what a 20 day retention window would remove
    result = regsweep.run_gc("/var/lib/registry", "20d")
    for entry in result.report.removed:
        print(entry.ref, entry.images)

    # Remove the images for real
    regsweep.run_gc("/var/lib/registry", "20d", pretend=False)
"""

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union
import logging

from .domain import SweepPlan
from .infra import RegistryStore
from .services import MetadataLoader, SweepExecutor, ExecutionReport, build_plan, parse_retention

logger = logging.getLogger(__name__)


@dataclass
class GCResult:
    """Outcome of one garbage collection run."""
    plan: SweepPlan
    report: ExecutionReport

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pretend': self.report.pretend,
            'tags': len(self.plan.tags),
            'stale': len(self.plan.stale),
            'safe_images': len(self.plan.safe),
            'marked_images': len(self.plan.marked),
            'deleted_images': list(self.report.deleted_images),
        }


def run_gc(
    store_root: Union[str, Path],
    retention: Union[str, int, timedelta],
    pretend: bool = True,
    now: Optional[int] = None,
    store: Optional[RegistryStore] = None,
    config: Optional[Dict[str, Any]] = None,
    progress: Optional[Callable[[str], None]] = None,
) -> GCResult:
    """
    Run one garbage collection pass over a registry store.

    Args:
        store_root: Registry store root directory
        retention: Retention window ("20d", seconds, or timedelta)
        pretend: Only report; remove nothing
        now: Current time in epoch seconds (defaults to the clock)
        store: Store to use instead of one built from store_root
        config: Configuration dict (store.ignore_files is honoured)
        progress: Called with each executor progress message

    Returns:
        GCResult with the plan and the execution report

    Raises:
        RetentionParseError: retention is malformed
        LoadError: Store metadata is missing or corrupt; nothing was deleted
        DeleteError: An image could not be removed; earlier removals stand
    """
    window = parse_retention(retention)

    if store is None:
        ignore_files = None
        if config:
            ignore_files = config.get('store', {}).get('ignore_files')
        store = RegistryStore(Path(store_root), ignore_files=ignore_files)

    tags = MetadataLoader(store).load()
    plan = build_plan(tags, window, now=now)

    executor = SweepExecutor(store)
    for message in executor.execute(plan, pretend=pretend):
        logger.debug(message)
        if progress is not None:
            progress(message)

    return GCResult(plan=plan, report=executor.last_report)
