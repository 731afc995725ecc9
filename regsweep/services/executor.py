"""
Sweep executor for regsweep.

Reports a plan (pretend mode) or carries it out by removing every
marked image of every stale tag. Deletion stops at the first failure;
images removed before it stay removed.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Generator, List, Optional

from ..domain.plan import SweepPlan
from ..domain.tag import Tag
from ..errors import DeleteError
from ..infra.registry_store import RegistryStore

logger = logging.getLogger(__name__)


@dataclass
class TagEntry:
    """One line of an execution report."""
    tag: Tag
    images: List[str] = field(default_factory=list)

    @property
    def ref(self) -> str:
        return self.tag.ref

    @property
    def last_update_time(self) -> datetime:
        return self.tag.last_update_time

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tag': self.tag.ref,
            'repository': self.tag.repository,
            'name': self.tag.name,
            'image': self.tag.image_id,
            'last_update': self.tag.last_update,
            'last_update_time': self.tag.last_update_time.isoformat(),
            'images_to_delete': list(self.images),
        }


@dataclass
class ExecutionReport:
    """Result of executing a sweep plan."""
    pretend: bool = True
    kept: List[TagEntry] = field(default_factory=list)
    removed: List[TagEntry] = field(default_factory=list)
    deleted_images: List[str] = field(default_factory=list)

    def records(self) -> List[Dict[str, Any]]:
        """One dict per tag, kept tags first, for structured output."""
        out = []
        for status, entries in (('keep', self.kept), ('delete', self.removed)):
            for entry in entries:
                record = entry.to_dict()
                record['status'] = status
                out.append(record)
        return out


def _report_order(entry: TagEntry):
    return (entry.tag.last_update, entry.tag.ref)


class SweepExecutor:
    """
    Executes a SweepPlan against a RegistryStore.

    Example:
        executor = SweepExecutor(store)
        for message in executor.execute(plan, pretend=False):
            print(message)
        report = executor.last_report
    """

    def __init__(self, store: RegistryStore):
        self.store = store
        self.last_report: Optional[ExecutionReport] = None

    def execute(
        self,
        plan: SweepPlan,
        pretend: bool = True
    ) -> Generator[str, None, ExecutionReport]:
        """
        Report or carry out a plan.

        Yields progress messages, returns ExecutionReport.

        Args:
            plan: Plan built from the same store snapshot
            pretend: Only report; never touch the store

        Raises:
            DeleteError: Removing an image failed (live mode only)
        """
        report = ExecutionReport(pretend=pretend)
        self.last_report = report

        for tag in plan.tags:
            if plan.is_stale(tag):
                report.removed.append(TagEntry(tag, plan.images_for(tag)))
            else:
                report.kept.append(TagEntry(tag))
        report.kept.sort(key=_report_order)
        report.removed.sort(key=_report_order)

        if pretend:
            yield f"Pretend: {len(report.kept)} tags kept, {len(report.removed)} stale"
            return report

        seen = set()
        for entry in sorted(report.removed, key=lambda e: e.tag.key):
            for image_id in entry.images:
                if image_id in seen:
                    continue
                seen.add(image_id)
                try:
                    removed = self.store.delete_image(image_id)
                except OSError as e:
                    logger.error(f"Deleting {image_id} of {entry.ref} failed: {e}")
                    raise DeleteError(image_id, e, report.deleted_images) from e
                report.deleted_images.append(image_id)
                if removed:
                    yield f"Deleted {image_id} ({entry.ref})"
                else:
                    yield f"Already absent {image_id} ({entry.ref})"

        logger.info(f"Deleted {len(report.deleted_images)} images")
        return report
