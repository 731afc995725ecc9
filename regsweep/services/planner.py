"""
Deletion planning (sweep phase) for regsweep.

For each stale tag, marks the images of its ancestry chain that no live
tag can reach. A stale tag whose current image is still safe is skipped
outright. Each ancestor is also checked on its own, so an image shared
with a live tag is never marked.
"""

import logging
import time
from datetime import timedelta
from typing import AbstractSet, FrozenSet, Iterable, Optional, Set

from ..domain.plan import SweepPlan
from ..domain.tag import Tag, TagKey
from .reachability import compute_safe_set
from .retention import classify_stale, cutoff_time

logger = logging.getLogger(__name__)


def plan_deletions(tags: Iterable[Tag], stale: AbstractSet[TagKey],
                   safe: AbstractSet[str]) -> FrozenSet[str]:
    """Image ids owned only by stale tags."""
    marked: Set[str] = set()
    for tag in tags:
        if tag.key not in stale:
            continue
        if tag.image_id in safe:
            logger.debug(f"Skipping {tag.ref}: current image {tag.image_id} is in use")
            continue
        marked.update(i for i in tag.ancestry_ids if i not in safe)

    logger.info(f"{len(marked)} images marked for deletion")
    return frozenset(marked)


def build_plan(tags: Iterable[Tag], window: timedelta,
               now: Optional[int] = None) -> SweepPlan:
    """
    Run the mark-sweep passes over a snapshot of tags.

    Args:
        tags: Every tag in the store
        window: Retention window
        now: Current time in epoch seconds (defaults to the clock)

    Returns:
        SweepPlan with the stale, safe and marked sets
    """
    tags = tuple(tags)
    if now is None:
        now = int(time.time())
    cutoff = cutoff_time(window, now)
    stale = classify_stale(tags, window, now)
    safe = compute_safe_set(tags, stale)
    marked = plan_deletions(tags, stale, safe)
    return SweepPlan(tags=tags, cutoff=cutoff, stale=stale, safe=safe, marked=marked)
