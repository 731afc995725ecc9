"""
Reachability (mark phase) for regsweep.

The safe set is every image a live tag can reach: its current image and
each image of its ancestry chain. Chains arrive already flattened, so
no graph traversal is needed.
"""

import logging
from typing import AbstractSet, FrozenSet, Iterable, Set

from ..domain.tag import Tag, TagKey

logger = logging.getLogger(__name__)


def compute_safe_set(tags: Iterable[Tag], stale: AbstractSet[TagKey]) -> FrozenSet[str]:
    """Image ids reachable from tags not in the stale set."""
    safe: Set[str] = set()
    for tag in tags:
        if tag.key in stale:
            continue
        safe.add(tag.image_id)
        safe.update(tag.ancestry_ids)

    logger.info(f"{len(safe)} images reachable from live tags")
    return frozenset(safe)
