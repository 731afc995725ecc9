"""
Sweep plan domain object for regsweep.

A SweepPlan is the outcome of the mark-sweep passes over one snapshot of
the store. Classification is held as sets rather than flags on the tags
and images themselves, so a plan can be recomputed and compared freely.
"""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Tuple

from .tag import Tag, TagKey


@dataclass(frozen=True)
class SweepPlan:
    """
    Result of classifying tags and planning image deletions.

    Attributes:
        tags: Every tag in the snapshot
        cutoff: Epoch seconds; tags updated before this are stale
        stale: Keys of stale tags
        safe: Image ids reachable from live tags
        marked: Image ids planned for deletion
    """

    tags: Tuple[Tag, ...]
    cutoff: int
    stale: FrozenSet[TagKey] = frozenset()
    safe: FrozenSet[str] = frozenset()
    marked: FrozenSet[str] = frozenset()

    def is_stale(self, tag: Tag) -> bool:
        return tag.key in self.stale

    def is_marked(self, image_id: str) -> bool:
        return image_id in self.marked

    @property
    def live_tags(self) -> List[Tag]:
        return [t for t in self.tags if t.key not in self.stale]

    @property
    def stale_tags(self) -> List[Tag]:
        return [t for t in self.tags if t.key in self.stale]

    def images_for(self, tag: Tag) -> List[str]:
        """Marked image ids of a tag's ancestry, in chain order."""
        return [i for i in tag.ancestry_ids if i in self.marked]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'cutoff': self.cutoff,
            'stale': sorted(str(k) for k in self.stale),
            'safe': sorted(self.safe),
            'marked': sorted(self.marked),
        }
