"""
Domain layer for regsweep.

Contains pure domain objects with no I/O or side effects:
- Image: Content-addressed image reference
- Tag: Registry tag with its resolved ancestry chain
- TagRecord: Raw per-file record the loader merges into tags
- SweepPlan: Stale tags, safe images and images marked for deletion

These objects are immutable and provide to_dict() for structured output.
"""

from .image import Image
from .tag import Tag, TagKey, TagRecord, RecordKind
from .plan import SweepPlan

__all__ = [
    'Image',
    'Tag',
    'TagKey',
    'TagRecord',
    'RecordKind',
    'SweepPlan',
]
