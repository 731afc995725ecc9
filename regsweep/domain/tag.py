"""
Tag domain objects for regsweep.

A registry tag is a named pointer at a current image, carrying the time
it was last updated and the image's resolved ancestry chain:

    library/ubuntu:latest -> 3f1a... (ancestry: 3f1a..., 9bc2..., 51d0...)

Tags are built by the metadata loader from two kinds of raw records
(see TagRecord) and are immutable once built.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional, Tuple

from .image import Image


class RecordKind(Enum):
    """Kind of raw tag record found in the store."""
    METADATA = "metadata"  # tag<name>_json, carries last_update
    POINTER = "pointer"    # tag_<name>, carries the current image id


class TagKey(NamedTuple):
    """Tag identity: names are unique within a repository."""
    repository: str
    name: str

    def __str__(self) -> str:
        return f"{self.repository}:{self.name}"


@dataclass(frozen=True)
class TagRecord:
    """
    One raw record describing part of a tag.

    A metadata record sets last_update, a pointer record sets image_id.
    The loader merges both kinds into a single Tag by key.
    """
    repository: str
    name: str
    kind: RecordKind
    last_update: Optional[int] = None
    image_id: Optional[str] = None
    path: Optional[str] = None

    @property
    def key(self) -> TagKey:
        return TagKey(self.repository, self.name)


@dataclass(frozen=True)
class Tag:
    """
    Immutable registry tag with its ancestry resolved.

    Attributes:
        repository: Repository path relative to the store (e.g. "library/ubuntu")
        name: Tag name, unique within the repository
        image_id: Id of the image the tag currently points at
        last_update: Last update as integer epoch seconds
        ancestry: Images from the current image toward the base image
    """

    repository: str
    name: str
    image_id: str
    last_update: int
    ancestry: Tuple[Image, ...] = ()

    @property
    def key(self) -> TagKey:
        return TagKey(self.repository, self.name)

    @property
    def ref(self) -> str:
        """Human reference, e.g. 'library/ubuntu:latest'."""
        return str(self.key)

    @property
    def ancestry_ids(self) -> Tuple[str, ...]:
        return tuple(image.id for image in self.ancestry)

    @property
    def last_update_time(self) -> datetime:
        return datetime.fromtimestamp(self.last_update, tz=timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'repository': self.repository,
            'name': self.name,
            'image': self.image_id,
            'last_update': self.last_update,
            'ancestry': list(self.ancestry_ids),
        }

    def __str__(self) -> str:
        return f"{self.ref} {self.last_update} {self.image_id}"
