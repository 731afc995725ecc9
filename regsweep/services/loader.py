"""
Metadata loader for regsweep.

Builds the complete set of tags from a registry store: raw records are
merged by tag key and each tag's ancestry chain is resolved. Any bad
record aborts the whole load, because reachability computed over an
incomplete tag set could mark live images for deletion.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..domain.image import Image
from ..domain.tag import RecordKind, Tag, TagKey, TagRecord
from ..errors import LoadError, StoreCorruptError
from ..infra.registry_store import RegistryStore

logger = logging.getLogger(__name__)


@dataclass
class PartialTag:
    """Tag fields gathered so far from its raw records."""
    image_id: Optional[str] = None
    last_update: Optional[int] = None

    @property
    def complete(self) -> bool:
        return self.image_id is not None and self.last_update is not None


def merge_record(partial: PartialTag, record: TagRecord) -> None:
    """
    Fold one raw record into a partial tag.

    Applying the same record twice, or the two kinds in either order,
    gives the same result. Two records of one kind that disagree raise
    LoadError.
    """
    if record.kind is RecordKind.METADATA:
        if partial.last_update is not None and partial.last_update != record.last_update:
            raise LoadError(
                f"Conflicting last_update for {record.key}: "
                f"{partial.last_update} != {record.last_update}",
                path=record.path,
            )
        partial.last_update = record.last_update
    elif record.kind is RecordKind.POINTER:
        if partial.image_id is not None and partial.image_id != record.image_id:
            raise LoadError(
                f"Conflicting image for {record.key}: "
                f"{partial.image_id} != {record.image_id}",
                path=record.path,
            )
        partial.image_id = record.image_id
    else:
        raise AssertionError(f"unreachable: unknown record kind {record.kind!r}")


def merge_records(records: Iterable[TagRecord]) -> Dict[TagKey, PartialTag]:
    """Group raw records by tag key and merge each group."""
    merged: Dict[TagKey, PartialTag] = {}
    for record in records:
        merge_record(merged.setdefault(record.key, PartialTag()), record)
    return merged


class MetadataLoader:
    """
    Loads tags with resolved ancestry from a RegistryStore.

    Example:
        loader = MetadataLoader(RegistryStore(Path("/var/lib/registry")))
        tags = loader.load()
    """

    def __init__(self, store: RegistryStore):
        self.store = store

    def load(self) -> List[Tag]:
        """
        Load every tag in the store.

        Returns:
            Tags sorted by (repository, name)

        Raises:
            LoadError: A record is malformed or incomplete, or an ancestry
                chain is missing or corrupt
        """
        merged = merge_records(self.store.list_tag_records())

        tags = []
        for key in sorted(merged):
            partial = merged[key]
            if not partial.complete:
                missing = 'image pointer' if partial.image_id is None else 'metadata'
                raise LoadError(f"Tag {key} has no {missing} record")
            tags.append(self._build_tag(key, partial))

        logger.info(f"Loaded {len(tags)} tags from {self.store.root}")
        return tags

    def _build_tag(self, key: TagKey, partial: PartialTag) -> Tag:
        image_id = partial.image_id
        chain = self.store.read_ancestry(image_id)

        if not chain:
            raise StoreCorruptError(f"Empty ancestry for image {image_id} of tag {key}")
        if chain[0] != image_id:
            raise StoreCorruptError(
                f"Ancestry of image {image_id} of tag {key} starts with {chain[0]}"
            )

        logger.debug(f"Tag {key} -> {image_id} ({len(chain)} images)")
        return Tag(
            repository=key.repository,
            name=key.name,
            image_id=image_id,
            last_update=partial.last_update,
            ancestry=tuple(Image(id=i) for i in chain),
        )
