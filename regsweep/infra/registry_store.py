"""
Registry store infrastructure for regsweep.

Reads and deletes from an on-disk registry laid out as:

    <root>/repositories/<namespace>/<repo>/tag_<name>        current image id
    <root>/repositories/<namespace>/<repo>/tag<name>_json    {"last_update": ...}
    <root>/images/<id>/ancestry                              ["<id>", "<parent>", ...]

The store knows nothing about retention or reachability. It yields raw
tag records, ancestry lists and removes image directories.
"""

import json
import logging
import math
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, List, Optional

from ..domain.tag import RecordKind, TagRecord
from ..errors import StoreCorruptError, StoreNotFoundError

logger = logging.getLogger(__name__)

REPOSITORIES_DIR = 'repositories'
IMAGES_DIR = 'images'
ANCESTRY_FILE = 'ancestry'

POINTER_PREFIX = 'tag_'
METADATA_PREFIX = 'tag'
METADATA_SUFFIX = '_json'

DEFAULT_IGNORE_FILES = ('_index_images', 'json')


def _valid_image_id(image_id: Any) -> bool:
    """Image ids become directory names, so they must be a single path segment."""
    return (
        isinstance(image_id, str)
        and image_id not in ('', '.', '..')
        and '/' not in image_id
        and '\\' not in image_id
        and image_id.strip() == image_id
    )


class RegistryStore:
    """
    Filesystem access to a registry store.

    Example:
        store = RegistryStore(Path("/var/lib/registry"))
        for record in store.list_tag_records():
            print(record.repository, record.name, record.kind)
        chain = store.read_ancestry("3f1a...")
    """

    def __init__(self, root: Path, ignore_files: Optional[Iterable[str]] = None):
        """
        Initialize RegistryStore.

        Args:
            root: Store root directory
            ignore_files: Repository-level file names that are not tag records
        """
        self.root = Path(root).expanduser()
        if ignore_files is None:
            ignore_files = DEFAULT_IGNORE_FILES
        self.ignore_files = frozenset(ignore_files)

    @property
    def repositories_dir(self) -> Path:
        return self.root / REPOSITORIES_DIR

    @property
    def images_dir(self) -> Path:
        return self.root / IMAGES_DIR

    def image_path(self, image_id: str) -> Path:
        if not _valid_image_id(image_id):
            raise StoreCorruptError(f"Invalid image id: {image_id!r}")
        return self.images_dir / image_id

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def list_tag_records(self) -> List[TagRecord]:
        """
        Read every raw tag record under the repositories directory.

        Records are returned in a stable (sorted path) order.

        Raises:
            StoreNotFoundError: The repositories directory does not exist
            StoreCorruptError: A record cannot be read or parsed, or an
                unrecognized file is present
        """
        repos_dir = self.repositories_dir
        if not repos_dir.is_dir():
            raise StoreNotFoundError(
                f"No repositories directory in store: {repos_dir}", path=str(repos_dir)
            )

        records: List[TagRecord] = []
        for dirpath, dirnames, filenames in os.walk(repos_dir):
            dirnames.sort()
            repository = Path(dirpath).relative_to(repos_dir).as_posix()
            for filename in sorted(filenames):
                if filename.startswith('.') or filename in self.ignore_files:
                    logger.debug(f"Skipping {repository}/{filename}")
                    continue
                record = self._read_record(Path(dirpath) / filename, repository, filename)
                records.append(record)

        logger.debug(f"Read {len(records)} tag records from {repos_dir}")
        return records

    def _read_record(self, path: Path, repository: str, filename: str) -> TagRecord:
        if repository == '.':
            raise StoreCorruptError(
                f"Tag record outside of a repository: {path}", path=str(path)
            )

        if filename.endswith(METADATA_SUFFIX) and filename.startswith(METADATA_PREFIX):
            name = filename[len(METADATA_PREFIX):-len(METADATA_SUFFIX)]
            return TagRecord(
                repository=repository,
                name=name,
                kind=RecordKind.METADATA,
                last_update=self._read_last_update(path),
                path=str(path),
            )

        if filename.startswith(POINTER_PREFIX):
            name = filename[len(POINTER_PREFIX):]
            return TagRecord(
                repository=repository,
                name=name,
                kind=RecordKind.POINTER,
                image_id=self._read_image_ref(path),
                path=str(path),
            )

        raise StoreCorruptError(f"Unrecognized file in store: {path}", path=str(path))

    def _read_last_update(self, path: Path) -> int:
        data = self._load_json(path)
        if not isinstance(data, dict) or 'last_update' not in data:
            raise StoreCorruptError(f"Missing last_update in {path}", path=str(path))

        value = data['last_update']
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise StoreCorruptError(
                f"last_update is not a number in {path}: {value!r}", path=str(path)
            )
        if isinstance(value, float) and not math.isfinite(value):
            raise StoreCorruptError(
                f"last_update is not finite in {path}: {value!r}", path=str(path)
            )

        last_update = int(value)
        try:
            datetime.fromtimestamp(last_update, tz=timezone.utc)
        except (OverflowError, ValueError, OSError) as e:
            raise StoreCorruptError(
                f"last_update out of range in {path}: {value!r}", path=str(path)
            ) from e
        return last_update

    def _read_image_ref(self, path: Path) -> str:
        try:
            image_id = path.read_text(encoding='utf-8').strip()
        except (OSError, UnicodeDecodeError) as e:
            raise StoreCorruptError(f"Cannot read {path}: {e}", path=str(path)) from e

        if not _valid_image_id(image_id):
            raise StoreCorruptError(
                f"Invalid image reference in {path}: {image_id!r}", path=str(path)
            )
        return image_id

    def read_ancestry(self, image_id: str) -> List[str]:
        """
        Read the ordered lineage of an image, the image itself first.

        Raises:
            StoreNotFoundError: The ancestry file does not exist
            StoreCorruptError: The ancestry file is not a JSON list of ids
        """
        path = self.image_path(image_id) / ANCESTRY_FILE
        if not path.is_file():
            raise StoreNotFoundError(
                f"No ancestry for image {image_id}: {path}", path=str(path)
            )

        data = self._load_json(path)
        if not isinstance(data, list) or not all(_valid_image_id(i) for i in data):
            raise StoreCorruptError(
                f"Ancestry of image {image_id} is not a list of image ids", path=str(path)
            )
        return data

    def _load_json(self, path: Path) -> Any:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StoreCorruptError(f"Cannot parse {path}: {e}", path=str(path)) from e
        except FileNotFoundError as e:
            raise StoreNotFoundError(f"Missing {path}", path=str(path)) from e
        except OSError as e:
            raise StoreCorruptError(f"Cannot read {path}: {e}", path=str(path)) from e

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def delete_image(self, image_id: str) -> bool:
        """
        Remove an image's directory tree.

        Deleting an image that is already gone is not an error.

        Returns:
            True if something was removed, False if the image was absent

        Raises:
            OSError: Removal failed
        """
        path = self.image_path(image_id)
        if not os.path.lexists(path):
            logger.debug(f"Image {image_id} already absent")
            return False

        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink()
        except FileNotFoundError:
            return False

        logger.debug(f"Deleted image {image_id}")
        return True
