"""
Error types for regsweep.

Every failure that can end a garbage collection run is one of these.
Load errors abort before anything is deleted; delete errors abort the
remaining deletions but leave what was already removed in place.
"""

from typing import Optional, Sequence


class SweepError(Exception):
    """Base class for all regsweep errors."""


class LoadError(SweepError):
    """Tag or ancestry metadata is missing or malformed."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class StoreNotFoundError(LoadError):
    """A file or directory the store is expected to contain is absent."""


class StoreCorruptError(LoadError):
    """A store file exists but cannot be parsed."""


class DeleteError(SweepError):
    """
    Physical removal of an image failed.

    Attributes:
        image_id: Image whose removal failed
        deleted: Image ids removed earlier in the same run
    """

    def __init__(self, image_id: str, cause: OSError, deleted: Sequence[str] = ()):
        super().__init__(f"Failed to delete image {image_id}: {cause}")
        self.image_id = image_id
        self.cause = cause
        self.deleted = list(deleted)


class ConfigError(SweepError):
    """Configuration file could not be read."""


class RetentionParseError(SweepError, ValueError):
    """A retention window specification could not be parsed."""
