"""
Retention marking for regsweep.

Partitions tags into live and stale against a cutoff. Timestamps are
compared as integers, so last-update values of any digit count order
correctly.
"""

import logging
import re
import time
from datetime import timedelta
from typing import FrozenSet, Iterable, Optional, Union

from ..domain.tag import Tag, TagKey
from ..errors import RetentionParseError

logger = logging.getLogger(__name__)

_UNITS = {
    's': timedelta(seconds=1),
    'm': timedelta(minutes=1),
    'h': timedelta(hours=1),
    'd': timedelta(days=1),
    'w': timedelta(weeks=1),
    'M': timedelta(days=30),  # Approximate month
}


def parse_retention(value: Union[str, int, timedelta]) -> timedelta:
    """
    Parse a retention window into a timedelta.

    Supports:
        - Relative: "30s", "12h", "20d", "2w", "3M"
        - Bare seconds: "86400" or 86400
        - A timedelta, returned as is

    Raises:
        RetentionParseError: If value cannot be parsed or is negative
    """
    if isinstance(value, timedelta):
        if value < timedelta(0):
            raise RetentionParseError(f"Retention window must not be negative: {value}")
        return value

    if isinstance(value, bool):
        raise RetentionParseError(f"Invalid retention window: {value!r}")

    if isinstance(value, int):
        if value < 0:
            raise RetentionParseError(f"Retention window must not be negative: {value}")
        return timedelta(seconds=value)

    match = re.match(r'^(\d+)([smhdwM]?)$', str(value).strip())
    if not match:
        raise RetentionParseError(
            f"Invalid retention window: {value!r} (expected e.g. '20d', '12h', '2w')"
        )

    amount = int(match.group(1))
    unit = match.group(2) or 's'
    return amount * _UNITS[unit]


def cutoff_time(window: timedelta, now: Optional[int] = None) -> int:
    """Epoch seconds before which a tag's last update makes it stale."""
    if now is None:
        now = int(time.time())
    return now - int(window.total_seconds())


def is_stale(tag: Tag, cutoff: int) -> bool:
    return tag.last_update < cutoff


def classify_stale(tags: Iterable[Tag], window: timedelta,
                   now: Optional[int] = None) -> FrozenSet[TagKey]:
    """
    Return the keys of tags last updated before now - window.

    A tag updated exactly at the cutoff is live.
    """
    cutoff = cutoff_time(window, now)
    stale = frozenset(tag.key for tag in tags if is_stale(tag, cutoff))
    logger.info(f"{len(stale)} stale tags (cutoff {cutoff})")
    return stale
