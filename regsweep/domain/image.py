"""
Image domain object for regsweep.

An image is a content-addressed storage unit. Tags and ancestry chains
reference images by id; images hold no reference back to their tags.
"""

from dataclasses import dataclass
from typing import Dict, Any


@dataclass(frozen=True)
class Image:
    """Image identified by its opaque content-addressed id."""
    id: str

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id}

    def __str__(self) -> str:
        return self.id
