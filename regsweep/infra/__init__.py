"""
Infrastructure layer for regsweep.

Contains abstractions for external systems:
- RegistryStore: Reads tag records and ancestry from, and deletes images
  in, an on-disk registry store

These provide clean interfaces that can be replaced for testing.
"""

from .registry_store import RegistryStore

__all__ = [
    'RegistryStore',
]
