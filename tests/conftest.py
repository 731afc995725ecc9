"""
Shared fixtures for regsweep tests.

StoreBuilder lays out a registry store on disk the way a registry does:
tag pointer and metadata files under repositories/, and an ancestry
file per image under images/.
"""

import json
import os
from pathlib import Path

import pytest

from regsweep.domain import Image, Tag

NOW = 1_700_000_000
DAY = 86400


class StoreBuilder:
    """Writes registry store fixtures under a root directory."""

    def __init__(self, root: Path):
        self.root = root
        (root / 'repositories').mkdir(parents=True, exist_ok=True)
        (root / 'images').mkdir(parents=True, exist_ok=True)

    def repo_dir(self, repository: str) -> Path:
        path = self.root / 'repositories' / repository
        path.mkdir(parents=True, exist_ok=True)
        return path

    def pointer(self, repository: str, name: str, image_id: str) -> Path:
        path = self.repo_dir(repository) / f'tag_{name}'
        path.write_text(image_id)
        return path

    def metadata(self, repository: str, name: str, last_update) -> Path:
        path = self.repo_dir(repository) / f'tag{name}_json'
        path.write_text(json.dumps({'last_update': last_update, 'arch': 'amd64'}))
        return path

    def image(self, image_id: str, ancestry=None) -> Path:
        path = self.root / 'images' / image_id
        path.mkdir(parents=True, exist_ok=True)
        (path / 'ancestry').write_text(json.dumps(ancestry or [image_id]))
        (path / 'layer').write_bytes(b'layer-data')
        return path

    def tag(self, repository: str, name: str, ancestry, last_update) -> None:
        """Write a complete tag and every image of its ancestry."""
        self.pointer(repository, name, ancestry[0])
        self.metadata(repository, name, last_update)
        for i, image_id in enumerate(ancestry):
            self.image(image_id, list(ancestry[i:]))

    def has_image(self, image_id: str) -> bool:
        return (self.root / 'images' / image_id).exists()


def make_tag(name, ancestry, last_update, repository='library/app'):
    """Build a Tag directly, without a store."""
    return Tag(
        repository=repository,
        name=name,
        image_id=ancestry[0],
        last_update=last_update,
        ancestry=tuple(Image(i) for i in ancestry),
    )


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point HOME at an empty directory and drop REGSWEEP_* variables."""
    home = tmp_path / 'home'
    home.mkdir()
    monkeypatch.setenv('HOME', str(home))
    for key in list(os.environ):
        if key.startswith('REGSWEEP_'):
            monkeypatch.delenv(key, raising=False)
    return home


@pytest.fixture
def builder(tmp_path):
    return StoreBuilder(tmp_path / 'registry')
