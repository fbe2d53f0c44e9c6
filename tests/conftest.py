"""Shared fixtures for favorites tests."""

from __future__ import annotations

import uuid
from datetime import datetime
from pathlib import Path
from typing import Callable

import pytest

from favorite_assets.registry import FavoriteAssetsDataManager
from favorite_assets.state import StateRepository


class FakeHost:
    """Deterministic in-memory host.

    Paths must be registered before they resolve; validity checks still look at
    the real filesystem, so tests create actual files.
    """

    def __init__(self) -> None:
        self.identities: dict[str, str] = {}
        self.kinds: dict[str, str] = {}
        self.mtimes: dict[str, datetime] = {}
        self.raise_on_resolve = False

    def register(
        self,
        path: Path | str,
        *,
        guid: str | None = None,
        kind: str = "TextAsset",
        mtime: datetime | None = None,
    ) -> str:
        key = str(path)
        identity = guid or uuid.uuid4().hex
        self.identities[key] = identity
        self.kinds[key] = kind
        if mtime is not None:
            self.mtimes[key] = mtime
        return identity

    def forget(self, path: Path | str) -> None:
        self.identities.pop(str(path), None)

    def resolve_identity(self, path: str) -> str:
        if self.raise_on_resolve:
            raise RuntimeError("host unavailable")
        return self.identities.get(path, "")

    def resolve_path_from_identity(self, identity: str) -> str:
        if self.raise_on_resolve:
            raise RuntimeError("host unavailable")
        for path, known in self.identities.items():
            if known == identity:
                return path
        return ""

    def classify_resource(self, path: str) -> str:
        return self.kinds.get(path, "Unknown")

    def stat_modified_time(self, path: str) -> datetime:
        if path not in self.mtimes:
            raise OSError(f"cannot stat {path}")
        return self.mtimes[path]


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def repository(tmp_path: Path) -> StateRepository:
    return StateRepository(tmp_path / "userdata")


@pytest.fixture
def manager(repository: StateRepository, host: FakeHost) -> FavoriteAssetsDataManager:
    return FavoriteAssetsDataManager(repository, host)


@pytest.fixture
def make_asset(tmp_path: Path, host: FakeHost) -> Callable[..., str]:
    """Return a factory that creates a file (or folder) and registers it with the host."""

    project = tmp_path / "project"
    project.mkdir(exist_ok=True)

    def _make(
        name: str,
        *,
        kind: str = "TextAsset",
        folder: bool = False,
        guid: str | None = None,
        mtime: datetime | None = None,
    ) -> str:
        path = project / name
        if folder:
            path.mkdir(parents=True, exist_ok=True)
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(name, encoding="utf-8")
        host.register(path, guid=guid, kind=kind, mtime=mtime)
        return str(path)

    return _make
