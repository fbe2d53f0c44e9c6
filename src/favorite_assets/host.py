"""Host capabilities used to resolve, classify, and stat favorited resources."""

from __future__ import annotations

import logging
import mimetypes
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, runtime_checkable

LOGGER = logging.getLogger(__name__)

FOLDER_KIND = "Folder"
UNKNOWN_KIND = "Unknown"

_MAJOR_TYPE_KINDS = {
    "image": "Texture2D",
    "audio": "AudioClip",
    "video": "VideoClip",
    "text": "TextAsset",
    "font": "Font",
}
_TEXT_APPLICATION_TYPES = {
    "application/json",
    "application/xml",
    "application/yaml",
    "application/x-yaml",
    "application/toml",
}
_EXTRA_SUFFIX_TYPES = {
    ".yaml": "application/yaml",
    ".yml": "application/yaml",
    ".toml": "application/toml",
    ".md": "text/markdown",
}


@runtime_checkable
class AssetHost(Protocol):
    """Capabilities the favorites registry needs from its host application."""

    def resolve_identity(self, path: str) -> str:
        """Return the stable identity for ``path`` or an empty string."""

    def resolve_path_from_identity(self, identity: str) -> str:
        """Return the current path for ``identity`` or an empty string."""

    def classify_resource(self, path: str) -> str:
        """Return the kind name for ``path``."""

    def stat_modified_time(self, path: str) -> datetime:
        """Return the last-modified time for ``path``; raise on failure."""


class FilesystemHost:
    """Treat a local directory tree as the asset host.

    Identities are derived from the device and inode numbers, so they survive
    renames and moves inside one filesystem. Paths outside ``root`` do not
    resolve. Without an explicit ``root`` the user's home directory is served,
    so the same favorites resolve whatever the working directory is.
    """

    def __init__(self, root: Path | str | None = None) -> None:
        self._root = (Path(root).expanduser() if root else Path.home()).resolve()
        self._known: dict[str, str] = {}
        self._indexed = False

    @property
    def root(self) -> Path:
        """Return the directory tree served by this host."""
        return self._root

    def resolve_identity(self, path: str) -> str:
        if not path:
            return ""
        candidate = Path(path).expanduser()
        try:
            resolved = candidate.resolve()
            resolved.relative_to(self._root)
            stat = resolved.stat()
        except (OSError, ValueError):
            return ""
        identity = _identity_from_stat(stat)
        self._known[identity] = str(candidate)
        return identity

    def resolve_path_from_identity(self, identity: str) -> str:
        if not identity:
            return ""
        cached = self._known.get(identity)
        if cached and self._matches(cached, identity):
            return cached
        if not self._indexed:
            self._index()
            cached = self._known.get(identity)
            if cached and self._matches(cached, identity):
                return cached
        return ""

    def classify_resource(self, path: str) -> str:
        candidate = Path(path)
        if candidate.is_dir():
            return FOLDER_KIND
        mime_type, _ = mimetypes.guess_type(candidate.name)
        if mime_type is None:
            mime_type = _EXTRA_SUFFIX_TYPES.get(candidate.suffix.lower())
        if mime_type is None:
            return UNKNOWN_KIND
        if mime_type in _TEXT_APPLICATION_TYPES:
            return _MAJOR_TYPE_KINDS["text"]
        major = mime_type.split("/", 1)[0]
        return _MAJOR_TYPE_KINDS.get(major, UNKNOWN_KIND)

    def stat_modified_time(self, path: str) -> datetime:
        stat = Path(path).stat()
        return datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)

    def _matches(self, path: str, identity: str) -> bool:
        try:
            return _identity_from_stat(Path(path).stat()) == identity
        except OSError:
            return False

    def _index(self) -> None:
        """Walk the host root once, recording the identity of every entry."""
        self._indexed = True
        LOGGER.debug("Indexing %s to resolve moved favorites.", self._root)
        for current, dirnames, filenames in os.walk(self._root):
            for name in [*dirnames, *filenames]:
                path = os.path.join(current, name)
                try:
                    identity = _identity_from_stat(os.stat(path))
                except OSError:
                    continue
                self._known[identity] = path


def _identity_from_stat(stat: os.stat_result) -> str:
    return f"{stat.st_dev:x}-{stat.st_ino:x}"


__all__ = ["AssetHost", "FilesystemHost", "FOLDER_KIND", "UNKNOWN_KIND"]
