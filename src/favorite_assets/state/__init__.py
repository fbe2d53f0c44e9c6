"""Persistence helpers for the favorites store."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import MissingStateError, StateError
from .models import FavoriteAssetData, FavoriteGroup, FavoritesDocument

LOGGER = logging.getLogger(__name__)

DEFAULT_DATA_SUBDIR = "Editor"
DEFAULT_DATA_FILENAME = "FavoriteAssetsData.json"

_ModelT = TypeVar("_ModelT", bound=BaseModel)


class StateRepository:
    """Manage the JSON document that stores favorites and groups."""

    def __init__(
        self,
        data_dir: Path,
        *,
        subdirectory: str = DEFAULT_DATA_SUBDIR,
        file_name: str = DEFAULT_DATA_FILENAME,
        indent: int | None = 2,
    ) -> None:
        """Initialize the repository.

        Args:
            data_dir: Per-user data directory that hosts the store.
            subdirectory: Folder beneath ``data_dir`` holding the JSON file.
            file_name: Name of the JSON file.
            indent: Indentation used when writing JSON; ``None`` for compact output.
        """
        self._data_dir = Path(data_dir).expanduser()
        self._subdirectory = subdirectory
        self._file_name = file_name
        self._indent = indent

    @property
    def data_path(self) -> Path:
        """Return the full path of the JSON store.

        Returns:
            Path: Location of the persisted favorites document.
        """
        return self._data_dir / self._subdirectory / self._file_name

    def exists(self) -> bool:
        """Return whether the JSON store is present on disk."""
        return self.data_path.exists()

    def load(self) -> FavoritesDocument:
        """Load the favorites document from disk.

        Malformed individual favorites or groups are skipped with a warning so a
        single bad record does not discard the rest of the store.

        Returns:
            FavoritesDocument: Deserialized favorites and groups.

        Raises:
            MissingStateError: If the store does not exist.
            StateError: If the store cannot be read or is not a JSON object.
        """
        path = self.data_path
        if not path.exists():
            raise MissingStateError(f"No favorites store found at {path}")

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StateError(f"Invalid favorites data: {exc}") from exc
        except OSError as exc:
            raise StateError(f"Unable to read {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise StateError("Favorites data must contain a JSON object at the top level.")

        return FavoritesDocument(
            favorites=_parse_records(data.get("favorites"), FavoriteAssetData, "favorite"),
            groups=_parse_records(data.get("groups"), FavoriteGroup, "group"),
        )

    def save(self, document: FavoritesDocument) -> None:
        """Persist the favorites document to disk.

        Args:
            document: Favorites and groups to serialize.

        Raises:
            StateError: If the directory or file cannot be written.
        """
        payload = document.model_dump(mode="json", by_alias=True)
        try:
            self.initialize()
            self.data_path.write_text(
                json.dumps(payload, indent=self._indent, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as exc:
            raise StateError(f"Unable to write {self.data_path}: {exc}") from exc

    def initialize(self) -> Path:
        """Create the directory that holds the store.

        Returns:
            Path: Directory containing the JSON file.
        """
        directory = self.data_path.parent
        directory.mkdir(parents=True, exist_ok=True)
        return directory


def _parse_records(raw: Any, model: Type[_ModelT], label: str) -> list[_ModelT]:
    """Validate a list of raw records, skipping the malformed ones.

    Args:
        raw: Value stored under the document key.
        model: Pydantic model used for validation.
        label: Human-readable record label for log messages.

    Returns:
        list[_ModelT]: Successfully validated records.
    """

    if raw is None:
        return []
    if not isinstance(raw, list):
        LOGGER.warning("Ignoring %s list with unexpected type %s.", label, type(raw).__name__)
        return []

    records: list[_ModelT] = []
    for index, item in enumerate(raw):
        try:
            records.append(model.model_validate(item))
        except ValidationError as exc:
            LOGGER.warning("Skipping malformed %s record at index %d: %s", label, index, exc)
    return records


__all__ = [
    "StateRepository",
    "DEFAULT_DATA_SUBDIR",
    "DEFAULT_DATA_FILENAME",
    "FavoriteAssetData",
    "FavoriteGroup",
    "FavoritesDocument",
    "StateError",
    "MissingStateError",
]
