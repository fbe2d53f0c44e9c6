"""Configuration models describing favorites settings."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class FavoritesBaseConfig(BaseModel):
    """Shared configuration for settings models."""

    model_config = ConfigDict(extra="forbid")


class StorageSettings(FavoritesBaseConfig):
    """Where the favorites store lives.

    Attributes:
        data_dir: Per-user data directory.
        subdirectory: Folder beneath ``data_dir`` that holds the store.
        file_name: Name of the JSON store.
        indent: JSON indentation; ``None`` writes compact output.
    """

    data_dir: str = "~/.favorite-assets"
    subdirectory: str = "Editor"
    file_name: str = "FavoriteAssetsData.json"
    indent: Optional[int] = 2


class HostSettings(FavoritesBaseConfig):
    """Settings for the filesystem host adapter.

    Attributes:
        project_root: Directory tree whose files can be favorited. ``None`` serves
            the home directory.
    """

    project_root: Optional[str] = None


class DisplaySettings(FavoritesBaseConfig):
    """Panel presentation preferences.

    Attributes:
        sort_type: Field used to sort favorites.
        sort_order: Sort direction.
        show_paths: Whether listings include each favorite's path.
    """

    sort_type: Literal["name", "type", "date_added", "date_updated"] = "name"
    sort_order: Literal["ascending", "descending"] = "ascending"
    show_paths: bool = True


class LoggingSettings(FavoritesBaseConfig):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class FavoritesConfig(FavoritesBaseConfig):
    """Top-level configuration.

    Attributes:
        storage: Store location settings.
        host: Host adapter settings.
        display: Panel presentation settings.
        logging: Logging configuration.
    """

    storage: StorageSettings = Field(default_factory=StorageSettings)
    host: HostSettings = Field(default_factory=HostSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


__all__ = [
    "FavoritesBaseConfig",
    "StorageSettings",
    "HostSettings",
    "DisplaySettings",
    "LoggingSettings",
    "FavoritesConfig",
]
