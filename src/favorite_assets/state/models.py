"""State data models for favorite entries and groups."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any, List, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)

if TYPE_CHECKING:
    from favorite_assets.host import AssetHost

LOGGER = logging.getLogger(__name__)

TICKS_EPOCH = datetime(1, 1, 1, tzinfo=timezone.utc)
TICKS_PER_MICROSECOND = 10
TICKS_PER_SECOND = 10_000_000


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_ticks(value: datetime) -> int:
    """Convert a datetime into 100ns ticks since 0001-01-01 UTC.

    Args:
        value: Datetime to convert. Naive values are interpreted as UTC.

    Returns:
        int: Tick count for the datetime.
    """

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - TICKS_EPOCH
    seconds = delta.days * 86_400 + delta.seconds
    return seconds * TICKS_PER_SECOND + delta.microseconds * TICKS_PER_MICROSECOND


def from_ticks(ticks: int) -> datetime:
    """Convert 100ns ticks since 0001-01-01 UTC into an aware datetime.

    Args:
        ticks: Tick count to convert.

    Returns:
        datetime: Aware UTC datetime truncated to microsecond precision.

    Raises:
        ValueError: If the tick count falls outside the supported datetime range.
    """

    try:
        return TICKS_EPOCH + timedelta(microseconds=ticks // TICKS_PER_MICROSECOND)
    except OverflowError as exc:
        raise ValueError(f"Tick value {ticks} is out of range") from exc


def _coerce_ticks(value: Any) -> Any:
    # Zero or missing ticks predate the field and default to "now".
    if value is None or value == "" or value == 0:
        return utcnow()
    if isinstance(value, bool):
        raise ValueError("Tick values must be integers")
    if isinstance(value, int):
        return from_ticks(value)
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


TickDatetime = Annotated[
    datetime,
    BeforeValidator(_coerce_ticks),
    PlainSerializer(to_ticks, return_type=int),
]


class FavoritesBaseModel(BaseModel):
    """Shared configuration for persisted favorite models."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class FavoriteAssetData(FavoritesBaseModel):
    """A single favorited file or folder.

    Identity and add-time metadata are frozen; only ``group_id`` and
    ``date_updated`` change after creation.

    Attributes:
        asset_path: Location of the resource in the host tree (may be stale).
        asset_name: Display name derived when the favorite was added.
        asset_type: Kind of resource (``"Folder"``, a type name, or ``"Unknown"``).
        asset_guid: Stable identity of the resource, unique within the registry.
        group_id: Identifier of the owning group, ``None`` when ungrouped.
        date_added: When the favorite was created.
        date_updated: When the favorite was last touched.
    """

    asset_path: str = Field(default="", alias="assetPath", frozen=True)
    asset_name: str = Field(default="", alias="assetName", frozen=True)
    asset_type: str = Field(default="Unknown", alias="assetType", frozen=True)
    asset_guid: str = Field(default="", alias="assetGuid", frozen=True)
    group_id: Optional[str] = Field(default=None, alias="groupId")
    date_added: TickDatetime = Field(default_factory=utcnow, alias="dateAddedTicks", frozen=True)
    date_updated: TickDatetime = Field(default_factory=utcnow, alias="dateUpdatedTicks")

    @field_validator("group_id", mode="before")
    @classmethod
    def _blank_group_is_ungrouped(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    @model_validator(mode="after")
    def _updated_not_before_added(self) -> "FavoriteAssetData":
        if self.date_updated < self.date_added:
            self.date_updated = self.date_added
        return self

    @property
    def is_grouped(self) -> bool:
        """Return whether the favorite belongs to a group."""
        return bool(self.group_id)

    def touch(self) -> None:
        """Refresh ``date_updated`` without ever moving it backwards."""
        self.date_updated = max(utcnow(), self.date_updated, self.date_added)

    def file_modification_date(self, host: "AssetHost") -> datetime:
        """Return the live modification time, falling back to ``date_updated``.

        Args:
            host: Host capability used to stat the resource.

        Returns:
            datetime: Last-modified time reported by the host, or the tracked
                update time if the resource cannot be stat'ed.
        """

        try:
            modified = host.stat_modified_time(self.asset_path)
        except Exception as exc:  # noqa: BLE001 - any probe failure degrades
            LOGGER.debug("Unable to stat %s: %s", self.asset_path, exc)
            return self.date_updated
        if not isinstance(modified, datetime):
            return self.date_updated
        if modified.tzinfo is None:
            modified = modified.replace(tzinfo=timezone.utc)
        return modified

    def is_valid(self, host: "AssetHost") -> bool:
        """Return whether the favorite still points at a live resource.

        Args:
            host: Host capability used to resolve the identity.

        Returns:
            bool: True when the identity resolves and the path exists on disk.
        """

        if not self.asset_path or not self.asset_guid:
            return False
        try:
            if not host.resolve_path_from_identity(self.asset_guid):
                return False
            return Path(self.asset_path).exists()
        except Exception as exc:  # noqa: BLE001 - any probe failure means invalid
            LOGGER.debug("Validity probe failed for %s: %s", self.asset_guid, exc)
            return False


class FavoriteGroup(FavoritesBaseModel):
    """A named, orderable, collapsible bucket of favorites.

    Attributes:
        id: Unique identifier generated at creation.
        name: Display name.
        is_collapsed: Whether the panel hides the group's entries.
        date_created: When the group was created.
        sort_order: Display position among groups, lower first.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), frozen=True)
    name: str = ""
    is_collapsed: bool = Field(default=False, alias="isCollapsed")
    date_created: TickDatetime = Field(
        default_factory=utcnow, alias="dateCreatedTicks", frozen=True
    )
    sort_order: int = Field(default=0, alias="sortOrder")


class FavoritesDocument(FavoritesBaseModel):
    """Persisted document holding every favorite and group."""

    favorites: List[FavoriteAssetData] = Field(default_factory=list)
    groups: List[FavoriteGroup] = Field(default_factory=list)


__all__ = [
    "FavoriteAssetData",
    "FavoriteGroup",
    "FavoritesDocument",
    "TickDatetime",
    "from_ticks",
    "to_ticks",
    "utcnow",
]
