"""Sorting helpers shared by the registry and the panel."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Iterable, List

from favorite_assets.state.models import FavoriteAssetData

if TYPE_CHECKING:
    from favorite_assets.host import AssetHost


class FavoriteSortType(str, Enum):
    """Fields the favorites panel can sort by."""

    NAME = "name"
    TYPE = "type"
    DATE_ADDED = "date_added"
    DATE_UPDATED = "date_updated"

    @property
    def label(self) -> str:
        """Return the short label shown on the sort button."""
        return _SORT_TYPE_LABELS[self]

    def next(self) -> "FavoriteSortType":
        """Return the field that follows this one when cycling."""
        members = list(FavoriteSortType)
        return members[(members.index(self) + 1) % len(members)]


class SortOrder(str, Enum):
    """Sort direction."""

    ASCENDING = "ascending"
    DESCENDING = "descending"

    @property
    def label(self) -> str:
        """Return the arrow shown next to the sort field."""
        return "↑" if self is SortOrder.ASCENDING else "↓"

    @property
    def reverse(self) -> bool:
        """Return whether this direction sorts in reverse."""
        return self is SortOrder.DESCENDING

    def toggled(self) -> "SortOrder":
        """Return the opposite direction."""
        return SortOrder.DESCENDING if self is SortOrder.ASCENDING else SortOrder.ASCENDING


_SORT_TYPE_LABELS = {
    FavoriteSortType.NAME: "Name",
    FavoriteSortType.TYPE: "Type",
    FavoriteSortType.DATE_ADDED: "Added",
    FavoriteSortType.DATE_UPDATED: "Modified",
}


def _name_key(entry: FavoriteAssetData) -> str:
    return entry.asset_name.casefold()


def sort_favorites(
    entries: Iterable[FavoriteAssetData],
    sort_type: FavoriteSortType | str,
    order: SortOrder | str,
    host: "AssetHost",
) -> List[FavoriteAssetData]:
    """Return ``entries`` sorted by ``sort_type`` in ``order``.

    Sorting is stable. Name and type compare case-insensitively. Type sorting
    breaks ties by name ascending regardless of ``order``. ``DATE_UPDATED``
    sorts by the live file modification time reported by ``host``.

    Args:
        entries: Favorites to sort.
        sort_type: Field to sort by.
        order: Ascending or descending.
        host: Host used to read file modification times.

    Returns:
        List[FavoriteAssetData]: New list holding the sorted favorites.
    """

    sort_type = FavoriteSortType(sort_type)
    reverse = SortOrder(order).reverse
    items = list(entries)

    if sort_type is FavoriteSortType.NAME:
        items.sort(key=_name_key, reverse=reverse)
    elif sort_type is FavoriteSortType.TYPE:
        items.sort(key=_name_key)
        items.sort(key=lambda entry: entry.asset_type.casefold(), reverse=reverse)
    elif sort_type is FavoriteSortType.DATE_ADDED:
        items.sort(key=lambda entry: entry.date_added, reverse=reverse)
    else:
        modified = {id(entry): entry.file_modification_date(host) for entry in items}
        items.sort(key=lambda entry: modified[id(entry)], reverse=reverse)
    return items


__all__ = ["FavoriteSortType", "SortOrder", "sort_favorites"]
