"""View model for the favorites panel."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List

from favorite_assets.registry import FavoriteAssetsDataManager
from favorite_assets.sorting import FavoriteSortType, SortOrder
from favorite_assets.state import FavoriteAssetData, FavoriteGroup

EMPTY_STATE_TEXT = (
    "No favorite assets yet.\n\n"
    "Run `favs add PATH` on files or folders to get started."
)


def status_text(count: int) -> str:
    """Return the status-bar text for ``count`` favorites."""
    return "1 favorite asset" if count == 1 else f"{count} favorite assets"


@dataclass(slots=True)
class GroupSection:
    """A group header and the favorites rendered beneath it.

    Attributes:
        group: Group shown in the header.
        count: Number of favorites in the group, including hidden ones.
        entries: Sorted favorites; empty while the group is collapsed.
    """

    group: FavoriteGroup
    count: int
    entries: List[FavoriteAssetData] = field(default_factory=list)


@dataclass(slots=True)
class PanelView:
    """Everything needed to render the favorites panel once.

    Attributes:
        sort_type: Field the entries are sorted by.
        order: Sort direction.
        ungrouped: Sorted favorites that belong to no group, shown first.
        sections: Groups in display order.
        total: Total number of favorites.
    """

    sort_type: FavoriteSortType
    order: SortOrder
    ungrouped: List[FavoriteAssetData] = field(default_factory=list)
    sections: List[GroupSection] = field(default_factory=list)
    total: int = 0

    @property
    def is_empty(self) -> bool:
        """Return whether the panel has no favorites to show."""
        return self.total == 0

    @property
    def status(self) -> str:
        """Return the status-bar text for the panel."""
        return status_text(self.total)

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-ready representation of the panel."""

        def _entry(entry: FavoriteAssetData) -> dict[str, Any]:
            return entry.model_dump(mode="json")

        return {
            "sort": {"type": self.sort_type.value, "order": self.order.value},
            "total": self.total,
            "ungrouped": [_entry(entry) for entry in self.ungrouped],
            "groups": [
                {
                    "group": section.group.model_dump(mode="json"),
                    "count": section.count,
                    "entries": [_entry(entry) for entry in section.entries],
                }
                for section in self.sections
            ],
        }


def build_panel(
    manager: FavoriteAssetsDataManager,
    sort_type: FavoriteSortType | str = FavoriteSortType.NAME,
    order: SortOrder | str = SortOrder.ASCENDING,
) -> PanelView:
    """Query the registry and arrange favorites the way the panel shows them.

    Args:
        manager: Registry to query.
        sort_type: Field used to sort entries within each section.
        order: Sort direction.

    Returns:
        PanelView: Ungrouped favorites first, then groups by sort order.
    """

    sort_type = FavoriteSortType(sort_type)
    order = SortOrder(order)
    favorites = manager.get_favorites()
    groups = manager.get_groups()
    known = {group.id for group in groups}

    view = PanelView(sort_type=sort_type, order=order, total=len(favorites))
    ungrouped = [entry for entry in favorites if entry.group_id not in known]
    view.ungrouped = manager.get_sorted(sort_type, order, entries=ungrouped)
    for group in groups:
        members = [entry for entry in favorites if entry.group_id == group.id]
        section = GroupSection(group=group, count=len(members))
        if not group.is_collapsed:
            section.entries = manager.get_sorted(sort_type, order, entries=members)
        view.sections.append(section)
    return view


__all__ = ["EMPTY_STATE_TEXT", "GroupSection", "PanelView", "build_panel", "status_text"]
