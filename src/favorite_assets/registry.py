"""In-memory registry of favorites and groups backed by the JSON store."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from types import TracebackType
from typing import Iterable, List, Optional, Type

from favorite_assets.host import FOLDER_KIND, UNKNOWN_KIND, AssetHost
from favorite_assets.sorting import FavoriteSortType, SortOrder, sort_favorites
from favorite_assets.state import (
    FavoriteAssetData,
    FavoriteGroup,
    FavoritesDocument,
    MissingStateError,
    StateError,
    StateRepository,
)

LOGGER = logging.getLogger(__name__)


class FavoriteAssetsDataManager:
    """Own the favorites and groups for one process.

    Every public operation runs under a single reentrant lock. State is loaded
    from the repository on first use and every mutation is persisted before the
    call returns. Persistence failures are logged and leave the in-memory
    mutation in place. Queries that return favorites first drop entries whose
    backing resource has disappeared.
    """

    def __init__(self, repository: StateRepository, host: AssetHost) -> None:
        """Initialize the registry.

        Args:
            repository: Store used to load and save the favorites document.
            host: Host capability used to resolve and probe resources.
        """
        self._repository = repository
        self._host = host
        self._lock = threading.RLock()
        self._favorites: List[FavoriteAssetData] = []
        self._groups: List[FavoriteGroup] = []
        self._loaded = False

    @property
    def repository(self) -> StateRepository:
        """Return the backing repository."""
        return self._repository

    @property
    def host(self) -> AssetHost:
        """Return the host capability used for probing."""
        return self._host

    # Lifecycle --------------------------------------------------------

    def load(self) -> None:
        """(Re)load favorites and groups from the repository."""
        with self._lock:
            self._favorites, self._groups = self._read_document()
            # Prime the host's lookup cache with every stored path.
            for favorite in self._favorites:
                if favorite.asset_path:
                    self._resolve_identity(favorite.asset_path)
            self._loaded = True

    def close(self) -> None:
        """Release in-memory state; the next operation reloads from disk."""
        with self._lock:
            self._favorites = []
            self._groups = []
            self._loaded = False

    def __enter__(self) -> "FavoriteAssetsDataManager":
        self._ensure_loaded()
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()

    # Favorites --------------------------------------------------------

    def add_favorite(self, asset_path: str) -> bool:
        """Add the resource at ``asset_path`` to the favorites.

        Args:
            asset_path: Host path of the resource.

        Returns:
            bool: False when the path is empty, its identity cannot be resolved,
                or it is already a favorite.
        """
        if not asset_path:
            return False
        guid = self._resolve_identity(asset_path)
        if not guid:
            return False

        with self._lock:
            self._ensure_loaded()
            if self._find_favorite(guid) is not None:
                return False
            favorite = FavoriteAssetData(
                asset_path=asset_path,
                asset_name=_display_name(asset_path),
                asset_type=self._classify(asset_path),
                asset_guid=guid,
            )
            self._favorites.append(favorite)
            self._save()
            LOGGER.info("Added %s to favorites.", asset_path)
            return True

    def add_favorites(self, asset_paths: Iterable[str]) -> int:
        """Add several resources, returning how many were added."""
        with self._lock:
            return sum(1 for path in asset_paths if self.add_favorite(path))

    def remove_favorite(self, asset_guid: str) -> bool:
        """Remove the favorite identified by ``asset_guid``.

        Returns:
            bool: False when no favorite matches.
        """
        with self._lock:
            self._ensure_loaded()
            favorite = self._find_favorite(asset_guid)
            if favorite is None:
                return False
            self._favorites.remove(favorite)
            self._save()
            LOGGER.info("Removed %s from favorites.", favorite.asset_path)
            return True

    def remove_favorites_at(self, asset_paths: Iterable[str]) -> int:
        """Remove the favorites for several paths, returning how many were removed."""
        removed = 0
        with self._lock:
            for path in asset_paths:
                guid = self._resolve_identity(path) if path else ""
                if guid and self.remove_favorite(guid):
                    removed += 1
        return removed

    def is_favorite(self, asset_path: str) -> bool:
        """Return whether the resource at ``asset_path`` is a favorite."""
        guid = self._resolve_identity(asset_path) if asset_path else ""
        return bool(guid) and self.is_favorite_by_guid(guid)

    def is_favorite_by_guid(self, asset_guid: str) -> bool:
        """Return whether a favorite with ``asset_guid`` exists."""
        with self._lock:
            self._ensure_loaded()
            return self._find_favorite(asset_guid) is not None

    def get_favorite(self, asset_guid: str) -> Optional[FavoriteAssetData]:
        """Return a copy of one favorite without running cleanup."""
        with self._lock:
            self._ensure_loaded()
            favorite = self._find_favorite(asset_guid)
            return favorite.model_copy() if favorite is not None else None

    def touch_entry(self, asset_guid: str) -> bool:
        """Refresh the update time of a favorite, e.g. when it is opened.

        Returns:
            bool: False when no favorite matches; nothing is persisted then.
        """
        with self._lock:
            self._ensure_loaded()
            favorite = self._find_favorite(asset_guid)
            if favorite is None:
                return False
            favorite.touch()
            self._save()
            return True

    def get_favorites(self) -> List[FavoriteAssetData]:
        """Return copies of every valid favorite in insertion order."""
        with self._lock:
            self._ensure_loaded()
            self.cleanup_invalid()
            return [favorite.model_copy() for favorite in self._favorites]

    def get_sorted(
        self,
        sort_type: FavoriteSortType | str = FavoriteSortType.NAME,
        order: SortOrder | str = SortOrder.ASCENDING,
        entries: Optional[Iterable[FavoriteAssetData]] = None,
    ) -> List[FavoriteAssetData]:
        """Return sorted copies of ``entries`` or of every favorite.

        Args:
            sort_type: Field to sort by.
            order: Sort direction.
            entries: Favorites to sort; defaults to all valid favorites.

        Returns:
            List[FavoriteAssetData]: Sorted favorites.
        """
        with self._lock:
            items = self.get_favorites() if entries is None else list(entries)
            return sort_favorites(items, sort_type, order, self._host)

    def get_entries_in_group(self, group_id: str) -> List[FavoriteAssetData]:
        """Return copies of the valid favorites assigned to ``group_id``."""
        return [favorite for favorite in self.get_favorites() if favorite.group_id == group_id]

    def get_ungrouped_entries(self) -> List[FavoriteAssetData]:
        """Return copies of the valid favorites that belong to no group."""
        return [favorite for favorite in self.get_favorites() if not favorite.is_grouped]

    def move_entry_to_group(self, asset_guid: str, group_id: Optional[str]) -> bool:
        """Assign a favorite to ``group_id``; ``None`` or ``""`` ungroups it.

        Returns:
            bool: False when the favorite or the target group does not exist.
        """
        with self._lock:
            self._ensure_loaded()
            favorite = self._find_favorite(asset_guid)
            if favorite is None:
                return False
            target = group_id or None
            if target is not None and self._find_group(target) is None:
                return False
            favorite.group_id = target
            self._save()
            return True

    def clear_all(self) -> None:
        """Remove every favorite. Groups are kept."""
        with self._lock:
            self._ensure_loaded()
            self._favorites.clear()
            self._save()
            LOGGER.info("Cleared all favorites.")

    def cleanup_invalid(self) -> int:
        """Drop favorites whose resource no longer exists.

        Returns:
            int: Number of favorites removed. The store is only written when
                this is non-zero.
        """
        with self._lock:
            self._ensure_loaded()
            valid = [favorite for favorite in self._favorites if favorite.is_valid(self._host)]
            removed = len(self._favorites) - len(valid)
            if removed:
                self._favorites = valid
                self._save()
                LOGGER.info("Removed %d stale favorite(s).", removed)
            return removed

    # Groups -----------------------------------------------------------

    def get_groups(self) -> List[FavoriteGroup]:
        """Return copies of every group ordered by ``sort_order``."""
        with self._lock:
            self._ensure_loaded()
            ordered = sorted(self._groups, key=lambda group: group.sort_order)
            return [group.model_copy() for group in ordered]

    def get_group(self, group_id: str) -> Optional[FavoriteGroup]:
        """Return a copy of one group, or ``None``."""
        with self._lock:
            self._ensure_loaded()
            group = self._find_group(group_id)
            return group.model_copy() if group is not None else None

    def create_group(self, name: str) -> str:
        """Append a new group at the end of the sort order.

        Returns:
            str: Identifier of the new group.
        """
        with self._lock:
            self._ensure_loaded()
            group = FavoriteGroup(name=name, sort_order=len(self._groups))
            self._groups.append(group)
            self._save()
            LOGGER.info("Created group %r (%s).", name, group.id)
            return group.id

    def delete_group(self, group_id: str) -> bool:
        """Delete a group and move its members back to ungrouped.

        Returns:
            bool: False when the group does not exist.
        """
        with self._lock:
            self._ensure_loaded()
            group = self._find_group(group_id)
            if group is None:
                return False
            self._groups.remove(group)
            for favorite in self._favorites:
                if favorite.group_id == group_id:
                    favorite.group_id = None
            self._save()
            LOGGER.info("Deleted group %r (%s).", group.name, group_id)
            return True

    def rename_group(self, group_id: str, new_name: Optional[str]) -> bool:
        """Rename a group.

        Returns:
            bool: False when the group does not exist or ``new_name`` is blank.
        """
        name = (new_name or "").strip()
        if not name:
            return False
        with self._lock:
            self._ensure_loaded()
            group = self._find_group(group_id)
            if group is None:
                return False
            group.name = name
            self._save()
            return True

    def set_group_collapsed(self, group_id: str, collapsed: bool) -> bool:
        """Persist the collapsed state of a group."""
        with self._lock:
            self._ensure_loaded()
            group = self._find_group(group_id)
            if group is None:
                return False
            group.is_collapsed = bool(collapsed)
            self._save()
            return True

    def set_group_sort_order(self, group_id: str, sort_order: int) -> bool:
        """Change the display position of a group. Other groups are not renumbered."""
        with self._lock:
            self._ensure_loaded()
            group = self._find_group(group_id)
            if group is None:
                return False
            group.sort_order = int(sort_order)
            self._save()
            return True

    # Internal helpers -------------------------------------------------

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def _find_favorite(self, asset_guid: str) -> Optional[FavoriteAssetData]:
        if not asset_guid:
            return None
        return next((fav for fav in self._favorites if fav.asset_guid == asset_guid), None)

    def _find_group(self, group_id: str) -> Optional[FavoriteGroup]:
        if not group_id:
            return None
        return next((group for group in self._groups if group.id == group_id), None)

    def _resolve_identity(self, asset_path: str) -> str:
        try:
            return self._host.resolve_identity(asset_path) or ""
        except Exception as exc:  # noqa: BLE001 - host failures mean "not resolvable"
            LOGGER.debug("Identity resolution failed for %s: %s", asset_path, exc)
            return ""

    def _classify(self, asset_path: str) -> str:
        if Path(asset_path).is_dir():
            return FOLDER_KIND
        try:
            return self._host.classify_resource(asset_path) or UNKNOWN_KIND
        except Exception as exc:  # noqa: BLE001 - host failures mean "unknown"
            LOGGER.debug("Classification failed for %s: %s", asset_path, exc)
            return UNKNOWN_KIND

    def _read_document(self) -> tuple[List[FavoriteAssetData], List[FavoriteGroup]]:
        try:
            document = self._repository.load()
        except MissingStateError:
            return [], []
        except StateError as exc:
            LOGGER.warning("Failed to load favorite assets data: %s", exc)
            return [], []

        groups: List[FavoriteGroup] = []
        group_ids: set[str] = set()
        for group in document.groups:
            if group.id in group_ids:
                LOGGER.warning("Ignoring duplicate group %s.", group.id)
                continue
            group_ids.add(group.id)
            groups.append(group)

        favorites: List[FavoriteAssetData] = []
        seen: set[str] = set()
        for favorite in document.favorites:
            if favorite.asset_guid in seen:
                LOGGER.warning("Ignoring duplicate favorite %s.", favorite.asset_guid)
                continue
            seen.add(favorite.asset_guid)
            if favorite.group_id and favorite.group_id not in group_ids:
                favorite.group_id = None
            favorites.append(favorite)
        return favorites, groups

    def _save(self) -> None:
        document = FavoritesDocument(favorites=self._favorites, groups=self._groups)
        try:
            self._repository.save(document)
        except StateError as exc:
            LOGGER.error("Failed to save favorite assets data: %s", exc)


def _display_name(asset_path: str) -> str:
    """Return the name shown for a favorite: folder name or file stem."""
    path = Path(asset_path.rstrip("/\\") or asset_path)
    if path.is_dir():
        return path.name
    return path.stem


__all__ = ["FavoriteAssetsDataManager"]
