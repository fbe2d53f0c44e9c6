"""Group operations on the favorites registry."""

from __future__ import annotations

import json

from favorite_assets.registry import FavoriteAssetsDataManager


def test_create_group_appends_sort_order(manager) -> None:
    """Ensure new groups are appended with increasing sort order.

    Args:
        manager: Registry under test.
    """
    first = manager.create_group("Art")
    second = manager.create_group("Audio")

    groups = manager.get_groups()

    assert [group.id for group in groups] == [first, second]
    assert [group.sort_order for group in groups] == [0, 1]
    assert all(not group.is_collapsed for group in groups)


def test_create_group_persists(manager, repository, host) -> None:
    """Verify a created group is written to the store and reloads.

    Args:
        manager: Registry under test.
        repository: Repository writing under a temporary directory.
        host: In-memory host fixture.
    """
    group_id = manager.create_group("Art")

    data = json.loads(repository.data_path.read_text(encoding="utf-8"))

    assert data["groups"][0]["id"] == group_id
    assert FavoriteAssetsDataManager(repository, host).get_group(group_id).name == "Art"


def test_delete_group_clears_members(manager, make_asset, host) -> None:
    """Ensure deleting a group ungroups its favorites instead of removing them.

    Args:
        manager: Registry under test.
        make_asset: Factory creating registered project files.
        host: In-memory host fixture.
    """
    first = make_asset("a.txt")
    second = make_asset("b.txt")
    manager.add_favorites([first, second])
    group_id = manager.create_group("Art")
    for path in (first, second):
        manager.move_entry_to_group(host.resolve_identity(path), group_id)
    assert len(manager.get_entries_in_group(group_id)) == 2

    assert manager.delete_group(group_id)

    assert manager.get_group(group_id) is None
    favorites = manager.get_favorites()
    assert len(favorites) == 2
    assert all(favorite.group_id is None for favorite in favorites)
    assert not manager.delete_group(group_id)


def test_rename_group_rejects_blank_names(manager) -> None:
    """Verify renames strip whitespace and refuse blank or unknown targets.

    Args:
        manager: Registry under test.
    """
    group_id = manager.create_group("Art")

    assert not manager.rename_group(group_id, "")
    assert not manager.rename_group(group_id, "   ")
    assert not manager.rename_group(group_id, None)
    assert not manager.rename_group("missing", "Name")
    assert manager.rename_group(group_id, "  Concept Art ")
    assert manager.get_group(group_id).name == "Concept Art"


def test_set_group_collapsed(manager) -> None:
    """Ensure the collapsed flag is stored for known groups only.

    Args:
        manager: Registry under test.
    """
    group_id = manager.create_group("Art")

    assert manager.set_group_collapsed(group_id, True)
    assert manager.get_group(group_id).is_collapsed
    assert not manager.set_group_collapsed("missing", True)


def test_set_group_sort_order_reorders_without_renumbering(manager) -> None:
    """Verify changing one group's order leaves the others' values alone.

    Args:
        manager: Registry under test.
    """
    first = manager.create_group("Art")
    second = manager.create_group("Audio")

    assert manager.set_group_sort_order(first, 5)

    groups = manager.get_groups()
    assert [group.id for group in groups] == [second, first]
    assert [group.sort_order for group in groups] == [1, 5]
    assert not manager.set_group_sort_order("missing", 0)


def test_move_entry_to_group_and_back(manager, make_asset, host) -> None:
    """Ensure a favorite moves into a group and back out with None or "".

    Args:
        manager: Registry under test.
        make_asset: Factory creating registered project files.
        host: In-memory host fixture.
    """
    path = make_asset("a.txt")
    manager.add_favorite(path)
    guid = host.resolve_identity(path)
    group_id = manager.create_group("Art")

    assert manager.move_entry_to_group(guid, group_id)
    assert [f.asset_guid for f in manager.get_entries_in_group(group_id)] == [guid]
    assert manager.get_ungrouped_entries() == []

    assert manager.move_entry_to_group(guid, None)
    assert manager.get_entries_in_group(group_id) == []
    assert len(manager.get_ungrouped_entries()) == 1

    assert manager.move_entry_to_group(guid, group_id)
    assert manager.move_entry_to_group(guid, "")
    assert manager.get_favorite(guid).group_id is None


def test_move_entry_rejects_unknown_entry_or_group(manager, make_asset, host) -> None:
    """Verify moves fail for unknown favorites or groups and change nothing.

    Args:
        manager: Registry under test.
        make_asset: Factory creating registered project files.
        host: In-memory host fixture.
    """
    path = make_asset("a.txt")
    manager.add_favorite(path)
    group_id = manager.create_group("Art")

    assert not manager.move_entry_to_group("missing", group_id)
    assert not manager.move_entry_to_group(host.resolve_identity(path), "no-such-group")
    assert manager.get_favorite(host.resolve_identity(path)).group_id is None
