"""State repository tests."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from favorite_assets.state import (
    DEFAULT_DATA_FILENAME,
    DEFAULT_DATA_SUBDIR,
    FavoriteAssetData,
    FavoriteGroup,
    FavoritesDocument,
    MissingStateError,
    StateError,
    StateRepository,
)


def _document() -> FavoritesDocument:
    """Return a sample document with one group and two favorites.

    Returns:
        FavoritesDocument: Sample favorites document.
    """
    group = FavoriteGroup(name="Characters", sort_order=0)
    return FavoritesDocument(
        favorites=[
            FavoriteAssetData(
                asset_path="Assets/hero.png",
                asset_name="hero",
                asset_type="Texture2D",
                asset_guid="guid-hero",
                group_id=group.id,
            ),
            FavoriteAssetData(
                asset_path="Assets/Levels",
                asset_name="Levels",
                asset_type="Folder",
                asset_guid="guid-levels",
            ),
        ],
        groups=[group],
    )


def test_data_path_uses_editor_subdirectory(tmp_path: Path) -> None:
    """Ensure the store lives under ``<data_dir>/Editor``.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    repo = StateRepository(tmp_path)

    assert repo.data_path == tmp_path / DEFAULT_DATA_SUBDIR / DEFAULT_DATA_FILENAME
    assert DEFAULT_DATA_FILENAME == "FavoriteAssetsData.json"


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    """Ensure save followed by load reproduces favorites and groups.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    repo = StateRepository(tmp_path)
    document = _document()

    repo.save(document)
    loaded = repo.load()

    assert loaded.model_dump() == document.model_dump()


def test_saved_document_uses_expected_schema(tmp_path: Path) -> None:
    """Verify the JSON layout written to disk.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    repo = StateRepository(tmp_path)

    repo.save(_document())
    data = json.loads(repo.data_path.read_text(encoding="utf-8"))

    assert set(data) == {"favorites", "groups"}
    assert set(data["favorites"][0]) == {
        "assetPath",
        "assetName",
        "assetType",
        "assetGuid",
        "groupId",
        "dateAddedTicks",
        "dateUpdatedTicks",
    }
    assert isinstance(data["favorites"][0]["dateAddedTicks"], int)
    assert set(data["groups"][0]) == {"id", "name", "isCollapsed", "dateCreatedTicks", "sortOrder"}


def test_load_missing_store_raises(tmp_path: Path) -> None:
    """Verify loading without a store raises MissingStateError.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    repo = StateRepository(tmp_path)

    with pytest.raises(MissingStateError):
        repo.load()


@pytest.mark.parametrize("payload", ["not json", "[1, 2, 3]", ""])
def test_load_invalid_store_raises(tmp_path: Path, payload: str) -> None:
    """Ensure malformed payloads raise StateError on load.

    Args:
        tmp_path: Temporary directory provided by pytest.
        payload: Raw file contents.
    """
    repo = StateRepository(tmp_path)
    repo.initialize()
    repo.data_path.write_text(payload, encoding="utf-8")

    with pytest.raises(StateError):
        repo.load()


def test_load_undecodable_store_raises_state_error(tmp_path: Path) -> None:
    """Ensure bytes that are not UTF-8 surface as StateError, not a decode error.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    repo = StateRepository(tmp_path)
    repo.initialize()
    repo.data_path.write_bytes(b'{"favorites": [], "groups": [], "x": "\xff\xfe"}')

    with pytest.raises(StateError):
        repo.load()


def test_load_tolerates_missing_and_malformed_sections(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """Missing arrays default to empty; bad records are skipped with a warning.

    Args:
        tmp_path: Temporary directory provided by pytest.
        caplog: Log capture fixture.
    """
    repo = StateRepository(tmp_path)
    repo.initialize()
    repo.data_path.write_text(
        json.dumps(
            {
                "favorites": [
                    {"assetPath": "Assets/a.txt", "assetGuid": "a"},
                    "garbage",
                    {"assetPath": "Assets/b.txt", "assetGuid": "b", "dateAddedTicks": "soon"},
                ]
            }
        ),
        encoding="utf-8",
    )

    with caplog.at_level(logging.WARNING):
        loaded = repo.load()

    assert [favorite.asset_guid for favorite in loaded.favorites] == ["a"]
    assert loaded.groups == []
    assert "Skipping malformed favorite" in caplog.text


def test_save_wraps_os_errors(tmp_path: Path) -> None:
    """Ensure write failures surface as StateError.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    repo = StateRepository(blocker)

    with pytest.raises(StateError):
        repo.save(FavoritesDocument())
