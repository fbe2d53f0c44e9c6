"""Command line interface for favorite assets."""

from __future__ import annotations

import difflib
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from favorite_assets.config import (
    ConfigError,
    ConfigManager,
    FavoritesConfig,
    assign_nested,
    resolve_with_precedence,
)
from favorite_assets.host import FilesystemHost
from favorite_assets.log_config import configure_logging
from favorite_assets.panel import EMPTY_STATE_TEXT, PanelView, build_panel
from favorite_assets.registry import FavoriteAssetsDataManager
from favorite_assets.sorting import FavoriteSortType, SortOrder
from favorite_assets.state import FavoriteAssetData, StateRepository

console = Console()

_ORDER_ALIASES = {
    "asc": SortOrder.ASCENDING,
    "ascending": SortOrder.ASCENDING,
    "desc": SortOrder.DESCENDING,
    "descending": SortOrder.DESCENDING,
}


@dataclass
class CLIState:
    """Objects shared by every command of one CLI invocation.

    Attributes:
        config_manager: Manager for the YAML configuration file.
        config: Effective configuration, loaded on first use.
        manager: Favorites registry, created on first use.
    """

    config_manager: ConfigManager
    config: Optional[FavoritesConfig] = None
    manager: Optional[FavoriteAssetsDataManager] = None


def _state(ctx: click.Context) -> CLIState:
    state = ctx.find_object(CLIState)
    if state is None:
        state = CLIState(config_manager=ConfigManager())
        ctx.obj = state
    return state


def _load_config(ctx: click.Context) -> FavoritesConfig:
    """Return the effective configuration, configuring logging on first load.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """

    state = _state(ctx)
    if state.config is None:
        try:
            state.config = state.config_manager.load()
        except ConfigError as exc:
            raise click.ClickException(str(exc)) from exc
        configure_logging(state.config.logging)
    return state.config


def _manager(ctx: click.Context) -> FavoriteAssetsDataManager:
    """Return the registry for this invocation, closing it when the CLI exits."""

    state = _state(ctx)
    if state.manager is None:
        config = _load_config(ctx)
        storage = config.storage
        repository = StateRepository(
            Path(storage.data_dir),
            subdirectory=storage.subdirectory,
            file_name=storage.file_name,
            indent=storage.indent,
        )
        host = FilesystemHost(config.host.project_root)
        state.manager = FavoriteAssetsDataManager(repository, host)
        ctx.find_root().call_on_close(state.manager.close)
    return state.manager


def _absolute(path: str) -> str:
    return os.path.abspath(os.path.expanduser(path))


def _resolve_target(manager: FavoriteAssetsDataManager, target: str) -> FavoriteAssetData:
    """Return the favorite named by ``target``, given as an identity or a path.

    Raises:
        click.ClickException: If ``target`` does not name a favorite.
    """

    favorite = manager.get_favorite(target)
    if favorite is None:
        guid = manager.host.resolve_identity(_absolute(target))
        favorite = manager.get_favorite(guid) if guid else None
    if favorite is None:
        raise click.ClickException(f"{target} is not a favorite.")
    return favorite


def _resolve_group_id(manager: FavoriteAssetsDataManager, value: str) -> str:
    """Return the identifier of the group named by id or by exact name.

    Raises:
        click.ClickException: If no group or more than one group matches.
    """

    if manager.get_group(value) is not None:
        return value
    matches = [group.id for group in manager.get_groups() if group.name == value]
    if len(matches) == 1:
        return matches[0]
    if matches:
        raise click.ClickException(f"More than one group is named {value!r}; use its id.")
    raise click.ClickException(f"No group found for {value!r}.")


def _sort_caption(sort_type: FavoriteSortType, order: SortOrder) -> str:
    return f"Sort: {sort_type.label} {order.label}"


def _entry_row(entry: FavoriteAssetData, *, show_paths: bool, indent: str = "") -> list[str]:
    row = [f"{indent}{escape(entry.asset_name)}", escape(entry.asset_type)]
    if show_paths:
        row.append(escape(entry.asset_path))
    row.append(escape(entry.asset_guid))
    return row


def _render_panel(view: PanelView, *, show_paths: bool) -> None:
    """Print the favorites panel as a Rich table."""

    if view.is_empty:
        console.print(f"[yellow]{EMPTY_STATE_TEXT}[/yellow]")
        console.print(view.status)
        return

    table = Table(caption=_sort_caption(view.sort_type, view.order), show_lines=False)
    table.add_column("Name")
    table.add_column("Type", style="cyan")
    if show_paths:
        table.add_column("Path", style="dim")
    table.add_column("ID", style="dim")
    padding = [""] * (len(table.columns) - 1)

    for entry in view.ungrouped:
        table.add_row(*_entry_row(entry, show_paths=show_paths))
    if view.ungrouped and view.sections:
        table.add_section()

    for section in view.sections:
        arrow = "▶" if section.group.is_collapsed else "▼"
        header = f"[bold]{arrow} {escape(section.group.name)} ({section.count})[/bold]"
        table.add_row(header, *padding[:-1], section.group.id)
        for entry in section.entries:
            table.add_row(*_entry_row(entry, show_paths=show_paths, indent="  "))

    console.print(table)
    console.print(view.status)


def _persist_display(ctx: click.Context, key: str, value: str) -> None:
    """Write one ``display`` setting back to the configuration file."""

    manager = _state(ctx).config_manager
    file_data = manager.load_file_overrides()
    try:
        assign_nested(file_data, ["display", key], value)
        resolve_with_precedence(defaults=FavoritesConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    manager.save(file_data)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="favorite-assets")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Use an alternate configuration file.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path]) -> None:
    """Bookmark files and folders, organize them into groups, and browse them."""
    ctx.obj = CLIState(config_manager=ConfigManager(config_path))


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=str))
@click.pass_context
def add(ctx: click.Context, paths: tuple[str, ...]) -> None:
    """Add files or folders to the favorites."""
    added = _manager(ctx).add_favorites(_absolute(path) for path in paths)
    if added:
        console.print(f"[green]Added {added} asset(s) to favorites.[/green]")
    else:
        console.print(
            "[yellow]Selected assets are already in favorites or cannot be added.[/yellow]"
        )


@cli.command()
@click.argument("paths", nargs=-1, type=click.Path(path_type=str))
@click.option("--id", "guids", multiple=True, help="Remove the favorite with this identity.")
@click.pass_context
def remove(ctx: click.Context, paths: tuple[str, ...], guids: tuple[str, ...]) -> None:
    """Remove favorites by path or identity."""
    if not paths and not guids:
        raise click.UsageError("Provide at least one PATH or --id.")
    manager = _manager(ctx)
    removed = manager.remove_favorites_at(_absolute(path) for path in paths)
    removed += sum(1 for guid in guids if manager.remove_favorite(guid))
    if removed:
        console.print(f"[green]Removed {removed} asset(s) from favorites.[/green]")
    else:
        console.print("[yellow]No matching favorites found.[/yellow]")


@cli.command("list")
@click.option(
    "--sort",
    "sort_type",
    type=click.Choice([member.value for member in FavoriteSortType]),
    help="Field to sort by (defaults to the configured field).",
)
@click.option(
    "--order",
    type=click.Choice(sorted(_ORDER_ALIASES)),
    help="Sort direction (defaults to the configured direction).",
)
@click.option("--json", "json_output", is_flag=True, help="Emit the panel as JSON.")
@click.pass_context
def list_favorites(
    ctx: click.Context,
    sort_type: Optional[str],
    order: Optional[str],
    json_output: bool,
) -> None:
    """Show favorites: ungrouped first, then each group."""
    display = _load_config(ctx).display
    resolved_type = FavoriteSortType(sort_type or display.sort_type)
    resolved_order = _ORDER_ALIASES[order] if order else SortOrder(display.sort_order)

    view = build_panel(_manager(ctx), resolved_type, resolved_order)
    if json_output:
        console.print_json(data=view.to_payload())
        return
    _render_panel(view, show_paths=display.show_paths)


@cli.command("open")
@click.argument("target")
@click.pass_context
def open_favorite(ctx: click.Context, target: str) -> None:
    """Open a favorite (identity or path) with the default application."""
    manager = _manager(ctx)
    favorite = _resolve_target(manager, target)
    manager.touch_entry(favorite.asset_guid)
    click.launch(favorite.asset_path)


@cli.command()
@click.argument("target")
@click.pass_context
def reveal(ctx: click.Context, target: str) -> None:
    """Reveal a favorite (identity or path) in the file manager."""
    manager = _manager(ctx)
    favorite = _resolve_target(manager, target)
    manager.touch_entry(favorite.asset_guid)
    click.launch(favorite.asset_path, locate=True)


@cli.command()
@click.argument("target")
@click.pass_context
def touch(ctx: click.Context, target: str) -> None:
    """Mark a favorite as recently used."""
    manager = _manager(ctx)
    favorite = _resolve_target(manager, target)
    manager.touch_entry(favorite.asset_guid)
    console.print(f"[green]Touched {escape(favorite.asset_name)}.[/green]")


@cli.command()
@click.argument("target")
@click.argument("group", required=False)
@click.pass_context
def move(ctx: click.Context, target: str, group: Optional[str]) -> None:
    """Move a favorite into GROUP (id or name), or out of its group when omitted."""
    manager = _manager(ctx)
    favorite = _resolve_target(manager, target)
    group_id = _resolve_group_id(manager, group) if group else None
    if not manager.move_entry_to_group(favorite.asset_guid, group_id):
        raise click.ClickException(f"Unable to move {favorite.asset_name}.")
    if group_id is None:
        console.print(f"[green]Removed {escape(favorite.asset_name)} from its group.[/green]")
    else:
        console.print(f"[green]Moved {escape(favorite.asset_name)} to {escape(group)}.[/green]")


@cli.command()
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_context
def clear(ctx: click.Context, yes: bool) -> None:
    """Remove every favorite."""
    if not yes:
        click.confirm("Are you sure you want to remove all favorite assets?", abort=True)
    _manager(ctx).clear_all()
    console.print("[green]Cleared all favorites.[/green]")


@cli.command()
@click.pass_context
def cleanup(ctx: click.Context) -> None:
    """Drop favorites whose files or folders no longer exist."""
    removed = _manager(ctx).cleanup_invalid()
    console.print(f"[green]Removed {removed} stale favorite(s).[/green]")


@cli.group()
def group() -> None:
    """Create, rename, and arrange favorite groups."""


@group.command("list")
@click.pass_context
def group_list(ctx: click.Context) -> None:
    """List groups in display order."""
    manager = _manager(ctx)
    groups = manager.get_groups()
    if not groups:
        console.print("[yellow]No groups yet.[/yellow]")
        return
    table = Table()
    table.add_column("Order", justify="right")
    table.add_column("Name")
    table.add_column("Favorites", justify="right")
    table.add_column("Collapsed")
    table.add_column("ID", style="dim")
    for item in groups:
        count = len(manager.get_entries_in_group(item.id))
        table.add_row(
            str(item.sort_order),
            item.name,
            str(count),
            "yes" if item.is_collapsed else "no",
            item.id,
        )
    console.print(table)


@group.command("create")
@click.argument("name", required=False)
@click.pass_context
def group_create(ctx: click.Context, name: Optional[str]) -> None:
    """Create a group, named after the current time unless NAME is given."""
    name = (name or "").strip() or f"Group {datetime.now():%H:%M:%S}"
    group_id = _manager(ctx).create_group(name)
    console.print(f"[green]Created group {escape(name)} ({group_id}).[/green]")


@group.command("rename")
@click.argument("group_ref")
@click.argument("new_name")
@click.pass_context
def group_rename(ctx: click.Context, group_ref: str, new_name: str) -> None:
    """Rename a group (id or name)."""
    manager = _manager(ctx)
    group_id = _resolve_group_id(manager, group_ref)
    if not manager.rename_group(group_id, new_name):
        raise click.ClickException("Group names cannot be empty.")
    console.print(f"[green]Renamed group to {escape(new_name.strip())}.[/green]")


@group.command("delete")
@click.argument("group_ref")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_context
def group_delete(ctx: click.Context, group_ref: str, yes: bool) -> None:
    """Delete a group; its favorites become ungrouped."""
    manager = _manager(ctx)
    group_id = _resolve_group_id(manager, group_ref)
    target = manager.get_group(group_id)
    name = target.name if target is not None else group_ref
    if not yes:
        click.confirm(
            f"Are you sure you want to delete the group '{name}'? "
            "Assets will be moved to ungrouped.",
            abort=True,
        )
    manager.delete_group(group_id)
    console.print(f"[green]Deleted group {escape(name)}.[/green]")


def _set_collapsed(ctx: click.Context, group_ref: str, collapsed: Optional[bool]) -> None:
    manager = _manager(ctx)
    group_id = _resolve_group_id(manager, group_ref)
    if collapsed is None:
        current = manager.get_group(group_id)
        collapsed = not (current is not None and current.is_collapsed)
    manager.set_group_collapsed(group_id, collapsed)
    console.print(f"[green]Group {'collapsed' if collapsed else 'expanded'}.[/green]")


@group.command("collapse")
@click.argument("group_ref")
@click.pass_context
def group_collapse(ctx: click.Context, group_ref: str) -> None:
    """Hide a group's favorites in listings."""
    _set_collapsed(ctx, group_ref, True)


@group.command("expand")
@click.argument("group_ref")
@click.pass_context
def group_expand(ctx: click.Context, group_ref: str) -> None:
    """Show a group's favorites in listings."""
    _set_collapsed(ctx, group_ref, False)


@group.command("toggle")
@click.argument("group_ref")
@click.pass_context
def group_toggle(ctx: click.Context, group_ref: str) -> None:
    """Flip a group between collapsed and expanded."""
    _set_collapsed(ctx, group_ref, None)


@group.command("order")
@click.argument("group_ref")
@click.argument("position", type=int)
@click.pass_context
def group_order(ctx: click.Context, group_ref: str, position: int) -> None:
    """Set the display position of a group (lower first)."""
    manager = _manager(ctx)
    group_id = _resolve_group_id(manager, group_ref)
    manager.set_group_sort_order(group_id, position)
    console.print(f"[green]Group order set to {position}.[/green]")


@cli.group()
def sort() -> None:
    """Change how favorites are sorted."""


@sort.command("field")
@click.pass_context
def sort_field(ctx: click.Context) -> None:
    """Cycle the sort field: Name, Type, Added, Modified."""
    display = _load_config(ctx).display
    next_type = FavoriteSortType(display.sort_type).next()
    _persist_display(ctx, "sort_type", next_type.value)
    console.print(_sort_caption(next_type, SortOrder(display.sort_order)))


@sort.command("direction")
@click.pass_context
def sort_direction(ctx: click.Context) -> None:
    """Toggle between ascending and descending order."""
    display = _load_config(ctx).display
    next_order = SortOrder(display.sort_order).toggled()
    _persist_display(ctx, "sort_order", next_order.value)
    console.print(_sort_caption(FavoriteSortType(display.sort_type), next_order))


@cli.group()
def config() -> None:
    """Manage configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
@click.pass_context
def config_view(ctx: click.Context, no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    manager = _state(ctx).config_manager
    try:
        manager.ensure_exists()
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = _state(ctx).config_manager
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'display.sort_type'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    file_data = manager.load_file_overrides()
    try:
        assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=FavoritesConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()

    diff = _diff_lines(before, after)
    if not diff:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
@click.pass_context
def config_edit(ctx: click.Context) -> None:
    """Open the configuration file in an interactive editor session."""
    manager = _state(ctx).config_manager
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=FavoritesConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def _diff_lines(before: Iterable[str], after: Iterable[str]) -> list[str]:
    # The timestamp header always changes; ignore it when deciding whether anything did.
    def _strip(lines: Iterable[str]) -> list[str]:
        return [line for line in lines if not line.startswith("# Last updated:")]

    return list(
        difflib.unified_diff(
            _strip(before),
            _strip(after),
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )


def main() -> None:
    """Entry point for the ``favs`` console script."""
    cli()


__all__ = ["cli", "main"]
