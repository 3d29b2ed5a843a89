"""``modpin profile`` — Manage named mod profiles.

Usage::

    modpin profile list
    modpin profile new Modded
    modpin profile add Modded SML "^3.6.0"
    modpin profile remove Modded SML
    modpin profile rename Modded Vanilla+
    modpin profile select Vanilla+
    modpin profile show Vanilla+
    modpin profile delete Vanilla+

Every mutating command saves ``profiles.json`` unless ``--dry-run`` is set.
"""

from __future__ import annotations

import click
from rich.table import Table

from modpin.cli.output import console, fail
from modpin.config import Settings
from modpin.core.profile import ANY_VERSION
from modpin.exceptions import ModpinError
from modpin.store import InstallationStore, ProfileStore


@click.group("profile")
def profile_group() -> None:
    """Create, edit, and select mod profiles."""


@profile_group.command("list")
@click.pass_obj
def list_command(settings: Settings) -> None:
    """List all profiles; the selected one is marked with *."""
    try:
        store = ProfileStore.load(settings.profiles_path)
    except ModpinError as exc:
        fail(exc)
    for name, profile in store.profiles.items():
        marker = "*" if name == store.selected else " "
        click.echo(f"{marker} {name} ({len(profile.mods)} mods)")


@profile_group.command("show")
@click.argument("name")
@click.pass_obj
def show_command(settings: Settings, name: str) -> None:
    """Show the mods and constraints of profile NAME."""
    try:
        profile = ProfileStore.load(settings.profiles_path).get(name)
    except ModpinError as exc:
        fail(exc)
    if not profile.mods:
        console.print(f"[dim]Profile {name} has no mods.[/dim]")
        return
    table = Table(title=f"Profile {name}", show_header=True)
    table.add_column("Mod", style="bold")
    table.add_column("Constraint")
    for ref, constraint in profile.mods.items():
        table.add_row(ref, constraint)
    console.print(table)


@profile_group.command("new")
@click.argument("name")
@click.pass_obj
def new_command(settings: Settings, name: str) -> None:
    """Create an empty profile NAME."""
    try:
        store = ProfileStore.load(settings.profiles_path)
        store.add(name)
        store.save(settings.dry_run)
    except ModpinError as exc:
        fail(exc)
    click.echo(f"Created profile {name}")


@profile_group.command("delete")
@click.argument("name")
@click.pass_obj
def delete_command(settings: Settings, name: str) -> None:
    """Delete profile NAME."""
    try:
        store = ProfileStore.load(settings.profiles_path)
        store.delete(name)
        store.save(settings.dry_run)
    except ModpinError as exc:
        fail(exc)
    click.echo(f"Deleted profile {name}")


@profile_group.command("rename")
@click.argument("old")
@click.argument("new")
@click.pass_obj
def rename_command(settings: Settings, old: str, new: str) -> None:
    """Rename profile OLD to NEW, updating installations that use it."""
    try:
        store = ProfileStore.load(settings.profiles_path)
        installations = InstallationStore.load(settings.installations_path)
        store.rename(old, new)
        installations.rename_profile(old, new)
        store.save(settings.dry_run)
        installations.save(settings.dry_run)
    except ModpinError as exc:
        fail(exc)
    click.echo(f"Renamed profile {old} to {new}")


@profile_group.command("select")
@click.argument("name")
@click.pass_obj
def select_command(settings: Settings, name: str) -> None:
    """Make NAME the selected profile."""
    try:
        store = ProfileStore.load(settings.profiles_path)
        store.select(name)
        store.save(settings.dry_run)
    except ModpinError as exc:
        fail(exc)
    click.echo(f"Selected profile {name}")


@profile_group.command("add")
@click.argument("name")
@click.argument("mod")
@click.argument("constraint", default=ANY_VERSION)
@click.pass_obj
def add_mod_command(settings: Settings, name: str, mod: str, constraint: str) -> None:
    """Add MOD to profile NAME with an optional version CONSTRAINT.

    Without a constraint any release of MOD is accepted.
    """
    try:
        store = ProfileStore.load(settings.profiles_path)
        store.get(name).add_mod(mod, constraint)
        store.save(settings.dry_run)
    except ModpinError as exc:
        fail(exc)
    click.echo(f"Added {mod} {constraint} to {name}")


@profile_group.command("remove")
@click.argument("name")
@click.argument("mod")
@click.pass_obj
def remove_mod_command(settings: Settings, name: str, mod: str) -> None:
    """Remove MOD from profile NAME."""
    try:
        store = ProfileStore.load(settings.profiles_path)
        store.get(name).remove_mod(mod)
        store.save(settings.dry_run)
    except ModpinError as exc:
        fail(exc)
    click.echo(f"Removed {mod} from {name}")
