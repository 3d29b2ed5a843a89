"""``modpin installation`` — Register game directories.

Usage::

    modpin installation list
    modpin installation add ~/Games/Satisfactory --profile Modded
    modpin installation set-profile ~/Games/Satisfactory Default
    modpin installation remove ~/Games/Satisfactory

A directory is only accepted if it contains a game or dedicated-server
executable.
"""

from __future__ import annotations

import click

from modpin.cli.output import console, fail
from modpin.config import Settings
from modpin.exceptions import ModpinError
from modpin.store import InstallationStore, ProfileStore


@click.group("installation")
def installation_group() -> None:
    """Register game directories and bind them to profiles."""


@installation_group.command("list")
@click.pass_obj
def list_command(settings: Settings) -> None:
    """List installations and the profile each one uses."""
    try:
        store = InstallationStore.load(settings.installations_path)
    except ModpinError as exc:
        fail(exc)
    if not store.installations:
        console.print("[dim]No installations registered.[/dim]")
        return
    for installation in store.installations:
        marker = "*" if installation.path == store.selected else " "
        click.echo(f"{marker} {installation.path} [{installation.profile}]")


@installation_group.command("add")
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.option("--profile", default=None, help="Profile to install (default: selected profile).")
@click.pass_obj
def add_command(settings: Settings, path: str, profile: str | None) -> None:
    """Register the game directory PATH."""
    try:
        profiles = ProfileStore.load(settings.profiles_path)
        store = InstallationStore.load(settings.installations_path)
        installation = store.add(path, profile or profiles.selected, profiles)
        store.save(settings.dry_run)
    except ModpinError as exc:
        fail(exc)
    click.echo(f"Added installation {installation.path} [{installation.profile}]")


@installation_group.command("remove")
@click.argument("path")
@click.pass_obj
def remove_command(settings: Settings, path: str) -> None:
    """Forget the installation at PATH. Installed mods are left in place."""
    try:
        store = InstallationStore.load(settings.installations_path)
        store.delete(path)
        store.save(settings.dry_run)
    except ModpinError as exc:
        fail(exc)
    click.echo(f"Removed installation {path}")


@installation_group.command("set-profile")
@click.argument("path")
@click.argument("profile")
@click.pass_obj
def set_profile_command(settings: Settings, path: str, profile: str) -> None:
    """Bind the installation at PATH to PROFILE."""
    try:
        profiles = ProfileStore.load(settings.profiles_path)
        store = InstallationStore.load(settings.installations_path)
        store.set_profile(path, profile, profiles)
        store.save(settings.dry_run)
    except ModpinError as exc:
        fail(exc)
    click.echo(f"Installation {path} now uses profile {profile}")
