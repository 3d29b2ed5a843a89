"""``modpin resolve`` and ``modpin install`` — Resolve and lock an installation.

Both commands resolve the profile bound to a registered installation
against the installation's game build, reconcile with its existing
``mods-lock.json``, and report the result. ``resolve`` stops there;
``install`` also downloads, extracts, and writes the new lockfile.

Exit Codes:
    0 — Success.
    1 — Resolution failed (conflict, incompatibility, registry error).
    2 — Store, lockfile, installation, or artifact error.
"""

from __future__ import annotations

import asyncio
import json

import click

from modpin.cli.output import (
    console,
    fail,
    plan_to_dict,
    print_diff,
    print_resolution_summary,
)
from modpin.config import Settings
from modpin.exceptions import ModpinError
from modpin.install import InstallPlan, install, open_registry, plan_installation
from modpin.store import InstallationStore, ProfileStore


def _run_async(coro: object) -> object:
    """Run an async coroutine in a synchronous context."""
    return asyncio.run(coro)  # type: ignore[arg-type]


def _load_target(settings: Settings, path: str):
    installations = InstallationStore.load(settings.installations_path)
    installation = installations.get(path)
    profile = ProfileStore.load(settings.profiles_path).get(installation.profile)
    return installation, profile


async def _plan(settings: Settings, path: str, game_version: int | None) -> InstallPlan:
    installation, profile = _load_target(settings, path)
    registry = open_registry(settings)
    try:
        return await plan_installation(
            installation, profile, registry, settings, game_version=game_version
        )
    finally:
        await registry.aclose()


async def _install(settings: Settings, path: str) -> InstallPlan:
    installation, profile = _load_target(settings, path)
    registry = open_registry(settings)
    try:
        return await install(installation, profile, registry, settings)
    finally:
        await registry.aclose()


@click.command("resolve")
@click.argument("path")
@click.option(
    "--game-version",
    type=int,
    default=None,
    help="Resolve for this game build instead of the detected one.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
@click.pass_obj
def resolve_command(
    settings: Settings,
    path: str,
    game_version: int | None,
    output_format: str,
) -> None:
    """Resolve the profile of the installation at PATH and show the plan.

    Nothing is written or downloaded.

    Exit code 0 on success, 1 on resolution failure, 2 on other errors.
    """
    try:
        plan = _run_async(_plan(settings, path, game_version))
    except ModpinError as exc:
        fail(exc, output_format)

    diff = plan.diff()
    if output_format == "json":
        click.echo(json.dumps(plan_to_dict(plan.lockfile, diff, plan.game_version), indent=2))
        return
    print_resolution_summary(plan.lockfile, plan.game_version)
    print_diff(diff)


@click.command("install")
@click.argument("path")
@click.pass_obj
def install_command(settings: Settings, path: str) -> None:
    """Resolve, download, and lock the mods of the installation at PATH.

    With --dry-run the plan is shown but nothing is downloaded or written.

    Exit code 0 on success, 1 on resolution failure, 2 on other errors.
    """
    try:
        plan = _run_async(_install(settings, path))
    except ModpinError as exc:
        fail(exc)

    print_resolution_summary(plan.lockfile, plan.game_version)
    print_diff(plan.diff())
    if settings.dry_run:
        console.print("[dim]dry-run: nothing was written.[/dim]")
    else:
        click.echo(f"Installed {len(plan.installed)} mods; lockfile written.")
