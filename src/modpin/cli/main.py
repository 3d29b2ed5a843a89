"""modpin CLI — Reproducible mod sets for game installations.

Entry point for the ``modpin`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    profile       — Create, edit, and select mod profiles.
    installation  — Register game directories and bind them to profiles.
    resolve       — Resolve an installation's profile and show the plan.
    install       — Resolve, download, extract, and write the lockfile.

Usage::

    modpin profile new Modded
    modpin profile add Modded SML "^3.6.0"
    modpin installation add ~/Games/Satisfactory --profile Modded
    modpin --registry-file snapshot.yaml resolve ~/Games/Satisfactory
    modpin --api-base https://registry.example/v1 install ~/Games/Satisfactory
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from modpin import __version__
from modpin.cli.installation_cmd import installation_group
from modpin.cli.profile_cmd import profile_group
from modpin.cli.resolve_cmd import install_command, resolve_command
from modpin.config import Settings, default_local_dir

_LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def _configure_logging(verbosity: int) -> None:
    """Route library logging through rich on stderr."""
    level = _LOG_LEVELS.get(verbosity, logging.DEBUG)
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    root = logging.getLogger("modpin")
    root.handlers[:] = [handler]
    root.setLevel(level)
    root.propagate = False


@click.group()
@click.version_option(version=__version__, prog_name="modpin")
@click.option(
    "--local-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="MODPIN_LOCAL_DIR",
    default=None,
    help="Directory holding profiles.json and installations.json.",
)
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="MODPIN_CACHE_DIR",
    default=None,
    help="Directory for downloaded mod archives (default: <local-dir>/cache).",
)
@click.option(
    "--api-base",
    envvar="MODPIN_API_BASE",
    default=None,
    help="Remote registry API root.",
)
@click.option(
    "--registry-file",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="MODPIN_REGISTRY_FILE",
    default=None,
    help="Registry snapshot (YAML or JSON) used instead of the remote API.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    envvar="MODPIN_DRY_RUN",
    default=False,
    help="Resolve and report without writing or extracting anything.",
)
@click.option(
    "--concurrency",
    type=click.IntRange(min=1),
    envvar="MODPIN_CONCURRENCY",
    default=8,
    show_default=True,
    help="Maximum concurrent registry queries.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Abort resolution after this many seconds.",
)
@click.option(
    "--pre",
    "include_prerelease",
    is_flag=True,
    default=False,
    help="Allow pre-release mod versions.",
)
@click.option("-v", "--verbose", count=True, help="-v for info, -vv for debug logging.")
@click.pass_context
def cli(
    ctx: click.Context,
    local_dir: Path | None,
    cache_dir: Path | None,
    api_base: str | None,
    registry_file: Path | None,
    dry_run: bool,
    concurrency: int,
    timeout: float | None,
    include_prerelease: bool,
    verbose: int,
) -> None:
    """modpin: Resolve, lock, and install mod sets for game installations.

    Profiles name the mods you want and the versions you accept. Installing
    a profile into a game directory resolves every transitive dependency
    against the game's build and pins the result in a lockfile.
    """
    _configure_logging(verbose)
    local_dir = local_dir or default_local_dir()
    ctx.obj = Settings(
        local_dir=local_dir,
        cache_dir=cache_dir or local_dir / "cache",
        api_base=api_base,
        registry_file=registry_file,
        dry_run=dry_run,
        concurrency=concurrency,
        timeout=timeout,
        include_prerelease=include_prerelease,
    )


# Register all subcommands
cli.add_command(profile_group)
cli.add_command(installation_group)
cli.add_command(resolve_command)
cli.add_command(install_command)


def main() -> None:
    cli(prog_name="modpin")
