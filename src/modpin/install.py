"""Install orchestration for one game installation.

Ties the pieces together in the order the lockfile contract requires:

1. Read the prior lockfile (absent = nothing locked).
2. Detect the installation's game build.
3. Resolve the profile and reconcile against the prior lockfile.
4. Materialize every fetchable entry into the mods directory.
5. Write the new lockfile, atomically.

Any failure before step 5 leaves the prior lockfile untouched, so
persistence only ever sees the old lockfile or the complete new one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from modpin.artifacts import ArtifactCache, materialize
from modpin.config import Settings
from modpin.core.lockfile import LockFile, resolve_lockfile
from modpin.core.profile import Profile
from modpin.exceptions import RegistryUnavailable
from modpin.registry.base import RegistryClient
from modpin.registry.remote import RemoteRegistry
from modpin.registry.snapshot import SnapshotRegistry
from modpin.store.installations import Installation

logger = logging.getLogger(__name__)


@dataclass
class InstallPlan:
    """What an install would change, computed without side effects."""

    prior: LockFile
    lockfile: LockFile
    game_version: int
    installed: list[str] = field(default_factory=list)

    def diff(self) -> dict[str, Any]:
        return self.prior.diff(self.lockfile)


def open_registry(settings: Settings) -> RegistryClient:
    """Build the registry client *settings* point at.

    A registry snapshot file takes precedence over a remote API root.

    Raises:
        RegistryUnavailable: If neither is configured.
    """
    if settings.registry_file is not None:
        logger.debug("Using registry snapshot %s", settings.registry_file)
        return SnapshotRegistry.load(settings.registry_file)
    if settings.api_base:
        return RemoteRegistry(settings.api_base)
    raise RegistryUnavailable(
        "No registry configured; pass --api-base or --registry-file"
    )


async def plan_installation(
    installation: Installation,
    profile: Profile,
    registry: RegistryClient,
    settings: Settings,
    game_version: int | None = None,
) -> InstallPlan:
    """Resolve *profile* for *installation* without touching the disk.

    Args:
        game_version: Override the detected game build.

    Raises:
        InstallationError: If the game directory cannot be inspected.
        LockfileError: If the prior lockfile is corrupt.
        ResolutionError: If resolution fails.
    """
    if game_version is None:
        game_version = installation.game_version()
    prior = LockFile.read(installation.lockfile_path())
    for problem in prior.validate():
        logger.warning("Prior lockfile: %s", problem)

    logger.info(
        "Resolving profile %s for %s (game version %d)",
        profile.name, installation.path, game_version,
    )
    lockfile = await resolve_lockfile(
        profile, registry, game_version, prior, **settings.resolver_options()
    )
    return InstallPlan(prior=prior, lockfile=lockfile, game_version=game_version)


async def install(
    installation: Installation,
    profile: Profile,
    registry: RegistryClient,
    settings: Settings,
    cache: ArtifactCache | None = None,
) -> InstallPlan:
    """Resolve, materialize, and persist the lockfile for *installation*.

    With ``settings.dry_run`` the plan is computed and returned but nothing
    is downloaded, extracted, or written.

    Raises:
        ArtifactError: If a mod cannot be fetched or extracted; the prior
            lockfile is left in place.
    """
    plan = await plan_installation(installation, profile, registry, settings)
    if settings.dry_run:
        logger.info("dry-run: skipping download, extraction and lockfile write")
        return plan

    owned = cache is None
    cache = cache or ArtifactCache(settings.cache_dir)
    try:
        plan.installed = await materialize(plan.lockfile, installation.mods_dir(), cache)
    finally:
        if owned:
            await cache.aclose()

    lockfile_path = installation.lockfile_path()
    plan.lockfile.write(lockfile_path)
    logger.info("Wrote lockfile %s", lockfile_path)
    return plan
