"""Lockfile reconciliation — turning pins into the persisted lockfile.

``reconcile`` merges a fresh ``Resolution`` with the prior lockfile:

- Every pinned mod becomes a ``LockedMod`` carrying the hash and download
  link the registry reported for that exact version.
- A prior entry with an **empty link** marks a locally supplied mod. When
  its version is unchanged, the prior entry is carried over as-is, so the
  artifact pipeline keeps treating it as already installed, even if the
  registry now offers a download.
- Prior entries for mods no longer pinned are dropped, never carried
  forward.

The primary workflow::

    resolution = await DependencyResolver(registry).resolve(roots, build, prior)
    lockfile = reconcile(resolution, prior)
    lockfile.write(path)
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from modpin.core.dependency.resolver import DependencyResolver
from modpin.core.lockfile.lockfile import LockFile
from modpin.core.lockfile.models import LockedMod

if TYPE_CHECKING:
    from modpin.core.dependency.resolver import Resolution
    from modpin.core.profile import Profile
    from modpin.registry.base import RegistryClient


def reconcile(resolution: Resolution, prior: Mapping[str, LockedMod] | None) -> LockFile:
    """Build the new lockfile from *resolution*, preserving local overrides.

    Args:
        resolution: Successful output of ``DependencyResolver.resolve``.
        prior: The lockfile the resolution was computed against, if any.

    Returns:
        A new ``LockFile`` containing exactly the pinned mods.
    """
    prior = prior or {}
    mods: list[LockedMod] = []
    for ref, pinned in resolution.pins.items():
        previous = prior.get(ref)
        if (
            previous is not None
            and previous.is_local
            and previous.version == pinned.version
        ):
            mods.append(previous)
            continue
        mods.append(
            LockedMod(
                mod_reference=ref,
                version=pinned.version,
                hash=pinned.hash,
                link=pinned.link,
            )
        )
    return LockFile(mods)


async def resolve_lockfile(
    profile: Profile,
    registry: RegistryClient,
    game_version: int,
    prior: LockFile | None = None,
    **resolver_options: Any,
) -> LockFile:
    """Resolve a profile and reconcile the result in one call.

    Args:
        profile: Profile whose mods are the root requirements.
        registry: Registry client to query.
        game_version: Active game build number.
        prior: Previous lockfile, preferred where still valid.
        **resolver_options: Passed to ``DependencyResolver``.

    Returns:
        The reconciled lockfile.

    Raises:
        ResolutionError: Any resolution failure; no lockfile is produced.
    """
    resolver = DependencyResolver(registry, **resolver_options)
    resolution = await resolver.resolve(
        profile.root_requirements(), game_version, prior
    )
    return reconcile(resolution, prior)
