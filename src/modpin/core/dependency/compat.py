"""Game-version compatibility filter with a per-resolution candidate cache.

The filter turns a registry's raw version listing into the ordered list of
candidates the solver may pin: versions that exist *and* are declared
compatible with the active game build, newest first. Each mod is queried at
most once per resolution call; concurrent callers for the same mod share one
in-flight query.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import TYPE_CHECKING

from modpin.exceptions import NoCompatibleVersion

if TYPE_CHECKING:
    from modpin.registry.base import ModVersion, RegistryClient


class CompatibilityFilter:
    """Narrows each mod's versions to those compatible with one game build.

    Instances live for exactly one resolution call and are discarded
    afterwards, so the cache never outlives the registry state it captured.

    Args:
        registry: Registry to query.
        game_version: Active game build number.
        max_concurrency: Upper bound on simultaneous registry queries issued
            by ``prefetch``.
    """

    def __init__(
        self,
        registry: RegistryClient,
        game_version: int,
        max_concurrency: int = 8,
    ) -> None:
        self._registry = registry
        self._game_version = game_version
        self._semaphore = asyncio.Semaphore(max(1, max_concurrency))
        self._queries: dict[str, asyncio.Task[list[ModVersion]]] = {}

    @property
    def game_version(self) -> int:
        return self._game_version

    async def candidates(self, mod_reference: str) -> list[ModVersion]:
        """Return compatible versions of *mod_reference*, newest first.

        Raises:
            NoCompatibleVersion: If the registry reports no compatible version.
            RegistryUnavailable: If the registry query fails.
        """
        compatible = await self._query(mod_reference)
        if not compatible:
            raise NoCompatibleVersion(mod_reference, self._game_version)
        return list(compatible)

    def prefetch(self, mod_references: Iterable[str]) -> None:
        """Start candidate queries for *mod_references* in the background.

        Prefetching only warms the cache; it never changes what
        ``candidates`` returns. Failures are held until the mod is actually
        examined.
        """
        for mod_reference in mod_references:
            self._query(mod_reference)

    def _query(self, mod_reference: str) -> asyncio.Task[list[ModVersion]]:
        task = self._queries.get(mod_reference)
        if task is None:
            task = asyncio.ensure_future(self._fetch(mod_reference))
            self._queries[mod_reference] = task
        return task

    async def _fetch(self, mod_reference: str) -> list[ModVersion]:
        async with self._semaphore:
            versions = await self._registry.list_versions(
                mod_reference, self._game_version
            )
        compatible = [v for v in versions if v.compatible]
        compatible.sort(key=lambda v: v.version, reverse=True)
        return compatible

    async def close(self) -> None:
        """Cancel outstanding prefetches and collect their outcomes."""
        pending = [t for t in self._queries.values() if not t.done()]
        for task in pending:
            task.cancel()
        # Consume failures of prefetches that were never awaited.
        await asyncio.gather(*self._queries.values(), return_exceptions=True)
        self._queries.clear()
