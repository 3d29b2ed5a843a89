"""Worklist-based dependency resolution engine.

Turns a profile's root requirements, plus every dependency requirement
discovered transitively from the registry, into exactly one concrete
version per required mod, or a structured error naming the root cause.

Algorithm (fixed-point constraint propagation with eager pinning):

1. Pop the next mod from a FIFO worklist (first-seen, breadth-first).
2. Intersect every live requirement on that mod.
3. Fetch its compatible candidates, newest first.
4. Prefer the version from the prior lockfile if it is still a compatible
   candidate and satisfies the intersection; otherwise take the newest
   satisfying candidate.
5. No satisfying candidate: record a ``VersionConflict`` listing every
   contributing requirement. A pinned mod is unpinned first. The failure
   is raised once the worklist drains, unless a later change to the mod's
   requirements lets it pin after all.
6. If the mod was already pinned and the pin no longer satisfies, or the
   prior locked version satisfies again, re-pin. The old pin's dependency
   edges are retracted, and every mod no longer reachable from a root
   through non-optional edges is unpinned at once. A per-mod re-pin
   counter bounded by the candidate count turns oscillation into
   ``CycleExceeded``.
7. After pinning, enqueue the pinned version's declared dependencies with
   origin ``mod@version``; an identical (mod, constraint, origin) edge is
   never enqueued twice.

The engine keeps no state between calls: all mutable state lives in a
private ``_ResolutionRun`` owned by one ``resolve`` invocation. Registry
queries are the only suspension points. Candidate lists for newly discovered
mods are prefetched concurrently, but pins are committed by the single
owning coroutine in worklist order, so output never depends on scheduling.
"""

from __future__ import annotations

import asyncio
from collections import Counter, deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from modpin.core.dependency.compat import CompatibilityFilter
from modpin.core.dependency.constraints import (
    ConstraintSet,
    DependencyRequirement,
    intersect,
    pin_origin,
)
from modpin.exceptions import (
    CycleExceeded,
    NoCompatibleVersion,
    RegistryUnavailable,
    ResolutionError,
    VersionConflict,
)

if TYPE_CHECKING:
    from modpin.core.lockfile import LockFile
    from modpin.registry.base import ModVersion, RegistryClient


# ---------------------------------------------------------------------------
# Resolution: the output of one successful run
# ---------------------------------------------------------------------------


@dataclass
class Resolution:
    """Result of a successful dependency resolution.

    Attributes:
        pins: Mapping of mod reference -> chosen registry record, in the
            order the mods were pinned.
        requirements: Mapping of mod reference -> live requirements that
            constrained it at the end of the run (roots and edges from the
            final pins, optional edges included).
        game_version: Game build the resolution was computed for.
    """

    pins: dict[str, ModVersion] = field(default_factory=dict)
    requirements: dict[str, list[DependencyRequirement]] = field(default_factory=dict)
    game_version: int = 0

    @property
    def installed(self) -> dict[str, str]:
        """Mod reference -> version string, for display."""
        return {ref: str(mv.version) for ref, mv in self.pins.items()}

    def effective_constraint(self, mod_reference: str) -> ConstraintSet:
        return intersect(
            r.constraint for r in self.requirements.get(mod_reference, [])
        )


# ---------------------------------------------------------------------------
# DependencyResolver: public entry point
# ---------------------------------------------------------------------------


class DependencyResolver:
    """Resolves requirements against a registry for one game build.

    Args:
        registry: Registry client used for version and dependency queries.
        max_concurrency: Upper bound on concurrent candidate prefetches.
        include_prerelease: Let pre-release versions satisfy constraints
            whose base is a release.
        timeout: Whole-call timeout in seconds. Expiry aborts the run with
            ``RegistryUnavailable``. None disables the timeout.
    """

    def __init__(
        self,
        registry: RegistryClient,
        *,
        max_concurrency: int = 8,
        include_prerelease: bool = False,
        timeout: float | None = None,
    ) -> None:
        self._registry = registry
        self._max_concurrency = max_concurrency
        self._include_prerelease = include_prerelease
        self._timeout = timeout

    async def resolve(
        self,
        requirements: Iterable[DependencyRequirement],
        game_version: int,
        prior: LockFile | None = None,
    ) -> Resolution:
        """Resolve *requirements* (typically a profile's roots).

        Args:
            requirements: Root requirements, in declaration order.
            game_version: Active game build number.
            prior: Previously computed lockfile whose pins are preferred.

        Returns:
            A complete ``Resolution``.

        Raises:
            NoCompatibleVersion: A required mod has no compatible version.
            VersionConflict: A required mod's constraints admit no candidate.
            CycleExceeded: A mod's pin oscillated past its candidate count.
            RegistryUnavailable: A registry query failed or the call timed out.
            MalformedConstraint: The registry declared an unparsable constraint.
        """
        run = _ResolutionRun(
            registry=self._registry,
            compat=CompatibilityFilter(
                self._registry, game_version, self._max_concurrency
            ),
            prior=prior,
            include_prerelease=self._include_prerelease,
        )
        try:
            if self._timeout is None:
                return await run.execute(requirements)
            try:
                return await asyncio.wait_for(
                    run.execute(requirements), timeout=self._timeout
                )
            except asyncio.TimeoutError:
                raise RegistryUnavailable(
                    f"Resolution did not finish within {self._timeout} seconds"
                ) from None
        finally:
            await run.compat.close()


# ---------------------------------------------------------------------------
# _ResolutionRun: per-call mutable state
# ---------------------------------------------------------------------------


class _ResolutionRun:
    """Worklist, constraint accumulator, and pin map for one resolve call."""

    def __init__(
        self,
        registry: RegistryClient,
        compat: CompatibilityFilter,
        prior: LockFile | None,
        include_prerelease: bool,
    ) -> None:
        self.registry = registry
        self.compat = compat
        self.prior = prior
        self.include_prerelease = include_prerelease

        self.requirements: dict[str, list[DependencyRequirement]] = {}
        self.live_edges: set[tuple[str, str, str]] = set()
        self.pins: dict[str, ModVersion] = {}
        self.repins: Counter[str] = Counter()
        self.queue: deque[str] = deque()
        self.queued: set[str] = set()
        self.failures: dict[str, ResolutionError] = {}

    # -- worklist ------------------------------------------------------------

    def schedule(self, mod_reference: str) -> None:
        if mod_reference not in self.queued:
            self.queued.add(mod_reference)
            self.queue.append(mod_reference)

    def add_requirement(self, req: DependencyRequirement) -> bool:
        """Record *req*; return False if the identical edge is already live."""
        key = (req.mod_reference, str(req.constraint), req.origin)
        if key in self.live_edges:
            return False
        self.live_edges.add(key)
        self.requirements.setdefault(req.mod_reference, []).append(req)
        self.schedule(req.mod_reference)
        return True

    def reachable(self) -> set[str]:
        """Mods reached from a root through non-optional edges of current pins."""
        roots: list[str] = []
        edges: dict[str, list[str]] = {}
        for target, reqs in self.requirements.items():
            for r in reqs:
                if r.optional:
                    continue
                if r.is_root:
                    roots.append(target)
                else:
                    edges.setdefault(r.origin, []).append(target)

        seen: set[str] = set()
        stack = roots
        while stack:
            ref = stack.pop()
            if ref in seen:
                continue
            seen.add(ref)
            pinned = self.pins.get(ref)
            if pinned is not None:
                stack.extend(edges.get(pin_origin(ref, pinned.version), ()))
        return seen

    def is_required(self, mod_reference: str) -> bool:
        return mod_reference in self.reachable()

    # -- main loop -----------------------------------------------------------

    async def execute(self, roots: Iterable[DependencyRequirement]) -> Resolution:
        for req in roots:
            self.add_requirement(req)
        self.compat.prefetch(list(self.queue))

        while self.queue:
            mod_reference = self.queue.popleft()
            self.queued.discard(mod_reference)
            await self.visit(mod_reference)

        # Failures are only final once nothing else can change their inputs.
        if self.failures:
            raise next(iter(self.failures.values()))

        return Resolution(
            pins=dict(self.pins),
            requirements={
                ref: list(self.requirements.get(ref, [])) for ref in self.pins
            },
            game_version=self.compat.game_version,
        )

    async def visit(self, mod_reference: str) -> None:
        self.failures.pop(mod_reference, None)
        if not self.is_required(mod_reference):
            return

        try:
            candidates = await self.compat.candidates(mod_reference)
        except NoCompatibleVersion as exc:
            self.failures[mod_reference] = exc
            return

        current = self.pins.get(mod_reference)
        effective = intersect(
            r.constraint for r in self.requirements[mod_reference]
        )
        if current is not None and effective.satisfies(
            current.version, self.include_prerelease
        ):
            chosen = self.locked_candidate(mod_reference, candidates, effective)
            if chosen is None or chosen.version == current.version:
                return
        else:
            chosen = self.select(mod_reference, candidates, effective)

        if chosen is None:
            if current is not None:
                self.count_repin(mod_reference, len(candidates))
                self.unpin(mod_reference)
                self.collect_garbage()
            self.failures[mod_reference] = VersionConflict(
                mod_reference,
                str(effective),
                [
                    (str(r.constraint), r.origin)
                    for r in self.requirements[mod_reference]
                ],
                [str(c.version) for c in candidates],
            )
            return

        if current is None:
            await self.pin(mod_reference, chosen)
            return

        self.count_repin(mod_reference, len(candidates))
        self.retract(pin_origin(mod_reference, current.version))
        await self.pin(mod_reference, chosen)
        self.collect_garbage()

    def locked_candidate(
        self,
        mod_reference: str,
        candidates: list[ModVersion],
        effective: ConstraintSet,
    ) -> ModVersion | None:
        """The prior locked version, if it is a candidate satisfying *effective*."""
        locked = self.prior.get(mod_reference) if self.prior is not None else None
        if locked is None:
            return None
        for candidate in candidates:
            if candidate.version == locked.version and effective.satisfies(
                candidate.version, self.include_prerelease
            ):
                return candidate
        return None

    def select(
        self,
        mod_reference: str,
        candidates: list[ModVersion],
        effective: ConstraintSet,
    ) -> ModVersion | None:
        """Pick a candidate: the prior locked version if still valid, else newest."""
        locked = self.locked_candidate(mod_reference, candidates, effective)
        if locked is not None:
            return locked
        for candidate in candidates:
            if effective.satisfies(candidate.version, self.include_prerelease):
                return candidate
        return None

    def count_repin(self, mod_reference: str, candidates: int) -> None:
        self.repins[mod_reference] += 1
        if self.repins[mod_reference] > candidates:
            raise CycleExceeded(mod_reference, self.repins[mod_reference], candidates)

    async def pin(self, mod_reference: str, chosen: ModVersion) -> None:
        self.pins[mod_reference] = chosen
        dependencies = await self.registry.list_dependencies(
            mod_reference, chosen.version
        )
        origin = pin_origin(mod_reference, chosen.version)
        discovered: list[str] = []
        for dep in dependencies:
            added = self.add_requirement(
                DependencyRequirement(
                    mod_reference=dep.mod_reference,
                    constraint=dep.constraint,
                    origin=origin,
                    optional=dep.optional,
                )
            )
            if added and not dep.optional and dep.mod_reference not in self.pins:
                discovered.append(dep.mod_reference)
        self.compat.prefetch(discovered)

    # -- retraction ----------------------------------------------------------

    def retract(self, origin: str) -> None:
        """Drop every requirement contributed by *origin* and revisit targets."""
        for target, reqs in self.requirements.items():
            kept = [r for r in reqs if r.origin != origin]
            if len(kept) == len(reqs):
                continue
            for r in reqs:
                if r.origin == origin:
                    self.live_edges.discard(
                        (r.mod_reference, str(r.constraint), r.origin)
                    )
            self.requirements[target] = kept
            self.schedule(target)

    def unpin(self, mod_reference: str) -> None:
        pinned = self.pins.pop(mod_reference)
        self.retract(pin_origin(mod_reference, pinned.version))

    def collect_garbage(self) -> None:
        """Unpin every mod no root reaches any more, with its edges.

        Edges of unreachable pins never feed the reachable set, so one pass
        reaches the fixed point.
        """
        live = self.reachable()
        for ref in [ref for ref in self.pins if ref not in live]:
            self.unpin(ref)
