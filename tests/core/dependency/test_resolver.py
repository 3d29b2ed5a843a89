"""Tests for the worklist dependency resolver.

Covers the reference scenarios (fresh resolve, lock preference, conflict
reporting), intersection of root and transitive constraints, re-pinning
with edge retraction, optional dependencies, and the per-call query cache.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from modpin.core.dependency import DependencyResolver, Resolution, Version
from modpin.core.lockfile import LockedMod, LockFile
from modpin.core.profile import Profile
from modpin.exceptions import NoCompatibleVersion, ResolutionError, VersionConflict

GV = 264901


# ===========================================================================
# Helpers
# ===========================================================================


def _resolve(
    registry: Any,
    roots: dict[str, str],
    prior: LockFile | None = None,
    game_version: int = GV,
    **options: Any,
) -> Resolution:
    requirements = Profile("Default", roots).root_requirements()
    resolver = DependencyResolver(registry, **options)
    return asyncio.run(resolver.resolve(requirements, game_version, prior))


def _lock(**versions: str) -> LockFile:
    return LockFile(
        LockedMod(ref, Version.parse(v), link=f"https://cdn.example/{ref}-{v}.zip")
        for ref, v in versions.items()
    )


def _rec(version: str, deps: dict[str, str] | None = None, **extra: Any) -> dict[str, Any]:
    record: dict[str, Any] = {"version": version, **extra}
    if deps:
        record["dependencies"] = deps
    return record


# ===========================================================================
# Reference scenarios
# ===========================================================================


class TestScenarios:
    def test_fresh_resolve_takes_newest(self, scenario_registry) -> None:
        result = _resolve(scenario_registry, {"A": "^1.0.0"})
        assert result.installed == {"A": "1.2.0", "B": "2.2.0"}
        assert result.game_version == GV

    def test_prior_lock_is_preferred(self, scenario_registry) -> None:
        result = _resolve(scenario_registry, {"A": "^1.0.0"}, prior=_lock(B="2.1.0"))
        assert result.installed == {"A": "1.2.0", "B": "2.1.0"}

    def test_prior_lock_for_root(self, scenario_registry) -> None:
        result = _resolve(scenario_registry, {"A": "^1.0.0"}, prior=_lock(A="1.0.0"))
        # A 1.0.0 declares no dependencies, so B is not needed.
        assert result.installed == {"A": "1.0.0"}

    def test_prior_lock_ignored_when_unsatisfying(self, scenario_registry) -> None:
        result = _resolve(scenario_registry, {"A": "^1.0.0"}, prior=_lock(B="1.9.0"))
        assert result.installed["B"] == "2.2.0"

    def test_prior_lock_ignored_when_incompatible(self, make_registry) -> None:
        registry = make_registry({
            "B": [
                _rec("2.1.0", max_game_version=GV - 1),
                _rec("2.2.0"),
            ],
        })
        result = _resolve(registry, {"B": ">=2.0.0"}, prior=_lock(B="2.1.0"))
        assert result.installed == {"B": "2.2.0"}

    def test_conflict_cites_every_origin(self, make_registry) -> None:
        registry = make_registry({
            "C": [_rec("1.0.0", {"E": ">=3.0.0"})],
            "D": [_rec("1.0.0", {"E": "<2.0.0"})],
            "E": [_rec("1.0.0"), _rec("3.0.0")],
        })
        with pytest.raises(VersionConflict) as excinfo:
            _resolve(registry, {"C": "=1.0.0", "D": "=1.0.0"})

        err = excinfo.value
        assert err.mod_reference == "E"
        assert err.origins == ["C@1.0.0", "D@1.0.0"]
        assert err.requirements == [(">=3.0.0", "C@1.0.0"), ("<2.0.0", "D@1.0.0")]
        assert err.available == ["3.0.0", "1.0.0"]
        assert err.to_dict()["error"] == "VersionConflict"


# ===========================================================================
# Constraint accumulation
# ===========================================================================


class TestIntersection:
    def test_root_and_transitive_intersect(self, scenario_registry) -> None:
        result = _resolve(scenario_registry, {"A": "^1.0.0", "B": "<2.2.0"})
        assert result.installed == {"A": "1.2.0", "B": "2.1.0"}
        assert str(result.effective_constraint("B")) == "<2.2.0, >=2.0.0"

    def test_root_conflicts_with_transitive(self, scenario_registry) -> None:
        with pytest.raises(VersionConflict) as excinfo:
            _resolve(scenario_registry, {"A": "^1.0.0", "B": "<2.0.0"})
        assert excinfo.value.origins == ["profile:Default", "A@1.2.0"]

    def test_requirements_recorded_per_pin(self, scenario_registry) -> None:
        result = _resolve(scenario_registry, {"A": "^1.0.0"})
        assert [r.origin for r in result.requirements["A"]] == ["profile:Default"]
        assert [r.origin for r in result.requirements["B"]] == ["A@1.2.0"]

    def test_empty_profile(self, scenario_registry) -> None:
        result = _resolve(scenario_registry, {})
        assert result.pins == {}


# ===========================================================================
# Compatibility and registry errors
# ===========================================================================


class TestCompatibility:
    def test_no_compatible_version(self, make_registry) -> None:
        registry = make_registry({"Old": [_rec("1.0.0", min_game_version=GV + 1)]})
        with pytest.raises(NoCompatibleVersion) as excinfo:
            _resolve(registry, {"Old": ">=1.0.0"})
        assert excinfo.value.mod_reference == "Old"

    def test_transitive_unknown_mod(self, make_registry) -> None:
        registry = make_registry({"A": [_rec("1.0.0", {"Ghost": ">=1.0.0"})]})
        with pytest.raises(NoCompatibleVersion):
            _resolve(registry, {"A": ">=1.0.0"})

    def test_incompatible_newest_skipped(self, make_registry) -> None:
        registry = make_registry({
            "A": [_rec("1.0.0"), _rec("1.1.0", min_game_version=GV + 1)],
        })
        assert _resolve(registry, {"A": "^1.0.0"}).installed == {"A": "1.0.0"}

    def test_prerelease_opt_in(self, make_registry) -> None:
        registry = make_registry({"A": [_rec("1.0.0"), _rec("2.0.0-beta.1")]})
        assert _resolve(registry, {"A": ">=1.0.0"}).installed == {"A": "1.0.0"}
        assert _resolve(
            registry, {"A": ">=1.0.0"}, include_prerelease=True
        ).installed == {"A": "2.0.0-beta.1"}

    def test_errors_share_a_base(self, make_registry) -> None:
        with pytest.raises(ResolutionError):
            _resolve(make_registry({}), {"Ghost": ">=1.0.0"})


# ===========================================================================
# Re-pinning, retraction, and optional dependencies
# ===========================================================================


class TestRepin:
    @pytest.fixture
    def retract_registry(self, make_registry):
        return make_registry({
            "A": [_rec("1.0.0"), _rec("2.0.0", {"X": ">=1.0.0"})],
            "B": [_rec("1.0.0", {"A": "<2.0.0"})],
            "X": [_rec("1.0.0")],
        })

    def test_repin_retracts_stale_edges(self, retract_registry) -> None:
        result = _resolve(retract_registry, {"A": ">=1.0.0", "B": ">=1.0.0"})
        assert result.installed == {"A": "1.0.0", "B": "1.0.0"}
        assert "X" not in result.requirements

    def test_repin_unpins_mods_only_the_old_pin_needed(self, make_registry) -> None:
        # A@2 pulls in B, whose C =1.0.0 must vanish once X forces A below 2.
        registry = make_registry({
            "A": [_rec("1.0.0"), _rec("2.0.0", {"B": "=1.0.0"})],
            "B": [_rec("1.0.0", {"C": "=1.0.0"})],
            "C": [_rec("1.0.0"), _rec("2.0.0")],
            "X": [_rec("1.0.0", {"A": "<2.0.0", "C": "=2.0.0"})],
        })
        result = _resolve(registry, {"A": ">=1.0.0", "X": "=1.0.0"})
        assert result.installed == {"A": "1.0.0", "X": "1.0.0", "C": "2.0.0"}
        assert [r.origin for r in result.requirements["C"]] == ["X@1.0.0"]

    def test_conflict_from_pending_repin_is_not_reported(self, make_registry) -> None:
        # X lists C before A, so C is examined while B@1.0.0 is still pinned.
        registry = make_registry({
            "A": [_rec("1.0.0"), _rec("2.0.0", {"B": "=1.0.0"})],
            "B": [_rec("1.0.0", {"C": "=1.0.0"})],
            "C": [_rec("1.0.0"), _rec("2.0.0")],
            "X": [_rec("1.0.0", {"C": "=2.0.0", "A": "<2.0.0"})],
        })
        result = _resolve(registry, {"A": ">=1.0.0", "X": "=1.0.0"})
        assert result.installed == {"A": "1.0.0", "X": "1.0.0", "C": "2.0.0"}

    def test_missing_mod_of_replaced_pin_is_not_reported(self, make_registry) -> None:
        registry = make_registry({
            "A": [_rec("1.0.0"), _rec("2.0.0", {"Ghost": ">=1.0.0"})],
            "X": [_rec("1.0.0", {"A": "<2.0.0"})],
        })
        result = _resolve(registry, {"A": ">=1.0.0", "X": "=1.0.0"})
        assert result.installed == {"A": "1.0.0", "X": "1.0.0"}

    def test_locked_version_restored_after_retraction(self, make_registry) -> None:
        # C is pinned under A@2's <2.0.0, which disappears when A drops to 1.0.0.
        registry = make_registry({
            "A": [_rec("1.0.0"), _rec("2.0.0", {"C": "<2.0.0"})],
            "C": [_rec("1.0.0"), _rec("2.0.0")],
            "X": [_rec("1.0.0", {"A": "<2.0.0"})],
        })
        result = _resolve(
            registry,
            {"A": ">=1.0.0", "C": ">=1.0.0", "X": "=1.0.0"},
            prior=_lock(C="2.0.0"),
        )
        assert result.installed == {"A": "1.0.0", "C": "2.0.0", "X": "1.0.0"}

    def test_satisfiable_cycle_terminates(self, make_registry) -> None:
        registry = make_registry({
            "A": [_rec("1.0.0", {"B": "^1.0.0"})],
            "B": [_rec("1.0.0", {"A": "^1.0.0"})],
        })
        assert _resolve(registry, {"A": "^1.0.0"}).installed == {"A": "1.0.0", "B": "1.0.0"}


class TestOptional:
    def test_optional_never_installs(self, make_registry) -> None:
        registry = make_registry({
            "A": [{"version": "1.0.0", "optional_dependencies": {"Ghost": ">=1.0.0"}}],
        })
        result = _resolve(registry, {"A": ">=1.0.0"})
        assert result.installed == {"A": "1.0.0"}
        assert ("list_versions", "Ghost") not in registry.calls

    def test_optional_still_constrains(self, make_registry) -> None:
        registry = make_registry({
            "A": [{"version": "1.0.0", "optional_dependencies": {"O": "<3.0.0"}}],
            "O": [_rec("1.0.0"), _rec("2.0.0"), _rec("3.0.0")],
        })
        result = _resolve(registry, {"A": ">=1.0.0", "O": ">=1.0.0"})
        assert result.installed == {"A": "1.0.0", "O": "2.0.0"}


# ===========================================================================
# Per-call query cache and determinism
# ===========================================================================


class TestQueries:
    @pytest.fixture
    def diamond(self, make_registry):
        return make_registry({
            "A": [_rec("1.0.0", {"B": "^1.0.0", "C": "^1.0.0"})],
            "B": [_rec("1.0.0", {"D": ">=1.0.0"})],
            "C": [_rec("1.0.0", {"D": ">=1.1.0"})],
            "D": [_rec("1.0.0"), _rec("1.1.0"), _rec("1.2.0")],
        })

    def test_one_version_listing_per_mod(self, diamond) -> None:
        _resolve(diamond, {"A": "^1.0.0"})
        listings = [ref for call, ref in diamond.calls if call == "list_versions"]
        assert sorted(listings) == ["A", "B", "C", "D"]

    def test_diamond_resolution(self, diamond) -> None:
        result = _resolve(diamond, {"A": "^1.0.0"})
        assert result.installed == {"A": "1.0.0", "B": "1.0.0", "C": "1.0.0", "D": "1.2.0"}

    def test_repeated_calls_are_identical(self, diamond) -> None:
        first = _resolve(diamond, {"A": "^1.0.0"})
        second = _resolve(diamond, {"A": "^1.0.0"})
        assert first.installed == second.installed
        assert first.requirements == second.requirements

    def test_resolver_is_reusable(self, diamond) -> None:
        resolver = DependencyResolver(diamond)
        roots = Profile("Default", {"A": "^1.0.0"}).root_requirements()

        async def run() -> tuple[Resolution, Resolution]:
            return (
                await resolver.resolve(roots, GV),
                await resolver.resolve(roots, GV),
            )

        first, second = asyncio.run(run())
        assert first.installed == second.installed
