"""Shared fixtures for modpin tests."""

from __future__ import annotations

import json
import pathlib
from typing import Any, Callable

import pytest

from modpin.core.dependency import Version, pin_origin
from modpin.core.profile import Profile
from modpin.registry.base import ModDependency, ModVersion
from modpin.registry.snapshot import SnapshotRegistry

GAME_VERSION = 264901


class RecordingRegistry(SnapshotRegistry):
    """Snapshot registry that records every query in ``calls``."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.calls: list[tuple[str, str]] = []

    async def list_versions(self, mod_reference: str, game_version: int) -> list[ModVersion]:
        self.calls.append(("list_versions", mod_reference))
        return await super().list_versions(mod_reference, game_version)

    async def list_dependencies(
        self, mod_reference: str, version: Version
    ) -> list[ModDependency]:
        self.calls.append(("list_dependencies", pin_origin(mod_reference, version)))
        return await super().list_dependencies(mod_reference, version)


RegistryFactory = Callable[[dict[str, list[dict[str, Any]]]], RecordingRegistry]


@pytest.fixture
def make_registry() -> RegistryFactory:
    """Build a recording registry from a ``{mod: [version records]}`` mapping."""

    def _make(mods: dict[str, list[dict[str, Any]]]) -> RecordingRegistry:
        return RecordingRegistry.from_dict({"mods": mods}, name="test")

    return _make


@pytest.fixture
def scenario_registry(make_registry: RegistryFactory) -> RecordingRegistry:
    """A 1.2.0 depends on B >=2.0.0; B has 1.9.0, 2.1.0, 2.2.0."""
    return make_registry({
        "A": [
            {"version": "1.0.0", "link": "https://cdn.example/A-1.0.0.zip"},
            {
                "version": "1.2.0",
                "link": "https://cdn.example/A-1.2.0.zip",
                "dependencies": {"B": ">=2.0.0"},
            },
            {"version": "2.0.0", "link": "https://cdn.example/A-2.0.0.zip"},
        ],
        "B": [
            {"version": "1.9.0", "link": "https://cdn.example/B-1.9.0.zip"},
            {"version": "2.1.0", "link": "https://cdn.example/B-2.1.0.zip"},
            {"version": "2.2.0", "link": "https://cdn.example/B-2.2.0.zip"},
        ],
    })


@pytest.fixture
def scenario_profile() -> Profile:
    return Profile("Default", {"A": "^1.0.0"})


@pytest.fixture
def game_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """A fake Windows client install at build ``GAME_VERSION``."""
    root = tmp_path / "Satisfactory"
    binaries = root / "Engine" / "Binaries" / "Win64"
    binaries.mkdir(parents=True)
    (root / "FactoryGame.exe").write_bytes(b"")
    (binaries / "FactoryGame-Win64-Shipping.version").write_text(
        json.dumps({"MajorVersion": 5, "Changelist": GAME_VERSION})
    )
    return root


@pytest.fixture
def game_version() -> int:
    return GAME_VERSION
