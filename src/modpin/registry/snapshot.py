"""In-memory registry loaded from a snapshot file.

A snapshot is a YAML (or JSON, which YAML also parses) document describing
every mod version the registry knows about::

    mods:
      SML:
        - version: 3.6.1
          hash: 5f1c...
          link: https://example.com/SML-3.6.1.zip
          min_game_version: 211839
      RefinedPower:
        - version: 3.2.10
          hash: 9a0e...
          link: https://example.com/RefinedPower-3.2.10.zip
          min_game_version: 211839
          max_game_version: 299999
          dependencies:
            SML: ^3.6.0
          optional_dependencies:
            PowerSuit: ">=1.0.0"

Compatibility with a game build is the closed interval
``[min_game_version, max_game_version]``; a missing bound is unbounded.
Useful offline and as a deterministic registry in tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from modpin.core.dependency.constraints import VersionConstraint, pin_origin
from modpin.core.dependency.version import Version
from modpin.exceptions import RegistryUnavailable
from modpin.registry.base import ModDependency, ModVersion, RegistryClient

logger = logging.getLogger(__name__)


@dataclass
class SnapshotEntry:
    """One mod version in a snapshot, with its compatibility bounds."""

    version: Version
    hash: str = ""
    link: str = ""
    min_game_version: int | None = None
    max_game_version: int | None = None
    dependencies: list[ModDependency] = field(default_factory=list)

    def compatible_with(self, game_version: int) -> bool:
        if self.min_game_version is not None and game_version < self.min_game_version:
            return False
        if self.max_game_version is not None and game_version > self.max_game_version:
            return False
        return True


class SnapshotRegistry(RegistryClient):
    """Registry serving a fixed set of mod versions from memory.

    Args:
        entries: Mapping of mod reference -> list of ``SnapshotEntry``.
        name: Human-readable registry name.
    """

    def __init__(
        self,
        entries: dict[str, list[SnapshotEntry]] | None = None,
        name: str = "snapshot",
    ) -> None:
        self._entries = entries or {}
        self._name = name

    @property
    def registry_name(self) -> str:
        return self._name

    # -- construction -------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any], name: str = "snapshot") -> SnapshotRegistry:
        """Build a registry from the parsed snapshot document.

        Raises:
            RegistryUnavailable: If the document is not a valid snapshot.
            MalformedConstraint: If a declared dependency does not parse.
        """
        mods = data.get("mods") if isinstance(data, dict) else None
        if not isinstance(mods, dict):
            raise RegistryUnavailable(f"Snapshot {name!r} has no 'mods' mapping")

        entries: dict[str, list[SnapshotEntry]] = {}
        for ref, versions in mods.items():
            if not isinstance(versions, list):
                raise RegistryUnavailable(
                    f"Snapshot {name!r}: versions of {ref!r} must be a list"
                )
            entries[str(ref)] = [_parse_entry(str(ref), item, name) for item in versions]
        return cls(entries, name=name)

    @classmethod
    def load(cls, path: Path) -> SnapshotRegistry:
        """Load a snapshot from a YAML or JSON file.

        Raises:
            RegistryUnavailable: If the file is missing or unparsable.
        """
        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise RegistryUnavailable(f"Cannot load registry snapshot {path}: {exc}") from exc
        logger.info("Loaded registry snapshot %s", path)
        return cls.from_dict(data, name=str(path))

    # -- RegistryClient -----------------------------------------------------

    async def list_versions(
        self, mod_reference: str, game_version: int
    ) -> list[ModVersion]:
        return [
            ModVersion(
                version=e.version,
                hash=e.hash,
                link=e.link,
                compatible=e.compatible_with(game_version),
            )
            for e in self._entries.get(mod_reference, [])
        ]

    async def list_dependencies(
        self, mod_reference: str, version: Version
    ) -> list[ModDependency]:
        for entry in self._entries.get(mod_reference, []):
            if entry.version == version:
                return list(entry.dependencies)
        raise RegistryUnavailable(
            f"{pin_origin(mod_reference, version)} is not in snapshot {self._name!r}"
        )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _parse_entry(ref: str, item: Any, name: str) -> SnapshotEntry:
    if not isinstance(item, dict) or "version" not in item:
        raise RegistryUnavailable(f"Snapshot {name!r}: bad version record for {ref!r}")
    try:
        version = Version.parse(str(item["version"]))
    except ValueError as exc:
        raise RegistryUnavailable(f"Snapshot {name!r}: {exc}") from exc

    origin = pin_origin(ref, version)
    deps: list[ModDependency] = []
    for key, optional in (("dependencies", False), ("optional_dependencies", True)):
        declared = item.get(key) or {}
        if not isinstance(declared, dict):
            raise RegistryUnavailable(
                f"Snapshot {name!r}: {key} of {origin} must be a mapping"
            )
        for dep_ref, text in declared.items():
            deps.append(
                ModDependency(
                    mod_reference=str(dep_ref),
                    constraint=VersionConstraint.parse(
                        str(text), mod_reference=str(dep_ref), origin=origin
                    ),
                    optional=optional,
                )
            )

    return SnapshotEntry(
        version=version,
        hash=str(item.get("hash") or ""),
        link=str(item.get("link") or ""),
        min_game_version=_optional_int(item, "min_game_version", origin, name),
        max_game_version=_optional_int(item, "max_game_version", origin, name),
        dependencies=deps,
    )


def _optional_int(item: dict[str, Any], key: str, origin: str, name: str) -> int | None:
    value = item.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise RegistryUnavailable(f"Snapshot {name!r}: {key} of {origin} must be an integer")
    try:
        return int(value)
    except ValueError:
        raise RegistryUnavailable(
            f"Snapshot {name!r}: {key} of {origin} must be an integer, got {value!r}"
        ) from None
