"""Base classes and data models for mod registry clients.

Defines the ``RegistryClient`` abstract base class that the resolution
engine depends on, along with the ``ModVersion`` and ``ModDependency``
records it returns. Concrete clients (remote HTTP, in-memory snapshot)
implement the two query primitives; everything else in modpin talks to
the registry only through this interface.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from modpin.core.dependency.constraints import VersionConstraint
from modpin.core.dependency.version import Version

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ModVersion:
    """One published version of a mod as reported by the registry.

    Attributes:
        version: The concrete semantic version.
        hash: Content hash of the distributable archive (hex SHA-256).
        link: Download URL of the archive.
        compatible: Whether the registry declares this version compatible
            with the game version the listing was requested for.
    """

    version: Version
    hash: str = ""
    link: str = ""
    compatible: bool = True


@dataclass(frozen=True)
class ModDependency:
    """A dependency declared by a specific mod version.

    Attributes:
        mod_reference: The mod depended upon.
        constraint: Versions of that mod the dependent accepts.
        optional: True if the dependency is only a constraint on the target
            when the target is installed for another reason.
    """

    mod_reference: str
    constraint: VersionConstraint
    optional: bool = False


# ---------------------------------------------------------------------------
# Abstract registry client
# ---------------------------------------------------------------------------


class RegistryClient(ABC):
    """Abstract mod registry.

    Implementations must be safe to call concurrently for distinct mods and
    must raise ``RegistryUnavailable`` on transport or protocol failures.
    Retry policy, if any, belongs here and not in the resolution engine.
    """

    @property
    @abstractmethod
    def registry_name(self) -> str:
        """Human-readable name of this registry."""

    @abstractmethod
    async def list_versions(
        self, mod_reference: str, game_version: int
    ) -> list[ModVersion]:
        """List every known version of a mod.

        Args:
            mod_reference: The mod to look up.
            game_version: Active game build; drives each record's
                ``compatible`` flag.

        Returns:
            Version records in any order. Empty if the mod is unknown.
        """

    @abstractmethod
    async def list_dependencies(
        self, mod_reference: str, version: Version
    ) -> list[ModDependency]:
        """List the dependencies declared by ``mod_reference@version``.

        Returns:
            Dependency records in registry order.

        Raises:
            MalformedConstraint: If a declared constraint cannot be parsed.
        """

    async def aclose(self) -> None:
        """Release any network resources held by the client."""
