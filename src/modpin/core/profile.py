"""Profiles — named sets of desired mods and their version constraints."""

from __future__ import annotations

from dataclasses import dataclass, field

from modpin.core.dependency.constraints import (
    DependencyRequirement,
    VersionConstraint,
    profile_origin,
)
from modpin.exceptions import ProfileError

# Constraint used when a mod is added without one: any release.
ANY_VERSION = ">=0.0.0"


@dataclass
class Profile:
    """A named profile: ordered mapping of mod reference -> constraint text.

    Constraint text is kept as authored so that persisting a profile
    round-trips exactly; it is parsed when root requirements are built.
    """

    name: str
    mods: dict[str, str] = field(default_factory=dict)

    def add_mod(self, mod_reference: str, constraint: str = ANY_VERSION) -> None:
        """Add or replace a mod requirement.

        Raises:
            MalformedConstraint: If *constraint* does not parse.
        """
        VersionConstraint.parse(
            constraint, mod_reference=mod_reference, origin=profile_origin(self.name)
        )
        self.mods[mod_reference] = constraint

    def remove_mod(self, mod_reference: str) -> None:
        if mod_reference not in self.mods:
            raise ProfileError(
                f"Mod {mod_reference!r} is not in profile {self.name!r}",
                profile=self.name,
                mod_reference=mod_reference,
            )
        del self.mods[mod_reference]

    def root_requirements(self) -> list[DependencyRequirement]:
        """Parse every entry into a root ``DependencyRequirement``.

        Raises:
            MalformedConstraint: On the first entry that does not parse,
                naming the mod and this profile.
        """
        origin = profile_origin(self.name)
        return [
            DependencyRequirement(
                mod_reference=ref,
                constraint=VersionConstraint.parse(
                    text, mod_reference=ref, origin=origin
                ),
                origin=origin,
            )
            for ref, text in self.mods.items()
        ]
