"""modpin exception hierarchy.

All public exceptions inherit from ModpinError, giving callers a single
base class to catch when they want to handle any modpin-specific failure
without swallowing unrelated errors. Every error carries a ``kind`` and can
be rendered as a structured dict for machine-readable CLI output.
"""

from __future__ import annotations

from typing import Any


class ModpinError(Exception):
    """Base exception for all modpin errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    @property
    def kind(self) -> str:
        """Error kind name, stable across releases (the class name)."""
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        """Render the error as a JSON-serializable dict."""
        return {
            "error": self.kind,
            "message": self.message,
            **self.context,
        }


# ---------------------------------------------------------------------------
# Resolution failures
# ---------------------------------------------------------------------------


class ResolutionError(ModpinError):
    """Raised when dependency resolution fails.

    Every subclass is fatal to the resolution call that raised it: no
    partial lockfile is ever produced.
    """


class MalformedConstraint(ResolutionError):
    """A version constraint string cannot be parsed.

    Attributes:
        text: The raw constraint text as authored.
        mod_reference: The mod the constraint applies to, if known.
        origin: Where the constraint came from (profile or mod@version).
    """

    def __init__(
        self,
        text: str,
        *,
        mod_reference: str | None = None,
        origin: str | None = None,
    ) -> None:
        where = ""
        if mod_reference:
            where += f" for {mod_reference!r}"
        if origin:
            where += f" (from {origin})"
        super().__init__(
            f"Malformed version constraint {text!r}{where}",
            text=text,
            mod_reference=mod_reference,
            origin=origin,
        )
        self.text = text
        self.mod_reference = mod_reference
        self.origin = origin


class NoCompatibleVersion(ResolutionError):
    """A mod has no version compatible with the active game build."""

    def __init__(self, mod_reference: str, game_version: int) -> None:
        super().__init__(
            f"No version of {mod_reference!r} is compatible with "
            f"game version {game_version}",
            mod_reference=mod_reference,
            game_version=game_version,
        )
        self.mod_reference = mod_reference
        self.game_version = game_version


class VersionConflict(ResolutionError):
    """The accumulated constraints on a mod admit no candidate version.

    Attributes:
        mod_reference: The mod that could not be pinned.
        constraint: Rendering of the effective (intersected) constraint.
        requirements: Every contributing ``(constraint, origin)`` pair.
        available: Compatible versions that were considered, newest first.
    """

    def __init__(
        self,
        mod_reference: str,
        constraint: str,
        requirements: list[tuple[str, str]],
        available: list[str] | None = None,
    ) -> None:
        origins = ", ".join(f"{origin} requires {c}" for c, origin in requirements)
        super().__init__(
            f"No version of {mod_reference!r} satisfies {constraint} "
            f"({origins})",
            mod_reference=mod_reference,
            constraint=constraint,
            requirements=[
                {"constraint": c, "origin": origin} for c, origin in requirements
            ],
            available=list(available or []),
        )
        self.mod_reference = mod_reference
        self.constraint = constraint
        self.requirements = list(requirements)
        self.available = list(available or [])

    @property
    def origins(self) -> list[str]:
        """Origins of every requirement that constrained the mod."""
        return [origin for _, origin in self.requirements]


class RegistryUnavailable(ResolutionError):
    """A registry query failed (network, timeout, or malformed response)."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, url=url, status_code=status_code)
        self.url = url
        self.status_code = status_code


class CycleExceeded(ResolutionError):
    """A mod was re-pinned more often than it has candidate versions."""

    def __init__(self, mod_reference: str, repins: int, candidates: int) -> None:
        super().__init__(
            f"{mod_reference!r} was re-pinned {repins} times with only "
            f"{candidates} candidate versions; the requirements oscillate",
            mod_reference=mod_reference,
            repins=repins,
            candidates=candidates,
        )
        self.mod_reference = mod_reference


# ---------------------------------------------------------------------------
# Collaborator failures
# ---------------------------------------------------------------------------


class LockfileError(ModpinError):
    """Raised when a lockfile cannot be read, parsed, or written."""


class ProfileError(ModpinError):
    """Raised for profile store failures (unknown or duplicate profiles)."""


class InstallationError(ModpinError):
    """Raised for installation bookkeeping failures.

    Covers missing game executables, undetectable platforms, unreadable
    game version files, and duplicate installations.
    """


class ArtifactError(ModpinError):
    """Raised when a mod archive cannot be downloaded, verified, or extracted."""
