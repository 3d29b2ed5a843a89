"""Semantic versions with SemVer 2.0.0 precedence.

References
----------
.. [SemVer] Preston-Werner, T. (2013). "Semantic Versioning 2.0.0."
   https://semver.org/
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, field

_SEMVER_RE = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<pre>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

# Pattern fragment reused by the constraint grammar.
VERSION_PATTERN = (
    r"(?:0|[1-9]\d*)\.(?:0|[1-9]\d*)\.(?:0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z\-.]+)?(?:\+[0-9A-Za-z\-.]+)?"
)


def _pre_key(identifiers: tuple[str, ...]) -> tuple[tuple[int, int | str], ...]:
    """Sort key for pre-release identifiers (SemVer section 11.4)."""
    return tuple(
        (0, int(ident)) if ident.isdigit() else (1, ident) for ident in identifiers
    )


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A semantic version ``major.minor.patch[-pre][+build]``.

    Ordering and equality follow SemVer precedence: build metadata is
    ignored, and a pre-release sorts before its associated release.
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: str = field(default="")

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a version string.

        Raises:
            ValueError: If *text* is not a valid semantic version.
        """
        m = _SEMVER_RE.match(text.strip())
        if not m:
            raise ValueError(f"Invalid semantic version: {text!r}")
        pre = m.group("pre")
        return cls(
            major=int(m.group("major")),
            minor=int(m.group("minor")),
            patch=int(m.group("patch")),
            prerelease=tuple(pre.split(".")) if pre else (),
            build=m.group("build") or "",
        )

    @property
    def release(self) -> tuple[int, int, int]:
        """The ``(major, minor, patch)`` triple."""
        return self.major, self.minor, self.patch

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def _precedence(self) -> tuple:
        # A release (no pre-release) outranks any pre-release of the same triple.
        if self.prerelease:
            return (self.release, 0, _pre_key(self.prerelease))
        return (self.release, 1, ())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence() == other._precedence()

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence() < other._precedence()

    def __hash__(self) -> int:
        return hash(self._precedence())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + self.build
        return text

    def __repr__(self) -> str:
        return f"Version({str(self)!r})"
