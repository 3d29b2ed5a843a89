"""Version constraints and dependency requirements.

A constraint is an optional comparison operator applied to a base version:

- Exact match: ``1.0.0`` or ``=1.0.0``
- Range: ``>1.0.0``, ``>=1.0.0``, ``<2.0.0``, ``<=2.0.0``
- Caret (compatible with): ``^1.2.0`` means same major and at least 1.2.0;
  when the major is 0 the minor must match as well (``^0.3.1`` admits
  0.3.x only).

A mod collects constraints from every requester. The effective constraint
is their conjunction, represented by ``ConstraintSet`` and evaluated lazily
per candidate rather than normalized into a single range.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from modpin.core.dependency.version import VERSION_PATTERN, Version
from modpin.exceptions import MalformedConstraint

_CONSTRAINT_RE = re.compile(
    r"^\s*(?P<op>>=|<=|>|<|=|\^)?\s*(?P<ver>" + VERSION_PATTERN + r")\s*$"
)

ROOT_ORIGIN_PREFIX = "profile:"


def profile_origin(profile_name: str) -> str:
    """Origin label for a root requirement declared by a profile."""
    return f"{ROOT_ORIGIN_PREFIX}{profile_name}"


def pin_origin(mod_reference: str, version: Version) -> str:
    """Origin label for a dependency edge declared by ``mod@version``."""
    return f"{mod_reference}@{version}"


# ---------------------------------------------------------------------------
# VersionConstraint
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VersionConstraint:
    """A single ``<op><version>`` predicate over versions.

    Attributes:
        op: One of ``=``, ``<``, ``<=``, ``>``, ``>=``, ``^``.
        base: The version the operator is applied to.
    """

    op: str
    base: Version

    @classmethod
    def parse(
        cls,
        text: str,
        *,
        mod_reference: str | None = None,
        origin: str | None = None,
    ) -> VersionConstraint:
        """Parse constraint text such as ``^1.2.0`` or ``>=2.0.0``.

        Raises:
            MalformedConstraint: If *text* is not a valid constraint. The
                error carries the raw text and where it came from.
        """
        m = _CONSTRAINT_RE.match(text) if isinstance(text, str) else None
        if not m:
            raise MalformedConstraint(
                str(text), mod_reference=mod_reference, origin=origin
            )
        try:
            base = Version.parse(m.group("ver"))
        except ValueError:
            raise MalformedConstraint(
                text, mod_reference=mod_reference, origin=origin
            ) from None
        return cls(op=m.group("op") or "=", base=base)

    def satisfies(self, version: Version, include_prerelease: bool = False) -> bool:
        """Check whether *version* satisfies this constraint.

        A pre-release candidate only matches when the constraint itself
        names a pre-release of the same ``major.minor.patch``, unless
        *include_prerelease* is set.
        """
        if version.is_prerelease and not include_prerelease:
            if not (self.base.is_prerelease and self.base.release == version.release):
                return False

        op, base = self.op, self.base
        if op == "=":
            return version == base
        if op == ">=":
            return version >= base
        if op == "<=":
            return version <= base
        if op == ">":
            return version > base
        if op == "<":
            return version < base
        if op == "^":
            if base.major == 0:
                return (
                    version.major == 0
                    and version.minor == base.minor
                    and version >= base
                )
            return version.major == base.major and version >= base
        raise ValueError(f"Unknown operator: {op!r}")  # pragma: no cover

    def __str__(self) -> str:
        return f"{self.op}{self.base}"

    def __repr__(self) -> str:
        return f"VersionConstraint({str(self)!r})"


# ---------------------------------------------------------------------------
# ConstraintSet: lazy conjunction
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConstraintSet:
    """Conjunction of constraints; the empty set admits every version."""

    constraints: tuple[VersionConstraint, ...] = ()

    def satisfies(self, version: Version, include_prerelease: bool = False) -> bool:
        return all(c.satisfies(version, include_prerelease) for c in self.constraints)

    def __iter__(self) -> Iterator[VersionConstraint]:
        return iter(self.constraints)

    def __len__(self) -> int:
        return len(self.constraints)

    def __str__(self) -> str:
        if not self.constraints:
            return "*"
        return ", ".join(str(c) for c in self.constraints)


def intersect(constraints: Iterable[VersionConstraint]) -> ConstraintSet:
    """Combine constraints into their conjunction.

    Duplicate constraints are collapsed; order of first appearance is kept so
    that diagnostics render deterministically.
    """
    unique: dict[VersionConstraint, None] = {}
    for c in constraints:
        unique.setdefault(c, None)
    return ConstraintSet(tuple(unique))


# ---------------------------------------------------------------------------
# DependencyRequirement: an edge in the requirement graph
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DependencyRequirement:
    """A requirement that ``mod_reference`` satisfy ``constraint``.

    Attributes:
        mod_reference: The required mod.
        constraint: Version constraint the mod's pin must satisfy.
        origin: Who asked: ``profile:<name>`` for root requirements,
            ``<mod>@<version>`` for edges declared by a pinned mod.
        optional: Optional edges constrain the target if something else
            requires it, but never cause it to be installed.
    """

    mod_reference: str
    constraint: VersionConstraint
    origin: str
    optional: bool = False

    @property
    def is_root(self) -> bool:
        return self.origin.startswith(ROOT_ORIGIN_PREFIX)
