"""Version constraints and worklist-based dependency resolution.

Public names are re-exported here so callers can write
``from modpin.core.dependency import DependencyResolver`` without knowing
the submodule layout.

Model
-----
- A **requirement** ``(mod, constraint, origin)`` comes from a profile
  (origin ``profile:<name>``) or from a pinned mod version's declared
  dependencies (origin ``<mod>@<version>``).
- The **effective constraint** of a mod is the conjunction of its live
  requirements.
- A **pin** commits a required mod to one registry version that is
  compatible with the active game build and satisfies its effective
  constraint.
"""

from modpin.core.dependency.compat import CompatibilityFilter
from modpin.core.dependency.constraints import (
    ConstraintSet,
    DependencyRequirement,
    VersionConstraint,
    intersect,
    pin_origin,
    profile_origin,
)
from modpin.core.dependency.resolver import DependencyResolver, Resolution
from modpin.core.dependency.version import Version

__all__ = [
    "CompatibilityFilter",
    "ConstraintSet",
    "DependencyRequirement",
    "DependencyResolver",
    "Resolution",
    "Version",
    "VersionConstraint",
    "intersect",
    "pin_origin",
    "profile_origin",
]
