"""Lockfile data model — LockedMod.

Pure data holder with no business logic, safe to import from anywhere
without circular-dependency concerns.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from modpin.core.dependency.version import Version

# Content hashes are lowercase hex SHA-256 digests.
_HASH_RE = re.compile(r"^[0-9a-f]{64}$")


@dataclass(frozen=True)
class LockedMod:
    """A single resolved entry in the lockfile.

    Attributes:
        mod_reference: The mod this entry pins.
        version: Resolved semantic version.
        hash: Content hash of the archive, used to verify downloads.
        link: Download URL. Empty means the mod is supplied locally or is
            already installed; the artifact pipeline never fetches it.
    """

    mod_reference: str
    version: Version
    hash: str = ""
    link: str = ""

    @property
    def is_local(self) -> bool:
        return not self.link

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": str(self.version),
            "hash": self.hash,
            "link": self.link,
        }
