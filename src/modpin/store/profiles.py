"""Profile store — ``profiles.json`` persistence.

File format::

    {
      "version": 0,
      "selected_profile": "Default",
      "profiles": {
        "Default": {"name": "Default", "mods": {"SML": {"version": "^3.6.0"}}}
      }
    }

A missing file yields a store with a single empty ``Default`` profile.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from modpin.core.profile import Profile
from modpin.exceptions import ProfileError
from modpin.store.jsonfile import read_json, write_json

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = "Default"

# Increment when the on-disk format changes incompatibly.
PROFILES_FORMAT_VERSION = 0


class ProfileStore:
    """All known profiles plus the currently selected one."""

    def __init__(
        self,
        path: Path,
        profiles: dict[str, Profile] | None = None,
        selected: str = DEFAULT_PROFILE,
    ) -> None:
        self.path = Path(path)
        self.profiles: dict[str, Profile] = profiles if profiles is not None else {
            DEFAULT_PROFILE: Profile(DEFAULT_PROFILE)
        }
        self.selected = selected

    # -- persistence --------------------------------------------------------

    @classmethod
    def load(cls, path: Path) -> ProfileStore:
        """Load profiles from *path*; a missing file yields the default store.

        Raises:
            ProfileError: If the file is unreadable, malformed, or written by
                a newer format version.
        """
        path = Path(path)
        try:
            data = read_json(path)
        except (OSError, json.JSONDecodeError) as exc:
            raise ProfileError(f"Failed to read profiles from {path}: {exc}") from exc
        if data is None:
            logger.info("No profiles file at %s, starting with defaults", path)
            return cls(path)

        if not isinstance(data, dict) or not isinstance(data.get("profiles"), dict):
            raise ProfileError(f"Malformed profiles file {path}")
        if data.get("version", 0) > PROFILES_FORMAT_VERSION:
            raise ProfileError(
                f"Unknown profiles version: {data.get('version')}", path=str(path)
            )

        profiles: dict[str, Profile] = {}
        for name, entry in data["profiles"].items():
            mods = {
                ref: str(spec.get("version", ""))
                for ref, spec in (entry.get("mods") or {}).items()
            }
            profiles[name] = Profile(name=name, mods=mods)
        return cls(path, profiles, data.get("selected_profile") or DEFAULT_PROFILE)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": PROFILES_FORMAT_VERSION,
            "selected_profile": self.selected,
            "profiles": {
                name: {
                    "name": name,
                    "mods": {ref: {"version": text} for ref, text in p.mods.items()},
                }
                for name, p in self.profiles.items()
            },
        }

    def save(self, dry_run: bool = False) -> None:
        if dry_run:
            logger.info("dry-run: skipping profile saving")
            return
        logger.info("Saving profiles to %s", self.path)
        try:
            write_json(self.path, self.to_dict())
        except OSError as exc:
            raise ProfileError(f"Failed to write profiles to {self.path}: {exc}") from exc

    # -- operations ---------------------------------------------------------

    def get(self, name: str) -> Profile:
        try:
            return self.profiles[name]
        except KeyError:
            raise ProfileError(f"Profile {name!r} not found", profile=name) from None

    def add(self, name: str) -> Profile:
        if name in self.profiles:
            raise ProfileError(f"Profile {name!r} already exists", profile=name)
        profile = Profile(name)
        self.profiles[name] = profile
        return profile

    def delete(self, name: str) -> None:
        self.get(name)
        del self.profiles[name]
        if self.selected == name:
            self.selected = next(iter(self.profiles), DEFAULT_PROFILE)

    def rename(self, old: str, new: str) -> Profile:
        profile = self.get(old)
        if new in self.profiles:
            raise ProfileError(f"Profile {new!r} already exists", profile=new)
        self.profiles = {
            (new if name == old else name): p for name, p in self.profiles.items()
        }
        profile.name = new
        if self.selected == old:
            self.selected = new
        return profile

    def select(self, name: str) -> None:
        self.get(name)
        self.selected = name
