"""Installation store — ``installations.json`` persistence and game detection.

An installation is a game directory bound to one profile. This module keeps
the list of installations and knows how to inspect a game directory:

- **Executable detection:** a directory is only accepted if it contains a
  game or dedicated-server executable.
- **Platform detection:** the platform is identified by which build
  version file exists; it determines where the lockfile and mods live.
- **Game version:** the ``Changelist`` field of the build version file.

File format::

    {
      "version": 0,
      "selected_installation": "/games/Satisfactory",
      "installations": [{"path": "/games/Satisfactory", "profile": "Default"}]
    }
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from modpin.exceptions import InstallationError
from modpin.store.jsonfile import read_json, write_json
from modpin.store.profiles import ProfileStore

logger = logging.getLogger(__name__)

# Increment when the on-disk format changes incompatibly.
INSTALLATIONS_FORMAT_VERSION = 0

GAME_EXECUTABLES: tuple[str, ...] = (
    "FactoryGame.exe",
    "FactoryServer.sh",
    "FactoryServer.exe",
)

LOCKFILE_NAME = "mods-lock.json"


@dataclass(frozen=True)
class Platform:
    """Where a platform keeps its build version file and mods.

    Attributes:
        name: Short platform label.
        version_path: Build version file, relative to the game directory.
        mods_path: Mods directory, relative to the game directory.
    """

    name: str
    version_path: str
    mods_path: str = "FactoryGame/Mods"

    @property
    def lockfile_path(self) -> str:
        return f"{self.mods_path}/{LOCKFILE_NAME}"


PLATFORMS: tuple[Platform, ...] = (
    Platform("windows", "Engine/Binaries/Win64/FactoryGame-Win64-Shipping.version"),
    Platform("windows-server", "Engine/Binaries/Win64/FactoryServer-Win64-Shipping.version"),
    Platform("linux-server", "Engine/Binaries/Linux/FactoryServer-Linux-Shipping.version"),
)


# ---------------------------------------------------------------------------
# Installation
# ---------------------------------------------------------------------------


@dataclass
class Installation:
    """A game directory and the profile it installs."""

    path: str
    profile: str

    @property
    def root(self) -> Path:
        return Path(self.path)

    def validate_executable(self) -> None:
        """Raise ``InstallationError`` unless a game executable is present."""
        if not any((self.root / exe).is_file() for exe in GAME_EXECUTABLES):
            raise InstallationError(
                f"Did not find game executable in {self.path}", path=self.path
            )

    def platform(self) -> Platform:
        """Detect the platform from which build version file exists."""
        self.validate_executable()
        for platform in PLATFORMS:
            if (self.root / platform.version_path).is_file():
                return platform
        raise InstallationError(f"No platform detected in {self.path}", path=self.path)

    def game_version(self) -> int:
        """Read the game build number (``Changelist``) of this installation."""
        version_file = self.root / self.platform().version_path
        try:
            data = json.loads(version_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise InstallationError(
                f"Failed to read game version file {version_file}: {exc}",
                path=self.path,
            ) from exc
        changelist = data.get("Changelist") if isinstance(data, dict) else None
        if not isinstance(changelist, int):
            raise InstallationError(
                f"Game version file {version_file} has no Changelist", path=self.path
            )
        return changelist

    def lockfile_path(self) -> Path:
        return self.root / self.platform().lockfile_path

    def mods_dir(self) -> Path:
        return self.root / self.platform().mods_path


# ---------------------------------------------------------------------------
# InstallationStore
# ---------------------------------------------------------------------------


class InstallationStore:
    """All known installations plus the currently selected one."""

    def __init__(
        self,
        path: Path,
        installations: list[Installation] | None = None,
        selected: str = "",
    ) -> None:
        self.path = Path(path)
        self.installations: list[Installation] = installations or []
        self.selected = selected

    @classmethod
    def load(cls, path: Path) -> InstallationStore:
        """Load installations from *path*; a missing file yields an empty store.

        Raises:
            InstallationError: If the file is unreadable, malformed, or
                written by a newer format version.
        """
        path = Path(path)
        try:
            data = read_json(path)
        except (OSError, json.JSONDecodeError) as exc:
            raise InstallationError(f"Failed to read installations from {path}: {exc}") from exc
        if data is None:
            return cls(path)
        if not isinstance(data, dict) or not isinstance(data.get("installations", []), list):
            raise InstallationError(f"Malformed installations file {path}")
        if data.get("version", 0) > INSTALLATIONS_FORMAT_VERSION:
            raise InstallationError(f"Unknown installations version: {data.get('version')}")

        installations = [
            Installation(path=str(item["path"]), profile=str(item["profile"]))
            for item in data.get("installations", [])
        ]
        return cls(path, installations, data.get("selected_installation") or "")

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": INSTALLATIONS_FORMAT_VERSION,
            "selected_installation": self.selected,
            "installations": [
                {"path": i.path, "profile": i.profile} for i in self.installations
            ],
        }

    def save(self, dry_run: bool = False) -> None:
        if dry_run:
            logger.info("dry-run: skipping installation saving")
            return
        logger.info("Saving installations to %s", self.path)
        try:
            write_json(self.path, self.to_dict())
        except OSError as exc:
            raise InstallationError(
                f"Failed to write installations to {self.path}: {exc}"
            ) from exc

    # -- operations ---------------------------------------------------------

    def get(self, path: str) -> Installation:
        """Look up an installation by path (absolute or as given)."""
        wanted = {path, os.path.abspath(path)}
        for installation in self.installations:
            if installation.path in wanted:
                return installation
        raise InstallationError(f"Installation {path!r} not found", path=path)

    def add(self, path: str, profile: str, profiles: ProfileStore) -> Installation:
        """Register a game directory under *profile*.

        Raises:
            ProfileError: If *profile* does not exist.
            InstallationError: If the directory has no game executable or is
                already registered (same directory on disk).
        """
        profiles.get(profile)
        installation = Installation(path=os.path.abspath(path), profile=profile)
        installation.validate_executable()

        for existing in self.installations:
            try:
                same = os.path.samefile(existing.path, installation.path)
            except OSError:
                continue
            if same:
                raise InstallationError(
                    f"Installation already present: {existing.path}", path=existing.path
                )

        self.installations.append(installation)
        if not self.selected:
            self.selected = installation.path
        return installation

    def delete(self, path: str) -> None:
        installation = self.get(path)
        self.installations.remove(installation)
        if self.selected == installation.path:
            self.selected = self.installations[0].path if self.installations else ""

    def set_profile(self, path: str, profile: str, profiles: ProfileStore) -> None:
        profiles.get(profile)
        self.get(path).profile = profile

    def rename_profile(self, old: str, new: str) -> None:
        """Point every installation using profile *old* at *new*."""
        for installation in self.installations:
            if installation.profile == old:
                installation.profile = new
