"""Runtime settings shared by the CLI and the install orchestration.

Settings come from command-line options with environment-variable
fallbacks (wired up in ``modpin.cli.main``); this module only defines the
value object and its defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import click

APP_NAME = "modpin"

PROFILES_FILE = "profiles.json"
INSTALLATIONS_FILE = "installations.json"


def default_local_dir() -> Path:
    """Per-user directory holding profiles and installations."""
    return Path(click.get_app_dir(APP_NAME))


@dataclass(frozen=True)
class Settings:
    """Resolved runtime configuration.

    Attributes:
        local_dir: Directory holding ``profiles.json`` and
            ``installations.json``.
        cache_dir: Directory for downloaded mod archives.
        api_base: Remote registry API root, if one is configured.
        registry_file: Registry snapshot file, used instead of the remote
            registry when set.
        dry_run: Resolve and report, but write and extract nothing.
        concurrency: Maximum concurrent registry queries.
        timeout: Whole-resolution timeout in seconds (None = unlimited).
        include_prerelease: Allow pre-release mod versions.
    """

    local_dir: Path
    cache_dir: Path
    api_base: str | None = None
    registry_file: Path | None = None
    dry_run: bool = False
    concurrency: int = 8
    timeout: float | None = None
    include_prerelease: bool = False

    @classmethod
    def defaults(cls) -> Settings:
        local_dir = default_local_dir()
        return cls(local_dir=local_dir, cache_dir=local_dir / "cache")

    @property
    def profiles_path(self) -> Path:
        return self.local_dir / PROFILES_FILE

    @property
    def installations_path(self) -> Path:
        return self.local_dir / INSTALLATIONS_FILE

    def resolver_options(self) -> dict[str, object]:
        """Keyword arguments for ``DependencyResolver``."""
        return {
            "max_concurrency": self.concurrency,
            "include_prerelease": self.include_prerelease,
            "timeout": self.timeout,
        }
