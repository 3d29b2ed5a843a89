"""Mod archive extraction.

``extract`` replaces a mod's install directory with the contents of its zip
archive. The archive is unpacked into a sibling staging directory first and
swapped in only once every member has been written, so a failed extraction
leaves the previous install untouched.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
import zipfile
from pathlib import Path

from modpin.exceptions import ArtifactError

logger = logging.getLogger(__name__)


def _safe_members(archive: zipfile.ZipFile, destination: Path) -> list[zipfile.ZipInfo]:
    """Return archive members, rejecting any that would escape *destination*."""
    root = destination.resolve()
    members = archive.infolist()
    for member in members:
        target = (root / member.filename).resolve()
        if target != root and root not in target.parents:
            raise ArtifactError(
                f"Archive member {member.filename!r} escapes {destination}",
                member=member.filename,
            )
    return members


def extract(archive_path: Path, destination: Path) -> None:
    """Replace *destination* with the contents of the zip at *archive_path*.

    Raises:
        ArtifactError: If the archive is not a valid zip or contains paths
            outside the destination.
    """
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    staging = Path(tempfile.mkdtemp(prefix=f".{destination.name}.", dir=destination.parent))
    try:
        with zipfile.ZipFile(archive_path) as archive:
            archive.extractall(staging, members=_safe_members(archive, staging))
        if destination.exists():
            shutil.rmtree(destination)
        staging.rename(destination)
        logger.debug("Extracted %s into %s", archive_path, destination)
    except zipfile.BadZipFile as exc:
        raise ArtifactError(f"{archive_path} is not a valid zip archive") from exc
    except OSError as exc:
        raise ArtifactError(f"Could not extract {archive_path}: {exc}") from exc
    finally:
        if staging.exists():
            shutil.rmtree(staging, ignore_errors=True)
