"""Artifact pipeline — materializing a lockfile into a mods directory.

For every locked mod with a download link, fetch the archive (reusing a
hash-verified cached copy when available) and extract it into
``<mods_dir>/<mod>``. Entries with an empty link are locally supplied and
assumed to be installed already; they are skipped.

Public API::

    from modpin.artifacts import ArtifactCache, extract, materialize
"""

from __future__ import annotations

import logging
from pathlib import Path

from modpin.artifacts.cache import ArtifactCache, file_sha256
from modpin.artifacts.extract import extract
from modpin.core.lockfile import LockFile

logger = logging.getLogger(__name__)


async def materialize(lockfile: LockFile, mods_dir: Path, cache: ArtifactCache) -> list[str]:
    """Install every fetchable entry of *lockfile* into *mods_dir*.

    Args:
        lockfile: The resolved lockfile to materialize.
        mods_dir: The installation's mods directory.
        cache: Archive cache used to fetch distributables.

    Returns:
        Mod references that were extracted, in lockfile order.

    Raises:
        ArtifactError: On the first download, verification, or extraction
            failure.
    """
    mods_dir = Path(mods_dir)
    mods_dir.mkdir(parents=True, exist_ok=True)
    installed: list[str] = []
    for ref, mod in lockfile.items():
        if mod.is_local:
            logger.info("Skipping %s@%s: no link, assumed installed", ref, mod.version)
            continue
        archive = await cache.fetch(mod)
        extract(archive, mods_dir / ref)
        installed.append(ref)
    return installed


__all__ = [
    "ArtifactCache",
    "extract",
    "file_sha256",
    "materialize",
]
