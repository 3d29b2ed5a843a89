"""Content-verified download-or-cache of mod archives.

Archives are cached as ``<cache_dir>/<mod>_<version>.zip``. A cached file
is reused only if its SHA-256 matches the lockfile hash; otherwise it is
downloaded again from the lockfile link, verified, and moved into place
atomically so an interrupted download never leaves a corrupt cache entry.
"""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from pathlib import Path

import httpx

from modpin.core.lockfile.models import LockedMod
from modpin.exceptions import ArtifactError
from modpin.registry.http_client import make_client

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


def file_sha256(path: Path) -> str:
    """Hex SHA-256 digest of a file's content."""
    digest = hashlib.sha256()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


class ArtifactCache:
    """Download-or-cache store for mod archives.

    Args:
        cache_dir: Directory holding cached archives.
        client: Optional ``httpx.AsyncClient``; created and owned if omitted.
    """

    def __init__(self, cache_dir: Path, client: httpx.AsyncClient | None = None) -> None:
        self.cache_dir = Path(cache_dir)
        self._owns_client = client is None
        self._client = client or make_client()

    async def __aenter__(self) -> ArtifactCache:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def path_for(self, mod: LockedMod) -> Path:
        return self.cache_dir / f"{mod.mod_reference}_{mod.version}.zip"

    async def fetch(self, mod: LockedMod) -> Path:
        """Return a local, verified archive for *mod*.

        Raises:
            ArtifactError: If the mod has no link, the download fails, or the
                downloaded content does not match the lockfile hash.
        """
        if not mod.link:
            raise ArtifactError(
                f"{mod.mod_reference}@{mod.version} has no download link",
                mod_reference=mod.mod_reference,
            )

        target = self.path_for(mod)
        if target.is_file() and (not mod.hash or file_sha256(target) == mod.hash):
            logger.debug("Using cached archive %s", target)
            return target

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=self.cache_dir)
        tmp_path = Path(tmp_name)
        try:
            digest = hashlib.sha256()
            logger.info("Downloading %s from %s", mod.mod_reference, mod.link)
            with os.fdopen(fd, "wb") as fh:
                async with self._client.stream("GET", mod.link) as resp:
                    resp.raise_for_status()
                    async for chunk in resp.aiter_bytes(_CHUNK_SIZE):
                        digest.update(chunk)
                        fh.write(chunk)

            if mod.hash and digest.hexdigest() != mod.hash:
                raise ArtifactError(
                    f"Hash mismatch for {mod.mod_reference}@{mod.version}: "
                    f"expected {mod.hash}, got {digest.hexdigest()}",
                    mod_reference=mod.mod_reference,
                )
            os.replace(tmp_path, target)
        except httpx.HTTPError as exc:
            raise ArtifactError(
                f"Failed to download {mod.mod_reference} from {mod.link}: {exc}",
                mod_reference=mod.mod_reference,
            ) from exc
        except OSError as exc:
            raise ArtifactError(
                f"Failed to cache {mod.mod_reference}: {exc}",
                mod_reference=mod.mod_reference,
            ) from exc
        finally:
            tmp_path.unlink(missing_ok=True)
        return target
