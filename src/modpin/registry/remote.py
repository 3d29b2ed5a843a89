"""Remote mod registry client over HTTP/JSON.

Endpoints::

    GET {base}/mods/{mod}/versions?game_version={build}
        -> {"versions": [{"version", "hash", "link", "compatible"}, ...]}
    GET {base}/mods/{mod}/versions/{version}/dependencies
        -> {"dependencies": [{"mod_reference", "condition", "optional"}, ...]}

An unknown mod (HTTP 404 on the version listing) is reported as having no
versions, which the compatibility filter turns into ``NoCompatibleVersion``.

Usage::

    async with RemoteRegistry("https://registry.example.com/api") as registry:
        versions = await registry.list_versions("SML", 264901)
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from modpin.core.dependency.constraints import VersionConstraint, pin_origin
from modpin.core.dependency.version import Version
from modpin.exceptions import RegistryUnavailable
from modpin.registry.base import ModDependency, ModVersion, RegistryClient
from modpin.registry.http_client import DEFAULT_TIMEOUT, fetch_json, make_client

logger = logging.getLogger(__name__)


class RemoteRegistry(RegistryClient):
    """Registry client backed by a JSON HTTP API.

    Args:
        base_url: API root, without trailing slash.
        client: Optional pre-configured ``httpx.AsyncClient``. When omitted
            one is created and closed by ``aclose``.
        timeout: Per-request timeout for the owned client.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or make_client(timeout)

    @property
    def registry_name(self) -> str:
        return self._base_url

    async def __aenter__(self) -> RemoteRegistry:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _url(self, *parts: str) -> str:
        return "/".join([self._base_url, *(quote(p, safe="") for p in parts)])

    async def list_versions(
        self, mod_reference: str, game_version: int
    ) -> list[ModVersion]:
        url = self._url("mods", mod_reference, "versions")
        try:
            data = await fetch_json(
                self._client, url, params={"game_version": str(game_version)}
            )
        except RegistryUnavailable as exc:
            if exc.status_code == 404:
                logger.info("Mod %s not found in registry", mod_reference)
                return []
            raise

        records = _expect_list(data, "versions", url)
        return [_parse_version_record(item, url) for item in records]

    async def list_dependencies(
        self, mod_reference: str, version: Version
    ) -> list[ModDependency]:
        url = self._url("mods", mod_reference, "versions", str(version), "dependencies")
        data = await fetch_json(self._client, url)
        origin = pin_origin(mod_reference, version)

        deps: list[ModDependency] = []
        for item in _expect_list(data, "dependencies", url):
            if not isinstance(item, dict) or "mod_reference" not in item:
                raise RegistryUnavailable(f"Malformed dependency record from {url}", url=url)
            ref = str(item["mod_reference"])
            deps.append(
                ModDependency(
                    mod_reference=ref,
                    constraint=VersionConstraint.parse(
                        str(item.get("condition", "")), mod_reference=ref, origin=origin
                    ),
                    optional=_expect_bool(item, "optional", False, url),
                )
            )
        return deps


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _expect_list(data: Any, key: str, url: str) -> list[Any]:
    """Extract ``data[key]`` as a list or fail as a malformed response."""
    items = data.get(key) if isinstance(data, dict) else None
    if not isinstance(items, list):
        raise RegistryUnavailable(f"Malformed response from {url}: missing {key!r}", url=url)
    return items


def _expect_bool(item: dict[str, Any], key: str, default: bool, url: str) -> bool:
    """Read an optional JSON boolean; any other type is a malformed response."""
    value = item.get(key, default)
    if not isinstance(value, bool):
        raise RegistryUnavailable(
            f"Malformed response from {url}: {key!r} must be a boolean, got {value!r}",
            url=url,
        )
    return value


def _parse_version_record(item: Any, url: str) -> ModVersion:
    if not isinstance(item, dict) or "version" not in item:
        raise RegistryUnavailable(f"Malformed version record from {url}", url=url)
    try:
        version = Version.parse(str(item["version"]))
    except ValueError as exc:
        raise RegistryUnavailable(f"Malformed version record from {url}: {exc}", url=url) from exc
    return ModVersion(
        version=version,
        hash=str(item.get("hash") or ""),
        link=str(item.get("link") or ""),
        compatible=_expect_bool(item, "compatible", True, url),
    )
