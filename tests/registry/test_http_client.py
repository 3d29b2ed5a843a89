"""Tests for the shared async HTTP helpers."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from modpin.exceptions import RegistryUnavailable
from modpin.registry.http_client import USER_AGENT, fetch_json, make_client

URL = "https://registry.example/v1/mods/SML/versions"


def _fetch(handler) -> object:
    async def run() -> object:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fetch_json(client, URL)

    return asyncio.run(run())


class TestFetchJson:
    def test_success(self) -> None:
        assert _fetch(lambda request: httpx.Response(200, json={"ok": True})) == {"ok": True}

    def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(RegistryUnavailable, match="Timeout") as excinfo:
            _fetch(handler)
        assert excinfo.value.url == URL
        assert excinfo.value.status_code is None

    def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(RegistryUnavailable, match="Request error"):
            _fetch(handler)

    def test_http_error_carries_status(self) -> None:
        with pytest.raises(RegistryUnavailable) as excinfo:
            _fetch(lambda request: httpx.Response(500))
        assert excinfo.value.status_code == 500

    def test_invalid_json(self) -> None:
        with pytest.raises(RegistryUnavailable, match="Invalid JSON"):
            _fetch(lambda request: httpx.Response(200, text="<html>"))


class TestMakeClient:
    def test_defaults(self) -> None:
        async def run() -> httpx.AsyncClient:
            client = make_client(timeout=5.0)
            await client.aclose()
            return client

        client = asyncio.run(run())
        assert client.headers["User-Agent"] == USER_AGENT
        assert client.timeout.read == 5.0
        assert client.follow_redirects is True
