"""Unit tests for the version lookups (create_digitaltwin.versions).

Tests cover:
- PackageVersions defaults and access
- RegistryClient.latest_version (success, connect error, timeout, HTTP error,
  unexpected error, bad payloads, offline mode)
- RegistryClient.resolve and resolve_versions
- StaticVersions
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from create_digitaltwin.config import GeneratorConfig
from create_digitaltwin.versions import (
    FRAMEWORK_PACKAGES,
    PackageVersions,
    RegistryClient,
    StaticVersions,
    resolve_versions,
)


def _output(capsys) -> str:
    """Captured stdout with rich line wrapping collapsed."""
    return " ".join(capsys.readouterr().out.split())


# ---------------------------------------------------------------------------
# PackageVersions
# ---------------------------------------------------------------------------


class TestPackageVersions:
    @pytest.mark.unit
    def test_defaults_are_fallbacks(self):
        versions = PackageVersions()
        assert versions["digitaltwin-core"] == "0.3.3"
        assert versions["digitaltwin-cli"] == "0.1.0"

    @pytest.mark.unit
    def test_unknown_package(self):
        with pytest.raises(KeyError):
            PackageVersions()["nope"]


# ---------------------------------------------------------------------------
# RegistryClient.latest_version
# ---------------------------------------------------------------------------


class TestLatestVersion:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success(self, make_registry_client):
        mock_client = make_registry_client({"name": "digitaltwin-core", "version": "0.5.2"})

        with patch("httpx.AsyncClient", return_value=mock_client):
            client = RegistryClient()
            version = await client.latest_version("digitaltwin-core")

        assert version == "0.5.2"
        mock_client.get.assert_awaited_once_with("/digitaltwin-core/latest")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_connect_error(self, make_registry_client, capsys):
        mock_client = make_registry_client(
            side_effect=httpx.ConnectError("Connection refused")
        )

        with patch("httpx.AsyncClient", return_value=mock_client):
            client = RegistryClient()
            version = await client.latest_version("digitaltwin-core")

        assert version == "0.3.3"
        out = _output(capsys)
        assert "Could not fetch digitaltwin-core version" in out
        assert "cannot connect" in out

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_timeout(self, make_registry_client, capsys):
        mock_client = make_registry_client(
            side_effect=httpx.TimeoutException("timed out")
        )

        with patch("httpx.AsyncClient", return_value=mock_client):
            client = RegistryClient(GeneratorConfig(lookup_timeout=2.0))
            version = await client.latest_version("digitaltwin-cli")

        assert version == "0.1.0"
        assert "timed out after 2.0s" in _output(capsys)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_http_error(self, make_registry_client, capsys):
        mock_resp = MagicMock()
        mock_resp.status_code = 404
        mock_client = make_registry_client(
            side_effect=httpx.HTTPStatusError(
                "Not Found", request=MagicMock(), response=mock_resp
            )
        )

        with patch("httpx.AsyncClient", return_value=mock_client):
            client = RegistryClient()
            version = await client.latest_version("digitaltwin-core")

        assert version == "0.3.3"
        assert "HTTP 404" in _output(capsys)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unexpected_error(self, make_registry_client, capsys):
        mock_client = make_registry_client(side_effect=RuntimeError("something weird"))

        with patch("httpx.AsyncClient", return_value=mock_client):
            client = RegistryClient()
            version = await client.latest_version("digitaltwin-core")

        assert version == "0.3.3"
        assert "unexpected error" in _output(capsys)

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [None, [], {"name": "digitaltwin-core"}, {"version": ""}, {"version": 3}],
    )
    async def test_bad_payload(self, payload, make_registry_client, capsys):
        mock_client = make_registry_client(payload)

        with patch("httpx.AsyncClient", return_value=mock_client):
            client = RegistryClient()
            version = await client.latest_version("digitaltwin-core")

        assert version == "0.3.3"
        assert "no version in registry response" in _output(capsys)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_offline_makes_no_request(self):
        with patch("httpx.AsyncClient") as mock_cls:
            client = RegistryClient(GeneratorConfig(offline=True))
            version = await client.latest_version("digitaltwin-cli")

        assert version == "0.1.0"
        mock_cls.assert_not_called()

    @pytest.mark.unit
    def test_base_url_trailing_slash(self):
        client = RegistryClient(GeneratorConfig(registry_url="https://npm.example.com/"))
        assert client.base_url == "https://npm.example.com"


# ---------------------------------------------------------------------------
# resolve
# ---------------------------------------------------------------------------


class TestResolve:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_resolve_framework_packages(self, mock_registry):
        with mock_registry:
            versions = await RegistryClient().resolve()

        assert versions.versions == {
            "digitaltwin-core": "9.9.9",
            "digitaltwin-cli": "9.9.9",
        }

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_resolve_versions_with_static_lookup(self, static_versions):
        versions = await resolve_versions(static_versions)
        assert list(versions.versions) == list(FRAMEWORK_PACKAGES)
        assert versions["digitaltwin-core"] == "0.4.0"
        assert versions["digitaltwin-cli"] == "0.2.0"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_resolve_versions_runs_every_lookup(self):
        lookup = MagicMock()
        lookup.latest_version = AsyncMock(side_effect=["1.0.0", "2.0.0", "3.0.0"])

        versions = await resolve_versions(lookup, ["a", "b", "c"])

        assert versions.versions == {"a": "1.0.0", "b": "2.0.0", "c": "3.0.0"}
        assert lookup.latest_version.await_count == 3


class TestStaticVersions:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_defaults(self):
        lookup = StaticVersions()
        assert await lookup.latest_version("digitaltwin-core") == "0.3.3"
        assert await lookup.latest_version("unknown") == "0.0.0"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_overrides(self):
        lookup = StaticVersions({"digitaltwin-cli": "1.0.0"})
        assert await lookup.latest_version("digitaltwin-cli") == "1.0.0"
        assert await lookup.latest_version("digitaltwin-core") == "0.3.3"
