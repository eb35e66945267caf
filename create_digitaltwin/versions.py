"""Async lookup of the latest published package versions.

Wraps the npm registry's ``/<package>/latest`` endpoint with an explicit
timeout and a mandatory fallback.  A lookup never raises: any connection,
timeout, HTTP or payload problem degrades to the pinned fallback version and
prints a warning.

Typical usage::

    client = RegistryClient(GeneratorConfig())
    versions = await client.resolve(["digitaltwin-core", "digitaltwin-cli"])
    versions["digitaltwin-core"]   # "0.4.1" (or the fallback "0.3.3")
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from typing import Protocol

import httpx
from pydantic import BaseModel, Field

from .config import CLI_PACKAGE, CORE_PACKAGE, DEFAULT_FALLBACK_VERSIONS, GeneratorConfig
from .utils import print_warning

FRAMEWORK_PACKAGES: tuple[str, ...] = (CORE_PACKAGE, CLI_PACKAGE)


class PackageVersions(BaseModel):
    """Resolved ``{package: version}`` mapping handed to the dependency selector."""

    versions: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_FALLBACK_VERSIONS)
    )

    def __getitem__(self, package: str) -> str:
        return self.versions[package]


class VersionLookup(Protocol):
    """Capability returning the latest version string of a package."""

    async def latest_version(self, package: str) -> str: ...


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


class RegistryClient:
    """Async client for the npm registry.

    Uses ``httpx.AsyncClient`` for non-blocking HTTP.  Every failure mode is
    mapped onto the configured fallback version.
    """

    def __init__(self, config: GeneratorConfig | None = None) -> None:
        self.config = config or GeneratorConfig()
        self.base_url = self.config.registry_url.rstrip("/")
        self.timeout = self.config.lookup_timeout

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` configured with our base URL and timeout."""
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 3.0)),
        )

    @staticmethod
    def _extract_version(data: object) -> str | None:
        """Pull ``version`` out of a ``/latest`` manifest, if it looks sane."""
        if not isinstance(data, dict):
            return None
        version = data.get("version")
        if isinstance(version, str) and version.strip():
            return version.strip()
        return None

    def _fallback(self, package: str, reason: str) -> str:
        fallback = self.config.fallback_for(package)
        print_warning(
            f"Warning: Could not fetch {package} version from npm ({reason}), "
            f"falling back to {fallback}"
        )
        return fallback

    async def latest_version(self, package: str) -> str:
        """Return the latest published version of *package*, or its fallback."""
        if self.config.offline:
            return self.config.fallback_for(package)

        try:
            async with self._client() as client:
                response = await client.get(f"/{package}/latest")
                response.raise_for_status()
                data = response.json()
        except httpx.ConnectError:
            return self._fallback(package, f"cannot connect to {self.base_url}")
        except httpx.TimeoutException:
            return self._fallback(package, f"timed out after {self.timeout}s")
        except httpx.HTTPStatusError as exc:
            return self._fallback(package, f"HTTP {exc.response.status_code}")
        except Exception as exc:  # noqa: BLE001
            return self._fallback(package, f"unexpected error: {exc}")

        version = self._extract_version(data)
        if version is None:
            return self._fallback(package, "no version in registry response")
        return version

    async def resolve(self, packages: Iterable[str] = FRAMEWORK_PACKAGES) -> PackageVersions:
        """Look up several packages concurrently."""
        return await resolve_versions(self, packages)


class StaticVersions:
    """A lookup that always answers with fixed versions (offline / tests)."""

    def __init__(self, versions: Mapping[str, str] | None = None) -> None:
        self.versions = dict(DEFAULT_FALLBACK_VERSIONS)
        if versions:
            self.versions.update(versions)

    async def latest_version(self, package: str) -> str:
        return self.versions.get(package, "0.0.0")


async def resolve_versions(
    lookup: VersionLookup, packages: Iterable[str] = FRAMEWORK_PACKAGES
) -> PackageVersions:
    """Resolve *packages* through any ``VersionLookup`` implementation."""
    names = list(packages)
    results = await asyncio.gather(*(lookup.latest_version(p) for p in names))
    return PackageVersions(versions=dict(zip(names, results)))
