"""Shared pytest fixtures for the create-digitaltwin test suite.

Provides reusable fixtures for:
- Temporary project directories
- Representative option records (minimal, full, every combination)
- Offline version lookups
- An in-memory project writer
- Mocked npm registry responses
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from create_digitaltwin.options import ProjectOptions
from create_digitaltwin.versions import StaticVersions


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Destination for a generated project (not created yet)."""
    yield tmp_path / "demo"


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

@pytest.fixture
def demo_options(tmp_project_dir: Path) -> ProjectOptions:
    """SQLite, local storage, no optional features."""
    return ProjectOptions(project_name="demo", project_path=tmp_project_dir)


@pytest.fixture
def full_options(tmp_project_dir: Path) -> ProjectOptions:
    """Every optional feature switched on."""
    return ProjectOptions(
        project_name="demo",
        project_path=tmp_project_dir,
        database="postgresql",
        storage="ovh",
        use_redis=True,
        include_docker=True,
        include_examples=True,
    )


@pytest.fixture
def all_options(tmp_project_dir: Path) -> list[ProjectOptions]:
    """All 32 option records for the ``demo`` project."""
    return list(ProjectOptions.combinations("demo", tmp_project_dir))


# ---------------------------------------------------------------------------
# Versions & Writers
# ---------------------------------------------------------------------------

@pytest.fixture
def static_versions() -> StaticVersions:
    """Offline lookup pinned to known framework versions."""
    return StaticVersions({"digitaltwin-core": "0.4.0", "digitaltwin-cli": "0.2.0"})


class MemoryWriter:
    """Project writer that keeps every file in a dict instead of on disk."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.files: dict[str, bytes] = {}
        self.executable: set[str] = set()
        self.dirs: list[Path] = []
        self.fail_on = fail_on

    async def ensure_dir(self, path: Path) -> None:
        self.dirs.append(Path(path))

    async def write(
        self, relative_path: str, content: bytes, executable: bool = False
    ) -> None:
        if relative_path == self.fail_on:
            raise PermissionError(13, "Permission denied", relative_path)
        self.files[relative_path] = content
        if executable:
            self.executable.add(relative_path)

    def text(self, relative_path: str) -> str:
        return self.files[relative_path].decode("utf-8")


@pytest.fixture
def memory_writer() -> MemoryWriter:
    return MemoryWriter()


@pytest.fixture
def writer_factory():
    """Build a ``MemoryWriter``, e.g. ``writer_factory(fail_on=".env")``."""
    return MemoryWriter


# ---------------------------------------------------------------------------
# Mock npm registry
# ---------------------------------------------------------------------------

def _registry_client(
    payload: Any = None, side_effect: BaseException | None = None
) -> AsyncMock:
    """Build a mocked ``httpx.AsyncClient`` answering ``GET /<pkg>/latest``."""
    mock_response = MagicMock()
    mock_response.status_code = 200
    mock_response.json.return_value = payload
    mock_response.raise_for_status = MagicMock()

    mock_client = AsyncMock()
    if side_effect is not None:
        mock_client.get = AsyncMock(side_effect=side_effect)
    else:
        mock_client.get = AsyncMock(return_value=mock_response)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


@pytest.fixture
def make_registry_client():
    """Factory fixture: ``make_registry_client(payload, side_effect=...)``."""
    return _registry_client


@pytest.fixture
def mock_registry():
    """Patch httpx so every registry lookup answers version ``9.9.9``.

    Usage:
        def test_something(mock_registry):
            with mock_registry:
                ...
    """
    mock_client = _registry_client({"name": "pkg", "version": "9.9.9"})
    return patch("httpx.AsyncClient", return_value=mock_client)
