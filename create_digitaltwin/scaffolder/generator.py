"""Main scaffolding orchestrator.

Takes a ``ProjectOptions`` record and writes a complete Digital Twin project
(TypeScript + digitaltwin-core) to disk.  Generation happens in two stages:

1. ``compose`` runs every composer whose gate holds and returns the full
   list of artifacts.  This is pure and performs no I/O.
2. ``generate`` resolves the framework versions through the injected lookup,
   composes, creates the project directory and writes each artifact through
   the injected writer.  The first failure aborts the run; files already
   written are left in place.
"""

from __future__ import annotations

import asyncio
import stat
from pathlib import Path, PurePosixPath
from typing import Protocol

from pydantic import BaseModel, Field

from ..options import ProjectOptions, ScaffoldError
from ..utils import print_info
from ..versions import PackageVersions, StaticVersions, VersionLookup, resolve_versions
from .composers import Artifact, SourceComposer
from .docker_gen import DockerComposer
from .guide_gen import GuideComposer
from .selectors import resolve_flag
from .templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class EmissionError(ScaffoldError):
    """Raised when the project directory or one of its files cannot be written."""

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = str(path)
        super().__init__(f"Cannot write {self.path}: {message}")


# ---------------------------------------------------------------------------
# Writer capability
# ---------------------------------------------------------------------------


class ProjectWriter(Protocol):
    """Persists generated files below a project root."""

    async def ensure_dir(self, path: Path) -> None: ...

    async def write(
        self, relative_path: str, content: bytes, executable: bool = False
    ) -> None: ...


class DiskWriter:
    """Writes artifacts to the local file system under *root*."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    async def ensure_dir(self, path: Path) -> None:
        await asyncio.to_thread(_make_dir, Path(path))

    async def write(
        self, relative_path: str, content: bytes, executable: bool = False
    ) -> None:
        rel = PurePosixPath(relative_path)
        if rel.is_absolute() or ".." in rel.parts:
            raise ValueError(f"Artifact path escapes the project root: {relative_path}")
        target = self.root.joinpath(*rel.parts)
        await asyncio.to_thread(_write_file, target, content, executable)


# ---------------------------------------------------------------------------
# Result model
# ---------------------------------------------------------------------------


class GenerationResult(BaseModel):
    """Summary of one generator run."""

    project_root: Path
    files: list[str] = Field(default_factory=list)
    versions: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Main generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Main scaffolding orchestrator.

    Given a ``ProjectOptions``, generates a project directory containing:
    - ``package.json`` and ``tsconfig.json``
    - ``src/index.ts`` wiring storage, database, queue and engine
    - ``dt.js`` forwarding to digitaltwin-cli
    - ``.env`` and ``.gitignore``
    - ``README.md`` with a setup walkthrough
    - example collectors (when ``include_examples``)
    - ``Dockerfile`` and ``docker-compose.yml`` (when ``include_docker``)
    """

    def __init__(
        self,
        options: ProjectOptions,
        *,
        lookup: VersionLookup | None = None,
        writer: ProjectWriter | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.options = options
        self.lookup = lookup or StaticVersions()
        self.writer = writer or DiskWriter(options.project_path)
        self.renderer = renderer or TemplateRenderer()
        self.sources = SourceComposer(self.renderer)
        self.docker = DockerComposer(self.renderer)
        self.guide = GuideComposer()

    # -- Public API --------------------------------------------------------

    def compose(self, versions: PackageVersions | None = None) -> list[Artifact]:
        """Return every artifact for the configured options, in write order."""
        options = self.options
        artifacts = [
            self.sources.compose_manifest(options, versions),
            self.sources.compose_tsconfig(),
            self.sources.compose_entry_point(options),
            self.sources.compose_env_template(options),
            self.sources.compose_gitignore(),
            self.guide.compose(options),
            self.sources.compose_cli_wrapper(),
        ]

        if resolve_flag(options, "include_examples"):
            artifacts.extend(self.sources.compose_example_components(options))

        if resolve_flag(options, "include_docker"):
            artifacts.extend(self.docker.compose_all(options))

        return artifacts

    async def generate(self) -> GenerationResult:
        """Generate the complete project.

        Returns:
            A ``GenerationResult`` listing the written files.

        Raises:
            ConfigurationError: If the options are invalid (nothing is written).
            EmissionError: If the directory or a file cannot be written.
        """
        project_root = Path(self.options.project_path)
        print_info(f"Creating project at: {project_root}")

        versions = await resolve_versions(self.lookup)
        # Compose everything first so a configuration error writes nothing.
        artifacts = self.compose(versions)

        try:
            await self.writer.ensure_dir(project_root)
        except OSError as exc:
            raise EmissionError(project_root, exc.strerror or str(exc)) from exc

        written: list[str] = []
        for artifact in artifacts:
            try:
                await self.writer.write(
                    artifact.path,
                    artifact.content.encode("utf-8"),
                    executable=artifact.executable,
                )
            except OSError as exc:
                raise EmissionError(
                    project_root / artifact.path, exc.strerror or str(exc)
                ) from exc
            written.append(artifact.path)

        return GenerationResult(
            project_root=project_root,
            files=written,
            versions=versions.versions,
        )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _make_dir(path: Path) -> None:
    """Create *path*; an existing directory is fine, an existing file is not."""
    if path.exists() and not path.is_dir():
        raise NotADirectoryError(20, "Not a directory", str(path))
    path.mkdir(parents=True, exist_ok=True)


def _write_file(path: Path, content: bytes, executable: bool) -> None:
    """Synchronous helper: create parent dirs, write content, set the exec bit."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    if executable:
        current = path.stat().st_mode
        path.chmod(current | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
