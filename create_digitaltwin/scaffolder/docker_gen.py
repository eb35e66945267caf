"""Container definitions: ``Dockerfile`` and ``docker-compose.yml``.

The Compose service list is computed as data by ``select_services`` (the
application, plus PostgreSQL and Redis when chosen) and rendered through a
generic ``docker-compose.yml.j2`` template, so the template itself never
branches on the project options.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from ..options import DatabaseType, ProjectOptions
from .composers import Artifact
from .selectors import (
    DEFAULT_PORT,
    POSTGRES_PORT,
    REDIS_PORT,
    resolve_database,
    resolve_flag,
)
from .templates import TemplateRenderer

POSTGRES_VOLUME = "postgres_data"


class ComposeService(BaseModel):
    """One service block of the generated ``docker-compose.yml``.

    ``named_volumes`` are the Docker-managed volumes this service mounts; they
    are declared once in the file's top-level ``volumes:`` block.
    """

    name: str
    image: str | None = None
    build: str | None = None
    ports: list[str] = Field(default_factory=list)
    environment: dict[str, str] = Field(default_factory=dict)
    depends_on: list[str] = Field(default_factory=list)
    volumes: list[str] = Field(default_factory=list)
    named_volumes: list[str] = Field(default_factory=list)


def select_services(options: ProjectOptions) -> list[ComposeService]:
    """Return the Compose services: ``app`` plus the backing services chosen.

    ``app`` depends on exactly the optional services present and is pointed
    at them by service name through environment overrides.
    """
    backing: list[ComposeService] = []
    app_env = {"NODE_ENV": "production"}

    if resolve_database(options) is DatabaseType.POSTGRESQL:
        backing.append(
            ComposeService(
                name="postgres",
                image="postgres:15-alpine",
                environment={
                    "POSTGRES_DB": options.project_name,
                    "POSTGRES_USER": "postgres",
                    "POSTGRES_PASSWORD": "password",
                },
                ports=[f"{POSTGRES_PORT}:{POSTGRES_PORT}"],
                volumes=[f"{POSTGRES_VOLUME}:/var/lib/postgresql/data"],
                named_volumes=[POSTGRES_VOLUME],
            )
        )
        app_env["DB_HOST"] = "postgres"

    if resolve_flag(options, "use_redis"):
        backing.append(
            ComposeService(
                name="redis",
                image="redis:7-alpine",
                ports=[f"{REDIS_PORT}:{REDIS_PORT}"],
            )
        )
        app_env["REDIS_HOST"] = "redis"

    app = ComposeService(
        name="app",
        build=".",
        ports=[f"{DEFAULT_PORT}:{DEFAULT_PORT}"],
        environment=app_env,
        depends_on=[service.name for service in backing],
        volumes=["./data:/app/data", "./uploads:/app/uploads"],
    )
    return [app, *backing]


class DockerComposer:
    """Composes the container artifacts for a project."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def compose_dockerfile(self) -> Artifact:
        """Render the process image definition (identical for every option set)."""
        content = self.renderer.render("Dockerfile.j2", {"app_port": DEFAULT_PORT})
        return Artifact(path="Dockerfile", content=content)

    def compose_services(self, options: ProjectOptions) -> Artifact:
        """Render ``docker-compose.yml`` from ``select_services``."""
        services = select_services(options)
        named_volumes = [name for service in services for name in service.named_volumes]
        content = self.renderer.render(
            "docker-compose.yml.j2",
            {"services": services, "named_volumes": named_volumes},
        )
        return Artifact(path="docker-compose.yml", content=content)

    def compose_all(self, options: ProjectOptions) -> list[Artifact]:
        """Return both container artifacts."""
        return [self.compose_dockerfile(), self.compose_services(options)]
