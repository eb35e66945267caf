"""README generator for scaffolded projects.

Produces the project's ``README.md``: a feature overview, the chosen
configuration, a numbered getting-started walkthrough, and the available
scripts.  The walkthrough always starts with install/configure and ends with
starting the server; database and Redis set-up steps are inserted only when
those options are chosen, and the numbers are recomputed every time so they
stay contiguous.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from ..options import DatabaseType, ProjectOptions
from .composers import Artifact
from .selectors import resolve_database, resolve_flag, select_display

FRAMEWORK_URL = "https://github.com/CePseudoBE/digital-twin-core"


class GuideStep(BaseModel):
    """One numbered entry of the getting-started list."""

    number: int
    title: str
    commands: list[str] = Field(default_factory=list)


def guide_steps(options: ProjectOptions) -> list[GuideStep]:
    """Return the getting-started steps for *options*, numbered from 1."""
    steps: list[tuple[str, list[str]]] = [
        ("Install dependencies", ["npm install"]),
        (
            "Configure environment",
            ["# Edit .env and replace the placeholder values"],
        ),
    ]

    if resolve_database(options) is DatabaseType.POSTGRESQL:
        commands = [
            "# Make sure PostgreSQL is running and create the database",
            f"createdb {options.project_name}",
        ]
        if resolve_flag(options, "include_docker"):
            commands.append("# or: docker compose up -d postgres")
        steps.append(("Set up PostgreSQL", commands))

    if resolve_flag(options, "use_redis"):
        commands = ["# Make sure Redis is running", "redis-server"]
        if resolve_flag(options, "include_docker"):
            commands.append("# or: docker compose up -d redis")
        steps.append(("Set up Redis", commands))

    steps.append(("Start development server", ["npm run dev"]))

    return [
        GuideStep(number=number, title=title, commands=commands)
        for number, (title, commands) in enumerate(steps, start=1)
    ]


class GuideComposer:
    """Composes ``README.md`` for a scaffolded project."""

    def compose(self, options: ProjectOptions) -> Artifact:
        return Artifact(path="README.md", content=self._render(options))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render(self, options: ProjectOptions) -> str:
        display = select_display(options)
        examples = resolve_flag(options, "include_examples")
        docker = resolve_flag(options, "include_docker")
        sections: list[str] = []

        # Title & overview
        sections.append(f"# {options.project_name}")
        sections.append("")
        sections.append(
            f"Digital Twin application built with [digitaltwin-core]({FRAMEWORK_URL})."
        )
        sections.append("")

        # Features
        sections.append("## Features")
        sections.append("")
        sections.append(
            "- **Environment Validation** - Automatic validation of required configuration"
        )
        sections.append(f"- **Database Support** - {display.database_feature}")
        sections.append(f"- **Storage** - {display.storage_feature}")
        sections.append(f"- **Queue Management** - {display.queue_feature}")
        if examples:
            sections.append(
                "- **Example Components** - JSONPlaceholder data collector included"
            )
        if docker:
            sections.append(
                "- **Docker** - Dockerfile and docker-compose.yml included"
            )
        sections.append("")

        # Configuration summary
        sections.append("## Configuration")
        sections.append("")
        sections.append(f"- **Database**: {display.database}")
        sections.append(f"- **Storage**: {display.storage}")
        sections.append(f"- **Queue**: {display.queue_config}")
        sections.append(f"- **Docker**: {display.docker}")
        sections.append("")

        # Getting started
        sections.append("## Getting Started")
        sections.append("")
        for step in guide_steps(options):
            sections.append(f"{step.number}. **{step.title}:**")
            sections.append("   ```bash")
            for command in step.commands:
                sections.append(f"   {command}")
            sections.append("   ```")
            sections.append("")

        # Scripts
        sections.append("## Available Scripts")
        sections.append("")
        sections.append("- `npm run dev` - Start development server with hot reload")
        sections.append("- `npm run build` - Build TypeScript to JavaScript")
        sections.append("- `npm start` - Start production server")
        sections.append("- `node dt test` - Run dry-run validation (no database changes)")
        sections.append("- `node dt dev` - Start server via CLI")
        sections.append("")

        if docker:
            sections.append("## Docker")
            sections.append("")
            sections.append("The image runs the compiled output, so build first:")
            sections.append("")
            sections.append("```bash")
            sections.append("npm run build")
            sections.append("docker compose up --build")
            sections.append("```")
            sections.append("")

        # Links
        sections.append("## Learn More")
        sections.append("")
        sections.append(f"- [digitaltwin-core Documentation]({FRAMEWORK_URL})")
        sections.append("- [Digital Twin Concepts](https://en.wikipedia.org/wiki/Digital_twin)")
        sections.append(
            "- [Environment Configuration Best Practices](https://12factor.net/config)"
        )
        sections.append("")

        return "\n".join(sections)
