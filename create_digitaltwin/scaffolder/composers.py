"""File composers for the generated project's source and configuration files.

Each ``compose_*`` method assembles one complete artifact body from the
fragment selectors it depends on.  Structured files (``package.json``,
``tsconfig.json``) are serialised from dicts; source files are rendered
through the Jinja2 templates; line-oriented files (``.env``) are built line
by line.  Nothing here writes to disk.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..config import CLI_PACKAGE
from ..options import ProjectOptions
from ..versions import PackageVersions
from .selectors import (
    DEFAULT_PORT,
    EnvVar,
    select_dependencies,
    select_display,
    select_env_vars,
    select_registration,
    select_runtime_config,
)
from .templates import TemplateRenderer


class Artifact(BaseModel):
    """One generated file: a POSIX path relative to the project root and its body."""

    model_config = ConfigDict(frozen=True)

    path: str
    content: str
    executable: bool = False


class ExampleComponent(BaseModel):
    """An example collector emitted under ``src/components/``."""

    class_name: str
    module: str
    name: str
    base_url: str
    endpoint: str
    posts_limit: int = 10
    schedule: str = Field(default="*/15 * * * * *", description="Every 15 seconds")


EXAMPLE_COMPONENTS: dict[str, ExampleComponent] = {
    "JSONPlaceholderCollector": ExampleComponent(
        class_name="JSONPlaceholderCollector",
        module="jsonplaceholder_collector",
        name="jsonplaceholder-collector",
        base_url="https://jsonplaceholder.typicode.com",
        endpoint="api/jsonplaceholder",
    ),
}

ENV_GROUP_TITLES: dict[str, str] = {
    "application": "Application Configuration",
    "database": "Database Configuration",
    "storage": "Storage Configuration",
    "queue": "Queue Configuration",
}

TSCONFIG: dict[str, Any] = {
    "compilerOptions": {
        "target": "ES2022",
        "module": "ESNext",
        "moduleResolution": "node",
        "allowSyntheticDefaultImports": True,
        "esModuleInterop": True,
        "allowJs": True,
        "outDir": "./dist",
        "rootDir": "./src",
        "strict": True,
        "declaration": True,
        "skipLibCheck": True,
        "forceConsistentCasingInFileNames": True,
        "experimentalDecorators": True,
        "useDefineForClassFields": False,
    },
    "include": ["src/**/*"],
    "exclude": ["node_modules", "dist"],
}


class SourceComposer:
    """Composes every artifact except the container files and the guide."""

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    # -- Structured files --------------------------------------------------

    def compose_manifest(
        self, options: ProjectOptions, versions: PackageVersions | None = None
    ) -> Artifact:
        """Render ``package.json``."""
        deps = select_dependencies(options, versions)
        manifest = {
            "name": options.project_name,
            "version": "1.0.0",
            "description": "Digital Twin application built with digitaltwin-core",
            "main": "dist/index.js",
            "type": "module",
            "scripts": {
                "build": "tsc",
                "dev": "tsx watch src/index.ts",
                "start": "node dist/index.js",
            },
            "bin": {"dt": "./dt.js"},
            "dependencies": deps.dependencies,
            "devDependencies": deps.dev_dependencies,
        }
        return Artifact(path="package.json", content=_dump_json(manifest))

    def compose_tsconfig(self) -> Artifact:
        """Render ``tsconfig.json`` (identical for every option set)."""
        return Artifact(path="tsconfig.json", content=_dump_json(TSCONFIG))

    # -- Source files ------------------------------------------------------

    def compose_entry_point(self, options: ProjectOptions) -> Artifact:
        """Render ``src/index.ts``: env validation, adapters, engine, shutdown."""
        registration = select_registration(options)
        context = {
            "project_name": options.project_name,
            "env_schema": env_schema_lines(select_env_vars(options)),
            "runtime": select_runtime_config(options),
            "registration": registration,
            "collector_instances": ", ".join(
                f"new {name}()" for name in registration.collectors
            ),
            "display": select_display(options),
            "default_port": DEFAULT_PORT,
        }
        return Artifact(
            path="src/index.ts",
            content=self.renderer.render("src/index.ts.j2", context),
        )

    def compose_cli_wrapper(self) -> Artifact:
        """Render ``dt.js``, which forwards its arguments to ``digitaltwin-cli``."""
        content = self.renderer.render("dt.js.j2", {"cli_package": CLI_PACKAGE})
        return Artifact(path="dt.js", content=content, executable=True)

    def compose_example_components(self, options: ProjectOptions) -> list[Artifact]:
        """Render one file per registered collector plus the ``index.ts`` re-export."""
        registration = select_registration(options)
        components = [EXAMPLE_COMPONENTS[name] for name in registration.collectors]
        if not components:
            return []

        artifacts = [
            Artifact(
                path=f"src/components/{component.module}.ts",
                content=self.renderer.render(
                    f"src/components/{component.module}.ts.j2",
                    {"collector": component},
                ),
            )
            for component in components
        ]
        artifacts.append(
            Artifact(
                path="src/components/index.ts",
                content=self.renderer.render(
                    "src/components/index.ts.j2", {"components": components}
                ),
            )
        )
        return artifacts

    # -- Line-oriented files -----------------------------------------------

    def compose_env_template(self, options: ProjectOptions) -> Artifact:
        """Render ``.env`` with one ``KEY=value`` line per selected variable."""
        lines = [
            f"# {options.project_name} Digital Twin Configuration",
            "# Environment variables read by src/index.ts at start-up.",
            "# Required values are placeholders: replace them before starting.",
        ]

        group = section = None
        for var in select_env_vars(options):
            if var.group != group:
                group, section = var.group, None
                lines.append("")
                lines.append(f"# {ENV_GROUP_TITLES[var.group]}")
            if var.section and var.section != section:
                section = var.section
                lines.append(f"# {section}")
            note = _env_note(var)
            if note:
                lines.append(f"# {note}")
            lines.append(f"{var.name}={var.template_value}")

        lines.append("")
        return Artifact(path=".env", content="\n".join(lines))

    def compose_gitignore(self) -> Artifact:
        return Artifact(path=".gitignore", content=self.renderer.render("gitignore.j2", {}))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def env_schema_lines(env_vars: list[EnvVar]) -> list[str]:
    """Return the body lines of the generated ``Env.validate({...})`` call."""
    lines: list[str] = []
    section = None
    for var in env_vars:
        if var.section and var.section != section:
            section = var.section
            lines.append(f"// {section}")
        lines.append(f"{var.name}: {_schema_call(var)},")
    return lines


def _schema_call(var: EnvVar) -> str:
    opts: list[str] = []
    if not var.required:
        opts.append("optional: true")
    if var.format:
        opts.append(f"format: '{var.format}'")
    args = "{ " + ", ".join(opts) + " }" if opts else ""
    return f"Env.schema.{var.kind}({args})"


def _env_note(var: EnvVar) -> str:
    if var.required:
        return f"{var.comment} (required)" if var.comment else "Required"
    return var.comment


def _dump_json(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2) + "\n"
