"""Command-line entry point for create-digitaltwin.

Builds a validated ``ProjectOptions`` record from command-line flags, checks
that the destination is usable, and runs the scaffolder.

Usage::

    create-digitaltwin my-twin
    create-digitaltwin my-twin --database postgresql --redis --docker
    python -m create_digitaltwin my-twin --storage ovh --examples --offline
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from create_digitaltwin import __version__
from create_digitaltwin.config import GeneratorConfig
from create_digitaltwin.options import (
    ConfigurationError,
    DatabaseType,
    ProjectOptions,
    ScaffoldError,
    StorageType,
)
from create_digitaltwin.scaffolder import ProjectGenerator
from create_digitaltwin.scaffolder.selectors import select_display
from create_digitaltwin.utils import (
    print_banner,
    print_created_files,
    print_error,
    print_next_steps,
    print_success,
    print_summary_table,
)
from create_digitaltwin.versions import RegistryClient


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="create-digitaltwin",
        description="Generate a new Digital Twin project with digitaltwin-core",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  create-digitaltwin my-twin\n"
            "  create-digitaltwin my-twin --database postgresql --redis --docker\n"
            "  create-digitaltwin my-twin --storage ovh --examples --offline\n"
        ),
    )
    parser.add_argument("project_name", help="Name of the project (lowercase, digits, - and _)")
    parser.add_argument(
        "--path",
        default=None,
        help="Destination directory (default: ./<project-name>)",
    )
    parser.add_argument(
        "--database",
        choices=[d.value for d in DatabaseType],
        default=DatabaseType.SQLITE.value,
        help="Database engine (default: sqlite)",
    )
    parser.add_argument(
        "--storage",
        choices=[s.value for s in StorageType],
        default=StorageType.LOCAL.value,
        help="Storage backend (default: local)",
    )
    parser.add_argument(
        "--storage-path",
        default=None,
        help="Upload directory for local storage (default: ./uploads)",
    )
    parser.add_argument("--redis", action="store_true", help="Use Redis for the job queue")
    parser.add_argument("--docker", action="store_true", help="Add Dockerfile and docker-compose.yml")
    parser.add_argument("--examples", action="store_true", help="Add an example data collector")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Do not query npm for the latest framework versions",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _destination_error(path: Path) -> str | None:
    """Return why *path* cannot receive a new project, or ``None`` if it can."""
    if not path.exists():
        return None
    if not path.is_dir():
        return f"{path} exists and is not a directory"
    if any(path.iterdir()):
        return f"{path} already exists and is not empty"
    return None


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``create-digitaltwin``. Returns the exit status."""
    args = build_parser().parse_args(argv)

    print_banner(
        "Create Digital Twin App",
        "Generate a new Digital Twin project with digitaltwin-core",
    )

    try:
        options = ProjectOptions.create(
            project_name=args.project_name,
            project_path=Path(args.path or args.project_name),
            database=args.database,
            storage=args.storage,
            local_storage_path=args.storage_path,
            use_redis=args.redis,
            include_docker=args.docker,
            include_examples=args.examples,
        )
        config = GeneratorConfig.from_env()
    except (ConfigurationError, ValueError) as exc:
        print_error(f"Error creating project: {exc}")
        return 1

    if args.offline:
        config = config.model_copy(update={"offline": True})

    problem = _destination_error(options.project_path)
    if problem:
        print_error(f"Error creating project: {problem}")
        return 1

    display = select_display(options)
    print_summary_table(
        {
            "Project": options.project_name,
            "Path": str(options.project_path),
            "Database": display.database,
            "Storage": display.storage,
            "Queue": display.queue,
            "Docker": display.docker,
            "Examples": "Included" if options.include_examples else "Not included",
        },
        title="Configuration",
    )

    generator = ProjectGenerator(options, lookup=RegistryClient(config))
    try:
        result = asyncio.run(generator.generate())
    except ScaffoldError as exc:
        print_error(f"Error creating project: {exc}")
        return 1

    print_created_files(result.files)
    print_success("\nProject created successfully!")
    print_next_steps([
        (f"cd {options.project_path}", ""),
        ("npm install", ""),
        ("npm run dev", "Start the development server"),
        ("node dt test", "Run dry-run test"),
    ])
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
