"""Fragment selectors: one pure function per axis of variation.

Each selector maps a ``ProjectOptions`` record to a small fragment (a
dependency map, an environment-variable list, a runtime configuration
object, the classes to import, or display strings).  Composers call the
selectors they need and never branch on the options themselves, which keeps
the 32-combination matrix testable one axis at a time.

Selectors are deterministic: the same options always produce equal
fragments.  An options record holding a value outside its declared range
(e.g. one built with ``model_construct``) raises ``ConfigurationError``.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from ..config import CLI_PACKAGE, CORE_PACKAGE
from ..options import (
    PROJECT_NAME_RE,
    ConfigurationError,
    DatabaseType,
    ProjectOptions,
    StorageType,
)
from ..versions import PackageVersions


# ---------------------------------------------------------------------------
# Fragment models
# ---------------------------------------------------------------------------


class EnvVar(BaseModel):
    """One environment variable read by the generated entry point."""

    model_config = ConfigDict(frozen=True)

    name: str
    required: bool
    default: str | int | None = None
    comment: str = ""
    group: Literal["application", "database", "storage", "queue"]
    section: str = Field(default="", description="Sub-heading shared by related variables")
    kind: Literal["string", "number"] = "string"
    format: Literal["url"] | None = None
    placeholder: str | None = Field(
        default=None, description="Explanatory value written for required variables"
    )

    @property
    def template_value(self) -> str:
        """Value written to the environment template."""
        if self.required:
            return self.placeholder or ""
        return "" if self.default is None else str(self.default)


class EnvRef(BaseModel):
    """Reference to ``env.<name>`` in generated code, with an optional fallback."""

    model_config = ConfigDict(frozen=True)

    name: str
    default: str | int | None = None


class RuntimeConfig(BaseModel):
    """Connection objects passed to the generated adapters at start-up."""

    database: dict[str, Any]
    storage: EnvRef | dict[str, EnvRef]
    queue: dict[str, EnvRef] | None = None

    def referenced_env_vars(self) -> set[str]:
        """Names of every environment variable the config reads."""
        return _collect_env_refs([self.database, self.storage, self.queue])


class DependencySet(BaseModel):
    """Runtime and development dependency maps, each sorted by package name."""

    dependencies: dict[str, str]
    dev_dependencies: dict[str, str]

    def all_packages(self) -> set[str]:
        return set(self.dependencies) | set(self.dev_dependencies)


class Registration(BaseModel):
    """Classes imported from the framework and instantiated by the entry point."""

    storage_class: str
    core_imports: list[str]
    collectors: list[str] = Field(default_factory=list)
    components_module: str | None = None


class DisplayStrings(BaseModel):
    """Human-readable summaries for log output and the generated guide."""

    database: str
    storage: str
    queue: str
    database_feature: str
    storage_feature: str
    queue_feature: str
    queue_config: str
    docker: str


# ---------------------------------------------------------------------------
# Per-axis tables
# ---------------------------------------------------------------------------

FRAMEWORK_DEPENDENCIES: dict[str, str] = {
    "knex": "^3.0.0",
    "commander": "^12.0.0",
    "dotenv": "^17.2.1",
}

FRAMEWORK_DEV_DEPENDENCIES: dict[str, str] = {
    "@types/node": "^24.0.10",
    "typescript": "^5.0.0",
    "tsx": "^4.19.2",
}

# database -> (dependencies, dev dependencies)
DATABASE_DEPENDENCIES: dict[DatabaseType, tuple[dict[str, str], dict[str, str]]] = {
    DatabaseType.POSTGRESQL: ({"pg": "^8.11.0"}, {"@types/pg": "^8.10.0"}),
    DatabaseType.SQLITE: ({"better-sqlite3": "^12.2.0"}, {}),
}

STORAGE_DEPENDENCIES: dict[StorageType, dict[str, str]] = {
    StorageType.LOCAL: {},
    StorageType.OVH: {"@aws-sdk/client-s3": "^3.842.0"},
}

QUEUE_DEPENDENCIES: dict[str, str] = {"ioredis": "^5.6.1"}

STORAGE_CLASSES: dict[StorageType, str] = {
    StorageType.LOCAL: "LocalStorageService",
    StorageType.OVH: "OvhS3StorageService",
}

EXAMPLE_COLLECTORS: list[str] = ["JSONPlaceholderCollector"]
COMPONENTS_MODULE = "./components/index.js"

DEFAULT_PORT = 3000
POSTGRES_PORT = 5432
REDIS_PORT = 6379
OVH_DEFAULT_REGION = "gra"


# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------


def select_dependencies(
    options: ProjectOptions, versions: PackageVersions | None = None
) -> DependencySet:
    """Return the package manifest's dependency maps.

    Framework versions come from *versions* (already resolved by the
    injected lookup), so this function never touches the network.
    """
    versions = versions or PackageVersions()
    database = resolve_database(options)
    storage = resolve_storage(options)

    deps: dict[str, str] = {
        CORE_PACKAGE: f"^{versions[CORE_PACKAGE]}",
        **FRAMEWORK_DEPENDENCIES,
    }
    dev_deps: dict[str, str] = {
        **FRAMEWORK_DEV_DEPENDENCIES,
        CLI_PACKAGE: f"^{versions[CLI_PACKAGE]}",
    }

    db_deps, db_dev_deps = DATABASE_DEPENDENCIES[database]
    deps.update(db_deps)
    dev_deps.update(db_dev_deps)
    deps.update(STORAGE_DEPENDENCIES[storage])
    if resolve_flag(options, "use_redis"):
        deps.update(QUEUE_DEPENDENCIES)

    return DependencySet(
        dependencies=dict(sorted(deps.items())),
        dev_dependencies=dict(sorted(dev_deps.items())),
    )


def select_env_vars(options: ProjectOptions) -> list[EnvVar]:
    """Return the ordered list of environment variables the project reads."""
    name = resolve_project_name(options)
    env_vars = [
        EnvVar(
            name="PORT",
            required=False,
            default=DEFAULT_PORT,
            kind="number",
            group="application",
            comment="HTTP port, used when the engine does not report one",
        )
    ]

    if resolve_database(options) is DatabaseType.POSTGRESQL:
        section = "PostgreSQL Database (required for production)"
        env_vars += [
            EnvVar(name="DB_HOST", required=True, placeholder="localhost",
                   group="database", section=section, comment="Database server host"),
            EnvVar(name="DB_PORT", required=False, default=POSTGRES_PORT, kind="number",
                   group="database", section=section),
            EnvVar(name="DB_USER", required=True, placeholder="postgres",
                   group="database", section=section),
            EnvVar(name="DB_PASSWORD", required=True, placeholder="password",
                   group="database", section=section, comment="Change this before deploying"),
            EnvVar(name="DB_NAME", required=True, placeholder=name,
                   group="database", section=section),
        ]
    else:
        env_vars.append(
            EnvVar(name="DB_PATH", required=False, default=options.sqlite_filename,
                   group="database", section="SQLite Database (good for development)")
        )

    if resolve_storage(options) is StorageType.LOCAL:
        env_vars.append(
            EnvVar(name="STORAGE_PATH", required=False,
                   default=options.effective_storage_path,
                   group="storage", section="Local File Storage")
        )
    else:
        section = "OVH Object Storage (S3-compatible)"
        env_vars += [
            EnvVar(name="OVH_ACCESS_KEY", required=True,
                   placeholder="your_ovh_access_key_here",
                   group="storage", section=section),
            EnvVar(name="OVH_SECRET_KEY", required=True,
                   placeholder="your_ovh_secret_key_here",
                   group="storage", section=section),
            EnvVar(name="OVH_ENDPOINT", required=True, format="url",
                   placeholder="https://s3.gra.io.cloud.ovh.net",
                   group="storage", section=section, comment="Must be a full URL"),
            EnvVar(name="OVH_REGION", required=False, default=OVH_DEFAULT_REGION,
                   group="storage", section=section),
            EnvVar(name="OVH_BUCKET", required=True, placeholder=f"{name}-storage",
                   group="storage", section=section),
        ]

    if resolve_flag(options, "use_redis"):
        section = "Redis (queue management)"
        env_vars += [
            EnvVar(name="REDIS_HOST", required=False, default="localhost",
                   group="queue", section=section),
            EnvVar(name="REDIS_PORT", required=False, default=REDIS_PORT, kind="number",
                   group="queue", section=section),
        ]

    return env_vars


def select_runtime_config(options: ProjectOptions) -> RuntimeConfig:
    """Return the database, storage and queue objects built at start-up."""
    if resolve_database(options) is DatabaseType.POSTGRESQL:
        database: dict[str, Any] = {
            "client": "pg",
            "connection": {
                "host": EnvRef(name="DB_HOST"),
                "port": EnvRef(name="DB_PORT", default=POSTGRES_PORT),
                "user": EnvRef(name="DB_USER"),
                "password": EnvRef(name="DB_PASSWORD"),
                "database": EnvRef(name="DB_NAME"),
            },
        }
    else:
        database = {
            "client": "better-sqlite3",
            "connection": {
                "filename": EnvRef(name="DB_PATH", default=_sqlite_filename(options)),
            },
            "useNullAsDefault": True,
        }

    storage: EnvRef | dict[str, EnvRef]
    if resolve_storage(options) is StorageType.LOCAL:
        storage = EnvRef(name="STORAGE_PATH", default=options.effective_storage_path)
    else:
        storage = {
            "accessKey": EnvRef(name="OVH_ACCESS_KEY"),
            "secretKey": EnvRef(name="OVH_SECRET_KEY"),
            "endpoint": EnvRef(name="OVH_ENDPOINT"),
            "region": EnvRef(name="OVH_REGION", default=OVH_DEFAULT_REGION),
            "bucket": EnvRef(name="OVH_BUCKET"),
        }

    queue = None
    if resolve_flag(options, "use_redis"):
        queue = {
            "host": EnvRef(name="REDIS_HOST", default="localhost"),
            "port": EnvRef(name="REDIS_PORT", default=REDIS_PORT),
        }

    return RuntimeConfig(database=database, storage=storage, queue=queue)


def select_registration(options: ProjectOptions) -> Registration:
    """Return the storage class and example collectors the entry point wires up."""
    storage_class = STORAGE_CLASSES[resolve_storage(options)]
    examples = resolve_flag(options, "include_examples")
    return Registration(
        storage_class=storage_class,
        core_imports=["DigitalTwinEngine", "KnexDatabaseAdapter", "Env", storage_class],
        collectors=list(EXAMPLE_COLLECTORS) if examples else [],
        components_module=COMPONENTS_MODULE if examples else None,
    )


def select_display(options: ProjectOptions) -> DisplayStrings:
    """Return the summary strings logged at start-up and shown in the guide."""
    postgres = resolve_database(options) is DatabaseType.POSTGRESQL
    local = resolve_storage(options) is StorageType.LOCAL
    redis = resolve_flag(options, "use_redis")
    path = options.effective_storage_path

    return DisplayStrings(
        database="PostgreSQL" if postgres else "SQLite",
        storage=f"Local filesystem ({path})" if local else "OVH Object Storage",
        queue="Redis enabled" if redis else "In-memory mode",
        database_feature=(
            "PostgreSQL with production-ready configuration"
            if postgres
            else "SQLite for easy development"
        ),
        storage_feature=(
            f"Local file system storage ({path})" if local else "OVH Object Storage integration"
        ),
        queue_feature="Redis-powered background jobs" if redis else "In-memory job processing",
        queue_config="Redis (BullMQ)" if redis else "In-memory",
        docker="Included" if resolve_flag(options, "include_docker") else "Not included",
    )


# ---------------------------------------------------------------------------
# Field guards
# ---------------------------------------------------------------------------


def resolve_database(options: ProjectOptions) -> DatabaseType:
    try:
        return DatabaseType(options.database)
    except ValueError:
        raise ConfigurationError(
            "database", f"unsupported value {options.database!r}"
        ) from None


def resolve_storage(options: ProjectOptions) -> StorageType:
    try:
        return StorageType(options.storage)
    except ValueError:
        raise ConfigurationError(
            "storage", f"unsupported value {options.storage!r}"
        ) from None


def resolve_flag(options: ProjectOptions, field: str) -> bool:
    value = getattr(options, field, None)
    if not isinstance(value, bool):
        raise ConfigurationError(field, f"expected a boolean, got {value!r}")
    return value


def resolve_project_name(options: ProjectOptions) -> str:
    name = getattr(options, "project_name", None)
    if not isinstance(name, str) or not PROJECT_NAME_RE.match(name):
        raise ConfigurationError("project_name", f"invalid value {name!r}")
    return name


def _sqlite_filename(options: ProjectOptions) -> str:
    resolve_project_name(options)
    return options.sqlite_filename


def _collect_env_refs(value: Any) -> set[str]:
    if isinstance(value, EnvRef):
        return {value.name}
    if isinstance(value, dict):
        values = value.values()
    elif isinstance(value, (list, tuple)):
        values = value
    else:
        return set()
    names: set[str] = set()
    for item in values:
        names |= _collect_env_refs(item)
    return names
