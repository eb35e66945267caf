"""Validated scaffolding options.

``ProjectOptions`` is the single record every selector and composer reads.
It is built once per invocation (by the CLI or by a caller) and is frozen
afterwards.  Anything that violates the field rules raises
``ConfigurationError`` before a single file is written.
"""

from __future__ import annotations

import itertools
import re
from collections.abc import Iterator
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


DEFAULT_LOCAL_STORAGE_PATH = "./uploads"

PROJECT_NAME_RE = re.compile(r"^[a-z0-9_-]+$")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ScaffoldError(Exception):
    """Base class for every error raised while scaffolding a project."""


class ConfigurationError(ScaffoldError):
    """Raised when the options record violates one of its invariants."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"Invalid {field}: {message}")


# ---------------------------------------------------------------------------
# Choices
# ---------------------------------------------------------------------------


class DatabaseType(str, Enum):
    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


class StorageType(str, Enum):
    LOCAL = "local"
    OVH = "ovh"


# ---------------------------------------------------------------------------
# Options model
# ---------------------------------------------------------------------------


class ProjectOptions(BaseModel):
    """The user's scaffolding choices."""

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(..., description="npm package name, also the default db/bucket stem")
    project_path: Path = Field(..., description="Destination directory of the generated project")
    database: DatabaseType = Field(default=DatabaseType.SQLITE)
    storage: StorageType = Field(default=StorageType.LOCAL)
    local_storage_path: str | None = Field(
        default=None,
        description="Upload directory for local storage (defaults to ./uploads)",
    )
    use_redis: bool = Field(default=False)
    include_docker: bool = Field(default=False)
    include_examples: bool = Field(default=False)

    @field_validator("project_name")
    @classmethod
    def _check_project_name(cls, value: str) -> str:
        if not PROJECT_NAME_RE.match(value):
            raise ValueError(
                "must contain only lowercase letters, digits, hyphens and underscores"
            )
        return value

    @field_validator("local_storage_path")
    @classmethod
    def _check_storage_path(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value:
            return None
        if any(ch in value for ch in ("\n", "\r", "#", "'", '"', "`")):
            raise ValueError("must not contain quotes, '#' or line breaks")
        return value

    # -- Construction ------------------------------------------------------

    @classmethod
    def create(cls, **fields: Any) -> "ProjectOptions":
        """Validate *fields* and return options, raising ``ConfigurationError``.

        Wraps pydantic's ``ValidationError`` so callers only have to deal
        with the scaffolder's own error taxonomy.
        """
        try:
            return cls(**fields)
        except ValidationError as exc:
            first = exc.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or "options"
            raise ConfigurationError(field, first["msg"]) from exc

    @classmethod
    def combinations(
        cls, project_name: str, project_path: str | Path
    ) -> Iterator["ProjectOptions"]:
        """Yield all 32 option records for one project name and path."""
        for database, storage, redis, docker, examples in itertools.product(
            DatabaseType, StorageType, (False, True), (False, True), (False, True)
        ):
            yield cls(
                project_name=project_name,
                project_path=Path(project_path),
                database=database,
                storage=storage,
                use_redis=redis,
                include_docker=docker,
                include_examples=examples,
            )

    # -- Derived values ----------------------------------------------------

    @property
    def effective_storage_path(self) -> str:
        """The local storage path with its default applied."""
        return self.local_storage_path or DEFAULT_LOCAL_STORAGE_PATH

    @property
    def sqlite_filename(self) -> str:
        return f"./data/{self.project_name}.db"
