"""create-digitaltwin generator configuration.

Settings that tune the generator itself rather than the generated project:
where package versions are looked up, how long to wait, and what to fall back
to.  All settings are a Pydantic v2 model so they are validated at
construction time.  Only the command line reads the process environment; the
selectors and composers receive an explicit ``GeneratorConfig``.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, Field


CORE_PACKAGE = "digitaltwin-core"
CLI_PACKAGE = "digitaltwin-cli"

DEFAULT_FALLBACK_VERSIONS: dict[str, str] = {
    CORE_PACKAGE: "0.3.3",
    CLI_PACKAGE: "0.1.0",
}

_TRUTHY = {"1", "true", "yes", "on"}


class GeneratorConfig(BaseModel):
    """Global generator configuration.

    Instances are typically created once by the CLI entry point and then
    passed to the version lookup.
    """

    registry_url: str = Field(default="https://registry.npmjs.org")
    lookup_timeout: float = Field(
        default=5.0, gt=0, description="Per-request registry timeout in seconds"
    )
    offline: bool = Field(
        default=False, description="Skip registry lookups and use the fallback versions"
    )
    fallback_versions: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_FALLBACK_VERSIONS)
    )

    def fallback_for(self, package: str) -> str:
        """Return the pinned fallback version for *package*."""
        return self.fallback_versions.get(
            package, DEFAULT_FALLBACK_VERSIONS.get(package, "0.0.0")
        )

    @classmethod
    def from_env(cls) -> "GeneratorConfig":
        """Build a ``GeneratorConfig`` from environment variables.

        Recognised variables (all optional):
            CREATE_DT_REGISTRY_URL, CREATE_DT_LOOKUP_TIMEOUT, CREATE_DT_OFFLINE.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("CREATE_DT_REGISTRY_URL"):
            kwargs["registry_url"] = os.environ["CREATE_DT_REGISTRY_URL"].rstrip("/")
        if os.environ.get("CREATE_DT_LOOKUP_TIMEOUT"):
            kwargs["lookup_timeout"] = float(os.environ["CREATE_DT_LOOKUP_TIMEOUT"])
        if os.environ.get("CREATE_DT_OFFLINE"):
            kwargs["offline"] = os.environ["CREATE_DT_OFFLINE"].strip().lower() in _TRUTHY
        return cls(**kwargs)
