"""Jinja2 rendering of the generated project's text files.

``TemplateRenderer`` loads the ``.j2`` files shipped in ``scaffolder/templates/``
and fills them with selector fragments.  Rendering returns strings and never
touches the destination project.

Two filters translate Python fragment values into TypeScript source:
``ts_string`` (a single-quoted, escaped string literal) and ``ts_literal``
(an object literal, where ``EnvRef`` values become ``env.NAME || default``).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from .selectors import EnvRef


PACKAGED_TEMPLATES = Path(__file__).parent / "templates"

_INDENT = "  "


class TemplateRenderer:
    """Turns template paths plus a context dict into file bodies.

    Undefined variables are errors: a missing fragment fails the render
    instead of leaving an empty hole in the output.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        self.template_dir = Path(template_dir or PACKAGED_TEMPLATES)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([], default_for_string=False),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["ts_string"] = ts_string
        self.env.filters["ts_literal"] = ts_literal

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render *template_path* (e.g. ``"src/index.ts.j2"``) with *context*."""
        return self.env.get_template(template_path).render(**context)


# ---------------------------------------------------------------------------
# TypeScript serialisation filters
# ---------------------------------------------------------------------------

def ts_string(value: str) -> str:
    """Quote *value* as a single-quoted TypeScript string literal."""
    escaped = (
        str(value)
        .replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f"'{escaped}'"


def ts_literal(value: Any, level: int = 0) -> str:
    """Serialise a fragment value to TypeScript source.

    *level* is the indentation depth of the line the literal starts on; nested
    keys are indented one step further and the closing brace lines up with
    the opening line.
    """
    if isinstance(value, EnvRef):
        expr = f"env.{value.name}"
        if value.default is not None:
            expr += f" || {ts_literal(value.default)}"
        return expr
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if value is None:
        return "undefined"
    if isinstance(value, str):
        return ts_string(value)
    if isinstance(value, dict):
        if not value:
            return "{}"
        pad = _INDENT * level
        items = [
            f"{pad}{_INDENT}{key}: {ts_literal(item, level + 1)}"
            for key, item in value.items()
        ]
        return "{\n" + ",\n".join(items) + f"\n{pad}}}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(ts_literal(item, level) for item in value) + "]"
    raise TypeError(f"Cannot serialise {type(value).__name__} to TypeScript")
