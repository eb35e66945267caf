"""create-digitaltwin scaffolder -- generates Digital Twin project structures.

This module takes a ``ProjectOptions`` record and renders a runnable
TypeScript project built on digitaltwin-core: package manifest, entry point,
environment template, CLI wrapper, README and, when requested, example
collectors and Docker files.

Quick usage::

    from create_digitaltwin.options import ProjectOptions
    from create_digitaltwin.scaffolder import ProjectGenerator

    options = ProjectOptions(
        project_name="my-twin",
        project_path="./my-twin",
        database="postgresql",
        use_redis=True,
    )
    generator = ProjectGenerator(options)
    result = await generator.generate()
"""

from create_digitaltwin.scaffolder.composers import Artifact, SourceComposer
from create_digitaltwin.scaffolder.docker_gen import DockerComposer, select_services
from create_digitaltwin.scaffolder.generator import (
    DiskWriter,
    EmissionError,
    GenerationResult,
    ProjectGenerator,
)
from create_digitaltwin.scaffolder.guide_gen import GuideComposer, guide_steps
from create_digitaltwin.scaffolder.templates import TemplateRenderer

__all__ = [
    "Artifact",
    "DiskWriter",
    "DockerComposer",
    "EmissionError",
    "GenerationResult",
    "GuideComposer",
    "ProjectGenerator",
    "SourceComposer",
    "TemplateRenderer",
    "guide_steps",
    "select_services",
]
