"""simbot-codegen -- scaffold generator for Simple Robot (simbot) bot projects.

Takes a small :class:`~simbot_codegen.models.GenerationConfig` and emits a
complete Gradle project (build scripts, version catalog, Kotlin or Java
sources, resource files) into an output sink, optionally packed as a zip.

Quick usage::

    from simbot_codegen import GenerationConfig, MemorySink, build_zip, generate_project

    sink = MemorySink()
    generate_project(GenerationConfig(project_name="demo"), sink)
    archive = build_zip(sink)
"""

from simbot_codegen.models import (
    ComponentSelection,
    ConfigurationInvalid,
    CoreFramework,
    DependencyDescriptor,
    GenerationConfig,
    GenerationContext,
    JavaLanguage,
    JavaStyle,
    KotlinLanguage,
    SpringFramework,
)
from simbot_codegen.pipeline import GenerationFailed, generate_project
from simbot_codegen.scaffolder.sink import DirectorySink, MemorySink, build_zip

__version__ = "0.1.0"

__all__ = [
    "ComponentSelection",
    "ConfigurationInvalid",
    "CoreFramework",
    "DependencyDescriptor",
    "DirectorySink",
    "GenerationConfig",
    "GenerationContext",
    "GenerationFailed",
    "JavaLanguage",
    "JavaStyle",
    "KotlinLanguage",
    "MemorySink",
    "SpringFramework",
    "build_zip",
    "generate_project",
]
