"""Project scaffolder -- renders templates and writes them into output sinks.

Quick usage::

    from simbot_codegen.catalog import resolve
    from simbot_codegen.scaffolder import MemorySink, create_generator

    context = resolve(config)
    sink = MemorySink()
    create_generator(context).generate(sink, context)
"""

from simbot_codegen.scaffolder.generators import (
    CompositeGenerator,
    ConfigurationGenerator,
    ProjectStructureGenerator,
    SourceCodeGenerator,
    create_generator,
)
from simbot_codegen.scaffolder.sink import (
    DirectorySink,
    FolderHandle,
    MemorySink,
    OutputSink,
    OutputSinkError,
    build_zip,
    export_tree,
)
from simbot_codegen.scaffolder.templates import TemplateRenderer

__all__ = [
    "CompositeGenerator",
    "ConfigurationGenerator",
    "DirectorySink",
    "FolderHandle",
    "MemorySink",
    "OutputSink",
    "OutputSinkError",
    "ProjectStructureGenerator",
    "SourceCodeGenerator",
    "TemplateRenderer",
    "build_zip",
    "create_generator",
    "export_tree",
]
