"""Generators that write a resolved project into an output sink.

Each generator receives the same :class:`GenerationContext` and a sink and
writes one slice of the project:

* :class:`ProjectStructureGenerator` -- Gradle build files, wrapper, README.
* :class:`SourceCodeGenerator` -- main entry and event handlers, delegating
  to :class:`KotlinSourceCodeGenerator` or :class:`JavaSourceCodeGenerator`.
* :class:`ConfigurationGenerator` -- resource files, delegating to
  :class:`SpringConfigurationGenerator` or :class:`CoreConfigurationGenerator`.

:class:`CompositeGenerator` runs them in that order.  Nothing here catches
:class:`~simbot_codegen.scaffolder.sink.OutputSinkError`; the first failing
write aborts the run.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from simbot_codegen.catalog import registry
from simbot_codegen.models import (
    CoreFramework,
    GenerationContext,
    JavaLanguage,
    JavaStyle,
    KotlinLanguage,
    SpringFramework,
)

from . import renderers
from .sink import FolderHandle, OutputSink
from .templates import TemplateRenderer, default_renderer


class ProjectGenerator(ABC):
    """A unit of generation over one sink and one context."""

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or default_renderer()

    @abstractmethod
    def generate(self, sink: OutputSink, context: GenerationContext) -> list[str]:
        """Write files into *sink* and return their sink paths, in write order."""


# ---------------------------------------------------------------------------
# Project structure
# ---------------------------------------------------------------------------


class ProjectStructureGenerator(ProjectGenerator):
    """Writes the Gradle build, version catalog, wrapper and README."""

    def generate(self, sink: OutputSink, context: GenerationContext) -> list[str]:
        root = sink.create_folder(context.project_name)
        gradle = root.create_folder("gradle")
        wrapper = gradle.create_folder("wrapper")
        r = self.renderer

        return [
            root.write_file(
                "build.gradle.kts",
                renderers.render_build_script(
                    context.package_name,
                    context.language,
                    context.plugins,
                    context.dependencies,
                    renderer=r,
                ),
            ),
            root.write_file(
                "settings.gradle.kts",
                renderers.render_settings_script(context.project_name, renderer=r),
            ),
            gradle.write_file(
                "libs.versions.toml",
                renderers.render_version_catalog(
                    context.dependencies, context.plugins, renderer=r
                ),
            ),
            wrapper.write_file(
                "gradle-wrapper.properties",
                renderers.render_wrapper_properties(
                    context.gradle_version,
                    context.gradle_distribution_base,
                    context.generated_at,
                    renderer=r,
                ),
            ),
            root.write_file("gradlew", renderers.read_wrapper_script("gradlew", renderer=r)),
            root.write_file(
                "gradlew.bat", renderers.read_wrapper_script("gradlew.bat", renderer=r)
            ),
            root.write_file(
                "gradle.properties",
                renderers.render_gradle_properties(context.language, renderer=r),
            ),
            root.write_file(
                "README.md",
                renderers.render_readme(
                    context.project_name,
                    context.language,
                    context.framework,
                    context.components,
                    renderer=r,
                ),
            ),
        ]


# ---------------------------------------------------------------------------
# Source code
# ---------------------------------------------------------------------------


class LanguageSourceGenerator(ABC):
    """Writes the entry file and the handler file below a package folder."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def generate(self, package_dir: FolderHandle, context: GenerationContext) -> list[str]:
        main_source = renderers.render_main_entry(
            context.language,
            context.package_name,
            renderers.MAIN_CLASS_NAME,
            context.framework,
            self.style(context),
            context.components,
            renderer=self.renderer,
        )
        handlers_source = renderers.render_event_handlers(
            context.language,
            context.package_name,
            context.components,
            context.framework,
            self.style(context),
            renderer=self.renderer,
        )
        handle_dir = package_dir.create_folder(registry.HANDLE_PACKAGE)
        handler_name = renderers.handler_class_name(context.language)
        ext = context.language.file_extension
        return [
            package_dir.write_file(f"{renderers.MAIN_CLASS_NAME}.{ext}", main_source),
            handle_dir.write_file(f"{handler_name}.{ext}", handlers_source),
        ]

    def style(self, context: GenerationContext) -> JavaStyle | None:
        return None


class KotlinSourceCodeGenerator(LanguageSourceGenerator):
    """Kotlin sources; no style choice."""


class JavaSourceCodeGenerator(LanguageSourceGenerator):
    """Java sources in the blocking or async style."""

    def style(self, context: GenerationContext) -> JavaStyle | None:
        return context.language.style


class SourceCodeGenerator(ProjectGenerator):
    """Creates ``src/main/<lang>/<package path>`` and fills it."""

    def generate(self, sink: OutputSink, context: GenerationContext) -> list[str]:
        match context.language:
            case KotlinLanguage():
                delegate = KotlinSourceCodeGenerator(self.renderer)
            case JavaLanguage():
                delegate = JavaSourceCodeGenerator(self.renderer)
            case _:
                raise renderers.UnsupportedCombination(
                    f"unsupported language {context.language!r}"
                )
        package_dir = sink.create_folder(
            f"{context.project_name}/src/main/{context.language.source_root}/{context.package_path}"
        )
        return delegate.generate(package_dir, context)


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


class FrameworkConfigurationGenerator(ABC):
    """Writes the framework-level configuration file into the resources folder."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def generate(self, resources: FolderHandle, context: GenerationContext) -> list[str]:
        content = renderers.render_app_config(
            context.framework,
            context.components,
            context.dependencies,
            renderer=self.renderer,
        )
        return [resources.write_file(renderers.app_config_name(context.framework), content)]


class SpringConfigurationGenerator(FrameworkConfigurationGenerator):
    """``application.yml`` for simbot-spring."""


class CoreConfigurationGenerator(FrameworkConfigurationGenerator):
    """``simbot.properties`` for the core application."""


class ConfigurationGenerator(ProjectGenerator):
    """Creates ``src/main/resources`` with the app config and example bot files."""

    def generate(self, sink: OutputSink, context: GenerationContext) -> list[str]:
        match context.framework:
            case SpringFramework():
                delegate = SpringConfigurationGenerator(self.renderer)
            case CoreFramework():
                delegate = CoreConfigurationGenerator(self.renderer)
            case _:
                raise renderers.UnsupportedCombination(
                    f"unsupported framework {context.framework!r}"
                )
        resources = sink.create_folder(f"{context.project_name}/src/main/resources")
        written = delegate.generate(resources, context)

        if not context.components:
            return written
        bots = resources.create_folder(registry.BOTS_FOLDER)
        for component in context.components:
            content = renderers.render_component_config(
                component.component_id, context.framework, renderer=self.renderer
            )
            written.append(bots.write_file(component.descriptor.config_file_name, content))
        return written


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


class CompositeGenerator(ProjectGenerator):
    """Runs child generators in order on the same sink and context."""

    def __init__(
        self,
        generators: list[ProjectGenerator],
        renderer: TemplateRenderer | None = None,
    ) -> None:
        super().__init__(renderer)
        self.generators = generators

    def generate(self, sink: OutputSink, context: GenerationContext) -> list[str]:
        written: list[str] = []
        for generator in self.generators:
            written.extend(generator.generate(sink, context))
        return written


def create_generator(
    context: GenerationContext, renderer: TemplateRenderer | None = None
) -> CompositeGenerator:
    """Build the standard generator chain for *context*.

    The chain does not depend on the context's variants; language and
    framework are dispatched inside each generator.
    """
    renderer = renderer or default_renderer()
    return CompositeGenerator(
        [
            ProjectStructureGenerator(renderer),
            SourceCodeGenerator(renderer),
            ConfigurationGenerator(renderer),
        ],
        renderer,
    )
