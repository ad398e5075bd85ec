"""Pure render functions, one per generated artifact kind.

Every function takes small typed parameters and returns file text; none of
them touch the output sink.  Language, framework and style are closed sets
and each function dispatches over them with ``match``, so every
combination has an explicit template.

Event handler files share one showcase plan (:func:`plan_showcases`): the
numbering and ordering of the examples is computed here once and is the
same for every language, framework and style.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict

from simbot_codegen.catalog import registry
from simbot_codegen.models import (
    ComponentDescriptor,
    CoreFramework,
    DependencyDescriptor,
    JavaLanguage,
    JavaStyle,
    KotlinLanguage,
    PluginDescriptor,
    ResolvedComponent,
    SpringFramework,
)
from simbot_codegen.scaffolder.templates import TemplateRenderer, default_renderer


MAIN_CLASS_NAME = "MainApplication"
KOTLIN_HANDLER_NAME = "MyEventHandles"
JAVA_HANDLER_NAME = "EventHandlers"
HELLO_PATTERN = "你好.*"
KOTLIN_JVM_TOOLCHAIN = "21"

SPRING_APP_CONFIG = "application.yml"
CORE_APP_CONFIG = "simbot.properties"

_SIMBOT_EVENT = "love.forte.simbot.event"
_SIMBOT_ANNOTATIONS = "love.forte.simbot.quantcat.common.annotations"


class UnsupportedCombination(TypeError):
    """Raised when a renderer receives a variant outside its closed set."""


# ---------------------------------------------------------------------------
# Showcase plan
# ---------------------------------------------------------------------------


class ShowcaseKind(str, Enum):
    ALL_EVENTS = "all_events"
    FILTERED_MESSAGE = "filtered_message"
    COMPONENT = "component"
    REPLY = "reply"


class Showcase(BaseModel):
    """One numbered example in a generated event handler file."""

    model_config = ConfigDict(frozen=True)

    number: int
    kind: ShowcaseKind
    component: ComponentDescriptor | None = None

    @property
    def event_class(self) -> str:
        match self.kind:
            case ShowcaseKind.ALL_EVENTS:
                return f"{_SIMBOT_EVENT}.Event"
            case ShowcaseKind.FILTERED_MESSAGE:
                return f"{_SIMBOT_EVENT}.MessageEvent"
            case ShowcaseKind.COMPONENT:
                return self.component.message_event_class
            case ShowcaseKind.REPLY:
                return f"{_SIMBOT_EVENT}.ContactMessageEvent"

    @property
    def event_simple_name(self) -> str:
        return self.event_class.rsplit(".", 1)[-1]


def _descriptor(component: ResolvedComponent | ComponentDescriptor) -> ComponentDescriptor:
    if isinstance(component, ResolvedComponent):
        return component.descriptor
    return component


def plan_showcases(
    components: Sequence[ResolvedComponent | ComponentDescriptor],
) -> list[Showcase]:
    """Number the examples of a handler file.

    Order is fixed: all events, filtered message, component specific (only
    for the first selected component, if any), reply.
    """
    kinds: list[tuple[ShowcaseKind, ComponentDescriptor | None]] = [
        (ShowcaseKind.ALL_EVENTS, None),
        (ShowcaseKind.FILTERED_MESSAGE, None),
    ]
    if components:
        kinds.append((ShowcaseKind.COMPONENT, _descriptor(components[0])))
    kinds.append((ShowcaseKind.REPLY, None))
    return [
        Showcase(number=number, kind=kind, component=component)
        for number, (kind, component) in enumerate(kinds, start=1)
    ]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _sorted_imports(names: set[str]) -> list[str]:
    """Sort imports the way IntelliJ lays them out: ``java``/``kotlin`` last."""
    trailing = ("java.", "javax.", "kotlin.")
    head = sorted(n for n in names if not n.startswith(trailing))
    tail = sorted(n for n in names if n.startswith(trailing))
    return head + tail


def _is_async(language: KotlinLanguage | JavaLanguage, style: JavaStyle | None) -> bool:
    match language:
        case KotlinLanguage():
            return False
        case JavaLanguage():
            match style if style is not None else language.style:
                case JavaStyle.BLOCKING:
                    return False
                case JavaStyle.ASYNC:
                    return True
    raise UnsupportedCombination(f"unsupported language {language!r}")


def _renderer(renderer: TemplateRenderer | None) -> TemplateRenderer:
    return renderer if renderer is not None else default_renderer()


def handler_class_name(language: KotlinLanguage | JavaLanguage) -> str:
    match language:
        case KotlinLanguage():
            return KOTLIN_HANDLER_NAME
        case JavaLanguage():
            return JAVA_HANDLER_NAME
    raise UnsupportedCombination(f"unsupported language {language!r}")


def app_config_name(framework: CoreFramework | SpringFramework) -> str:
    match framework:
        case SpringFramework():
            return SPRING_APP_CONFIG
        case CoreFramework():
            return CORE_APP_CONFIG
    raise UnsupportedCombination(f"unsupported framework {framework!r}")


# ---------------------------------------------------------------------------
# Source code
# ---------------------------------------------------------------------------


def render_main_entry(
    language: KotlinLanguage | JavaLanguage,
    package_name: str,
    class_name: str,
    framework: CoreFramework | SpringFramework,
    style: JavaStyle | None = None,
    components: Sequence[ResolvedComponent | ComponentDescriptor] = (),
    *,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Render the application entry point.

    Args:
        language: Target language; its ``style`` is used when *style* is None.
        package_name: Root package of the generated project.
        class_name: Name of the entry class (and file stem).
        framework: Spring boots through ``SpringApplication``; Core launches a
            simple application and installs *components* itself.
        style: Blocking or async continuation idiom (Java only).
        components: Selected components, installed by Core entry points.

    Returns:
        The source text of the entry file.
    """
    descriptors = [_descriptor(c) for c in components]
    handle_package = f"{package_name}.{registry.HANDLE_PACKAGE}"
    is_async = _is_async(language, style)
    imports: set[str] = set()

    match language, framework:
        case KotlinLanguage(), SpringFramework():
            template = "kotlin/main_spring.kt.j2"
            imports |= {
                "love.forte.simbot.spring.EnableSimbot",
                "org.springframework.boot.autoconfigure.SpringBootApplication",
                "org.springframework.boot.runApplication",
            }
        case KotlinLanguage(), CoreFramework():
            template = "kotlin/main_core.kt.j2"
            imports |= {
                f"{handle_package}.register{KOTLIN_HANDLER_NAME}",
                "love.forte.simbot.core.application.launchSimpleApplication",
            }
            imports |= {d.install_function for d in descriptors}
        case JavaLanguage(), SpringFramework():
            template = "java/main_spring.java.j2"
            imports |= {
                "love.forte.simbot.spring.EnableSimbot",
                "org.springframework.boot.SpringApplication",
                "org.springframework.boot.autoconfigure.SpringBootApplication",
            }
        case JavaLanguage(), CoreFramework():
            template = "java/main_core.java.j2"
            imports |= {
                f"{handle_package}.{JAVA_HANDLER_NAME}",
                "love.forte.simbot.core.application.Applications",
                "love.forte.simbot.core.application.Simple",
            }
            if not is_async:
                imports.add("love.forte.simbot.application.Application")
            imports |= {d.component_class for d in descriptors}
        case _:
            raise UnsupportedCombination(f"unsupported combination {language!r} / {framework!r}")

    return _renderer(renderer).render(
        template,
        {
            "package_name": package_name,
            "class_name": class_name,
            "imports": _sorted_imports(imports),
            "components": descriptors,
            "handler_class": handler_class_name(language),
            "is_async": is_async,
            "bots_folder": registry.BOTS_FOLDER,
            "app_config": app_config_name(framework),
        },
    )


def render_event_handlers(
    language: KotlinLanguage | JavaLanguage,
    package_name: str,
    components: Sequence[ResolvedComponent | ComponentDescriptor],
    framework: CoreFramework | SpringFramework,
    style: JavaStyle | None = None,
    *,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Render the event handler file placed in the ``handle`` sub-package.

    Spring variants are annotated classes picked up by simbot-spring; Core
    variants register the same examples on an ``EventDispatcher`` by hand.
    """
    showcases = plan_showcases(components)
    is_async = _is_async(language, style)
    imports = {s.event_class for s in showcases}

    match language, framework:
        case KotlinLanguage(), SpringFramework():
            template = "kotlin/handlers_spring.kt.j2"
            imports |= {
                f"{_SIMBOT_ANNOTATIONS}.ContentTrim",
                f"{_SIMBOT_ANNOTATIONS}.Filter",
                f"{_SIMBOT_ANNOTATIONS}.Listener",
                "org.springframework.stereotype.Component",
            }
        case KotlinLanguage(), CoreFramework():
            template = "kotlin/handlers_core.kt.j2"
            imports |= {
                f"{_SIMBOT_EVENT}.EventDispatcher",
                f"{_SIMBOT_EVENT}.EventResult",
                f"{_SIMBOT_EVENT}.listen",
            }
        case JavaLanguage(), SpringFramework():
            template = "java/handlers_spring.java.j2"
            imports |= {
                f"{_SIMBOT_ANNOTATIONS}.ContentTrim",
                f"{_SIMBOT_ANNOTATIONS}.Filter",
                f"{_SIMBOT_ANNOTATIONS}.Listener",
                "org.springframework.stereotype.Component",
            }
        case JavaLanguage(), CoreFramework():
            template = "java/handlers_core.java.j2"
            imports |= {
                f"{_SIMBOT_EVENT}.EventDispatcher",
                f"{_SIMBOT_EVENT}.EventListeners",
                f"{_SIMBOT_EVENT}.EventResult",
                "java.util.regex.Pattern",
            }
        case _:
            raise UnsupportedCombination(f"unsupported combination {language!r} / {framework!r}")

    match language:
        case KotlinLanguage():
            imports |= {
                "love.forte.simbot.message.OfflinePathImage.Companion.toOfflineImage",
                "love.forte.simbot.message.Text",
                "love.forte.simbot.message.plus",
                "kotlin.io.path.Path",
            }
        case JavaLanguage():
            if is_async:
                imports.add("java.util.concurrent.CompletableFuture")

    return _renderer(renderer).render(
        template,
        {
            "package_name": f"{package_name}.{registry.HANDLE_PACKAGE}",
            "class_name": handler_class_name(language),
            "imports": _sorted_imports(imports),
            "showcases": showcases,
            "is_async": is_async,
            "hello_pattern": HELLO_PATTERN,
        },
    )


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


def render_component_config(
    component_id: str,
    framework: CoreFramework | SpringFramework,
    *,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Render ``<component_id>-example.bot.json``.

    The bot file format belongs to the component, so both frameworks load
    the same content.
    """
    descriptor = registry.get_component(component_id)
    match framework:
        case SpringFramework() | CoreFramework():
            template = f"components/{descriptor.config_template}.bot.json.j2"
        case _:
            raise UnsupportedCombination(f"unsupported framework {framework!r}")
    return _renderer(renderer).render(template, {"component": descriptor})


def render_app_config(
    framework: CoreFramework | SpringFramework,
    components: Sequence[ResolvedComponent | ComponentDescriptor],
    dependencies: Sequence[DependencyDescriptor] = (),
    *,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Render the framework-level configuration file.

    Spring gets ``application.yml``; without a web starter the simbot
    application is launched on its own non-daemon thread.  Core gets a
    ``simbot.properties`` describing where the example bot files live.
    """
    descriptors = [_descriptor(c) for c in components]
    match framework:
        case SpringFramework():
            template = "resources/application.yml.j2"
        case CoreFramework():
            template = "resources/simbot.properties.j2"
        case _:
            raise UnsupportedCombination(f"unsupported framework {framework!r}")
    keep_alive = any(d.name in registry.KEEP_ALIVE_DEPENDENCIES for d in dependencies)
    return _renderer(renderer).render(
        template,
        {
            "components": descriptors,
            "bots_folder": registry.BOTS_FOLDER,
            "keep_alive": keep_alive,
        },
    )


# ---------------------------------------------------------------------------
# Gradle
# ---------------------------------------------------------------------------


def catalog_versions(
    dependencies: Sequence[DependencyDescriptor], plugins: Sequence[PluginDescriptor]
) -> dict[str, str]:
    """Collect the shared ``[versions]`` entries, in first-use order.

    Raises:
        ValueError: If one ref is used with two different values.
    """
    versions: dict[str, str] = {}
    for entry in (*dependencies, *plugins):
        version = entry.version
        if version is None or version.ref is None:
            continue
        known = versions.setdefault(version.ref, version.value)
        if known != version.value:
            raise ValueError(
                f"version ref '{version.ref}' used with both {known} and {version.value}"
            )
    return versions


def render_version_catalog(
    dependencies: Sequence[DependencyDescriptor],
    plugins: Sequence[PluginDescriptor],
    *,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Render ``gradle/libs.versions.toml``.

    Builtin plugins (applied by id) are left out of ``[plugins]``.
    """
    return _renderer(renderer).render(
        "gradle/libs.versions.toml.j2",
        {
            "versions": catalog_versions(dependencies, plugins),
            "dependencies": list(dependencies),
            "plugins": [p for p in plugins if not p.builtin],
        },
    )


def _java_toolchain(language: KotlinLanguage | JavaLanguage) -> str:
    match language:
        case KotlinLanguage():
            version = KOTLIN_JVM_TOOLCHAIN
        case JavaLanguage():
            version = language.version
        case _:
            raise UnsupportedCombination(f"unsupported language {language!r}")
    return version


def render_build_script(
    package_name: str,
    language: KotlinLanguage | JavaLanguage,
    plugins: Sequence[PluginDescriptor],
    dependencies: Sequence[DependencyDescriptor],
    *,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Render ``build.gradle.kts`` referencing the version catalog."""
    return _renderer(renderer).render(
        "gradle/build.gradle.kts.j2",
        {
            "package_name": package_name,
            "plugins": list(plugins),
            "dependencies": list(dependencies),
            "java_toolchain": _java_toolchain(language),
            "is_kotlin": isinstance(language, KotlinLanguage),
        },
    )


def render_settings_script(
    project_name: str, *, renderer: TemplateRenderer | None = None
) -> str:
    return _renderer(renderer).render(
        "gradle/settings.gradle.kts.j2", {"project_name": project_name}
    )


def render_wrapper_properties(
    gradle_version: str,
    distribution_base: str = "https://services.gradle.org/distributions",
    generated_at: datetime | None = None,
    *,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Render ``gradle/wrapper/gradle-wrapper.properties``.

    ``:`` is escaped in the distribution URL as the properties format
    requires.  The timestamp comment is only written when *generated_at* is
    given.
    """
    url = f"{distribution_base.rstrip('/')}/gradle-{gradle_version}-bin.zip"
    return _renderer(renderer).render(
        "gradle/gradle-wrapper.properties.j2",
        {
            "distribution_url": url.replace(":", "\\:"),
            "generated_at": generated_at.isoformat() if generated_at else None,
        },
    )


def render_gradle_properties(
    language: KotlinLanguage | JavaLanguage, *, renderer: TemplateRenderer | None = None
) -> str:
    return _renderer(renderer).render(
        "gradle/gradle.properties.j2",
        {"is_kotlin": isinstance(language, KotlinLanguage)},
    )


def read_wrapper_script(name: str, *, renderer: TemplateRenderer | None = None) -> str:
    """Return the static ``gradlew`` / ``gradlew.bat`` script."""
    return _renderer(renderer).read_static(name)


def render_readme(
    project_name: str,
    language: KotlinLanguage | JavaLanguage,
    framework: CoreFramework | SpringFramework,
    components: Sequence[ResolvedComponent | ComponentDescriptor],
    *,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Render the project ``README.md``."""
    return _renderer(renderer).render(
        "README.md.j2",
        {
            "project_name": project_name,
            "language": language,
            "is_spring": isinstance(framework, SpringFramework),
            "components": [_descriptor(c) for c in components],
            "bots_folder": registry.BOTS_FOLDER,
            "app_config": app_config_name(framework),
        },
    )
