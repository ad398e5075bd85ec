"""Pydantic models shared by the whole generation pipeline.

Defines the immutable generation configuration (language, framework,
components, explicit dependencies), the catalog entry types produced by the
resolver, and the read-only ``GenerationContext`` handed to every generator.

Language and framework are closed tagged unions: each variant carries a
``kind`` literal so that pydantic can discriminate them when loading JSON and
so that generators can dispatch with a plain ``match`` statement.
"""

from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


PACKAGE_NAME_PATTERN = r"^[a-zA-Z][a-zA-Z0-9_]*(\.[a-zA-Z][a-zA-Z0-9_]*)*$"
CATALOG_KEY_PATTERN = r"^[a-zA-Z][a-zA-Z0-9_-]*$"
# Usable both as the root folder name and as Gradle's rootProject.name.
PROJECT_NAME_PATTERN = r"^[A-Za-z0-9_][A-Za-z0-9_.-]*$"

_PACKAGE_NAME_RE = re.compile(PACKAGE_NAME_PATTERN)
_PROJECT_NAME_RE = re.compile(PROJECT_NAME_PATTERN)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigurationInvalid(Exception):
    """Raised when a configuration fails validation.

    All rule violations are collected into ``errors`` so the caller can show
    them at once instead of fixing one field at a time.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        summary = "; ".join(self.errors) if self.errors else "unknown error"
        super().__init__(f"Invalid generation configuration: {summary}")


# ---------------------------------------------------------------------------
# Language / framework variants
# ---------------------------------------------------------------------------


class JavaStyle(str, Enum):
    """API style used by generated Java examples."""

    BLOCKING = "blocking"
    ASYNC = "async"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class KotlinLanguage(_Frozen):
    """Kotlin target. ``version`` is the Kotlin Gradle plugin version."""

    kind: Literal["kotlin"] = "kotlin"
    version: str = Field(default="2.1.20", min_length=1, description="Kotlin version")

    @property
    def display(self) -> str:
        return "Kotlin"

    @property
    def source_root(self) -> str:
        return "kotlin"

    @property
    def file_extension(self) -> str:
        return "kt"


class JavaLanguage(_Frozen):
    """Java target. ``version`` is the Java toolchain language version."""

    kind: Literal["java"] = "java"
    version: str = Field(default="21", min_length=1, description="Java language version")
    style: JavaStyle = Field(default=JavaStyle.BLOCKING)

    @property
    def display(self) -> str:
        return "Java"

    @property
    def source_root(self) -> str:
        return "java"

    @property
    def file_extension(self) -> str:
        return "java"


class CoreFramework(_Frozen):
    """Plain simbot core library usage without a DI container."""

    kind: Literal["core"] = "core"

    @property
    def display(self) -> str:
        return "Core"


class SpringFramework(_Frozen):
    """Spring Boot integration. ``version`` is the Spring Boot version."""

    kind: Literal["spring"] = "spring"
    version: str = Field(default="3.3.3", min_length=1, description="Spring Boot version")

    @property
    def display(self) -> str:
        return "Spring"


Language = Annotated[Union[KotlinLanguage, JavaLanguage], Field(discriminator="kind")]
Framework = Annotated[Union[CoreFramework, SpringFramework], Field(discriminator="kind")]


# ---------------------------------------------------------------------------
# Catalog entries
# ---------------------------------------------------------------------------


class CatalogVersion(_Frozen):
    """A version, either shared through ``[versions]`` (``ref``) or inline."""

    ref: str | None = Field(default=None, pattern=CATALOG_KEY_PATTERN)
    value: str = Field(..., min_length=1)

    def with_value(self, value: str) -> "CatalogVersion":
        return self.model_copy(update={"value": value})


class DependencyDescriptor(_Frozen):
    """A library entry of the version catalog."""

    name: str = Field(..., pattern=CATALOG_KEY_PATTERN, description="Key in [libraries]")
    group: str = Field(..., min_length=1)
    artifact: str = Field(..., min_length=1)
    version: CatalogVersion | None = Field(
        default=None, description="None when the version is managed by a BOM"
    )
    configuration: str = Field(default="implementation", min_length=1)

    @property
    def module(self) -> str:
        return f"{self.group}:{self.artifact}"

    @property
    def lib_ref_path(self) -> str:
        """Accessor path used in build scripts, e.g. ``libs.simbot.core``."""
        return self.name.replace("-", ".")


class PluginDescriptor(_Frozen):
    """A Gradle plugin entry.

    Builtin plugins (``java``) cannot be declared in a version catalog; they
    are applied by id and skipped by the catalog renderer.
    """

    name: str = Field(..., pattern=CATALOG_KEY_PATTERN)
    id: str = Field(..., min_length=1)
    version: CatalogVersion | None = None
    builtin: bool = False

    @property
    def lib_ref_path(self) -> str:
        return self.name.replace("-", ".")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ComponentSelection(_Frozen):
    """A selected component and the version resolved for it."""

    component_id: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)


class GenerationConfig(_Frozen):
    """Everything needed to generate one project.

    Built once from user input right before generation and never mutated.
    Registry-dependent rules (known component ids, starters only with
    Spring) are checked by :func:`simbot_codegen.catalog.validate_config`.
    """

    project_name: str = Field(..., description="Root folder and Gradle project name")
    package_name: str = Field(default="com.example", description="Root package")
    language: Language = Field(default_factory=KotlinLanguage)
    framework: Framework = Field(default_factory=SpringFramework)
    components: tuple[ComponentSelection, ...] = Field(default=())
    spring_starters: tuple[str, ...] = Field(default=())
    extra_dependencies: tuple[DependencyDescriptor, ...] = Field(default=())
    simbot_version: str = Field(default="4.6.0", min_length=1)
    gradle_version: str = Field(default="8.10", min_length=1)
    gradle_distribution_base: str = Field(default="https://services.gradle.org/distributions")

    @field_validator("project_name")
    @classmethod
    def _project_name_is_folder_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("project name must not be empty")
        if not _PROJECT_NAME_RE.match(value) or value.endswith("."):
            raise ValueError(
                f"'{value}' is not a valid project name "
                "(letters, digits, '_', '-' and '.'; no leading '-' or '.', no trailing '.')"
            )
        return value

    @field_validator("package_name")
    @classmethod
    def _package_name_is_identifier_sequence(cls, value: str) -> str:
        if not _PACKAGE_NAME_RE.match(value):
            raise ValueError(f"'{value}' is not a valid package name")
        return value

    @field_validator("components")
    @classmethod
    def _components_unique(
        cls, value: tuple[ComponentSelection, ...]
    ) -> tuple[ComponentSelection, ...]:
        seen: set[str] = set()
        for selection in value:
            if selection.component_id in seen:
                raise ValueError(f"component '{selection.component_id}' selected twice")
            seen.add(selection.component_id)
        return value

    @property
    def package_path(self) -> str:
        return self.package_name.replace(".", "/")


def format_validation_error(exc: ValidationError) -> list[str]:
    """Flatten a pydantic ``ValidationError`` into readable messages."""
    messages: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        messages.append(f"{location}: {message}" if location else message)
    return messages


# ---------------------------------------------------------------------------
# Resolved context
# ---------------------------------------------------------------------------


class ComponentDescriptor(_Frozen):
    """Static description of a selectable simbot component.

    Instances live in :mod:`simbot_codegen.catalog.registry`; they are not
    user data.
    """

    component_id: str = Field(..., pattern=r"^[a-z][a-z0-9]*$")
    display: str
    owner: str = Field(..., description="GitHub owner used for release lookups")
    repo: str = Field(..., description="GitHub repository used for release lookups")
    requires_runtime_client: bool = Field(
        default=False, description="Needs an HTTP client engine at runtime"
    )
    dependency: DependencyDescriptor = Field(
        ..., description="Catalog entry; its version value is the pinned fallback"
    )
    config_component: str = Field(..., description="'component' value of the example bot file")
    config_template: str = Field(..., description="Template key of the example bot file")
    message_event_class: str = Field(..., description="Qualified component message event")
    install_function: str = Field(..., description="Qualified Kotlin install extension")
    component_class: str = Field(..., description="Qualified component class, installed via its Factory")
    doc: str = ""
    bot_config_doc: str = ""

    @property
    def pinned_version(self) -> str:
        return self.dependency.version.value if self.dependency.version else ""

    @property
    def message_event_simple_name(self) -> str:
        return self.message_event_class.rsplit(".", 1)[-1]

    @property
    def install_simple_name(self) -> str:
        return self.install_function.rsplit(".", 1)[-1]

    @property
    def component_simple_name(self) -> str:
        return self.component_class.rsplit(".", 1)[-1]

    @property
    def config_file_name(self) -> str:
        return f"{self.component_id}-example.bot.json"


class SpringStarter(_Frozen):
    """An optional Spring Boot starter (BOM managed, no version)."""

    starter_id: str
    dependency: DependencyDescriptor


class ResolvedComponent(_Frozen):
    """A component descriptor paired with the selected version."""

    descriptor: ComponentDescriptor
    version: str

    @property
    def component_id(self) -> str:
        return self.descriptor.component_id


class GenerationContext(_Frozen):
    """Read-only aggregate passed to every generator.

    Built once by :func:`simbot_codegen.catalog.resolve`; every generator of
    a run receives the same instance.
    """

    project_name: str
    package_name: str
    language: Language
    framework: Framework
    components: tuple[ResolvedComponent, ...] = ()
    dependencies: tuple[DependencyDescriptor, ...] = ()
    plugins: tuple[PluginDescriptor, ...] = ()
    simbot_version: str = "4.6.0"
    gradle_version: str = "8.10"
    gradle_distribution_base: str = "https://services.gradle.org/distributions"
    notes: tuple[str, ...] = ()
    generated_at: datetime | None = None

    @property
    def package_path(self) -> str:
        return self.package_name.replace(".", "/")

    @property
    def is_spring(self) -> bool:
        return isinstance(self.framework, SpringFramework)
