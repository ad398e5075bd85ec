"""Dependency and version catalog resolution.

``resolve`` turns a validated :class:`GenerationConfig` into the read-only
:class:`GenerationContext` every generator works from.  The catalog is built
by folding an ordered list of rules over an empty :class:`Catalog`:

1. framework-mandatory dependencies
2. Spring Boot starters picked by the user
3. one dependency per selected component
4. the shared runtime HTTP client (at most once)
5. explicit extra dependencies (last write wins)
6. Gradle plugins
7. version reference unification

Each rule returns a new catalog; nothing is mutated.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from functools import reduce
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from simbot_codegen.catalog import registry
from simbot_codegen.models import (
    ComponentSelection,
    ConfigurationInvalid,
    DependencyDescriptor,
    GenerationConfig,
    GenerationContext,
    JavaLanguage,
    KotlinLanguage,
    PluginDescriptor,
    ResolvedComponent,
    SpringFramework,
    CoreFramework,
    format_validation_error,
)


class Catalog(BaseModel):
    """Intermediate accumulator of the resolution fold."""

    model_config = ConfigDict(frozen=True)

    dependencies: tuple[DependencyDescriptor, ...] = ()
    plugins: tuple[PluginDescriptor, ...] = ()
    notes: tuple[str, ...] = ()

    def add_dependency(self, dependency: DependencyDescriptor) -> "Catalog":
        """Append *dependency*, replacing an existing entry with the same name in place."""
        for index, existing in enumerate(self.dependencies):
            if existing.name == dependency.name:
                updated = list(self.dependencies)
                updated[index] = dependency
                note = (
                    f"dependency '{dependency.name}' overrides "
                    f"{_describe(existing)} with {_describe(dependency)}"
                )
                return self.model_copy(
                    update={"dependencies": tuple(updated), "notes": self.notes + (note,)}
                )
        return self.model_copy(update={"dependencies": self.dependencies + (dependency,)})

    def add_plugin(self, plugin: PluginDescriptor) -> "Catalog":
        """Append *plugin* unless one with the same name or id is present."""
        if any(p.name == plugin.name or p.id == plugin.id for p in self.plugins):
            return self
        return self.model_copy(update={"plugins": self.plugins + (plugin,)})

    def has_dependency(self, name: str) -> bool:
        return any(d.name == name for d in self.dependencies)


CatalogRule = Callable[[Catalog, GenerationConfig], Catalog]


def _describe(dependency: DependencyDescriptor) -> str:
    version = dependency.version.value if dependency.version else "managed"
    return f"{dependency.module}:{version}"


def _with_version(dependency: DependencyDescriptor, value: str) -> DependencyDescriptor:
    if dependency.version is None:
        return dependency
    return dependency.model_copy(update={"version": dependency.version.with_value(value)})


def _plugin_with_version(plugin: PluginDescriptor, value: str) -> PluginDescriptor:
    if plugin.version is None:
        return plugin
    return plugin.model_copy(update={"version": plugin.version.with_value(value)})


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def framework_rule(catalog: Catalog, config: GenerationConfig) -> Catalog:
    match config.framework:
        case SpringFramework():
            catalog = catalog.add_dependency(registry.SPRING_STARTER)
            if isinstance(config.language, KotlinLanguage):
                catalog = catalog.add_dependency(
                    _with_version(registry.KOTLIN_REFLECT, config.language.version)
                )
            return catalog.add_dependency(
                _with_version(registry.SIMBOT_SPRING, config.simbot_version)
            )
        case CoreFramework():
            return catalog.add_dependency(
                _with_version(registry.SIMBOT_CORE, config.simbot_version)
            )


def spring_starters_rule(catalog: Catalog, config: GenerationConfig) -> Catalog:
    if not isinstance(config.framework, SpringFramework):
        return catalog
    for starter_id in config.spring_starters:
        catalog = catalog.add_dependency(registry.SPRING_STARTERS[starter_id].dependency)
    return catalog


def components_rule(catalog: Catalog, config: GenerationConfig) -> Catalog:
    for selection in config.components:
        descriptor = registry.get_component(selection.component_id)
        catalog = catalog.add_dependency(_with_version(descriptor.dependency, selection.version))
    return catalog


def runtime_client_rule(catalog: Catalog, config: GenerationConfig) -> Catalog:
    needs_client = any(
        registry.get_component(s.component_id).requires_runtime_client
        for s in config.components
    )
    if not needs_client or catalog.has_dependency(registry.KTOR_CLIENT_JAVA.name):
        return catalog
    return catalog.add_dependency(registry.KTOR_CLIENT_JAVA)


def explicit_rule(catalog: Catalog, config: GenerationConfig) -> Catalog:
    for dependency in config.extra_dependencies:
        catalog = catalog.add_dependency(dependency)
    return catalog


def unify_versions_rule(catalog: Catalog, config: GenerationConfig) -> Catalog:
    """Give every entry sharing a version ref the same value.

    Plugins are visited before dependencies so the last dependency using a
    ref (usually an explicit extra) decides its value.
    """
    latest: dict[str, str] = {}
    for entry in (*catalog.plugins, *catalog.dependencies):
        if entry.version is not None and entry.version.ref:
            latest[entry.version.ref] = entry.version.value

    notes = list(catalog.notes)

    def settle(entry, kind: str):
        version = entry.version
        if version is None or not version.ref or latest[version.ref] == version.value:
            return entry
        notes.append(
            f"version ref '{version.ref}' of {kind} '{entry.name}' "
            f"changed from {version.value} to {latest[version.ref]}"
        )
        return entry.model_copy(update={"version": version.with_value(latest[version.ref])})

    dependencies = tuple(settle(d, "dependency") for d in catalog.dependencies)
    plugins = tuple(settle(p, "plugin") for p in catalog.plugins)
    return catalog.model_copy(
        update={"dependencies": dependencies, "plugins": plugins, "notes": tuple(notes)}
    )


def plugins_rule(catalog: Catalog, config: GenerationConfig) -> Catalog:
    match config.language:
        case KotlinLanguage(version=kotlin_version):
            catalog = catalog.add_plugin(
                _plugin_with_version(registry.PLUGIN_KOTLIN, kotlin_version)
            )
        case JavaLanguage():
            kotlin_version = None
            catalog = catalog.add_plugin(registry.PLUGIN_JAVA)

    match config.framework:
        case SpringFramework(version=spring_version):
            if kotlin_version is not None:
                catalog = catalog.add_plugin(
                    _plugin_with_version(registry.PLUGIN_KOTLIN_SPRING, kotlin_version)
                )
            catalog = catalog.add_plugin(
                _plugin_with_version(registry.PLUGIN_SPRING, spring_version)
            )
            catalog = catalog.add_plugin(registry.PLUGIN_SPRING_MANAGEMENT)
        case CoreFramework():
            pass
    return catalog


DEFAULT_RULES: tuple[CatalogRule, ...] = (
    framework_rule,
    spring_starters_rule,
    components_rule,
    runtime_client_rule,
    explicit_rule,
    plugins_rule,
    unify_versions_rule,
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_catalog(
    config: GenerationConfig, rules: Iterable[CatalogRule] = DEFAULT_RULES
) -> Catalog:
    """Fold *rules* over an empty catalog."""
    return reduce(lambda catalog, rule: rule(catalog, config), rules, Catalog())


def resolve(
    config: GenerationConfig, *, generated_at: datetime | None = None
) -> GenerationContext:
    """Resolve *config* into a :class:`GenerationContext`.

    The config is assumed to have passed :func:`validate_config`; unknown
    component ids raise ``KeyError`` here.

    Args:
        config: The validated generation configuration.
        generated_at: Optional timestamp embedded as a comment in the
            wrapper properties. ``None`` keeps the output reproducible.

    Returns:
        The frozen context shared by all generators of one run.
    """
    catalog = build_catalog(config)
    components = tuple(
        ResolvedComponent(
            descriptor=registry.get_component(selection.component_id),
            version=selection.version,
        )
        for selection in config.components
    )
    return GenerationContext(
        project_name=config.project_name,
        package_name=config.package_name,
        language=config.language,
        framework=config.framework,
        components=components,
        dependencies=catalog.dependencies,
        plugins=catalog.plugins,
        simbot_version=config.simbot_version,
        gradle_version=config.gradle_version,
        gradle_distribution_base=config.gradle_distribution_base,
        notes=catalog.notes,
        generated_at=generated_at,
    )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _registry_errors(
    component_ids: Iterable[str], framework_kind: str | None, starters: Iterable[str]
) -> list[str]:
    errors: list[str] = []
    for component_id in component_ids:
        if component_id not in registry.COMPONENTS:
            known = ", ".join(sorted(registry.COMPONENTS))
            errors.append(f"components: unknown component '{component_id}' (known: {known})")
    starters = list(starters)
    for starter_id in starters:
        if starter_id not in registry.SPRING_STARTERS:
            errors.append(f"spring_starters: unknown starter '{starter_id}'")
    if starters and framework_kind not in (None, "spring"):
        errors.append("spring_starters: starters require the spring framework")
    return errors


def _raw_registry_fields(data: Mapping[str, Any]) -> tuple[list[str], str | None, list[str]]:
    """Pull component ids, framework kind and starters out of raw input."""
    component_ids: list[str] = []
    for item in data.get("components") or ():
        if isinstance(item, Mapping) and isinstance(item.get("component_id"), str):
            component_ids.append(item["component_id"])
        elif isinstance(item, ComponentSelection):
            component_ids.append(item.component_id)

    framework = data.get("framework")
    if isinstance(framework, Mapping):
        framework_kind = framework.get("kind")
    elif framework is None:
        framework_kind = "spring"
    else:
        framework_kind = getattr(framework, "kind", None)

    starters = [s for s in data.get("spring_starters") or () if isinstance(s, str)]
    return component_ids, framework_kind, starters


def validate_config(data: GenerationConfig | Mapping[str, Any]) -> GenerationConfig:
    """Validate user input and registry references in one pass.

    Args:
        data: A raw mapping (e.g. parsed JSON) or an already-built config.

    Returns:
        The validated ``GenerationConfig``.

    Raises:
        ConfigurationInvalid: With every violation found, not just the first.
    """
    errors: list[str] = []
    config: GenerationConfig | None = None

    if isinstance(data, GenerationConfig):
        config = data
    else:
        try:
            config = GenerationConfig.model_validate(data)
        except ValidationError as exc:
            errors.extend(format_validation_error(exc))

    if config is not None:
        errors.extend(
            _registry_errors(
                (s.component_id for s in config.components),
                config.framework.kind,
                config.spring_starters,
            )
        )
    else:
        errors.extend(_registry_errors(*_raw_registry_fields(data)))

    if errors:
        raise ConfigurationInvalid(errors)
    return config
