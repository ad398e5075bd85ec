"""Tests for generator composition (simbot_codegen.scaffolder.generators).

Covers:
- Exact file sets for the demo scenarios
- Kotlin vs Java source layout, Spring vs Core resources
- Identical folder skeleton when switching Kotlin to Java
- Write order of the composite generator
- Cross-file consistency (package, class and bot file names)
- Sink failures propagating out of the chain
"""

from __future__ import annotations

import pytest

from simbot_codegen.catalog import resolve
from simbot_codegen.models import CoreFramework, JavaLanguage, JavaStyle, SpringFramework
from simbot_codegen.scaffolder.generators import (
    CompositeGenerator,
    ConfigurationGenerator,
    ProjectStructureGenerator,
    SourceCodeGenerator,
    create_generator,
)
from simbot_codegen.scaffolder.sink import MemorySink, OutputSinkError


pytestmark = pytest.mark.unit


ROOT_FILES = [
    "build.gradle.kts",
    "settings.gradle.kts",
    "gradle/libs.versions.toml",
    "gradle/wrapper/gradle-wrapper.properties",
    "gradlew",
    "gradlew.bat",
    "gradle.properties",
    "README.md",
]


def _generate(config) -> tuple[MemorySink, list[str]]:
    context = resolve(config)
    sink = MemorySink()
    written = create_generator(context).generate(sink, context)
    return sink, written


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


def test_demo_without_components(demo_config):
    sink, written = _generate(demo_config)

    assert written == [f"demo/{name}" for name in ROOT_FILES] + [
        "demo/src/main/kotlin/com/example/MainApplication.kt",
        "demo/src/main/kotlin/com/example/handle/MyEventHandles.kt",
        "demo/src/main/resources/application.yml",
    ]
    assert sorted(written) == sink.paths()
    assert not any("simbot-bots" in folder for folder in sink.folders)


def test_demo_with_component(demo_qq_config, demo_config):
    sink, _ = _generate(demo_qq_config)
    baseline, _ = _generate(demo_config)

    extra = set(sink.paths()) - set(baseline.paths())
    assert extra == {"demo/src/main/resources/simbot-bots/qq-example.bot.json"}

    catalog = sink.read("demo/gradle/libs.versions.toml")
    assert "simbot-component-qq-guild-core" in catalog
    assert catalog.count("ktor-client-java = ") == 1


def test_java_core_layout(java_core_config):
    sink, written = _generate(java_core_config)

    assert written[len(ROOT_FILES):] == [
        "bot/src/main/java/org/sample/bot/MainApplication.java",
        "bot/src/main/java/org/sample/bot/handle/EventHandlers.java",
        "bot/src/main/resources/simbot.properties",
        "bot/src/main/resources/simbot-bots/kook-example.bot.json",
    ]


def test_file_count_per_combination(any_config):
    sink, written = _generate(any_config)
    # root files + 2 sources + app config + 2 bot files
    assert len(written) == len(ROOT_FILES) + 2 + 1 + 2
    assert len(set(written)) == len(written)


# ---------------------------------------------------------------------------
# Cross-file consistency
# ---------------------------------------------------------------------------


def test_sources_agree_with_paths(any_config):
    sink, written = _generate(any_config)
    context = resolve(any_config)
    ext = context.language.file_extension
    base = f"combo/src/main/{context.language.source_root}/love/forte/demo"

    main = sink.read(f"{base}/MainApplication.{ext}")
    handler_path = next(p for p in written if "/handle/" in p)
    handler = sink.read(handler_path)

    assert main.startswith("package love.forte.demo")
    assert handler.startswith("package love.forte.demo.handle")
    handler_name = handler_path.rsplit("/", 1)[-1].split(".")[0]
    if not context.is_spring:
        assert handler_name in main


@pytest.mark.parametrize("framework", [SpringFramework(), CoreFramework()], ids=["spring", "core"])
@pytest.mark.parametrize("style", list(JavaStyle), ids=lambda s: s.value)
def test_language_switch_keeps_skeleton(demo_qq_config, framework, style):
    kotlin = demo_qq_config.model_copy(update={"framework": framework})
    java = kotlin.model_copy(update={"language": JavaLanguage(style=style)})

    kotlin_sink, kotlin_paths = _generate(kotlin)
    java_sink, java_paths = _generate(java)

    def as_java(path: str) -> str:
        return path.replace("/src/main/kotlin", "/src/main/java")

    assert sorted(as_java(f) for f in kotlin_sink.folders) == sorted(java_sink.folders)
    assert sorted(p.count("/") for p in kotlin_paths) == sorted(p.count("/") for p in java_paths)
    assert sorted(as_java(p).rsplit("/", 1)[0] for p in kotlin_paths) == sorted(
        p.rsplit("/", 1)[0] for p in java_paths
    )


def test_bot_files_referenced_by_app_config(any_config):
    sink, written = _generate(any_config)
    bot_files = [p.rsplit("/", 1)[-1] for p in written if "/simbot-bots/" in p]
    assert bot_files == ["qq-example.bot.json", "onebot-example.bot.json"]

    app_config = next(p for p in written if p.endswith(("application.yml", "simbot.properties")))
    text = sink.read(app_config)
    assert "simbot-bots" in text


def test_build_script_references_catalog_entries(demo_qq_config):
    sink, _ = _generate(demo_qq_config)
    script = sink.read("demo/build.gradle.kts")
    catalog = sink.read("demo/gradle/libs.versions.toml")
    for line in script.splitlines():
        line = line.strip()
        if line.startswith(("implementation(libs.", "runtimeOnly(libs.")):
            key = line.split("libs.", 1)[1].rstrip(")").replace(".", "-")
            assert f"\n{key} = " in catalog


def test_generation_is_deterministic(demo_qq_config):
    first, _ = _generate(demo_qq_config)
    second, _ = _generate(demo_qq_config)
    assert first.files == second.files


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def test_create_generator_order(demo_config):
    generator = create_generator(resolve(demo_config))
    assert isinstance(generator, CompositeGenerator)
    assert [type(g) for g in generator.generators] == [
        ProjectStructureGenerator,
        SourceCodeGenerator,
        ConfigurationGenerator,
    ]


def test_generators_share_renderer(demo_config, renderer):
    generator = create_generator(resolve(demo_config), renderer)
    assert all(g.renderer is renderer for g in generator.generators)


def test_single_generator(demo_config):
    context = resolve(demo_config)
    sink = MemorySink()
    written = ConfigurationGenerator().generate(sink, context)
    assert written == ["demo/src/main/resources/application.yml"]


class FailingSink(MemorySink):
    """Rejects one path."""

    def __init__(self, failing_name: str) -> None:
        super().__init__()
        self.failing_name = failing_name

    def _write_file(self, path: str, content: str) -> None:
        if path.endswith(self.failing_name):
            raise OutputSinkError(path, "disk full")
        super()._write_file(path, content)


def test_sink_failure_aborts_chain(demo_config):
    context = resolve(demo_config)
    sink = FailingSink("README.md")
    with pytest.raises(OutputSinkError, match="disk full"):
        create_generator(context).generate(sink, context)
    assert not any("/src/" in p for p in sink.paths())
