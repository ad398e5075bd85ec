"""Shared pytest fixtures for the simbot-codegen test suite.

Provides reusable fixtures for:
- Generation configs covering each language/framework axis
- In-memory sinks and a shared template renderer
- Mocked httpx clients for release lookups
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from simbot_codegen.catalog import registry
from simbot_codegen.models import (
    ComponentSelection,
    CoreFramework,
    GenerationConfig,
    JavaLanguage,
    JavaStyle,
    KotlinLanguage,
    SpringFramework,
)
from simbot_codegen.scaffolder.sink import MemorySink
from simbot_codegen.scaffolder.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Configs
# ---------------------------------------------------------------------------


def selection(component_id: str) -> ComponentSelection:
    """Select a component at its pinned version."""
    return ComponentSelection(
        component_id=component_id,
        version=registry.COMPONENTS[component_id].pinned_version,
    )


@pytest.fixture
def demo_config() -> GenerationConfig:
    """Kotlin 2.0 + Spring 3.3 project without components."""
    return GenerationConfig(
        project_name="demo",
        package_name="com.example",
        language=KotlinLanguage(version="2.0"),
        framework=SpringFramework(version="3.3"),
    )


@pytest.fixture
def demo_qq_config(demo_config: GenerationConfig) -> GenerationConfig:
    """The demo project with the QQ component selected."""
    return demo_config.model_copy(update={"components": (selection("qq"),)})


@pytest.fixture
def java_core_config() -> GenerationConfig:
    """Java blocking + Core project with the KOOK component."""
    return GenerationConfig(
        project_name="bot",
        package_name="org.sample.bot",
        language=JavaLanguage(version="17", style=JavaStyle.BLOCKING),
        framework=CoreFramework(),
        components=(selection("kook"),),
    )


@pytest.fixture(
    params=[
        (KotlinLanguage(), SpringFramework()),
        (KotlinLanguage(), CoreFramework()),
        (JavaLanguage(style=JavaStyle.BLOCKING), SpringFramework()),
        (JavaLanguage(style=JavaStyle.BLOCKING), CoreFramework()),
        (JavaLanguage(style=JavaStyle.ASYNC), SpringFramework()),
        (JavaLanguage(style=JavaStyle.ASYNC), CoreFramework()),
    ],
    ids=["kt-spring", "kt-core", "java-spring", "java-core", "java-async-spring", "java-async-core"],
)
def any_config(request) -> GenerationConfig:
    """Every language/framework/style combination, with two components."""
    language, framework = request.param
    return GenerationConfig(
        project_name="combo",
        package_name="love.forte.demo",
        language=language,
        framework=framework,
        components=(selection("qq"), selection("onebot")),
    )


@pytest.fixture
def fixed_time() -> datetime:
    return datetime(2024, 1, 2, 3, 4, 5)


# ---------------------------------------------------------------------------
# Scaffolder helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_sink() -> MemorySink:
    return MemorySink()


@pytest.fixture(scope="session")
def renderer() -> TemplateRenderer:
    """Renderer over the bundled templates."""
    return TemplateRenderer()


# ---------------------------------------------------------------------------
# httpx mocking
# ---------------------------------------------------------------------------


def make_release_response(tag: str, published_at: str = "2024-05-01T10:00:00Z") -> MagicMock:
    """Build a mocked ``httpx.Response`` for ``/releases/latest``."""
    response = MagicMock()
    response.json.return_value = {"tag_name": tag, "published_at": published_at}
    response.raise_for_status = MagicMock()
    return response


@pytest.fixture
def mock_http_client():
    """An ``AsyncMock`` usable as ``async with httpx.AsyncClient(...)``.

    Usage::

        def test_something(mock_http_client):
            mock_http_client.get.return_value = make_release_response("v1.0.0")
            with patch("httpx.AsyncClient", return_value=mock_http_client):
                ...
    """
    client = AsyncMock()
    client.get = AsyncMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


def raw_request(**overrides: Any) -> dict[str, Any]:
    """A raw pipeline request mapping."""
    data: dict[str, Any] = {
        "project_name": "demo",
        "package_name": "com.example",
        "language": {"kind": "kotlin"},
        "framework": {"kind": "spring"},
        "components": [],
    }
    data.update(overrides)
    return data
