"""simbot-codegen catalog -- static registry and dependency resolution.

Quick usage::

    from simbot_codegen.catalog import resolve, validate_config

    config = validate_config({"project_name": "demo", "components": []})
    context = resolve(config)
    print([d.name for d in context.dependencies])
"""

from simbot_codegen.catalog.registry import COMPONENTS, SPRING_STARTERS, get_component
from simbot_codegen.catalog.resolver import (
    DEFAULT_RULES,
    Catalog,
    build_catalog,
    resolve,
    validate_config,
)

__all__ = [
    "COMPONENTS",
    "Catalog",
    "DEFAULT_RULES",
    "SPRING_STARTERS",
    "build_catalog",
    "get_component",
    "resolve",
    "validate_config",
]
