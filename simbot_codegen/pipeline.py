"""simbot-codegen pipeline and CLI.

:func:`generate_project` is the synchronous core: validate, resolve, write.
:class:`Pipeline` wraps it for interactive use with an optional release
lookup, zip or directory output, and console reporting.

Usage::

    python -m simbot_codegen.pipeline demo --component qq --component kook
    python -m simbot_codegen.pipeline demo --language java --java-style async --framework core
"""

from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from rich.panel import Panel

from simbot_codegen.catalog import registry, resolve, validate_config
from simbot_codegen.config import Settings
from simbot_codegen.models import ConfigurationInvalid, GenerationConfig, GenerationContext
from simbot_codegen.scaffolder.generators import create_generator
from simbot_codegen.scaffolder.sink import (
    MemorySink,
    OutputSink,
    OutputSinkError,
    build_zip,
    export_tree,
)
from simbot_codegen.scaffolder.templates import TemplateRenderer
from simbot_codegen.utils import (
    console,
    format_size,
    print_error,
    print_file_tree,
    print_success,
    print_summary_table,
    print_warning,
)
from simbot_codegen.version_client import (
    ReleaseClient,
    resolve_selection_versions,
    resolve_simbot_version,
)

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class GenerationFailed(Exception):
    """Raised when writing the project fails; no partial output is delivered."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Generation failed at {path}: {message}")


# ---------------------------------------------------------------------------
# Core generation
# ---------------------------------------------------------------------------


def generate_project(
    config: GenerationConfig | Mapping[str, Any],
    sink: OutputSink,
    *,
    generated_at: datetime | None = None,
    renderer: TemplateRenderer | None = None,
) -> GenerationContext:
    """Generate one project into *sink*.

    Args:
        config: A ``GenerationConfig`` or the raw mapping to validate.
        sink: Destination of every folder and file.
        generated_at: Optional timestamp for the wrapper properties comment.
        renderer: Template renderer override.

    Returns:
        The resolved context, including resolver notes.

    Raises:
        ConfigurationInvalid: If the configuration is rejected.  Nothing is
            written in that case.
        GenerationFailed: If the sink rejects a folder or file.  Whatever
            was already written is discarded first.
    """
    validated = validate_config(config)
    context = resolve(validated, generated_at=generated_at)
    generator = create_generator(context, renderer)
    try:
        generator.generate(sink, context)
    except OutputSinkError as exc:
        sink.discard()
        raise GenerationFailed(exc.path, str(exc)) from exc
    return context


def _component_entry(item: str | Mapping[str, Any], versions: Mapping[str, str]) -> Any:
    """Normalise a component given by id into a selection mapping."""
    if not isinstance(item, str):
        return item
    version = versions.get(item)
    if version is None and item in registry.COMPONENTS:
        version = registry.COMPONENTS[item].pinned_version
    return {"component_id": item, "version": version or "unspecified"}


def build_request(
    request: Mapping[str, Any],
    component_versions: Mapping[str, str] | None = None,
    simbot_version: str | None = None,
) -> dict[str, Any]:
    """Fill component versions into a raw request.

    Components may be given as bare ids; they receive the looked-up version
    or the pinned one.  Explicit ``{"component_id", "version"}`` entries are
    kept as they are.
    """
    versions = component_versions or {}
    data = dict(request)
    data["components"] = [_component_entry(c, versions) for c in request.get("components") or ()]
    if simbot_version and "simbot_version" not in request:
        data["simbot_version"] = simbot_version
    return data


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class Pipeline:
    """Interactive generation run.

    Attributes:
        settings: Output and lookup settings.
        client: Release client, used only when lookups are enabled.
    """

    def __init__(self, settings: Settings, client: ReleaseClient | None = None) -> None:
        self.settings = settings
        self.client = client or ReleaseClient(
            base_url=settings.lookup.api_url,
            timeout=settings.lookup.timeout,
        )

    async def _lookup_versions(
        self, request: Mapping[str, Any]
    ) -> tuple[dict[str, str], str | None]:
        ids = [c for c in request.get("components") or () if isinstance(c, str)]
        (simbot_version, simbot_error), (versions, errors) = await asyncio.gather(
            resolve_simbot_version(self.client),
            resolve_selection_versions(self.client, ids),
        )
        for error in filter(None, [simbot_error, *errors]):
            print_warning(f"Release lookup failed, using pinned version: {error}")
        return versions, simbot_version

    async def run(self, request: Mapping[str, Any]) -> dict[str, Any]:
        """Generate the project described by *request*.

        Args:
            request: Raw configuration mapping.  ``components`` may list
                bare component ids.

        Returns:
            A result dictionary with ``success``, ``output``, ``files``,
            ``notes`` and ``errors``.
        """
        result: dict[str, Any] = {
            "success": False,
            "output": None,
            "files": [],
            "notes": [],
            "errors": [],
        }

        versions: dict[str, str] = {}
        simbot_version: str | None = None
        if self.settings.lookup.enabled:
            versions, simbot_version = await self._lookup_versions(request)

        data = build_request(request, versions, simbot_version)
        sink = MemorySink()
        try:
            context = generate_project(data, sink)
        except ConfigurationInvalid as exc:
            result["errors"] = exc.errors
            for error in exc.errors:
                print_error(error)
            return result
        except GenerationFailed as exc:
            result["errors"] = [str(exc)]
            print_error(str(exc))
            return result

        result["notes"] = list(context.notes)
        for note in context.notes:
            print_warning(note)

        try:
            output = await asyncio.to_thread(self._deliver, sink, context.project_name)
        except OutputSinkError as exc:
            result["errors"] = [str(exc)]
            print_error(str(exc))
            return result

        result.update(success=True, output=str(output), files=sink.paths())
        print_file_tree(sink.paths(), title=context.project_name)
        print_summary_table(
            {
                "Project": context.project_name,
                "Language": f"{context.language.display} {context.language.version}",
                "Framework": context.framework.display,
                "Components": ", ".join(c.component_id for c in context.components) or "-",
                "Dependencies": str(len(context.dependencies)),
                "Files": str(len(sink.files)),
                "Output": str(output),
            },
            title="Generated project",
        )
        return result

    def _deliver(self, sink: MemorySink, project_name: str) -> Path:
        """Write the finished tree as a zip or into the output directory."""
        output_dir = self.settings.output_dir
        if self.settings.archive:
            target = self.settings.archive_path(project_name)
            payload = build_zip(sink)
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(payload)
            except OSError as exc:
                raise OutputSinkError(str(target), f"cannot write archive: {exc}") from exc
            console.print(f"  [green]+[/green] Archive written ({format_size(len(payload))})")
            return target

        export_tree(sink, output_dir)
        return output_dir / project_name


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``python -m simbot_codegen.pipeline``."""
    import argparse

    parser = argparse.ArgumentParser(
        description="simbot-codegen -- generate a simbot Gradle project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python -m simbot_codegen.pipeline demo --component qq\n"
            "  python -m simbot_codegen.pipeline demo --language java --framework core\n"
            "  python -m simbot_codegen.pipeline --config request.json --no-archive\n"
        ),
    )

    parser.add_argument("project_name", nargs="?", help="Project name and root folder")
    parser.add_argument("--config", default=None, help="JSON file with a full request")
    parser.add_argument("--package", default="com.example", help="Root package")
    parser.add_argument("--language", choices=["kotlin", "java"], default="kotlin")
    parser.add_argument("--language-version", default=None, help="Kotlin or Java version")
    parser.add_argument("--java-style", choices=["blocking", "async"], default="blocking")
    parser.add_argument("--framework", choices=["spring", "core"], default="spring")
    parser.add_argument("--spring-version", default=None, help="Spring Boot version")
    parser.add_argument(
        "--component", "-c",
        action="append",
        default=[],
        choices=sorted(registry.COMPONENTS),
        help="Component to include (repeatable)",
    )
    parser.add_argument(
        "--starter", "-s",
        action="append",
        default=[],
        help="Spring Boot starter to include (repeatable)",
    )
    parser.add_argument("--output", "-o", default=None, help="Output directory")
    parser.add_argument(
        "--no-archive",
        action="store_true",
        help="Write a directory instead of a zip archive",
    )
    parser.add_argument(
        "--lookup",
        action="store_true",
        help="Look up the latest simbot and component releases on GitHub",
    )

    args = parser.parse_args(argv)

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            console.print(f"[bold red]Error:[/bold red] Config file not found: {config_path}")
            sys.exit(1)
        request = json.loads(config_path.read_text(encoding="utf-8"))
    elif args.project_name:
        request = _request_from_args(args)
    else:
        parser.error("a project name or --config is required")

    settings = Settings.from_env()
    if args.output:
        settings.output_dir = Path(args.output)
    if args.no_archive:
        settings.archive = False
    if args.lookup:
        settings.lookup.enabled = True

    console.print(
        Panel(
            f"[bold bright_cyan]simbot-codegen[/bold bright_cyan]\n"
            f"Project : {request.get('project_name', '?')}\n"
            f"Output  : {settings.output_dir.resolve()}",
            border_style="bright_cyan",
        )
    )

    result = asyncio.run(Pipeline(settings).run(request))

    if result.get("success"):
        print_success("Project generated successfully!")
    else:
        print_error("Generation failed.")
        sys.exit(1)


def _request_from_args(args: Any) -> dict[str, Any]:
    language: dict[str, Any] = {"kind": args.language}
    if args.language == "java":
        language["style"] = args.java_style
    if args.language_version:
        language["version"] = args.language_version

    framework: dict[str, Any] = {"kind": args.framework}
    if args.framework == "spring" and args.spring_version:
        framework["version"] = args.spring_version

    return {
        "project_name": args.project_name,
        "package_name": args.package,
        "language": language,
        "framework": framework,
        "components": list(dict.fromkeys(args.component)),
        "spring_starters": list(args.starter),
    }


if __name__ == "__main__":
    main()
