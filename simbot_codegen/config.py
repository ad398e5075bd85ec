"""simbot-codegen runtime settings.

Settings for the outer pipeline and CLI: where output goes, whether it is
archived, and how the optional release lookup behaves.  These never affect
what a given :class:`~simbot_codegen.models.GenerationConfig` renders to.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class LookupConfig(BaseModel):
    """Configuration for the GitHub release lookup."""

    enabled: bool = Field(default=False, description="Query latest releases before generating")
    api_url: str = Field(default="https://api.github.com")
    timeout: float = Field(default=5.0, gt=0, description="Per-request timeout in seconds")


class Settings(BaseModel):
    """Global simbot-codegen settings.

    Created once by the CLI entry point (or ``Settings.from_env()``) and
    passed to :class:`~simbot_codegen.pipeline.Pipeline`.
    """

    output_dir: Path = Field(default=Path("./output"))
    archive: bool = Field(default=True, description="Write a .zip instead of a directory")
    lookup: LookupConfig = Field(default_factory=LookupConfig)

    def archive_path(self, project_name: str) -> Path:
        """Path of the zip written for *project_name*."""
        return self.output_dir / f"{project_name}.zip"

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the settings to a JSON file.

        Args:
            path: Destination file. Defaults to ``<output_dir>/settings.json``.

        Returns:
            The path where the file was written.
        """
        target = path or (self.output_dir / "settings.json")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Settings":
        """Load previously-saved settings from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            SIMBOT_CODEGEN_OUTPUT_DIR, SIMBOT_CODEGEN_ARCHIVE,
            SIMBOT_CODEGEN_LOOKUP, SIMBOT_CODEGEN_API_URL,
            SIMBOT_CODEGEN_LOOKUP_TIMEOUT.
        """
        lookup_kwargs: dict[str, Any] = {}
        if os.environ.get("SIMBOT_CODEGEN_LOOKUP"):
            lookup_kwargs["enabled"] = _env_flag(os.environ["SIMBOT_CODEGEN_LOOKUP"])
        if os.environ.get("SIMBOT_CODEGEN_API_URL"):
            lookup_kwargs["api_url"] = os.environ["SIMBOT_CODEGEN_API_URL"]
        if os.environ.get("SIMBOT_CODEGEN_LOOKUP_TIMEOUT"):
            lookup_kwargs["timeout"] = float(os.environ["SIMBOT_CODEGEN_LOOKUP_TIMEOUT"])

        return cls(
            output_dir=Path(os.environ.get("SIMBOT_CODEGEN_OUTPUT_DIR", "./output")),
            archive=_env_flag(os.environ.get("SIMBOT_CODEGEN_ARCHIVE", "1")),
            lookup=LookupConfig(**lookup_kwargs),
        )


def _env_flag(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}
