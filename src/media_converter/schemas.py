"""Pydantic schemas for runtime validation of conversion inputs."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator


class BatchConversionConfig(BaseModel):
    """Validated input for a directory conversion run."""

    model_config = ConfigDict(extra="forbid")

    root: Path
    plugin_name: str
    output_template: str | None = None
    recurse: bool = True

    @field_validator("root")
    @classmethod
    def _validate_root(cls, value: Path) -> Path:
        if not value.is_dir():
            raise ValueError(f"root must be an existing directory: {value}")
        return value

    @field_validator("plugin_name")
    @classmethod
    def _validate_plugin_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("plugin_name cannot be empty.")
        return value

    @field_validator("output_template")
    @classmethod
    def _validate_template(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("output_template cannot be blank.")
        return value
