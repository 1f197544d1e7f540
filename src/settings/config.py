from __future__ import annotations

import tomllib
from pathlib import Path

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from edits.models import Mode, Position

CONFIG_FILENAME = "argshift.toml"

DEFAULT_SKIP_DIRS = (
    ".git",
    ".hg",
    ".tox",
    ".venv",
    "__pycache__",
    "node_modules",
    "venv",
)


class ProjectConfig(BaseModel):
    """Per-tree settings read from argshift.toml."""

    model_config = ConfigDict(extra="forbid")

    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to include (empty = all Python files)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to exclude",
    )
    skip_dirs: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SKIP_DIRS),
        description="Directory names never descended into",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )
    color: bool | None = Field(
        default=None,
        description="Force ANSI colour on or off (default: auto-detect)",
    )


class RunConfig(BaseModel):
    """Validated parameters of one refactoring run."""

    model_config = ConfigDict(frozen=True)

    fn_name: str = Field(description="Name of the function whose calls are edited")
    mode: Mode
    position: Position
    default_value: str | None = Field(
        default=None,
        description="Argument text inserted in add mode",
    )
    directory: Path = Field(default=Path("."))

    @field_validator("fn_name")
    @classmethod
    def validate_fn_name(cls, v: str) -> str:
        name = v.strip()
        if not name:
            msg = "function name must not be empty"
            raise ValueError(msg)
        parts = name.split(".")
        if not all(part.isidentifier() for part in parts):
            msg = f"'{v}' is not a function name or dotted path"
            raise ValueError(msg)
        return name

    @field_validator("default_value")
    @classmethod
    def strip_default_value(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else None

    @model_validator(mode="after")
    def validate_mode_value(self) -> RunConfig:
        if self.mode is Mode.ADD and not (self.default_value or "").strip():
            msg = "add mode requires a non-empty argument value"
            raise ValueError(msg)
        if self.mode is Mode.REMOVE and self.default_value is not None:
            msg = "remove mode does not take an argument value"
            raise ValueError(msg)
        return self


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def load_config(root: Path) -> ProjectConfig:
    """Load configuration from argshift.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return ProjectConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
