"""
Checker Settings
================

Settings of one checker run, validated with Pydantic.

Sources, highest precedence first:
1. CLI flags (explicit user intent)
2. Settings file (YAML, passed with --config)
3. Defaults defined on CheckerSettings

Example settings file:

    installers_folder: ../installers
    registries_folder: ../registry/next
    checks: [pairing, entries, content]
    fail_on_findings: true

Relative folders in a settings file are resolved against the directory of
that file, so the build can call the checker from anywhere.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .core.config import INSTALLER_EXTENSION, REGISTRY_EXTENSION
from .errors import ConfigurationError
from .utils.logger import logger
from .validation.report import CheckName


class OutputFormat(str, Enum):
    """How findings are written out."""
    TEXT = "text"
    JSON = "json"


class CheckerSettings(BaseModel):
    """Validated settings of one checker run."""

    installers_folder: Path = Field(
        ...,  # Required
        description="Folder holding the installer scripts",
    )
    registries_folder: Path = Field(
        ...,  # Required
        description="Folder holding the 'next' registry files",
    )
    installer_extension: str = Field(
        default=INSTALLER_EXTENSION,
        pattern=r"^\.[A-Za-z0-9]+$",
        description="Extension of installer scripts",
    )
    registry_extension: str = Field(
        default=REGISTRY_EXTENSION,
        pattern=r"^\.[A-Za-z0-9]+$",
        description="Extension of registry files",
    )
    checks: List[CheckName] = Field(
        default_factory=lambda: list(CheckName),
        min_length=1,
        description="Check categories to run",
    )
    verbose: bool = Field(
        default=False,
        description="Also print per-installer progress lines",
    )
    output_format: OutputFormat = Field(
        default=OutputFormat.TEXT,
        description="Report format",
    )
    fail_on_findings: bool = Field(
        default=False,
        description="Exit non-zero when any discrepancy is found",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Level of the diagnostic logger",
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Optional diagnostic log file",
    )

    model_config = {
        "extra": "forbid",  # Reject unknown keys in settings files
        "str_strip_whitespace": True,
    }

    @field_validator("checks")
    @classmethod
    def _dedupe_checks(cls, checks: List[CheckName]) -> List[CheckName]:
        """Keep the first occurrence of each check."""
        seen: List[CheckName] = []
        for check in checks:
            if check not in seen:
                seen.append(check)
        return seen

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


_FOLDER_KEYS = ("installers_folder", "registries_folder", "log_file")


def load_settings_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML settings file into a plain dict.

    Raises:
        ConfigurationError: File missing, invalid YAML, or not a mapping
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError("Settings file not found", setting="config", path=path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        line = None
        if getattr(e, "problem_mark", None) is not None:
            line = e.problem_mark.line + 1
        raise ConfigurationError(
            f"YAML syntax error in settings file: {e}",
            setting="config",
            path=path,
            suggestion=f"Check line {line} for syntax errors" if line else None,
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Settings file root must be a mapping", setting="config", path=path
        )

    for key in _FOLDER_KEYS:
        value = data.get(key)
        if isinstance(value, str) and not Path(value).expanduser().is_absolute():
            data[key] = str(path.parent / value)

    logger.debug(f"Loaded settings from {path}")
    return data


def resolve_settings(
    cli_overrides: Optional[Dict[str, Any]] = None,
    file_settings: Optional[Dict[str, Any]] = None,
) -> CheckerSettings:
    """
    Merge settings from all sources with precedence.

    CLI values of None mean "not given" and never override the file.

    Raises:
        ConfigurationError: The merged settings do not validate
    """
    merged: Dict[str, Any] = dict(file_settings or {})
    for key, value in (cli_overrides or {}).items():
        if value is not None:
            merged[key] = value

    try:
        return CheckerSettings.model_validate(merged)
    except ValidationError as e:
        first = e.errors()[0]
        field_path = ".".join(str(p) for p in first.get("loc", ())) or None
        suggestion = None
        if first.get("type") == "missing" and field_path in ("installers_folder", "registries_folder"):
            flag = "--installers" if field_path == "installers_folder" else "--registries"
            suggestion = f"Pass {flag} or set {field_path} in the settings file"
        available = [c.value for c in CheckName] if field_path and field_path.startswith("checks") else None
        raise ConfigurationError(
            f"Invalid settings: {first.get('msg', e)}",
            setting=field_path,
            available=available,
            suggestion=suggestion,
        ) from e
