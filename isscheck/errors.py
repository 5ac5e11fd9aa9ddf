"""
Exceptions for the installer/registry consistency checker.

Only ConfigurationError aborts a run. It reaches the user either as one
stderr line or, with --format json, as the "error" object of the report.
Registry errors are raised by the loader and turned into findings by the
checks, so a broken registry never hides problems in the other installers.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional


class InstallerCheckError(Exception):
    """
    Base exception for all checker errors.

    Attributes:
        message: What went wrong
        context: Where it went wrong (setting, file, line, ...)
        suggestion: How to fix it, when known
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ):
        self.message = message
        self.context = dict(context or {})
        self.suggestion = suggestion
        super().__init__(self.describe())

    def describe(self) -> str:
        """Console line: message, then (key=value, ...), then the fix."""
        text = self.message
        if self.context:
            details = ", ".join(
                f"{key}={', '.join(map(str, value)) if isinstance(value, list) else value}"
                for key, value in self.context.items()
            )
            text += f" ({details})"
        if self.suggestion:
            text += f". {self.suggestion}"
        return text

    def to_dict(self) -> Dict[str, Any]:
        """Error object of a JSON report."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.context,
            "suggestion": self.suggestion,
        }


class ConfigurationError(InstallerCheckError):
    """
    Raised when the run itself cannot be configured.

    Covers missing or unreadable input folders, broken settings files and
    unknown check names. Fatal for the whole run.
    """

    def __init__(
        self,
        message: str,
        setting: Optional[str] = None,
        path: Optional[Path] = None,
        available: Optional[List[str]] = None,
        suggestion: Optional[str] = None,
    ):
        self.setting = setting
        self.path = path
        self.available = available or []

        context: Dict[str, Any] = {}
        if setting:
            context["setting"] = setting
        if path is not None:
            context["path"] = str(path)
        if available:
            context["available"] = available
            if suggestion is None:
                suggestion = f"Use one of: {', '.join(available)}"

        super().__init__(message, context=context, suggestion=suggestion)


class RegistryError(InstallerCheckError):
    """Base class for per-file registry problems."""

    def __init__(self, message: str, path: Path, suggestion: Optional[str] = None, **context: Any):
        self.path = Path(path)
        super().__init__(
            message,
            context={"file": str(self.path), **context},
            suggestion=suggestion,
        )


class RegistryNotFoundError(RegistryError):
    """
    Raised when the registry paired with an installer does not exist.

    Recoverable: the caller reports it and moves on to the next installer.
    """

    def __init__(self, path: Path):
        super().__init__(
            f"Registry file '{Path(path).name}' not found",
            path=path,
            suggestion=f"Create {Path(path).name} in the registries folder",
        )


class RegistryParseError(RegistryError):
    """
    Raised when a registry file exists but is not valid registry data.

    Carries the line/column for JSON syntax errors and the offending
    location for shape errors, when known.
    """

    def __init__(
        self,
        path: Path,
        reason: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        location: Optional[str] = None,
    ):
        self.reason = reason
        self.line = line
        self.column = column
        self.location = location

        context: Dict[str, Any] = {}
        if line is not None:
            context["line"] = line
        if column is not None:
            context["column"] = column
        if location:
            context["location"] = location

        suggestion = "Expected a JSON array of [name, url, filename, version, ...] records"
        if line:
            suggestion = f"Check line {line} for JSON syntax errors"

        super().__init__(
            f"Invalid registry file '{Path(path).name}': {reason}",
            path=path,
            suggestion=suggestion,
            **context,
        )
