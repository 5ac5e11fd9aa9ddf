"""
Check Run Context
=================

Everything one checker run needs, passed explicitly to every check:

- the two input folders and the file extensions in use
- the enumerated installer scripts and registry filenames (sorted, so the
  finding order is stable for a fixed set of files)
- the reporter that findings are streamed to
- the append-only list of findings

Checks never keep state of their own. Building a context by hand with
synthetic paths is enough to exercise any single check in isolation.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from ..core.config import INSTALLER_EXTENSION, REGISTRY_EXTENSION
from ..core.naming import installer_to_registry_name
from ..errors import ConfigurationError
from ..utils.logger import logger
from .report import CheckName, Finding, NullReporter, Reporter


def require_folder(path: Union[str, Path], setting: str) -> Path:
    """
    Resolve an input folder, or fail the run.

    Raises:
        ConfigurationError: Folder missing, not a directory, or unreadable
    """
    folder = Path(path).expanduser()
    if not folder.exists():
        raise ConfigurationError(
            f"{setting.replace('_', ' ').capitalize()} not found",
            setting=setting,
            path=folder,
            suggestion=f"Point {setting} at an existing directory",
        )
    if not folder.is_dir():
        raise ConfigurationError(
            f"{setting.replace('_', ' ').capitalize()} is not a directory",
            setting=setting,
            path=folder,
        )
    if not os.access(folder, os.R_OK | os.X_OK):
        raise ConfigurationError(
            f"{setting.replace('_', ' ').capitalize()} is not readable",
            setting=setting,
            path=folder,
            suggestion="Check the folder permissions of the build user",
        )
    return folder.resolve()


@dataclass
class CheckContext:
    """Explicit state of one checker run."""
    installers_folder: Path
    registries_folder: Path
    installer_paths: List[Path]
    registry_names: List[str]
    reporter: Reporter = field(default_factory=NullReporter)
    installer_extension: str = INSTALLER_EXTENSION
    registry_extension: str = REGISTRY_EXTENSION
    findings: List[Finding] = field(default_factory=list)

    @classmethod
    def discover(
        cls,
        installers_folder: Union[str, Path],
        registries_folder: Union[str, Path],
        reporter: Optional[Reporter] = None,
        installer_extension: str = INSTALLER_EXTENSION,
        registry_extension: str = REGISTRY_EXTENSION,
    ) -> "CheckContext":
        """
        Enumerate both folders and build a context.

        Raises:
            ConfigurationError: Either folder is missing or unreadable
        """
        installers = require_folder(installers_folder, "installers_folder")
        registries = require_folder(registries_folder, "registries_folder")

        installer_paths = sorted(installers.glob(f"*{installer_extension}"))
        registry_names = sorted(p.name for p in registries.glob(f"*{registry_extension}"))
        logger.debug(
            f"Found {len(installer_paths)} installer script(s) in {installers}, "
            f"{len(registry_names)} registry file(s) in {registries}"
        )

        return cls(
            installers_folder=installers,
            registries_folder=registries,
            installer_paths=installer_paths,
            registry_names=registry_names,
            reporter=reporter or NullReporter(),
            installer_extension=installer_extension,
            registry_extension=registry_extension,
        )

    def add(self, finding: Finding) -> None:
        """Record a finding and stream it to the reporter."""
        self.findings.append(finding)
        self.reporter.report_finding(finding)

    def problems(self, check: Optional[CheckName] = None) -> List[Finding]:
        """Findings that are actual discrepancies, optionally for one check."""
        return [
            f for f in self.findings
            if f.is_problem and (check is None or f.check is check)
        ]

    def registry_name_for(self, installer: Union[str, Path]) -> str:
        return installer_to_registry_name(
            installer, self.installer_extension, self.registry_extension
        )

    def registry_path_for(self, installer: Union[str, Path]) -> Path:
        return self.registries_folder / self.registry_name_for(installer)
