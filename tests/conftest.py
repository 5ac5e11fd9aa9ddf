"""
Pytest configuration for isscheck tests.

Registers custom markers and provides helpers that write synthetic
installer/registry trees into tmp_path.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

import pytest

from isscheck.validation import Level, Reporter, format_finding


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests that run the checks over a folder tree"
    )


class RecordingReporter(Reporter):
    """Keeps every emitted line, with its level, in order."""

    def __init__(self):
        self.lines: List[Tuple[Level, str]] = []

    def emit(self, message, level=Level.NORMAL):
        self.lines.append((level, message))

    def text(self, include_verbose: bool = True) -> str:
        return "\n".join(
            message for level, message in self.lines
            if include_verbose or level is Level.NORMAL
        )


def installer_script(
    php: str = "php56",
    word: str = "w64",
    arch: str = "x64",
    vcredist: int = 3,
    components: Iterable[Tuple[str, str]] = (("mariadb", "serverstack"),),
) -> str:
    """
    Build the content of a consistent installer script.

    components: (canonical identifier, Name: section) pairs
    """
    components = list(components)
    lines = []
    if php:
        lines.append(f'#define PHP_VERSION          "{php}"')
    if word:
        lines.append(f'#define BITSIZE              "{word}"')
    lines.append("")
    lines.append("[Components]")
    for section in sorted({section for _, section in components}):
        lines.append(f'Name: {section}; Description: "{section}"; Types: full')
    lines.append("")
    lines.append("[Files]")
    if arch:
        lines.append(f"Source: ..\\bin\\7zip\\{arch}\\7za.exe; DestDir: {{tmp}}")
    for year in (2012, 2013, 2015)[:vcredist]:
        lines.append(f"Source: ..\\bin\\vcredist\\vcredist_{arch}_{year}.exe; DestDir: {{tmp}}")
    lines.append("")
    lines.append("[Code]")
    lines.append("const")
    for name, _ in components:
        lines.append(f"  Filename_{name} = '{name}.zip';")
    lines.append("")
    lines.append("procedure UnzipFiles();")
    lines.append("begin")
    for name, _ in components:
        lines.append(f"  DoUnzip(targetPath + Filename_{name}, ExpandConstant('{{app}}\\bin'));")
    lines.append("end;")
    return "\n".join(lines) + "\n"


def registry_records(names: Sequence[str]) -> list:
    """Registry records for registry software names."""
    return [
        [name, f"https://example.org/get/{name}", f"{name}.zip", "1.0.0"]
        for name in names
    ]


@pytest.fixture
def recording_reporter():
    return RecordingReporter()


@pytest.fixture
def tree(tmp_path):
    """
    Empty installers/ and registries/ folders plus writer helpers.

    Usage:
        tree.installer("full-php56-w64.iss", installer_script())
        tree.registry("full-next-php5.6-w64.json", ["mariadb-x64"])
    """

    class Tree:
        installers = tmp_path / "installers"
        registries = tmp_path / "registries"

        def installer(self, name: str, content: str) -> Path:
            path = self.installers / name
            path.write_text(content, encoding="utf-8")
            return path

        def registry(self, name: str, names_or_data) -> Path:
            path = self.registries / name
            data = names_or_data
            if isinstance(names_or_data, (list, tuple)) and all(isinstance(n, str) for n in names_or_data):
                data = registry_records(names_or_data)
            path.write_text(json.dumps(data), encoding="utf-8")
            return path

    Tree.installers.mkdir()
    Tree.registries.mkdir()
    return Tree()


def problem_lines(findings) -> List[str]:
    """Formatted lines of the findings that are actual discrepancies."""
    return [format_finding(f) for f in findings if f.is_problem]


@pytest.fixture(autouse=True)
def reset_isscheck_logger():
    """Drop handlers main() attached to streams that pytest closes after a test."""
    yield
    target = logging.getLogger("isscheck")
    for handler in list(target.handlers):
        target.removeHandler(handler)
        handler.close()
    target.setLevel(logging.WARNING)
