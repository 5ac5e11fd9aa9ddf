"""
Findings and Reporting
======================

A Finding is one reported discrepancy between an installer and what its
filename and registry say it should contain. Findings are collected for
the duration of one run and streamed to a Reporter as they are produced.

Reporters receive plain lines at two verbosity levels:
- Level.NORMAL: check headers, findings, the "=> Ok" line of a clean check
- Level.VERBOSE: per-installer progress and diagnostics

The checks never decide an exit code. That belongs to the caller (see
isscheck.main).
"""

import json
import sys
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, TextIO

from colorama import Fore, Style, just_fix_windows_console

from ..utils.logger import logger


class Severity(Enum):
    """Severity of a finding."""
    OK = "OK"            # informational, a check category passed
    MISSING = "MISSING"  # expected file or entry is absent
    INVALID = "INVALID"  # present but wrong (bad count, unparseable file)


class CheckName(str, Enum):
    """Check categories, in the order a full run executes them."""
    PAIRING = "pairing"
    ENTRIES = "entries"
    CONTENT = "content"


class Level(Enum):
    """Verbosity level of a reporter line."""
    NORMAL = "normal"
    VERBOSE = "verbose"


@dataclass(frozen=True)
class Finding:
    """One reported discrepancy (or the OK line of a clean check)."""
    severity: Severity
    check: CheckName
    installer: Optional[Path]
    message: str
    suggestion: Optional[str] = None

    @property
    def is_problem(self) -> bool:
        return self.severity is not Severity.OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.value,
            "check": self.check.value,
            "installer": str(self.installer) if self.installer is not None else None,
            "message": self.message,
            "suggestion": self.suggestion,
        }


def format_finding(finding: Finding) -> str:
    """Render a finding as a single report line."""
    if finding.severity is Severity.OK:
        return f"  => Ok{': ' + finding.message if finding.message else ''}"

    where = f"{finding.installer.name}: " if finding.installer is not None else ""
    line = f"  => [{finding.severity.value}] {where}{finding.message}"
    if finding.suggestion:
        lead = "Please add:" if finding.severity is Severity.MISSING else "Expected:"
        line += f" {lead} {finding.suggestion}"
    return line


def summarize(findings: Iterable[Finding]) -> Dict[str, int]:
    """Count findings per severity."""
    counts = Counter(f.severity.value for f in findings)
    return {severity.value: counts.get(severity.value, 0) for severity in Severity}


def findings_to_json(findings: Iterable[Finding], indent: Optional[int] = 2) -> str:
    """Serialize findings (and their summary) for machine consumption."""
    findings = list(findings)
    document = {
        "summary": summarize(findings),
        "findings": [f.to_dict() for f in findings],
    }
    return json.dumps(document, indent=indent)


# =============================================================================
# Reporters
# =============================================================================


class Reporter:
    """
    Sink for checker output.

    Subclasses implement emit(). report_finding() formats a finding and
    emits it at normal level; override it to style findings.
    """

    def emit(self, message: str, level: Level = Level.NORMAL) -> None:
        raise NotImplementedError

    def report_finding(self, finding: Finding) -> None:
        self.emit(format_finding(finding), Level.NORMAL)


class NullReporter(Reporter):
    """Discards everything."""

    def emit(self, message: str, level: Level = Level.NORMAL) -> None:
        pass


class LoggingReporter(Reporter):
    """Forwards normal lines to logger.info and verbose lines to logger.debug."""

    def __init__(self, target=None):
        self.logger = target or logger

    def emit(self, message: str, level: Level = Level.NORMAL) -> None:
        if level is Level.VERBOSE:
            self.logger.debug(message)
        else:
            self.logger.info(message)

    def report_finding(self, finding: Finding) -> None:
        if finding.is_problem:
            self.logger.warning(format_finding(finding))
        else:
            self.logger.info(format_finding(finding))


class ConsoleReporter(Reporter):
    """
    Prints report lines to a console stream.

    Colour is on by default only when the stream is a terminal, so piped
    output and captured test output stay plain text.
    """

    COLORS = {
        Severity.OK: Fore.GREEN,
        Severity.MISSING: Fore.RED,
        Severity.INVALID: Fore.YELLOW,
    }

    def __init__(self, stream: Optional[TextIO] = None, verbose: bool = False,
                 color: Optional[bool] = None):
        self.stream = stream if stream is not None else sys.stdout
        self.verbose = verbose
        if color is None:
            color = hasattr(self.stream, "isatty") and self.stream.isatty()
        self.color = color
        if self.color:
            just_fix_windows_console()

    def emit(self, message: str, level: Level = Level.NORMAL) -> None:
        if level is Level.VERBOSE and not self.verbose:
            return
        if self.color and level is Level.VERBOSE:
            message = f"{Style.DIM}{message}{Style.RESET_ALL}"
        print(message, file=self.stream)

    def report_finding(self, finding: Finding) -> None:
        line = format_finding(finding)
        if self.color:
            line = f"{self.COLORS[finding.severity]}{line}{Style.RESET_ALL}"
        self.emit(line, Level.NORMAL)


def print_summary(findings: List[Finding], reporter: Reporter) -> None:
    """Emit the closing summary block of a run."""
    problems = [f for f in findings if f.is_problem]
    reporter.emit("=" * 70)
    if problems:
        counts = summarize(problems)
        detail = ", ".join(f"{n} {sev.lower()}" for sev, n in counts.items() if n)
        reporter.emit(f"INSTALLER HEALTH: {len(problems)} finding(s) ({detail})")
    else:
        reporter.emit("INSTALLER HEALTH: All checks passed")
    reporter.emit("=" * 70)
