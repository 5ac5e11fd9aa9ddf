"""
Installer Consistency Validation
================================

Cross-checks installer scripts against their "next" registry files so the
two hand-maintained sets cannot drift apart unnoticed.

VALIDATION TOOLS:
----------------
1. checks.py - pairing, component entry and content checks
2. context.py - explicit run state threaded through the checks
3. report.py - findings and the reporters they are streamed to

CI/CD INTEGRATION:
-----------------
Run as one step of the packaging build:
    python -m isscheck --installers installers --registries registries --strict
"""

from .checks import (
    check_bitsize_define,
    check_component_entries,
    check_installer_content,
    check_php_version,
    check_registry_pairing,
    check_sevenzip_bitsize,
    check_vcredist_bitsize,
    component_entry_findings,
    content_findings,
    run_all_checks,
)
from .context import CheckContext, require_folder
from .report import (
    CheckName,
    ConsoleReporter,
    Finding,
    Level,
    LoggingReporter,
    NullReporter,
    Reporter,
    Severity,
    findings_to_json,
    format_finding,
    print_summary,
    summarize,
)

__all__ = [
    # Runner
    "run_all_checks",
    # Checks
    "check_registry_pairing",
    "check_component_entries",
    "check_installer_content",
    "check_php_version",
    "check_bitsize_define",
    "check_sevenzip_bitsize",
    "check_vcredist_bitsize",
    "component_entry_findings",
    "content_findings",
    # Context
    "CheckContext",
    "require_folder",
    # Reporting
    "CheckName",
    "ConsoleReporter",
    "Finding",
    "Level",
    "LoggingReporter",
    "NullReporter",
    "Reporter",
    "Severity",
    "findings_to_json",
    "format_finding",
    "print_summary",
    "summarize",
]
