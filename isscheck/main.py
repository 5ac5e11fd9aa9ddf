#!/usr/bin/env python3
"""isscheck command line entry point.

Runs the installer/registry consistency checks as one step of a packaging
build. The checks themselves only report; this module decides the exit code.

EXIT CODES:
    0: checks ran (findings only fail the run with --strict)
    1: findings were reported and --strict is set
    2: configuration error (missing folder, bad settings file, unwritable log)

With --format json, stdout carries only JSON: the findings report, or
{"error": {...}} for a configuration error.
"""

import argparse
import json
import sys
from typing import List, Optional

from isscheck.__version__ import __version__
from isscheck.errors import ConfigurationError
from isscheck.settings import (
    CheckerSettings,
    OutputFormat,
    load_settings_file,
    resolve_settings,
)
from isscheck.utils.logger import setup_logger
from isscheck.validation import (
    CheckContext,
    CheckName,
    ConsoleReporter,
    LoggingReporter,
    findings_to_json,
    print_summary,
    run_all_checks,
)

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_CONFIG_ERROR = 2


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="isscheck",
        description="Check installer scripts against their 'next' registry files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Exit codes: 0 ok, 1 findings with --strict, 2 configuration error",
    )

    # Inputs
    parser.add_argument("--installers", dest="installers_folder", default=None,
                        help="Folder with the installer scripts (*.iss)")
    parser.add_argument("--registries", dest="registries_folder", default=None,
                        help="Folder with the 'next' registry files (*.json)")
    parser.add_argument("--config", default=None,
                        help="YAML settings file (CLI flags take precedence)")

    # Checks
    check_group = parser.add_argument_group("Check Options")
    check_group.add_argument("--check", dest="checks", action="append",
                             choices=[c.value for c in CheckName], default=None,
                             help="Run only this check (repeatable, default: all)")
    check_group.add_argument("--strict", dest="fail_on_findings", action="store_true", default=None,
                             help="Exit with status 1 when any discrepancy is found")

    # Output
    output_group = parser.add_argument_group("Output and Logging Options")
    output_group.add_argument("-v", "--verbose", action="store_true", default=None,
                              help="Print per-installer progress lines")
    output_group.add_argument("--format", dest="output_format",
                              choices=[f.value for f in OutputFormat], default=None,
                              help="Report format (default: text)")
    output_group.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                              default=None, help="Diagnostic logging level")
    output_group.add_argument("--log-file", default=None, help="Diagnostic log file path")

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> CheckerSettings:
    """Resolve settings from CLI flags and the optional settings file."""
    file_settings = load_settings_file(args.config) if args.config else None
    overrides = {
        key: getattr(args, key)
        for key in (
            "installers_folder",
            "registries_folder",
            "checks",
            "fail_on_findings",
            "verbose",
            "output_format",
            "log_level",
            "log_file",
        )
    }
    return resolve_settings(overrides, file_settings)


def run(settings: CheckerSettings) -> int:
    """Run the configured checks and return the exit code."""
    try:
        setup_logger("isscheck", settings.log_level,
                     str(settings.log_file) if settings.log_file else None)
    except OSError as e:
        raise ConfigurationError(
            f"Cannot open log file: {e.strerror or e}",
            setting="log_file",
            path=settings.log_file,
            suggestion="Choose a writable location for --log-file",
        ) from e

    # JSON mode keeps stdout for the report; progress goes to the log instead
    as_json = settings.output_format is OutputFormat.JSON
    if as_json:
        reporter = LoggingReporter()
    else:
        reporter = ConsoleReporter(verbose=settings.verbose)

    ctx = CheckContext.discover(
        settings.installers_folder,
        settings.registries_folder,
        reporter=reporter,
        installer_extension=settings.installer_extension,
        registry_extension=settings.registry_extension,
    )
    findings = run_all_checks(ctx, settings.checks)

    if as_json:
        print(findings_to_json(findings))
    else:
        print_summary(findings, reporter)

    if settings.fail_on_findings and ctx.problems():
        return EXIT_FINDINGS
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Console script entry point."""
    args = parse_arguments(argv)
    as_json = args.output_format == OutputFormat.JSON.value
    try:
        settings = build_settings(args)
        as_json = settings.output_format is OutputFormat.JSON
        return run(settings)
    except ConfigurationError as e:
        if as_json:
            print(json.dumps({"error": e.to_dict()}, indent=2))
        else:
            print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR


if __name__ == "__main__":
    sys.exit(main())
