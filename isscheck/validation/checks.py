"""
Installer Consistency Checks
============================

Cross-validates the installer scripts against the "next" registries.

CHECKS (run in this order by run_all_checks):
-------------------------------------------
1. pairing  - every non-web installer has its registry file
2. entries  - every registry component has its Filename_, Name: and
              install section entries in the installer
3. content  - PHP_VERSION define, BITSIZE define, 7zip bitsize and vcredist
              count match what the installer filename says

Web installers have no registry of their own, so checks 1 and 2 skip them.
Check 3 runs on every installer.

Each check appends to the CheckContext and never stops at the first
problem. The per-installer helpers (component_entry_findings,
check_php_version, ...) are pure functions of their arguments.

WHY SUBSTRING MATCHING:
----------------------
The installer scripts are Inno Setup files maintained by hand. Their grammar
is not parsed here; the checks look for the literal lines defined in
core/config.py, padding included, exactly as they appear in the scripts.
"""

import re
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from ..core.bitsize import InstallerIdentity, is_web_installer
from ..core.config import (
    BITSIZE_DEFINE,
    FILENAME_DEFINITION,
    FILENAME_ENTRY,
    INSTALL_SECTION_ENTRY,
    NAME_ENTRY,
    PHP_VERSION_DEFINE,
    SEVENZIP_SOURCE,
    VCREDIST_COUNT,
    VCREDIST_PATTERN,
)
from ..core.naming import (
    canonical_identifier,
    name_section_identifier,
    registry_to_installer_name,
)
from ..core.registry import ComponentRecord, load_registry
from ..errors import RegistryNotFoundError, RegistryParseError
from ..utils.logger import logger
from .context import CheckContext
from .report import CheckName, Finding, Level, Severity


# =============================================================================
# Helpers
# =============================================================================


def read_installer(ctx: CheckContext, installer: Path, check: CheckName) -> Optional[str]:
    """
    Read an installer script, or record why it could not be read.

    Inno Setup scripts are not guaranteed to be UTF-8; undecodable bytes are
    replaced since only ASCII literals are searched for.
    """
    try:
        return installer.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning(f"Cannot read installer {installer}: {e}")
        ctx.add(Finding(
            Severity.INVALID, check, installer,
            f"Cannot read installer script ({e.strerror or e}).",
        ))
        return None


def _close_check(ctx: CheckContext, check: CheckName, start: int, ok_message: str) -> List[Finding]:
    """Add the OK line when a check produced no problems; return its findings."""
    if not any(f.is_problem for f in ctx.findings[start:]):
        ctx.add(Finding(Severity.OK, check, None, ok_message))
    return ctx.findings[start:]


# =============================================================================
# 1. Pairing
# =============================================================================


def check_registry_pairing(ctx: CheckContext) -> List[Finding]:
    """Check that every non-web installer script has its "next" registry."""
    ctx.reporter.emit(
        'Check, that every installer script has a corresponding "next" installer registry file...'
    )
    start = len(ctx.findings)
    available = set(ctx.registry_names)
    paired = set()

    for installer in ctx.installer_paths:
        expected = ctx.registry_name_for(installer)
        paired.add(expected)
        if is_web_installer(installer):
            ctx.reporter.emit(f"Skipping web installer: {installer.name}", Level.VERBOSE)
            continue
        if expected not in available:
            ctx.add(Finding(
                Severity.MISSING, CheckName.PAIRING, installer,
                f"Missing Registry: {expected}",
                suggestion=str(ctx.registries_folder / expected),
            ))

    for name in ctx.registry_names:
        if name not in paired:
            ctx.reporter.emit(
                f"Registry without installer script: {name} "
                f"(would pair with {registry_to_installer_name(name, ctx.installer_extension, ctx.registry_extension)})",
                Level.VERBOSE,
            )

    return _close_check(ctx, CheckName.PAIRING, start, "every installer has a registry")


# =============================================================================
# 2. Component entries
# =============================================================================


def component_entry_findings(installer: Path, content: str, record: ComponentRecord) -> List[Finding]:
    """
    Check the three entries one registry component needs in an installer.

    (a) Filename_<id>                   the filename definition
    (b) Name: <section>;                the component declaration
    (c) targetPath + Filename_<id>      the install (unzip) section
    """
    software = record.software_name
    name = canonical_identifier(software)
    section = name_section_identifier(name)
    findings = []

    if FILENAME_ENTRY.format(name=name) not in content:
        findings.append(Finding(
            Severity.MISSING, CheckName.ENTRIES, installer,
            f"Missing Filename_{name} entry for software {software}.",
            suggestion=FILENAME_DEFINITION.format(name=name, filename=record.filename),
        ))

    name_entry = NAME_ENTRY.format(section=section)
    if name_entry not in content:
        findings.append(Finding(
            Severity.MISSING, CheckName.ENTRIES, installer,
            f"Missing Name entry for software {software} => {section}.",
            suggestion=name_entry,
        ))

    install_entry = INSTALL_SECTION_ENTRY.format(name=name)
    if install_entry not in content:
        findings.append(Finding(
            Severity.MISSING, CheckName.ENTRIES, installer,
            f"Missing install section for software {software} => {section}.",
            suggestion=install_entry,
        ))

    return findings


def check_component_entries(ctx: CheckContext) -> List[Finding]:
    """Check that every registry component has its entries in the installer."""
    ctx.reporter.emit(
        'Check, that every component in the "next" installer registry file '
        'has corresponding entries in the installer script.'
    )
    start = len(ctx.findings)

    for installer in ctx.installer_paths:
        if is_web_installer(installer):
            ctx.reporter.emit(
                f"Skipping Installers without registry file: {installer.name}", Level.VERBOSE
            )
            continue

        ctx.reporter.emit(f"Processing Installer: {installer.name}", Level.VERBOSE)
        registry_path = ctx.registry_path_for(installer)
        ctx.reporter.emit(f" => Matching Registry file is: {registry_path.name}", Level.VERBOSE)

        try:
            registry = load_registry(registry_path)
        except RegistryNotFoundError as e:
            ctx.add(Finding(
                Severity.MISSING, CheckName.ENTRIES, installer,
                f"{e.message}, component entries not checked.",
                suggestion=str(e.path),
            ))
            continue
        except RegistryParseError as e:
            logger.warning(str(e))
            ctx.add(Finding(
                Severity.INVALID, CheckName.ENTRIES, installer,
                f"{e.message}, component entries not checked.",
            ))
            continue

        content = read_installer(ctx, installer, CheckName.ENTRIES)
        if content is None:
            continue

        for record in registry:
            ctx.reporter.emit(f"    => Check entries of {record.software_name}", Level.VERBOSE)
            for finding in component_entry_findings(installer, content, record):
                ctx.add(finding)

    return _close_check(ctx, CheckName.ENTRIES, start, "every component has its installer entries")


# =============================================================================
# 3. Content correctness
# =============================================================================


def check_php_version(installer: Path, content: str) -> Optional[Finding]:
    """
    Check the PHP_VERSION define against the installer filename.

    Only installers whose second hyphen-delimited filename segment is a PHP
    version ("php56") are checked, and that segment is the expected value.
    """
    version = InstallerIdentity.from_filename(installer).php_version_literal
    if version is None:
        return None

    expected = PHP_VERSION_DEFINE.format(version=version)
    if expected in content:
        return None
    if "#define PHP_VERSION" in content:
        return Finding(
            Severity.INVALID, CheckName.CONTENT, installer,
            '"#define PHP_VERSION" does not match the installer filename.',
            suggestion=expected,
        )
    return Finding(
        Severity.MISSING, CheckName.CONTENT, installer,
        'Missing "#define PHP_VERSION".',
        suggestion=expected,
    )


def check_bitsize_define(installer: Path, content: str) -> Optional[Finding]:
    """Check the BITSIZE define carries the w32/w64 token of the filename."""
    word = InstallerIdentity.from_filename(installer).bitsize.word
    expected = BITSIZE_DEFINE.format(word=word)
    if expected in content:
        return None
    if "#define BITSIZE" in content:
        return Finding(
            Severity.INVALID, CheckName.CONTENT, installer,
            '"#define BITSIZE" does not match the installer filename.',
            suggestion=expected,
        )
    return Finding(
        Severity.MISSING, CheckName.CONTENT, installer,
        'Missing "#define BITSIZE".',
        suggestion=expected,
    )


def check_sevenzip_bitsize(installer: Path, content: str) -> Optional[Finding]:
    """Check the bundled 7zip is taken from the folder of the right architecture."""
    arch = InstallerIdentity.from_filename(installer).bitsize.arch
    expected = SEVENZIP_SOURCE.format(arch=arch)
    if expected in content:
        return None
    if SEVENZIP_SOURCE.format(arch="") in content:
        return Finding(
            Severity.INVALID, CheckName.CONTENT, installer,
            f"7zip is shipped with the wrong bitsize, expected {arch}.",
            suggestion=expected,
        )
    return Finding(
        Severity.MISSING, CheckName.CONTENT, installer,
        "Missing 7zip source entry.",
        suggestion=expected,
    )


def check_vcredist_bitsize(installer: Path, content: str) -> Optional[Finding]:
    """
    Check the vcredist_<arch>_<digits> occurrence count.

    Web installers ship a reduced redistributable set (2 occurrences),
    every other installer needs 3.
    """
    identity = InstallerIdentity.from_filename(installer)
    arch = identity.bitsize.arch
    expected = VCREDIST_COUNT.web if identity.is_web_installer else VCREDIST_COUNT.full
    found = len(re.findall(VCREDIST_PATTERN.format(arch=arch), content, re.IGNORECASE))
    if found == expected:
        return None
    return Finding(
        Severity.INVALID, CheckName.CONTENT, installer,
        f"Invalid vcredist_ entry: found {found} vcredist_{arch}_ reference(s), expected {expected}.",
        suggestion=f"vcredist_{arch}_<version> (use correct bitsize: {arch})",
    )


CONTENT_CHECKS: Iterable[Callable[[Path, str], Optional[Finding]]] = (
    check_php_version,
    check_bitsize_define,
    check_sevenzip_bitsize,
    check_vcredist_bitsize,
)


def content_findings(installer: Path, content: str) -> List[Finding]:
    """Run every content check against one installer."""
    findings = []
    for check in CONTENT_CHECKS:
        finding = check(installer, content)
        if finding is not None:
            findings.append(finding)
    return findings


def check_installer_content(ctx: CheckContext) -> List[Finding]:
    """Check defines and bitsize markers of every installer, web or not."""
    ctx.reporter.emit("Checking installer scripts for correct values...")
    start = len(ctx.findings)

    for installer in ctx.installer_paths:
        identity = InstallerIdentity.from_filename(installer)
        ctx.reporter.emit(
            f"Processing Installer: {installer.name} "
            f"(BITSIZE {identity.bitsize.arch} = {identity.bitsize.word}, "
            f"PHP_VERSION {identity.php_version_literal or '-'})",
            Level.VERBOSE,
        )
        content = read_installer(ctx, installer, CheckName.CONTENT)
        if content is None:
            continue
        for finding in content_findings(installer, content):
            ctx.add(finding)

    return _close_check(ctx, CheckName.CONTENT, start, "installer values match their filenames")


# =============================================================================
# Runner
# =============================================================================


CHECKS: Dict[CheckName, Callable[[CheckContext], List[Finding]]] = {
    CheckName.PAIRING: check_registry_pairing,
    CheckName.ENTRIES: check_component_entries,
    CheckName.CONTENT: check_installer_content,
}


def run_all_checks(ctx: CheckContext, checks: Optional[Iterable[CheckName]] = None) -> List[Finding]:
    """
    Run the selected checks (default: all) in their fixed order.

    Returns:
        Every finding of the run, OK lines included
    """
    ctx.reporter.emit("== Checking Installer Health")
    selected = set(checks) if checks is not None else set(CHECKS)
    for name, check in CHECKS.items():
        if name in selected:
            check(ctx)
    return ctx.findings
