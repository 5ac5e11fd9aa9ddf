"""
Name Mapping
============

Pure functions translating between the two naming schemes:

- installer script filename  <->  "next" registry filename
- registry software name     ->   identifier used inside installer content
- identifier                 ->   label used in the installer's Name: section

Pairing an installer with its registry is a pure function of the filename.
There is no fallback search and no fuzzy matching: if the mapped name is
not on disk, the installer has no registry.

Examples:
    >>> installer_to_registry_name("installers/full-php56-w64.iss")
    'full-next-php5.6-w64.json'
    >>> canonical_identifier("mariadb-x64")
    'mariadb'
    >>> name_section_identifier("phpext_xdebug")
    'xdebug'
"""

import os
import re
from typing import Callable, NamedTuple, Tuple

from .config import (
    FIRST_DOT_SENTINEL,
    INSTALLER_EXTENSION,
    NEXT_PHP_MARKER,
    PHP_MARKER,
    PHP_VERSION_PATTERN,
    REGISTRY_EXTENSION,
)


_PHP_VERSION_RE = re.compile(PHP_VERSION_PATTERN)


def _basename(path) -> str:
    return os.path.basename(os.fspath(path))


def installer_to_registry_name(
    script_filename,
    installer_extension: str = INSTALLER_EXTENSION,
    registry_extension: str = REGISTRY_EXTENSION,
) -> str:
    """
    Map an installer script filename to its registry filename.

    "-php<major><minor>" becomes "-next-php<major>.<minor>" and the installer
    extension becomes the registry extension. Web installers are not treated
    specially here; callers filter them out.

    Args:
        script_filename: Installer filename or path (only the basename is used)

    Returns:
        Registry filename (basename only)
    """
    name = _basename(script_filename)
    name = _PHP_VERSION_RE.sub(NEXT_PHP_MARKER + r"\1.\2", name)
    return name.replace(installer_extension, registry_extension)


def registry_to_installer_name(
    registry_filename,
    installer_extension: str = INSTALLER_EXTENSION,
    registry_extension: str = REGISTRY_EXTENSION,
) -> str:
    """
    Map a registry filename back to its installer filename.

    The first "." (the one in "php7.1") is replaced by a sentinel which is
    then dropped, "-next-php" becomes "-php" and the registry extension
    becomes the installer extension.

    KNOWN FRAGILITY:
    Only well-defined when the name holds a "." before the extension. For
    names without a PHP version the first dot IS the extension dot, so
    "full-w64.json" comes out as "full-w64json". The checks only use this
    direction for verbose diagnostics.
    """
    name = _basename(registry_filename)
    first_dot = name.find(".")
    if first_dot != -1:
        name = name[:first_dot] + FIRST_DOT_SENTINEL + name[first_dot + 1:]
    name = name.replace(FIRST_DOT_SENTINEL, "")
    name = name.replace(NEXT_PHP_MARKER, PHP_MARKER)
    return name.replace(registry_extension, installer_extension)


def canonical_identifier(registry_software_name: str) -> str:
    """
    Derive the identifier used inside installer content from a registry name.

    Bitsize suffixes are removed and hyphens become underscores. A QA build
    of a package is validated under the base package's identifier, so a
    trailing "_qa" is dropped ("php-qa" -> "php").
    """
    name = registry_software_name.replace("-x64", "").replace("-x86", "")
    name = name.replace("-", "_")
    if name.endswith("_qa") and len(name) > len("_qa"):
        name = name[: -len("_qa")]
    return name


# =============================================================================
# Name: section labels
# =============================================================================


class NameSectionRule(NamedTuple):
    """One entry of the Name: section lookup; first matching rule wins."""
    predicate: Callable[[str], bool]
    section: str


def _one_of(*names: str) -> Callable[[str], bool]:
    members = frozenset(names)
    return lambda name: name in members


def _contains(fragment: str) -> Callable[[str], bool]:
    return lambda name: fragment in name


# ORDER MATTERS: "phpext_xdebug" must be tested before the generic "phpext_"
# rule, and no exact-set entry may precede a substring rule it could shadow.
NAME_SECTION_RULES: Tuple[NameSectionRule, ...] = (
    NameSectionRule(_one_of("nginx", "php", "mariadb"), "serverstack"),
    NameSectionRule(_contains("phpext_xdebug"), "xdebug"),
    NameSectionRule(_contains("phpext_"), "phpextensions"),
    NameSectionRule(_contains("wpnxm_benchmark"), "benchmark"),
    NameSectionRule(_one_of("closure_compiler", "yuicompressor"), "assettools"),
    NameSectionRule(_one_of("gogs", "msysgit"), "git"),
    NameSectionRule(_one_of("node", "nodenpm"), "node"),
    NameSectionRule(_one_of("php_cs_fixer"), "phpcsfixer"),
    NameSectionRule(_one_of("wpnxm_scp"), "servercontrolpanel"),
)


def name_section_identifier(name: str) -> str:
    """Return the Name: section label for a canonical identifier."""
    for rule in NAME_SECTION_RULES:
        if rule.predicate(name):
            return rule.section
    return name
