"""
Checker Core
============

Pure building blocks of the consistency checker:

- config.py: literal strings and counts the checks look for
- naming.py: installer <-> registry filename mapping, identifiers
- bitsize.py: expected 32/64-bit tokens from a filename
- registry.py: registry file loading and validation

These modules never touch the reporter and never read installer content.
"""

from .bitsize import (
    Bitsize,
    InstallerIdentity,
    PlatformBits,
    is_web_installer,
    resolve_bitsize,
)
from .naming import (
    NAME_SECTION_RULES,
    canonical_identifier,
    installer_to_registry_name,
    name_section_identifier,
    registry_to_installer_name,
)
from .registry import (
    ComponentRecord,
    RegistryDescriptor,
    load_registry,
    parse_registry,
)

__all__ = [
    # Bitsize
    "Bitsize",
    "InstallerIdentity",
    "PlatformBits",
    "is_web_installer",
    "resolve_bitsize",
    # Naming
    "NAME_SECTION_RULES",
    "canonical_identifier",
    "installer_to_registry_name",
    "name_section_identifier",
    "registry_to_installer_name",
    # Registry
    "ComponentRecord",
    "RegistryDescriptor",
    "load_registry",
    "parse_registry",
]
