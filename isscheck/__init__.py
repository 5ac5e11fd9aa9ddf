"""isscheck - installer script / "next" registry consistency checker"""

from isscheck.__version__ import __version__, __version_info__

# Public API exports
from isscheck.core import (
    InstallerIdentity,
    canonical_identifier,
    installer_to_registry_name,
    load_registry,
    name_section_identifier,
    registry_to_installer_name,
    resolve_bitsize,
)
from isscheck.errors import (
    ConfigurationError,
    InstallerCheckError,
    RegistryNotFoundError,
    RegistryParseError,
)
from isscheck.validation import CheckContext, Finding, run_all_checks

__all__ = [
    "__version__",
    "__version_info__",
    "InstallerIdentity",
    "canonical_identifier",
    "installer_to_registry_name",
    "load_registry",
    "name_section_identifier",
    "registry_to_installer_name",
    "resolve_bitsize",
    "ConfigurationError",
    "InstallerCheckError",
    "RegistryNotFoundError",
    "RegistryParseError",
    "CheckContext",
    "Finding",
    "run_all_checks",
]
