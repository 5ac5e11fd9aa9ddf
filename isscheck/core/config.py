"""
Checker Constants
=================

Every literal the checker looks for inside an installer script lives here.
The installer scripts are maintained by hand in the Inno Setup format, so
these strings are matched byte-for-byte, padding included.

MODIFICATION RULES:
------------------
1. Changing a define layout here means every installer script must change
   with it. Update the scripts in the same commit.
2. The padding of the two defines is column alignment in the scripts: the
   opening quote sits in column 30 for both.
"""

from typing import NamedTuple


# =============================================================================
# File naming
# =============================================================================

INSTALLER_EXTENSION = ".iss"
REGISTRY_EXTENSION = ".json"

# Web installers download components at install time and reuse the data of
# a non-web registry, so they have no registry of their own.
WEBINSTALLER_MARKER = "webinstaller"

# 32-bit installers carry "-w32" in their filename, everything else is 64-bit.
W32_MARKER = "-w32"

# "-php56" in an installer name is "-next-php5.6" in the registry name.
PHP_VERSION_PATTERN = r"-php(\d)(\d)"
NEXT_PHP_MARKER = "-next-php"
PHP_MARKER = "-php"

# The PHP_VERSION define is checked only when the second hyphen-delimited
# segment of the installer name is exactly this ("full-php56-w64.iss").
PHP_SEGMENT_PATTERN = r"php(\d)(\d)"

# Sentinel used by the registry -> installer mapping for the first dot.
FIRST_DOT_SENTINEL = "@"


# =============================================================================
# Installer content conventions
# =============================================================================

PHP_VERSION_DEFINE = '#define PHP_VERSION          "{version}"'
BITSIZE_DEFINE = '#define BITSIZE              "{word}"'
SEVENZIP_SOURCE = "Source: ..\\bin\\7zip\\{arch}"
VCREDIST_PATTERN = r"vcredist_{arch}_\d+"

FILENAME_ENTRY = "Filename_{name}"
FILENAME_DEFINITION = 'Filename_{name} = "{filename}";'
NAME_ENTRY = "Name: {section};"
INSTALL_SECTION_ENTRY = "targetPath + Filename_{name}"


class VcredistCount(NamedTuple):
    """Expected number of vcredist_<arch>_<digits> occurrences."""
    web: int
    full: int


# Web installers bundle a reduced redistributable set compared to the
# full/offline installers.
VCREDIST_COUNT = VcredistCount(web=2, full=3)
