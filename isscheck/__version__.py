#!/usr/bin/env python3
"""Version information for isscheck."""

# PEP 440 compliant version for pip/wheel
__version__ = "0.3.0"

# Version metadata
__version_info__ = {
    "major": 0,
    "minor": 3,
    "patch": 0,
    "release": "",
}
