"""
Bitsize Resolution
==================

The expected architecture of an installer is derived from its filename
only. Content is never consulted to decide the bitsize; content is what
gets validated against it.

    full-php56-w32.iss  ->  Bitsize(arch="x86", word="w32")
    full-php56-w64.iss  ->  Bitsize(arch="x64", word="w64")
    anything-else.iss   ->  Bitsize(arch="x64", word="w64")
"""

import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Tuple

from .config import PHP_SEGMENT_PATTERN, W32_MARKER, WEBINSTALLER_MARKER


class PlatformBits(Enum):
    """Target architecture width of an installer."""
    W32 = 32
    W64 = 64


class Bitsize(NamedTuple):
    """Expected bitsize tokens for one installer."""
    arch: str  # "x86" | "x64", used by 7zip and vcredist paths
    word: str  # "w32" | "w64", used by the BITSIZE define


BITSIZE_W32 = Bitsize(arch="x86", word="w32")
BITSIZE_W64 = Bitsize(arch="x64", word="w64")

_PHP_SEGMENT_RE = re.compile(PHP_SEGMENT_PATTERN)


def resolve_bitsize(filename) -> Bitsize:
    """Return the expected bitsize tokens for an installer filename."""
    name = os.path.basename(os.fspath(filename))
    return BITSIZE_W32 if W32_MARKER in name else BITSIZE_W64


def is_web_installer(filename) -> bool:
    """True when the filename carries the web installer marker."""
    return WEBINSTALLER_MARKER in os.path.basename(os.fspath(filename))


@dataclass(frozen=True)
class InstallerIdentity:
    """
    Facts about an installer derived from its filename alone.

    Recomputed on demand, never persisted.
    """
    filename: str
    platform_bits: PlatformBits
    php_version: Optional[Tuple[int, int]]
    is_web_installer: bool

    @classmethod
    def from_filename(cls, filename) -> "InstallerIdentity":
        name = os.path.basename(os.fspath(filename))
        segments = os.path.splitext(name)[0].split("-")
        match = _PHP_SEGMENT_RE.fullmatch(segments[1]) if len(segments) > 1 else None
        php_version = (int(match.group(1)), int(match.group(2))) if match else None
        bits = PlatformBits.W32 if W32_MARKER in name else PlatformBits.W64
        return cls(
            filename=name,
            platform_bits=bits,
            php_version=php_version,
            is_web_installer=is_web_installer(name),
        )

    @property
    def bitsize(self) -> Bitsize:
        return BITSIZE_W32 if self.platform_bits is PlatformBits.W32 else BITSIZE_W64

    @property
    def php_version_literal(self) -> Optional[str]:
        """
        Value expected in the PHP_VERSION define.

        The second hyphen-delimited segment of the filename, when that
        segment is a PHP version ("full-php56-w64.iss" -> "php56"). None
        otherwise, including "full-debug-php56-w64.iss".
        """
        if self.php_version is None:
            return None
        return "php{}{}".format(*self.php_version)
