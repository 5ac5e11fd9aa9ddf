"""
Registry Loader
===============

Reads one "next" installer registry: the list of third-party components an
installer script must bundle.

FILE FORMAT:
-----------
    [
        ["mariadb-x64", "https://...", "mariadb-x64.zip", "10.1.16"],
        ["phpext-xdebug-x64", "https://...", "phpext_xdebug.zip", "2.4.1", "x64"],
        ...
    ]

Each record holds at least four fields: software name, download URL,
filename after download, version. Any scalar is accepted and kept as
text, so a bare number such as 1.11 in the version field reads as "1.11".
Trailing fields (variant flags) are kept
but not interpreted. An object mapping component index -> record is accepted
as well, since that is how the build scripts that write these files index
them.

ERRORS:
------
- RegistryNotFoundError: the file is absent (caller reports a finding)
- RegistryParseError: present but not JSON, or not the shape above
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, List, NamedTuple, Tuple, Union

import jsonschema

from ..errors import RegistryNotFoundError, RegistryParseError
from ..utils.logger import logger


_SCALAR_TYPES = ["string", "number", "boolean", "null"]

_RECORD_SCHEMA = {
    "type": "array",
    "minItems": 4,
    "items": {"type": _SCALAR_TYPES},
}

REGISTRY_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "oneOf": [
        {"type": "array", "items": _RECORD_SCHEMA},
        {"type": "object", "additionalProperties": _RECORD_SCHEMA},
    ],
}


class ComponentRecord(NamedTuple):
    """One component entry of a registry."""
    software_name: str
    download_url: str
    filename: str
    version: str
    extra: Tuple[Any, ...] = ()

    @classmethod
    def from_fields(cls, fields: List[Any]) -> "ComponentRecord":
        name, url, filename, version, *extra = fields
        return cls(str(name), str(url), str(filename), str(version), tuple(extra))


@dataclass(frozen=True)
class RegistryDescriptor:
    """Parsed content of one registry file."""
    path: Path
    components: Tuple[ComponentRecord, ...]

    def __iter__(self) -> Iterator[ComponentRecord]:
        return iter(self.components)

    def __len__(self) -> int:
        return len(self.components)


def parse_registry(text: str, path: Union[str, Path]) -> RegistryDescriptor:
    """
    Parse registry JSON text.

    Args:
        text: Raw file content
        path: Source path, used for error context only

    Raises:
        RegistryParseError: Invalid JSON or unexpected structure
    """
    path = Path(path)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RegistryParseError(path, e.msg, line=e.lineno, column=e.colno) from e

    try:
        jsonschema.validate(data, REGISTRY_SCHEMA)
    except jsonschema.ValidationError as e:
        location = "/".join(str(part) for part in e.absolute_path) or None
        raise RegistryParseError(path, e.message, location=location) from e

    records = data.values() if isinstance(data, dict) else data
    components = tuple(ComponentRecord.from_fields(record) for record in records)
    return RegistryDescriptor(path=path, components=components)


def load_registry(path: Union[str, Path]) -> RegistryDescriptor:
    """
    Load and validate a registry file.

    Raises:
        RegistryNotFoundError: The file does not exist
        RegistryParseError: The file cannot be read or parsed
    """
    path = Path(path)
    if not path.is_file():
        raise RegistryNotFoundError(path)

    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise RegistryParseError(path, f"cannot read file ({e})") from e

    registry = parse_registry(text, path)
    logger.debug(f"Loaded {len(registry)} component(s) from {path.name}")
    return registry
