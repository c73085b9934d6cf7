"""
Arduino library.properties parser.

This module reads the per-library descriptor shipped with Arduino libraries
and exposes the fields needed to decide which architectures a library
supports.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple

from archresolver.config.architectures import normalize_architectures

LIBRARY_PROPERTIES_FILENAME = "library.properties"
ARCHITECTURES_KEY = "architectures"


class LibraryPropertiesError(Exception):
    """Exception raised when a library.properties file cannot be parsed."""

    pass


@dataclass(frozen=True)
class LibraryProperties:
    """
    Parsed contents of a library.properties file.

    Example library.properties:
        name=Servo
        version=1.2.1
        architectures=avr,megaavr,sam,samd

    Usage:
        props = LibraryProperties.from_file(Path("Servo/library.properties"))
        props.architectures  # ('avr', 'megaavr', 'sam', 'samd')
    """

    path: Path
    name: Optional[str]
    version: Optional[str]
    architectures: Tuple[str, ...]
    raw: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: Path) -> "LibraryProperties":
        """
        Load and parse a library.properties file.

        Args:
            path: Path to the library.properties file

        Returns:
            LibraryProperties instance

        Raises:
            LibraryPropertiesError: If the file doesn't exist, can't be read,
                contains a malformed line or has no architectures field
        """
        path = Path(path)
        if not path.is_file():
            raise LibraryPropertiesError(f"Library properties file not found: {path}")

        try:
            content = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise LibraryPropertiesError(f"Failed to read {path}: {e}") from e

        raw = parse_properties(content, source=str(path))

        if ARCHITECTURES_KEY not in raw:
            raise LibraryPropertiesError(
                f"{path} doesn't declare the '{ARCHITECTURES_KEY}' field"
            )

        return cls(
            path=path,
            name=raw.get("name") or None,
            version=raw.get("version") or None,
            architectures=tuple(normalize_architectures(raw[ARCHITECTURES_KEY].split(","))),
            raw=raw,
        )

    @property
    def is_architecture_agnostic(self) -> bool:
        """True if the library declares the '*' wildcard."""
        return "*" in self.architectures


def parse_properties(content: str, source: str = "<string>") -> Dict[str, str]:
    """
    Parse line-oriented key=value content.

    Blank lines and lines starting with '#' are ignored. Keys and values are
    stripped; a repeated key overrides the earlier value.

    Args:
        content: Text content of the properties file
        source: Name used in error messages

    Returns:
        Dictionary of key-value pairs

    Raises:
        LibraryPropertiesError: If a non-comment line has no '=' or an empty key
    """
    properties: Dict[str, str] = {}
    for line_no, line in enumerate(content.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        key, sep, value = stripped.partition("=")
        key = key.strip()
        if not sep or not key:
            raise LibraryPropertiesError(
                f"Malformed line {line_no} in {source}: {stripped!r}"
            )
        properties[key] = value.strip()
    return properties
