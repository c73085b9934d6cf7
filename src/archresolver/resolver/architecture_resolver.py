"""
Library architecture resolution.

This module handles:
- Locating a library's library.properties file
- Extracting the architectures the library declares
- Checking the target platform's architecture against them
- Building a regex of the architectures the library doesn't support
- Filtering out library sources tagged for those architectures

Sources are tagged by naming convention only: a path "relates" to an
architecture when a path segment or name fragment starts with the
architecture name (e.g. ``src/esp32/wifi.cpp``, ``timer_avr.c`` or
``esp32s3_i2s.cpp``). Untagged sources are always kept.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, TypeVar, Union

from archresolver.config.architectures import (
    KNOWN_ARCHITECTURES,
    WILDCARD,
    normalize_architecture,
    normalize_architectures,
)
from archresolver.config.library_properties import (
    LIBRARY_PROPERTIES_FILENAME,
    LibraryProperties,
    LibraryPropertiesError,
)
from archresolver.config.platform_config import PlatformConfig

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=Union[str, os.PathLike])


class UnsupportedArchitectureError(Exception):
    """Raised when a library doesn't support the platform's architecture."""

    def __init__(self, library: str, architecture: str):
        self.library = library
        self.architecture = architecture
        super().__init__(
            f"The platform's architecture, {architecture}, "
            + f"isn't supported by the {library} library"
        )


class ResolutionStatus(Enum):
    """Outcome of resolving a library's architecture."""

    OK = "ok"
    UNSUPPORTED_ARCHITECTURE = "unsupported_architecture"
    MALFORMED_METADATA = "malformed_metadata"


@dataclass
class ResolutionResult:
    """Result of a resolution call. ``sources`` is only meaningful when OK."""

    status: ResolutionStatus
    library_name: str
    architecture: str
    sources: List = field(default_factory=list)
    properties_file: Optional[Path] = None
    message: str = ""
    error: Optional[Exception] = None

    @property
    def success(self) -> bool:
        return self.status is ResolutionStatus.OK

    def raise_for_status(self) -> List:
        """
        Return the filtered sources, or raise the error this result describes.

        Raises:
            UnsupportedArchitectureError: If the architecture isn't supported
            LibraryPropertiesError: If the library's metadata is malformed
        """
        if self.status is ResolutionStatus.UNSUPPORTED_ARCHITECTURE:
            raise UnsupportedArchitectureError(self.library_name, self.architecture)
        if self.status is ResolutionStatus.MALFORMED_METADATA:
            if isinstance(self.error, LibraryPropertiesError):
                raise self.error
            raise LibraryPropertiesError(self.message)
        return self.sources


def find_library_properties(library_root: Union[str, Path]) -> Optional[Path]:
    """
    Locate a library's properties file under its root directory.

    Args:
        library_root: Path to the library's root directory. Can be relative.

    Returns:
        Absolute path to library.properties, or None if it can't be found
        (a warning is logged and the library is treated as
        architecture-agnostic)
    """
    root = Path(library_root).resolve()
    properties_file = root / LIBRARY_PROPERTIES_FILENAME

    if properties_file.is_file():
        return properties_file

    logger.warning(
        '"%s" library\'s properties file can\'t be found under its root directory '
        "- Assuming the library is architecture-agnostic (supports all architectures)",
        root.name,
    )
    return None


def get_library_architectures(properties_file: Union[str, Path]) -> List[str]:
    """
    Get the architectures declared by a library.

    Args:
        properties_file: Path to library.properties (must exist)

    Returns:
        Lowercase architecture identifiers in declared order

    Raises:
        LibraryPropertiesError: If the file is missing, malformed or lacks
            the architectures field
    """
    return list(LibraryProperties.from_file(Path(properties_file)).architectures)


def is_architecture_supported(architectures: Iterable[str], platform_architecture: str) -> bool:
    """
    Check whether the platform's architecture is supported.

    Both sides are compared lowercase; a '*' entry supports everything.

    Raises:
        ValueError: If platform_architecture is empty
    """
    platform_architecture = normalize_architecture(platform_architecture or "")
    if not platform_architecture:
        raise ValueError("platform_architecture must be a non-empty string")

    declared = normalize_architectures(architectures)
    return WILDCARD in declared or platform_architecture in declared


def get_unsupported_architectures(
    architectures: Iterable[str],
    known_architectures: Iterable[str] = KNOWN_ARCHITECTURES,
) -> List[str]:
    """
    Get the known architectures that aren't in the declared list.

    Returns:
        Unsupported architectures in the order of ``known_architectures``,
        empty if the declared list holds the '*' wildcard
    """
    declared = normalize_architectures(architectures)
    if WILDCARD in declared:
        return []
    return [
        arch
        for arch in normalize_architectures(known_architectures)
        if arch != WILDCARD and arch not in declared
    ]


def build_unsupported_architectures_pattern(
    architectures: Iterable[str],
    known_architectures: Iterable[str] = KNOWN_ARCHITECTURES,
) -> str:
    """
    Build a regex matching paths tagged with an unsupported architecture.

    A tag starts at a path or name boundary and may carry a chip suffix, so
    'samd' matches 'timer_samd21.c' and 'src/samd/io.c' but 'avr' doesn't
    match 'megaavr.c'. A tag that is part of a longer known architecture
    name at the same spot is left to that name, so 'sam' doesn't match
    'src/samd/io.c' and 'rp2040' doesn't match 'src/mbed_rp2040/io.c'.

    Returns:
        Regex alternation string, or "" if every known architecture is supported
    """
    unsupported = get_unsupported_architectures(architectures, known_architectures)
    if not unsupported:
        return ""

    known = [arch for arch in normalize_architectures(known_architectures) if arch != WILDCARD]
    alternation = "|".join(_tag_pattern(arch, known) for arch in unsupported)
    return rf"(?<![A-Za-z0-9])(?:{alternation})"


def _tag_pattern(arch: str, known: List[str]) -> str:
    guards = []
    for other in known:
        if other == arch:
            continue
        start = other.find(arch)
        while start != -1:
            # Occurrences inside an alphanumeric run can't start a tag
            if start == 0 or not other[start - 1].isalnum():
                prefix = re.escape(other[:start])
                lookbehind = f"(?<={prefix})" if prefix else ""
                guards.append(f"(?!{lookbehind}{re.escape(other[start:])})")
            start = other.find(arch, start + 1)
    return "".join(guards) + re.escape(arch)


def filter_unsupported_sources(
    pattern: str,
    sources: Sequence[S],
    relative_to: Optional[Union[str, Path]] = None,
) -> List[S]:
    """
    Drop sources whose path matches the unsupported-architectures pattern.

    Args:
        pattern: Regex from build_unsupported_architectures_pattern; an empty
            pattern filters nothing
        sources: Source paths to filter
        relative_to: Library root; sources under it are matched by their
            path relative to it, so the root's own location can't exclude them

    Returns:
        The surviving sources, in their original order
    """
    if not pattern:
        return list(sources)

    regex = re.compile(pattern)
    root = Path(relative_to).resolve() if relative_to is not None else None
    return [src for src in sources if not regex.search(_match_path(src, root))]


def _match_path(source: Union[str, os.PathLike], root: Optional[Path]) -> str:
    path = os.fspath(source)
    if root is None:
        return path
    try:
        return Path(path).resolve().relative_to(root).as_posix()
    except ValueError:
        return path


class ArchitectureResolver:
    """
    Resolves a library's architecture-related sources for a target platform.

    Usage:
        resolver = ArchitectureResolver(PlatformConfig(architecture="avr"))
        result = resolver.resolve(Path("libs/Servo"), sources)
        if result.success:
            compile(result.sources)
    """

    def __init__(self, platform: PlatformConfig):
        """
        Initialize resolver.

        Args:
            platform: Target platform configuration
        """
        self.platform = platform

    def resolve(
        self,
        library_root: Union[str, Path],
        sources: Sequence[S],
        properties_file: Optional[Union[str, Path]] = None,
    ) -> ResolutionResult:
        """
        Resolve which sources of a library apply to the platform.

        Args:
            library_root: Path to library's root directory. Can be relative.
            sources: Library sources to check and potentially filter
            properties_file: Explicit library.properties path (skips lookup)

        Returns:
            ResolutionResult describing the filtered sources or the failure
        """
        architecture = self.platform.architecture
        library_name = Path(library_root).resolve().name

        if properties_file is not None:
            props_path: Optional[Path] = Path(properties_file)
        else:
            props_path = find_library_properties(library_root)

        if props_path is None:
            return ResolutionResult(
                status=ResolutionStatus.OK,
                library_name=library_name,
                architecture=architecture,
                sources=list(sources),
                message="Library properties not found, assuming architecture-agnostic",
            )

        try:
            properties = LibraryProperties.from_file(props_path)
        except LibraryPropertiesError as e:
            return ResolutionResult(
                status=ResolutionStatus.MALFORMED_METADATA,
                library_name=library_name,
                architecture=architecture,
                properties_file=props_path,
                message=str(e),
                error=e,
            )

        library_name = properties.name or library_name
        declared = list(properties.architectures)

        if properties.is_architecture_agnostic:
            return ResolutionResult(
                status=ResolutionStatus.OK,
                library_name=library_name,
                architecture=architecture,
                sources=list(sources),
                properties_file=props_path,
                message=f"{library_name} supports all architectures",
            )

        if not is_architecture_supported(declared, architecture):
            error = UnsupportedArchitectureError(library_name, architecture)
            return ResolutionResult(
                status=ResolutionStatus.UNSUPPORTED_ARCHITECTURE,
                library_name=library_name,
                architecture=architecture,
                properties_file=props_path,
                message=str(error),
                error=error,
            )

        pattern = build_unsupported_architectures_pattern(
            declared, self.platform.known_architectures
        )
        valid_sources = filter_unsupported_sources(pattern, sources, relative_to=library_root)

        logger.debug(
            "%s: %d of %d sources kept for %s",
            library_name,
            len(valid_sources),
            len(sources),
            architecture,
        )

        return ResolutionResult(
            status=ResolutionStatus.OK,
            library_name=library_name,
            architecture=architecture,
            sources=valid_sources,
            properties_file=props_path,
            message=f"{len(valid_sources)} of {len(sources)} sources apply to {architecture}",
        )


def resolve_library_architecture(
    library_root: Union[str, Path],
    sources: Sequence[S],
    platform: PlatformConfig,
    properties_file: Optional[Union[str, Path]] = None,
) -> List[S]:
    """
    Resolve a library's sources, raising if the library can't be built.

    Args:
        library_root: Path to library's root directory. Can be relative.
        sources: Library sources to check and potentially filter
        platform: Target platform configuration
        properties_file: Explicit library.properties path

    Returns:
        Sources that don't relate to any unsupported architecture

    Raises:
        UnsupportedArchitectureError: If the platform's architecture isn't supported
        LibraryPropertiesError: If the library's properties file is malformed
    """
    result = ArchitectureResolver(platform).resolve(library_root, sources, properties_file)
    return result.raise_for_status()
