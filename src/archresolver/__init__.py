"""archresolver - Arduino library architecture resolution."""

from archresolver.config import (
    LibraryProperties,
    LibraryPropertiesError,
    PlatformConfig,
    PlatformConfigError,
)
from archresolver.resolver import (
    ArchitectureResolver,
    ResolutionResult,
    ResolutionStatus,
    UnsupportedArchitectureError,
    resolve_library_architecture,
)

__version__ = "0.1.0"

__all__ = [
    "ArchitectureResolver",
    "LibraryProperties",
    "LibraryPropertiesError",
    "PlatformConfig",
    "PlatformConfigError",
    "ResolutionResult",
    "ResolutionStatus",
    "UnsupportedArchitectureError",
    "resolve_library_architecture",
]
