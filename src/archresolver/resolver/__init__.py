"""Architecture resolution for Arduino libraries."""

from .architecture_resolver import (
    ArchitectureResolver,
    ResolutionResult,
    ResolutionStatus,
    UnsupportedArchitectureError,
    build_unsupported_architectures_pattern,
    filter_unsupported_sources,
    find_library_properties,
    get_library_architectures,
    get_unsupported_architectures,
    is_architecture_supported,
    resolve_library_architecture,
)
from .source_scanner import LibrarySourceScanner

__all__ = [
    "ArchitectureResolver",
    "ResolutionResult",
    "ResolutionStatus",
    "UnsupportedArchitectureError",
    "build_unsupported_architectures_pattern",
    "filter_unsupported_sources",
    "find_library_properties",
    "get_library_architectures",
    "get_unsupported_architectures",
    "is_architecture_supported",
    "resolve_library_architecture",
    "LibrarySourceScanner",
]
