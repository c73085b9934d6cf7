"""Configuration parsing modules for archresolver."""

from .architectures import KNOWN_ARCHITECTURES, PLATFORM_ARCHITECTURES, WILDCARD
from .ini_parser import PlatformIOConfig, PlatformIOConfigError
from .library_properties import LibraryProperties, LibraryPropertiesError
from .platform_config import PlatformConfig, PlatformConfigError

__all__ = [
    "KNOWN_ARCHITECTURES",
    "PLATFORM_ARCHITECTURES",
    "WILDCARD",
    "PlatformIOConfig",
    "PlatformIOConfigError",
    "LibraryProperties",
    "LibraryPropertiesError",
    "PlatformConfig",
    "PlatformConfigError",
]
