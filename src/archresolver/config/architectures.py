"""
Architecture identifiers for Arduino-style platforms.

This module centralizes the architecture names used in library.properties
files and the mapping from PlatformIO platform names to those architectures,
making it easier to maintain and extend.
"""

from typing import Iterable, List, Optional

# Wildcard entry meaning "all architectures"
WILDCARD = "*"

# Architectures known to the resolver (the universe used to compute the
# unsupported set), as declared by library.properties files of the official
# and common third-party cores. Order is preserved in generated filter patterns.
KNOWN_ARCHITECTURES = (
    "avr",
    "megaavr",
    "sam",
    "samd",
    "esp8266",
    "esp32",
    "stm32",
    "stm32f4",
    "nrf52",
    "mbed",
    "mbed_nano",
    "mbed_edge",
    "mbed_giga",
    "mbed_nicla",
    "mbed_opta",
    "mbed_portenta",
    "mbed_rp2040",
    "rp2040",
    "renesas",
    "renesas_portenta",
    "renesas_uno",
    "arc32",
)

# PlatformIO platform -> Arduino architecture
PLATFORM_ARCHITECTURES = {
    "atmelavr": "avr",
    "atmelmegaavr": "megaavr",
    "atmelsam": "samd",
    "espressif8266": "esp8266",
    "espressif32": "esp32",
    "ststm32": "stm32",
    "nordicnrf52": "nrf52",
    "raspberrypi": "rp2040",
    "renesas-ra": "renesas",
    "intel_arc32": "arc32",
}


def normalize_architecture(architecture: str) -> str:
    """Normalize an architecture identifier (stripped, lowercase)."""
    return architecture.strip().lower()


def normalize_architectures(architectures: Iterable[str]) -> List[str]:
    """
    Normalize a sequence of architecture identifiers.

    Empty entries are dropped and duplicates removed, keeping the first
    occurrence so the declared order survives.

    Args:
        architectures: Architecture identifiers (any case)

    Returns:
        List of lowercase identifiers in original order
    """
    normalized: List[str] = []
    for arch in architectures:
        arch = normalize_architecture(arch)
        if arch and arch not in normalized:
            normalized.append(arch)
    return normalized


def get_platform_architecture(platform: str) -> Optional[str]:
    """
    Get the Arduino architecture for a PlatformIO platform name.

    Args:
        platform: PlatformIO platform (e.g., 'atmelavr')

    Returns:
        Architecture identifier if known, None otherwise
    """
    return PLATFORM_ARCHITECTURES.get(platform.strip().lower())
