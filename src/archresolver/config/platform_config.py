"""
Target platform configuration.

The platform architecture is decided once, before any library is resolved,
and handed to the resolver explicitly. It can come from the command line,
from the environment or from a platformio.ini environment.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

from archresolver.config.architectures import (
    KNOWN_ARCHITECTURES,
    get_platform_architecture,
    normalize_architecture,
    normalize_architectures,
)
from archresolver.config.ini_parser import PlatformIOConfig

ARCHITECTURE_ENV_VAR = "ARCHRES_PLATFORM_ARCHITECTURE"
KNOWN_ARCHITECTURES_ENV_VAR = "ARCHRES_KNOWN_ARCHITECTURES"


class PlatformConfigError(Exception):
    """Exception raised when the target platform can't be determined."""

    pass


@dataclass(frozen=True)
class PlatformConfig:
    """
    Read-only description of the build target.

    Attributes:
        architecture: Target architecture identifier (lowercase, non-empty)
        known_architectures: Universe of architectures used to compute the
            set a library doesn't support
    """

    architecture: str
    known_architectures: Tuple[str, ...] = KNOWN_ARCHITECTURES

    def __post_init__(self) -> None:
        architecture = normalize_architecture(self.architecture or "")
        if not architecture:
            raise PlatformConfigError("Platform architecture must be a non-empty string")
        # Frozen dataclass, normalize in place
        object.__setattr__(self, "architecture", architecture)
        object.__setattr__(
            self, "known_architectures", tuple(normalize_architectures(self.known_architectures))
        )

    @classmethod
    def from_sources(
        cls,
        architecture: Optional[str] = None,
        project_dir: Optional[Path] = None,
        env_name: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "PlatformConfig":
        """
        Build a PlatformConfig from the first source that provides an architecture.

        Precedence:
            1. Explicit ``architecture`` argument
            2. ARCHRES_PLATFORM_ARCHITECTURE environment variable
            3. The ``platform`` of a platformio.ini environment in ``project_dir``

        ARCHRES_KNOWN_ARCHITECTURES (comma-separated) extends the known
        architecture universe.

        Raises:
            PlatformConfigError: If no source yields an architecture
        """
        if environ is None:
            environ = os.environ

        known = list(KNOWN_ARCHITECTURES)
        extra = environ.get(KNOWN_ARCHITECTURES_ENV_VAR, "")
        known.extend(extra.split(","))

        if architecture:
            return cls(architecture=architecture, known_architectures=tuple(known))

        env_arch = environ.get(ARCHITECTURE_ENV_VAR, "").strip()
        if env_arch:
            return cls(architecture=env_arch, known_architectures=tuple(known))

        if project_dir is not None:
            return cls(
                architecture=cls._architecture_from_project(Path(project_dir), env_name),
                known_architectures=tuple(known),
            )

        raise PlatformConfigError(
            "Platform architecture not specified. Pass --arch, set "
            + f"{ARCHITECTURE_ENV_VAR} or point to a platformio.ini project"
        )

    @staticmethod
    def _architecture_from_project(project_dir: Path, env_name: Optional[str]) -> str:
        ini_path = project_dir / "platformio.ini"
        config = PlatformIOConfig(ini_path)

        if env_name is None:
            env_name = config.get_default_environment()
            if env_name is None:
                raise PlatformConfigError(f"No environments found in {ini_path}")
        elif not config.has_environment(env_name):
            available = ", ".join(config.get_environments())
            raise PlatformConfigError(
                f"Environment '{env_name}' not found in {ini_path}. "
                + f"Available environments: {available or 'none'}"
            )

        platform = config.get_platform(env_name)
        architecture = get_platform_architecture(platform)
        if architecture is None:
            raise PlatformConfigError(
                f"Unknown platform '{platform}' in environment '{env_name}'; "
                + "pass the architecture explicitly"
            )
        return architecture
