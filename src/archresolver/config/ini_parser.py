"""
PlatformIO.ini configuration parser.

This module reads platformio.ini files to find out which platform an
environment targets, so the target architecture can be derived from the
project instead of being passed by hand.
"""

import configparser
from pathlib import Path
from typing import Dict, List, Optional


class PlatformIOConfigError(Exception):
    """Exception raised for platformio.ini configuration errors."""

    pass


class PlatformIOConfig:
    """
    Parser for platformio.ini configuration files.

    Example platformio.ini:
        [env:uno]
        platform = atmelavr
        board = uno
        framework = arduino

    Usage:
        config = PlatformIOConfig(Path("platformio.ini"))
        config.get_platform("uno")  # 'atmelavr'
    """

    REQUIRED_FIELDS = {"platform"}

    def __init__(self, ini_path: Path):
        """
        Initialize the parser with a platformio.ini file.

        Args:
            ini_path: Path to the platformio.ini file

        Raises:
            PlatformIOConfigError: If the file doesn't exist or cannot be parsed
        """
        self.ini_path = ini_path

        if not ini_path.exists():
            raise PlatformIOConfigError(f"Configuration file not found: {ini_path}")

        self.config = configparser.ConfigParser(
            allow_no_value=True, interpolation=configparser.ExtendedInterpolation()
        )

        try:
            self.config.read(ini_path, encoding="utf-8")
        except configparser.Error as e:
            raise PlatformIOConfigError(f"Failed to parse {ini_path}: {e}") from e

    def get_environments(self) -> List[str]:
        """
        Get list of all environment names defined in the config.

        Example:
            For [env:uno], [env:esp32dev], returns ['uno', 'esp32dev']
        """
        envs = []
        for section in self.config.sections():
            if section.startswith("env:"):
                envs.append(section.split(":", 1)[1])
        return envs

    def get_env_config(self, env_name: str) -> Dict[str, str]:
        """
        Get configuration for a specific environment.

        Values from a base [env] section are inherited and overridden by the
        environment's own values.

        Args:
            env_name: Name of the environment (e.g., 'uno')

        Returns:
            Dictionary of configuration key-value pairs

        Raises:
            PlatformIOConfigError: If environment not found or missing required fields
        """
        section = f"env:{env_name}"

        if section not in self.config:
            available = ", ".join(self.get_environments())
            raise PlatformIOConfigError(
                f"Environment '{env_name}' not found. "
                + f"Available environments: {available or 'none'}"
            )

        try:
            env_config = {
                key: (value or "").strip() for key, value in self.config[section].items()
            }
            if "env" in self.config:
                base_config = {
                    key: (value or "").strip() for key, value in self.config["env"].items()
                }
                env_config = {**base_config, **env_config}
        except configparser.Error as e:
            raise PlatformIOConfigError(
                f"Failed to read environment '{env_name}' from {self.ini_path}: {e}"
            ) from e

        missing_fields = self.REQUIRED_FIELDS - {k for k, v in env_config.items() if v}
        if missing_fields:
            raise PlatformIOConfigError(
                f"Environment '{env_name}' is missing required fields: "
                + f"{', '.join(sorted(missing_fields))}"
            )

        return env_config

    def get_platform(self, env_name: str) -> str:
        """
        Get the PlatformIO platform of an environment.

        Args:
            env_name: Name of the environment

        Returns:
            Platform name (e.g., 'atmelavr', 'espressif32')
        """
        return self.get_env_config(env_name)["platform"]

    def has_environment(self, env_name: str) -> bool:
        """Check if an environment exists in the configuration."""
        return f"env:{env_name}" in self.config

    def get_default_environment(self) -> Optional[str]:
        """
        Get the default environment from platformio.ini.

        Returns:
            Default environment name, or first available environment, or None

        Example:
            If [platformio] section has default_envs = uno, returns 'uno'
            Otherwise returns the first environment found
        """
        if "platformio" in self.config:
            default_envs = (self.config["platformio"].get("default_envs") or "").strip()
            if default_envs:
                # Can be comma-separated, take the first one
                return default_envs.split(",")[0].strip()

        envs = self.get_environments()
        return envs[0] if envs else None
