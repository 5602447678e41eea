"""
emloader.ini configuration parser.

This module parses emloader.ini project files and turns an environment
section into a target identifier plus a LoaderOptions record.
"""

import configparser
import shlex
from pathlib import Path
from typing import Dict, List, Optional

from .loader_options import LoaderOptions

DEFAULT_TARGET = "web"


class LoaderConfigError(Exception):
    """Exception raised for emloader.ini configuration errors."""

    pass


class LoaderConfig:
    """
    Parser for emloader.ini configuration files.

    Example emloader.ini:
        [emloader]
        default_envs = web

        [env]
        includes = include

        [env:web]
        target = web
        data = assets
        use_gl = yes
        extra_flags = -O2 -s ALLOW_MEMORY_GROWTH=1
        exported_funcs = _add, _sub

    Usage:
        config = LoaderConfig(Path("emloader.ini"))
        options = config.get_loader_options("web")
        target = config.get_target("web")
    """

    FILE_NAME = "emloader.ini"

    def __init__(self, ini_path: Path):
        """
        Initialize the parser with an emloader.ini file.

        Args:
            ini_path: Path to the emloader.ini file

        Raises:
            LoaderConfigError: If the file doesn't exist or cannot be parsed
        """
        self.ini_path = ini_path

        if not ini_path.exists():
            raise LoaderConfigError(f"Configuration file not found: {ini_path}")

        self.config = configparser.ConfigParser(
            allow_no_value=True, interpolation=configparser.ExtendedInterpolation()
        )

        try:
            self.config.read(ini_path, encoding="utf-8")
        except configparser.Error as e:
            raise LoaderConfigError(f"Failed to parse {ini_path}: {e}") from e

    def get_environments(self) -> List[str]:
        """
        Get list of all environment names defined in the config.

        Returns:
            List of environment names (e.g., ['web', 'node'])
        """
        envs = []
        for section in self.config.sections():
            if section.startswith("env:"):
                envs.append(section.split(":", 1)[1])
        return envs

    def get_env_config(self, env_name: str) -> Dict[str, str]:
        """
        Get raw configuration for a specific environment.

        Values from a base [env] section are inherited and overridden by the
        environment's own section.

        Args:
            env_name: Name of the environment (e.g., 'web')

        Returns:
            Dictionary of configuration key-value pairs

        Raises:
            LoaderConfigError: If environment not found
        """
        section = f"env:{env_name}"

        if section not in self.config:
            available = ", ".join(self.get_environments())
            raise LoaderConfigError(
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
            raise LoaderConfigError(f"Failed to read [{section}] in {self.ini_path}: {e}") from e

        return env_config

    def get_target(self, env_name: str) -> str:
        """Return the ENVIRONMENT value for an environment (default 'web')."""
        return self.get_env_config(env_name).get("target") or DEFAULT_TARGET

    def get_loader_options(self, env_name: str) -> LoaderOptions:
        """
        Build a LoaderOptions record for an environment.

        Args:
            env_name: Name of the environment

        Returns:
            LoaderOptions with list values split on newlines and commas and
            extra_flags split with shell quoting rules

        Raises:
            LoaderConfigError: On malformed boolean or flag values
        """
        env_config = self.get_env_config(env_name)

        extra_flags_str = env_config.get("extra_flags", "")
        try:
            extra_flags = tuple(shlex.split(extra_flags_str)) if extra_flags_str else ()
        except ValueError as e:
            raise LoaderConfigError(
                f"Invalid extra_flags in environment '{env_name}': {e}"
            ) from e

        return LoaderOptions(
            includes=tuple(self._split_list(env_config.get("includes", ""))),
            data=tuple(self._split_list(env_config.get("data", ""))),
            use_gl=self._get_bool(env_config, "use_gl", env_name),
            extra_flags=extra_flags,
            exported_funcs=tuple(self._split_list(env_config.get("exported_funcs", ""))),
            strict_preload=self._get_bool(env_config, "strict_preload", env_name),
            es_module=self._get_bool(env_config, "es_module", env_name),
        )

    def has_environment(self, env_name: str) -> bool:
        """Check if an environment exists in the configuration."""
        return f"env:{env_name}" in self.config

    def get_default_environment(self) -> Optional[str]:
        """
        Get the default environment.

        Returns:
            First entry of [emloader] default_envs, or the first environment
            found, or None
        """
        if "emloader" in self.config:
            default_envs = (self.config["emloader"].get("default_envs") or "").strip()
            if default_envs:
                return default_envs.split(",")[0].strip()

        envs = self.get_environments()
        return envs[0] if envs else None

    @staticmethod
    def _split_list(value: str) -> List[str]:
        items = []
        for line in value.split("\n"):
            for item in line.split(","):
                item = item.strip()
                if item:
                    items.append(item)
        return items

    @staticmethod
    def _get_bool(env_config: Dict[str, str], key: str, env_name: str) -> bool:
        value = env_config.get(key, "")
        if not value:
            return False
        lowered = value.lower()
        if lowered in configparser.ConfigParser.BOOLEAN_STATES:
            return configparser.ConfigParser.BOOLEAN_STATES[lowered]
        raise LoaderConfigError(
            f"Option '{key}' in environment '{env_name}' must be a boolean, got '{value}'"
        )
