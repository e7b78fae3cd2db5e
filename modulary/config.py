"""
Config system - layered scheduler configuration with validation.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from glob import glob
from pathlib import Path
from typing import Any, Dict, Optional, get_args, get_origin, get_type_hints
import types

import yaml
from dotenv import dotenv_values

from .faults import ConfigInvalidFault

logger = logging.getLogger("modulary.config")


@dataclass
class SchedulerConfig:
    """
    Settings shared by the scheduler, the address composer and the
    markup renderer.
    """

    # Version appended to modules registered with ``version=False``.
    ambient_version: Optional[str] = None
    version_param: str = "ver"
    charset: str = "utf-8"
    importmap_id: str = "modulary-importmap"
    module_id_suffix: str = "-js-module"
    preload_id_suffix: str = "-js-modulepreload"
    data_id_prefix: str = "modulary-module-data-"


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources with precedence:
    overrides > environment variables > .env file > config files > defaults
    """

    def __init__(self, env_prefix: str = "MODULARY_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = "MODULARY_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources with proper merge strategy.

        Merge order (later overrides earlier):
        1. Config files (JSON or YAML, glob patterns supported)
        2. .env file entries carrying the prefix
        3. Environment variables carrying the prefix
        4. Manual overrides

        Args:
            paths: List of config file paths (glob patterns supported)
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        for pattern in paths or []:
            loader._load_from_files(pattern)

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_from_files(self, pattern: str):
        """Load config from JSON or YAML files."""
        matches = sorted(glob(pattern)) or [pattern]
        for path_str in matches:
            path = Path(path_str)
            if not path.exists():
                logger.debug(f"Config file not found: {path}")
                continue

            if path.suffix == ".json":
                self._load_json_file(path)
            elif path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)
            else:
                raise ConfigInvalidFault(str(path), "unsupported config file type")

    def _load_json_file(self, path: Path):
        """Load config from JSON file."""
        with open(path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigInvalidFault(str(path), f"invalid JSON: {e}") from e
            self._merge_dict(self.config_data, self._section(data))

    def _load_yaml_file(self, path: Path):
        """Load config from YAML file."""
        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigInvalidFault(str(path), f"invalid YAML: {e}") from e
            if data:
                self._merge_dict(self.config_data, self._section(data))

    @staticmethod
    def _section(data: Any) -> Dict[str, Any]:
        """Accept either a bare mapping or one nested under ``modulary:``."""
        if not isinstance(data, dict):
            raise ConfigInvalidFault("<root>", "config file must contain a mapping")
        if isinstance(data.get("modulary"), dict):
            return data["modulary"]
        return data

    def _load_env_file(self, path: str):
        """Load config from .env file."""
        env_path = Path(path)
        if not env_path.exists():
            return

        for key, value in dotenv_values(env_path).items():
            if key.startswith(self.env_prefix) and value is not None:
                self._set_nested(key, value)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert MODULARY_AMBIENT_VERSION to ``ambient_version``."""
        key = key[len(self.env_prefix):]

        # Split by double underscore for nested keys
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if part not in current:
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        current = self.config_data

        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def to_scheduler_config(self) -> SchedulerConfig:
        """
        Build and validate a SchedulerConfig from the merged data.

        Unknown keys are ignored.

        Raises:
            ConfigInvalidFault: If a value has the wrong type
        """
        hints = get_type_hints(SchedulerConfig)
        kwargs = {}

        for field_info in fields(SchedulerConfig):
            name = field_info.name
            if name not in self.config_data:
                continue
            value = self.config_data[name]
            # YAML reads `ambient_version: 6.9` as a float.
            if name == "ambient_version" and isinstance(value, (int, float)) and not isinstance(value, bool):
                value = str(value)
            if not self._check_type(value, hints[name]):
                raise ConfigInvalidFault(
                    name, f"expected {hints[name]}, got {type(value).__name__}"
                )
            kwargs[name] = value

        return SchedulerConfig(**kwargs)

    def _check_type(self, value: Any, expected_type: Any) -> bool:
        """Basic type checking."""
        origin = get_origin(expected_type)
        if origin is types.UnionType or str(origin) == "typing.Union":
            if value is None:
                return type(None) in get_args(expected_type)
            return any(
                self._check_type(value, arg)
                for arg in get_args(expected_type)
                if arg is not type(None)
            )

        if origin:
            return isinstance(value, origin)

        try:
            return isinstance(value, expected_type)
        except TypeError:
            return True

    def to_dict(self) -> dict:
        """Export all config as dictionary."""
        return self.config_data.copy()
