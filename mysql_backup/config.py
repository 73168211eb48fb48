"""
Configuration loading and validation for MySQL Backup.
"""

import os
import re
from typing import Any

import yaml


class ConfigLoader:
    """Loads and validates configuration from YAML file."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')
    REQUIRED_CONNECTION_KEYS = ('host', 'user', 'database')

    def __init__(self, config_path: str):
        self.config_path = config_path
        self.config = self._load_config()

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(self.config_path, 'r') as f:
            config = yaml.safe_load(f)

        return self._resolve_env_vars(config or {})

    def _resolve_env_vars(self, obj: Any) -> Any:
        """Recursively resolve environment variables in config."""
        if isinstance(obj, str):
            matches = self.ENV_VAR_PATTERN.findall(obj)
            for match in matches:
                env_value = os.environ.get(match, '')
                obj = obj.replace(f'${{{match}}}', env_value)
            return obj
        elif isinstance(obj, dict):
            return {k: self._resolve_env_vars(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [self._resolve_env_vars(item) for item in obj]
        return obj

    def get_connection_settings(self) -> dict[str, Any]:
        """Get database connection configuration."""
        connection = self.config.get('connection')
        if not connection:
            raise ValueError("Section 'connection' not found in configuration")

        missing = [key for key in self.REQUIRED_CONNECTION_KEYS if not connection.get(key)]
        if missing:
            raise ValueError(f"Missing connection setting(s): {', '.join(missing)}")
        return connection

    def get_backup_settings(self) -> dict[str, Any]:
        """Get backup settings."""
        return self.config.get('backup', {})

    def get_restore_settings(self) -> dict[str, Any]:
        """Get restore settings."""
        return self.config.get('restore', {})

    def get_logging_settings(self) -> dict[str, Any]:
        """Get logging settings."""
        return self.config.get('logging', {})
