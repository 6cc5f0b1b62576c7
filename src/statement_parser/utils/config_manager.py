"""Configuration management for the statement parser."""

import codecs
import json
import logging
import os
from typing import Dict, Any, Optional

import yaml

from ..models.core import ParserConfig


logger = logging.getLogger(__name__)

SEARCH_PATHS = [
    'statement_parser.json',
    'statement_parser.yml',
    'statement_parser.yaml',
    'config/statement_parser.json',
    'config/statement_parser.yml',
    'config/statement_parser.yaml',
    '~/.statement_parser/config.json',
    '~/.statement_parser/config.yml',
]

CONFIG_KEYS = (
    'root_marker',
    'encoding',
    'auto_close',
    'max_depth',
    'strict_mixed_content',
    'num_workers',
    'supported_extensions',
    'log_directory',
)


class ConfigManager:
    """Manages loading and validation of parser configuration"""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager

        Args:
            config_path: Path to configuration file. If None, searches for default locations.
        """
        self.config_path = config_path
        self._config_cache: Optional[ParserConfig] = None

    def load_config(self, force_reload: bool = False) -> ParserConfig:
        """Load parser configuration from file or return default

        Args:
            force_reload: Force reload from file even if cached

        Returns:
            ParserConfig instance with loaded or default configuration
        """
        if self._config_cache is not None and not force_reload:
            return self._config_cache

        config_data = self._load_config_file()
        self._config_cache = ParserConfig(
            **{key: config_data[key] for key in CONFIG_KEYS if key in config_data}
        )
        logger.debug(f"Configuration loaded from {self.config_path or 'defaults'}")
        return self._config_cache

    def _load_config_file(self) -> Dict[str, Any]:
        """Load configuration from file

        Returns:
            Dictionary with configuration data or empty dict if no file found
            or the file is invalid
        """
        config_file = self._find_config_file()

        if not config_file or not os.path.exists(config_file):
            logger.debug("No configuration file found, using defaults")
            return {}

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                if config_file.endswith('.json'):
                    data = json.load(f)
                elif config_file.endswith(('.yml', '.yaml')):
                    data = yaml.safe_load(f)
                else:
                    logger.warning(f"Unsupported config file format: {config_file}")
                    return {}

            self._validate_config_data(data)
            logger.info(f"Configuration loaded from {config_file}")
            return data

        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning(f"Error reading configuration file {config_file}: {e}. Using defaults.")
            return {}

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in standard locations

        Returns:
            Path to configuration file or None if not found
        """
        if self.config_path:
            return self.config_path

        for path in SEARCH_PATHS:
            path = os.path.expanduser(path)
            if os.path.exists(path):
                return path

        return None

    def _validate_config_data(self, data: Dict[str, Any]) -> None:
        """Validate configuration data structure

        Args:
            data: Configuration data to validate

        Raises:
            ValueError: If configuration data is invalid
        """
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a dictionary")

        for key in data:
            if key not in CONFIG_KEYS:
                logger.warning(f"Unknown configuration key: {key}")

        for str_key in ['root_marker', 'encoding']:
            if str_key in data:
                if not isinstance(data[str_key], str) or not data[str_key].strip():
                    raise ValueError(f"{str_key} must be a non-empty string")

        if 'root_marker' in data:
            marker = data['root_marker'].strip()
            if not (marker.startswith('<') and marker.endswith('>')):
                raise ValueError("root_marker must look like <NAME>")

        if 'encoding' in data:
            try:
                codecs.lookup(data['encoding'])
            except LookupError:
                raise ValueError(f"Unknown encoding: {data['encoding']}") from None

        for bool_key in ['auto_close', 'strict_mixed_content']:
            if bool_key in data and not isinstance(data[bool_key], bool):
                raise ValueError(f"{bool_key} must be a boolean")

        if data.get('max_depth') is not None:
            if not isinstance(data['max_depth'], int) or isinstance(data['max_depth'], bool) \
                    or data['max_depth'] < 1:
                raise ValueError("max_depth must be a positive integer or null")

        if 'num_workers' in data:
            if not isinstance(data['num_workers'], int) or isinstance(data['num_workers'], bool) \
                    or data['num_workers'] < 1:
                raise ValueError("num_workers must be a positive integer")

        if 'supported_extensions' in data:
            if not isinstance(data['supported_extensions'], list):
                raise ValueError("supported_extensions must be a list")
            for ext in data['supported_extensions']:
                if not isinstance(ext, str) or not ext.startswith('.'):
                    raise ValueError("All extensions must be strings starting with '.'")

        if data.get('log_directory') is not None and not isinstance(data['log_directory'], str):
            raise ValueError("log_directory must be a string")

    def save_config_template(self, output_path: str) -> None:
        """Generate and save a configuration file template

        Args:
            output_path: Path where to save the template
        """
        template = {
            "root_marker": "<OFX>",
            "encoding": "utf-8",
            "auto_close": True,
            "max_depth": None,
            "strict_mixed_content": False,
            "num_workers": 3,
            "supported_extensions": [".qfx", ".ofx"],
            "log_directory": "logs",
        }

        output_dir = os.path.dirname(output_path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            if output_path.endswith(('.yml', '.yaml')):
                yaml.safe_dump(template, f, default_flow_style=False, indent=2, sort_keys=False)
            else:
                json.dump(template, f, indent=2)

        logger.info(f"Configuration template saved to {output_path}")

    def update_config(self, updates: Dict[str, Any]) -> None:
        """Update configuration with new values

        Args:
            updates: Dictionary of configuration updates
        """
        if self._config_cache is None:
            self.load_config()

        for key, value in updates.items():
            if hasattr(self._config_cache, key):
                setattr(self._config_cache, key, value)
                logger.debug(f"Updated configuration: {key} = {value}")
            else:
                logger.warning(f"Unknown configuration key: {key}")

    def reset_config(self) -> None:
        """Reset configuration cache, forcing reload on next access"""
        self._config_cache = None
        logger.debug("Configuration cache reset")


def get_default_config_manager() -> ConfigManager:
    """Get a default configuration manager instance"""
    return ConfigManager()
