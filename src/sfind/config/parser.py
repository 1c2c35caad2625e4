"""
Configuration loading for sfind.

This module builds the single, immutable ``SearchConfig`` used for a run. Values
come from three layers: built-in defaults, an optional YAML defaults file, and
the options actually given on the command line, with later layers taking
precedence. All problems are reported as ``ConfigurationError`` before any
traversal starts.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Union
import logging
from dataclasses import dataclass

from pydantic import ValidationError

from ..models.config import SearchConfig


logger = logging.getLogger(__name__)


@dataclass
class ConfigParseResult:
    """
    Result of configuration parsing operation.

    Attributes:
        config: The parsed and validated configuration
        warnings: List of non-fatal warnings
        config_path: Path to the configuration file used
        is_default: Whether no configuration file was used
    """
    config: SearchConfig
    warnings: List[str]
    config_path: Optional[Path]
    is_default: bool


class ConfigurationError(Exception):
    """Raised when configuration parsing or validation fails."""
    pass


class ConfigParser:
    """
    Merges defaults, a YAML file and command line overrides into a SearchConfig.
    """

    DEFAULT_CONFIG_NAMES = [
        '.sfind.yaml',
        '.sfind.yml',
    ]

    CONFIG_KEYS = ('from', 'globs', 'excludes', 'paths', 'casefold')

    def __init__(self, strict_mode: bool = False):
        """
        Initialize the configuration parser.

        Args:
            strict_mode: If True, treat warnings as errors
        """
        self.strict_mode = strict_mode
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load_config(
        self,
        config_path: Optional[Union[str, Path]] = None,
        overrides: Optional[Dict[str, Any]] = None,
        discover: bool = True,
    ) -> ConfigParseResult:
        """
        Load and validate the search configuration.

        Args:
            config_path: YAML defaults file. If None, default locations are searched.
            overrides: Command line values; keys whose value is None were not given
            discover: Whether to search default locations when config_path is None

        Returns:
            ConfigParseResult containing the configuration and metadata

        Raises:
            ConfigurationError: If configuration is invalid or file cannot be read
        """
        if config_path:
            config_path = Path(config_path)
            if not config_path.exists():
                raise ConfigurationError(f"Configuration file not found: {config_path}")
            file_data = self._load_yaml_file(config_path)
        elif discover:
            config_path, file_data = self._find_and_load_config()
        else:
            file_data = None

        is_default = file_data is None

        config_data: Dict[str, Any] = {}
        config_data.update(file_data or {})
        config_data.update({k: v for k, v in (overrides or {}).items() if v is not None})

        config = self._build_config(config_data)

        warnings = self._get_warnings(config)
        if self.strict_mode and warnings:
            raise ConfigurationError(f"Configuration warnings in strict mode: {'; '.join(warnings)}")

        self.logger.debug(f"Configuration loaded from {config_path or 'defaults'}")

        return ConfigParseResult(
            config=config,
            warnings=warnings,
            config_path=config_path,
            is_default=is_default
        )

    def _find_and_load_config(self) -> tuple[Optional[Path], Optional[Dict[str, Any]]]:
        """
        Find and load configuration file from default locations.

        Returns:
            Tuple of (config_path, config_data) or (None, None) if not found
        """
        search_paths = [
            Path.cwd(),
            Path.home(),
            Path.home() / '.config' / 'sfind',
        ]

        for search_path in search_paths:
            for config_name in self.DEFAULT_CONFIG_NAMES:
                config_file = search_path / config_name
                if config_file.is_file():
                    self.logger.debug(f"Found configuration file: {config_file}")
                    return config_file, self._load_yaml_file(config_file)

        return None, None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Load and parse YAML file.

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed YAML data as dictionary

        Raises:
            ConfigurationError: If file cannot be read or parsed
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = f.read()

            if not content.strip():
                self.logger.warning(f"Configuration file is empty: {file_path}")
                return {}

            data = yaml.safe_load(content)

            if data is None:
                return {}

            if not isinstance(data, dict):
                raise ConfigurationError(f"Configuration file must contain a YAML object, got {type(data).__name__}")

            unknown = sorted(str(key) for key in data if key not in self.CONFIG_KEYS)
            if unknown:
                raise ConfigurationError(f"Unknown configuration keys in {file_path}: {', '.join(unknown)}")

            return data

        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {file_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {file_path}: {e}") from e

    def _build_config(self, config_data: Dict[str, Any]) -> SearchConfig:
        """
        Validate configuration data and create the SearchConfig.

        Raises:
            ConfigurationError: If any value is invalid
        """
        try:
            return SearchConfig.from_dict(config_data)
        except ValidationError as e:
            messages = [error['msg'] for error in e.errors()]
            raise ConfigurationError(f"Configuration validation failed: {'; '.join(messages)}") from e

    def _get_warnings(self, config: SearchConfig) -> List[str]:
        """
        Get non-fatal configuration warnings.

        Args:
            config: The parsed configuration

        Returns:
            List of warning messages
        """
        warnings = []

        for path in config.paths:
            if not os.path.lexists(path):
                warnings.append(f"Root path does not exist: {path}")

        separators = {os.sep, '/'} | ({os.altsep} if os.altsep else set())
        for name in config.excludes:
            if any(sep in name for sep in separators):
                warnings.append(f"Exclude {name!r} contains a path separator and can never match a path component")

        return warnings


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
    strict_mode: bool = False,
    discover: bool = True,
) -> ConfigParseResult:
    """
    Convenience function to load configuration.

    Args:
        config_path: Path to configuration file
        overrides: Command line values, None meaning "not given"
        strict_mode: Whether to treat warnings as errors
        discover: Whether to search default locations for a configuration file

    Returns:
        ConfigParseResult containing parsed configuration
    """
    parser = ConfigParser(strict_mode=strict_mode)
    return parser.load_config(config_path, overrides, discover)
