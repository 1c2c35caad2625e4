"""
Configuration loading package for sfind.

This package turns defaults, an optional YAML file and command line options
into the immutable search configuration.
"""

from .parser import (
    ConfigParser,
    ConfigParseResult,
    ConfigurationError,
    load_config,
)

__all__ = [
    'ConfigParser',
    'ConfigParseResult',
    'ConfigurationError',
    'load_config',
]
