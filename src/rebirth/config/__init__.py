"""
Configuration management for the rebirth package.

This module provides loading and validation of the `.rebirth.toml`
configuration file. The loaded AppConfig is passed explicitly to the
supervisor; there is no module-level configuration state.
"""

from .loader import DEFAULT_CONFIG_FILE, load_config, load_toml_file, parse_config
from .validators import validate_build_config, validate_host_config, validate_run_config

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "load_config",
    "load_toml_file",
    "parse_config",
    "validate_host_config",
    "validate_build_config",
    "validate_run_config",
]
