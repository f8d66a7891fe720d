"""
Configuration file loading utilities.

This module handles the loading and parsing of the `.rebirth.toml`
configuration file and assembles a validated AppConfig from it.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict

from ..models.config import AppConfig
from ..validation import ErrorSeverity, handle_config_error
from .validators import validate_build_config, validate_host_config, validate_run_config

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".rebirth.toml"


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Load and parse a TOML file with error handling.

    Args:
        file_path: Path to the TOML file to load
        description: Human-readable description for error messages

    Returns:
        Parsed TOML data as a dictionary

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the file is malformed
    """
    logger.info(f"Loading {description} from: {file_path}")

    if not file_path.exists():
        logger.error(f"{description} not found: {file_path}")
        raise FileNotFoundError(f"{description} not found: {file_path}")

    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {description}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise


def parse_config(data: Dict[str, Any], config_path: Path = None) -> AppConfig:
    """
    Build an AppConfig from already parsed configuration data.

    All three sections are optional; missing ones fall back to defaults.

    Raises:
        ValidationError: If any section holds invalid values
    """
    return AppConfig(
        host=validate_host_config(data.get("host")),
        build=validate_build_config(data.get("build")),
        run=validate_run_config(data.get("run")),
        config_path=config_path,
    )


def load_config(config_path: Path) -> AppConfig:
    """
    Load and validate the supervisor configuration.

    Args:
        config_path: Path to the `.rebirth.toml` file

    Returns:
        Fully validated AppConfig instance

    Raises:
        FileNotFoundError: If the configuration file is missing
        ValidationError: If configuration validation fails
        tomllib.TOMLDecodeError: If the file is malformed
    """
    config_path = Path(config_path)
    try:
        data = load_toml_file(config_path, "rebirth configuration file")
        app_config = parse_config(data, config_path=config_path)
    except FileNotFoundError as e:
        handle_config_error(
            error=e,
            context="loading configuration file",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise
    except tomllib.TOMLDecodeError:
        raise
    except Exception as e:
        handle_config_error(
            error=e,
            context="processing configuration",
            severity=ErrorSeverity.ERROR,
            reraise=True,
            logger=logger
        )
        raise

    target = app_config.remote_target or "none"
    logger.info(
        f"Loaded configuration: remote target {target}, "
        f"{len(app_config.build.init)} init / {len(app_config.build.before)} before / "
        f"{len(app_config.build.after)} after commands"
    )
    return app_config
