"""
Configuration validation utilities.

This module turns the raw `[host]`, `[build]` and `[run]` tables into
validated configuration models.
"""

import logging
from typing import Any, Dict, Optional

from ..models.config import DEFAULT_BUILD_COMMAND, BuildConfig, HostConfig, RunConfig
from ..validation import (
    ValidationError,
    validate_command_list,
    validate_command_template,
    validate_container_name,
    validate_env_mapping,
)

logger = logging.getLogger(__name__)

_BUILD_KEYS = {"init", "before", "after", "env", "command", "source"}


def _require_table(data: Any, section: str) -> Dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(
            f"[{section}] must be a table, got {type(data).__name__}",
            field_name=section,
            value=data,
        )
    return data


def validate_host_config(host_data: Optional[Dict[str, Any]]) -> HostConfig:
    """
    Validate and create a HostConfig from the raw `[host]` table.

    Raises:
        ValidationError: If the container name is malformed
    """
    host_data = _require_table(host_data, "host")
    docker = host_data.get("docker", "")
    if docker == "":
        return HostConfig()
    return HostConfig(docker=validate_container_name(docker, field_name="host.docker"))


def validate_build_config(build_data: Optional[Dict[str, Any]]) -> BuildConfig:
    """
    Validate and create a BuildConfig from the raw `[build]` table.

    Args:
        build_data: Raw build configuration from TOML

    Returns:
        Validated BuildConfig instance

    Raises:
        ValidationError: If validation fails
    """
    build_data = _require_table(build_data, "build")

    unknown = set(build_data) - _BUILD_KEYS
    if unknown:
        logger.warning(f"Ignoring unknown keys in [build]: {', '.join(sorted(unknown))}")

    source = build_data.get("source", ".")
    if not isinstance(source, str) or not source:
        raise ValidationError(
            "build.source must be a non-empty path string",
            field_name="build.source",
            value=source,
        )

    return BuildConfig(
        init=validate_command_list(build_data.get("init"), field_name="build.init"),
        before=validate_command_list(build_data.get("before"), field_name="build.before"),
        after=validate_command_list(build_data.get("after"), field_name="build.after"),
        env=validate_env_mapping(build_data.get("env"), field_name="build.env"),
        command=validate_command_template(
            build_data.get("command", DEFAULT_BUILD_COMMAND), field_name="build.command"
        ),
        source=source,
    )


def validate_run_config(run_data: Optional[Dict[str, Any]]) -> RunConfig:
    """
    Validate and create a RunConfig from the raw `[run]` table.

    Raises:
        ValidationError: If the environment mapping is invalid
    """
    run_data = _require_table(run_data, "run")
    return RunConfig(env=validate_env_mapping(run_data.get("env"), field_name="run.env"))
