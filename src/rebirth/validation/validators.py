"""
Validation functions for supervisor configuration values.

This module provides the field-level checks the configuration validators are
built on: command lists, environment mappings, container names and the
compile command template.
"""

import re
from typing import Any, Dict, Tuple

from .exceptions import ValidationError

_CONTAINER_NAME_RE = re.compile(r'^[a-zA-Z0-9][a-zA-Z0-9_.-]*$')
_ENV_NAME_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


def validate_command_list(value: Any, field_name: str = "commands") -> Tuple[str, ...]:
    """
    Validate an ordered list of shell-style commands.

    Args:
        value: Raw value from the configuration (list of strings or None)
        field_name: Name of the field being validated

    Returns:
        The commands as a tuple, order preserved

    Raises:
        ValidationError: If the value is not a list of non-empty strings
    """
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ValidationError(
            f"{field_name} must be a list of commands, got {type(value).__name__}",
            field_name=field_name,
            value=value
        )

    commands = []
    for i, command in enumerate(value):
        if not isinstance(command, str) or not command.strip():
            raise ValidationError(
                f"{field_name} item {i} must be a non-empty string",
                field_name=f"{field_name}[{i}]",
                value=command
            )
        commands.append(command.strip())

    return tuple(commands)


def validate_env_mapping(value: Any, field_name: str = "env") -> Dict[str, str]:
    """
    Validate an environment variable mapping.

    Scalar values (numbers, booleans) are converted to strings since TOML
    allows them but the process environment does not.

    Args:
        value: Raw mapping from the configuration or None
        field_name: Name of the field being validated

    Returns:
        Mapping of variable name to string value

    Raises:
        ValidationError: If a name is not a valid identifier or a value is not scalar
    """
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidationError(
            f"{field_name} must be a table of NAME = value pairs",
            field_name=field_name,
            value=value
        )

    env = {}
    for name, raw in value.items():
        if not _ENV_NAME_RE.match(str(name)):
            raise ValidationError(
                f"{field_name} has an invalid variable name: {name!r}",
                field_name=f"{field_name}.{name}",
                value=name
            )
        if isinstance(raw, bool):
            env[name] = "true" if raw else "false"
        elif isinstance(raw, (str, int, float)):
            env[name] = str(raw)
        else:
            raise ValidationError(
                f"{field_name}.{name} must be a string or number, got {type(raw).__name__}",
                field_name=f"{field_name}.{name}",
                value=raw
            )

    return env


def validate_container_name(name: Any, field_name: str = "container") -> str:
    """
    Validate a docker container name.

    Raises:
        ValidationError: If name is empty or contains characters docker rejects
    """
    if not name or not isinstance(name, str):
        raise ValidationError(
            f"{field_name} must be a non-empty string",
            field_name=field_name,
            value=name
        )

    if not _CONTAINER_NAME_RE.match(name):
        raise ValidationError(
            f"{field_name} must contain only alphanumeric characters, underscores, periods, and hyphens: {name}",
            field_name=field_name,
            value=name
        )

    return name


def validate_command_template(template: Any, field_name: str = "command") -> str:
    """
    Validate the compile command template.

    The template must reference ``{output}`` so the artifact lands at the
    path the supervisor launches, and may reference ``{source}``.

    Raises:
        ValidationError: If template is invalid
    """
    if not template or not isinstance(template, str):
        raise ValidationError(
            f"{field_name} must be a non-empty string",
            field_name=field_name,
            value=template
        )

    if '{output}' not in template:
        raise ValidationError(
            f"{field_name} must contain the '{{output}}' placeholder",
            field_name=field_name,
            value=template
        )

    try:
        template.format(output="out", source="src")
    except (KeyError, IndexError, ValueError) as e:
        raise ValidationError(
            f"{field_name} has an unsupported placeholder: {e}",
            field_name=field_name,
            value=template
        )

    return template
