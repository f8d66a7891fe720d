"""
Validation and error handling for the rebirth package.

This module provides configuration value validation and the error taxonomy
with consistent error reporting across the supervisor.
"""

from .exceptions import (
    BuildError,
    ErrorSeverity,
    IdentityCorruptError,
    IdentityError,
    IdentityNotFoundError,
    ProcessError,
    ProcessStartError,
    RebirthError,
    RemoteCommandError,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
)

from .validators import (
    validate_command_list,
    validate_command_template,
    validate_container_name,
    validate_env_mapping,
)

__all__ = [
    # Errors
    "RebirthError",
    "ValidationError",
    "BuildError",
    "ProcessError",
    "ProcessStartError",
    "RemoteCommandError",
    "IdentityError",
    "IdentityNotFoundError",
    "IdentityCorruptError",
    # Reporting
    "ErrorSeverity",
    "handle_error",
    "handle_config_error",
    "handle_cli_error",
    # Validators
    "validate_command_list",
    "validate_command_template",
    "validate_container_name",
    "validate_env_mapping",
]
