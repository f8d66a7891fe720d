"""
Exception types and error reporting for the rebirth supervisor.

This module defines the error taxonomy used across the supervisor
(configuration, build, process, remote and identity errors) together with the
single reporting sink, ``handle_error``, that every component logs through.
"""

import logging
import sys
from enum import Enum
from typing import Any, List, Optional, Sequence, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class RebirthError(Exception):
    """Base class for all errors raised by the supervisor."""


class ValidationError(RebirthError):
    """
    Exception raised when configuration validation fails.

    Carries the offending field name and value so the operator can locate
    the problem in the configuration file.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


class BuildError(RebirthError):
    """A build phase command or the compile step failed."""

    def __init__(self, message: str, phase: Optional[str] = None,
                 command: Optional[str] = None, returncode: Optional[int] = None):
        super().__init__(message)
        self.phase = phase
        self.command = command
        self.returncode = returncode


class ProcessError(RebirthError):
    """Process lifecycle failure."""


class ProcessStartError(ProcessError):
    """The OS refused to spawn the program."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class RemoteCommandError(RebirthError):
    """
    A command executed in the remote target reported failure.

    The target, argv and exit status are kept so a failed signal delivery can
    be remediated by hand.
    """

    def __init__(self, message: str, target: str, argv: Sequence[str],
                 returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.target = target
        self.argv: List[str] = list(argv)
        self.returncode = returncode
        self.stderr = stderr


class IdentityError(RebirthError):
    """The persisted process identity record could not be used."""


class IdentityNotFoundError(IdentityError):
    """No process identity record has been written yet."""


class IdentityCorruptError(IdentityError):
    """The process identity record does not hold a valid integer."""


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Handle errors with consistent logging and optional re-raising.

    Args:
        error: The exception that occurred
        context: Context description of where the error occurred
        severity: Severity level for logging
        reraise: Whether to re-raise the exception after logging
        logger: Logger instance to use (defaults to module logger)
    """
    effective_logger = logger or globals()['logger']

    error_msg = f"Error in {context}: {error}"

    # Handle both enum and string severity values
    if isinstance(severity, str):
        severity_str = severity.lower()
    else:
        severity_str = severity.value

    if severity_str == "debug":
        effective_logger.debug(error_msg, exc_info=True)
    elif severity_str == "info":
        effective_logger.info(error_msg)
    elif severity_str == "warning":
        effective_logger.warning(error_msg)
    elif severity_str == "error":
        effective_logger.error(error_msg)
    elif severity_str == "critical":
        effective_logger.critical(error_msg, exc_info=True)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """Handle CLI-related errors."""
    exit_code = kwargs.pop('exit_code', 1)
    include_traceback = kwargs.pop('include_traceback', False)

    severity = kwargs.pop('severity', ErrorSeverity.CRITICAL if include_traceback else ErrorSeverity.ERROR)
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)

    sys.exit(exit_code)
