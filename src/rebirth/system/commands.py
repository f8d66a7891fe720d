"""
Command execution utilities.

This module provides functions for executing build and remote commands,
splitting shell-style command strings and preparing the environment they
run with.
"""

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Union

from ..models.runtime import CommandResult

logger = logging.getLogger(__name__)


def expand_path(value: str) -> str:
    """Expand '~' and '$VAR' tokens in an environment value."""
    return os.path.expanduser(os.path.expandvars(value))


def prepare_environment(
    overlay: Optional[Mapping[str, str]] = None, expand: bool = False
) -> Dict[str, str]:
    """Return a copy of the current environment with ``overlay`` applied.

    Args:
        overlay: Variables to add or override.
        expand: Whether to expand path tokens in the overlay values.
    """
    env = os.environ.copy()
    for name, value in (overlay or {}).items():
        env[name] = expand_path(value) if expand else value
    return env


def split_command(command: str) -> List[str]:
    """Split a shell-style command string into argv."""
    return shlex.split(command)


def run_command(
    command: Union[str, Sequence[str]],
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    capture_output: bool = True,
) -> CommandResult:
    """Execute a command and capture its output with robust error handling.

    Args:
        command: Shell-style command string or argv list. Never run through a shell.
        cwd: Working directory path for command execution.
        env: Full environment for the command, None to inherit.
        capture_output: Capture stdout/stderr, or let them pass through to ours.

    Returns:
        CommandResult; returncode is -1 when the command could not be executed.

    Note:
        Uses UTF-8 encoding with error replacement for robust text handling.
    """
    argv = split_command(command) if isinstance(command, str) else list(command)
    display = " ".join(argv)
    if not argv:
        return CommandResult(-1, "", "Error: empty command")

    logger.debug(f"Executing command: '{display}' in '{cwd or os.getcwd()}'")
    try:
        process = subprocess.run(
            argv,
            cwd=cwd,
            env=dict(env) if env is not None else None,
            capture_output=capture_output,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
        return CommandResult(process.returncode, process.stdout or "", process.stderr or "")
    except FileNotFoundError as e:
        logger.error(f"Command not found: {argv[0]}: {type(e).__name__}: {e}")
        return CommandResult(-1, "", f"Error: Command not found '{argv[0]}'")
    except PermissionError as e:
        logger.error(f"Permission denied running {argv[0]}: {e}")
        return CommandResult(-1, "", f"Error: Permission denied '{argv[0]}'")
    except OSError as e:
        logger.error(f"Unexpected error while running command '{display[:50]}': {type(e).__name__}: {e}", exc_info=True)
        return CommandResult(-1, "", f"An unexpected error occurred: {e}")
