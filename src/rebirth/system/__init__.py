"""
System interaction utilities.

This module provides command execution with proper error handling and
logging, environment preparation for build hooks and the launched program,
and the gateway that runs commands inside a remote container.
"""

from .commands import expand_path, prepare_environment, run_command, split_command
from .remote import RemoteCommandGateway

__all__ = [
    "expand_path",
    "prepare_environment",
    "run_command",
    "split_command",
    "RemoteCommandGateway",
]
