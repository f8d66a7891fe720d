"""
Data models for the supervisor.

Configuration Models:
- Remote host descriptor, build pipeline and run settings

Runtime Models:
- Filesystem layout of the configuration directory
- Topology, lifecycle state and trigger enumerations
- Command results and remote platform description
"""

from .config import AppConfig, BuildConfig, HostConfig, RunConfig, DEFAULT_BUILD_COMMAND
from .runtime import (
    CONFIG_DIR_NAME,
    CommandResult,
    RemotePlatform,
    RunPaths,
    SupervisorState,
    TopologyMode,
    TriggerEvent,
    parse_pid,
)

__all__ = [
    # Configuration
    "AppConfig",
    "BuildConfig",
    "HostConfig",
    "RunConfig",
    "DEFAULT_BUILD_COMMAND",
    # Runtime
    "CONFIG_DIR_NAME",
    "CommandResult",
    "RemotePlatform",
    "RunPaths",
    "SupervisorState",
    "TopologyMode",
    "TriggerEvent",
    "parse_pid",
]
