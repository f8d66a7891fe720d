"""
rebirth: development-time reload supervisor.

Rebuilds a program from source, runs it, and restarts it on demand, either
locally or with the program running inside a docker container while the
supervisor on the host relays triggers to a peer supervisor there.

The package is organized into specialized modules:
- config: Configuration loading and validation
- models: Data structures and type definitions
- validation: Error taxonomy and reporting
- system: Local command execution and the remote command gateway
- executor: Build pipeline execution
- orchestration: Process handle, identity record, triggers and the supervisor
- cli: Command-line interface

Usage:
    From command line:
        rebirth [run|reload|stop] [-c .rebirth.toml]

    Programmatically:
        from rebirth import ReloadSupervisor, RunPaths, load_config
        supervisor = ReloadSupervisor(load_config(path), RunPaths.for_root(root))
        supervisor.run()
"""

from .cli import main_cli
from .config import load_config
from .executor import BuildExecutor
from .models import (
    AppConfig,
    BuildConfig,
    HostConfig,
    RunConfig,
    RunPaths,
    SupervisorState,
    TopologyMode,
    TriggerEvent,
)
from .orchestration import (
    IdentityStore,
    ProcessHandle,
    QueueTriggerSource,
    ReloadSupervisor,
    SignalTriggerSource,
    detect_topology,
)
from .system import RemoteCommandGateway
from .validation import (
    BuildError,
    IdentityCorruptError,
    IdentityError,
    IdentityNotFoundError,
    ProcessError,
    ProcessStartError,
    RebirthError,
    RemoteCommandError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    # Main interfaces
    "ReloadSupervisor",
    "load_config",
    "main_cli",
    # Components
    "BuildExecutor",
    "IdentityStore",
    "ProcessHandle",
    "QueueTriggerSource",
    "SignalTriggerSource",
    "RemoteCommandGateway",
    "detect_topology",
    # Models
    "AppConfig",
    "BuildConfig",
    "HostConfig",
    "RunConfig",
    "RunPaths",
    "SupervisorState",
    "TopologyMode",
    "TriggerEvent",
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
]
