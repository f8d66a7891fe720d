"""
Orchestration module for the reload supervisor.

Components:
- ReloadSupervisor: Topology decision and the build/run/restart cycle
- ProcessHandle: Lifecycle of the single program process
- IdentityStore: PID record used to signal the owning supervisor
- QueueTriggerSource / SignalTriggerSource: Reload and shutdown triggers
- detect_topology: Topology mode from the runtime facts
"""

from .identity_store import IdentityStore
from .process_manager import ProcessHandle
from .shared_state import RuntimeState, TimeoutConstants
from .signal_handler import QueueTriggerSource, SignalTriggerSource
from .supervisor import ReloadSupervisor
from .topology import detect_topology, is_inside_remote

__all__ = [
    "ReloadSupervisor",
    "ProcessHandle",
    "IdentityStore",
    "QueueTriggerSource",
    "SignalTriggerSource",
    "RuntimeState",
    "TimeoutConstants",
    "detect_topology",
    "is_inside_remote",
]
