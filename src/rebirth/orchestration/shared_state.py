"""
Shared data structures for the orchestration module.

This module defines the runtime state shared by the supervisor components
and the timeout constants they use.
"""

import threading
from dataclasses import dataclass, field
from typing import Optional

from ..models.runtime import SupervisorState, TopologyMode


@dataclass
class RuntimeState:
    """
    Runtime state of one supervisor instance.
    """
    lifecycle: SupervisorState = SupervisorState.INIT
    # Topology decided at startup, for reporting; decisions recompute it
    topology: Optional[TopologyMode] = None
    shutdown_requested: threading.Event = field(default_factory=threading.Event)
    peer_thread: Optional[threading.Thread] = None
    reload_count: int = 0
    failed_reload_count: int = 0


class TimeoutConstants:
    """
    Centralized timeout configuration.
    """
    # Process termination timeouts
    TERMINATION_GRACEFUL_TIMEOUT = 3
    TERMINATION_INTERRUPT_TIMEOUT = 2
    TERMINATION_FORCE_TIMEOUT = 2
