"""
Trigger sources for the orchestration module.

A trigger source produces an unbounded sequence of TriggerEvents that the
supervisor consumes one at a time from its main control flow. The queue
backed source is fed programmatically; the signal source feeds the same queue
from OS signal handlers (SIGHUP requests a reload; SIGTERM, SIGINT and
SIGQUIT request shutdown).
"""

import logging
import queue
import signal
from typing import Any, Dict, Iterator, Optional

from ..models.runtime import TriggerEvent

logger = logging.getLogger(__name__)

RELOAD_SIGNALS = (signal.SIGHUP,)
SHUTDOWN_SIGNALS = (signal.SIGTERM, signal.SIGINT, signal.SIGQUIT)
POLL_INTERVAL = 0.5


class QueueTriggerSource:
    """
    Trigger source backed by an in-process queue.

    Iterating blocks until the next event is available and never ends on its
    own; the consumer stops after a SHUTDOWN event.
    """

    def __init__(self):
        # SimpleQueue.put is reentrant, so signal handlers may call it
        self._events: "queue.SimpleQueue[TriggerEvent]" = queue.SimpleQueue()

    def put(self, event: TriggerEvent) -> None:
        self._events.put(event)

    def request_reload(self) -> None:
        self.put(TriggerEvent.RELOAD)

    def request_shutdown(self) -> None:
        self.put(TriggerEvent.SHUTDOWN)

    def get(self, timeout: Optional[float] = None) -> Optional[TriggerEvent]:
        """Next event, or None if ``timeout`` expires first."""
        try:
            return self._events.get(timeout=timeout)
        except queue.Empty:
            return None

    def __iter__(self) -> Iterator[TriggerEvent]:
        # Bounded waits so the main thread regularly returns to the interpreter
        while True:
            event = self.get(timeout=POLL_INTERVAL)
            if event is not None:
                yield event

    def install(self) -> None:
        """Hook for sources that need setup before iteration."""

    def uninstall(self) -> None:
        """Hook for sources that need cleanup after iteration."""


class SignalTriggerSource(QueueTriggerSource):
    """
    Trigger source fed by OS signals.

    Handlers must be installed from the main thread. The original handlers
    are restored by ``uninstall``.
    """

    def __init__(self):
        super().__init__()
        self._original_handlers: Dict[int, Any] = {}
        self._signal_handlers_set = False

    def install(self) -> None:
        """Set up the reload and shutdown signal handlers."""
        for signum in RELOAD_SIGNALS + SHUTDOWN_SIGNALS:
            self._original_handlers[signum] = signal.signal(signum, self._handle_signal)
        self._signal_handlers_set = True
        logger.debug("Signal handlers set up for reload supervisor")

    def uninstall(self) -> None:
        """Restore original signal handlers."""
        if not self._signal_handlers_set:
            return

        try:
            for signum, handler in self._original_handlers.items():
                if handler is not None:
                    signal.signal(signum, handler)
            logger.debug("Signal handlers restored")
        finally:
            self._original_handlers.clear()
            self._signal_handlers_set = False

    def _handle_signal(self, signum: int, frame: Any) -> None:
        if signum in RELOAD_SIGNALS:
            self.put(TriggerEvent.RELOAD)
        else:
            self.put(TriggerEvent.SHUTDOWN)
