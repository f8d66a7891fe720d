"""
Reload supervisor.

The supervisor decides the execution topology, drives the startup build,
runs the program locally or delegates it to a peer supervisor inside the
container, and then rebuilds and restarts on every reload trigger until it is
asked to shut down.

Topologies:
- LOCAL: no container configured; build and run here.
- INSIDE_REMOTE: we are the peer inside the container; behave as LOCAL.
- HOST_DELEGATING: container configured and we are on the host; build for
  the container, launch the peer there and relay triggers to it.
"""

import logging
import os
import signal
import threading
from pathlib import Path
from typing import List, Optional

from ..executor.build_process import BuildExecutor
from ..models.config import AppConfig
from ..models.runtime import RunPaths, SupervisorState, TopologyMode, TriggerEvent
from ..system.remote import RemoteCommandGateway
from ..validation import ErrorSeverity, ProcessError, RebirthError, handle_error
from .identity_store import IdentityStore
from .process_manager import ProcessHandle
from .shared_state import RuntimeState
from .signal_handler import QueueTriggerSource, SignalTriggerSource
from .topology import detect_topology, is_inside_remote

logger = logging.getLogger(__name__)

RELOAD_SIGNAL = "HUP"
TERMINATE_SIGNAL = "QUIT"


class ReloadSupervisor:
    """
    Owns the program's process handle and drives the build/run/restart cycle.

    Components are injected so each one can be replaced in isolation; the
    defaults are the real implementations.
    """

    def __init__(
        self,
        config: AppConfig,
        paths: RunPaths,
        process_handle: Optional[ProcessHandle] = None,
        gateway: Optional[RemoteCommandGateway] = None,
        executor: Optional[BuildExecutor] = None,
        identity_store: Optional[IdentityStore] = None,
        trigger_source: Optional[QueueTriggerSource] = None,
    ):
        self.config = config
        self.paths = paths
        self.state = RuntimeState()

        self.process_handle = process_handle or ProcessHandle()
        self.gateway = gateway or RemoteCommandGateway()
        self.executor = executor or BuildExecutor(config.build, paths)
        self.identity_store = identity_store or IdentityStore(paths.pid_path)
        self.trigger_source = trigger_source or SignalTriggerSource()

        self._reload_lock = threading.Lock()

    @property
    def lifecycle(self) -> SupervisorState:
        return self.state.lifecycle

    def topology(self) -> TopologyMode:
        """Current topology; recomputed on every call."""
        return detect_topology(
            remote_configured=self.config.remote_target is not None,
            inside_remote=is_inside_remote(self.paths.remote_marker),
        )

    def run(self) -> None:
        """
        Start up, then serve reload triggers until shutdown.

        Startup errors propagate to the caller; the child (or peer) is
        stopped on the way out in every case.
        """
        self.trigger_source.install()
        try:
            self.start()
            self.wait_for_triggers()
        finally:
            try:
                self.close()
            except RebirthError as e:
                handle_error(e, "shutdown", severity=ErrorSeverity.ERROR, reraise=False, logger=logger)
            finally:
                self.trigger_source.uninstall()

    def start(self) -> None:
        """
        Run the one-time startup sequence for the current topology.

        Raises:
            RebirthError: Any build, process, remote or identity failure
        """
        self._set_lifecycle(SupervisorState.DECIDING)
        mode = self.topology()
        self.state.topology = mode
        logger.info(f"Starting supervisor in {mode.value} mode")
        self.paths.ensure_dirs()

        if mode is TopologyMode.HOST_DELEGATING:
            self._start_delegating()
        else:
            self._start_local()

        self._set_lifecycle(SupervisorState.WAITING)

    def wait_for_triggers(self) -> None:
        """Block on the trigger source, rebuilding on each reload, until shutdown."""
        logger.info("Waiting for reload triggers")
        for event in self.trigger_source:
            if event is TriggerEvent.SHUTDOWN:
                logger.info("Shutdown requested")
                self.state.shutdown_requested.set()
                break
            self.reload()

    def request_reload(self) -> None:
        """Queue a reload trigger for the main flow."""
        self.trigger_source.request_reload()

    def request_shutdown(self) -> None:
        """Queue a shutdown request for the main flow."""
        self.trigger_source.request_shutdown()

    def reload(self) -> bool:
        """
        Run one rebuild-and-restart cycle.

        Cycles are serialized. Failures are reported and swallowed so the
        supervisor keeps serving triggers; a failed build leaves the running
        program untouched.

        Returns:
            True if the cycle succeeded
        """
        with self._reload_lock:
            self._set_lifecycle(SupervisorState.REBUILDING)
            try:
                if self.topology() is TopologyMode.HOST_DELEGATING:
                    self._signal_peer(RELOAD_SIGNAL)
                else:
                    self.executor.compile(self.paths.program_path)
                    self.process_handle.restart(self.paths.program_path, self.config.run.env)
            except RebirthError as e:
                self.state.failed_reload_count += 1
                handle_error(e, "reload", severity=ErrorSeverity.ERROR, reraise=False, logger=logger)
                return False
            finally:
                if self.lifecycle is SupervisorState.REBUILDING:
                    self._set_lifecycle(SupervisorState.WAITING)

            self.state.reload_count += 1
            return True

    def close(self) -> None:
        """
        Shut down: stop our child, or terminate the peer when delegating.

        Calling it again after shutdown is a no-op.

        Raises:
            RebirthError: If the peer could not be addressed or signalled
        """
        if self.lifecycle is SupervisorState.TERMINAL:
            return

        self._set_lifecycle(SupervisorState.STOPPING)
        try:
            if self.topology() is TopologyMode.HOST_DELEGATING:
                if self.state.peer_thread is None:
                    logger.info("No peer supervisor was launched, nothing to stop")
                else:
                    logger.info("Stopping supervisor in container...")
                    self._signal_peer(TERMINATE_SIGNAL)
            else:
                logger.info("Stopping current process...")
                self.process_handle.stop()
                self._clear_own_identity()
        finally:
            self._set_lifecycle(SupervisorState.TERMINAL)

    def relay(self, event: TriggerEvent) -> None:
        """
        Forward ``event`` to the supervisor instance that owns the program.

        Used by operator commands that run next to an existing supervisor.

        Raises:
            IdentityError: If no valid PID record exists
            RemoteCommandError: If the signal cannot be delivered in the container
            ProcessError: If the recorded process no longer exists
        """
        signal_name = RELOAD_SIGNAL if event is TriggerEvent.RELOAD else TERMINATE_SIGNAL
        if self.topology() is TopologyMode.HOST_DELEGATING:
            self._signal_peer(signal_name)
            return

        pid = self.identity_store.read()
        logger.info(f"Sending SIG{signal_name} to PID {pid}")
        try:
            os.kill(pid, getattr(signal, f"SIG{signal_name}"))
        except ProcessLookupError:
            raise ProcessError(f"no process with PID {pid}; the record at {self.identity_store.path} is stale")

    def _start_local(self) -> None:
        self.identity_store.write(os.getpid())

        self._set_lifecycle(SupervisorState.BUILDING)
        self.executor.run_init()
        self.executor.compile(self.paths.program_path)

        self._set_lifecycle(SupervisorState.RUNNING)
        self.process_handle.start(self.paths.program_path, self.config.run.env)

    def _start_delegating(self) -> None:
        target = self.config.remote_target
        # Any record left here belongs to a previous peer
        self.identity_store.clear()

        self._set_lifecycle(SupervisorState.BUILDING)
        platform = self.gateway.detect_platform(target)
        self.executor.package_supervisor(self.paths.supervisor_path)
        self.executor.run_init()
        self.executor.compile(self.paths.program_path, cross_target=platform)

        self._set_lifecycle(SupervisorState.DELEGATING)
        self.state.peer_thread = self.gateway.launch_detached(target, *self._peer_argv())

    def _peer_argv(self) -> List[str]:
        argv = [self.paths.relative_to_root(self.paths.supervisor_path)]
        config_path = self.config.config_path
        if config_path is not None:
            try:
                argv += ["--config", str(Path(config_path).resolve().relative_to(self.paths.root))]
            except ValueError:
                logger.warning(f"Configuration {config_path} is outside {self.paths.root}; "
                               f"the peer will look for its default configuration file")
        return argv

    def _signal_peer(self, signal_name: str) -> None:
        pid = self.identity_store.read()
        self.gateway.send_signal(self.config.remote_target, pid, signal_name)

    def _clear_own_identity(self) -> None:
        try:
            recorded = self.identity_store.read()
        except RebirthError:
            return
        if recorded == os.getpid():
            self.identity_store.clear()

    def _set_lifecycle(self, lifecycle: SupervisorState) -> None:
        logger.debug(f"Supervisor state: {self.state.lifecycle.value} -> {lifecycle.value}")
        self.state.lifecycle = lifecycle
