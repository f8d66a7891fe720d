"""
Process management for the orchestration module.

This module owns the single child process the supervisor runs: starting it
asynchronously with the run environment, and terminating its whole process
tree with escalating force when it has to be stopped or replaced.
"""

import logging
import os
import signal
import subprocess
import threading
from pathlib import Path
from typing import List, Mapping, Optional

import psutil

from ..system.commands import prepare_environment
from ..validation import ProcessStartError
from .shared_state import TimeoutConstants

logger = logging.getLogger(__name__)


class ProcessHandle:
    """
    Wraps at most one live child process.

    ``start`` is fire-and-forget; ``stop`` requests termination of the
    current process tree and clears the record. ``restart`` performs
    stop-then-start under a lock so two children never coexist.
    """

    def __init__(self):
        self._process: Optional[subprocess.Popen] = None
        self._lock = threading.RLock()

    @property
    def process(self) -> Optional[subprocess.Popen]:
        return self._process

    @property
    def pid(self) -> Optional[int]:
        with self._lock:
            return self._process.pid if self._process else None

    def has_current(self) -> bool:
        """Whether a process record is currently tracked."""
        with self._lock:
            return self._process is not None

    def start(self, path: Path, env: Optional[Mapping[str, str]] = None) -> int:
        """
        Launch the program at ``path`` without waiting for it.

        Any current process is stopped first.

        Args:
            path: Executable to run
            env: Environment overlay applied on top of ours

        Returns:
            PID of the new process

        Raises:
            ProcessStartError: If the OS cannot spawn the program
        """
        with self._lock:
            self.stop()
            try:
                process = subprocess.Popen(
                    [str(path)],
                    env=prepare_environment(env),
                    start_new_session=True,  # Own process group for tree termination
                )
            except OSError as e:
                raise ProcessStartError(f"failed to start {path}: {e}", path=str(path)) from e

            self._process = process
            logger.info(f"Program started with PID: {process.pid}")
            return process.pid

    def stop(self) -> None:
        """
        Terminate the current process, if any, and clear the record.

        Safe to call repeatedly and after the process already exited.
        """
        with self._lock:
            process = self._process
            if process is None:
                return
            self._process = None

            if process.poll() is not None:
                logger.info(f"Program (PID: {process.pid}) already exited with code {process.returncode}")
                # Descendants may still hold the program's process group
                self._cleanup_process_group(process.pid, "program")
                return

            self.terminate_process_tree(process.pid, "program")
            try:
                process.wait(timeout=TimeoutConstants.TERMINATION_FORCE_TIMEOUT)
            except subprocess.TimeoutExpired:
                logger.warning(f"Program (PID: {process.pid}) has not been reaped yet")

    def restart(self, path: Path, env: Optional[Mapping[str, str]] = None) -> int:
        """Stop the current process and start ``path``, atomically."""
        with self._lock:
            logger.info("Restarting...")
            self.stop()
            return self.start(path, env)

    def terminate_process_tree(self, pid: int, name: str) -> None:
        """
        Gracefully terminates a process and all its children.

        Escalates SIGTERM → SIGINT → SIGKILL, re-reading the children before
        each phase since they may change between phases.
        """
        if pid <= 0:
            logger.warning(f"Invalid PID {pid} for {name}, skipping termination")
            return

        logger.info(f"Stopping {name} (PID: {pid}) and its process tree")

        try:
            parent = psutil.Process(pid)
        except psutil.NoSuchProcess:
            logger.info(f"Process {name} (PID: {pid}) already terminated")
            return
        except psutil.AccessDenied:
            logger.warning(f"Access denied to process {name} (PID: {pid}), attempting force kill")
            self._force_kill_process(pid)
            return

        phases = [
            {"name": "graceful", "signal": signal.SIGTERM,
             "timeout": TimeoutConstants.TERMINATION_GRACEFUL_TIMEOUT},
            {"name": "interrupt", "signal": signal.SIGINT,
             "timeout": TimeoutConstants.TERMINATION_INTERRUPT_TIMEOUT},
            {"name": "force_kill", "signal": signal.SIGKILL,
             "timeout": TimeoutConstants.TERMINATION_FORCE_TIMEOUT},
        ]

        for phase in phases:
            if not self._is_process_alive(parent):
                break

            all_processes = [parent] + self._get_process_children(parent)
            signaled = self._apply_termination_signal(all_processes, phase["signal"])
            if not signaled:
                continue

            remaining = self._wait_for_termination(signaled, phase["timeout"])
            if not remaining:
                logger.debug(f"All processes terminated in phase {phase['name']}")
                break
            logger.warning(f"Phase {phase['name']}: {len(remaining)} processes still alive")
        else:
            self._handle_stubborn_processes([parent] + self._get_process_children(parent), name)

        self._cleanup_process_group(pid, name)

    def _is_process_alive(self, process: psutil.Process) -> bool:
        """Safely check if a process is still alive and not a zombie."""
        try:
            if not process.is_running():
                return False
            return process.status() not in (psutil.STATUS_ZOMBIE, psutil.STATUS_DEAD)
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return False

    def _get_process_children(self, parent: psutil.Process) -> List[psutil.Process]:
        """Safely get all children of a process, handling race conditions."""
        try:
            return [child for child in parent.children(recursive=True) if self._is_process_alive(child)]
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return []

    def _apply_termination_signal(self, processes: List[psutil.Process], sig: int) -> List[psutil.Process]:
        """Send ``sig`` to each live process and return those that were signaled."""
        signaled = []
        for process in processes:
            try:
                if not self._is_process_alive(process):
                    continue
                process.send_signal(sig)
                signaled.append(process)
                logger.debug(f"Sent {signal.Signals(sig).name} to PID {process.pid}")
            except psutil.NoSuchProcess:
                continue
            except psutil.AccessDenied:
                logger.warning(f"Access denied sending {signal.Signals(sig).name} to PID {process.pid}")
        return signaled

    def _wait_for_termination(self, processes: List[psutil.Process], timeout: float) -> List[psutil.Process]:
        """Wait for processes to terminate and return any that are still alive."""
        _, still_alive = psutil.wait_procs(processes, timeout=timeout)
        # Zombies are effectively terminated
        return [process for process in still_alive if self._is_process_alive(process)]

    def _handle_stubborn_processes(self, processes: List[psutil.Process], name: str) -> None:
        """Report processes that survived SIGKILL."""
        alive = [process for process in processes if self._is_process_alive(process)]
        if not alive:
            return
        logger.error(f"Failed to terminate {len(alive)} stubborn processes for {name}")
        for process in alive:
            try:
                logger.error(f"Stubborn process: PID {process.pid}, name: {process.name()}, "
                             f"status: {process.status()}")
            except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
                logger.error(f"Could not get info for stubborn process PID {process.pid}: {e}")

    def _cleanup_process_group(self, pid: int, name: str) -> None:
        """Kill whatever is left of the process group the program led."""
        try:
            os.killpg(pid, signal.SIGKILL)
            logger.debug(f"Sent SIGKILL to process group {pid} for {name}")
        except ProcessLookupError:
            pass
        except PermissionError:
            logger.debug(f"No permission to kill process group {pid}")

    def _force_kill_process(self, pid: int) -> None:
        """Force kill a single process by PID as last resort."""
        try:
            os.kill(pid, signal.SIGKILL)
            logger.warning(f"Force killed process PID {pid}")
        except ProcessLookupError:
            pass
        except PermissionError as e:
            logger.error(f"Failed to force kill PID {pid}: {e}")
