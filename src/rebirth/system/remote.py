"""
Remote command execution against a docker container.

The gateway runs single commands inside a named container through
``docker exec`` and reports their completion status. It is used to deliver
signals to a peer supervisor, to query the container platform for cross
builds, and to launch the peer supervisor itself.
"""

import logging
import threading
from typing import Callable, List, Optional

from ..models.runtime import CommandResult, RemotePlatform
from ..validation import ErrorSeverity, RemoteCommandError, handle_error
from .commands import run_command

logger = logging.getLogger(__name__)


class RemoteCommandGateway:
    """
    Executes commands inside a remote target.

    There is no retry policy: every call is a single attempt and the caller
    decides how to react to failure.
    """

    def __init__(self, docker_executable: str = "docker"):
        self.docker_executable = docker_executable

    def build_argv(self, target: str, *argv: str) -> List[str]:
        """Full local argv that runs ``argv`` inside ``target``."""
        return [self.docker_executable, "exec", target, *argv]

    def execute(self, target: str, *argv: str, capture_output: bool = True) -> CommandResult:
        """
        Run ``argv`` in ``target`` and block until it completes.

        Args:
            target: Container name
            *argv: Command and arguments to run in the container
            capture_output: Capture the remote output instead of streaming it

        Returns:
            CommandResult carrying the remote exit status
        """
        logger.debug(f"Executing in {target}: {' '.join(argv)}")
        result = run_command(self.build_argv(target, *argv), capture_output=capture_output)
        if not result.ok:
            logger.debug(f"Command in {target} exited with {result.returncode}: {result.stderr.strip()}")
        return result

    def send_signal(self, target: str, pid: int, signal_name: str) -> None:
        """
        Deliver ``signal_name`` (e.g. "HUP", "QUIT") to ``pid`` inside ``target``.

        Raises:
            RemoteCommandError: If the kill command fails in the container
        """
        argv = ["kill", f"-{signal_name}", str(pid)]
        logger.info(f"Sending SIG{signal_name} to PID {pid} in container {target}")
        result = self.execute(target, *argv)
        if not result.ok:
            raise RemoteCommandError(
                f"failed to send SIG{signal_name} to PID {pid} in container {target} "
                f"(exit status {result.returncode}): {result.stderr.strip()}",
                target=target,
                argv=argv,
                returncode=result.returncode,
                stderr=result.stderr,
            )

    def detect_platform(self, target: str) -> RemotePlatform:
        """
        Ask the container for its operating system and architecture.

        Raises:
            RemoteCommandError: If uname cannot be run in the container
        """
        system = self._query(target, "uname", "-s")
        machine = self._query(target, "uname", "-m")
        platform = RemotePlatform.from_uname(system, machine)
        logger.info(f"Container {target} platform: {platform.os}/{platform.arch}")
        return platform

    def launch_detached(
        self,
        target: str,
        *argv: str,
        on_exit: Optional[Callable[[CommandResult], None]] = None,
    ) -> threading.Thread:
        """
        Run ``argv`` in ``target`` from a background thread.

        The caller does not wait for the result. A failure is reported through
        the shared error sink so it is never silent.

        Returns:
            The started daemon thread
        """
        def _run() -> None:
            result = self.execute(target, *argv, capture_output=False)
            if not result.ok:
                handle_error(
                    error=RemoteCommandError(
                        f"'{' '.join(argv)}' in container {target} exited with "
                        f"{result.returncode}: {result.stderr.strip()}",
                        target=target,
                        argv=argv,
                        returncode=result.returncode,
                        stderr=result.stderr,
                    ),
                    context=f"remote launch in {target}",
                    severity=ErrorSeverity.ERROR,
                    reraise=False,
                    logger=logger,
                )
            else:
                logger.info(f"'{' '.join(argv)}' in container {target} exited")
            if on_exit is not None:
                on_exit(result)

        thread = threading.Thread(target=_run, name=f"remote-{target}", daemon=True)
        thread.start()
        logger.info(f"Launched '{' '.join(argv)}' in container {target}")
        return thread

    def _query(self, target: str, *argv: str) -> str:
        result = self.execute(target, *argv)
        if not result.ok:
            raise RemoteCommandError(
                f"'{' '.join(argv)}' failed in container {target} "
                f"(exit status {result.returncode}): {result.stderr.strip()}",
                target=target,
                argv=argv,
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return result.stdout.strip()
