"""
Build pipeline execution.

This module provides the BuildExecutor, which runs the configured hook
phases and the compile command that produces the program artifact, and
packages the supervisor itself into a standalone archive that a peer can run
inside the remote target.
"""

import logging
import shlex
import shutil
import tempfile
import time
import zipapp
from pathlib import Path
from typing import Dict, Optional, Sequence

from ..models.config import BuildConfig
from ..models.runtime import RemotePlatform, RunPaths
from ..system.commands import prepare_environment, run_command, split_command
from ..validation import BuildError

logger = logging.getLogger(__name__)

SUPERVISOR_INTERPRETER = "/usr/bin/env python3"
SUPERVISOR_ENTRY_POINT = "rebirth.cli.main:main_cli"


class BuildExecutor:
    """
    Runs the three-phase build pipeline for one supervisor instance.

    Every phase is fail-fast: the first failing command aborts the phase and
    the whole build with a BuildError. A failed compile leaves the previous
    artifact where it was.
    """

    def __init__(self, build: BuildConfig, paths: RunPaths):
        self.build = build
        self.paths = paths

    @property
    def source_root(self) -> Path:
        return (self.paths.root / self.build.source).resolve()

    def build_environment(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Environment for hooks and the compiler: ours, plus the expanded build env."""
        env = prepare_environment(self.build.env, expand=True)
        if extra:
            env.update(extra)
        return env

    def run_phase(self, name: str, commands: Sequence[str],
                  extra_env: Optional[Dict[str, str]] = None) -> None:
        """
        Execute ``commands`` in order, stopping at the first failure.

        Args:
            name: Phase name used in log and error messages
            commands: Shell-style command strings
            extra_env: Variables added on top of the build environment

        Raises:
            BuildError: If any command fails; later commands are never run
        """
        if not commands:
            return

        env = self.build_environment(extra_env)
        for command in commands:
            logger.info(f"Running build.{name}: {command}")
            try:
                argv = split_command(command)
            except ValueError as e:
                raise BuildError(
                    f"build.{name} command is malformed: {command}: {e}",
                    phase=name,
                    command=command,
                )

            result = run_command(argv, cwd=self.paths.root, env=env)
            self._log_output(result.stdout, result.stderr)
            if not result.ok:
                raise BuildError(
                    f"build.{name} command failed with exit code {result.returncode}: {command}",
                    phase=name,
                    command=command,
                    returncode=result.returncode,
                )

    def run_init(self) -> None:
        """Run the `init` phase; called once per supervisor invocation."""
        self.run_phase("init", self.build.init)

    def compile(self, target_path: Path, source_root: Optional[Path] = None,
                cross_target: Optional[RemotePlatform] = None) -> None:
        """
        Run `before`, compile ``source_root`` into ``target_path``, then run `after`.

        Args:
            target_path: Where the compiled artifact is written
            source_root: Source directory, defaults to the configured source root
            cross_target: Remote platform to compile for, None for this machine

        Raises:
            BuildError: If a hook or the compile command fails
        """
        source_root = source_root or self.source_root
        target_path = Path(target_path)
        target_path.parent.mkdir(parents=True, exist_ok=True)

        cross_env = cross_target.build_env() if cross_target else None
        start_time = time.time()
        logger.info("Building...")

        self.run_phase("before", self.build.before)

        # Placeholders are filled per argument so paths with spaces stay one argument
        try:
            template = split_command(self.build.command)
        except ValueError as e:
            raise BuildError(f"build.command is malformed: {self.build.command}: {e}",
                             phase="compile", command=self.build.command)
        argv = [part.format(output=str(target_path), source=str(source_root)) for part in template]
        command = shlex.join(argv)

        if cross_target:
            logger.info(f"Cross compiling for {cross_target.os}/{cross_target.arch}")
        logger.info(f"Compiling: {command}")

        result = run_command(argv, cwd=self.paths.root, env=self.build_environment(cross_env))
        self._log_output(result.stdout, result.stderr)
        if not result.ok:
            raise BuildError(
                f"compile failed with exit code {result.returncode}: {command}",
                phase="compile",
                command=command,
                returncode=result.returncode,
            )

        self.run_phase("after", self.build.after)
        logger.info(f"Build finished in {time.time() - start_time:.2f}s: {target_path}")

    def package_supervisor(self, target_path: Optional[Path] = None) -> Path:
        """
        Package the supervisor into an executable archive for the remote peer.

        The archive bundles the ``rebirth`` package only; the container needs
        a Python 3 interpreter and the runtime dependencies installed.

        Returns:
            Path of the written archive

        Raises:
            BuildError: If the archive cannot be written
        """
        target_path = Path(target_path or self.paths.supervisor_path)
        target_path.parent.mkdir(parents=True, exist_ok=True)
        package_dir = Path(__file__).resolve().parent.parent

        logger.info(f"Packaging supervisor for remote peer: {target_path}")
        try:
            with tempfile.TemporaryDirectory(prefix="rebirth-pkg-") as staging:
                shutil.copytree(
                    package_dir,
                    Path(staging) / package_dir.name,
                    ignore=shutil.ignore_patterns("__pycache__", "*.pyc"),
                )
                zipapp.create_archive(
                    staging,
                    target=target_path,
                    interpreter=SUPERVISOR_INTERPRETER,
                    main=SUPERVISOR_ENTRY_POINT,
                )
        except (OSError, zipapp.ZipAppError) as e:
            raise BuildError(f"failed to package supervisor: {e}", phase="package") from e

        return target_path

    @staticmethod
    def _log_output(stdout: str, stderr: str) -> None:
        for line in stdout.splitlines():
            if line.strip():
                logger.info(line)
        for line in stderr.splitlines():
            if line.strip():
                logger.warning(line)
