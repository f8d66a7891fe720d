"""
Runtime data models.

This module contains the data structures created while the supervisor runs:
the filesystem layout under the configuration directory, the topology and
lifecycle enumerations, and results of commands run against a remote target.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

CONFIG_DIR_NAME = ".rebirth"
DEFAULT_REMOTE_MARKER = Path("/.dockerenv")


class TopologyMode(Enum):
    """Role of the current execution context."""
    LOCAL = "local"
    HOST_DELEGATING = "host_delegating"
    INSIDE_REMOTE = "inside_remote"


class SupervisorState(Enum):
    """Lifecycle states of the reload supervisor."""
    INIT = "init"
    DECIDING = "deciding"
    BUILDING = "building"
    DELEGATING = "delegating"
    RUNNING = "running"
    WAITING = "waiting"
    REBUILDING = "rebuilding"
    STOPPING = "stopping"
    TERMINAL = "terminal"


class TriggerEvent(Enum):
    """Events produced by a trigger source."""
    RELOAD = "reload"
    SHUTDOWN = "shutdown"


@dataclass(frozen=True)
class RunPaths:
    """
    Well-known filesystem locations used by one supervisor instance.

    Constructed once at startup and handed to every component.
    """

    root: Path
    config_dir: Path
    remote_marker: Path = DEFAULT_REMOTE_MARKER

    @classmethod
    def for_root(cls, root: Path, remote_marker: Path = DEFAULT_REMOTE_MARKER) -> "RunPaths":
        root = Path(root).resolve()
        return cls(root=root, config_dir=root / CONFIG_DIR_NAME, remote_marker=remote_marker)

    @property
    def program_path(self) -> Path:
        return self.config_dir / "program"

    @property
    def pid_path(self) -> Path:
        return self.config_dir / "server.pid"

    @property
    def supervisor_path(self) -> Path:
        return self.config_dir / "__rebirth"

    @property
    def bin_dir(self) -> Path:
        return self.config_dir / "bin"

    @property
    def pkg_dir(self) -> Path:
        return self.config_dir / "pkg"

    def relative_to_root(self, path: Path) -> str:
        """Path as seen from the working directory, used for commands run in the container."""
        return str(Path(path).relative_to(self.root))

    def ensure_dirs(self) -> None:
        """Create the configuration directory and toolchain scratch locations."""
        for directory in (self.config_dir, self.bin_dir, self.pkg_dir):
            directory.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a command, local or remote."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


# uname -s / uname -m values mapped to the toolchain's naming
_OS_ALIASES = {
    "linux": "linux",
    "darwin": "darwin",
    "freebsd": "freebsd",
}
_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "armv6l": "arm",
    "i386": "386",
    "i686": "386",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
}


@dataclass(frozen=True)
class RemotePlatform:
    """Operating system and architecture of a remote target."""

    os: str
    arch: str

    @classmethod
    def from_uname(cls, system: str, machine: str) -> "RemotePlatform":
        system = system.strip().lower()
        machine = machine.strip().lower()
        return cls(
            os=_OS_ALIASES.get(system, system),
            arch=_ARCH_ALIASES.get(machine, machine),
        )

    def build_env(self) -> Dict[str, str]:
        """Environment that makes the compiler target this platform."""
        return {"GOOS": self.os, "GOARCH": self.arch}


def parse_pid(text: str) -> Optional[int]:
    """Parse a decimal process id, None if the text is not one."""
    try:
        pid = int(text.strip())
    except ValueError:
        return None
    return pid if pid >= 0 else None
