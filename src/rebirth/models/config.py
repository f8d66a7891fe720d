"""
Configuration data models.

This module contains the configuration data structures for the remote host,
the build pipeline and the launched program, loaded from `.rebirth.toml`.
All of them are immutable once loaded.
"""

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

DEFAULT_BUILD_COMMAND = "go build -o {output} {source}"


def _read_only(env: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(env))


@dataclass(frozen=True)
class HostConfig:
    """
    Remote target descriptor, loaded from the `[host]` section.
    """

    # Name of the docker container the program actually runs in. Empty means local.
    docker: str = ""


@dataclass(frozen=True)
class BuildConfig:
    """
    Build pipeline configuration, loaded from the `[build]` section.
    """

    # Commands run once per supervisor invocation, before the first build.
    init: Tuple[str, ...] = ()
    # Commands run before every compile.
    before: Tuple[str, ...] = ()
    # Commands run after every successful compile.
    after: Tuple[str, ...] = ()
    # Environment for hooks and the compiler. Values may contain '~' and '$VAR'.
    env: Mapping[str, str] = field(default_factory=dict)
    # Compile command; '{output}' is the artifact path, '{source}' the source root.
    command: str = DEFAULT_BUILD_COMMAND
    # Source root relative to the working directory.
    source: str = "."

    def __post_init__(self):
        object.__setattr__(self, "env", _read_only(self.env))


@dataclass(frozen=True)
class RunConfig:
    """
    Launched program configuration, loaded from the `[run]` section.
    """

    # Environment overlay applied to the program.
    env: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "env", _read_only(self.env))


@dataclass(frozen=True)
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    host: HostConfig = field(default_factory=HostConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    run: RunConfig = field(default_factory=RunConfig)
    # File the configuration was read from, None when built in code.
    config_path: Optional[Path] = None

    @property
    def remote_target(self) -> Optional[str]:
        """Container name when a remote target is configured, else None."""
        return self.host.docker or None
