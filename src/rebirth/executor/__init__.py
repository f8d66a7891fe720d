"""
Build execution for the supervisor.

Provides the BuildExecutor that runs the init/before/after hook phases and
the compile step, and packages the supervisor for a remote peer.
"""

from .build_process import BuildExecutor

__all__ = [
    "BuildExecutor",
]
