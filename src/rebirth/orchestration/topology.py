"""Topology detection for the supervisor."""

from pathlib import Path

from ..models.runtime import TopologyMode


def detect_topology(remote_configured: bool, inside_remote: bool) -> TopologyMode:
    """Map the two runtime facts onto a topology mode."""
    if not remote_configured:
        return TopologyMode.LOCAL
    if inside_remote:
        return TopologyMode.INSIDE_REMOTE
    return TopologyMode.HOST_DELEGATING


def is_inside_remote(marker: Path) -> bool:
    """Whether we are running inside the container, judged by its marker file."""
    return Path(marker).exists()
