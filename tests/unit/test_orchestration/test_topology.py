"""
Unit tests for topology detection.
"""

import pytest

from rebirth.models import AppConfig, HostConfig, TopologyMode
from rebirth.orchestration import ReloadSupervisor, detect_topology, is_inside_remote


@pytest.mark.unit
class TestDetectTopology:
    """Test cases for the topology mapping."""

    @pytest.mark.parametrize(
        "remote_configured, inside_remote, expected",
        [
            (False, False, TopologyMode.LOCAL),
            (False, True, TopologyMode.LOCAL),
            (True, True, TopologyMode.INSIDE_REMOTE),
            (True, False, TopologyMode.HOST_DELEGATING),
        ],
    )
    def test_mapping(self, remote_configured, inside_remote, expected):
        assert detect_topology(remote_configured, inside_remote) is expected

    def test_marker_detection(self, temp_dir):
        marker = temp_dir / "dockerenv"
        assert is_inside_remote(marker) is False

        marker.touch()
        assert is_inside_remote(marker) is True


@pytest.mark.unit
class TestSupervisorTopology:
    """The supervisor recomputes its topology on every call."""

    def test_topology_follows_marker(self, temp_dir, local_paths, trigger_source):
        config = AppConfig(host=HostConfig(docker="app-container"))
        supervisor = ReloadSupervisor(config, local_paths, trigger_source=trigger_source)

        assert supervisor.topology() is TopologyMode.HOST_DELEGATING

        local_paths.remote_marker.touch()
        assert supervisor.topology() is TopologyMode.INSIDE_REMOTE

    def test_no_remote_is_local_even_inside_container(self, inside_paths, trigger_source):
        supervisor = ReloadSupervisor(AppConfig(), inside_paths, trigger_source=trigger_source)
        assert supervisor.topology() is TopologyMode.LOCAL
