"""
Pytest configuration and shared fixtures for the rebirth test suite.

This module provides common fixtures, test utilities, and configuration
for all test modules in the rebirth project.
"""

import os
import shutil
import stat
import sys
import tempfile
import time
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rebirth.models import AppConfig, BuildConfig, HostConfig, RemotePlatform, RunConfig, RunPaths  # noqa: E402
from rebirth.orchestration import QueueTriggerSource  # noqa: E402
from rebirth.system import RemoteCommandGateway  # noqa: E402


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "e2e: mark test as an end-to-end test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path).resolve()
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def local_paths(temp_dir):
    """RunPaths rooted in the temp dir whose container marker does not exist."""
    return RunPaths.for_root(temp_dir, remote_marker=temp_dir / "no-dockerenv")


@pytest.fixture
def inside_paths(temp_dir):
    """RunPaths rooted in the temp dir whose container marker exists."""
    marker = temp_dir / "dockerenv"
    marker.touch()
    return RunPaths.for_root(temp_dir, remote_marker=marker)


@pytest.fixture
def sample_config_data():
    """Sample configuration data for testing."""
    return {
        "host": {"docker": "app-container"},
        "build": {
            "init": ["echo hi"],
            "before": ["echo before"],
            "after": ["echo after"],
            "command": "cp {source}/app.sh {output}",
            "source": "app",
            "env": {"CACHE_DIR": "~/.cache/app", "JOBS": 4},
        },
        "run": {"env": {"PORT": "8080", "DEBUG": True}},
    }


@pytest.fixture
def config_files(temp_dir, sample_config_data):
    """Create a temporary configuration file for testing."""
    import toml

    config_file = temp_dir / ".rebirth.toml"
    with open(config_file, "w") as f:
        toml.dump(sample_config_data, f)

    return {"config": config_file, "dir": temp_dir}


# ============================================================================
# Program Fixtures
# ============================================================================


def write_script(path: Path, body: str) -> Path:
    """Write an executable shell script."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n" + body + "\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def wait_for(predicate, timeout: float = 5.0, interval: float = 0.05) -> bool:
    """Poll ``predicate`` until it holds or ``timeout`` expires."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def make_script():
    return write_script


@pytest.fixture
def wait_until():
    return wait_for


@pytest.fixture
def sleeper_script(temp_dir):
    """Program that records its environment and stays alive."""
    return write_script(
        temp_dir / "sleeper.sh",
        'echo "$GREETING" > "$OUT_FILE"\nexec sleep 30',
    )


@pytest.fixture
def app_source(temp_dir):
    """Source tree whose 'compile' is a copy of app/app.sh to the artifact path."""
    return write_script(
        temp_dir / "app" / "app.sh",
        'echo "$$" >> "$PID_LOG"\nexec sleep 30',
    )


@pytest.fixture
def local_config(app_source):
    """Local-mode configuration building app/app.sh into the program artifact."""
    return AppConfig(
        build=BuildConfig(init=("echo hi",), command="cp {source}/app.sh {output}", source="app"),
        run=RunConfig(env={"PID_LOG": str(app_source.parent.parent / "pids.log")}),
    )


@pytest.fixture
def remote_config(app_source):
    """Configuration with a docker remote target."""
    return AppConfig(
        host=HostConfig(docker="app-container"),
        build=BuildConfig(
            command="sh -c 'echo $GOOS/$GOARCH > {output}'",
            source="app",
        ),
    )


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_gateway():
    """Gateway double that records calls instead of running docker."""
    gateway = Mock(spec=RemoteCommandGateway)
    gateway.detect_platform.return_value = RemotePlatform(os="linux", arch="arm64")
    gateway.launch_detached.return_value = Mock(name="peer_thread")
    return gateway


@pytest.fixture
def trigger_source():
    return QueueTriggerSource()


@pytest.fixture(autouse=True)
def restore_cwd():
    """Keep tests that chdir from leaking their working directory."""
    original = os.getcwd()
    yield
    os.chdir(original)
