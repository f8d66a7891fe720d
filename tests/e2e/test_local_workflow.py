"""
End-to-end tests for the reload workflow.

The local tests build and run a real program (a shell script "compiled" by
copying it into place). The delegating test runs the real build pipeline and
only replaces the docker gateway.
"""

import os
import signal
import threading
import time

import psutil
import pytest

from rebirth.models import SupervisorState
from rebirth.orchestration import ReloadSupervisor, SignalTriggerSource


def _child_pids():
    pids = []
    for child in psutil.Process().children():
        try:
            if child.status() != psutil.STATUS_ZOMBIE:
                pids.append(child.pid)
        except psutil.NoSuchProcess:
            continue
    return pids


def _logged_pids(path):
    if not path.exists():
        return []
    return [int(line) for line in path.read_text().split()]


@pytest.mark.e2e
@pytest.mark.slow
class TestLocalWorkflow:
    """Build, run, rebuild and stop a program on the local machine."""

    def test_start_reload_close(self, local_config, local_paths, app_source, trigger_source, wait_until):
        pid_log = local_paths.root / "pids.log"
        supervisor = ReloadSupervisor(local_config, local_paths, trigger_source=trigger_source)

        supervisor.start()
        try:
            first = supervisor.process_handle.pid
            assert wait_until(lambda: _logged_pids(pid_log) == [first])
            assert _child_pids() == [first]
            assert local_paths.pid_path.read_text() == str(os.getpid())
            built_at = local_paths.program_path.stat().st_mtime_ns

            time.sleep(0.05)
            app_source.write_text(app_source.read_text() + "# changed\n")
            assert supervisor.reload() is True

            second = supervisor.process_handle.pid
            assert second != first
            assert wait_until(lambda: _logged_pids(pid_log) == [first, second])
            assert local_paths.program_path.stat().st_mtime_ns > built_at
            assert local_paths.program_path.read_text().endswith("# changed\n")
            assert wait_until(lambda: _child_pids() == [second])
        finally:
            supervisor.close()

        assert wait_until(lambda: _child_pids() == [])
        assert not local_paths.pid_path.exists()
        assert supervisor.lifecycle is SupervisorState.TERMINAL
        supervisor.close()

    def test_concurrent_reloads_leave_one_child(self, local_config, local_paths, app_source, trigger_source,
                                                 wait_until):
        pid_log = local_paths.root / "pids.log"
        supervisor = ReloadSupervisor(local_config, local_paths, trigger_source=trigger_source)
        supervisor.start()
        try:
            assert wait_until(lambda: len(_logged_pids(pid_log)) == 1)
            barrier = threading.Barrier(2)
            results = []

            def reload():
                barrier.wait()
                results.append(supervisor.reload())

            threads = [threading.Thread(target=reload) for _ in range(2)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join(timeout=30)

            assert results == [True, True]
            assert supervisor.state.reload_count == 2
            assert wait_until(lambda: len(_logged_pids(pid_log)) == 3)
            current = supervisor.process_handle.pid
            assert wait_until(lambda: _child_pids() == [current])
        finally:
            supervisor.close()

    def test_broken_build_keeps_program_running(self, local_config, local_paths, app_source, trigger_source):
        supervisor = ReloadSupervisor(local_config, local_paths, trigger_source=trigger_source)
        supervisor.start()
        try:
            first = supervisor.process_handle.pid
            app_source.unlink()

            assert supervisor.reload() is False

            assert supervisor.process_handle.pid == first
            assert supervisor.process_handle.process.poll() is None
        finally:
            supervisor.close()

    def test_signal_driven_run(self, local_config, local_paths, app_source, wait_until):
        pid_log = local_paths.root / "pids.log"
        supervisor = ReloadSupervisor(local_config, local_paths, trigger_source=SignalTriggerSource())

        def operator():
            wait_until(lambda: len(_logged_pids(pid_log)) == 1)
            os.kill(os.getpid(), signal.SIGHUP)
            wait_until(lambda: len(_logged_pids(pid_log)) == 2)
            os.kill(os.getpid(), signal.SIGTERM)

        thread = threading.Thread(target=operator, daemon=True)
        thread.start()
        supervisor.run()
        thread.join(timeout=5)

        assert supervisor.state.reload_count == 1
        assert len(_logged_pids(pid_log)) == 2
        assert supervisor.lifecycle is SupervisorState.TERMINAL
        assert wait_until(lambda: _child_pids() == [])


@pytest.mark.e2e
class TestDelegatingWorkflow:
    """Host side of the container workflow with docker replaced by a mock."""

    def test_start_reload_close(self, remote_config, local_paths, app_source, mock_gateway, trigger_source):
        supervisor = ReloadSupervisor(
            remote_config, local_paths, gateway=mock_gateway, trigger_source=trigger_source
        )

        supervisor.start()

        assert local_paths.supervisor_path.exists()
        assert local_paths.program_path.read_text().strip() == "linux/arm64"
        assert not supervisor.process_handle.has_current()
        assert not local_paths.pid_path.exists()
        mock_gateway.launch_detached.assert_called_once_with("app-container", ".rebirth/__rebirth")

        # The peer records its own PID once it is up
        local_paths.pid_path.write_text("4242")

        assert supervisor.reload() is True
        mock_gateway.send_signal.assert_called_once_with("app-container", 4242, "HUP")

        supervisor.close()
        supervisor.close()

        assert mock_gateway.send_signal.call_count == 2
        mock_gateway.send_signal.assert_called_with("app-container", 4242, "QUIT")
