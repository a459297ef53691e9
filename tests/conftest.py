"""Shared fixtures for tests that fork real child processes."""

import io
import os
import signal
import time
from collections.abc import Generator

import pytest

from smallsh.job import BackgroundRegistry
from smallsh.supervisor import JobSupervisor, ShellState


def _poll_until_gone(registry: BackgroundRegistry, pid: int, timeout: float = 5.0) -> None:
    """Run poll passes until pid has been reaped, failing after timeout seconds."""
    deadline = time.monotonic() + timeout
    while pid in registry:
        if time.monotonic() > deadline:
            raise AssertionError(f"background pid {pid} was never reaped")
        registry.poll_all()
        time.sleep(0.01)


@pytest.fixture
def poll_until_gone():
    """Helper that runs poll passes until a background pid is reaped."""
    return _poll_until_gone


@pytest.fixture
def out() -> io.StringIO:
    """The stream the shell writes its own messages to."""
    return io.StringIO()


@pytest.fixture
def registry(out: io.StringIO) -> Generator[BackgroundRegistry, None, None]:
    """A registry whose leftover jobs are killed and reaped after the test."""
    registry = BackgroundRegistry(capacity=8, out=out)
    yield registry
    for pid in registry.pids:
        try:
            os.kill(pid, signal.SIGKILL)
            os.waitpid(pid, 0)
        except ChildProcessError:
            pass
        except ProcessLookupError:
            pass


@pytest.fixture
def state(registry: BackgroundRegistry) -> ShellState:
    """Fresh shell-wide state around the registry fixture."""
    return ShellState(registry)


@pytest.fixture
def supervisor(state: ShellState, out: io.StringIO) -> JobSupervisor:
    """A supervisor reporting to the out fixture."""
    return JobSupervisor(state, out)
