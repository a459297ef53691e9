import logging
import os
from dataclasses import dataclass
from signal import Signals
from typing import NoReturn

from .api import Outcome, outcome_from_wait_status
from .errors import ChildExitCode, ExecFailed, LaunchError
from .files import flush_std_streams, redirect_or_exit, write_diagnostic
from .signals import apply_child_dispositions

_LOGGER = logging.getLogger("process")


@dataclass(frozen=True)
class LaunchSpec:
    argv: tuple[str, ...]
    input_path: str | None = None
    output_path: str | None = None
    foreground: bool = True

    @property
    def program(self) -> str:
        return self.argv[0]


@dataclass
class ChildHandle:
    pid: int
    argv: tuple[str, ...]

    def __post_init__(self) -> None:
        self._outcome: Outcome | None = None

    @property
    def outcome(self) -> Outcome | None:
        return self._outcome

    def wait(self) -> Outcome:
        """
        Blocks until the child terminates.
        """

        if self._outcome is None:
            _, wait_status = os.waitpid(self.pid, 0)
            self._outcome = outcome_from_wait_status(wait_status)
        return self._outcome

    def poll(self) -> Outcome | None:
        """
        Non-blocking completion check, None while the child is still running.
        """

        if self._outcome is None:
            pid, wait_status = os.waitpid(self.pid, os.WNOHANG)
            if pid == 0:
                return None
            self._outcome = outcome_from_wait_status(wait_status)
        return self._outcome

    def signal(self, sig: Signals) -> None:
        os.kill(self.pid, sig.value)


def spawn(launch: LaunchSpec) -> ChildHandle:
    """
    Forks a child running launch.argv with the requested redirections and
    signal overrides. Anything that fails after the fork is confined to the
    child and surfaces only as its exit status.
    """

    flush_std_streams()
    try:
        pid = os.fork()
    except OSError as fork_exception:
        raise LaunchError(launch.program, fork_exception) from fork_exception

    if pid == 0:
        _exec_child(launch)

    _LOGGER.debug(f"Spawned {pid}: {launch}")
    return ChildHandle(pid, launch.argv)


def _exec_child(launch: LaunchSpec) -> NoReturn:
    try:
        apply_child_dispositions(launch.foreground)
        if launch.input_path is not None or launch.output_path is not None:
            redirect_or_exit(launch.input_path, launch.output_path)
        os.execvp(launch.program, launch.argv)
    except OSError as exec_exception:
        write_diagnostic(ExecFailed(launch.program, exec_exception).message())
    finally:
        os._exit(ChildExitCode.EXEC_FAILED)
