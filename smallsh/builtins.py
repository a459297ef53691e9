import logging
import os
from dataclasses import dataclass
from enum import StrEnum, auto

from result import Err, Ok, Result

from .api import CommandSpec, describe_outcome
from .errors import CdFailed
from .supervisor import JobSupervisor, ShellState

_LOGGER = logging.getLogger("builtins")


class Builtin(StrEnum):
    EXIT = auto()
    CD = auto()
    STATUS = auto()


class Next(StrEnum):
    CONTINUE = auto()
    EXIT = auto()


@dataclass
class Dispatcher:
    state: ShellState
    supervisor: JobSupervisor

    def dispatch(self, spec: CommandSpec) -> Next:
        match spec.program:
            case Builtin.EXIT:
                return self.exit()
            case Builtin.CD:
                match self.cd(spec.args[0] if spec.args else None):
                    case Err(failure):
                        self.supervisor.print_line(failure.message())
                return Next.CONTINUE
            case Builtin.STATUS:
                self.supervisor.print_line(describe_outcome(self.state.last_outcome))
                return Next.CONTINUE

        if spec.background and not self.state.foreground_only.enabled:
            match self.supervisor.spawn_background(spec):
                case Err(failure):
                    self.supervisor.print_line(failure.message())
        else:
            self.supervisor.spawn_foreground(spec)
        return Next.CONTINUE

    def exit(self) -> Next:
        # Jobs are only signaled; nothing waits for them to go away.
        _LOGGER.info(f"Exiting, terminating background pids {self.state.registry.pids}")
        self.state.registry.terminate_all()
        return Next.EXIT

    def cd(self, path: str | None) -> Result[None, CdFailed]:
        target = path if path is not None else os.environ.get("HOME")
        if target is None:
            return Err(CdFailed(path, "HOME not set"))

        try:
            os.chdir(target)
        except (OSError, ValueError) as e:
            _LOGGER.info(f"cd to {target!r} failed: {e}")
            detail = e.strerror if isinstance(e, OSError) and e.strerror else str(e)
            return Err(CdFailed(target, detail))

        _LOGGER.debug(f"Working directory is now {os.getcwd()}")
        return Ok(None)
