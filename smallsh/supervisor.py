import logging
import sys
from dataclasses import dataclass, field
from typing import TextIO

from result import Err, Ok, Result

from .api import CommandSpec, Exited, Outcome, Signaled, describe_outcome
from .errors import RegistryFull
from .files import background_paths
from .job import BackgroundRegistry, JobRecord
from .process import LaunchSpec, spawn
from .signals import ForegroundOnlyMode

_LOGGER = logging.getLogger("supervisor")


@dataclass
class ShellState:
    registry: BackgroundRegistry
    foreground_only: ForegroundOnlyMode = field(default_factory=ForegroundOnlyMode)
    last_outcome: Outcome = Exited(0)


@dataclass
class JobSupervisor:
    state: ShellState
    out: TextIO = field(default_factory=lambda: sys.stdout)

    @property
    def registry(self) -> BackgroundRegistry:
        return self.state.registry

    def spawn_foreground(self, spec: CommandSpec) -> Outcome:
        handle = spawn(
            LaunchSpec(
                argv=spec.argv,
                input_path=spec.input_path,
                output_path=spec.output_path,
                foreground=True,
            )
        )

        outcome = handle.wait()
        self.state.last_outcome = outcome
        _LOGGER.debug(f"Foreground pid {handle.pid} finished: {outcome}")

        if isinstance(outcome, Signaled):
            self.print_line(describe_outcome(outcome))
        return outcome

    def spawn_background(self, spec: CommandSpec) -> Result[JobRecord, RegistryFull]:
        if not self.registry.has_capacity():
            self.registry.poll_all()
            if not self.registry.has_capacity():
                _LOGGER.warning(f"Refusing to start {spec.argv}: registry is full")
                return Err(RegistryFull(self.registry.capacity))

        input_path, output_path = background_paths(spec.input_path, spec.output_path)
        handle = spawn(
            LaunchSpec(
                argv=spec.argv,
                input_path=input_path,
                output_path=output_path,
                foreground=False,
            )
        )
        self.print_line(f"background pid is {handle.pid}")

        match self.registry.add(JobRecord(handle)):
            case Ok(record):
                pass
            case Err() as err:
                return err

        # Very short jobs may already be done
        self.registry.reap(record)
        return Ok(record)

    def print_line(self, line: str) -> None:
        self.out.write(line + "\n")
        self.out.flush()
