import os
from dataclasses import dataclass, field
from enum import StrEnum, auto


@dataclass(frozen=True)
class CommandSpec:
    program: str
    args: tuple[str, ...] = ()
    input_path: str | None = None
    output_path: str | None = None
    background: bool = False

    @property
    def argv(self) -> tuple[str, ...]:
        return (self.program, *self.args)

    @property
    def has_redirection(self) -> bool:
        return self.input_path is not None or self.output_path is not None


@dataclass(frozen=True)
class Exited:
    code: int


@dataclass(frozen=True)
class Signaled:
    signal: int


Outcome = Exited | Signaled


def outcome_from_wait_status(wait_status: int) -> Outcome:
    if os.WIFSIGNALED(wait_status):
        return Signaled(os.WTERMSIG(wait_status))
    if os.WIFEXITED(wait_status):
        return Exited(os.WEXITSTATUS(wait_status))
    raise ValueError(f"Wait status {wait_status} is not a termination")


def describe_outcome(outcome: Outcome) -> str:
    match outcome:
        case Exited(code):
            return f"exit value {code}"
        case Signaled(signal):
            return f"terminated by signal {signal}"


def describe_completion(pid: int, outcome: Outcome) -> str:
    return f"background pid {pid} is done: {describe_outcome(outcome)}"


class JobStatus(StrEnum):
    RUNNING = auto()
    COMPLETED = auto()


@dataclass
class JobState:
    status: JobStatus
    outcome: Outcome | None = field(default=None)
