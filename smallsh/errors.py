import os
from dataclasses import dataclass
from enum import IntEnum


class ChildExitCode(IntEnum):
    EXEC_FAILED = 1
    OPEN_FAILED = 1
    DUP_FAILED = 2


class LaunchError(RuntimeError):
    """
    Process creation itself failed. There is no child to confine the
    failure to, so this propagates and ends the shell.
    """

    def __init__(self, program: str, exception: OSError) -> None:
        super().__init__(f"Could not create a process for {program}: {exception}")
        self.program = program
        self.exception = exception


@dataclass
class FileOpenFailed:
    path: str
    exception: OSError

    @property
    def exit_code(self) -> int:
        return ChildExitCode.OPEN_FAILED

    def message(self) -> str:
        return f"{self.path}: {_reason(self.exception)}"


@dataclass
class DupFailed:
    path: str
    target_fd: int
    exception: OSError

    @property
    def exit_code(self) -> int:
        return ChildExitCode.DUP_FAILED

    def message(self) -> str:
        return f"{self.path}: cannot bind to fd {self.target_fd}: {_reason(self.exception)}"


@dataclass
class ExecFailed:
    program: str
    exception: OSError

    @property
    def exit_code(self) -> int:
        return ChildExitCode.EXEC_FAILED

    def message(self) -> str:
        return f"{self.program}: {_reason(self.exception)}"


@dataclass
class CdFailed:
    path: str | None
    detailed_message: str

    def message(self) -> str:
        return f"cd: {self.path or '~'}: {self.detailed_message}"


@dataclass
class RegistryFull:
    capacity: int

    def message(self) -> str:
        return f"smallsh: too many background jobs (limit {self.capacity})"


@dataclass
class LineTooLong:
    length: int
    limit: int

    def message(self) -> str:
        return (
            "Too many characters in the command. "
            f"Input must be under {self.limit} characters."
        )


@dataclass
class MalformedCommand:
    line: str
    detailed_message: str

    def message(self) -> str:
        return f"smallsh: {self.detailed_message}"


RedirectFailed = FileOpenFailed | DupFailed
ParseError = LineTooLong | MalformedCommand


def _reason(exception: OSError) -> str:
    if exception.errno is not None:
        return os.strerror(exception.errno)
    return str(exception)
