import enum
import logging
import os
import sys

from result import Err, Ok, Result

from .errors import DupFailed, FileOpenFailed, RedirectFailed

_LOGGER = logging.getLogger("files")

NULL_DEVICE = os.devnull

STDIN_FD = 0
STDOUT_FD = 1
STDERR_FD = 2


class Mode(enum.Flag):
    R = 1
    W = 2

    def to_flag(self) -> int:
        match self:
            case Mode.R:
                return os.O_RDONLY
            case _:
                return os.O_WRONLY | os.O_CREAT | os.O_TRUNC

    def target_fd(self) -> int:
        match self:
            case Mode.R:
                return STDIN_FD
            case _:
                return STDOUT_FD


def try_open(path: str, mode: Mode) -> Result[int, FileOpenFailed]:
    try:
        return Ok(os.open(path, mode.to_flag(), 0o644))
    except OSError as open_exception:
        return Err(FileOpenFailed(path, open_exception))


def try_bind(path: str, mode: Mode) -> Result[None, RedirectFailed]:
    """
    Opens path and duplicates it onto the standard stream for mode,
    replacing whatever was inherited.
    """

    match try_open(path, mode):
        case Ok(fd):
            pass
        case Err() as err:
            return err

    target_fd = mode.target_fd()
    try:
        if fd == target_fd:
            # os.open descriptors are close-on-exec
            os.set_inheritable(fd, True)
        else:
            os.dup2(fd, target_fd)
            os.close(fd)
    except OSError as dup_exception:
        return Err(DupFailed(path, target_fd, dup_exception))

    return Ok(None)


def redirect_stdio(input_path: str | None, output_path: str | None) -> Result[None, RedirectFailed]:
    if input_path is not None:
        match try_bind(input_path, Mode.R):
            case Err() as err:
                return err

    if output_path is not None:
        match try_bind(output_path, Mode.W):
            case Err() as err:
                return err

    return Ok(None)


def background_paths(input_path: str | None, output_path: str | None) -> tuple[str, str]:
    return (input_path or NULL_DEVICE, output_path or NULL_DEVICE)


def redirect_or_exit(input_path: str | None, output_path: str | None) -> None:
    """
    Redirection for a freshly forked child. A failure is reported on
    stderr and ends the calling process, never the shell.
    """

    match redirect_stdio(input_path, output_path):
        case Ok():
            return
        case Err(failure):
            write_diagnostic(failure.message())
            os._exit(failure.exit_code)


def write_diagnostic(message: str) -> None:
    try:
        os.write(STDERR_FD, f"{message}\n".encode())
    except OSError:
        # stderr may itself be gone; the exit status still reports the failure
        pass


def flush_std_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (OSError, ValueError) as flush_exception:
            _LOGGER.info(f"Could not flush {stream}: {flush_exception}")
