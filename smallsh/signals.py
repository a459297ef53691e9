import logging
import os
import signal
import threading
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass
from signal import Signals
from typing import Any

from .files import STDOUT_FD

_LOGGER = logging.getLogger(__name__)

PROMPT = ": "

# Encoded once so the handler never formats or allocates a message.
_ENTERING_NOTICE = f"Entering foreground-only mode (& is now ignored)\n{PROMPT}".encode()
_EXITING_NOTICE = f"Exiting foreground-only mode\n{PROMPT}".encode()

INTERRUPT = Signals.SIGINT
SUSPEND = Signals.SIGTSTP


class ForegroundOnlyMode:
    """
    Flag read by dispatch on every command and flipped only from the
    SIGTSTP handler.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def enabled(self) -> bool:
        return self._event.is_set()

    def toggle(self) -> bool:
        if self._event.is_set():
            self._event.clear()
            return False
        self._event.set()
        return True


@dataclass
class SignalCoordinator:
    mode: ForegroundOnlyMode
    notice_fd: int = STDOUT_FD

    def __post_init__(self) -> None:
        self._previous: dict[Signals, Any] = {}

    def handle_suspend(self, signum, frame) -> None:
        # Runs asynchronously to the control loop: flag flip plus one raw write only.
        notice = _ENTERING_NOTICE if self.mode.toggle() else _EXITING_NOTICE
        try:
            os.write(self.notice_fd, notice)
        except OSError:
            pass

    def install(self) -> None:
        self._previous[INTERRUPT] = signal.signal(INTERRUPT, signal.SIG_IGN)
        self._previous[SUSPEND] = signal.signal(SUSPEND, self.handle_suspend)
        _LOGGER.debug("Installed shell signal dispositions")

    def restore(self) -> None:
        for sig, handler in self._previous.items():
            if handler is not None:
                signal.signal(sig, handler)
        self._previous.clear()
        _LOGGER.debug("Restored previous signal dispositions")

    @contextmanager
    def installed(self) -> Generator["SignalCoordinator", None, None]:
        self.install()
        try:
            yield self
        finally:
            self.restore()


def apply_child_dispositions(foreground: bool) -> None:
    """
    Signal overrides for a forked child, applied before exec.

    Foreground children get the default SIGINT so an interrupt kills only
    them. Background children keep the ignored SIGINT inherited from the
    shell. Neither can be suspended.
    """

    if foreground:
        signal.signal(INTERRUPT, signal.SIG_DFL)
    signal.signal(SUSPEND, signal.SIG_IGN)
    # The interpreter ignores SIGPIPE and an ignored disposition survives exec.
    signal.signal(Signals.SIGPIPE, signal.SIG_DFL)
