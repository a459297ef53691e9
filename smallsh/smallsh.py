#!/usr/bin/env python3

import logging
import os
import sys
from dataclasses import dataclass
from typing import TextIO

from result import Err, Ok

from .builtins import Dispatcher, Next
from .job import BackgroundRegistry
from .parser import CommandParser, SmallshParser
from .shell_config import ShellConfig, parse_config
from .signals import PROMPT, SignalCoordinator
from .supervisor import JobSupervisor, ShellState

_LOGGER = logging.getLogger(__name__)


@dataclass
class Shell:
    state: ShellState
    parser: CommandParser
    stdin: TextIO
    out: TextIO

    def __post_init__(self) -> None:
        self.supervisor = JobSupervisor(self.state, self.out)
        self.dispatcher = Dispatcher(self.state, self.supervisor)

    def run(self) -> int:
        while self.run_once() == Next.CONTINUE:
            pass
        _LOGGER.info("Shell shutting down")
        return 0

    def run_once(self) -> Next:
        self.state.registry.poll_all()

        self.out.write(PROMPT)
        self.out.flush()

        line = self.stdin.readline()
        if not line:
            _LOGGER.info("End of input")
            self.out.write("\n")
            return self.dispatcher.exit()

        return self.execute(line)

    def execute(self, line: str) -> Next:
        match self.parser.parse(line):
            case Ok(None):
                return Next.CONTINUE
            case Ok(spec):
                _LOGGER.debug(f"Dispatching {spec}")
                return self.dispatcher.dispatch(spec)
            case Err(failure):
                self.supervisor.print_line(failure.message())
                return Next.CONTINUE


def make_shell(
    config: ShellConfig,
    stdin: TextIO | None = None,
    out: TextIO | None = None,
) -> Shell:
    out = out if out is not None else sys.stdout
    return Shell(
        state=ShellState(BackgroundRegistry(config.max_background_jobs, out)),
        parser=SmallshParser(),
        stdin=stdin if stdin is not None else sys.stdin,
        out=out,
    )


def main(config: ShellConfig) -> int:
    logging.basicConfig(level=config.log_level, filename=config.log_file)

    _LOGGER.info(f"=== Starting shell instance {os.getpid()} ===")

    shell = make_shell(config)
    with SignalCoordinator(shell.state.foreground_only).installed():
        return shell.run()


def run() -> None:
    sys.exit(main(parse_config(sys.argv)))


if __name__ == "__main__":
    run()
