import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass

from result import Err, Ok, Result
from typing_extensions import override

from .api import CommandSpec
from .errors import LineTooLong, MalformedCommand, ParseError

_LOGGER = logging.getLogger(__name__)

MAX_LINE_LENGTH = 2048

_PID_VARIABLE = "$$"
_INPUT = "<"
_OUTPUT = ">"
_BACKGROUND = "&"


class CommandParser(ABC):
    @abstractmethod
    def parse(self, line: str) -> Result[CommandSpec | None, ParseError]:
        """
        Turns one input line into a command, or None for lines that carry
        no command (blank lines and comments).
        """


@dataclass
class SmallshParser(CommandParser):
    pid: int | None = None

    @override
    def parse(self, line: str) -> Result[CommandSpec | None, ParseError]:
        line = line.rstrip("\n")
        if len(line) >= MAX_LINE_LENGTH:
            return Err(LineTooLong(len(line), MAX_LINE_LENGTH))

        line = self.expand(line)
        if not line.strip() or line.startswith("#"):
            return Ok(None)

        tokens = line.split()
        _LOGGER.debug(f"Tokens: {tokens}")
        return self._build(line, tokens)

    def expand(self, line: str) -> str:
        pid = self.pid if self.pid is not None else os.getpid()
        return line.replace(_PID_VARIABLE, str(pid))

    def _build(self, line: str, tokens: list[str]) -> Result[CommandSpec | None, ParseError]:
        program, rest = tokens[0], tokens[1:]

        background = False
        if rest and rest[-1] == _BACKGROUND:
            background = True
            rest = rest[:-1]

        args: list[str] = []
        while rest and rest[0] not in (_INPUT, _OUTPUT):
            args.append(rest.pop(0))

        input_path: str | None = None
        output_path: str | None = None
        while rest:
            operator = rest.pop(0)
            if operator not in (_INPUT, _OUTPUT):
                return Err(MalformedCommand(line, f"unexpected token {operator}"))
            if not rest:
                return Err(MalformedCommand(line, f"missing file name after {operator}"))

            path = rest.pop(0)
            if operator == _INPUT:
                input_path = path
            else:
                output_path = path

        return Ok(
            CommandSpec(
                program=program,
                args=tuple(args),
                input_path=input_path,
                output_path=output_path,
                background=background,
            )
        )
