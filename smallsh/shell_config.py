import logging
import pathlib
from argparse import ArgumentParser, Namespace
from configparser import ConfigParser
from dataclasses import dataclass

from .job import DEFAULT_CAPACITY

_LOGGER = logging.getLogger(__name__)


@dataclass
class ShellConfig:
    log_level: int
    log_file: str
    max_background_jobs: int


@dataclass
class _ConfigFilePath:
    dir: pathlib.Path | None

    def maybe_relative(self, path_str: str | None) -> pathlib.Path | None:
        if not path_str:
            return None

        input_path = pathlib.Path(path_str).expanduser()

        if path_str.startswith("./") and self.dir:
            return self.dir.joinpath(input_path)

        return input_path


class _ArgNamespace(Namespace):
    config_file: pathlib.Path | None
    log_file: pathlib.Path | None
    log_level: str | None
    max_background_jobs: int | None


def _parse_args(argv: list[str]) -> _ArgNamespace:
    arg_parser = ArgumentParser(
        prog="smallsh",
        description="Small interactive shell with foreground and background jobs",
    )

    arg_parser.add_argument("--log-level", help="Log level, defaults to WARNING")
    arg_parser.add_argument(
        "--log-file",
        type=pathlib.Path,
        help="Log file, defaults to /dev/null",
    )
    arg_parser.add_argument(
        "--config",
        dest="config_file",
        type=pathlib.Path,
        help="Configuration file to base the shell on",
    )
    arg_parser.add_argument(
        "--max-background-jobs",
        type=int,
        help=f"Most background jobs tracked at once, defaults to {DEFAULT_CAPACITY}",
    )

    return arg_parser.parse_args(argv[1:], _ArgNamespace())


@dataclass
class _ConfigFile:
    # [core]
    log_level: str | None = None
    log_file: pathlib.Path | None = None

    # [jobs]
    max_background_jobs: int | None = None


def _parse_file(path: pathlib.Path | None) -> _ConfigFile:
    if not path:
        return _ConfigFile()

    config_parser = ConfigParser()
    if not config_parser.read(path):
        raise RuntimeError(f"Could not read config file {path}")
    config_dir = _ConfigFilePath(path.parent)

    return _ConfigFile(
        log_level=config_parser.get("core", "log_level", fallback=None),
        log_file=config_dir.maybe_relative(config_parser.get("core", "log_file", fallback=None)),
        max_background_jobs=config_parser.getint("jobs", "max_background_jobs", fallback=None),
    )


def parse_config(argv: list[str]) -> ShellConfig:
    args = _parse_args(argv)
    file = _parse_file(args.config_file)

    level_name = (args.log_level or file.log_level or "WARNING").upper()
    levels = logging.getLevelNamesMapping()
    if level_name not in levels:
        raise RuntimeError(f"Unknown log level {level_name}")

    max_background_jobs = args.max_background_jobs
    if max_background_jobs is None:
        max_background_jobs = file.max_background_jobs
    if max_background_jobs is None:
        max_background_jobs = DEFAULT_CAPACITY
    if max_background_jobs < 1:
        raise RuntimeError(f"max_background_jobs must be positive, got {max_background_jobs}")

    config = ShellConfig(
        log_level=levels[level_name],
        log_file=str(args.log_file or file.log_file or "/dev/null"),
        max_background_jobs=max_background_jobs,
    )
    _LOGGER.debug(f"Parsed {config}")
    return config
