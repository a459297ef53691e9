import logging
import sys
from dataclasses import dataclass
from signal import Signals
from typing import TextIO

from result import Err, Ok, Result

from .api import JobState, JobStatus, describe_completion
from .errors import RegistryFull
from .process import ChildHandle

_LOGGER = logging.getLogger("job")

DEFAULT_CAPACITY = 200


@dataclass
class JobRecord:
    handle: ChildHandle

    def __post_init__(self) -> None:
        self._state = JobState(JobStatus.RUNNING)

    @property
    def pid(self) -> int:
        return self.handle.pid

    @property
    def argv(self) -> tuple[str, ...]:
        return self.handle.argv

    @property
    def state(self) -> JobState:
        return self._state

    @property
    def status(self) -> JobStatus:
        return self._state.status

    def check(self) -> bool:
        """
        Non-blocking completion check. Returns whether the job has completed.
        """

        if self._state.status == JobStatus.COMPLETED:
            return True

        outcome = self.handle.poll()
        if outcome is None:
            return False

        self._state = JobState(JobStatus.COMPLETED, outcome)
        return True

    def describe_completion(self) -> str:
        if self._state.outcome is None:
            raise ValueError(f"Background pid {self.pid} is still running")
        return describe_completion(self.pid, self._state.outcome)


class BackgroundRegistry:
    capacity: int
    out: TextIO

    def __init__(self, capacity: int = DEFAULT_CAPACITY, out: TextIO | None = None) -> None:
        if capacity < 1:
            raise ValueError(f"Background job capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.out = out if out is not None else sys.stdout
        self._jobs: dict[int, JobRecord] = {}

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, pid: object) -> bool:
        return pid in self._jobs

    @property
    def pids(self) -> list[int]:
        return list(self._jobs.keys())

    def get(self, pid: int) -> JobRecord | None:
        return self._jobs.get(pid)

    def has_capacity(self) -> bool:
        return len(self._jobs) < self.capacity

    def add(self, record: JobRecord) -> Result[JobRecord, RegistryFull]:
        if record.pid in self._jobs:
            raise ValueError(f"Background pid {record.pid} is already registered")
        if not self.has_capacity():
            return Err(RegistryFull(self.capacity))

        self._jobs[record.pid] = record
        _LOGGER.debug(f"Registered background pid {record.pid}: {record.argv}")
        return Ok(record)

    def reap(self, record: JobRecord) -> bool:
        """
        Checks a single job, reporting and removing it if it has completed.
        """

        if not record.check():
            return False

        self.out.write(record.describe_completion() + "\n")
        self.out.flush()
        del self._jobs[record.pid]
        _LOGGER.info(f"Reaped background pid {record.pid}: {record.state.outcome}")
        return True

    def poll_all(self) -> list[JobRecord]:
        completed: list[JobRecord] = []
        for record in list(self._jobs.values()):
            if self.reap(record):
                completed.append(record)
        return completed

    def terminate_all(self, sig: Signals = Signals.SIGTERM) -> None:
        for record in self._jobs.values():
            _LOGGER.debug(f"Signaling background pid {record.pid} with {sig}")
            try:
                record.handle.signal(sig)
            except ProcessLookupError as e:
                # Swallow and log
                _LOGGER.info(f"Error signaling pid {record.pid}: {e}")
