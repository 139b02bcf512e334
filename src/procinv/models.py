"""Data models for procinv."""

from dataclasses import dataclass
from enum import Enum

from procinv.parsing import parse_dhms_or_default


class ProcessState(Enum):
    """Process execution state derived from the ps status letter."""

    RUNNING = "running"
    SLEEPING = "sleeping"
    WAITING = "waiting"
    ZOMBIE = "zombie"
    STOPPED = "stopped"
    OTHER = "other"


_STATE_CODES = {
    "O": ProcessState.RUNNING,
    "S": ProcessState.SLEEPING,
    "R": ProcessState.WAITING,
    "W": ProcessState.WAITING,
    "Z": ProcessState.ZOMBIE,
    "T": ProcessState.STOPPED,
}


class ServiceState(Enum):
    """Service classification."""

    RUNNING = "running"
    STOPPED = "stopped"


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable record of one process as seen by ps."""

    pid: int
    parent_pid: int
    state: str  # 'O', 'S', 'R', 'Z', etc.
    user: str
    uid: int
    group: str
    gid: int
    thread_count: int
    priority: int
    virtual_size_kb: int
    resident_size_kb: int
    elapsed_time: str  # [[dd-]hh:]mm:ss
    cpu_time: str
    command: str
    full_args: str

    @property
    def status(self) -> ProcessState:
        return _STATE_CODES.get(self.state, ProcessState.OTHER)

    @property
    def elapsed_seconds(self) -> int:
        return parse_dhms_or_default(self.elapsed_time)

    @property
    def cpu_seconds(self) -> int:
        return parse_dhms_or_default(self.cpu_time)


@dataclass(slots=True, frozen=True)
class ServiceRecord:
    """Immutable record of one named service."""

    name: str
    process_id: int  # 0 when unknown
    state: ServiceState
