"""Inventory engine tying together processes, services and boot time."""

import time
from collections.abc import Callable
from dataclasses import dataclass

import psutil
import structlog

from procinv.command import CommandSource, SubprocessCommandSource
from procinv.config import InventoryConfig
from procinv.kstat import ChainFactory, HostKstatChain
from procinv.models import ProcessRecord, ServiceRecord
from procinv.processes import ProcessLister
from procinv.services import DirectoryLister, ServiceInventory, list_directory
from procinv.uptime import BootTimeOracle, default_oracle

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class InventorySnapshot:
    """Point-in-time view of the host's processes and services."""

    processes: list[ProcessRecord]
    services: list[ServiceRecord]
    uptime_seconds: int
    boot_time: int
    thread_count: int
    captured_at: float


class InventoryEngine:
    """
    Entry point for process and service queries.

    Every query runs fresh commands; nothing but the boot time is cached.
    Collaborators can be swapped out, which is how the tests drive it.
    """

    def __init__(
        self,
        config: InventoryConfig | None = None,
        source: CommandSource | None = None,
        chain_factory: ChainFactory | None = None,
        lister: DirectoryLister = list_directory,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """
        Initialize the engine.

        Without an injected chain factory or clock, boot time comes from the
        process-wide oracle so every engine reports the same cached value.
        """
        self._config = config or InventoryConfig()
        self._source = source or SubprocessCommandSource()
        self._clock = clock or time.time
        self._processes = ProcessLister(self._source, self._config)
        self._services = ServiceInventory(self._source, self._config, lister)
        if chain_factory is None and clock is None:
            self._oracle = default_oracle()
        else:
            self._oracle = BootTimeOracle(chain_factory or HostKstatChain, self._clock)

    @property
    def config(self) -> InventoryConfig:
        return self._config

    def get_process(self, pid: int) -> ProcessRecord | None:
        return self._processes.get_process(pid)

    def all_processes(self) -> list[ProcessRecord]:
        return self._processes.all_processes()

    def children_of(self, parent_pid: int) -> list[ProcessRecord]:
        return self._processes.children_of(parent_pid)

    def descendants_of(self, parent_pid: int) -> list[ProcessRecord]:
        return self._processes.descendants_of(parent_pid)

    def services(self) -> list[ServiceRecord]:
        return self._services.list_services()

    def uptime_seconds(self) -> int:
        return self._oracle.uptime_seconds()

    def boot_time_seconds(self) -> int:
        return self._oracle.boot_time_seconds()

    def process_count(self) -> int:
        """Number of pids the kernel currently reports."""
        try:
            return len(psutil.pids())
        except (OSError, psutil.Error) as exc:
            logger.warning("process_count_unavailable", error=str(exc))
            return 0

    def thread_count(self) -> int:
        """Number of threads across all processes, one ps row per thread."""
        lines = self._source.run(self._config.thread_command)
        if lines:
            # Subtract 1 for header
            return len(lines) - 1
        return self.process_count()

    def snapshot(self) -> InventorySnapshot:
        """Collect processes, services and timing in one call."""
        processes = self.all_processes()
        services = self.services()
        logger.debug("inventory_collected", processes=len(processes), services=len(services))
        return InventorySnapshot(
            processes=processes,
            services=services,
            uptime_seconds=self.uptime_seconds(),
            boot_time=self.boot_time_seconds(),
            thread_count=self.thread_count(),
            captured_at=self._clock(),
        )
