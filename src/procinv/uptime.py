"""System uptime and boot time from the kernel statistics chain."""

import threading
import time
from collections.abc import Callable
from functools import lru_cache

import structlog

from procinv.kstat import ChainFactory, HostKstatChain, scoped_chain

logger = structlog.get_logger(__name__)

SYSTEM_MISC = ("unix", 0, "system_misc")


class BootTimeOracle:
    """
    Reports uptime and boot time.

    Boot time is computed on first access and never recomputed for the life
    of the oracle, even if the underlying counters later change.
    """

    def __init__(
        self,
        chain_factory: ChainFactory = HostKstatChain,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the oracle.

        Args:
            chain_factory: Opens a kernel statistics chain.
            clock: Wall clock in epoch seconds, used for the boot time fallback.
        """
        self._chain_factory = chain_factory
        self._clock = clock
        self._boot_time: int | None = None
        self._lock = threading.Lock()

    def uptime_seconds(self) -> int:
        """Seconds since boot, or 0 if the counter is unavailable."""
        try:
            with scoped_chain(self._chain_factory) as chain:
                kstat = chain.lookup(*SYSTEM_MISC)
                if kstat is not None:
                    return kstat.snaptime // 1_000_000_000
        except OSError as exc:
            logger.debug("kstat_unavailable", error=str(exc))
        return 0

    def boot_time_seconds(self) -> int:
        """Boot time in epoch seconds, computed once then cached."""
        if self._boot_time is None:
            with self._lock:
                if self._boot_time is None:
                    self._boot_time = self._query_boot_time()
        return self._boot_time

    def _query_boot_time(self) -> int:
        try:
            with scoped_chain(self._chain_factory) as chain:
                kstat = chain.lookup(*SYSTEM_MISC)
                if kstat is not None and chain.read(kstat):
                    return chain.data_lookup(kstat, "boot_time")
        except OSError as exc:
            logger.debug("kstat_unavailable", error=str(exc))
        boot_time = int(self._clock()) - self.uptime_seconds()
        logger.info("boot_time_derived", boot_time=boot_time)
        return boot_time


@lru_cache(maxsize=None)
def default_oracle() -> BootTimeOracle:
    """The process-wide oracle backed by the host chain."""
    return BootTimeOracle()


def system_boot_time() -> int:
    """Boot time of this host, fixed for the lifetime of the process."""
    return default_oracle().boot_time_seconds()
