"""Kernel statistics chain access."""

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Protocol

import psutil


class KstatError(OSError):
    """The kernel statistics chain could not be opened."""


@dataclass(slots=True)
class Kstat:
    """One named statistic with its snapshot time and data fields."""

    module: str
    instance: int
    name: str
    snaptime: int = 0  # nanoseconds since boot at last snapshot
    data: dict[str, int] = field(default_factory=dict)


class KstatChain(Protocol):
    """An open handle to the kernel statistics chain."""

    def lookup(self, module: str, instance: int, name: str) -> Kstat | None:
        ...

    def read(self, kstat: Kstat) -> bool:
        ...

    def data_lookup(self, kstat: Kstat, name: str) -> int:
        ...

    def close(self) -> None:
        ...


ChainFactory = Callable[[], KstatChain]


@contextmanager
def scoped_chain(factory: ChainFactory) -> Iterator[KstatChain]:
    """Open a chain with ``factory`` and close it on every way out."""
    chain = factory()
    try:
        yield chain
    finally:
        chain.close()


class HostKstatChain:
    """
    Chain serving ``unix:0:system_misc`` from psutil's host boot time.

    Only the counters the inventory reads are provided; every other lookup
    misses.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._closed = False
        self._boot_time_value: float | None = None

    def lookup(self, module: str, instance: int, name: str) -> Kstat | None:
        if self._closed:
            raise KstatError("kstat chain is closed")
        if (module, instance, name) != ("unix", 0, "system_misc"):
            return None
        kstat = Kstat(module, instance, name)
        boot_time = self._boot_time()
        if boot_time is None:
            return None
        kstat.snaptime = max(0, int((self._clock() - boot_time) * 1_000_000_000))
        return kstat

    def read(self, kstat: Kstat) -> bool:
        boot_time = self._boot_time()
        if boot_time is None:
            return False
        kstat.data["boot_time"] = int(boot_time)
        return True

    def _boot_time(self) -> float | None:
        # one psutil query per open chain
        if self._boot_time_value is None:
            try:
                self._boot_time_value = psutil.boot_time()
            except (OSError, RuntimeError):
                return None
        return self._boot_time_value

    def data_lookup(self, kstat: Kstat, name: str) -> int:
        return kstat.data.get(name, 0)

    def close(self) -> None:
        self._closed = True
