"""Service inventory from the service manager and legacy init scripts."""

from collections.abc import Callable, Iterable
from pathlib import Path

import structlog

from procinv.command import CommandSource
from procinv.config import InventoryConfig
from procinv.models import ServiceRecord, ServiceState
from procinv.parsing import parse_int_or_default

logger = structlog.get_logger(__name__)

DirectoryLister = Callable[[str], list[str] | None]

DEFAULT_SUFFIX = ":default"


def list_directory(path: str) -> list[str] | None:
    """Names of the entries directly under ``path``, or None if unreadable."""
    directory = Path(path)
    if not directory.is_dir():
        return None
    try:
        return [entry.name for entry in directory.iterdir()]
    except OSError:
        return None


def legacy_service_names(directory: str, lister: DirectoryLister = list_directory) -> list[str]:
    """Init script names under the legacy service directory."""
    names = lister(directory)
    if names is None:
        logger.debug("legacy_service_dir_unavailable", directory=directory)
        return []
    return list(names)


def parse_service_lines(lines: Iterable[str], legacy_names: list[str]) -> list[ServiceRecord]:
    """
    Classify ``svcs -p`` output lines into service records.

    ``online`` lines are recorded as STOPPED with no pid; the pid-bearing
    continuation lines underneath them are the RUNNING entries. Lines for
    legacy rc scripts are matched against ``legacy_names``. Records are
    returned in encounter order and are not deduplicated.

    Example input::

        STATE          STIME    FMRI
        legacy_run     23:56:49 lrc:/etc/rc2_d/S47pppd
        online         23:56:25 svc:/system/svc/restarter:default
                       23:56:24       13 svc.startd
    """
    services: list[ServiceRecord] = []
    for line in lines:
        if line.startswith("online"):
            delim = line.rfind(":/")
            if delim > 0:
                name = line[delim + 2 :].rstrip()
                if name.endswith(DEFAULT_SUFFIX):
                    name = name[: -len(DEFAULT_SUFFIX)]
                services.append(ServiceRecord(name, 0, ServiceState.STOPPED))
        elif line.startswith(" "):
            fields = line.split()
            if len(fields) == 3:
                services.append(
                    ServiceRecord(fields[2], parse_int_or_default(fields[1]), ServiceState.RUNNING)
                )
        elif line.startswith("legacy_run"):
            for name in legacy_names:
                if line.endswith(name):
                    services.append(ServiceRecord(name, 0, ServiceState.STOPPED))
                    break
    return services


class ServiceInventory:
    """Builds the service list from the live listing and the legacy directory."""

    def __init__(
        self,
        source: CommandSource,
        config: InventoryConfig | None = None,
        lister: DirectoryLister = list_directory,
    ) -> None:
        self._source = source
        self._config = config or InventoryConfig()
        self._lister = lister

    def list_services(self) -> list[ServiceRecord]:
        legacy = legacy_service_names(self._config.legacy_service_dir, self._lister)
        return parse_service_lines(self._source.run(self._config.service_command), legacy)
