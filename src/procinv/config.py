"""Configuration for procinv."""

import os
from dataclasses import dataclass

PS_COLUMNS = "s,pid,ppid,user,uid,group,gid,nlwp,pri,vsz,rss,etime,time,comm,args"

ENV_PREFIX = "PROCINV_"


@dataclass(slots=True, frozen=True)
class InventoryConfig:
    """Commands and locations used to build the inventory."""

    ps_columns: str = PS_COLUMNS
    legacy_service_dir: str = "/etc/init.d"
    service_command: str = "svcs -p"
    child_command: str = "pgrep -P"
    thread_command: str = "ps -eLo pid"
    poll_rate: float = 2.0
    log_level: str = "WARNING"
    log_file: str | None = None

    @property
    def all_processes_command(self) -> str:
        return f"ps -eo {self.ps_columns}"

    @property
    def pid_processes_command(self) -> str:
        """Listing command that expects a pid or comma-joined pids appended."""
        return f"ps -o {self.ps_columns} -p "

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "InventoryConfig":
        """
        Build a config from ``PROCINV_*`` environment variables.

        Unset variables keep their defaults; an unparsable poll rate is ignored.
        """
        environ = os.environ if environ is None else environ
        defaults = cls()

        poll_rate = defaults.poll_rate
        raw_rate = environ.get(f"{ENV_PREFIX}POLL_RATE")
        if raw_rate:
            try:
                poll_rate = float(raw_rate)
            except ValueError:
                pass

        return cls(
            legacy_service_dir=environ.get(
                f"{ENV_PREFIX}LEGACY_SERVICE_DIR", defaults.legacy_service_dir
            ),
            poll_rate=poll_rate,
            log_level=environ.get(f"{ENV_PREFIX}LOG_LEVEL", defaults.log_level).upper(),
            log_file=environ.get(f"{ENV_PREFIX}LOG_FILE") or None,
        )
