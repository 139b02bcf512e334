"""Process listing and parent/child relationships built from ps output."""

from collections import deque
from collections.abc import Iterable

import structlog

from procinv.command import CommandSource
from procinv.config import InventoryConfig
from procinv.models import ProcessRecord
from procinv.parsing import parse_int_or_default, split_fields

logger = structlog.get_logger(__name__)

# Number of columns in InventoryConfig.ps_columns
PS_FIELD_COUNT = 15


def parse_process_row(fields: list[str], pid: int | None = None) -> ProcessRecord:
    """
    Build a ProcessRecord from the 15 fields of one ps row.

    Args:
        fields: Fields in ``s,pid,ppid,user,uid,group,gid,nlwp,pri,vsz,rss,
            etime,time,comm,args`` order.
        pid: Known pid for the row. When given it wins over the pid column.
    """
    return ProcessRecord(
        pid=parse_int_or_default(fields[1]) if pid is None else pid,
        parent_pid=parse_int_or_default(fields[2]),
        state=fields[0],
        user=fields[3],
        uid=parse_int_or_default(fields[4]),
        group=fields[5],
        gid=parse_int_or_default(fields[6]),
        thread_count=parse_int_or_default(fields[7]),
        priority=parse_int_or_default(fields[8]),
        virtual_size_kb=parse_int_or_default(fields[9]),
        resident_size_kb=parse_int_or_default(fields[10]),
        elapsed_time=fields[11],
        cpu_time=fields[12],
        command=fields[13],
        full_args=fields[14],
    )


def parse_process_listing(lines: list[str], pid: int | None = None) -> list[ProcessRecord]:
    """
    Parse ps output (header first) into records, keeping the source order.

    Rows that do not split into exactly 15 fields are skipped.
    """
    if len(lines) < 2:
        return []

    records: list[ProcessRecord] = []
    for line in lines[1:]:
        fields = split_fields(line, PS_FIELD_COUNT)
        if fields is None:
            logger.debug("process_row_skipped", line=line)
            continue
        records.append(parse_process_row(fields, pid))
    return records


def build_child_index(records: Iterable[ProcessRecord]) -> dict[int, set[int]]:
    """Map each parent pid to the pids of its direct children."""
    index: dict[int, set[int]] = {}
    for record in records:
        # pid 0 reports itself as its own parent
        if record.pid == record.parent_pid:
            continue
        index.setdefault(record.parent_pid, set()).add(record.pid)
    return index


def descendant_pids(records: Iterable[ProcessRecord], parent_pid: int) -> set[int]:
    """
    Collect every pid reachable from ``parent_pid`` through child links.

    Pids already visited are never expanded again, so parent/child cycles in
    corrupt data terminate. ``parent_pid`` itself is never part of the result.
    """
    index = build_child_index(records)
    visited = {parent_pid}
    queue = deque([parent_pid])
    while queue:
        for child in index.get(queue.popleft(), ()):
            if child not in visited:
                visited.add(child)
                queue.append(child)
    visited.discard(parent_pid)
    return visited


class ProcessLister:
    """Answers process queries by running ps and pgrep through a command source."""

    def __init__(self, source: CommandSource, config: InventoryConfig | None = None) -> None:
        self._source = source
        self._config = config or InventoryConfig()

    def list_processes(self, command: str, pid: int | None = None) -> list[ProcessRecord]:
        """
        Run a ps listing command and parse its rows.

        Args:
            command: Full listing command, or a pid-constrained prefix when
                ``pid`` is given.
            pid: Single pid to append to ``command``. The returned record
                carries this pid rather than the parsed one.
        """
        if pid is not None:
            command = f"{command}{pid}"
        return parse_process_listing(self._source.run(command), pid)

    def all_processes(self) -> list[ProcessRecord]:
        """Snapshot of every process on the host."""
        return self.list_processes(self._config.all_processes_command)

    def get_process(self, pid: int) -> ProcessRecord | None:
        """Return the process with ``pid``, or None if it does not exist."""
        records = self.list_processes(self._config.pid_processes_command, pid)
        if not records:
            return None
        return records[0]

    def processes_for(self, pids: Iterable[int]) -> list[ProcessRecord]:
        """Full records for a set of pids. An empty set runs nothing."""
        joined = ",".join(str(pid) for pid in sorted(pids))
        if not joined:
            return []
        return self.list_processes(self._config.pid_processes_command + joined)

    def child_pids(self, parent_pid: int) -> set[int]:
        """Direct children of ``parent_pid`` according to pgrep."""
        children: set[int] = set()
        parent = str(parent_pid)
        for line in self._source.run(f"{self._config.child_command} {parent}"):
            pid = line.strip()
            # pgrep can echo the queried pid back
            if not pid or pid == parent:
                continue
            value = parse_int_or_default(pid, -1)
            if value >= 0:
                children.add(value)
        return children

    def children_of(self, parent_pid: int) -> list[ProcessRecord]:
        """Direct child processes of ``parent_pid``."""
        return self.processes_for(self.child_pids(parent_pid))

    def descendants_of(self, parent_pid: int) -> list[ProcessRecord]:
        """Every process below ``parent_pid`` in the process tree."""
        return self.processes_for(descendant_pids(self.all_processes(), parent_pid))
