"""procinv - Textual inventory viewer."""

import os
import time
from enum import Enum
from queue import Empty, Queue

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.css.query import NoMatches
from textual.widgets import DataTable, Footer, Static

from procinv.config import InventoryConfig
from procinv.engine import InventoryEngine, InventorySnapshot
from procinv.log import configure_logging
from procinv.models import ProcessRecord, ServiceRecord, ServiceState
from procinv.monitor import InventoryMonitor
from procinv.processes import descendant_pids


class SortKey(Enum):
    """Sort keys for the process table."""

    PID = "pid"
    USER = "user"
    RSS = "rss"
    THREADS = "threads"


def format_kb(size_kb: int) -> str:
    """Format a size in kilobytes as a human-readable string."""
    size: float = size_kb
    for unit in ["K", "M", "G", "T"]:
        if size < 1024:
            return f"{size:5d}{unit}" if unit == "K" else f"{size:5.1f}{unit}"
        size = size / 1024
    return f"{size:.1f}P"


def format_duration(seconds: int) -> str:
    """Format a number of seconds as ``[N days, ]hh:mm:ss``."""
    days = seconds // 86400
    hours = (seconds % 86400) // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    if days > 0:
        return f"{days} days, {hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


class HeaderStats(Static):
    """Header widget showing uptime, boot time and counts."""

    DEFAULT_CSS = """
    HeaderStats {
        height: auto;
        min-height: 3;
        padding: 0 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize HeaderStats."""
        super().__init__(*args, **kwargs)
        self._snapshot: InventorySnapshot | None = None

    def compose(self) -> ComposeResult:
        """Compose the header stats layout."""
        yield Horizontal(
            Static(self._get_time_info(), id="time-info"),
            Static(self._get_count_info(), id="count-info"),
        )

    def update_stats(self, snapshot: InventorySnapshot) -> None:
        """Update the statistics from an inventory snapshot."""
        self._snapshot = snapshot
        try:
            self.query_one("#time-info", Static).update(self._get_time_info())
            self.query_one("#count-info", Static).update(self._get_count_info())
        except NoMatches:
            pass  # Widget not mounted yet

    def _get_time_info(self) -> str:
        if self._snapshot is None:
            return "Loading uptime..."
        booted = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(self._snapshot.boot_time))
        return f"Uptime: {format_duration(self._snapshot.uptime_seconds)}\nBooted: {booted}"

    def _get_count_info(self) -> str:
        if self._snapshot is None:
            return "Loading inventory..."
        running = sum(1 for s in self._snapshot.services if s.state is ServiceState.RUNNING)
        stopped = len(self._snapshot.services) - running
        return (
            f"Processes: {len(self._snapshot.processes)}  "
            f"Threads: {self._snapshot.thread_count}\n"
            f"Services: {running} running, {stopped} stopped"
        )


class ProcessTable(Container):
    """Container for the process data table."""

    DEFAULT_CSS = """
    ProcessTable {
        height: 2fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ProcessTable."""
        super().__init__(*args, **kwargs)
        self._processes: list[ProcessRecord] = []
        self._current_pids: set[int] = set()
        self._sort_key: SortKey = SortKey.PID
        self._sort_reverse: bool = False
        self._filter_pids: set[int] | None = None

    @property
    def sort_key(self) -> SortKey:
        """Get current sort key."""
        return self._sort_key

    @property
    def filter_pids(self) -> set[int] | None:
        """Pids the table is restricted to, or None when showing everything."""
        return self._filter_pids

    @property
    def processes(self) -> list[ProcessRecord]:
        """The full, unfiltered process list last shown."""
        return self._processes

    def cycle_sort(self) -> SortKey:
        """Cycle to the next sort key and return it."""
        keys = list(SortKey)
        self._sort_key = keys[(keys.index(self._sort_key) + 1) % len(keys)]
        # Largest first for sizes and counts
        self._sort_reverse = self._sort_key in (SortKey.RSS, SortKey.THREADS)
        self._rebuild()
        return self._sort_key

    def set_filter(self, pids: set[int] | None) -> None:
        """Restrict the table to ``pids``; None shows every process."""
        self._filter_pids = pids
        self._rebuild()

    def highlighted_pid(self) -> int | None:
        """Pid of the row under the cursor, if any."""
        table = self.query_one("#process-table", DataTable)
        if table.row_count == 0:
            return None
        row_key = table.coordinate_to_cell_key(table.cursor_coordinate).row_key
        return int(row_key.value) if row_key.value is not None else None

    def compose(self) -> ComposeResult:
        """Compose the process table."""
        yield DataTable(id="process-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#process-table", DataTable)
        table.cursor_type = "row"

        table.add_column("PID", key="pid", width=7)
        table.add_column("PPID", key="ppid", width=7)
        table.add_column("USER", key="user", width=10)
        table.add_column("S", key="state", width=2)
        table.add_column("THR", key="threads", width=5)
        table.add_column("RSS", key="rss", width=8)
        table.add_column("ELAPSED", key="elapsed", width=12)
        table.add_column("Command", key="command")

    def update_processes(self, processes: list[ProcessRecord]) -> None:
        """
        Update the process table with new data.

        Existing rows are updated in place with update_cell; rows for
        processes that have gone away are removed.
        """
        self._processes = processes
        table = self.query_one("#process-table", DataTable)
        visible = self._visible_processes()
        new_pids = {proc.pid for proc in visible}

        for pid in self._current_pids - new_pids:
            table.remove_row(str(pid))

        for proc in visible:
            if proc.pid in self._current_pids:
                self._update_row(table, proc)
            else:
                self._add_row(table, proc)

        self._current_pids = new_pids

    def _rebuild(self) -> None:
        """Redraw every row, used when sort order or filter changes."""
        try:
            table = self.query_one("#process-table", DataTable)
        except NoMatches:
            return
        table.clear()
        self._current_pids = set()
        self.update_processes(self._processes)

    def _visible_processes(self) -> list[ProcessRecord]:
        processes = self._processes
        if self._filter_pids is not None:
            processes = [p for p in processes if p.pid in self._filter_pids]
        # ps can list a pid twice if it was reused between rows
        unique = list({p.pid: p for p in processes}.values())
        key_func = {
            SortKey.PID: lambda p: p.pid,
            SortKey.USER: lambda p: p.user.lower(),
            SortKey.RSS: lambda p: p.resident_size_kb,
            SortKey.THREADS: lambda p: p.thread_count,
        }
        return sorted(unique, key=key_func[self._sort_key], reverse=self._sort_reverse)

    def _update_row(self, table: DataTable, proc: ProcessRecord) -> None:
        row_key = str(proc.pid)
        table.update_cell(row_key, "ppid", str(proc.parent_pid))
        table.update_cell(row_key, "user", Text(proc.user[:10]))
        table.update_cell(row_key, "state", proc.state)
        table.update_cell(row_key, "threads", str(proc.thread_count))
        table.update_cell(row_key, "rss", format_kb(proc.resident_size_kb))
        table.update_cell(row_key, "elapsed", proc.elapsed_time)
        table.update_cell(row_key, "command", Text(proc.full_args[:60]))

    def _add_row(self, table: DataTable, proc: ProcessRecord) -> None:
        table.add_row(
            str(proc.pid),
            str(proc.parent_pid),
            Text(proc.user[:10]),
            proc.state,
            str(proc.thread_count),
            format_kb(proc.resident_size_kb),
            proc.elapsed_time,
            Text(proc.full_args[:60]),
            key=str(proc.pid),
        )


class ServiceTable(Container):
    """Container for the service data table."""

    DEFAULT_CSS = """
    ServiceTable {
        height: 1fr;
        border: solid $secondary;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the service table."""
        yield DataTable(id="service-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#service-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Service", key="name")
        table.add_column("PID", key="pid", width=7)
        table.add_column("State", key="state", width=8)

    def update_services(self, services: list[ServiceRecord]) -> None:
        """Replace the service rows. Duplicate names are shown as reported."""
        table = self.query_one("#service-table", DataTable)
        table.clear()
        for service in services:
            table.add_row(
                Text(service.name),
                str(service.process_id) if service.process_id else "-",
                service.state.value,
            )


class ProcinvApp(App):
    """Main procinv application."""

    TITLE = "procinv"
    SUB_TITLE = "Process and Service Inventory"

    CSS = """
    Screen {
        layout: vertical;
    }

    #header-stats {
        dock: top;
    }

    Horizontal {
        height: auto;
    }

    #time-info {
        width: 1fr;
        padding-right: 2;
    }

    #count-info {
        width: 1fr;
        padding-left: 2;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("f6", "sort", "Sort"),
        ("d", "descendants", "Descendants"),
        ("escape", "clear_filter", "All"),
    ]

    def __init__(self, engine: InventoryEngine | None = None) -> None:
        """Initialize the ProcinvApp."""
        super().__init__()
        self._engine = engine or InventoryEngine(InventoryConfig.from_env())
        self._update_queue: Queue[InventorySnapshot] = Queue()
        self._monitor = InventoryMonitor(
            self._engine, self._update_queue, poll_rate=self._engine.config.poll_rate
        )

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderStats(id="header-stats")
        yield ProcessTable()
        yield ServiceTable()
        yield Footer()

    def on_mount(self) -> None:
        """Start the inventory monitor when the app is mounted."""
        self._monitor.start()
        self.set_interval(0.5, self._check_for_updates)

    def _check_for_updates(self) -> None:
        """Drain the queue and show the most recent snapshot."""
        snapshot = None
        while True:
            try:
                snapshot = self._update_queue.get_nowait()
            except Empty:
                break

        if snapshot is not None:
            self.show_snapshot(snapshot)

    def show_snapshot(self, snapshot: InventorySnapshot) -> None:
        """Update every widget from ``snapshot``."""
        self.query_one("#header-stats", HeaderStats).update_stats(snapshot)
        self.query_one(ProcessTable).update_processes(snapshot.processes)
        self.query_one(ServiceTable).update_services(snapshot.services)

    def action_sort(self) -> None:
        """Cycle through process sort keys."""
        new_sort_key = self.query_one(ProcessTable).cycle_sort()
        self.notify(f"Sort: {new_sort_key.value.upper()}")

    def action_descendants(self) -> None:
        """Show only the descendants of the highlighted process."""
        process_table = self.query_one(ProcessTable)
        pid = process_table.highlighted_pid()
        if pid is None:
            return
        pids = descendant_pids(process_table.processes, pid)
        process_table.set_filter(pids)
        self.notify(f"{len(pids)} descendants of {pid}")

    def action_clear_filter(self) -> None:
        """Show every process again."""
        self.query_one(ProcessTable).set_filter(None)

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop()
        self.exit()


def main() -> None:
    """Entry point for the procinv viewer."""
    config = InventoryConfig.from_env()
    configure_logging(config.log_level, log_file=config.log_file or os.devnull)
    app = ProcinvApp(InventoryEngine(config))
    app.run()


if __name__ == "__main__":
    main()
