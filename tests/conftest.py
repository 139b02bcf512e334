"""Shared fakes for procinv tests."""

from procinv.kstat import Kstat, KstatError

PS_HEADER = "S   PID  PPID USER  UID GROUP GID NLWP PRI   VSZ  RSS     ELAPSED     TIME COMMAND COMMAND"


def ps_row(
    pid: int,
    ppid: int,
    comm: str = "sleep",
    args: str | None = None,
    state: str = "S",
    user: str = "root",
) -> str:
    """One ps line in procinv's 15-column layout."""
    args = args if args is not None else comm
    return (
        f"{state} {pid:5d} {ppid:5d} {user} 0 root 0 2 59 4096 2048 "
        f"1-02:03:04 00:00:07 {comm} {args}"
    )


class FakeCommandSource:
    """Command source answering from canned output and recording calls."""

    def __init__(self, outputs: dict[str, list[str]] | None = None) -> None:
        self.outputs = outputs or {}
        self.calls: list[str] = []

    def run(self, command: str) -> list[str]:
        self.calls.append(command)
        return list(self.outputs.get(command, []))


class FakeChain:
    """Kstat chain with a settable system_misc counter."""

    def __init__(self, snaptime: int | None = None, boot_time: int = 0, readable: bool = True):
        self.snaptime = snaptime
        self.boot_time = boot_time
        self.readable = readable
        self.closed = False

    def lookup(self, module: str, instance: int, name: str) -> Kstat | None:
        if self.snaptime is None or (module, instance, name) != ("unix", 0, "system_misc"):
            return None
        return Kstat(module, instance, name, snaptime=self.snaptime)

    def read(self, kstat: Kstat) -> bool:
        if self.readable:
            kstat.data["boot_time"] = self.boot_time
        return self.readable

    def data_lookup(self, kstat: Kstat, name: str) -> int:
        return kstat.data.get(name, 0)

    def close(self) -> None:
        self.closed = True


class ChainFactory:
    """Hands out FakeChains and remembers them."""

    def __init__(self, **chain_kwargs) -> None:
        self.chain_kwargs = chain_kwargs
        self.opened: list[FakeChain] = []
        self.fail = False

    def __call__(self) -> FakeChain:
        if self.fail:
            raise KstatError("cannot open kstat chain")
        chain = FakeChain(**self.chain_kwargs)
        self.opened.append(chain)
        return chain
