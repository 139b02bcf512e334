"""procinv - process and service inventory for Unix-like hosts."""

from procinv.engine import InventoryEngine, InventorySnapshot
from procinv.models import ProcessRecord, ProcessState, ServiceRecord, ServiceState

__all__ = [
    "InventoryEngine",
    "InventorySnapshot",
    "ProcessRecord",
    "ProcessState",
    "ServiceRecord",
    "ServiceState",
]
