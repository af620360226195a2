from typing import Optional, Protocol, Sequence, runtime_checkable

from inventory_sync.models.inventory_record import InventoryRecord


@runtime_checkable
class InventorySource(Protocol):
    """
    Supplies the current inventory snapshot from the source system.

    Implementations may raise or return None when no usable snapshot is
    available, but must never silently drop records.
    """

    async def fetch_current_inventory(self) -> Optional[Sequence[InventoryRecord]]:
        ...


@runtime_checkable
class RemoteUpsertConnector(Protocol):
    """
    Applies a batch of inventory records to the remote platform.

    Returns True only if every record was applied. Records are sent in order
    and the batch stops at the first failure.
    """

    async def push_batch(self, records: Sequence[InventoryRecord]) -> bool:
        ...
