import logging
from typing import Optional, Sequence

from inventory_sync.logging_config import get_child_logger
from inventory_sync.models.inventory_record import InventoryRecord


class MockUpsertConnector:
    """
    Connector for local runs: logs each record it would send and reports success.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or get_child_logger("connectors.mock")

    async def push_batch(self, records: Sequence[InventoryRecord]) -> bool:
        self._logger.info(
            f"Sending batch of {len(records)} records to mock remote platform",
            extra={"batch_size": len(records)},
        )
        for record in records:
            self._logger.info(
                f"Upserting SKU {record.sku}, new quantity {record.quantity_on_hand}",
                extra={"sku": record.sku, "quantity_on_hand": record.quantity_on_hand},
            )
        return True
