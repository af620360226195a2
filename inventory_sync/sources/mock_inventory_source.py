import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from inventory_sync.logging_config import get_child_logger
from inventory_sync.models.inventory_record import InventoryRecord


class MockInventorySource:
    """
    Stand-in for the warehouse system, returning a fixed four-product snapshot.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or get_child_logger("sources.mock")

    async def fetch_current_inventory(self) -> List[InventoryRecord]:
        now = datetime.now(timezone.utc)
        self._logger.info("Fetching inventory from mock warehouse source")
        return [
            InventoryRecord(sku="PROD-001", quantity_on_hand=150, last_modified=now - timedelta(hours=2)),
            InventoryRecord(sku="PROD-002", quantity_on_hand=50, last_modified=now - timedelta(hours=1)),
            InventoryRecord(sku="PROD-003", quantity_on_hand=0, last_modified=now - timedelta(minutes=30)),
            InventoryRecord(sku="PROD-004", quantity_on_hand=2500, last_modified=now - timedelta(days=1)),
        ]
