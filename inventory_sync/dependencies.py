from functools import lru_cache

from inventory_sync.config import load_dataverse_config, use_mock_connector
from inventory_sync.connectors.dataverse_connector import DataverseUpsertConnector
from inventory_sync.connectors.mock_connector import MockUpsertConnector
from inventory_sync.logging_config import get_child_logger
from inventory_sync.services.sync_orchestrator import SyncOrchestrator
from inventory_sync.sources.mock_inventory_source import MockInventorySource

logger = get_child_logger("dependencies")


@lru_cache(maxsize=1)
def get_orchestrator() -> SyncOrchestrator:
    """
    Build the process-wide orchestrator from environment settings.

    Raises ConfigurationError when the Dataverse connector is selected and its
    settings are incomplete; the failure is not cached, so a fixed environment
    is picked up on the next request.
    """
    if use_mock_connector():
        logger.info("Using mock upsert connector")
        connector = MockUpsertConnector()
    else:
        connector = DataverseUpsertConnector(load_dataverse_config())

    return SyncOrchestrator(inventory_source=MockInventorySource(), connector=connector)
