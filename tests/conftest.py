"""
Shared fixtures for the inventory sync tests.
"""
import time
from datetime import datetime, timezone

import pytest
from azure.core.credentials import AccessToken

from inventory_sync.config import DataverseConfig
from inventory_sync.models.inventory_record import InventoryRecord


class FakeCredential:
    """Async token credential double that records what it was asked for."""

    def __init__(self, token: str = "test-token", error: Exception = None):
        self.token = token
        self.error = error
        self.requested_scopes = []
        self.closed = False

    async def get_token(self, *scopes, **kwargs):
        self.requested_scopes.append(scopes)
        if self.error is not None:
            raise self.error
        return AccessToken(self.token, int(time.time()) + 3600)

    async def close(self):
        self.closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()


class CredentialFactory:
    """Hands out a new FakeCredential per call, like the real factory does."""

    def __init__(self, token: str = "test-token", error: Exception = None):
        self.token = token
        self.error = error
        self.created = []

    def __call__(self, config):
        credential = FakeCredential(token=self.token, error=self.error)
        self.created.append(credential)
        return credential


@pytest.fixture
def dataverse_config() -> DataverseConfig:
    return DataverseConfig(
        environment_url="https://contoso.crm.dynamics.com/",
        client_id="00000000-0000-0000-0000-000000000001",
        client_secret="s3cr3t",
        tenant_id="00000000-0000-0000-0000-000000000002",
    )


@pytest.fixture
def credential_factory() -> CredentialFactory:
    return CredentialFactory()


@pytest.fixture
def sample_records():
    modified = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    return [
        InventoryRecord(sku="SKU001", quantity_on_hand=10, last_modified=modified),
        InventoryRecord(sku="SKU002", quantity_on_hand=25, last_modified=modified),
    ]
