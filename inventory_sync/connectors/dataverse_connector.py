import json
import logging
from typing import Any, Callable, Dict, Optional, Sequence
from urllib.parse import quote

import httpx
from azure.core.credentials_async import AsyncTokenCredential
from azure.core.exceptions import ClientAuthenticationError
from azure.identity.aio import ClientSecretCredential

from inventory_sync.config import DataverseConfig
from inventory_sync.exceptions import (
    ApplicationError,
    AuthenticationError,
    ConfigurationError,
    PayloadSerializationError,
    RemoteRejectionError,
    RemoteTransportError,
    UnexpectedSyncError,
)
from inventory_sync.logging_config import get_child_logger, tracer
from inventory_sync.models.inventory_record import InventoryRecord

ODATA_VERSION = "4.0"

CredentialFactory = Callable[[DataverseConfig], AsyncTokenCredential]


def default_credential_factory(config: DataverseConfig) -> AsyncTokenCredential:
    """Client-credentials flow against Microsoft Entra ID for the configured app registration."""
    return ClientSecretCredential(
        tenant_id=config.tenant_id,
        client_id=config.client_id,
        client_secret=config.client_secret,
        authority=config.authority_host,
    )


def build_record_path(config: DataverseConfig, sku: str) -> str:
    """
    Address a record by its alternate key, relative to the API base URL.

    Example: cr62d_productinventories(cr62d_sku='PROD-001')

    Single quotes inside the key are doubled, as OData string literals require.
    """
    literal = sku.replace("'", "''")
    return f"{config.entity_set_name}({config.key_field_name}='{quote(literal, safe='')}')"


def build_upsert_payload(config: DataverseConfig, record: InventoryRecord) -> Dict[str, Any]:
    """Only the mutable columns; the key travels in the URL."""
    return {
        config.quantity_field_name: record.quantity_on_hand,
        config.last_modified_field_name: record.last_modified.isoformat(),
    }


class DataverseUpsertConnector:
    """
    Pushes inventory records to a Dataverse table through the Web API.

    Each batch acquires its own bearer token, then PATCHes records one at a time
    against the table's alternate key, which creates missing rows and updates
    existing ones. The batch stops at the first failed record. Records sent
    before the failure stay applied.
    """

    def __init__(
        self,
        config: DataverseConfig,
        *,
        credential_factory: Optional[CredentialFactory] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ):
        missing = config.missing_settings()
        if missing:
            raise ConfigurationError(
                f"Dataverse configuration is missing required values: {', '.join(missing)}",
                missing_settings=missing,
            )

        self._config = config
        self._credential_factory = credential_factory or default_credential_factory
        self._transport = transport
        self._logger = logger or get_child_logger("connectors.dataverse")

    async def push_batch(self, records: Sequence[InventoryRecord]) -> bool:
        """
        Upsert every record in order, stopping at the first failure.

        Args:
            records: Snapshot records, sent in the given order

        Returns:
            True if every record was applied, False otherwise
        """
        with tracer.start_as_current_span("dataverse_push_batch") as span:
            batch_size = len(records)
            span.set_attribute("sync.batch_size", batch_size)

            if not records:
                self._logger.info("Empty batch, nothing to send to Dataverse")
                return True

            try:
                access_token = await self._acquire_token()
            except AuthenticationError as e:
                span.set_attribute("error", True)
                span.set_attribute("error.type", e.kind.value)
                self._logger.error(
                    f"Aborting batch, no records sent: {e}",
                    extra={"error_kind": e.kind.value, "batch_size": batch_size},
                    exc_info=e.original_exception,
                )
                return False

            self._logger.info(
                f"Sending batch of {batch_size} records to Dataverse",
                extra={"batch_size": batch_size, "entity_set": self._config.entity_set_name},
            )

            async with self._build_client(access_token) as client:
                for index, record in enumerate(records):
                    try:
                        await self._upsert_record(client, record)
                    except ApplicationError as e:
                        span.set_attribute("error", True)
                        span.set_attribute("error.type", e.kind.value)
                        span.set_attribute("sync.records_applied", index)
                        self._log_record_failure(e, record, index, batch_size)
                        return False

            span.set_attribute("sync.records_applied", batch_size)
            self._logger.info(
                f"Batch of {batch_size} records applied to Dataverse",
                extra={"batch_size": batch_size},
            )
            return True

    async def _acquire_token(self) -> str:
        with tracer.start_as_current_span("dataverse_acquire_token") as span:
            span.set_attribute("auth.scope", self._config.scope)
            try:
                # New credential per batch so no token outlives the call
                credential = self._credential_factory(self._config)
                async with credential:
                    token = await credential.get_token(self._config.scope)
            except ClientAuthenticationError as e:
                raise AuthenticationError(
                    f"Identity provider rejected the token request: {e.message}",
                    original_exception=e,
                ) from e
            except Exception as e:
                raise AuthenticationError(
                    f"Failed to acquire Dataverse authentication token: {e}",
                    original_exception=e,
                ) from e

            if token is None or not token.token:
                raise AuthenticationError(
                    "Failed to acquire Dataverse authentication token (token was empty)."
                )
            return token.token

    def _build_client(self, access_token: str) -> httpx.AsyncClient:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
            "OData-MaxVersion": ODATA_VERSION,
            "OData-Version": ODATA_VERSION,
            "Prefer": "return=representation",
        }
        return httpx.AsyncClient(
            base_url=self._config.api_url,
            headers=headers,
            timeout=self._config.request_timeout_seconds,
            transport=self._transport,
        )

    async def _upsert_record(self, client: httpx.AsyncClient, record: InventoryRecord) -> None:
        with tracer.start_as_current_span("dataverse_upsert_record") as span:
            span.set_attribute("sync.sku", record.sku)
            path = build_record_path(self._config, record.sku)

            try:
                body = json.dumps(build_upsert_payload(self._config, record))
            except (TypeError, ValueError) as e:
                raise PayloadSerializationError(
                    f"Could not encode upsert payload for SKU {record.sku}: {e}",
                    original_exception=e,
                ) from e

            try:
                response = await client.patch(
                    path, content=body, headers={"Content-Type": "application/json"}
                )
            except httpx.TransportError as e:
                raise RemoteTransportError(
                    f"HTTP request failed for SKU {record.sku}: {e}",
                    original_exception=e,
                ) from e
            except Exception as e:
                raise UnexpectedSyncError(
                    f"An unexpected error occurred processing SKU {record.sku}: {e}",
                    original_exception=e,
                ) from e

            span.set_attribute("http.status_code", response.status_code)
            if not response.is_success:
                raise RemoteRejectionError(
                    f"Failed to upsert SKU {record.sku}. Status: {response.status_code}",
                    sku=record.sku,
                    status_code=response.status_code,
                    response_body=response.text,
                )

            self._logger.info(
                f"Upserted SKU {record.sku}",
                extra={"sku": record.sku, "status_code": response.status_code},
            )

    def _log_record_failure(self, error: ApplicationError, record: InventoryRecord, index: int, batch_size: int):
        extra = {
            "error_kind": error.kind.value,
            "sku": record.sku,
            "record_index": index,
            "records_applied": index,
            "batch_size": batch_size,
        }
        if isinstance(error, RemoteRejectionError):
            extra["status_code"] = error.status_code
            extra["response_body"] = error.response_body
            self._logger.error(f"{error}. Reason: {error.response_body}", extra=extra)
        else:
            self._logger.error(str(error), extra=extra, exc_info=error.original_exception)
        self._logger.warning(
            f"Stopped batch at record {index + 1} of {batch_size}; {index} records were already applied",
            extra=extra,
        )
