import collections.abc
import logging
from typing import Optional, Sequence

from inventory_sync.exceptions import ErrorKind, FetchError
from inventory_sync.interfaces import InventorySource, RemoteUpsertConnector
from inventory_sync.logging_config import get_child_logger, tracer
from inventory_sync.models.inventory_record import InventoryRecord
from inventory_sync.models.sync_outcome import SyncOutcome

FETCH_FAILED_MESSAGE = "Failed to fetch the current inventory from the source system."
REMOTE_FAILED_MESSAGE = "Failed to update records in the remote platform. See logs for details."
UNEXPECTED_MESSAGE = "An unexpected error occurred during synchronization."


class SyncOrchestrator:
    """
    Runs a full inventory synchronization: fetch the snapshot, skip the push when
    there is nothing to send, otherwise push the whole batch to the remote platform.

    ``run_full_sync`` never raises; every failure becomes a failed SyncOutcome.
    """

    def __init__(
        self,
        inventory_source: InventorySource,
        connector: RemoteUpsertConnector,
        logger: Optional[logging.Logger] = None,
    ):
        self._inventory_source = inventory_source
        self._connector = connector
        self._logger = logger or get_child_logger("services.orchestrator")

    async def run_full_sync(self) -> SyncOutcome:
        with tracer.start_as_current_span("run_full_sync") as span:
            self._logger.info("Starting full inventory synchronization")
            try:
                outcome = await self._run(span)
            except Exception as e:
                span.set_attribute("error", True)
                span.set_attribute("error.type", type(e).__name__)
                self._logger.error(
                    f"An unexpected error occurred during synchronization: {e}",
                    extra={"error_kind": ErrorKind.UNEXPECTED.value, "error_type": type(e).__name__},
                    exc_info=True,
                )
                outcome = SyncOutcome.failure(UNEXPECTED_MESSAGE)

            span.set_attribute("sync.successful", outcome.successful)
            span.set_attribute("sync.items_processed", outcome.items_processed)
            return outcome

    async def _run(self, span) -> SyncOutcome:
        try:
            records = await self._fetch_snapshot()
        except FetchError as e:
            span.set_attribute("error", True)
            span.set_attribute("error.type", e.kind.value)
            self._logger.error(
                f"Synchronization aborted, no records pushed: {e}",
                extra={"error_kind": e.kind.value},
                exc_info=e.original_exception,
            )
            return SyncOutcome.failure(FETCH_FAILED_MESSAGE)

        span.set_attribute("sync.snapshot_size", len(records))
        if not records:
            self._logger.info("Source returned an empty snapshot, skipping push")
            return SyncOutcome.success(0)

        self._logger.info(
            f"Fetched {len(records)} items from external source",
            extra={"snapshot_size": len(records)},
        )

        pushed = await self._connector.push_batch(records)
        if not pushed:
            span.set_attribute("error", True)
            span.set_attribute("error.type", ErrorKind.REMOTE_REJECTION.value)
            self._logger.error(
                "Remote platform did not accept the full batch",
                extra={"snapshot_size": len(records)},
            )
            return SyncOutcome.failure(REMOTE_FAILED_MESSAGE)

        self._logger.info(
            "Synchronization completed successfully",
            extra={"items_processed": len(records)},
        )
        return SyncOutcome.success(len(records))

    async def _fetch_snapshot(self) -> Sequence[InventoryRecord]:
        try:
            snapshot = await self._inventory_source.fetch_current_inventory()
        except Exception as e:
            raise FetchError(
                f"Inventory source raised {type(e).__name__}: {e}",
                original_exception=e,
            ) from e

        if snapshot is None:
            raise FetchError("Inventory source returned no snapshot.")
        if not isinstance(snapshot, collections.abc.Sequence):
            # One-shot iterables are materialized so the count and the push see the same records
            try:
                snapshot = list(snapshot)
            except TypeError as e:
                raise FetchError(
                    f"Inventory source returned an unusable snapshot of type {type(snapshot).__name__}.",
                    original_exception=e,
                ) from e
        return snapshot
