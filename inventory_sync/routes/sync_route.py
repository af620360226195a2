import asyncio

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from inventory_sync.dependencies import get_orchestrator
from inventory_sync.logging_config import get_child_logger, tracer
from inventory_sync.models.sync_outcome import SyncOutcome
from inventory_sync.services.sync_orchestrator import SyncOrchestrator

logger = get_child_logger("routes.sync")

router = APIRouter(prefix="/sync", tags=["sync"])

# Runs against the same remote table must not interleave within a worker
_sync_lock = asyncio.Lock()


def outcome_response(outcome: SyncOutcome) -> JSONResponse:
    status_code = (
        status.HTTP_200_OK if outcome.successful else status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    return JSONResponse(status_code=status_code, content=outcome.model_dump(by_alias=True))


@router.post(
    "/trigger",
    response_model=SyncOutcome,
    responses={500: {"model": SyncOutcome, "description": "Synchronization failed"}},
)
async def trigger_sync(orchestrator: SyncOrchestrator = Depends(get_orchestrator)):
    """Trigger a full synchronization of product inventory to the remote platform."""
    with tracer.start_as_current_span("api_trigger_sync") as span:
        span.set_attribute("sync.waiting_for_lock", _sync_lock.locked())
        if _sync_lock.locked():
            logger.info("Another synchronization is running, waiting for it to finish")

        async with _sync_lock:
            outcome = await orchestrator.run_full_sync()

        span.set_attribute("sync.successful", outcome.successful)
        span.set_attribute("sync.items_processed", outcome.items_processed)
        logger.info(
            "Synchronization request finished",
            extra={
                "successful": outcome.successful,
                "items_processed": outcome.items_processed,
            },
        )
        return outcome_response(outcome)
