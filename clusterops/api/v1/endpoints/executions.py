import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from clusterops.api.v1.deps import get_store
from clusterops.api.v1.helpers.responses import not_found_response
from clusterops.config import settings
from clusterops.models.pydantic_models.executions import (
    CommandExecutionOut,
    ExecutionCloseRequest,
    ExecutionOpenedResponse,
    ExecutionOpenRequest,
)
from clusterops.store import TelemetryStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=ExecutionOpenedResponse)
async def open_execution(
    body: ExecutionOpenRequest, store: TelemetryStore = Depends(get_store)
):
    execution_id = await store.open_execution(body)
    return ExecutionOpenedResponse(id=execution_id)


@router.post("/{execution_id}/close", response_model=CommandExecutionOut)
async def close_execution(
    execution_id: UUID,
    body: ExecutionCloseRequest,
    store: TelemetryStore = Depends(get_store),
):
    """
    Record the outcome of an open execution. duration_ms is derived by the
    store from the recorded start time. Closing twice returns 409.
    """
    return await store.close_execution(
        execution_id,
        exit_code=body.exit_code,
        stdout=body.stdout,
        stderr=body.stderr,
        end_time=body.end_time,
    )


@router.get("", response_model=list[CommandExecutionOut])
async def list_executions(
    cluster_id: UUID | None = Query(None, description="Only executions of this cluster"),
    limit: int = Query(settings.default_list_limit, ge=1, le=settings.max_list_limit),
    store: TelemetryStore = Depends(get_store),
):
    return await store.list_executions(cluster_id=cluster_id, limit=limit)


@router.get("/{execution_id}", response_model=CommandExecutionOut)
async def get_execution(execution_id: UUID, store: TelemetryStore = Depends(get_store)):
    execution = await store.get_execution(execution_id)
    if execution is None:
        return not_found_response(f"Execution {execution_id} not found")
    return execution
