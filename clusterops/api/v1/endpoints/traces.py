import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from clusterops.api.v1.deps import get_store
from clusterops.api.v1.helpers.responses import not_found_response
from clusterops.config import settings
from clusterops.models.pydantic_models.traces import (
    SpanIn,
    SpanOut,
    TraceSpansResponseModel,
)
from clusterops.store import TelemetryStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=SpanOut)
async def record_trace(body: SpanIn, store: TelemetryStore = Depends(get_store)):
    return await store.record_trace(body)


@router.get("", response_model=list[SpanOut])
async def list_recent_traces(
    cluster_id: UUID | None = Query(None, description="Only spans of this cluster"),
    limit: int = Query(settings.default_list_limit, ge=1, le=settings.max_list_limit),
    store: TelemetryStore = Depends(get_store),
):
    """Most recent spans first, across all clusters unless cluster_id is given."""
    return await store.list_recent_traces(cluster_id=cluster_id, limit=limit)


@router.get("/{trace_id}", response_model=TraceSpansResponseModel)
async def get_trace(trace_id: str, store: TelemetryStore = Depends(get_store)):
    """All spans of one trace, oldest first."""
    spans = await store.list_trace_spans(trace_id)
    if not spans:
        return not_found_response(f"Trace with ID {trace_id} not found.")
    logger.info(f"Retrieved trace {trace_id} with {len(spans)} spans")
    return TraceSpansResponseModel(trace_id=trace_id, spans=spans, span_count=len(spans))
