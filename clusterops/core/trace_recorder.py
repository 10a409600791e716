"""
Trace recorder: append-only span storage and time-ordered reads.

The recorder does not enforce trace-tree consistency. Duplicate span ids are
accepted and parent references are never resolved on write.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from clusterops.models.traces import TraceModel
from clusterops.models.pydantic_models.traces import SpanIn, SpanOut
from clusterops.utils import check_limit

logger = logging.getLogger(__name__)


async def record_trace(*, db: AsyncSession, span: SpanIn) -> SpanOut:
    obj = TraceModel(**span.model_dump())
    db.add(obj)
    await db.flush()
    await db.commit()
    logger.info(
        f"Recorded span {obj.span_id} of trace {obj.trace_id} "
        f"({obj.service_name}:{obj.operation_name}, status={obj.status})"
    )
    return SpanOut.model_validate(obj)


async def list_recent_traces(
    *, db: AsyncSession, cluster_id: UUID | None = None, limit: int
) -> list[SpanOut]:
    """Up to ``limit`` spans, newest start time first, optionally for one cluster."""
    check_limit(limit)
    query = select(TraceModel)
    if cluster_id is not None:
        query = query.where(TraceModel.cluster_id == cluster_id)
    query = query.order_by(TraceModel.start_time.desc()).limit(limit)

    result = await db.scalars(query)
    return [SpanOut.model_validate(obj) for obj in result.all()]


async def list_trace_spans(*, db: AsyncSession, trace_id: str) -> list[SpanOut]:
    """All spans sharing ``trace_id`` in start order, for rebuilding the span tree."""
    result = await db.scalars(
        select(TraceModel)
        .where(TraceModel.trace_id == trace_id)
        .order_by(TraceModel.start_time.asc())
    )
    return [SpanOut.model_validate(obj) for obj in result.all()]


async def prune_traces(*, db: AsyncSession, older_than: datetime) -> int:
    """Delete spans that started before ``older_than``. Returns the number removed."""
    result = await db.execute(
        delete(TraceModel).where(TraceModel.start_time < older_than)
    )
    await db.commit()
    count = result.rowcount or 0
    if count == 0:
        logger.info("Trace retention: no spans to delete")
    else:
        logger.info(
            f"Trace retention: deleted {count} spans started before {older_than.isoformat()}"
        )
    return count
