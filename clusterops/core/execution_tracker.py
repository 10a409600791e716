"""
Execution tracker: two-phase lifecycle of audited command runs.

    OPEN --close--> CLOSED

``open_execution`` is the only way to create a row. ``close_execution`` writes
the outcome and the server-derived ``duration_ms`` in one conditional UPDATE
that only matches open rows, so an execution can be closed exactly once even
when callers race.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import literal, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from clusterops.db.types import UTCDateTime, millis_between
from clusterops.exceptions import ExecutionAlreadyClosedError, NotFoundError
from clusterops.models.executions import CommandExecutionModel
from clusterops.models.pydantic_models.executions import (
    CommandExecutionOut,
    ExecutionOpenRequest,
)
from clusterops.utils import check_limit

logger = logging.getLogger(__name__)


async def open_execution(*, db: AsyncSession, execution: ExecutionOpenRequest) -> UUID:
    obj = CommandExecutionModel(**execution.model_dump())
    db.add(obj)
    await db.flush()
    await db.commit()
    logger.info(f"Opened execution {obj.id}: {obj.script_name or obj.command}")
    return obj.id


async def close_execution(
    *,
    db: AsyncSession,
    execution_id: UUID,
    exit_code: int,
    stdout: str,
    stderr: str,
    end_time: datetime,
) -> CommandExecutionOut:
    """
    Record the outcome of an open execution.

    ``duration_ms`` is computed by the database from the stored ``start_time``
    in the same statement that writes the outcome; callers cannot supply it.
    An ``end_time`` earlier than the stored start is written as given and
    yields a negative ``duration_ms``; clock skew between hosts is recorded,
    not corrected.

    Raises:
        NotFoundError: no execution has this id.
        ExecutionAlreadyClosedError: the execution was already closed; the
            first outcome is kept untouched.
    """
    stmt = (
        update(CommandExecutionModel)
        .where(
            CommandExecutionModel.id == execution_id,
            CommandExecutionModel.end_time.is_(None),
        )
        .values(
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            end_time=literal(end_time, UTCDateTime),
            duration_ms=millis_between(
                literal(end_time, UTCDateTime), CommandExecutionModel.start_time
            ),
        )
        .returning(CommandExecutionModel)
        .execution_options(synchronize_session=False)
    )
    result = await db.scalars(stmt, execution_options={"populate_existing": True})
    closed = result.first()

    if closed is None:
        await db.rollback()
        existing = await db.get(CommandExecutionModel, execution_id)
        if existing is None:
            raise NotFoundError(
                "Command execution not found",
                operation="close_execution",
                entity_id=execution_id,
            )
        raise ExecutionAlreadyClosedError(
            "Command execution is already closed",
            operation="close_execution",
            entity_id=execution_id,
        )

    await db.commit()
    logger.info(
        f"Closed execution {closed.id} with exit_code={closed.exit_code} "
        f"in {closed.duration_ms}ms"
    )
    return CommandExecutionOut.model_validate(closed)


async def get_execution(
    *, db: AsyncSession, execution_id: UUID
) -> CommandExecutionOut | None:
    obj = await db.get(CommandExecutionModel, execution_id)
    return CommandExecutionOut.model_validate(obj) if obj else None


async def list_executions(
    *, db: AsyncSession, cluster_id: UUID | None = None, limit: int
) -> list[CommandExecutionOut]:
    """Up to ``limit`` executions, newest start time first, optionally for one cluster."""
    check_limit(limit)
    query = select(CommandExecutionModel)
    if cluster_id is not None:
        query = query.where(CommandExecutionModel.cluster_id == cluster_id)
    query = query.order_by(CommandExecutionModel.start_time.desc()).limit(limit)

    result = await db.scalars(query)
    return [CommandExecutionOut.model_validate(obj) for obj in result.all()]
