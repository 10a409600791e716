"""
TelemetryStore - the handle orchestration code uses to reach the core.

One instance owns one connection pool. Nothing here is process-global: the
HTTP app keeps its store on ``app.state`` and tests build their own against a
throwaway database. Every public method is an independent unit of work on its
own pooled session; the only synchronisation is the database's own atomicity.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncEngine

import clusterops.models  # noqa: F401  register models and view DDL with metadata
from clusterops.config import Settings
from clusterops.core import (
    cluster_registry,
    execution_tracker,
    summary_aggregator,
    trace_recorder,
)
from clusterops.db.base import Base
from clusterops.db.session import make_engine, make_session_factory
from clusterops.exceptions import (
    ConstraintError,
    QueryCancelledError,
    SchemaError,
    StoreConnectionError,
    TelemetryStoreError,
)
from clusterops.models.pydantic_models.clusters import ClusterIn, ClusterOut
from clusterops.models.pydantic_models.executions import (
    CommandExecutionOut,
    ExecutionOpenRequest,
)
from clusterops.models.pydantic_models.summary import SummaryRow
from clusterops.models.pydantic_models.traces import SpanIn, SpanOut

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50


class TelemetryStore:
    def __init__(self, engine: AsyncEngine, *, summary_timeout: float | None = None):
        self.engine = engine
        self.summary_timeout = summary_timeout
        self._session_factory = make_session_factory(engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TelemetryStore":
        engine = make_engine(
            settings.database_url,
            echo=settings.debug,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_recycle=settings.db_pool_recycle,
        )
        return cls(engine, summary_timeout=settings.summary_timeout_seconds)

    async def create_schema(self) -> None:
        """Create tables and the summary view straight from model metadata."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except sa_exc.SQLAlchemyError as e:
            logger.error(f"Schema creation failed: {e}", exc_info=True)
            raise SchemaError("Failed to create schema", operation="create_schema") from e
        logger.info("Database schema created")

    async def dispose(self) -> None:
        await self.engine.dispose()

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _unit_of_work(self, operation: str, entity_id: Any = None):
        """Yield a fresh session and translate engine failures into store errors."""
        async with self._session_factory() as session:
            try:
                yield session
            except TelemetryStoreError:
                raise
            except sa_exc.TimeoutError as e:
                logger.error(f"{operation} could not get a connection: {e}")
                raise StoreConnectionError(
                    "Connection pool exhausted", operation=operation, entity_id=entity_id
                ) from e
            except (sa_exc.IntegrityError, sa_exc.DataError) as e:
                logger.error(f"{operation} violated a constraint: {e}", exc_info=True)
                raise ConstraintError(
                    "Constraint violation", operation=operation, entity_id=entity_id
                ) from e
            except (sa_exc.OperationalError, sa_exc.InterfaceError) as e:
                logger.error(f"{operation} lost the database: {e}", exc_info=True)
                raise StoreConnectionError(
                    "Database unavailable", operation=operation, entity_id=entity_id
                ) from e
            except sa_exc.DBAPIError as e:
                if not e.connection_invalidated:
                    raise
                logger.error(f"{operation} lost its connection: {e}", exc_info=True)
                raise StoreConnectionError(
                    "Connection invalidated", operation=operation, entity_id=entity_id
                ) from e

    async def _run(
        self,
        operation: str,
        func,
        *,
        entity_id: Any = None,
        timeout: float | None = None,
        **kwargs,
    ):
        async with self._unit_of_work(operation, entity_id) as db:
            if timeout is None:
                return await func(db=db, **kwargs)
            try:
                return await asyncio.wait_for(func(db=db, **kwargs), timeout)
            except asyncio.TimeoutError as e:
                logger.warning(f"{operation} cancelled after {timeout}s deadline")
                raise QueryCancelledError(
                    f"Deadline of {timeout}s exceeded",
                    operation=operation,
                    entity_id=entity_id,
                ) from e

    # ------------------------------------------------------------------
    # Cluster registry
    # ------------------------------------------------------------------

    async def register_cluster(self, cluster: ClusterIn) -> ClusterOut:
        return await self._run(
            "register_cluster",
            cluster_registry.register_cluster,
            entity_id=cluster.name,
            cluster=cluster,
        )

    async def list_clusters(self) -> list[ClusterOut]:
        return await self._run("list_clusters", cluster_registry.list_clusters)

    async def find_cluster_by_name(self, name: str) -> ClusterOut | None:
        return await self._run(
            "find_cluster_by_name",
            cluster_registry.find_cluster_by_name,
            entity_id=name,
            name=name,
        )

    async def get_cluster(self, cluster_id: UUID) -> ClusterOut | None:
        return await self._run(
            "get_cluster",
            cluster_registry.get_cluster,
            entity_id=cluster_id,
            cluster_id=cluster_id,
        )

    # ------------------------------------------------------------------
    # Trace recorder
    # ------------------------------------------------------------------

    async def record_trace(self, span: SpanIn) -> SpanOut:
        return await self._run(
            "record_trace",
            trace_recorder.record_trace,
            entity_id=f"{span.trace_id}/{span.span_id}",
            span=span,
        )

    async def list_recent_traces(
        self, cluster_id: UUID | None = None, limit: int = DEFAULT_LIMIT
    ) -> list[SpanOut]:
        return await self._run(
            "list_recent_traces",
            trace_recorder.list_recent_traces,
            entity_id=cluster_id,
            cluster_id=cluster_id,
            limit=limit,
        )

    async def list_trace_spans(self, trace_id: str) -> list[SpanOut]:
        return await self._run(
            "list_trace_spans",
            trace_recorder.list_trace_spans,
            entity_id=trace_id,
            trace_id=trace_id,
        )

    async def prune_traces(self, older_than: datetime) -> int:
        return await self._run(
            "prune_traces", trace_recorder.prune_traces, older_than=older_than
        )

    # ------------------------------------------------------------------
    # Execution tracker
    # ------------------------------------------------------------------

    async def open_execution(self, execution: ExecutionOpenRequest) -> UUID:
        return await self._run(
            "open_execution",
            execution_tracker.open_execution,
            entity_id=execution.id,
            execution=execution,
        )

    async def close_execution(
        self,
        execution_id: UUID,
        exit_code: int,
        stdout: str,
        stderr: str,
        end_time: datetime,
    ) -> CommandExecutionOut:
        return await self._run(
            "close_execution",
            execution_tracker.close_execution,
            entity_id=execution_id,
            execution_id=execution_id,
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            end_time=end_time,
        )

    async def get_execution(self, execution_id: UUID) -> CommandExecutionOut | None:
        return await self._run(
            "get_execution",
            execution_tracker.get_execution,
            entity_id=execution_id,
            execution_id=execution_id,
        )

    async def list_executions(
        self, cluster_id: UUID | None = None, limit: int = DEFAULT_LIMIT
    ) -> list[CommandExecutionOut]:
        return await self._run(
            "list_executions",
            execution_tracker.list_executions,
            entity_id=cluster_id,
            cluster_id=cluster_id,
            limit=limit,
        )

    # ------------------------------------------------------------------
    # Summary aggregator
    # ------------------------------------------------------------------

    async def get_summary(self, timeout: float | None = None) -> list[SummaryRow]:
        return await self._run(
            "get_summary",
            summary_aggregator.get_summary,
            timeout=timeout if timeout is not None else self.summary_timeout,
        )
