"""
Tests for how the store surfaces failures.

Covers:
  - duplicate primary keys surface as ConstraintError with the engine cause
  - an unreachable database surfaces as StoreConnectionError
  - a summary that misses its deadline surfaces as QueryCancelledError
  - schema setup failures surface as SchemaError
"""

import asyncio

import pytest
from sqlalchemy import exc as sa_exc

from clusterops.db.migrations import run_migrations
from clusterops.db.session import make_engine
from clusterops.exceptions import (
    ConstraintError,
    QueryCancelledError,
    SchemaError,
    StoreConnectionError,
)
from clusterops.models.pydantic_models.executions import ExecutionOpenRequest
from clusterops.store import TelemetryStore

UNREACHABLE_URL = "sqlite+aiosqlite:////nonexistent-dir/clusterops.db"


async def test_duplicate_execution_id_raises_constraint_error(store):
    execution = ExecutionOpenRequest(command="kubectl apply -f app.yaml")
    await store.open_execution(execution)

    with pytest.raises(ConstraintError) as exc_info:
        await store.open_execution(execution)

    assert isinstance(exc_info.value.__cause__, sa_exc.IntegrityError)
    assert exc_info.value.operation == "open_execution"
    assert exc_info.value.entity_id == execution.id
    assert str(execution.id) in str(exc_info.value)


async def test_unreachable_database_raises_connection_error():
    store = TelemetryStore(make_engine(UNREACHABLE_URL))
    try:
        with pytest.raises(StoreConnectionError):
            await store.list_clusters()
    finally:
        await store.dispose()


async def test_summary_deadline_raises_query_cancelled(store, monkeypatch):
    async def _slow_summary(*, db):
        await asyncio.sleep(5)
        return []

    monkeypatch.setattr(
        "clusterops.core.summary_aggregator.get_summary", _slow_summary
    )

    with pytest.raises(QueryCancelledError):
        await store.get_summary(timeout=0.05)


async def test_summary_uses_store_default_deadline(test_engine, monkeypatch):
    async def _slow_summary(*, db):
        await asyncio.sleep(5)
        return []

    monkeypatch.setattr(
        "clusterops.core.summary_aggregator.get_summary", _slow_summary
    )
    store = TelemetryStore(test_engine, summary_timeout=0.05)

    with pytest.raises(QueryCancelledError):
        await store.get_summary()


async def test_create_schema_failure_raises_schema_error():
    store = TelemetryStore(make_engine(UNREACHABLE_URL))
    try:
        with pytest.raises(SchemaError):
            await store.create_schema()
    finally:
        await store.dispose()


async def test_migration_failure_raises_schema_error():
    with pytest.raises(SchemaError):
        await run_migrations(UNREACHABLE_URL)
