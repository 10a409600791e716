"""
Shared test fixtures for clusterops.

Runs against Postgres when TEST_DATABASE_URL is set (e.g. the docker-compose
service), otherwise against a per-test SQLite file through aiosqlite. Tables
and the summary view are dropped and recreated for every test.
"""

import os
from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")

from clusterops.db.base import Base  # noqa: E402
from clusterops.db.session import make_engine, make_session_factory  # noqa: E402
from clusterops.main import app  # noqa: E402
from clusterops.models.pydantic_models.clusters import ClusterIn  # noqa: E402
from clusterops.models.pydantic_models.executions import ExecutionOpenRequest  # noqa: E402
from clusterops.models.pydantic_models.traces import SpanIn  # noqa: E402
from clusterops.store import TelemetryStore  # noqa: E402

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL")

T0 = datetime(2026, 10, 1, 12, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """Fresh tables per test: drop → create → yield engine → drop."""
    url = TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'clusterops_test.db'}"
    engine = make_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine):
    factory = make_session_factory(test_engine)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def store(test_engine):
    return TelemetryStore(test_engine)


# ---------------------------------------------------------------------------
# Test client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(scope="function")
async def test_client(store):
    app.state.store = store

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client

    del app.state.store


# ---------------------------------------------------------------------------
# Factory fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(scope="function")
async def cluster_factory(store):
    async def _create(name: str = "prod-1", **overrides):
        fields = {
            "name": name,
            "environment": "production",
            "cluster_type": "aks",
            "region": "westeurope",
            "node_count": 3,
            "node_size": "Standard_D4s_v3",
            "status": "active",
        }
        fields.update(overrides)
        return await store.register_cluster(ClusterIn(**fields))

    return _create


@pytest_asyncio.fixture(scope="function")
async def span_factory(store):
    async def _create(
        trace_id: str = "trace-1",
        span_id: str = "span-1",
        cluster_id: UUID | None = None,
        start_time: datetime = T0,
        **overrides,
    ):
        fields = {
            "trace_id": trace_id,
            "span_id": span_id,
            "cluster_id": cluster_id,
            "operation_name": "helm upgrade",
            "service_name": "cluster-cli",
            "start_time": start_time,
            "end_time": start_time + timedelta(milliseconds=250),
            "duration_ms": 250,
        }
        fields.update(overrides)
        return await store.record_trace(SpanIn(**fields))

    return _create


@pytest_asyncio.fixture(scope="function")
async def execution_factory(store):
    async def _create(
        command: str = "kubectl get pods",
        cluster_id: UUID | None = None,
        start_time: datetime = T0,
        **overrides,
    ) -> UUID:
        fields = {
            "command": command,
            "cluster_id": cluster_id,
            "start_time": start_time,
        }
        fields.update(overrides)
        return await store.open_execution(ExecutionOpenRequest(**fields))

    return _create
