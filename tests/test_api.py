"""HTTP endpoint tests."""

from datetime import timedelta
from uuid import uuid4

import pytest

from tests.conftest import T0

CLUSTER_BODY = {
    "name": "prod-1",
    "environment": "production",
    "cluster_type": "gke",
    "region": "europe-west1",
    "node_count": 3,
    "node_size": "e2-standard-4",
    "status": "active",
    "cost_budget": "2500.00",
    "cost_threshold": 75,
}


async def test_health(test_client):
    resp = await test_client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}


async def test_register_and_lookup_cluster(test_client):
    resp = await test_client.post("/api/v1/clusters", json=CLUSTER_BODY)
    assert resp.status_code == 200
    created = resp.json()

    resp = await test_client.post(
        "/api/v1/clusters", json={**CLUSTER_BODY, "node_count": 6, "id": str(uuid4())}
    )
    assert resp.status_code == 200
    assert resp.json()["id"] == created["id"]
    assert resp.json()["node_count"] == 6

    resp = await test_client.get("/api/v1/clusters")
    assert resp.status_code == 200
    assert [c["name"] for c in resp.json()] == ["prod-1"]

    resp = await test_client.get("/api/v1/clusters/prod-1")
    assert resp.status_code == 200
    assert resp.json()["node_count"] == 6


async def test_get_missing_cluster_is_404(test_client):
    resp = await test_client.get("/api/v1/clusters/missing")
    assert resp.status_code == 404
    assert resp.json()["success"] is False


async def test_register_invalid_cluster_is_422(test_client):
    resp = await test_client.post(
        "/api/v1/clusters", json={**CLUSTER_BODY, "cost_threshold": 250}
    )
    assert resp.status_code == 422


async def test_record_and_list_traces(test_client):
    span = {
        "trace_id": "abc",
        "span_id": "root",
        "operation_name": "cluster create",
        "service_name": "cluster-cli",
        "start_time": T0.isoformat(),
        "end_time": (T0 + timedelta(seconds=2)).isoformat(),
        "duration_ms": 2000,
        "tags": {"env": "prod"},
    }
    resp = await test_client.post("/api/v1/traces", json=span)
    assert resp.status_code == 200

    resp = await test_client.get("/api/v1/traces?limit=5")
    assert resp.status_code == 200
    assert [s["span_id"] for s in resp.json()] == ["root"]

    resp = await test_client.get("/api/v1/traces/abc")
    assert resp.status_code == 200
    assert resp.json()["span_count"] == 1

    resp = await test_client.get("/api/v1/traces/unknown")
    assert resp.status_code == 404


@pytest.mark.parametrize(
    "query,expected_status",
    [
        ("limit=0", 422),
        ("cluster_id=not-a-uuid", 422),
        (f"cluster_id={uuid4()}", 200),
    ],
    ids=["zero-limit", "bad-uuid", "unknown-cluster"],
)
async def test_list_executions_params(test_client, query, expected_status):
    resp = await test_client.get(f"/api/v1/executions?{query}")
    assert resp.status_code == expected_status


async def test_execution_lifecycle(test_client):
    resp = await test_client.post(
        "/api/v1/executions",
        json={"command": "deploy.sh", "start_time": T0.isoformat()},
    )
    assert resp.status_code == 200
    assert resp.json()["state"] == "open"
    execution_id = resp.json()["id"]

    close_body = {
        "exit_code": 0,
        "stdout": "done",
        "end_time": (T0 + timedelta(milliseconds=2000)).isoformat(),
    }
    resp = await test_client.post(
        f"/api/v1/executions/{execution_id}/close", json=close_body
    )
    assert resp.status_code == 200
    assert resp.json()["duration_ms"] == 2000
    assert resp.json()["state"] == "closed"

    resp = await test_client.post(
        f"/api/v1/executions/{execution_id}/close", json=close_body
    )
    assert resp.status_code == 409

    resp = await test_client.get(f"/api/v1/executions/{execution_id}")
    assert resp.status_code == 200
    assert resp.json()["stdout"] == "done"


async def test_close_unknown_execution_is_404(test_client):
    resp = await test_client.post(
        f"/api/v1/executions/{uuid4()}/close",
        json={"exit_code": 1, "end_time": T0.isoformat()},
    )
    assert resp.status_code == 404
    assert resp.json()["message"] == "NotFoundError"


async def test_summary_endpoint(test_client):
    await test_client.post("/api/v1/clusters", json=CLUSTER_BODY)

    resp = await test_client.get("/api/v1/summary")
    assert resp.status_code == 200
    data = resp.json()
    assert data["count"] == 1
    assert "cluster_name" in data["columns"]
    assert data["rows"][0]["cluster_name"] == "prod-1"
