"""Tests for cluster registration, lookup and listing."""

import asyncio
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from clusterops.core import cluster_registry
from clusterops.models.pydantic_models.clusters import ClusterIn


async def test_register_new_cluster_keeps_caller_id(store):
    cluster = ClusterIn(
        name="staging-1",
        environment="staging",
        cluster_type="eks",
        node_count=2,
        node_size="m5.large",
        status="provisioning",
        cost_budget=Decimal("1500.00"),
        cost_threshold=80,
    )

    stored = await store.register_cluster(cluster)

    assert stored.id == cluster.id
    assert stored.name == "staging-1"
    assert stored.cost_budget == Decimal("1500.00")
    assert stored.cost_threshold == 80
    assert stored.created_at is not None
    assert stored.updated_at is not None


async def test_reregister_updates_in_place(store, cluster_factory):
    first = await cluster_factory("prod-1", node_count=3, status="provisioning")
    second = await cluster_factory(
        "prod-1", node_count=5, status="active", zone="2", region="northeurope"
    )

    clusters = await store.list_clusters()
    assert len(clusters) == 1

    stored = clusters[0]
    assert stored.id == first.id
    assert stored.created_at == first.created_at
    assert stored.node_count == 5
    assert stored.status == "active"
    assert stored.zone == "2"
    assert stored.region == "northeurope"
    assert second.id == first.id
    assert stored.updated_at >= first.updated_at


async def test_reregister_can_clear_optional_fields(cluster_factory, store):
    await cluster_factory("dev-1", region="eastus", cost_budget=Decimal("10"))
    await cluster_factory("dev-1", region=None, cost_budget=None)

    stored = await store.find_cluster_by_name("dev-1")
    assert stored.region is None
    assert stored.cost_budget is None


async def test_concurrent_registration_yields_single_row(store, cluster_factory):
    results = await asyncio.gather(
        *(cluster_factory("race-1", node_count=n) for n in range(1, 6))
    )

    clusters = await store.list_clusters()
    assert len(clusters) == 1
    assert {r.id for r in results} == {clusters[0].id}
    assert clusters[0].node_count in range(1, 6)


async def test_list_clusters_newest_first(store, cluster_factory):
    for name in ("a", "b", "c"):
        await cluster_factory(name)

    clusters = await store.list_clusters()
    assert [c.name for c in clusters] == ["c", "b", "a"]


async def test_list_clusters_empty_is_success(store):
    assert await store.list_clusters() == []


async def test_find_cluster_by_name(store, cluster_factory):
    created = await cluster_factory("prod-1")

    found = await store.find_cluster_by_name("prod-1")
    assert found is not None
    assert found.id == created.id


async def test_find_missing_cluster_returns_none(store):
    assert await store.find_cluster_by_name("missing") is None


async def test_get_cluster_resolves_and_tolerates_dangling_ids(store, cluster_factory):
    created = await cluster_factory("prod-1")

    assert (await store.get_cluster(created.id)).name == "prod-1"
    assert await store.get_cluster(uuid4()) is None


async def test_registry_functions_accept_explicit_session(db_session):
    cluster = ClusterIn(
        name="direct",
        environment="local",
        cluster_type="local",
        node_size="kind",
        status="active",
    )

    await cluster_registry.register_cluster(db=db_session, cluster=cluster)
    found = await cluster_registry.find_cluster_by_name(db=db_session, name="direct")

    assert found.id == cluster.id
    assert found.node_count == 1


@pytest.mark.parametrize(
    "overrides",
    [
        {"cost_threshold": 150},
        {"node_count": -1},
        {"name": ""},
    ],
    ids=["threshold-over-100", "negative-nodes", "empty-name"],
)
def test_cluster_input_validation(overrides):
    fields = {
        "name": "x",
        "environment": "local",
        "cluster_type": "local",
        "node_size": "kind",
        "status": "active",
    }
    fields.update(overrides)
    with pytest.raises(ValidationError):
        ClusterIn(**fields)
