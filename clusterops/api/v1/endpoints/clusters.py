import logging

from fastapi import APIRouter, Depends

from clusterops.api.v1.deps import get_store
from clusterops.api.v1.helpers.responses import not_found_response
from clusterops.models.pydantic_models.clusters import ClusterIn, ClusterOut
from clusterops.store import TelemetryStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=ClusterOut)
async def register_cluster(
    body: ClusterIn,
    store: TelemetryStore = Depends(get_store),
):
    """
    Register a cluster, or update the existing cluster with the same name.
    The identifier and creation time of an existing cluster never change.
    """
    return await store.register_cluster(body)


@router.get("", response_model=list[ClusterOut])
async def list_clusters(store: TelemetryStore = Depends(get_store)):
    return await store.list_clusters()


@router.get("/{name}", response_model=ClusterOut)
async def get_cluster_by_name(name: str, store: TelemetryStore = Depends(get_store)):
    cluster = await store.find_cluster_by_name(name)
    if cluster is None:
        return not_found_response(f"Cluster {name} not found")
    return cluster
