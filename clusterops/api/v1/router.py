"""
API router assembly.
"""

from fastapi import APIRouter

from clusterops.api.v1.endpoints import clusters, executions, summary, traces

api_router = APIRouter()
api_router.include_router(clusters.router, prefix="/clusters", tags=["clusters"])
api_router.include_router(traces.router, prefix="/traces", tags=["traces"])
api_router.include_router(
    executions.router, prefix="/executions", tags=["executions"]
)
api_router.include_router(summary.router, prefix="/summary", tags=["summary"])
