from fastapi import Request

from clusterops.store import TelemetryStore


def get_store(request: Request) -> TelemetryStore:
    """The TelemetryStore built at startup - the main FastAPI dependency."""
    return request.app.state.store
