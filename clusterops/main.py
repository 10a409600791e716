"""
clusterops HTTP entry point.

Exposes the telemetry store over a small JSON API for dashboards, the CLI
and script tracers. On startup the schema is migrated to head and a
TelemetryStore is built from settings and kept on ``app.state``.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from clusterops.config import settings
from clusterops.api.v1.router import api_router
from clusterops.api.v1.helpers.responses import install_error_handlers
from clusterops.db.migrations import run_migrations
from clusterops.store import TelemetryStore
from logging import getLogger, Filter
import logging

logger = getLogger(__name__)
logging.getLogger("clusterops").setLevel(settings.log_level)


class HealthCheckFilter(Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.getMessage().find("/health") == -1


logging.getLogger("uvicorn.access").addFilter(HealthCheckFilter())


app = FastAPI(title=settings.app_name, debug=settings.debug, redirect_slashes=False)


@app.on_event("startup")
async def startup_event():
    logger.info("--- Starting clusterops startup ---")

    # SchemaError propagates: a half-migrated store must not serve traffic
    if settings.run_migrations_on_startup:
        await run_migrations(settings.database_url)

    app.state.store = TelemetryStore.from_settings(settings)
    logger.info("--- clusterops startup completed ---")


@app.on_event("shutdown")
async def shutdown_event():
    try:
        logger.info("--- Server shutting down! ---")
        if hasattr(app.state, "store"):
            await app.state.store.dispose()
        logger.info("--- Database connections closed. ---")
    except Exception as e:
        logger.error(f"Warning: Error during shutdown: {e}")


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)
app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
def health_check():
    return {"status": "healthy"}
