"""Alembic schema upgrades, run at startup before the pool takes traffic."""

import asyncio
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config

from clusterops.exceptions import SchemaError

logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"


def _upgrade_to_head(database_url: str) -> None:
    alembic_cfg = Config(str(ALEMBIC_INI))
    alembic_cfg.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(alembic_cfg, "head")


async def run_migrations(database_url: str) -> None:
    """Upgrade the schema to head. Any failure is fatal and surfaces as SchemaError."""
    try:
        await asyncio.to_thread(_upgrade_to_head, database_url)
    except Exception as e:
        logger.error(f"Database migration failed: {e}", exc_info=True)
        raise SchemaError("Failed to migrate schema", operation="run_migrations") from e
    logger.info("Database migrations applied")
