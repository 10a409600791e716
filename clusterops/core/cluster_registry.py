"""
Cluster registry: idempotent registration keyed by cluster name.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from clusterops.models.clusters import ClusterModel
from clusterops.models.pydantic_models.clusters import ClusterIn, ClusterOut
from clusterops.utils import utcnow

logger = logging.getLogger(__name__)


def _insert_for(db: AsyncSession):
    if db.get_bind().dialect.name == "sqlite":
        return sqlite_insert
    return pg_insert


async def register_cluster(*, db: AsyncSession, cluster: ClusterIn) -> ClusterOut:
    """
    Insert the cluster, or overwrite the mutable fields of the cluster that
    already has this name.

    A single ``INSERT ... ON CONFLICT (name) DO UPDATE`` so concurrent callers
    registering the same name converge on one row without duplicate-key
    failures. The stored ``id`` and ``created_at`` always survive.
    """
    values = cluster.model_dump()
    stmt = _insert_for(db)(ClusterModel).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[ClusterModel.name],
        set_={
            **{field: stmt.excluded[field] for field in ClusterModel.MUTABLE_FIELDS},
            "updated_at": utcnow(),
        },
    ).returning(ClusterModel)

    result = await db.scalars(stmt, execution_options={"populate_existing": True})
    stored = result.one()
    await db.commit()

    if stored.id != cluster.id:
        logger.info(f"Updated cluster {stored.name} (id={stored.id})")
    else:
        logger.info(f"Registered cluster {stored.name} (id={stored.id})")
    return ClusterOut.model_validate(stored)


async def list_clusters(*, db: AsyncSession) -> list[ClusterOut]:
    result = await db.scalars(
        select(ClusterModel).order_by(ClusterModel.created_at.desc())
    )
    return [ClusterOut.model_validate(obj) for obj in result.all()]


async def find_cluster_by_name(*, db: AsyncSession, name: str) -> ClusterOut | None:
    """Return the cluster called ``name``, or None. Absence is not an error."""
    result = await db.scalars(select(ClusterModel).where(ClusterModel.name == name))
    obj = result.first()
    return ClusterOut.model_validate(obj) if obj else None


async def get_cluster(*, db: AsyncSession, cluster_id: UUID) -> ClusterOut | None:
    """Resolve an advisory cluster reference; dangling ids yield None."""
    obj = await db.get(ClusterModel, cluster_id)
    return ClusterOut.model_validate(obj) if obj else None
