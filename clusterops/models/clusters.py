"""
Cluster registry DB model.
"""

import uuid

from sqlalchemy import Column, Integer, Numeric, String, Uuid
from sqlalchemy.sql import func

from clusterops.db.base import Base
from clusterops.db.types import UTCDateTime
from clusterops.utils import utcnow


class ClusterModel(Base):
    __tablename__ = "clusters"

    # Columns an upsert on an existing name is allowed to overwrite
    MUTABLE_FIELDS = (
        "environment",
        "cluster_type",
        "region",
        "zone",
        "node_count",
        "node_size",
        "status",
        "cost_budget",
        "cost_threshold",
    )

    id = Column(Uuid, primary_key=True, nullable=False, default=uuid.uuid4)
    name = Column(String(255), unique=True, index=True, nullable=False)
    environment = Column(String(64), nullable=False)  # local | staging | production
    cluster_type = Column(String(64), nullable=False)  # local | aks | eks | gke
    region = Column(String(128), nullable=True)
    zone = Column(String(128), nullable=True)
    node_count = Column(Integer, nullable=False, default=1)
    node_size = Column(String(128), nullable=False)

    # free text lifecycle label: provisioning | active | terminated ...
    status = Column(String(64), nullable=False)

    cost_budget = Column(Numeric(12, 2), nullable=True)
    cost_threshold = Column(Integer, nullable=True)  # percent of budget

    created_at = Column(
        UTCDateTime, nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at = Column(
        UTCDateTime, nullable=False, default=utcnow, server_default=func.now()
    )
