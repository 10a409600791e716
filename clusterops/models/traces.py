"""
Trace span DB model.

Spans are append-only. ``cluster_id`` and ``parent_span_id`` are advisory: no
foreign keys, so a span may reference a cluster or parent that does not exist.
"""

import uuid

from sqlalchemy import Column, BigInteger, Index, String, Text, Uuid
from sqlalchemy.sql import func

from clusterops.db.base import Base
from clusterops.db.types import JSONB, UTCDateTime
from clusterops.utils import utcnow


class TraceModel(Base):
    __tablename__ = "traces"
    __table_args__ = (
        Index("ix_traces_cluster_id_start_time", "cluster_id", "start_time"),
    )

    id = Column(Uuid, primary_key=True, nullable=False, default=uuid.uuid4)
    cluster_id = Column(Uuid, nullable=True)

    trace_id = Column(String(64), nullable=False, index=True)
    span_id = Column(String(64), nullable=False)
    parent_span_id = Column(String(64), nullable=True)

    operation_name = Column(String(255), nullable=False)
    service_name = Column(String(255), nullable=False)

    start_time = Column(UTCDateTime, nullable=False, index=True)
    end_time = Column(UTCDateTime, nullable=True)
    duration_ms = Column(BigInteger, nullable=True)  # writer supplied, never derived

    status = Column(String(32), nullable=False, default="ok")  # ok | error
    error_message = Column(Text, nullable=True)

    tags = Column(JSONB, nullable=False, default=dict)
    logs = Column(JSONB, nullable=False, default=list)

    created_at = Column(
        UTCDateTime, nullable=False, default=utcnow, server_default=func.now()
    )
