"""
Command execution DB model.

A row is open while ``end_time`` is NULL and closed once the outcome has been
written. ``duration_ms`` is only ever set by the close UPDATE.
"""

import uuid

from sqlalchemy import BigInteger, Column, Index, Integer, String, Text, Uuid
from sqlalchemy.sql import func

from clusterops.db.base import Base
from clusterops.db.types import JSONB, UTCDateTime
from clusterops.utils import utcnow


class CommandExecutionModel(Base):
    __tablename__ = "command_executions"
    __table_args__ = (
        Index(
            "ix_command_executions_cluster_id_start_time", "cluster_id", "start_time"
        ),
    )

    id = Column(Uuid, primary_key=True, nullable=False, default=uuid.uuid4)
    cluster_id = Column(Uuid, nullable=True)

    command = Column(Text, nullable=False)
    script_name = Column(String(255), nullable=True)
    arguments = Column(JSONB, nullable=False, default=dict)

    exit_code = Column(Integer, nullable=True)
    stdout = Column(Text, nullable=True)
    stderr = Column(Text, nullable=True)

    start_time = Column(UTCDateTime, nullable=False, index=True)
    end_time = Column(UTCDateTime, nullable=True)
    duration_ms = Column(BigInteger, nullable=True)

    user_id = Column(String(255), nullable=True)
    session_id = Column(Uuid, nullable=True)

    created_at = Column(
        UTCDateTime, nullable=False, default=utcnow, server_default=func.now()
    )
