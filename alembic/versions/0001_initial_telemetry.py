"""initial telemetry schema

Revision ID: 0001_initial_telemetry
Revises:
Create Date: 2026-10-16

clusters, traces, command_executions and the cluster_summary view.
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID, JSONB


revision = "0001_initial_telemetry"
down_revision = None
branch_labels = None
depends_on = None


CLUSTER_SUMMARY_VIEW = """
CREATE OR REPLACE VIEW cluster_summary AS
SELECT
    c.id AS cluster_id,
    c.name AS cluster_name,
    c.environment,
    c.cluster_type,
    c.status,
    c.node_count,
    c.cost_budget,
    c.cost_threshold,
    (SELECT COUNT(*) FROM traces t WHERE t.cluster_id = c.id) AS span_count,
    (SELECT COUNT(*) FROM traces t
        WHERE t.cluster_id = c.id AND t.status = 'error') AS error_span_count,
    (SELECT MAX(t.start_time) FROM traces t WHERE t.cluster_id = c.id) AS last_span_at,
    (SELECT COUNT(*) FROM command_executions e WHERE e.cluster_id = c.id) AS execution_count,
    (SELECT COUNT(*) FROM command_executions e
        WHERE e.cluster_id = c.id AND e.exit_code IS NOT NULL AND e.exit_code <> 0
    ) AS failed_execution_count,
    (SELECT AVG(e.duration_ms) FROM command_executions e
        WHERE e.cluster_id = c.id) AS avg_execution_ms,
    (SELECT MAX(e.start_time) FROM command_executions e
        WHERE e.cluster_id = c.id) AS last_execution_at,
    c.created_at,
    c.updated_at
FROM clusters c
"""


def upgrade() -> None:
    # --- clusters ---
    op.create_table(
        "clusters",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("environment", sa.String(64), nullable=False),
        sa.Column("cluster_type", sa.String(64), nullable=False),
        sa.Column("region", sa.String(128), nullable=True),
        sa.Column("zone", sa.String(128), nullable=True),
        sa.Column("node_count", sa.Integer, nullable=False),
        sa.Column("node_size", sa.String(128), nullable=False),
        sa.Column("status", sa.String(64), nullable=False),
        sa.Column("cost_budget", sa.Numeric(12, 2), nullable=True),
        sa.Column("cost_threshold", sa.Integer, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_clusters_name", "clusters", ["name"], unique=True)

    # --- traces ---
    op.create_table(
        "traces",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, nullable=False),
        # advisory reference, deliberately no foreign key
        sa.Column("cluster_id", UUID(as_uuid=True), nullable=True),
        sa.Column("trace_id", sa.String(64), nullable=False),
        sa.Column("span_id", sa.String(64), nullable=False),
        sa.Column("parent_span_id", sa.String(64), nullable=True),
        sa.Column("operation_name", sa.String(255), nullable=False),
        sa.Column("service_name", sa.String(255), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_ms", sa.BigInteger, nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column("tags", JSONB, nullable=False, server_default="{}"),
        sa.Column("logs", JSONB, nullable=False, server_default="[]"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_traces_trace_id", "traces", ["trace_id"])
    op.create_index("ix_traces_start_time", "traces", ["start_time"])
    op.create_index(
        "ix_traces_cluster_id_start_time", "traces", ["cluster_id", "start_time"]
    )

    # --- command_executions ---
    op.create_table(
        "command_executions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("cluster_id", UUID(as_uuid=True), nullable=True),
        sa.Column("command", sa.Text, nullable=False),
        sa.Column("script_name", sa.String(255), nullable=True),
        sa.Column("arguments", JSONB, nullable=False, server_default="{}"),
        sa.Column("exit_code", sa.Integer, nullable=True),
        sa.Column("stdout", sa.Text, nullable=True),
        sa.Column("stderr", sa.Text, nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_ms", sa.BigInteger, nullable=True),
        sa.Column("user_id", sa.String(255), nullable=True),
        sa.Column("session_id", UUID(as_uuid=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index(
        "ix_command_executions_start_time", "command_executions", ["start_time"]
    )
    op.create_index(
        "ix_command_executions_cluster_id_start_time",
        "command_executions",
        ["cluster_id", "start_time"],
    )

    # --- cluster_summary view ---
    op.execute(CLUSTER_SUMMARY_VIEW)


def downgrade() -> None:
    op.execute("DROP VIEW IF EXISTS cluster_summary")
    op.drop_table("command_executions")
    op.drop_table("traces")
    op.drop_table("clusters")
