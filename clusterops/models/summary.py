"""
DDL for the ``cluster_summary`` view.

The view's column set belongs to the schema; the summary aggregator reads it
with ``SELECT *`` and never depends on its shape.
"""

from sqlalchemy import DDL, event

from clusterops.db.base import Base

CLUSTER_SUMMARY_SELECT = """
SELECT
    {cluster_id} AS cluster_id,
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

# sa.Uuid is stored as 32 hex characters on SQLite; expose the dashed form
# Postgres returns so both backends yield the same cluster_id text.
SQLITE_CLUSTER_ID = (
    "lower(substr(c.id, 1, 8) || '-' || substr(c.id, 9, 4) || '-' || "
    "substr(c.id, 13, 4) || '-' || substr(c.id, 17, 4) || '-' || substr(c.id, 21))"
)

event.listen(
    Base.metadata,
    "after_create",
    DDL(
        "CREATE OR REPLACE VIEW cluster_summary AS "
        + CLUSTER_SUMMARY_SELECT.format(cluster_id="c.id")
    ).execute_if(dialect="postgresql"),
)
event.listen(
    Base.metadata,
    "after_create",
    DDL(
        "CREATE VIEW IF NOT EXISTS cluster_summary AS "
        + CLUSTER_SUMMARY_SELECT.format(cluster_id=SQLITE_CLUSTER_ID)
    ).execute_if(dialect="sqlite"),
)
event.listen(
    Base.metadata,
    "before_drop",
    DDL("DROP VIEW IF EXISTS cluster_summary"),
)
