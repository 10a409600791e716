"""
Dialect-aware column types and SQL expressions.

Production runs on Postgres; the test-suite and local development can run on
SQLite through aiosqlite, so every type and expression here compiles for both.
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, types
from sqlalchemy.dialects import postgresql
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import FunctionElement


class UTCDateTime(types.TypeDecorator):
    """Timezone-aware timestamp that always round-trips as UTC.

    Naive datetimes passed in are taken to already be UTC. SQLite drops the
    offset on storage, so results read back naive get UTC attached again.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: datetime | None, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class JSONB(types.TypeDecorator):
    """JSONB on Postgres, JSON on SQLite."""

    impl = types.JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(postgresql.JSONB())
        return dialect.type_descriptor(types.JSON())


class millis_between(FunctionElement):
    """Whole milliseconds from ``start`` to ``end``, computed by the database.

    Usage: ``millis_between(end_expr, start_expr)``. Rounds to the nearest
    millisecond so sub-millisecond float noise never leaks into stored values.
    """

    type = BigInteger()
    name = "millis_between"
    inherit_cache = True


@compiles(millis_between)
def _compile_millis_between(element, compiler, **kw):
    end, start = list(element.clauses)
    return (
        "CAST(ROUND(EXTRACT(EPOCH FROM (CAST(%s AS TIMESTAMP WITH TIME ZONE) - %s)) * 1000) AS BIGINT)"
        % (compiler.process(end, **kw), compiler.process(start, **kw))
    )


@compiles(millis_between, "sqlite")
def _compile_millis_between_sqlite(element, compiler, **kw):
    end, start = list(element.clauses)
    return "CAST(ROUND((julianday(%s) - julianday(%s)) * 86400000.0) AS INTEGER)" % (
        compiler.process(end, **kw),
        compiler.process(start, **kw),
    )
