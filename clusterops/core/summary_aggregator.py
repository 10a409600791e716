"""
Summary aggregator: reads the ``cluster_summary`` view without knowing its shape.

SQLite has no date/time storage class and hands view timestamps back as ISO
text, so on that backend text cells in timestamp form are parsed before tagging.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from clusterops.exceptions import DeserializationError
from clusterops.models.pydantic_models.summary import SummaryRow, SummaryValue

logger = logging.getLogger(__name__)

SUMMARY_VIEW = "cluster_summary"

SQLITE_TIMESTAMP = re.compile(
    r"^\d{4}-\d{2}-\d{2}[ T]\d{2}:\d{2}:\d{2}(\.\d{3}|\.\d{6})?([+-]\d{2}:\d{2})?$"
)


def _decode_sqlite(raw: Any) -> Any:
    if isinstance(raw, str) and SQLITE_TIMESTAMP.match(raw):
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return raw
        # stored values are UTC; SQLite drops the offset
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    return raw


async def get_summary(*, db: AsyncSession) -> list[SummaryRow]:
    """
    One ordered mapping per view row, keyed by the view's column names.

    A value with no ``SummaryValue`` variant degrades to null for that column;
    the rest of the row and the call still succeed.
    """
    on_sqlite = db.get_bind().dialect.name == "sqlite"
    result = await db.execute(text(f"SELECT * FROM {SUMMARY_VIEW}"))
    columns = list(result.keys())

    rows: list[SummaryRow] = []
    for raw_row in result.all():
        row: SummaryRow = {}
        for column, raw in zip(columns, raw_row):
            if on_sqlite:
                raw = _decode_sqlite(raw)
            try:
                row[column] = SummaryValue.from_raw(raw)
            except DeserializationError as e:
                logger.warning(f"Summary column {column!r} degraded to null: {e}")
                row[column] = SummaryValue.null()
        rows.append(row)
    return rows
