"""
Tagged values for rows of the schema-agnostic summary view.

The view's columns are owned by the database schema, so a row is an ordered
mapping of column name to ``SummaryValue`` rather than a fixed record.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from clusterops.exceptions import DeserializationError


class SummaryValueKind(str, Enum):
    NULL = "null"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    STRUCTURED = "structured"


class SummaryValue(BaseModel):
    kind: SummaryValueKind
    value: Any = None

    @classmethod
    def null(cls) -> "SummaryValue":
        return cls(kind=SummaryValueKind.NULL)

    @classmethod
    def from_raw(cls, raw: Any) -> "SummaryValue":
        """Tag a raw driver value, raising DeserializationError if it has no variant.

        Fixed-point ``Decimal`` cells (e.g. ``cost_budget``) are tagged FLOAT, so
        trailing zeros and digits beyond float precision are not preserved.
        """
        if raw is None:
            return cls.null()
        # bool first: it is a subclass of int
        if isinstance(raw, bool):
            return cls(kind=SummaryValueKind.BOOLEAN, value=raw)
        if isinstance(raw, int):
            return cls(kind=SummaryValueKind.INTEGER, value=raw)
        if isinstance(raw, (float, Decimal)):
            return cls(kind=SummaryValueKind.FLOAT, value=float(raw))
        if isinstance(raw, str):
            return cls(kind=SummaryValueKind.STRING, value=raw)
        if isinstance(raw, UUID):
            return cls(kind=SummaryValueKind.STRING, value=str(raw))
        if isinstance(raw, (datetime, date)):
            return cls(kind=SummaryValueKind.TIMESTAMP, value=raw)
        if isinstance(raw, (dict, list)):
            return cls(kind=SummaryValueKind.STRUCTURED, value=raw)
        raise DeserializationError(
            f"Unsupported summary value type {type(raw).__name__}"
        )


SummaryRow = dict[str, SummaryValue]


class SummaryResponseModel(BaseModel):
    columns: list[str]
    rows: list[dict[str, Any]]
    count: int

    @classmethod
    def from_rows(cls, rows: list[SummaryRow]) -> "SummaryResponseModel":
        return cls(
            columns=list(rows[0].keys()) if rows else [],
            rows=[{name: cell.value for name, cell in row.items()} for row in rows],
            count=len(rows),
        )
