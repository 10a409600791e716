from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class SpanIn(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    cluster_id: UUID | None = None
    trace_id: str = Field(..., min_length=1, max_length=64)
    span_id: str = Field(..., min_length=1, max_length=64)
    parent_span_id: str | None = Field(None, max_length=64)
    operation_name: str
    service_name: str
    start_time: datetime
    end_time: datetime | None = None
    # supplied by the writer as-is; the recorder never derives it
    duration_ms: int | None = Field(None, ge=0)
    status: str = "ok"
    error_message: str | None = None
    tags: dict[str, Any] = Field(default_factory=dict)
    logs: list[Any] = Field(default_factory=list)


class SpanOut(SpanIn):
    model_config = ConfigDict(from_attributes=True)

    created_at: datetime


class TraceSpansResponseModel(BaseModel):
    trace_id: str
    spans: list[SpanOut]
    span_count: int
