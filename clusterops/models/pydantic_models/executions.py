from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field

from clusterops.utils import utcnow


class ExecutionState(str, Enum):
    """Lifecycle of a tracked command run. The only transition is OPEN -> CLOSED."""

    OPEN = "open"
    CLOSED = "closed"


class ExecutionOpenRequest(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    cluster_id: UUID | None = None
    command: str = Field(..., min_length=1)
    script_name: str | None = None
    arguments: dict[str, Any] | list[Any] = Field(default_factory=dict)
    start_time: datetime = Field(default_factory=utcnow)
    user_id: str | None = None
    session_id: UUID | None = None


class ExecutionCloseRequest(BaseModel):
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    end_time: datetime = Field(default_factory=utcnow)


class CommandExecutionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    cluster_id: UUID | None = None
    command: str
    script_name: str | None = None
    arguments: dict[str, Any] | list[Any]
    exit_code: int | None = None
    stdout: str | None = None
    stderr: str | None = None
    start_time: datetime
    end_time: datetime | None = None
    duration_ms: int | None = None
    user_id: str | None = None
    session_id: UUID | None = None
    created_at: datetime

    @computed_field
    @property
    def state(self) -> ExecutionState:
        if self.end_time is None:
            return ExecutionState.OPEN
        return ExecutionState.CLOSED


class ExecutionOpenedResponse(BaseModel):
    id: UUID
    state: ExecutionState = ExecutionState.OPEN
