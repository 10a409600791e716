from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class ClusterIn(BaseModel):
    """A full cluster record as handed to ``register_cluster``.

    ``id`` is generated by the caller; it only takes effect when the name is
    new; re-registering an existing name keeps the stored identifier.
    """

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, max_length=255)
    environment: str = Field(..., min_length=1)
    cluster_type: str = Field(..., min_length=1)
    region: str | None = None
    zone: str | None = None
    node_count: int = Field(1, ge=0)
    node_size: str
    status: str
    cost_budget: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
    cost_threshold: int | None = Field(None, ge=0, le=100)


class ClusterOut(ClusterIn):
    model_config = ConfigDict(from_attributes=True)

    created_at: datetime
    updated_at: datetime
