from fastapi import APIRouter, Depends

from clusterops.api.v1.deps import get_store
from clusterops.models.pydantic_models.summary import SummaryResponseModel
from clusterops.store import TelemetryStore

router = APIRouter()


@router.get("", response_model=SummaryResponseModel)
async def get_summary(store: TelemetryStore = Depends(get_store)):
    """Rows of the cluster_summary view; columns are whatever the schema defines."""
    rows = await store.get_summary()
    return SummaryResponseModel.from_rows(rows)
