"""
GBFS API endpoints.
Serves merged operator snapshots, the operator registry and station overviews.
"""

from typing import Optional, Union

import structlog
from fastapi import APIRouter, Depends, Query

from mobidash.dependencies import Services, get_services
from mobidash.schemas.gbfs import (
    OperatorList,
    OperatorOverview,
    OperatorSnapshot,
    OperatorSnapshotList,
)
from mobidash.services.views import build_overview

logger = structlog.get_logger()
router = APIRouter()


@router.get("", response_model=Union[OperatorSnapshot, OperatorSnapshotList])
async def get_gbfs_data(
    operator: Optional[str] = Query(None, description="Operator id; omit for the default fan-out"),
    services: Services = Depends(get_services),
) -> Union[OperatorSnapshot, OperatorSnapshotList]:
    """One operator's snapshot, or snapshots for the first few registry operators."""
    if operator:
        return await services.operators.fetch_one(operator)
    return await services.operators.fetch_all()


@router.get("/operators", response_model=OperatorList)
async def list_operators(services: Services = Depends(get_services)) -> OperatorList:
    """Static registry dump."""
    return services.operators.list_operators()


@router.get("/{operator_id}/overview", response_model=OperatorOverview)
async def get_operator_overview(
    operator_id: str,
    q: Optional[str] = Query(None, max_length=200, description="Match station name or address"),
    active_only: bool = False,
    services: Services = Depends(get_services),
) -> OperatorOverview:
    """Stations joined with live status, filtered for display."""
    snapshot = await services.operators.fetch_one(operator_id)
    return build_overview(snapshot.operator, snapshot.data, query=q, active_only=active_only)
