"""
Parking API endpoints.
"""

from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from mobidash.core.exceptions import InvalidRequestError
from mobidash.dependencies import Services, get_services
from mobidash.schemas.parking import AddressRequest, AddressResponse, ParkingData

logger = structlog.get_logger()
router = APIRouter()


@router.get("", response_model=ParkingData)
async def get_parking(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    distance: Optional[float] = Query(None, gt=0, description="Search radius in miles"),
    services: Services = Depends(get_services),
):
    """Parking facilities near a coordinate, nearest first."""
    if distance is not None and distance > services.settings.parking_max_radius_miles:
        raise InvalidRequestError(
            f"distance must not exceed {services.settings.parking_max_radius_miles} miles"
        )

    try:
        return await services.parking.get_parking_data(lat, lng, distance)
    except Exception as e:
        logger.error("Failed to fetch parking data", error=str(e), exc_info=True)
        payload = ParkingData(
            facilities=[],
            last_updated=datetime.now(timezone.utc),
            error="Failed to fetch parking data",
        )
        return JSONResponse(status_code=500, content=payload.model_dump(mode="json"))


@router.post("/addresses", response_model=AddressResponse)
async def resolve_addresses(
    body: AddressRequest,
    services: Services = Depends(get_services),
):
    """Street addresses for facilities the caller already holds."""
    try:
        addresses = await services.parking.get_addresses(body.facility_ids, body.facilities)
    except Exception as e:
        logger.error("Failed to fetch addresses", error=str(e), exc_info=True)
        payload = AddressResponse(addresses={}, error="Failed to fetch addresses")
        return JSONResponse(status_code=500, content=payload.model_dump(mode="json"))
    return AddressResponse(addresses=addresses)
