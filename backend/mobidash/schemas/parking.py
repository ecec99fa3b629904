"""
Parking facility schemas.
"""

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

ParkingSource = Literal["nyc_open_data", "data_gov", "other"]
FacilityType = Literal["garage", "lot", "meter", "park_and_ride", "unknown"]


class ParkingFacility(BaseModel):
    """A parking location normalised from an open-data row."""

    id: str = Field(..., description="Unique per source row")
    name: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    distance_miles: Optional[float] = None
    type: FacilityType = "unknown"
    capacity: Optional[int] = None
    operator: Optional[str] = None
    hours: Optional[str] = None
    rates: Optional[str] = None
    source: Optional[ParkingSource] = None
    source_id: Optional[str] = Field(default=None, description="Original dataset identifier")


class ParkingData(BaseModel):
    facilities: List[ParkingFacility] = Field(default_factory=list)
    last_updated: datetime
    sources_used: List[ParkingSource] = Field(default_factory=list)
    fallback_note: Optional[str] = None
    error: Optional[str] = None


class AddressRequest(BaseModel):
    """Second phase of a parking lookup: the caller sends back facilities it already holds."""

    facility_ids: List[str]
    facilities: List[ParkingFacility]


class AddressResponse(BaseModel):
    addresses: Dict[str, str] = Field(default_factory=dict)
    error: Optional[str] = None
