"""
Pydantic schemas for GBFS sub-feed records and the merged operator snapshot.
"""

import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def _localized_text(value: Any) -> Any:
    """GBFS v3 publishes names as [{"text": ..., "language": ...}]; keep the first text."""
    if isinstance(value, list):
        for entry in value:
            if isinstance(entry, dict) and entry.get("text"):
                return entry["text"]
        return None
    return value


def _as_str_id(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(int(value)) if float(value).is_integer() else str(value)
    return value


class GBFSFeed(BaseModel):
    """One entry in a feed-discovery document."""

    name: str
    url: str


class SystemInformation(BaseModel):
    system_id: str = "unknown"
    name: str = "Unknown System"
    operator: Optional[str] = None
    language: Optional[str] = None
    timezone: Optional[str] = None
    url: Optional[str] = None

    coerce_ids = field_validator("system_id", mode="before")(_as_str_id)
    flatten_text = field_validator("name", "operator", mode="before")(_localized_text)


class Station(BaseModel):
    """Station metadata from ``station_information``."""

    station_id: str
    name: Optional[str] = None
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    short_name: Optional[str] = None
    address: Optional[str] = None
    cross_street: Optional[str] = None
    region_id: Optional[str] = None
    post_code: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    is_virtual_station: Optional[bool] = None

    coerce_ids = field_validator("station_id", "region_id", mode="before")(_as_str_id)
    flatten_text = field_validator("name", "short_name", mode="before")(_localized_text)

    @field_validator("lat", "lon")
    def validate_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("coordinate must be finite")
        return v


class StationStatus(BaseModel):
    """Live availability from ``station_status``."""

    station_id: str
    num_bikes_available: int = 0
    num_bikes_disabled: Optional[int] = None
    num_docks_available: Optional[int] = None
    num_docks_disabled: Optional[int] = None
    is_installed: bool = True
    is_renting: bool = False
    is_returning: bool = False
    last_reported: Optional[datetime] = None

    coerce_ids = field_validator("station_id", mode="before")(_as_str_id)

    @model_validator(mode="before")
    @classmethod
    def accept_v3_counts(cls, data: Any) -> Any:
        """GBFS 3.x renamed the bike counts to ``num_vehicles_*``."""
        if isinstance(data, dict):
            renamed = {
                "num_bikes_available": "num_vehicles_available",
                "num_bikes_disabled": "num_vehicles_disabled",
            }
            for old, new in renamed.items():
                if data.get(old) is None and new in data:
                    data = {**data, old: data[new]}
        return data

    @field_validator("num_bikes_available", mode="before")
    def default_missing_count(cls, v: Any) -> Any:
        return 0 if v is None else v


class FreeVehicle(BaseModel):
    """Dockless vehicle from ``free_bike_status`` / ``vehicle_status``."""

    bike_id: str
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lon: Optional[float] = Field(default=None, ge=-180, le=180)
    is_reserved: bool = False
    is_disabled: bool = False
    vehicle_type_id: Optional[str] = None
    station_id: Optional[str] = None
    current_fuel_percent: Optional[float] = None
    current_range_meters: Optional[float] = Field(default=None, ge=0)
    last_reported: Optional[datetime] = None

    coerce_ids = field_validator("bike_id", "vehicle_type_id", "station_id", mode="before")(_as_str_id)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "FreeVehicle":
        if "bike_id" not in record and "vehicle_id" in record:
            record = {**record, "bike_id": record["vehicle_id"]}
        return cls.model_validate(record)


class VehicleType(BaseModel):
    vehicle_type_id: str
    form_factor: Optional[str] = None
    propulsion_type: Optional[str] = None
    name: Optional[str] = None
    max_range_meters: Optional[float] = None

    coerce_ids = field_validator("vehicle_type_id", mode="before")(_as_str_id)
    flatten_text = field_validator("name", mode="before")(_localized_text)


class FeedSnapshot(BaseModel):
    """One merge of an operator's sub-feeds."""

    system_id: str = "unknown"
    name: str = "Unknown System"
    operator: Optional[str] = None
    stations: List[Station] = Field(default_factory=list)
    station_statuses: List[StationStatus] = Field(default_factory=list)
    free_vehicles: List[FreeVehicle] = Field(default_factory=list)
    vehicle_types: List[VehicleType] = Field(default_factory=list)
    last_updated: datetime


class OperatorInfo(BaseModel):
    id: str
    name: str
    location: str
    website: Optional[str] = None


class OperatorSnapshot(BaseModel):
    operator: OperatorInfo
    data: FeedSnapshot


class OperatorSnapshotList(BaseModel):
    operators: List[OperatorSnapshot]
    total: int


class OperatorList(BaseModel):
    operators: List[OperatorInfo]


class StationView(BaseModel):
    """Station joined with its live status for display."""

    station_id: str
    name: str
    lat: float
    lon: float
    address: Optional[str] = None
    capacity: Optional[int] = None
    available_bikes: int = 0
    available_docks: int = 0
    is_active: bool = False
    last_reported: Optional[datetime] = None


class SnapshotStats(BaseModel):
    total_stations: int = 0
    total_bikes: int = 0
    total_docks: int = 0
    active_stations: int = 0
    free_vehicles: int = 0


class OperatorOverview(BaseModel):
    operator: OperatorInfo
    stats: SnapshotStats
    stations: List[StationView]
    free_vehicles: List[FreeVehicle]
    last_updated: datetime
