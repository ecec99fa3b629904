"""
Display-side view models built from a FeedSnapshot.
"""

from typing import Dict, List, Optional

from mobidash.schemas.gbfs import (
    FeedSnapshot,
    FreeVehicle,
    OperatorInfo,
    OperatorOverview,
    SnapshotStats,
    Station,
    StationStatus,
    StationView,
)

STATION_LIST_LIMIT = 50


def merge_station_status(
    stations: List[Station], statuses: List[StationStatus]
) -> List[StationView]:
    """Join stations to their live status; stations without one read as empty and inactive."""
    status_by_id: Dict[str, StationStatus] = {s.station_id: s for s in statuses}

    views = []
    for station in stations:
        status = status_by_id.get(station.station_id)
        views.append(
            StationView(
                station_id=station.station_id,
                name=station.name or "",
                lat=station.lat,
                lon=station.lon,
                address=station.address,
                capacity=station.capacity,
                available_bikes=status.num_bikes_available if status else 0,
                available_docks=(status.num_docks_available or 0) if status else 0,
                is_active=bool(status and status.is_renting and status.is_returning),
                last_reported=status.last_reported if status else None,
            )
        )
    return views


def active_free_vehicles(vehicles: List[FreeVehicle]) -> List[FreeVehicle]:
    return [v for v in vehicles if not v.is_disabled]


def search_stations(views: List[StationView], query: Optional[str]) -> List[StationView]:
    if not query:
        return views
    needle = query.strip().lower()
    if not needle:
        return views
    return [
        v for v in views
        if needle in v.name.lower() or (v.address and needle in v.address.lower())
    ]


def summarize(views: List[StationView], vehicles: List[FreeVehicle]) -> SnapshotStats:
    return SnapshotStats(
        total_stations=len(views),
        total_bikes=sum(v.available_bikes for v in views),
        total_docks=sum(v.available_docks for v in views),
        active_stations=sum(1 for v in views if v.is_active),
        free_vehicles=len(vehicles),
    )


def build_overview(
    operator: OperatorInfo,
    snapshot: FeedSnapshot,
    query: Optional[str] = None,
    active_only: bool = False,
    limit: int = STATION_LIST_LIMIT,
) -> OperatorOverview:
    """Stats cover the whole system; the station list honours search and toggles."""
    views = merge_station_status(snapshot.stations, snapshot.station_statuses)
    vehicles = active_free_vehicles(snapshot.free_vehicles)

    listed = search_stations(views, query)
    if active_only:
        listed = [v for v in listed if v.is_active]

    return OperatorOverview(
        operator=operator,
        stats=summarize(views, vehicles),
        stations=listed[:limit],
        free_vehicles=vehicles,
        last_updated=snapshot.last_updated,
    )
