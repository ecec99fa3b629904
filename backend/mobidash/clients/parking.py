"""
NYC Open Data parking client.

Data source: NYC Off-Street Parking (dataset 7cgt-uhhz), queried through the
SODA 2.x API. The full dataset is large (~14MB), so queries use a server-side
``within_circle`` filter that is deliberately wider than the requested radius
and exact distances are computed here.
"""

import math
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import httpx
import structlog

from mobidash.clients.geocoder import ReverseGeocoder
from mobidash.config import Settings
from mobidash.core.concurrency import gather_settled, successes
from mobidash.core.exceptions import UpstreamFetchError
from mobidash.core.geo import MILES_TO_METERS, NYC_BOUNDS, BoundingBox, haversine_miles
from mobidash.core.geometry import extract_coordinates
from mobidash.core.metrics import UPSTREAM_LATENCY, UPSTREAM_REQUESTS
from mobidash.schemas.parking import ParkingData, ParkingFacility

logger = structlog.get_logger()

NO_RESULTS_NOTE = (
    "No parking facilities found nearby. This data covers NYC area. "
    "Try moving the map to New York City or increasing the search radius."
)


def outside_coverage_note(lat: float, lng: float) -> str:
    return (
        "Location is outside New York City area. This dataset only covers NYC parking "
        "facilities. NYC is located at approximately 40.71°N, 74.01°W. Your current map "
        f"location ({lat:.2f}°N, {abs(lng):.2f}°W) is outside the coverage area. "
        "Please move the map to New York City to see parking data."
    )


def _to_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def rank_by_distance(
    facilities: List[ParkingFacility], lat: float, lng: float
) -> List[ParkingFacility]:
    """Attach distance from (lat, lng) and sort nearest first; ties break on id."""
    ranked = [
        f.model_copy(update={"distance_miles": haversine_miles(lat, lng, f.lat, f.lng)})
        for f in facilities
    ]
    ranked.sort(key=lambda f: (f.distance_miles, f.id))
    return ranked


class ParkingClient:
    """Nearby parking lookup plus on-demand address resolution."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: Settings,
        geocoder: ReverseGeocoder,
        bounds: BoundingBox = NYC_BOUNDS,
    ):
        self.http_client = http_client
        self.settings = settings
        self.geocoder = geocoder
        self.bounds = bounds

    def server_radius(self, radius_miles: float) -> float:
        """Radius sent to the dataset; wider than requested, never below the minimum."""
        return max(
            radius_miles * self.settings.parking_prefilter_multiplier,
            self.settings.parking_prefilter_min_miles,
        )

    def estimate_capacity(self, row: Dict[str, Any]) -> Optional[int]:
        explicit = _to_number(row.get("capacity"))
        if explicit is not None and explicit > 0:
            return int(explicit)

        area = _to_number(row.get("shape_area"))
        if area is None:
            return None
        estimate = math.floor(area / self.settings.parking_sqft_per_space)
        return estimate if estimate > 0 else None

    def facility_from_row(self, row: Any, index: int) -> Optional[ParkingFacility]:
        if not isinstance(row, dict):
            return None
        coords = extract_coordinates(row)
        if coords is None:
            return None

        lat, lng = coords
        source_id = row.get("source_id")
        return ParkingFacility(
            # source_id repeats across rows
            id=f"nyc-{source_id or 'unknown'}-{index}",
            name="Parking Lot",
            city="New York",
            state="NY",
            lat=lat,
            lng=lng,
            type="lot",
            capacity=self.estimate_capacity(row),
            operator="NYC",
            source="nyc_open_data",
            source_id=str(source_id) if source_id is not None else None,
        )

    async def fetch_parking_lots(
        self,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        radius_miles: Optional[float] = None,
    ) -> List[ParkingFacility]:
        """
        Query the parking dataset, optionally restricted to a circle.

        Responses are never cached; the dataset is far larger than any
        response cache should hold.

        Raises:
            UpstreamFetchError: transport failure, error status or unexpected body
        """
        params: Dict[str, Any] = {"$limit": self.settings.parking_row_limit}
        if lat is not None and lng is not None and radius_miles is not None:
            radius_meters = radius_miles * MILES_TO_METERS
            params["$where"] = f"within_circle(the_geom, {lat}, {lng}, {radius_meters})"
            logger.info("Using geospatial filter", radius_miles=radius_miles, lat=lat, lng=lng)

        started = time.perf_counter()
        try:
            response = await self.http_client.get(
                self.settings.parking_dataset_url,
                params=params,
                headers={"Accept": "application/json", "Cache-Control": "no-cache"},
            )
            response.raise_for_status()
            rows = response.json()
        except httpx.HTTPStatusError as e:
            UPSTREAM_REQUESTS.labels(upstream="parking", outcome="error").inc()
            raise UpstreamFetchError("parking dataset", f"HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            UPSTREAM_REQUESTS.labels(upstream="parking", outcome="error").inc()
            raise UpstreamFetchError("parking dataset", str(e) or e.__class__.__name__) from e
        finally:
            UPSTREAM_LATENCY.labels(upstream="parking").observe(time.perf_counter() - started)

        if not isinstance(rows, list):
            UPSTREAM_REQUESTS.labels(upstream="parking", outcome="error").inc()
            raise UpstreamFetchError("parking dataset", "expected a JSON array")

        UPSTREAM_REQUESTS.labels(upstream="parking", outcome="ok").inc()
        facilities = []
        for index, row in enumerate(rows):
            facility = self.facility_from_row(row, index)
            if facility is not None:
                facilities.append(facility)

        logger.info("Parsed parking facilities", received=len(rows), valid=len(facilities))
        return facilities

    async def get_parking_data(
        self, lat: float, lng: float, radius_miles: Optional[float] = None
    ) -> ParkingData:
        """Facilities within ``radius_miles`` of the point, nearest first."""
        if radius_miles is None:
            radius_miles = self.settings.parking_default_radius_miles
        now = datetime.now(timezone.utc)

        if not self.bounds.contains(lat, lng):
            logger.warning("Location is outside parking coverage area", lat=lat, lng=lng)
            return ParkingData(
                facilities=[],
                last_updated=now,
                fallback_note=outside_coverage_note(lat, lng),
            )

        error = None
        facilities: List[ParkingFacility] = []
        try:
            facilities = await self.fetch_parking_lots(lat, lng, self.server_radius(radius_miles))
        except UpstreamFetchError as e:
            logger.error("Parking query failed, retrying without geospatial filter", error=e.detail)
            try:
                facilities = await self.fetch_parking_lots()
            except UpstreamFetchError as fallback_error:
                logger.error("Unfiltered parking query also failed", error=fallback_error.detail)
                error = "Failed to fetch parking data"

        ranked = rank_by_distance(facilities, lat, lng)
        within = [f for f in ranked if f.distance_miles <= radius_miles]
        within = within[: self.settings.parking_result_limit]

        if not within and ranked:
            closest = ranked[0]
            logger.info(
                "No facility within radius",
                radius_miles=radius_miles,
                closest_id=closest.id,
                closest_miles=round(closest.distance_miles, 2),
            )

        logger.info("Parking lookup complete", found=len(within), radius_miles=radius_miles)
        return ParkingData(
            facilities=within,
            last_updated=now,
            sources_used=["nyc_open_data"] if facilities else [],
            fallback_note=NO_RESULTS_NOTE if not within else None,
            error=error,
        )

    async def get_addresses(
        self, facility_ids: List[str], facilities: List[ParkingFacility]
    ) -> Dict[str, str]:
        """
        Resolve street addresses for already-fetched facilities.

        Only the first ``geocode_batch_limit`` ids are looked up. Ids without a
        matching facility, failed lookups and empty results are left out.
        """
        by_id = {f.id: f for f in facilities}
        batch = facility_ids[: self.settings.geocode_batch_limit]
        logger.info("Fetching facility addresses", requested=len(facility_ids), batch=len(batch))

        async def resolve(facility_id: str) -> Optional[Tuple[str, str]]:
            facility = by_id.get(facility_id)
            if facility is None:
                return None
            address = await self.geocoder.reverse(facility.lat, facility.lng)
            return (facility_id, address) if address else None

        results = await gather_settled(resolve(facility_id) for facility_id in batch)
        for facility_id, result in zip(batch, results):
            if not result.ok:
                logger.error("Geocoding failed for facility", facility_id=facility_id, error=str(result.error))

        addresses = dict(successes(results))
        logger.info("Geocoded facility addresses", resolved=len(addresses))
        return addresses
