"""
GBFS auto-discovery client.

Fetches an operator's discovery document, resolves its sub-feeds, pulls them
concurrently and merges the result into one FeedSnapshot. Sub-feed failures
degrade to empty data; only an unusable discovery document fails the fetch.
"""

import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from mobidash.core.concurrency import gather_settled
from mobidash.core.metrics import UPSTREAM_LATENCY, UPSTREAM_REQUESTS
from mobidash.schemas.gbfs import (
    FeedSnapshot,
    FreeVehicle,
    GBFSFeed,
    Station,
    StationStatus,
    SystemInformation,
    VehicleType,
)
from mobidash.utils.cache import InMemoryCache

logger = structlog.get_logger()

SYSTEM_INFORMATION = "system_information"
STATION_INFORMATION = "station_information"
STATION_STATUS = "station_status"
FREE_BIKE_STATUS = "free_bike_status"
VEHICLE_STATUS = "vehicle_status"
VEHICLE_TYPES = "vehicle_types"


def select_feed_list(document: Dict[str, Any], default_language: str = "en") -> Optional[List[Any]]:
    """
    Pick the feed list out of a discovery document.

    GBFS 2.x nests feeds under language codes; the default language wins when
    it has feeds, otherwise the first language that does. GBFS 3.x puts the
    list directly under ``data.feeds``.
    """
    data = document.get("data")
    if not isinstance(data, dict):
        return None

    feeds = data.get("feeds")
    if isinstance(feeds, list) and feeds:
        return feeds

    blocks = [data.get(default_language)] + [
        block for language, block in data.items() if language != default_language
    ]
    for block in blocks:
        if isinstance(block, dict):
            feeds = block.get("feeds")
            if isinstance(feeds, list) and feeds:
                return feeds
    return None


def build_feed_map(feeds: List[Any]) -> Dict[str, str]:
    feed_map: Dict[str, str] = {}
    for entry in feeds:
        try:
            feed = GBFSFeed.model_validate(entry)
        except ValidationError:
            continue
        feed_map.setdefault(feed.name, feed.url)

    if FREE_BIKE_STATUS not in feed_map and VEHICLE_STATUS in feed_map:
        feed_map[FREE_BIKE_STATUS] = feed_map[VEHICLE_STATUS]
    return feed_map


def _records(payload: Dict[str, Any], *keys: str) -> List[Any]:
    data = payload.get("data")
    if not isinstance(data, dict):
        return []
    for key in keys:
        records = data.get(key)
        if isinstance(records, list):
            return records
    return []


def _validate_each(
    records: List[Any],
    parse: Callable[[Dict[str, Any]], BaseModel],
    feed: str,
) -> List[Any]:
    parsed = []
    dropped = 0
    for record in records:
        if not isinstance(record, dict):
            dropped += 1
            continue
        try:
            parsed.append(parse(record))
        except ValidationError:
            dropped += 1
    if dropped:
        logger.debug("Dropped malformed GBFS records", feed=feed, dropped=dropped)
    return parsed


def parse_system_information(payload: Dict[str, Any]) -> Optional[SystemInformation]:
    data = payload.get("data")
    if not isinstance(data, dict):
        return None
    try:
        return SystemInformation.model_validate(data)
    except ValidationError as e:
        logger.warning("Malformed system_information", error=str(e))
        return None


def parse_stations(payload: Dict[str, Any]) -> List[Station]:
    return _validate_each(_records(payload, "stations"), Station.model_validate, STATION_INFORMATION)


def parse_station_statuses(payload: Dict[str, Any]) -> List[StationStatus]:
    return _validate_each(_records(payload, "stations"), StationStatus.model_validate, STATION_STATUS)


def parse_free_vehicles(payload: Dict[str, Any]) -> List[FreeVehicle]:
    vehicles = _validate_each(
        _records(payload, "bikes", "vehicles"), FreeVehicle.from_record, FREE_BIKE_STATUS
    )
    # Disabled vehicles never leave the client
    return [v for v in vehicles if not v.is_disabled]


def parse_vehicle_types(payload: Dict[str, Any]) -> List[VehicleType]:
    return _validate_each(_records(payload, "vehicle_types"), VehicleType.model_validate, VEHICLE_TYPES)


FEED_PARSERS: Dict[str, Callable[[Dict[str, Any]], Any]] = {
    SYSTEM_INFORMATION: parse_system_information,
    STATION_INFORMATION: parse_stations,
    STATION_STATUS: parse_station_statuses,
    FREE_BIKE_STATUS: parse_free_vehicles,
    VEHICLE_TYPES: parse_vehicle_types,
}


class GBFSClient:
    """Client for one operator's GBFS feeds."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        feed_url: str,
        cache: Optional[InMemoryCache] = None,
        cache_ttl: float = 30,
        default_language: str = "en",
    ):
        self.http_client = http_client
        self.feed_url = feed_url
        self.cache = cache
        self.cache_ttl = cache_ttl
        self.default_language = default_language

    async def fetch_json(self, url: str) -> Optional[Dict[str, Any]]:
        """Fetch one GBFS document; None on any transport, status or decoding failure."""
        if self.cache is not None:
            cached = await self.cache.get(url)
            if cached is not None:
                UPSTREAM_REQUESTS.labels(upstream="gbfs", outcome="cache_hit").inc()
                return cached

        started = time.perf_counter()
        try:
            response = await self.http_client.get(url, headers={"Accept": "application/json"})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            UPSTREAM_REQUESTS.labels(upstream="gbfs", outcome="error").inc()
            logger.warning("GBFS feed returned error status", url=url, status=e.response.status_code)
            return None
        except (httpx.HTTPError, ValueError) as e:
            UPSTREAM_REQUESTS.labels(upstream="gbfs", outcome="error").inc()
            logger.warning("GBFS feed fetch failed", url=url, error=str(e) or e.__class__.__name__)
            return None
        finally:
            UPSTREAM_LATENCY.labels(upstream="gbfs").observe(time.perf_counter() - started)

        if not isinstance(payload, dict):
            UPSTREAM_REQUESTS.labels(upstream="gbfs", outcome="error").inc()
            logger.warning("GBFS feed body is not an object", url=url)
            return None

        UPSTREAM_REQUESTS.labels(upstream="gbfs", outcome="ok").inc()
        if self.cache is not None:
            await self.cache.set(url, payload, ttl=self.cache_ttl)
        return payload

    async def get_feed_map(self) -> Optional[Dict[str, str]]:
        """Resolve sub-feed names to URLs from the discovery document."""
        document = await self.fetch_json(self.feed_url)
        if document is None:
            logger.error("Failed to fetch GBFS discovery document", url=self.feed_url)
            return None

        feeds = select_feed_list(document, self.default_language)
        feed_map = build_feed_map(feeds) if feeds else {}
        if not feed_map:
            logger.error("Invalid GBFS discovery document", url=self.feed_url)
            return None
        return feed_map

    async def get_snapshot(self) -> Optional[FeedSnapshot]:
        """Fetch every offered sub-feed concurrently and merge them."""
        feed_map = await self.get_feed_map()
        if feed_map is None:
            return None

        wanted = [(name, url) for name, url in feed_map.items() if name in FEED_PARSERS]
        results = await gather_settled(self.fetch_json(url) for _, url in wanted)

        parsed: Dict[str, Any] = {}
        for (name, url), result in zip(wanted, results):
            if not result.ok:
                logger.warning("GBFS sub-feed failed", feed=name, url=url, error=str(result.error))
                continue
            if result.value is None:
                continue
            if not isinstance(result.value.get("data"), dict):
                logger.warning("GBFS sub-feed has no data object", feed=name, url=url, error="missing data")
                continue
            parsed[name] = FEED_PARSERS[name](result.value)

        system = parsed.get(SYSTEM_INFORMATION) or SystemInformation()
        snapshot = FeedSnapshot(
            system_id=system.system_id,
            name=system.name,
            operator=system.operator,
            stations=parsed.get(STATION_INFORMATION, []),
            station_statuses=parsed.get(STATION_STATUS, []),
            free_vehicles=parsed.get(FREE_BIKE_STATUS, []),
            vehicle_types=parsed.get(VEHICLE_TYPES, []),
            last_updated=datetime.now(timezone.utc),
        )
        logger.info(
            "GBFS snapshot built",
            url=self.feed_url,
            feeds=sorted(parsed),
            stations=len(snapshot.stations),
            free_vehicles=len(snapshot.free_vehicles),
        )
        return snapshot
