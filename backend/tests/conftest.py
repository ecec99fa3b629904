"""Shared fixtures: a fake upstream behind httpx.MockTransport and an app wired to it."""

from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

from mobidash.config import Settings
from mobidash.core.operators import Operator
from mobidash.main import create_app

PARKING_URL = "https://data.example.test/resource/parking.json"
GEOCODE_URL = "https://geocode.example.test/reverse"


class FakeUpstream:
    """Routes outbound requests to canned responses and records every call."""

    def __init__(self):
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.calls: List[httpx.Request] = []

    @staticmethod
    def key(url: httpx.URL) -> str:
        return f"{url.scheme}://{url.host}{url.path}"

    def add(
        self,
        url: str,
        json: Any = None,
        status_code: int = 200,
        error: Optional[Exception] = None,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            if error is not None:
                raise error
            return httpx.Response(status_code, json=json)

        self.routes[self.key(httpx.URL(url))] = handler or respond

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        route = self.routes.get(self.key(request.url))
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        return route(request)

    def calls_to(self, url: str) -> List[httpx.Request]:
        target = self.key(httpx.URL(url))
        return [c for c in self.calls if self.key(c.url) == target]


def register_gbfs_system(
    upstream: FakeUpstream,
    base: str,
    feeds: Optional[Dict[str, Any]] = None,
    language: str = "en",
) -> str:
    """Serve a discovery document at ``<base>/gbfs.json`` plus one route per sub-feed."""
    feeds = feeds if feeds is not None else default_feeds()
    discovery_url = f"{base}/gbfs.json"
    entries = []
    for name, payload in feeds.items():
        url = f"{base}/{name}.json"
        entries.append({"name": name, "url": url})
        upstream.add(url, json=payload)
    upstream.add(
        discovery_url,
        json={"last_updated": 1700000000, "ttl": 30, "version": "2.3", "data": {language: {"feeds": entries}}},
    )
    return discovery_url


def default_feeds() -> Dict[str, Any]:
    return {
        "system_information": {
            "data": {"system_id": "test_bikes", "name": "Test Bikes", "operator": "Test Co", "timezone": "America/New_York"}
        },
        "station_information": {
            "data": {
                "stations": [
                    {"station_id": "s1", "name": "Broadway & W 60 St", "lat": 40.769, "lon": -73.981, "capacity": 20},
                    {"station_id": "s2", "name": "Hudson St", "lat": 40.72, "lon": -74.01, "address": "12 Hudson St"},
                ]
            }
        },
        "station_status": {
            "data": {
                "stations": [
                    {
                        "station_id": "s1",
                        "num_bikes_available": 7,
                        "num_docks_available": 13,
                        "is_installed": 1,
                        "is_renting": 1,
                        "is_returning": 1,
                        "last_reported": 1700000000,
                    }
                ]
            }
        },
        "free_bike_status": {
            "data": {
                "bikes": [
                    {"bike_id": "b1", "lat": 40.75, "lon": -73.99, "is_reserved": False, "is_disabled": False},
                    {"bike_id": "b2", "lat": 40.76, "lon": -73.98, "is_reserved": False, "is_disabled": True},
                ]
            }
        },
        "vehicle_types": {
            "data": {
                "vehicle_types": [
                    {"vehicle_type_id": "1", "form_factor": "bicycle", "propulsion_type": "human"}
                ]
            }
        },
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(
        gbfs_cache_ttl=0,
        parking_dataset_url=PARKING_URL,
        geocode_url=GEOCODE_URL,
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def test_operators() -> List[Operator]:
    return [
        Operator(id="alpha", name="Alpha Bikes", location="Alpha City", gbfs_url="https://alpha.example.test/gbfs.json"),
        Operator(id="beta", name="Beta Bikes", location="Beta City", gbfs_url="https://beta.example.test/gbfs.json"),
        Operator(id="gamma", name="Gamma Bikes", location="Gamma City", gbfs_url="https://gamma.example.test/gbfs.json"),
        Operator(id="delta", name="Delta Bikes", location="Delta City", gbfs_url="https://delta.example.test/gbfs.json"),
    ]


@pytest_asyncio.fixture
async def http_client(upstream: FakeUpstream):
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream.handle)) as client:
        yield client


@pytest.fixture
def app(settings: Settings, http_client: httpx.AsyncClient):
    return create_app(settings=settings, http_client=http_client)


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as api:
        yield api


@pytest.fixture
def feeds() -> Dict[str, Any]:
    return default_feeds()


@pytest.fixture
def gbfs_system(upstream: FakeUpstream):
    def register(base: str, feeds: Optional[Dict[str, Any]] = None, language: str = "en") -> str:
        return register_gbfs_system(upstream, base, feeds, language)

    return register
