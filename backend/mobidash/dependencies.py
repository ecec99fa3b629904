"""
Process-wide service container and FastAPI dependency accessors.
"""

from dataclasses import dataclass

import httpx
from fastapi import Request

from mobidash.clients.geocoder import ReverseGeocoder
from mobidash.clients.parking import ParkingClient
from mobidash.config import Settings
from mobidash.services.orchestrator import OperatorFeedService
from mobidash.utils.cache import InMemoryCache


@dataclass
class Services:
    """Long-lived collaborators, built once at startup and shared by all requests."""

    settings: Settings
    http_client: httpx.AsyncClient
    feed_cache: InMemoryCache
    operators: OperatorFeedService
    parking: ParkingClient


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=settings.upstream_timeout,
        headers={"User-Agent": settings.user_agent},
        follow_redirects=True,
    )


def build_services(settings: Settings, http_client: httpx.AsyncClient) -> Services:
    feed_cache = InMemoryCache(default_ttl=settings.gbfs_cache_ttl)
    geocoder = ReverseGeocoder(http_client, settings.geocode_url)
    return Services(
        settings=settings,
        http_client=http_client,
        feed_cache=feed_cache,
        operators=OperatorFeedService(http_client, settings, cache=feed_cache),
        parking=ParkingClient(http_client, settings, geocoder),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
