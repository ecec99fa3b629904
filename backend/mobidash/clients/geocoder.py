"""
Reverse geocoding through Nominatim (OpenStreetMap).
"""

import time
from typing import Optional

import httpx
import structlog

from mobidash.core.metrics import UPSTREAM_LATENCY, UPSTREAM_REQUESTS

logger = structlog.get_logger()


class ReverseGeocoder:
    """Turns a coordinate into a short street address."""

    def __init__(self, http_client: httpx.AsyncClient, url: str):
        self.http_client = http_client
        self.url = url

    async def reverse(self, lat: float, lng: float) -> Optional[str]:
        """Return "<house number> <road>" for the point, or None."""
        params = {
            "lat": lat,
            "lon": lng,
            "format": "json",
            "addressdetails": 1,
        }

        started = time.perf_counter()
        try:
            response = await self.http_client.get(self.url, params=params)
            if response.status_code >= 400:
                UPSTREAM_REQUESTS.labels(upstream="geocoder", outcome="error").inc()
                logger.warning(
                    "Reverse geocoding returned error status",
                    url=self.url,
                    status=response.status_code,
                    lat=lat,
                    lng=lng,
                )
                return None
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            UPSTREAM_REQUESTS.labels(upstream="geocoder", outcome="error").inc()
            logger.error(
                "Reverse geocoding error",
                url=self.url,
                lat=lat,
                lng=lng,
                error=str(e) or e.__class__.__name__,
            )
            return None
        finally:
            UPSTREAM_LATENCY.labels(upstream="geocoder").observe(time.perf_counter() - started)

        if not isinstance(payload, dict):
            UPSTREAM_REQUESTS.labels(upstream="geocoder", outcome="error").inc()
            logger.warning("Reverse geocoding body is not an object", url=self.url, error="unexpected body")
            return None

        UPSTREAM_REQUESTS.labels(upstream="geocoder", outcome="ok").inc()
        address = payload.get("address")
        if not isinstance(address, dict):
            return None

        parts = [str(address[key]) for key in ("house_number", "road") if address.get(key)]
        return " ".join(parts) if parts else None
