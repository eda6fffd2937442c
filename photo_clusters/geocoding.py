"""
Reverse geocoding for place clusters.

NominatimGeocoder resolves coordinates through OpenStreetMap's Nominatim
`reverse` endpoint. It keeps to the public usage policy: at most one request
per second, an identifying User-Agent, and an in-memory cache so repeated
refreshes of the same places do not hit the API again.
"""

import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import requests

from .models import PlaceCluster
from .error_handling import NamingError

logger = logging.getLogger(__name__)

NOMINATIM_URL = "https://nominatim.openstreetmap.org/reverse"
USER_AGENT = "photo-clusters/0.1 (photo library clustering)"

# Nominatim returns the most specific settlement it knows under one of these
CITY_KEYS = ("city", "town", "village", "municipality", "hamlet")


@dataclass
class GeocodeResult:
    city_name: Optional[str] = None
    country_name: Optional[str] = None


class NominatimGeocoder:
    MIN_REQUEST_INTERVAL = 1.0
    REQUEST_TIMEOUT = 10.0
    CACHE_PRECISION = 3  # decimal places, roughly 100 m

    def __init__(self, url: str = NOMINATIM_URL, user_agent: str = USER_AGENT,
                 language: str = "en", session: Optional[requests.Session] = None):
        self.url = url
        self.language = language
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})
        self._last_request_time = 0.0
        self._cache: Dict[Tuple[float, float], GeocodeResult] = {}

    def _wait_for_rate_limit(self):
        elapsed = time.monotonic() - self._last_request_time
        if elapsed < self.MIN_REQUEST_INTERVAL:
            time.sleep(self.MIN_REQUEST_INTERVAL - elapsed)
        self._last_request_time = time.monotonic()

    def reverse_geocode(self, latitude: float, longitude: float) -> GeocodeResult:
        """
        Resolve coordinates to a city and country.

        Raises:
            NamingError: If the request fails or the response is unusable
        """
        key = (round(latitude, self.CACHE_PRECISION), round(longitude, self.CACHE_PRECISION))
        if key in self._cache:
            return self._cache[key]

        self._wait_for_rate_limit()
        try:
            response = self.session.get(
                self.url,
                params={
                    "format": "jsonv2",
                    "lat": latitude,
                    "lon": longitude,
                    "zoom": 10,
                    "addressdetails": 1,
                    "accept-language": self.language,
                },
                timeout=self.REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise NamingError(f"Reverse geocoding failed for ({latitude}, {longitude}): {e}") from e

        if "error" in data:
            raise NamingError(f"Nominatim error for ({latitude}, {longitude}): {data['error']}")

        address = data.get("address") or {}
        result = GeocodeResult(
            city_name=next((address[k] for k in CITY_KEYS if address.get(k)), None),
            country_name=address.get("country"),
        )
        self._cache[key] = result
        return result


def compose_place_name(result: Optional[GeocodeResult]) -> Optional[str]:
    if result is None:
        return None
    parts = [part for part in (result.city_name, result.country_name) if part]
    return ", ".join(parts) or None


def name_place_clusters(clusters: List[PlaceCluster], geocoder) -> List[PlaceCluster]:
    """
    Label each cluster from its centroid. A cluster whose lookup fails stays
    unnamed and the rest of the batch continues.
    """
    named = 0
    for cluster in clusters:
        try:
            cluster.name = compose_place_name(geocoder.reverse_geocode(cluster.lat, cluster.lon))
        except Exception as e:
            logger.warning(f"Could not name place {cluster.id}: {e}")
            cluster.name = None
        if cluster.name:
            named += 1

    logger.info(f"Named {named} of {len(clusters)} places")
    return clusters
