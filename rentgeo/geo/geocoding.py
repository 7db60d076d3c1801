"""Address-to-coordinate resolution.

Two providers implement the same ``resolve`` contract:

- ``StaticTableGeocoder`` looks the city up in a fixed table of major
  cities, falls back to a default coordinate, and jitters the result so
  listings in one city do not stack on a single point.
- ``HttpGeocoder`` asks a Nominatim-style JSON endpoint and returns the
  same default coordinate when nothing matches.

``geocoder_from_settings`` picks one based on configuration.
"""

import hashlib
import random
import re
from abc import ABC, abstractmethod
from typing import Dict, Optional

import httpx
from loguru import logger

from rentgeo.core.config import Settings, settings
from rentgeo.core.exceptions import ValidationException
from rentgeo.geo.geometry import Coordinate

KNOWN_CITIES: Dict[str, Coordinate] = {
    "new york": Coordinate(lat=40.7128, lng=-74.0060),
    "brooklyn": Coordinate(lat=40.6782, lng=-73.9442),
    "manhattan": Coordinate(lat=40.7831, lng=-73.9712),
    "queens": Coordinate(lat=40.7282, lng=-73.7949),
    "chicago": Coordinate(lat=41.8781, lng=-87.6298),
    "los angeles": Coordinate(lat=34.0522, lng=-118.2437),
    "san francisco": Coordinate(lat=37.7749, lng=-122.4194),
    "miami": Coordinate(lat=25.7617, lng=-80.1918),
    "austin": Coordinate(lat=30.2672, lng=-97.7431),
    "singapore": Coordinate(lat=1.3521, lng=103.8198),
    "london": Coordinate(lat=51.5074, lng=-0.1278),
    "paris": Coordinate(lat=48.8566, lng=2.3522),
    "tokyo": Coordinate(lat=35.6762, lng=139.6503),
    "sydney": Coordinate(lat=-33.8688, lng=151.2093),
    "toronto": Coordinate(lat=43.6532, lng=-79.3832),
}

DEFAULT_COORDINATE = KNOWN_CITIES["new york"]

_WHITESPACE = re.compile(r"\s+")


def normalize_city(city: str) -> str:
    """Lowercase and collapse runs of whitespace."""
    return _WHITESPACE.sub(" ", city.strip().lower())


def _require_city(city: Optional[str]) -> str:
    if city is None or not city.strip():
        raise ValidationException("City is required", details={"field": "city"})
    return city


class Geocoder(ABC):
    """Resolves a free-text address into a coordinate."""

    @abstractmethod
    async def resolve(
        self,
        address: Optional[str],
        city: Optional[str],
        state: Optional[str] = None,
        country: Optional[str] = None,
    ) -> Coordinate:
        """Resolve an address.

        Raises:
            ValidationException: If ``city`` is empty or missing.
        """


class StaticTableGeocoder(Geocoder):
    """Stand-in geocoder backed by ``KNOWN_CITIES``.

    With ``deterministic=False`` every call draws a fresh offset, so
    identical input yields different coordinates. With
    ``deterministic=True`` the offset is seeded from the full normalized
    address and repeated calls agree.
    """

    def __init__(
        self,
        jitter_degrees: float = 0.005,
        deterministic: bool = False,
        rng: Optional[random.Random] = None,
    ) -> None:
        if jitter_degrees < 0:
            raise ValueError("jitter_degrees must be non-negative")
        self.jitter_degrees = jitter_degrees
        self.deterministic = deterministic
        self._rng = rng or random.Random()

    def lookup(self, city: str) -> Coordinate:
        """Return the table coordinate for ``city`` without jitter."""
        return KNOWN_CITIES.get(normalize_city(city), DEFAULT_COORDINATE)

    def _offset_source(self, *parts: Optional[str]) -> random.Random:
        if not self.deterministic:
            return self._rng
        key = "|".join(normalize_city(part or "") for part in parts)
        seed = int.from_bytes(hashlib.sha256(key.encode("utf-8")).digest()[:8], "big")
        return random.Random(seed)

    async def resolve(
        self,
        address: Optional[str],
        city: Optional[str],
        state: Optional[str] = None,
        country: Optional[str] = None,
    ) -> Coordinate:
        city = _require_city(city)
        base = self.lookup(city)
        if normalize_city(city) not in KNOWN_CITIES:
            logger.debug(f"City {city!r} not in lookup table, using default coordinate")

        source = self._offset_source(address, city, state, country)
        offset_lat = source.uniform(-self.jitter_degrees, self.jitter_degrees)
        offset_lng = source.uniform(-self.jitter_degrees, self.jitter_degrees)

        # Clamp so jitter near the poles or the antimeridian stays valid
        return Coordinate(
            lat=max(-90.0, min(90.0, base.lat + offset_lat)),
            lng=max(-180.0, min(180.0, base.lng + offset_lng)),
        )


class HttpGeocoder(Geocoder):
    """Geocoder backed by a Nominatim-compatible ``/search`` endpoint."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def resolve(
        self,
        address: Optional[str],
        city: Optional[str],
        state: Optional[str] = None,
        country: Optional[str] = None,
    ) -> Coordinate:
        city = _require_city(city)
        query = ", ".join(part for part in (address, city, state, country) if part)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(
                f"{self.base_url}/search",
                params={"q": query, "format": "json", "limit": 1},
            )
            response.raise_for_status()
            matches = response.json()

        if not matches:
            logger.warning(f"No geocoding match for {query!r}, using default coordinate")
            return DEFAULT_COORDINATE
        best = matches[0]
        return Coordinate(lat=float(best["lat"]), lng=float(best["lon"]))


def geocoder_from_settings(config: Settings = settings) -> Geocoder:
    """Build the geocoder selected by ``GEOCODER_PROVIDER``."""
    if config.GEOCODER_PROVIDER == "http" and config.GEOCODER_BASE_URL:
        return HttpGeocoder(config.GEOCODER_BASE_URL, timeout=config.GEOCODER_TIMEOUT_SECONDS)
    return StaticTableGeocoder(
        jitter_degrees=config.GEOCODER_JITTER_DEGREES,
        deterministic=config.GEOCODER_DETERMINISTIC_JITTER,
    )
