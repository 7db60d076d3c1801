"""
Shared fixtures for the geospatial search tests.

All tests run against the in-memory spatial store; no database is
needed. Listings are seeded along the meridian through lower
Manhattan so their great-circle distance to the center is exact.
"""

import math
import os
import random
from typing import Dict

# Must be set before rentgeo.core.config builds its settings
os.environ["STORE_BACKEND"] = "memory"
os.environ.setdefault("APP_ENV", "testing")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from rentgeo.geo.geocoding import StaticTableGeocoder  # noqa: E402
from rentgeo.geo.geometry import EARTH_RADIUS_METERS, Coordinate  # noqa: E402
from rentgeo.main import create_application  # noqa: E402
from rentgeo.models.property import Property  # noqa: E402
from rentgeo.services.geospatial import GeospatialService  # noqa: E402
from rentgeo.stores.memory import InMemoryStore  # noqa: E402

CENTER = Coordinate(lat=40.7128, lng=-74.0060)


def shifted(point: Coordinate, north_meters: float) -> Coordinate:
    """Point exactly ``north_meters`` north (negative for south) of ``point``."""
    return Coordinate(
        lat=point.lat + math.degrees(north_meters / EARTH_RADIUS_METERS),
        lng=point.lng,
    )


def add_listing(
    store: InMemoryStore,
    name: str,
    point: Coordinate,
    city: str = "New York",
    **attrs,
) -> Property:
    location = store.add_location(
        point,
        address=f"{name} Street",
        city=city,
        state="NY",
        country="USA",
        postal_code="10001",
    )
    return store.add_property(location, name=name, **attrs)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


def pytest_collection_modifyitems(config, items):
    # HTTP tests run the full application stack; everything else is unit level
    for item in items:
        if item.path.name == "test_api.py":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def listings(store) -> Dict[str, Property]:
    """Four listings at 2km N, 3km S, 8km N and 15km N of CENTER."""
    return {
        "near": add_listing(
            store, "Near Loft", shifted(CENTER, 2000),
            price_per_month=2000, property_type="Apartment", beds=2, baths=1,
            amenities=["Pool"],
        ),
        "south": add_listing(
            store, "South Studio", shifted(CENTER, -3000),
            price_per_month=1200, property_type="Rooms", beds=1, baths=1,
            amenities=["WiFi"],
        ),
        "mid": add_listing(
            store, "Midtown Villa", shifted(CENTER, 8000),
            price_per_month=3500, property_type="Villa", beds=3, baths=2,
            amenities=["Gym"],
        ),
        "far": add_listing(
            store, "Far Apartment", shifted(CENTER, 15000),
            price_per_month=1500, property_type="Apartment", beds=1, baths=1.5,
            amenities=["Pool", "Parking"],
        ),
    }


@pytest.fixture
def geocoder() -> StaticTableGeocoder:
    return StaticTableGeocoder(rng=random.Random(1234))


@pytest.fixture
def service(store, geocoder) -> GeospatialService:
    return GeospatialService(store=store, geocoder=geocoder)


@pytest.fixture
def client(store, geocoder):
    app = create_application(geocoder=geocoder, memory_store=store)
    with TestClient(app) as test_client:
        yield test_client
