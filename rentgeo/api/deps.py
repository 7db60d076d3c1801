"""Dependency injection utilities for API endpoints.

The spatial store is chosen per request from ``STORE_BACKEND``: a
PostGIS store bound to a request-scoped session, or the application's
in-memory store.
"""

from contextlib import asynccontextmanager
from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request

from rentgeo.core.config import settings
from rentgeo.geo.geocoding import Geocoder
from rentgeo.services.database import get_db
from rentgeo.services.geospatial import GeospatialService
from rentgeo.stores.base import SpatialStore
from rentgeo.stores.postgis import PostGISStore

db_session = asynccontextmanager(get_db)


async def get_store(request: Request) -> AsyncGenerator[SpatialStore, None]:
    """Yield the spatial store for this request.

    For PostGIS the session commits after the endpoint returns and rolls
    back if it raised.
    """
    if settings.STORE_BACKEND == "memory":
        yield request.app.state.memory_store
        return

    async with db_session() as session:
        yield PostGISStore(session)


def get_geocoder(request: Request) -> Geocoder:
    return request.app.state.geocoder


def get_geospatial_service(
    store: Annotated[SpatialStore, Depends(get_store)],
    geocoder: Annotated[Geocoder, Depends(get_geocoder)],
) -> GeospatialService:
    return GeospatialService(store=store, geocoder=geocoder)


# Type alias for the service dependency
GeoService = Annotated[GeospatialService, Depends(get_geospatial_service)]
StoreDep = Annotated[SpatialStore, Depends(get_store)]
