"""FastAPI application entry point.

This module initializes the FastAPI application with CORS,
middleware, the spatial store backend and route registration.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from rentgeo.api.endpoints import geospatial, health
from rentgeo.api.endpoints.health import VERSION
from rentgeo.core.config import settings
from rentgeo.core.logging import setup_logging
from rentgeo.geo.geocoding import Geocoder, geocoder_from_settings
from rentgeo.middleware.error_handler import ErrorHandlerMiddleware, setup_exception_handlers
from rentgeo.services.database import get_engine
from rentgeo.stores.memory import InMemoryStore


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log startup and release pooled database connections on shutdown."""
    logger.info("Starting rental geospatial search API...")
    logger.info(f"Environment: {settings.APP_ENV}")
    logger.info(f"Store backend: {settings.STORE_BACKEND}")

    yield

    logger.info("Shutting down rental geospatial search API...")
    if settings.STORE_BACKEND == "postgis":
        await get_engine().dispose()


def create_application(
    geocoder: Optional[Geocoder] = None,
    memory_store: Optional[InMemoryStore] = None,
) -> FastAPI:
    """Build the API application.

    Args:
        geocoder: Address resolver shared by all requests. Built from
            settings when omitted.
        memory_store: Store served when ``STORE_BACKEND=memory``. A new
            empty store is created when omitted.
    """
    setup_logging()

    app = FastAPI(
        title="Rental Geospatial Search API",
        description=(
            "Proximity, bounding-box and nearest-neighbor search over "
            "rental listings, with geocoding and location updates."
        ),
        version=VERSION,
        lifespan=lifespan,
    )

    # Read per request by rentgeo.api.deps
    app.state.geocoder = geocoder or geocoder_from_settings()
    app.state.memory_store = memory_store if memory_store is not None else InMemoryStore()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(ErrorHandlerMiddleware)
    setup_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(geospatial.router, prefix=settings.API_PREFIX)

    return app


app = create_application()
