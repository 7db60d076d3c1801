"""Geospatial search endpoints.

Thin HTTP mapping over ``GeospatialService``. Validation and store
errors are raised as ``AppException`` subclasses and rendered by the
error handlers in ``rentgeo.middleware.error_handler``.
"""

from typing import Optional

from fastapi import APIRouter, Query, status

from rentgeo.api.deps import GeoService
from rentgeo.search.pagination import list_meta, near_point_meta
from rentgeo.schemas.geospatial import (
    CoordinatesSchema,
    DistanceRequest,
    DistanceResponse,
    GeocodeRequest,
    GeocodeResponse,
    InBoundsRequest,
    LocationCreatedResponse,
    NearPointRequest,
    PropertiesResponse,
    ProximitySearchRequest,
    RegisterLocationRequest,
    UpdateLocationRequest,
    UpdateLocationResponse,
)

router = APIRouter(prefix="/geo", tags=["Geospatial"])


@router.post("/geocode", response_model=GeocodeResponse)
async def geocode(body: GeocodeRequest, service: GeoService) -> GeocodeResponse:
    """Resolve an address to coordinates. ``city`` is required."""
    point = await service.geocode_address(body.address, body.city, body.state, body.country)
    return GeocodeResponse(coordinates=CoordinatesSchema.from_coordinate(point), address=body)


@router.post("/properties/near-point", response_model=PropertiesResponse)
async def near_point(body: NearPointRequest, service: GeoService) -> PropertiesResponse:
    """Properties within ``radiusKm`` of a point, nearest first, paginated."""
    center = body.center_point.to_coordinate()
    page = await service.find_properties_near_point(
        center,
        body.radius_km,
        limit=body.limit,
        offset=body.offset,
    )
    return PropertiesResponse(
        properties=page.records(),
        meta=near_point_meta(center, body.radius_km, page),
    )


@router.post("/properties/proximity-search", response_model=PropertiesResponse)
async def proximity_search(
    body: ProximitySearchRequest,
    service: GeoService,
) -> PropertiesResponse:
    """Radius search combined with price, room, type and amenity filters."""
    hits = await service.proximity_search(
        body.center_point.to_coordinate(),
        body.radius_km,
        filters=body.to_filters(),
        limit=body.limit,
        offset=body.offset,
    )
    return PropertiesResponse(
        properties=[hit.to_record() for hit in hits],
        meta=list_meta(len(hits), search_params=body.model_dump(by_alias=True)),
    )


@router.post("/properties/in-bounds", response_model=PropertiesResponse)
async def in_bounds(body: InBoundsRequest, service: GeoService) -> PropertiesResponse:
    """Properties inside a map viewport, ordered by id."""
    hits = await service.find_properties_in_bounds(
        body.bounds.to_bounds(),
        body.filters.to_filters() if body.filters else None,
    )
    return PropertiesResponse(
        properties=[hit.to_record() for hit in hits],
        meta=list_meta(
            len(hits),
            bounds=body.bounds.model_dump(),
            filters=body.filters.model_dump(by_alias=True) if body.filters else None,
        ),
    )


@router.get("/properties/search-by-location", response_model=PropertiesResponse)
async def search_by_location(
    service: GeoService,
    q: str = Query(..., description="Text matched against address, city, state and name"),
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
) -> PropertiesResponse:
    hits = await service.search_by_location_text(q, limit=limit, offset=offset)
    return PropertiesResponse(
        properties=[hit.to_record() for hit in hits],
        meta=list_meta(
            len(hits),
            search_query=q,
            limit=limit or service.config.TEXT_SEARCH_DEFAULT_LIMIT,
            offset=offset,
        ),
    )


@router.get("/properties/{property_id}/nearest", response_model=PropertiesResponse)
async def nearest(
    property_id: int,
    service: GeoService,
    radius: Optional[float] = Query(None, description="Search radius in kilometers"),
    limit: Optional[int] = Query(None, ge=1),
) -> PropertiesResponse:
    """Closest neighbors of an existing property, excluding the property itself."""
    radius_km = service.config.NEAREST_DEFAULT_RADIUS_KM if radius is None else radius
    limit = service.config.NEAREST_DEFAULT_LIMIT if limit is None else limit
    hits = await service.find_nearest_properties(property_id, radius_km, limit)
    return PropertiesResponse(
        properties=[hit.to_record() for hit in hits],
        meta=list_meta(
            len(hits),
            reference_property_id=property_id,
            radius_km=radius_km,
            limit=limit,
        ),
    )


@router.post("/distance", response_model=DistanceResponse)
async def distance(body: DistanceRequest, service: GeoService) -> DistanceResponse:
    result = await service.calculate_distance(
        body.point1.to_coordinate(),
        body.point2.to_coordinate(),
    )
    return DistanceResponse(
        distance_meters=result.meters,
        distance_km=result.kilometers,
        distance_miles=result.miles,
        point1=body.point1,
        point2=body.point2,
    )


@router.put("/properties/{property_id}/location", response_model=UpdateLocationResponse)
async def update_location(
    property_id: int,
    body: UpdateLocationRequest,
    service: GeoService,
) -> UpdateLocationResponse:
    """Move the location owned by a property to new coordinates."""
    location_id = await service.relocate_property(property_id, body.coordinates.to_coordinate())
    return UpdateLocationResponse(
        property_id=property_id,
        location_id=location_id,
        new_coordinates=body.coordinates,
    )


@router.post(
    "/locations",
    response_model=LocationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_location(
    body: RegisterLocationRequest,
    service: GeoService,
) -> LocationCreatedResponse:
    """Geocode an address and store it as a new listing location."""
    location_id, point = await service.register_location(
        body.address,
        body.city,
        body.state,
        body.country,
        body.postal_code,
    )
    return LocationCreatedResponse(
        location_id=location_id,
        coordinates=CoordinatesSchema.from_coordinate(point),
    )
