"""Request and response bodies for the geospatial API.

Request field names follow the camelCase used by the web client;
response metadata uses snake_case keys.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from rentgeo.geo.geometry import BoundingBox, Coordinate
from rentgeo.search.queries import SearchFilters


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CoordinatesSchema(CamelModel):
    lat: float
    lng: float

    def to_coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)

    @classmethod
    def from_coordinate(cls, point: Coordinate) -> "CoordinatesSchema":
        return cls(lat=point.lat, lng=point.lng)


class FiltersSchema(CamelModel):
    property_type: Optional[str] = Field(None, alias="propertyType")
    min_price: Optional[float] = Field(None, alias="minPrice")
    max_price: Optional[float] = Field(None, alias="maxPrice")
    beds: Optional[int] = None
    baths: Optional[float] = None
    amenities: List[str] = Field(default_factory=list)

    def to_filters(self) -> SearchFilters:
        return SearchFilters.from_values(
            property_type=self.property_type,
            min_price=self.min_price,
            max_price=self.max_price,
            min_beds=self.beds,
            min_baths=self.baths,
            amenities=self.amenities,
        )


class BoundsSchema(CamelModel):
    north: float
    south: float
    east: float
    west: float

    def to_bounds(self) -> BoundingBox:
        return BoundingBox(north=self.north, south=self.south, east=self.east, west=self.west)


class GeocodeRequest(CamelModel):
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


class GeocodeResponse(CamelModel):
    coordinates: CoordinatesSchema
    address: GeocodeRequest


class NearPointRequest(CamelModel):
    center_point: CoordinatesSchema = Field(..., alias="centerPoint")
    radius_km: float = Field(..., alias="radiusKm")
    limit: Optional[int] = None
    offset: int = 0


class ProximitySearchRequest(FiltersSchema):
    center_point: CoordinatesSchema = Field(..., alias="centerPoint")
    radius_km: float = Field(..., alias="radiusKm")
    limit: Optional[int] = None
    offset: int = 0


class InBoundsRequest(CamelModel):
    bounds: BoundsSchema
    filters: Optional[FiltersSchema] = None


class DistanceRequest(CamelModel):
    point1: CoordinatesSchema
    point2: CoordinatesSchema


class DistanceResponse(CamelModel):
    distance_meters: float
    distance_km: float
    distance_miles: float
    point1: CoordinatesSchema
    point2: CoordinatesSchema


class UpdateLocationRequest(CamelModel):
    coordinates: CoordinatesSchema


class UpdateLocationResponse(CamelModel):
    property_id: int
    location_id: int
    new_coordinates: CoordinatesSchema


class RegisterLocationRequest(CamelModel):
    address: str
    city: str
    state: Optional[str] = None
    country: str
    postal_code: Optional[str] = Field(None, alias="postalCode")


class LocationCreatedResponse(CamelModel):
    location_id: int
    coordinates: CoordinatesSchema


class PropertiesResponse(CamelModel):
    """List of flattened property records plus mode-specific metadata."""

    properties: List[Dict[str, Any]]
    meta: Dict[str, Any]
