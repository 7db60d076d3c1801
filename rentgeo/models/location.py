"""Location model with PostGIS geography support.

This module defines the Location model which stores the resolved
coordinate of a listing as a PostGIS geography point, so distances
and radius predicates evaluate in meters.
"""

from typing import TYPE_CHECKING, Optional

from geoalchemy2 import Geography
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentgeo.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from rentgeo.models.property import Property


class Location(Base, TimestampMixin):
    """Represents the geographic record owned by exactly one property.

    Uses a PostGIS geography Point (SRID 4326 / WGS 84). Created when a
    property is listed and only mutated through a location update.

    Attributes:
        id: Primary key identifier.
        address: Street address.
        city: City name.
        state: State or region.
        country: Country name.
        postal_code: ZIP/postal code.
        coordinates: PostGIS geography Point (longitude, latitude).
        property: The owning Property.
    """

    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    country: Mapped[str] = mapped_column(String(100), nullable=False)
    postal_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Spatial index is created by GeoAlchemy2 (spatial_index=True default)
    coordinates: Mapped[str] = mapped_column(
        Geography(geometry_type="POINT", srid=4326),
        nullable=False,
    )

    property: Mapped[Optional["Property"]] = relationship(
        "Property",
        back_populates="location",
        uselist=False,
    )

    def address_fields(self) -> dict:
        """Address columns flattened onto search results."""
        return {
            "location_id": self.id,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "country": self.country,
            "postal_code": self.postal_code,
        }


# Import related models for relationship resolution
from rentgeo.models.property import Property  # noqa: E402,F811
