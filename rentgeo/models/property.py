"""Property model for rental listings.

Only the columns the geospatial search filters on or returns are
modelled here; listing management owns the rest of the record.
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Float, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentgeo.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from rentgeo.models.location import Location


class Property(Base, TimestampMixin):
    """Represents a rental listing.

    Attributes:
        id: Primary key identifier.
        name: Listing title.
        description: Optional long description.
        price_per_month: Monthly rent.
        property_type: Category such as Apartment or Villa.
        beds: Number of bedrooms.
        baths: Number of bathrooms (halves allowed).
        square_feet: Optional floor area.
        amenities: Set of amenity tags such as Pool or Gym.
        location_id: Foreign key to the owned Location (1:1).
        location: Related Location model.
    """

    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price_per_month: Mapped[float] = mapped_column(Float, nullable=False, index=True)
    property_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    beds: Mapped[int] = mapped_column(Integer, nullable=False)
    baths: Mapped[float] = mapped_column(Float, nullable=False)
    square_feet: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    amenities: Mapped[List[str]] = mapped_column(
        ARRAY(String(50)),
        nullable=False,
        default=list,
    )
    location_id: Mapped[int] = mapped_column(
        ForeignKey("locations.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
        index=True,
    )

    location: Mapped["Location"] = relationship(
        "Location",
        back_populates="property",
    )


# Import related models for relationship resolution
from rentgeo.models.location import Location  # noqa: E402,F811
