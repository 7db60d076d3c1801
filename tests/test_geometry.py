"""Unit tests for coordinate validation, geometry text and distances."""

import math

import pytest

from rentgeo.core.exceptions import ValidationException
from rentgeo.geo.geometry import (
    BoundingBox,
    Coordinate,
    Distance,
    ewkt,
    haversine_meters,
    km_to_meters,
    point_wkt,
    polygon_wkt,
)

NEW_YORK = Coordinate(lat=40.7128, lng=-74.0060)
CHICAGO = Coordinate(lat=41.8781, lng=-87.6298)


class TestCoordinate:
    def test_accepts_boundary_values(self):
        assert Coordinate(lat=90, lng=-180) == Coordinate(lat=90.0, lng=-180.0)

    @pytest.mark.parametrize("lat,lng", [(math.nan, 0.0), (0.0, math.inf), (-math.inf, 1.0)])
    def test_rejects_non_finite(self, lat, lng):
        with pytest.raises(ValidationException):
            Coordinate(lat=lat, lng=lng)

    @pytest.mark.parametrize("lat,lng", [(90.5, 0.0), (0.0, -180.01)])
    def test_rejects_out_of_range(self, lat, lng):
        with pytest.raises(ValidationException):
            Coordinate(lat=lat, lng=lng)

    def test_rejects_non_numbers(self):
        with pytest.raises(ValidationException):
            Coordinate(lat="40.7", lng=-74.0)

    def test_is_immutable(self):
        with pytest.raises(AttributeError):
            NEW_YORK.lat = 0.0


class TestGeometryText:
    def test_point_puts_longitude_first(self):
        assert point_wkt(NEW_YORK) == "POINT(-74.006 40.7128)"

    def test_ewkt_prefixes_srid(self):
        assert ewkt(point_wkt(NEW_YORK)) == "SRID=4326;POINT(-74.006 40.7128)"

    def test_polygon_is_closed_ring_from_south_west(self):
        box = BoundingBox(north=41.0, south=40.0, east=-73.0, west=-74.5)
        assert polygon_wkt(box) == (
            "POLYGON((-74.5 40.0, -73.0 40.0, -73.0 41.0, -74.5 41.0, -74.5 40.0))"
        )
        corners = box.corners()
        assert len(corners) == 5
        assert corners[0] == corners[-1]


class TestBoundingBox:
    def test_contains_is_inclusive(self):
        box = BoundingBox(north=41.0, south=40.0, east=-73.0, west=-74.0)
        assert box.contains(Coordinate(lat=41.0, lng=-73.0))
        assert box.contains(Coordinate(lat=40.5, lng=-73.5))
        assert not box.contains(Coordinate(lat=41.0001, lng=-73.5))

    def test_rejects_inverted_latitudes(self):
        with pytest.raises(ValidationException):
            BoundingBox(north=40.0, south=41.0, east=-73.0, west=-74.0)

    def test_rejects_antimeridian_wraparound(self):
        with pytest.raises(ValidationException):
            BoundingBox(north=10.0, south=0.0, east=-170.0, west=170.0)

    def test_rejects_non_finite_edge(self):
        with pytest.raises(ValidationException):
            BoundingBox(north=math.nan, south=0.0, east=1.0, west=0.0)


class TestDistance:
    def test_point_to_itself_is_zero(self):
        assert haversine_meters(NEW_YORK, NEW_YORK) == 0.0

    def test_is_symmetric(self):
        assert haversine_meters(NEW_YORK, CHICAGO) == pytest.approx(
            haversine_meters(CHICAGO, NEW_YORK)
        )

    def test_new_york_to_chicago(self):
        # Roughly 1,145 km great-circle
        assert haversine_meters(NEW_YORK, CHICAGO) == pytest.approx(1_145_000, rel=0.01)

    def test_unit_conversions(self):
        d = Distance(meters=1609.34)
        assert d.miles == pytest.approx(1.0)
        assert d.kilometers == pytest.approx(1.60934)
        assert km_to_meters(2.5) == 2500.0
