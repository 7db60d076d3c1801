"""Tests for query validation, plan construction and PostGIS rendering."""

import math

import pytest
from sqlalchemy.dialects import postgresql

from rentgeo.core.exceptions import ValidationException
from rentgeo.geo.geometry import BoundingBox, Coordinate
from rentgeo.search.builder import (
    Ordering,
    QueryPlan,
    SpatialQueryBuilder,
    build_neighbor_plan,
    build_plan,
)
from rentgeo.search.clauses import (
    AmenityOverlap,
    BathsGte,
    BedsGte,
    BoundsWithin,
    ExcludeProperty,
    PriceGte,
    PriceLte,
    RadiusWithin,
    TypeEq,
)
from rentgeo.search.queries import (
    BoundingBoxQuery,
    NearestQuery,
    PageRequest,
    PointRadiusQuery,
    ProximityQuery,
    SearchFilters,
    TextQuery,
)
from rentgeo.stores.postgis import count_statement, page_statement, render_conditions

CENTER = Coordinate(lat=40.7128, lng=-74.0060)
BOX = BoundingBox(north=40.8, south=40.6, east=-73.9, west=-74.1)


def compiled(clause) -> str:
    return str(clause.compile(dialect=postgresql.dialect()))


class TestQueryValidation:
    @pytest.mark.parametrize("radius", [0, -1, math.nan, math.inf])
    def test_radius_must_be_positive_and_finite(self, radius):
        with pytest.raises(ValidationException):
            PointRadiusQuery(center=CENTER, radius_km=radius, page=PageRequest(limit=10))

    @pytest.mark.parametrize("limit,offset", [(0, 0), (10_000, 0), (10, -1)])
    def test_page_bounds(self, limit, offset):
        with pytest.raises(ValidationException):
            PageRequest(limit=limit, offset=offset)

    def test_page_ceiling_is_configurable(self):
        assert PageRequest(limit=800, max_limit=1000).limit == 800
        assert PageRequest(limit=5) == PageRequest(limit=5, max_limit=10)
        with pytest.raises(ValidationException):
            PageRequest(limit=11, max_limit=10)
        with pytest.raises(ValidationException):
            NearestQuery(property_id=1, radius_km=1, limit=11, max_limit=10)

    def test_min_price_above_max_price(self):
        with pytest.raises(ValidationException):
            SearchFilters(min_price=3000, max_price=1000)

    def test_text_query_needs_two_characters(self):
        with pytest.raises(ValidationException):
            TextQuery(term=" a ", page=PageRequest(limit=10))

    def test_nearest_radius_validated(self):
        with pytest.raises(ValidationException):
            NearestQuery(property_id=1, radius_km=0, limit=5)


class TestPlans:
    def test_point_radius_converts_km_to_meters(self):
        plan = build_plan(PointRadiusQuery(center=CENTER, radius_km=10, page=PageRequest(50)))
        assert plan.clauses == (RadiusWithin(center=CENTER, meters=10_000.0),)
        assert plan.order is Ordering.DISTANCE
        assert plan.reference == CENTER

    def test_omitted_filters_add_no_clauses(self):
        query = ProximityQuery(center=CENTER, radius_km=5, page=PageRequest(10))
        assert len(build_plan(query).clauses) == 1

    def test_all_filters_are_conjoined(self):
        filters = SearchFilters.from_values(
            property_type="Villa",
            min_price=1000,
            max_price=4000,
            min_beds=2,
            min_baths=1.5,
            amenities=["Pool", "Gym", ""],
        )
        plan = build_plan(
            ProximityQuery(center=CENTER, radius_km=5, page=PageRequest(10), filters=filters)
        )
        assert plan.clauses[1:] == (
            TypeEq("Villa"),
            PriceGte(1000),
            PriceLte(4000),
            BedsGte(2),
            BathsGte(1.5),
            AmenityOverlap(frozenset({"Pool", "Gym"})),
        )

    def test_zero_valued_filters_are_kept(self):
        plan = SpatialQueryBuilder().with_filters(SearchFilters(min_price=0, min_beds=0)).build()
        assert plan.clauses == (PriceGte(0), BedsGte(0))

    def test_bounds_plan_orders_by_identity(self):
        plan = build_plan(BoundingBoxQuery(bounds=BOX, filters=SearchFilters(min_beds=1)))
        assert plan.clauses == (BoundsWithin(BOX), BedsGte(1))
        assert plan.order is Ordering.IDENTITY
        assert plan.reference is None

    def test_neighbor_plan_excludes_reference_property(self):
        plan = build_neighbor_plan(NearestQuery(property_id=7, radius_km=5, limit=5), CENTER)
        assert plan.clauses == (RadiusWithin(CENTER, 5000.0), ExcludeProperty(7))
        assert plan.reference == CENTER

    def test_distance_order_requires_reference(self):
        with pytest.raises(ValueError):
            QueryPlan(clauses=(), order=Ordering.DISTANCE)

    def test_unknown_query_type(self):
        with pytest.raises(TypeError):
            build_plan(object())


class TestPostGISRendering:
    def test_count_and_page_share_conditions(self):
        filters = SearchFilters.from_values(min_price=500, amenities=["Pool"])
        plan = build_plan(
            ProximityQuery(center=CENTER, radius_km=3, page=PageRequest(20), filters=filters)
        )

        assert render_conditions(plan) is render_conditions(plan)
        count_where = compiled(count_statement(plan).whereclause)
        page_where = compiled(page_statement(plan, 20, 40).whereclause)
        assert count_where == page_where
        assert "ST_DWithin" in count_where
        assert "&&" in count_where

    def test_page_orders_by_distance_then_id(self):
        plan = build_plan(PointRadiusQuery(center=CENTER, radius_km=1, page=PageRequest(10)))
        sql = compiled(page_statement(plan, 10, 0))
        assert "ST_Distance" in sql
        assert "ORDER BY distance_meters ASC, properties.id ASC" in sql
        assert "LIMIT" in sql

    def test_bounds_use_covers_and_identity_order(self):
        plan = build_plan(BoundingBoxQuery(bounds=BOX))
        sql = compiled(page_statement(plan))
        assert "ST_Covers" in sql
        assert "ST_Distance" not in sql
        assert "ORDER BY properties.id ASC" in sql
        assert "LIMIT" not in sql
