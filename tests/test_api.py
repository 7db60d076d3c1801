"""HTTP tests for the geospatial endpoints and health checks."""

import pytest

from conftest import CENTER

GEO = "/api/geo"


def center_payload(**extra):
    return {"centerPoint": {"lat": CENTER.lat, "lng": CENTER.lng}, **extra}


class TestNearPointEndpoint:
    def test_returns_records_and_meta(self, client, listings):
        response = client.post(
            f"{GEO}/properties/near-point",
            json=center_payload(radiusKm=10, limit=1),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["meta"] == {
            "center": {"lat": CENTER.lat, "lng": CENTER.lng},
            "radius_km": 10,
            "total_count": 3,
            "count": 1,
            "limit": 1,
            "offset": 0,
        }
        record = data["properties"][0]
        assert record["name"] == "Near Loft"
        assert record["city"] == "New York"
        assert record["location_id"] == listings["near"].location_id
        assert record["distance_meters"] == pytest.approx(2000, abs=0.01)
        assert "lat" in record and "lng" in record
        assert "X-Request-ID" in response.headers

    def test_missing_radius_is_rejected(self, client):
        response = client.post(f"{GEO}/properties/near-point", json=center_payload())
        assert response.status_code == 422
        assert response.json()["error"] == "Validation error"

    def test_out_of_range_center_is_rejected(self, client):
        response = client.post(
            f"{GEO}/properties/near-point",
            json={"centerPoint": {"lat": 91, "lng": 0}, "radiusKm": 5},
        )
        assert response.status_code == 422

    def test_empty_store(self, client):
        response = client.post(f"{GEO}/properties/near-point", json=center_payload(radiusKm=5))
        assert response.status_code == 200
        assert response.json()["properties"] == []
        assert response.json()["meta"]["total_count"] == 0


class TestSearchEndpoints:
    def test_proximity_search_echoes_params(self, client, listings):
        response = client.post(
            f"{GEO}/properties/proximity-search",
            json=center_payload(radiusKm=20, amenities=["Pool"], minPrice=1000),
        )

        assert response.status_code == 200
        data = response.json()
        assert [p["name"] for p in data["properties"]] == ["Near Loft", "Far Apartment"]
        assert data["meta"]["count"] == 2
        assert data["meta"]["search_params"]["minPrice"] == 1000
        assert data["meta"]["search_params"]["radiusKm"] == 20

    def test_in_bounds(self, client, listings):
        response = client.post(
            f"{GEO}/properties/in-bounds",
            json={
                "bounds": {
                    "north": CENTER.lat + 0.03,
                    "south": CENTER.lat - 0.05,
                    "east": -73.9,
                    "west": -74.1,
                },
                "filters": {"propertyType": "Rooms"},
            },
        )

        assert response.status_code == 200
        names = [p["name"] for p in response.json()["properties"]]
        assert names == ["South Studio"]
        assert "distance_meters" not in response.json()["properties"][0]

    def test_inverted_bounds_are_rejected(self, client):
        response = client.post(
            f"{GEO}/properties/in-bounds",
            json={"bounds": {"north": 40.0, "south": 41.0, "east": -73.0, "west": -74.0}},
        )
        assert response.status_code == 422

    def test_search_by_location(self, client, listings):
        response = client.get(
            f"{GEO}/properties/search-by-location", params={"q": "loft"}
        )
        assert response.status_code == 200
        data = response.json()
        assert [p["name"] for p in data["properties"]] == ["Near Loft"]
        assert data["meta"]["search_query"] == "loft"

    def test_nearest(self, client, listings):
        response = client.get(
            f"{GEO}/properties/{listings['near'].id}/nearest",
            params={"radius": 10, "limit": 5},
        )
        assert response.status_code == 200
        data = response.json()
        assert [p["name"] for p in data["properties"]] == ["South Studio", "Midtown Villa"]
        assert data["meta"]["reference_property_id"] == listings["near"].id

    def test_nearest_unknown_property(self, client, listings):
        response = client.get(f"{GEO}/properties/999/nearest")
        assert response.status_code == 404
        assert response.json()["error"] == "Property not found"


class TestGeocodeAndDistance:
    def test_geocode(self, client):
        response = client.post(
            f"{GEO}/geocode",
            json={"address": "1 Market St", "city": "San Francisco", "country": "USA"},
        )
        assert response.status_code == 200
        coordinates = response.json()["coordinates"]
        assert abs(coordinates["lat"] - 37.7749) <= 0.005
        assert abs(coordinates["lng"] - (-122.4194)) <= 0.005

    def test_geocode_requires_city(self, client):
        response = client.post(f"{GEO}/geocode", json={"address": "1 Market St"})
        assert response.status_code == 422
        assert response.json()["error"] == "City is required"

    def test_distance(self, client):
        response = client.post(
            f"{GEO}/distance",
            json={
                "point1": {"lat": 40.7128, "lng": -74.0060},
                "point2": {"lat": 41.8781, "lng": -87.6298},
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["distance_km"] == pytest.approx(1145, rel=0.01)
        assert data["distance_meters"] == pytest.approx(data["distance_km"] * 1000)
        assert data["distance_miles"] == pytest.approx(data["distance_meters"] / 1609.34)


class TestLocationWrites:
    def test_update_location(self, client, listings):
        far = listings["far"]
        response = client.put(
            f"{GEO}/properties/{far.id}/location",
            json={"coordinates": {"lat": 51.5, "lng": -0.12}},
        )

        assert response.status_code == 200
        assert response.json() == {
            "property_id": far.id,
            "location_id": far.location_id,
            "new_coordinates": {"lat": 51.5, "lng": -0.12},
        }
        near = client.post(f"{GEO}/properties/near-point", json=center_payload(radiusKm=20))
        assert near.json()["meta"]["total_count"] == 3

    def test_update_unknown_property(self, client, listings):
        response = client.put(
            f"{GEO}/properties/999/location",
            json={"coordinates": {"lat": 0, "lng": 0}},
        )
        assert response.status_code == 404
        assert response.json()["details"] == {"property_id": 999}

    def test_register_location(self, client):
        response = client.post(
            f"{GEO}/locations",
            json={
                "address": "200 Santa Monica Pier",
                "city": "Los Angeles",
                "state": "CA",
                "country": "USA",
                "postalCode": "90401",
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["location_id"] == 1
        assert abs(data["coordinates"]["lat"] - 34.0522) <= 0.005


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["store_backend"] == "memory"

    def test_readiness(self, client):
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json()["checks"]["store"]["status"] == "healthy"


def test_http_tests_are_marked_integration(request):
    assert request.node.get_closest_marker("integration") is not None
    assert request.node.get_closest_marker("unit") is None
