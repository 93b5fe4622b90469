"""Tests for the Google Places gateway and its routes."""

import httpx

from models.searched_gmb import SearchedGmb

DETAILS_RESULT = {
    "place_id": "ChIJ123",
    "name": "Joe's Pizza",
    "formatted_address": "1 Main St, Kraków",
    "international_phone_number": "+48 12 345 67 89",
    "website": "https://joespizza.example",
    "business_status": "OPERATIONAL",
    "types": ["restaurant", "food"],
    "rating": 3.2,
    "user_ratings_total": 41,
    "geometry": {"location": {"lat": 50.06, "lng": 19.94}},
    "photos": [{"photo_reference": f"ref{i}"} for i in range(7)],
}


def _details_handler(request: httpx.Request) -> httpx.Response:
    assert request.url.path.endswith("/details/json")
    return httpx.Response(200, json={"status": "OK", "result": DETAILS_RESULT})


def test_search_maps_results(client, places_api):
    captured = places_api(lambda r: httpx.Response(200, json={
        "status": "OK",
        "results": [
            {"place_id": "p1", "name": "Joe's Pizza", "formatted_address": "1 Main St"},
            {"place_id": "p2", "name": "Joe's Pasta", "formatted_address": "2 Main St"},
        ],
    }))
    resp = client.get("/api/gmb-search", params={"query": "joe's pizza"})
    assert resp.status_code == 200
    assert resp.json()["locations"][0] == {
        "id": "p1", "name": "Joe's Pizza", "address": "1 Main St", "placeId": "p1",
    }
    assert captured[0].url.params["query"] == "joe's pizza"
    assert captured[0].url.params["key"] == "test-places-key"


def test_search_requires_query(client):
    assert client.get("/api/gmb-search").status_code == 400
    assert client.get("/api/gmb-search", params={"query": "  "}).status_code == 400


def test_search_zero_results_is_404(client, places_api):
    places_api(lambda r: httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []}))
    resp = client.get("/api/gmb-search", params={"query": "nothing here"})
    assert resp.status_code == 404
    assert resp.json() == {"error": "No results found", "locations": []}


def test_search_rate_limited_forwards_retry_after(client, places_api):
    places_api(lambda r: httpx.Response(429, headers={"Retry-After": "17"}))
    resp = client.get("/api/gmb-search", params={"query": "pizza"})
    assert resp.status_code == 429
    assert resp.headers["Retry-After"] == "17"
    assert resp.json() == {"error": "Rate limit exceeded", "retryAfter": "17"}


def test_search_rate_limited_default_retry_after(client, places_api):
    places_api(lambda r: httpx.Response(429))
    resp = client.get("/api/gmb-search", params={"query": "pizza"})
    assert resp.json()["retryAfter"] == "60"


def test_search_upstream_failure_is_500(client, places_api):
    places_api(lambda r: httpx.Response(503, text="unavailable"))
    resp = client.get("/api/gmb-search", params={"query": "pizza"})
    assert resp.status_code == 500


def test_missing_api_key_is_config_error(client, monkeypatch):
    from core import config
    monkeypatch.setattr(config, "GOOGLE_PLACES_API_KEY", "")
    resp = client.get("/api/gmb-search", params={"query": "pizza"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "API configuration error"}


def test_details_view_shapes_result_and_writes_nothing(client, db, places_api):
    places_api(_details_handler)
    resp = client.get("/api/places-details", params={"placeId": "ChIJ123"})
    assert resp.status_code == 200
    details = resp.json()["details"]
    assert details["placeId"] == "ChIJ123"
    assert details["phoneNumber"] == "+48 12 345 67 89"
    assert details["googleMapsUrl"] == "https://maps.google.com/maps?place_id=ChIJ123"
    assert len(details["photos"]) == 5
    assert details["photos"][0].endswith("/photo?maxwidth=400&photoreference=ref0&key=test-places-key")
    assert db.query(SearchedGmb).count() == 0


def test_details_with_legacy_flag_selects_once(client, db, places_api):
    places_api(_details_handler)
    resp = client.get("/api/places-details", params={
        "placeId": "ChIJ123", "proceedingToOrder": "true", "searchQuery": "joe's pizza",
    })
    assert resp.status_code == 200
    assert resp.json()["logged"] is True
    rows = db.query(SearchedGmb).all()
    assert len(rows) == 1
    assert rows[0].place_name == "Joe's Pizza"
    assert rows[0].search_query == "joe's pizza"
    assert rows[0].place_types == ["restaurant", "food"]


def test_explicit_select_step(client, db, places_api):
    places_api(_details_handler)
    client.cookies.set("session_id", "sess_1_abcdefghi")
    resp = client.post("/api/places-details/select", json={
        "placeId": "ChIJ123", "searchQuery": "pizza", "searchResultsCount": 4,
    })
    assert resp.status_code == 200
    row = db.query(SearchedGmb).one()
    assert row.session_id == "sess_1_abcdefghi"
    assert row.search_results_count == 4
    assert row.place_geometry == {"location": {"lat": 50.06, "lng": 19.94}}


def test_details_not_found(client, places_api):
    places_api(lambda r: httpx.Response(200, json={"status": "NOT_FOUND"}))
    resp = client.get("/api/places-details", params={"placeId": "nope"})
    assert resp.status_code == 404
    assert resp.json()["error"] == "No details found for this place"


def test_details_requires_place_id(client):
    assert client.get("/api/places-details").status_code == 400
