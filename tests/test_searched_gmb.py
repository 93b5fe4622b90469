"""Tests for searched-business logging and the admin listing."""

import csv
import io
from datetime import datetime

from models.searched_gmb import SearchedGmb
from utils.csv_export import SEARCHED_GMB_CSV_HEADERS

DETAILS = {
    "placeId": "ChIJ123",
    "name": "Joe's Pizza",
    "address": "1 Main St, Kraków",
    "phoneNumber": "+48 12 345 67 89",
    "types": ["restaurant"],
    "rating": 3.2,
}


def test_post_logs_selected_place(client, db):
    resp = client.post(
        "/api/searched-gmb",
        json={"details": DETAILS, "searchQuery": "pizza krakow", "searchResultsCount": 3},
        headers={"x-forwarded-for": "203.0.113.7", "user-agent": "pytest"},
    )
    assert resp.status_code == 200
    row = db.query(SearchedGmb).one()
    assert row.place_id == "ChIJ123"
    assert row.place_address == "1 Main St, Kraków"
    assert row.place_phone == "+48 12 345 67 89"
    assert row.search_results_count == 3
    assert row.ip_address == "203.0.113.7"
    assert row.user_agent == "pytest"


def test_post_requires_name_and_place_id(client, db):
    assert client.post("/api/searched-gmb", json={}).status_code == 400
    assert client.post("/api/searched-gmb", json={"details": {"name": "X"}}).status_code == 400
    assert client.post("/api/searched-gmb", json={"details": {"placeId": "p"}}).status_code == 400
    assert db.query(SearchedGmb).count() == 0


def _add_rows(db):
    db.add_all([
        SearchedGmb(place_id="p1", place_name="Joe's Pizza", place_address="Kraków",
                    search_query="pizza", place_types=[], created_at=datetime(2024, 1, 1, 10)),
        SearchedGmb(place_id="p2", place_name="Ann's Dental", place_address="Warsaw",
                    search_query="dentist", place_types=["dentist"], created_at=datetime(2024, 1, 2, 10)),
    ])
    db.commit()


def test_admin_list_and_search(admin_client, db):
    _add_rows(db)
    body = admin_client.get("/api/searched-gmb").json()
    assert [r["place_id"] for r in body["data"]] == ["p2", "p1"]
    assert body["pagination"]["totalItems"] == 2

    found = admin_client.get("/api/searched-gmb", params={"search": "warsaw"}).json()["data"]
    assert [r["place_id"] for r in found] == ["p2"]


def test_admin_csv_export(admin_client, db):
    _add_rows(db)
    resp = admin_client.get("/api/searched-gmb", params={"export": "csv"})
    assert resp.status_code == 200
    assert 'filename="searched-gmbs-' in resp.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(resp.text)))
    assert rows[0] == SEARCHED_GMB_CSV_HEADERS
    assert rows[1][1] == "Ann's Dental"
