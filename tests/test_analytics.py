"""Tests for the admin analytics and visitors endpoints."""

from datetime import datetime

from models.order import Order
from models.searched_gmb import SearchedGmb
from models.visitor import Visitor


def _seed(db):
    db.add_all([
        Visitor(ip_address="1.1.1.1", user_agent="ua", page_path="/", country="PL", session_id="s1",
                referer="https://www.google.com/", created_at=datetime(2024, 2, 1, 8)),
        Visitor(ip_address="1.1.1.1", user_agent="ua", page_path="/pricing", session_id="s1",
                created_at=datetime(2024, 2, 1, 9)),
        Visitor(ip_address="2.2.2.2", user_agent="ua", page_path="/", country="US", session_id="s2",
                created_at=datetime(2024, 2, 3, 9)),
        Order(customer_email="a@example.com", customer_name="A", service_type="remove", addons=[],
              total_amount=499, currency="USD", payment_status="completed", stripe_session_id="cs_1",
              created_at=datetime(2024, 2, 1, 10)),
        Order(customer_email="b@example.com", customer_name="B", service_type="reset", addons=[],
              total_amount=299, currency="USD", payment_status="pending", stripe_session_id="cs_2",
              created_at=datetime(2024, 2, 2, 10)),
        SearchedGmb(place_id="p1", place_name="Joe's", search_query="pizza", place_types=[],
                    created_at=datetime(2024, 2, 1, 11)),
    ])
    db.commit()


def test_analytics_all(admin_client, db):
    _seed(db)
    resp = admin_client.get("/api/analytics", params={"type": "all"})
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["visitors"]) == 3
    assert body["analytics"]["totalVisitors"] == 3
    assert body["analytics"]["uniqueIps"] == 2
    assert body["analytics"]["topPages"][0] == {"page": "/", "count": 2}
    assert body["analytics"]["visitorsByDay"] == [
        {"date": "2024-02-01", "count": 2},
        {"date": "2024-02-03", "count": 1},
    ]
    assert body["orderAnalytics"]["totalRevenue"] == 798
    assert body["orderAnalytics"]["avgOrderValue"] == 399
    assert body["searchAnalytics"]["topSearchQueries"] == [{"query": "pizza", "count": 1}]


def test_analytics_single_type(admin_client, db):
    _seed(db)
    body = admin_client.get("/api/analytics", params={"type": "orders"}).json()
    assert set(body) == {"orders", "orderAnalytics"}


def test_analytics_date_range(admin_client, db):
    _seed(db)
    body = admin_client.get(
        "/api/analytics", params={"type": "visitors", "startDate": "2024-02-01", "endDate": "2024-02-01"}
    ).json()
    assert body["analytics"]["totalVisitors"] == 2


def test_analytics_bad_type(admin_client):
    assert admin_client.get("/api/analytics", params={"type": "bogus"}).status_code == 400


def test_visitors_paginated_with_stats(admin_client, db):
    _seed(db)
    body = admin_client.get("/api/visitors", params={"limit": 2, "page": 2}).json()
    assert len(body["visitors"]) == 1
    assert body["pagination"] == {
        "currentPage": 2, "totalPages": 2, "totalCount": 3, "hasNext": False, "hasPrev": True,
    }
    stats = body["stats"]
    assert stats["uniqueIps"] == 2
    assert stats["uniqueCountries"] == 2
    assert {"referer": "www.google.com", "count": 1} in stats["topReferers"]
    assert {"referer": "Direct", "count": 2} in stats["topReferers"]


def test_visitors_end_date_covers_whole_day(admin_client, db):
    _seed(db)
    body = admin_client.get("/api/visitors", params={"startDate": "2024-02-03", "endDate": "2024-02-03"}).json()
    assert body["pagination"]["totalCount"] == 1
