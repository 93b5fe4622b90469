"""Tests for the visitor logging middleware and page screens."""

from models.visitor import Visitor
from utils import tracking


def test_page_view_is_logged_with_new_session(client, db):
    resp = client.get("/?utm_source=google&utm_campaign=spring", headers={
        "x-forwarded-for": "203.0.113.7", "user-agent": "pytest-browser", "referer": "https://google.com/",
    })
    assert resp.status_code == 200
    cookie = resp.headers["set-cookie"]
    assert cookie.startswith("session_id=sess_")
    assert "HttpOnly" in cookie
    assert "samesite=lax" in cookie.lower()
    assert "Max-Age=2592000" in cookie

    row = db.query(Visitor).one()
    assert row.page_path == "/"
    assert row.ip_address == "203.0.113.7"
    assert row.user_agent == "pytest-browser"
    assert row.referer == "https://google.com/"
    assert row.utm_source == "google"
    assert row.utm_campaign == "spring"
    assert row.utm_medium is None
    assert row.session_id == resp.cookies["session_id"]


def test_existing_session_is_reused(client, db):
    client.cookies.set("session_id", "sess_1700000000000_abcdefghi")
    resp = client.get("/pricing")
    assert resp.status_code == 200
    assert "set-cookie" not in resp.headers
    assert db.query(Visitor).one().session_id == "sess_1700000000000_abcdefghi"


def test_api_and_asset_paths_are_not_logged(client, db):
    client.get("/api/pricing")
    client.get("/static/robots.txt")
    client.get("/favicon.ico")
    client.get("/sitemap.xml")
    assert db.query(Visitor).count() == 0


def test_visitor_log_failure_never_breaks_page(client, db, monkeypatch):
    class _BrokenSession:
        def add(self, obj):
            raise RuntimeError("db down")

        def rollback(self):
            pass

        def close(self):
            pass

    monkeypatch.setattr(tracking.database, "SessionLocal", lambda: _BrokenSession())
    resp = client.get("/contact")
    assert resp.status_code == 200


def test_log_visitor_returns_false_on_error(monkeypatch):
    monkeypatch.setattr(tracking.database, "SessionLocal", lambda: (_ for _ in ()).throw(RuntimeError("x")))
    assert tracking.log_visitor({"page_path": "/"}) is False


def test_pages_render(client, db):
    home = client.get("/")
    assert "Remove Google Business Profile" in home.text
    assert client.get("/payment/success", params={"session_id": "cs_1", "success": "true"}).status_code == 200
    admin = client.get("/admin")
    assert "Admin login" in admin.text
