"""Test fixtures for the MapWipers backend."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["GOOGLE_PLACES_API_KEY"] = "test-places-key"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["ADMIN_EMAIL"] = "admin@mapwipers.test"
os.environ["ADMIN_PASSWORD"] = "correct-horse"
os.environ["ADMIN_NOTIFY_EMAIL"] = "team@mapwipers.test"
os.environ["ADMIN_LOGIN_RATE_LIMIT"] = "1000"
os.environ["CONTACT_RATE_LIMIT"] = "1000"
os.environ["SITE_URL"] = "https://mapwipers.test"
os.environ["REDIS_URL"] = ""

import pytest
from fastapi.testclient import TestClient

from core import database
from core.database import Base
from models import visitor, order, searched_gmb, pricing  # noqa: F401
from main import app
from utils import emailing, places


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(database.engine)
    yield
    Base.metadata.drop_all(database.engine)


@pytest.fixture(name="db")
def fixture_db():
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(name="client")
def fixture_client():
    return TestClient(app)


@pytest.fixture(name="admin_client")
def fixture_admin_client():
    c = TestClient(app)
    c.cookies.set("admin_session", "authenticated")
    return c


@pytest.fixture(name="sent_mail", autouse=True)
def fixture_sent_mail(monkeypatch):
    """Capture outgoing mail instead of talking to SMTP."""
    sent = []

    def _fake_send(to_addr, subject, html, text=None, from_addr=None, reply_to=None):
        sent.append({"to": to_addr, "subject": subject, "html": html, "text": text, "reply_to": reply_to})
        return True

    monkeypatch.setattr(emailing, "send_email_smtp", _fake_send)
    return sent


@pytest.fixture(name="places_api")
def fixture_places_api(monkeypatch):
    """Route Google Places calls to a handler the test installs.

    Usage: places_api(lambda request: httpx.Response(200, json={...}))
    Returns the list of captured requests.
    """
    import httpx

    captured = []

    def install(handler):
        def _wrapped(request):
            captured.append(request)
            return handler(request)

        monkeypatch.setattr(places, "_transport", httpx.MockTransport(_wrapped))
        return captured

    return install
