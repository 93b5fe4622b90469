"""Tests for order intake through Stripe Checkout."""

import pytest
import stripe

from models.order import Order
from utils import payments

BUSINESS = {
    "id": "ChIJ123",
    "placeId": "ChIJ123",
    "name": "Joe's Pizza",
    "address": "1 Main St, Kraków",
    "phoneNumber": "+48 12 345 67 89",
    "googleMapsUrl": "https://maps.google.com/?cid=1",
    "rating": 3.2,
}
FORM = {
    "email": "owner@joespizza.example",
    "firstName": "Joe",
    "lastName": "Baker",
    "phone": "+48 600 000 000",
}


def _body(**overrides):
    body = {
        "orderData": {"selectedBusiness": BUSINESS, "yearProtection": True, "expressService": False},
        "formData": dict(FORM),
        "totalPrice": 698,
        "serviceType": "remove",
    }
    body.update(overrides)
    return body


@pytest.fixture(name="stripe_calls")
def fixture_stripe_calls(monkeypatch):
    calls = {}

    def _customer(params):
        calls["customer"] = params
        return {"id": "cus_test_1"}

    def _session(params):
        calls["session"] = params
        return {"id": "cs_test_1", "url": "https://checkout.stripe.com/c/pay/cs_test_1"}

    monkeypatch.setattr(payments, "create_customer", _customer)
    monkeypatch.setattr(payments, "create_checkout_session", _session)
    return calls


def test_create_payment_remove_with_year_protection(client, db, stripe_calls):
    resp = client.post("/api/create-payment", json=_body())
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "sessionId": "cs_test_1",
        "customerId": "cus_test_1",
        "checkoutUrl": "https://checkout.stripe.com/c/pay/cs_test_1",
    }

    items = stripe_calls["session"]["line_items"]
    assert len(items) == 2
    assert [i["price_data"]["unit_amount"] for i in items] == [49900, 19900]
    assert all(i["price_data"]["currency"] == "usd" for i in items)
    assert stripe_calls["session"]["mode"] == "payment"
    assert stripe_calls["session"]["success_url"] == (
        "https://mapwipers.test/payment/success?session_id={CHECKOUT_SESSION_ID}&success=true"
    )
    assert stripe_calls["session"]["cancel_url"] == "https://mapwipers.test/?canceled=true"
    assert stripe_calls["session"]["invoice_creation"]["enabled"] is True
    assert stripe_calls["session"]["metadata"]["orderId"].startswith("ORDER_")

    meta = stripe_calls["customer"]["metadata"]
    assert meta["yearProtection"] == "true"
    assert meta["expressService"] == "false"
    assert "companyName" not in meta

    order = db.query(Order).one()
    assert order.payment_status == "pending"
    assert order.stripe_session_id == "cs_test_1"
    assert float(order.total_amount) == 698.0
    assert order.addons == ["yearProtection"]
    assert order.customer_name == "Joe Baker"
    assert order.business_place_id == "ChIJ123"


def test_server_total_wins_over_client_total(client, db, stripe_calls):
    resp = client.post("/api/create-payment", json=_body(totalPrice=1))
    assert resp.status_code == 200
    assert sum(i["price_data"]["unit_amount"] for i in stripe_calls["session"]["line_items"]) == 69800
    assert float(db.query(Order).one().total_amount) == 698.0


def test_company_details_go_to_customer(client, stripe_calls):
    form = dict(FORM, isCompany=True, companyName="Joe Sp. z o.o.", companyTaxId="PL123",
                companyAddress="1 Main St", companyCity="Kraków", companyZip="30-001", companyCountry="Poland")
    resp = client.post("/api/create-payment", json=_body(formData=form))
    assert resp.status_code == 200
    customer = stripe_calls["customer"]
    assert customer["metadata"]["companyName"] == "Joe Sp. z o.o."
    assert customer["metadata"]["isCompany"] == "true"
    assert customer["metadata"]["taxId"] == "PL123"
    assert customer["address"]["country"] == "PL"


@pytest.mark.parametrize("missing", ["orderData", "formData", "totalPrice", "serviceType"])
def test_missing_top_level_fields(client, db, stripe_calls, missing):
    body = _body()
    body.pop(missing)
    resp = client.post("/api/create-payment", json=body)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields"}
    assert "customer" not in stripe_calls
    assert db.query(Order).count() == 0


def test_invalid_service_type(client, stripe_calls):
    assert client.post("/api/create-payment", json=_body(serviceType="delete")).status_code == 400


def test_missing_form_field(client, stripe_calls):
    form = dict(FORM)
    form.pop("phone")
    assert client.post("/api/create-payment", json=_body(formData=form)).status_code == 400


def test_stripe_error_is_400_and_logs_nothing(client, db, monkeypatch):
    def _boom(params):
        raise stripe.StripeError("Your card was declined.")

    monkeypatch.setattr(payments, "create_customer", _boom)
    resp = client.post("/api/create-payment", json=_body())
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("Payment processing failed: ")
    assert db.query(Order).count() == 0


def test_unexpected_error_is_500(client, db, monkeypatch):
    def _boom(params):
        raise RuntimeError("network down")

    monkeypatch.setattr(payments, "create_customer", _boom)
    resp = client.post("/api/create-payment", json=_body())
    assert resp.status_code == 500
    assert db.query(Order).count() == 0


def test_order_write_failure_is_tolerated(client, db, stripe_calls, monkeypatch):
    from routers import payments as payments_router
    monkeypatch.setattr(payments_router, "log_order", lambda db, data: None)
    resp = client.post("/api/create-payment", json=_body())
    assert resp.status_code == 200
    assert resp.json()["sessionId"] == "cs_test_1"
