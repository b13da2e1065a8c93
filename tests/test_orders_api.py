"""Gönderen/alıcı API: sipariş oluşturma ve token ile görüntüleme."""
import pytest
from fastapi.testclient import TestClient

from app.services.payment import PaymentProvider, PaymentResult


def _item_payload(**overrides):
    data = {
        "senderName": "Rami",
        "receiverName": "Lea",
        "receiverContact": "+9613000000",
        "deliveryChannel": "whatsapp",
        "merchantId": "m-beans",
        "productId": "p-flat-white",
        "message": "Coffee on me",
    }
    data.update(overrides)
    return data


def test_create_item_order(client: TestClient):
    r = client.post("/api/orders", json=_item_payload())
    assert r.status_code == 201, r.text
    j = r.json()
    assert j["giftType"] == "ITEM"
    assert j["status"] == "PAID"
    assert j["amount"] == 4.5
    assert j["currency"] == "USD"
    assert j["themeId"] == "celebration"
    assert len(j["redeemCode"]) == 6
    assert j["giftToken"]
    assert j["id"] in j["revealUrl"] and j["giftToken"] in j["revealUrl"]


def test_create_credit_order(client: TestClient):
    r = client.post(
        "/api/orders",
        json=_item_payload(giftType="CREDIT", productId=None, creditAmount=500000, themeId="birthday"),
    )
    assert r.status_code == 201, r.text
    j = r.json()
    assert j["creditAmount"] == 500000
    assert j["creditRemaining"] == 500000
    assert j["currency"] == "LBP"
    assert j["productId"] is None
    assert j["themeId"] == "birthday"


def test_create_order_validation_errors(client: TestClient):
    r = client.post("/api/orders", json=_item_payload(merchantId="nope"))
    assert r.status_code == 404
    assert r.json()["code"] == "MerchantNotFound"

    r = client.post("/api/orders", json=_item_payload(productId="p-peonies"))
    assert r.status_code == 400
    assert r.json()["code"] == "ProductMerchantMismatch"

    r = client.post("/api/orders", json=_item_payload(merchantId="m-bloom", giftType="CREDIT", productId=None, creditAmount=500000))
    assert r.status_code == 400
    assert r.json()["code"] == "CreditDisabled"

    r = client.post("/api/orders", json=_item_payload(giftType="CREDIT", productId=None, creditAmount=50))
    assert r.status_code == 400
    assert r.json()["code"] == "AmountOutOfRange"


def test_create_order_schema_errors(client: TestClient):
    r = client.post("/api/orders", json=_item_payload(senderName="  "))
    assert r.status_code == 422
    assert r.json()["code"] == "ValidationError"

    r = client.post("/api/orders", json=_item_payload(deliveryChannel="pigeon"))
    assert r.status_code == 422


def test_failed_payment_creates_nothing(client: TestClient, monkeypatch):
    class DecliningProvider(PaymentProvider):
        def pay(self, request):
            return PaymentResult(success=False, error_message="Card declined")

    services = client.app.state.services
    before = len(services.store.list_by_merchant("m-beans"))
    monkeypatch.setattr(services, "payments", DecliningProvider())
    r = client.post("/api/orders", json=_item_payload())
    assert r.status_code == 402
    assert r.json()["code"] == "PaymentFailed"
    assert len(services.store.list_by_merchant("m-beans")) == before


def test_fetch_order_by_token(client: TestClient):
    created = client.post("/api/orders", json=_item_payload()).json()
    r = client.get(f"/api/orders/{created['id']}", params={"t": created["giftToken"]})
    assert r.status_code == 200
    assert r.json()["redeemCode"] == created["redeemCode"]


def test_wrong_token_indistinguishable_from_missing(client: TestClient):
    created = client.post("/api/orders", json=_item_payload()).json()
    wrong = client.get(f"/api/orders/{created['id']}", params={"t": "A" * 43})
    missing = client.get("/api/orders/does-not-exist", params={"t": created["giftToken"]})
    assert wrong.status_code == missing.status_code == 404
    assert wrong.json()["error"] == missing.json()["error"]
    assert wrong.json()["code"] == missing.json()["code"] == "NotFound"


def test_fetch_requires_token(client: TestClient):
    created = client.post("/api/orders", json=_item_payload()).json()
    r = client.get(f"/api/orders/{created['id']}")
    assert r.status_code == 400


def test_payment_provider_requires_pay():
    class Incomplete(PaymentProvider):
        pass

    with pytest.raises(TypeError):
        Incomplete()
