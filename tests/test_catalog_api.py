"""Katalog okumaları (demo verisi)."""
from fastapi.testclient import TestClient


def test_list_merchants_only_active(client: TestClient):
    r = client.get("/api/merchants")
    assert r.status_code == 200
    ids = [m["id"] for m in r.json()]
    assert "m-beans" in ids and "m-bloom" in ids
    assert "m-cedar-spa" not in ids


def test_filter_merchants(client: TestClient):
    by_city = client.get("/api/merchants", params={"city": "beirut"}).json()
    assert {m["id"] for m in by_city} >= {"m-beans", "m-bloom"}
    flowers = client.get("/api/merchants", params={"category": "flowers"}).json()
    assert [m["id"] for m in flowers] == ["m-bloom"]
    assert client.get("/api/merchants", params={"city": "Tripoli"}).json() == []


def test_get_merchant_with_credit_policy(client: TestClient):
    r = client.get("/api/merchants/m-beans")
    assert r.status_code == 200
    j = r.json()
    assert j["creditIsEnabled"] is True
    assert j["creditMinAmount"] == 100000
    assert j["creditPresetAmounts"] == [250000, 500000, 1000000]
    assert client.get("/api/merchants/none").status_code == 404


def test_products(client: TestClient):
    products = client.get("/api/merchants/m-beans/products").json()
    assert {p["id"] for p in products} == {"p-flat-white", "p-cheesecake"}
    r = client.get("/api/products/p-peonies")
    assert r.status_code == 200
    assert r.json()["price"] == 35.0
    assert client.get("/api/products/none").status_code == 404
    coffee = client.get("/api/products", params={"category": "coffee"}).json()
    assert [p["id"] for p in coffee] == ["p-flat-white"]
    assert len(client.get("/api/products").json()) >= 3
