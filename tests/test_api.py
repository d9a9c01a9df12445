# tests/test_api.py
import pytest
from fastapi.testclient import TestClient

from pricecheck.main import app, store

client = TestClient(app)


def reset():
    client.post("/reset")


def add_category(name):
    r = client.post("/categories", json={"name": name})
    assert r.status_code == 201
    return r.json()["category_id"]


def add_product(cid, price, quantity, unit, discount=0, brand=""):
    r = client.post(f"/categories/{cid}/products", json={
        "brand": brand, "price": price, "quantity": quantity, "unit": unit, "discount": discount,
    })
    assert r.status_code == 201, r.text
    return r.json()["product"]


def test_add_product_and_derived_fields():
    reset()
    cid = add_category("Coffee")
    product = add_product(cid, "10.00", "500", "g", discount="20", brand="Arabica")
    assert product["finalPrice"] == pytest.approx(8.0)
    assert product["unitPrice"] == pytest.approx(0.016)
    assert product["unit"] == "g"
    listed = client.get(f"/categories/{cid}/products").json()
    assert [p["id"] for p in listed] == [product["id"]]


def test_invalid_input_returns_400_and_stores_nothing():
    reset()
    cid = add_category("Coffee")
    for payload in (
        {"price": "abc", "quantity": 1, "unit": "g"},
        {"price": 0, "quantity": 1, "unit": "g"},
        {"price": 1, "quantity": "-1", "unit": "g"},
        {"price": 1, "quantity": 1, "unit": "oz"},
        {"price": 1, "quantity": 1, "unit": "g", "discount": 120},
        {"price": None, "quantity": 1, "unit": "g"},
        {"quantity": 1, "unit": "g"},
        {"price": 1, "quantity": None, "unit": "g"},
        {"price": 1, "unit": "g"},
        {"price": 1, "quantity": 1},
    ):
        r = client.post(f"/categories/{cid}/products", json=payload)
        assert r.status_code == 400
        assert r.json()["detail"]
    assert client.get(f"/categories/{cid}/products").json() == []


def test_update_product_with_missing_price_returns_400():
    reset()
    cid = add_category("Coffee")
    product = add_product(cid, 5, 100, "g")
    r = client.put(f"/categories/{cid}/products/{product['id']}", json={"quantity": 1, "unit": "g"})
    assert r.status_code == 400
    assert client.get(f"/categories/{cid}/products").json() == [product]


def test_blank_category_names_are_rejected():
    reset()
    assert client.post("/categories", json={"name": "  "}).status_code == 400
    cid = add_category("Coffee")
    r = client.put(f"/categories/{cid}", json={"name": "   "})
    assert r.status_code == 400
    assert client.get(f"/categories/{cid}").json()["name"] == "Coffee"
    r = client.put(f"/categories/{cid}", json={"name": " Beans "})
    assert r.json()["category"]["name"] == "Beans"


def test_missing_targets():
    reset()
    assert client.get("/categories/nope").status_code == 404
    assert client.get("/categories/nope/products").json() == []
    assert client.get("/categories/nope/best-value").json()["product_id"] is None
    assert client.put("/categories/nope", json={"name": "x"}).json()["updated"] is False
    assert client.delete("/categories/nope").json()["deleted"] is False
    r = client.post("/categories/nope/products", json={"price": 1, "quantity": 1, "unit": "g"})
    assert r.status_code == 201
    assert r.json()["product"] is None


def test_category_listing_order_and_best_value():
    reset()
    first = add_category("First")
    second = add_category("Second")
    client.post(f"/categories/{first}/pin")
    add_product(first, 10, 500, "g")
    cheap = add_product(first, 14, 1, "kg")
    cats = client.get("/categories").json()
    assert [c["id"] for c in cats] == [first, second]
    assert cats[0]["pinned"] is True
    assert cats[0]["bestValueProductId"] == cheap["id"]
    assert cats[1]["bestValueProductId"] is None


def test_update_and_delete_product():
    reset()
    cid = add_category("Milk")
    product = add_product(cid, 5, 1, "L")
    r = client.put(f"/categories/{cid}/products/{product['id']}", json={
        "brand": "Farm", "price": 4, "quantity": 2, "unit": "L", "discount": 0,
    })
    body = r.json()
    assert body["updated"] is True
    assert body["product"]["unitPrice"] == pytest.approx(0.002)
    r = client.delete(f"/categories/{cid}/products/{product['id']}")
    assert r.json()["deleted"] is True
    assert client.get(f"/categories/{cid}/products").json() == []


def test_selection_cap_and_comparison():
    reset()
    cid = add_category("Coffee")
    a = add_product(cid, 8, 500, "g")      # 0.016
    b = add_product(cid, 10, 500, "g")     # 0.02
    c = add_product(cid, 7, 500, "g")      # 0.014
    d = add_product(cid, 1, 1000, "g")     # 0.001, best in category but not selected
    for p in (a, b, c):
        client.post("/selection/toggle", json={"product_id": p["id"]})

    comparison = client.get(f"/categories/{cid}/comparison").json()
    assert comparison["bestValueProductId"] == c["id"]
    assert client.get(f"/categories/{cid}/best-value").json()["product_id"] == d["id"]
    rows = {row["product"]["id"]: row for row in comparison["rows"]}
    assert list(rows) == [a["id"], b["id"], c["id"]]
    assert rows[a["id"]]["savingsPercent"] == 20
    assert rows[b["id"]]["mostExpensive"] is True

    extra = [add_product(cid, 1 + i, 10, "g") for i in range(3)]
    for p in [d] + extra:
        r = client.post("/selection/toggle", json={"product_id": p["id"]})
    assert r.json()["selected"] is False
    assert r.json()["state"] == "full"
    assert len(client.get("/selection").json()["selected"]) == 5

    client.post("/selection/clear")
    assert client.get("/selection").json() == {"selected": [], "state": "empty"}


def test_delete_category_clears_selection():
    reset()
    cid = add_category("Coffee")
    other = add_category("Tea")
    p1 = add_product(cid, 1, 1, "g")
    p2 = add_product(other, 1, 1, "g")
    client.post("/selection/toggle", json={"product_id": p1["id"]})
    client.post("/selection/toggle", json={"product_id": p2["id"]})
    client.delete(f"/categories/{cid}")
    assert client.get("/selection").json()["selected"] == [p2["id"]]


def test_bill_totals():
    reset()
    coffee = add_category("Coffee")
    milk = add_category("Milk")
    a = add_product(coffee, 10.00, 500, "g", discount=10)
    b = add_product(milk, 5.00, 1, "L")
    add_product(milk, 2.00, 1, "L")
    client.post("/bill/toggle", json={"product_id": a["id"]})
    bill = client.post("/bill/toggle", json={"product_id": b["id"]}).json()
    assert bill["total"] == pytest.approx(14.0)
    assert bill["totalSavings"] == pytest.approx(1.0)
    assert bill["selectedIds"] == [a["id"], b["id"]]
    assert {item["categoryName"] for item in bill["items"]} == {"Coffee", "Milk"}

    bill = client.post("/bill/select-all").json()
    assert len(bill["selectedIds"]) == 3
    assert bill["total"] == pytest.approx(16.0)

    bill = client.post("/bill/clear").json()
    assert bill["total"] == 0
    assert bill["selectedIds"] == []


def test_preview():
    reset()
    r = client.post("/preview", json={"price": "10", "quantity": "500", "unit": "g", "discount": "20"})
    assert r.json()["preview"] == "$0.0160/g"
    r = client.post("/preview", json={"price": "5", "quantity": "1", "unit": "L", "currency_symbol": "€"})
    assert r.json()["preview"] == "€0.0050/ml"
    r = client.post("/preview", json={"price": "", "quantity": "1", "unit": "g"})
    assert r.json() == {"preview": None, "message": "Enter values to see unit price"}


def test_reset_clears_store():
    reset()
    add_category("Temp")
    reset()
    assert client.get("/categories").json() == []
    assert store.categories == []
