# tests/test_sdk.py
import pytest
import requests
from fastapi.testclient import TestClient
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from pricecheck.main import app
from sdk.pricecheck_client import PriceCheckClient


class AppAdapter(BaseAdapter):
    """Serves requests.Session traffic from the ASGI app in-process."""

    def __init__(self, asgi_app):
        super().__init__()
        self.client = TestClient(asgi_app)

    def send(self, request, **kwargs):
        r = self.client.request(request.method, request.url, content=request.body,
                                headers=dict(request.headers))
        resp = requests.Response()
        resp.status_code = r.status_code
        resp.reason = r.reason_phrase
        resp.headers = CaseInsensitiveDict(r.headers)
        resp._content = r.content
        resp.url = request.url
        resp.request = request
        return resp

    def close(self):
        self.client.close()


@pytest.fixture
def sdk():
    c = PriceCheckClient(base_url="http://testserver/")
    c.session.mount("http://testserver", AppAdapter(app))
    c.reset()
    yield c
    c.session.close()


def test_catalog_roundtrip(sdk):
    cid = sdk.add_category("Coffee")["category_id"]
    a = sdk.add_product(cid, "10", "500", "g", brand="Arabica", discount="20")["product"]
    b = sdk.add_product(cid, 20, 1, "kg", brand="House")["product"]
    assert sdk.best_value(cid) == a["id"]
    assert [p["brand"] for p in sdk.list_products(cid)] == ["Arabica", "House"]

    sdk.update_product(cid, b["id"], 12, 1, "kg", brand="House")
    assert sdk.best_value(cid) == b["id"]

    sdk.rename_category(cid, "Beans")
    sdk.toggle_pin(cid)
    cat = sdk.get_category(cid)
    assert cat["name"] == "Beans"
    assert cat["pinned"] is True

    assert sdk.delete_product(cid, a["id"])["deleted"] is True
    assert sdk.delete_category(cid)["deleted"] is True
    assert sdk.get_category(cid) is None
    assert sdk.list_categories() == []


def test_comparison_and_bill(sdk):
    cid = sdk.add_category("Milk")["category_id"]
    a = sdk.add_product(cid, 10, 1, "L", discount=10)["product"]
    b = sdk.add_product(cid, 5, 1, "L")["product"]
    sdk.toggle_selection(a["id"])
    sdk.toggle_selection(b["id"])
    assert sdk.selection()["state"] == "partial"
    assert sdk.comparison(cid)["bestValueProductId"] == b["id"]
    sdk.clear_selection()
    assert sdk.selection()["selected"] == []

    sdk.toggle_bill_item(a["id"])
    bill = sdk.toggle_bill_item(b["id"])
    assert bill["total"] == pytest.approx(14.0)
    assert bill["totalSavings"] == pytest.approx(1.0)
    assert sdk.clear_bill()["total"] == 0
    assert len(sdk.select_all_bill_items()["selectedIds"]) == 2
    assert sdk.view_bill()["total"] == pytest.approx(14.0)


def test_preview_and_errors(sdk):
    assert sdk.preview(5, 1, "L", currency_symbol="€")["preview"] == "€0.0050/ml"
    cid = sdk.add_category("Bad")["category_id"]
    with pytest.raises(requests.HTTPError) as exc:
        sdk.add_product(cid, "free", 1, "g")
    assert exc.value.response.status_code == 400
    assert "price" in exc.value.response.json()["detail"]
    with pytest.raises(requests.HTTPError):
        sdk.rename_category(cid, "   ")
    assert sdk.get_category("nope") is None
