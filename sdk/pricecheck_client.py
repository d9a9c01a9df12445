# sdk/pricecheck_client.py
import requests
from typing import Optional, Union

Number = Union[float, int, str]


class PriceCheckClient:
    def __init__(self, base_url: str = "http://localhost:8085", timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.timeout = timeout

    def _get(self, path: str, **kwargs):
        r = self.session.get(f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
        r.raise_for_status()
        return r.json()

    def _post(self, path: str, payload: Optional[dict] = None):
        r = self.session.post(f"{self.base_url}{path}", json=payload, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def reset(self):
        return self._post("/reset")

    # Categories
    def list_categories(self):
        return self._get("/categories")

    def add_category(self, name: str):
        return self._post("/categories", {"name": name})

    def get_category(self, category_id: str):
        r = self.session.get(f"{self.base_url}/categories/{category_id}", timeout=self.timeout)
        # missing category is a normal answer for a lookup
        if r.status_code == 404:
            return None
        r.raise_for_status()
        return r.json()

    def rename_category(self, category_id: str, name: str):
        r = self.session.put(f"{self.base_url}/categories/{category_id}", json={"name": name}, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def delete_category(self, category_id: str):
        r = self.session.delete(f"{self.base_url}/categories/{category_id}", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def toggle_pin(self, category_id: str):
        return self._post(f"/categories/{category_id}/pin")

    # Products
    def list_products(self, category_id: str):
        return self._get(f"/categories/{category_id}/products")

    def add_product(self, category_id: str, price: Number, quantity: Number, unit: str,
                    brand: str = "", discount: Number = 0, notes: str = ""):
        return self._post(f"/categories/{category_id}/products", {
            "brand": brand, "price": price, "quantity": quantity,
            "unit": unit, "discount": discount, "notes": notes,
        })

    def update_product(self, category_id: str, product_id: str, price: Number, quantity: Number, unit: str,
                       brand: str = "", discount: Number = 0, notes: str = ""):
        r = self.session.put(f"{self.base_url}/categories/{category_id}/products/{product_id}", json={
            "brand": brand, "price": price, "quantity": quantity,
            "unit": unit, "discount": discount, "notes": notes,
        }, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def delete_product(self, category_id: str, product_id: str):
        r = self.session.delete(f"{self.base_url}/categories/{category_id}/products/{product_id}", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def best_value(self, category_id: str) -> Optional[str]:
        return self._get(f"/categories/{category_id}/best-value")["product_id"]

    def preview(self, price: Number, quantity: Number, unit: str, discount: Number = 0,
                currency_symbol: Optional[str] = None):
        payload = {"price": price, "quantity": quantity, "unit": unit, "discount": discount}
        if currency_symbol:
            payload["currency_symbol"] = currency_symbol
        return self._post("/preview", payload)

    # Comparison selection
    def selection(self):
        return self._get("/selection")

    def toggle_selection(self, product_id: str):
        return self._post("/selection/toggle", {"product_id": product_id})

    def clear_selection(self):
        return self._post("/selection/clear")

    def comparison(self, category_id: str):
        return self._get(f"/categories/{category_id}/comparison")

    # Bill
    def view_bill(self):
        return self._get("/bill")

    def toggle_bill_item(self, product_id: str):
        return self._post("/bill/toggle", {"product_id": product_id})

    def select_all_bill_items(self):
        return self._post("/bill/select-all")

    def clear_bill(self):
        return self._post("/bill/clear")
