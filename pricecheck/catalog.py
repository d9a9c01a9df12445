# pricecheck/catalog.py
"""
In-memory catalog of categories and their products.

The store owns all catalog state. Every mutation updates memory first and
then mirrors a JSON snapshot to the key-value storage; a failed save is
logged and never rolled back. Mutations that name a missing category or
product are silent no-ops, reads of a missing category return nothing;
only ``require_category`` raises NotFound.
"""
import json
import logging
import uuid
from typing import Any, Callable, List, Optional, Tuple

from pydantic import ValidationError

from .comparison import (
    BillSelection,
    Selection,
    best_value_id,
    compare,
    selected_products,
    summarize_bill,
)
from .errors import NotFound
from .models import BillSummary, Category, Comparison, Product, utcnow
from .pricing import price_product

logger = logging.getLogger(__name__)

CATEGORIES_KEY = "@categories"

Observer = Callable[["CatalogStore"], None]


def _new_id() -> str:
    return uuid.uuid4().hex


class CatalogStore:
    def __init__(self, storage=None, key: str = CATEGORIES_KEY, selection_limit: int = 5,
                 executor=None, currency_symbol: str = "$"):
        self.storage = storage
        self.key = key
        self.executor = executor
        self.currency_symbol = currency_symbol
        self.selection = Selection(selection_limit)
        self.bill = BillSelection()
        self._categories: List[Category] = []
        self._observers: List[Observer] = []

    # ---------------------------
    # Persistence
    # ---------------------------
    def load(self) -> None:
        """Replace in-memory categories with the persisted copy, if there is a usable one."""
        if self.storage is None:
            return
        try:
            blob = self.storage.load(self.key)
        except Exception:
            logger.exception("could not read %s", self.key)
            return
        if blob is None:
            return
        try:
            self._categories = [Category.model_validate(c) for c in json.loads(blob)]
        except (ValueError, TypeError, ValidationError):
            logger.exception("ignoring unreadable %s record", self.key)
            # keep a copy so the next save does not destroy it
            self._write(blob, f"{self.key}.unreadable")
            return
        logger.info("loaded %d categories", len(self._categories))

    def snapshot(self) -> str:
        return json.dumps([c.model_dump(mode="json", by_alias=True) for c in self._categories])

    def _write(self, blob: str, key: Optional[str] = None) -> None:
        key = key or self.key
        try:
            ok = self.storage.save(key, blob)
        except Exception:
            logger.exception("saving %s failed", key)
            return
        if not ok:
            logger.warning("saving %s was rejected by storage", key)

    def _persist(self) -> None:
        if self.storage is None:
            return
        blob = self.snapshot()
        if self.executor is not None:
            self.executor.submit(self._write, blob)
        else:
            self._write(blob)

    def _notify(self) -> None:
        for observer in list(self._observers):
            observer(self)

    def _changed(self) -> None:
        self._persist()
        self._notify()

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        self._observers.append(observer)

        def unsubscribe():
            if observer in self._observers:
                self._observers.remove(observer)
        return unsubscribe

    # ---------------------------
    # Categories
    # ---------------------------
    @property
    def categories(self) -> List[Category]:
        return list(self._categories)

    def list_categories(self) -> List[Category]:
        """Pinned categories first, newest first within each group."""
        newest_first = sorted(self._categories, key=lambda c: c.created_at, reverse=True)
        return sorted(newest_first, key=lambda c: not c.pinned)

    def get_category(self, category_id: str) -> Optional[Category]:
        for category in self._categories:
            if category.id == category_id:
                return category
        return None

    def require_category(self, category_id: str) -> Category:
        category = self.get_category(category_id)
        if category is None:
            raise NotFound(f"category {category_id} not found")
        return category

    def add_category(self, name: str) -> Category:
        category = Category(id=_new_id(), name=name, created_at=utcnow())
        self._categories.append(category)
        self._changed()
        return category

    def update_category(self, category_id: str, new_name: str) -> Optional[Category]:
        category = self.get_category(category_id)
        if category is None:
            return None
        category.name = new_name
        self._changed()
        return category

    def delete_category(self, category_id: str) -> bool:
        category = self.get_category(category_id)
        if category is None:
            return False
        self._categories.remove(category)
        dropped = [p.id for p in category.products]
        self.selection.discard(dropped)
        self.bill.discard(dropped)
        self._changed()
        return True

    def toggle_pin_category(self, category_id: str) -> Optional[Category]:
        category = self.get_category(category_id)
        if category is None:
            return None
        category.pinned = not category.pinned
        self._changed()
        return category

    # ---------------------------
    # Products
    # ---------------------------
    def add_product(self, category_id: str, brand: Optional[str], price: Any, quantity: Any, unit: Any,
                    discount: Any = 0, notes: Optional[str] = "") -> Optional[Product]:
        priced = price_product(price, quantity, unit, discount)
        category = self.get_category(category_id)
        if category is None:
            return None
        product = Product(
            id=_new_id(),
            brand=brand or "",
            notes=notes or "",
            created_at=utcnow(),
            **priced._asdict(),
        )
        category.products.append(product)
        self._changed()
        return product

    def update_product(self, category_id: str, product_id: str, brand: Optional[str], price: Any,
                       quantity: Any, unit: Any, discount: Any = 0,
                       notes: Optional[str] = "") -> Optional[Product]:
        priced = price_product(price, quantity, unit, discount)
        category = self.get_category(category_id)
        if category is None:
            return None
        for index, existing in enumerate(category.products):
            if existing.id == product_id:
                updated = existing.model_copy(update=dict(
                    brand=brand or "",
                    notes=notes or "",
                    **priced._asdict(),
                ))
                category.products[index] = updated
                self._changed()
                return updated
        return None

    def delete_product(self, category_id: str, product_id: str) -> bool:
        category = self.get_category(category_id)
        if category is None:
            return False
        remaining = [p for p in category.products if p.id != product_id]
        if len(remaining) == len(category.products):
            return False
        category.products = remaining
        self.selection.discard([product_id])
        self.bill.discard([product_id])
        self._changed()
        return True

    def get_category_products(self, category_id: str) -> List[Product]:
        category = self.get_category(category_id)
        return list(category.products) if category else []

    def find_product(self, product_id: str) -> Optional[Tuple[Category, Product]]:
        for category in self._categories:
            for product in category.products:
                if product.id == product_id:
                    return category, product
        return None

    def all_products(self) -> List[Product]:
        return [p for c in self._categories for p in c.products]

    def get_best_value_product_id(self, category_id: str) -> Optional[str]:
        return best_value_id(self.get_category_products(category_id))

    # ---------------------------
    # Comparison selection
    # ---------------------------
    def toggle_selection(self, product_id: str) -> bool:
        if self.find_product(product_id) is None:
            return False
        selected = self.selection.toggle(product_id)
        self._notify()
        return selected

    def clear_selection(self) -> None:
        self.selection.clear()
        self._notify()

    def get_selected_products_data(self, category_id: str) -> List[Product]:
        return selected_products(self.get_category_products(category_id), self.selection)

    def compare_selected(self, category_id: str) -> Comparison:
        return compare(category_id, self.get_selected_products_data(category_id), self.currency_symbol)

    # ---------------------------
    # Bill
    # ---------------------------
    def toggle_bill_item(self, product_id: str) -> bool:
        if self.find_product(product_id) is None:
            return False
        selected = self.bill.toggle(product_id)
        self._notify()
        return selected

    def select_all_bill_items(self) -> None:
        self.bill.replace(p.id for p in self.all_products())
        self._notify()

    def clear_bill(self) -> None:
        self.bill.clear()
        self._notify()

    def bill_summary(self) -> BillSummary:
        return summarize_bill(self._categories, self.bill)

    def reset(self) -> None:
        self._categories = []
        self.selection.clear()
        self.bill.clear()
        logger.info("catalog reset")
        self._changed()
