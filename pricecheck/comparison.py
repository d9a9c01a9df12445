# pricecheck/comparison.py
"""
Read-only comparison queries over catalog products.

Two selections exist side by side: the comparison ``Selection`` (at most
five products, used for the side-by-side view) and the ``BillSelection``
(any number of products across categories, used for the bill total).
"""
import math
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from .models import BillItem, BillSummary, Category, Comparison, ComparisonRow, Product
from .pricing import format_unit_price

MAX_SELECTION = 5


class SelectionState(str, Enum):
    EMPTY = "empty"
    PARTIAL = "partial"
    FULL = "full"


class Selection:
    """Ordered set of product ids with a membership cap."""

    def __init__(self, limit: int = MAX_SELECTION):
        self.limit = limit
        self._ids: List[str] = []

    def __contains__(self, product_id: str) -> bool:
        return product_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self):
        return iter(list(self._ids))

    @property
    def ids(self) -> List[str]:
        return list(self._ids)

    @property
    def state(self) -> SelectionState:
        if not self._ids:
            return SelectionState.EMPTY
        if self.limit is not None and len(self._ids) >= self.limit:
            return SelectionState.FULL
        return SelectionState.PARTIAL

    def toggle(self, product_id: str) -> bool:
        """Flip membership of ``product_id``. Returns whether it is selected afterwards."""
        if product_id in self._ids:
            self._ids.remove(product_id)
            return False
        if self.state is SelectionState.FULL:
            return False
        self._ids.append(product_id)
        return True

    def discard(self, product_ids: Iterable[str]) -> None:
        dropped = set(product_ids)
        self._ids = [pid for pid in self._ids if pid not in dropped]

    def replace(self, product_ids: Iterable[str]) -> None:
        self._ids = []
        for pid in product_ids:
            if pid not in self._ids and self.state is not SelectionState.FULL:
                self._ids.append(pid)

    def clear(self) -> None:
        self._ids = []


class BillSelection(Selection):
    def __init__(self):
        super().__init__(limit=None)


def best_value_id(products: Sequence[Product]) -> Optional[str]:
    """Id of the lowest unit price; the first one wins a tie."""
    best = None
    for product in products:
        if best is None or product.unit_price < best.unit_price:
            best = product
    return best.id if best else None


def selected_products(products: Sequence[Product], selection: Iterable[str]) -> List[Product]:
    chosen = set(selection)
    return [p for p in products if p.id in chosen]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compare(category_id: str, products: Sequence[Product], currency_symbol: str = "$") -> Comparison:
    """
    Badge and savings for each compared product.

    Savings are measured against the most expensive unit price in the set,
    so that product reports zero savings and is marked ``most_expensive``.
    """
    if not products:
        return Comparison(category_id=category_id)

    best_id = best_value_id(products)
    max_unit_price = max(p.unit_price for p in products)
    rows = []
    for product in products:
        savings = max_unit_price - product.unit_price
        percent = _round_half_up(100 * savings / max_unit_price) if max_unit_price > 0 else 0
        rows.append(ComparisonRow(
            product=product,
            is_best_value=product.id == best_id,
            most_expensive=savings <= 0,
            savings=savings if savings > 0 else 0.0,
            savings_percent=percent if savings > 0 else 0,
            formatted_unit_price=format_unit_price(product.unit_price, product.unit, currency_symbol),
        ))
    return Comparison(category_id=category_id, best_value_product_id=best_id, rows=rows)


def bill_items(categories: Sequence[Category], selection: Iterable[str] = ()) -> List[BillItem]:
    chosen = set(selection)
    items = []
    for category in categories:
        for product in category.products:
            items.append(BillItem(
                product=product,
                category_id=category.id,
                category_name=category.name,
                selected=product.id in chosen,
            ))
    return items


def bill_total(products: Iterable[Product]) -> float:
    return sum(p.final_price for p in products)


def bill_savings(products: Iterable[Product]) -> float:
    return sum(p.price - p.final_price for p in products if p.discount > 0)


def summarize_bill(categories: Sequence[Category], selection: Iterable[str]) -> BillSummary:
    """Bill for the selected products; ids that are no longer in the catalog are ignored."""
    selected = list(selection)
    items = bill_items(categories, selected)
    chosen = [item.product for item in items if item.selected]
    known = {p.id for p in chosen}
    return BillSummary(
        items=items,
        selected_ids=[pid for pid in selected if pid in known],
        total=bill_total(chosen),
        total_savings=bill_savings(chosen),
    )
