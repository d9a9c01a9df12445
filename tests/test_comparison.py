# tests/test_comparison.py
import random

import pytest

from pricecheck.comparison import (
    BillSelection,
    Selection,
    SelectionState,
    best_value_id,
    bill_savings,
    bill_total,
    compare,
    selected_products,
    summarize_bill,
)
from pricecheck.models import Category, Product


def make_product(pid, unit_price, price=1.0, discount=0.0, final_price=None):
    return Product(
        id=pid, price=price, discount=discount,
        final_price=price if final_price is None else final_price,
        quantity=1, unit="g", unit_price=unit_price,
    )


def test_selection_state_machine():
    sel = Selection()
    assert sel.state is SelectionState.EMPTY
    assert sel.toggle("a") is True
    assert sel.state is SelectionState.PARTIAL
    for pid in "bcde":
        sel.toggle(pid)
    assert sel.state is SelectionState.FULL
    # a sixth id is silently rejected
    assert sel.toggle("f") is False
    assert sel.ids == list("abcde")
    # toggling a member removes it
    assert sel.toggle("c") is False
    assert sel.ids == list("abde")
    assert sel.state is SelectionState.PARTIAL
    sel.clear()
    assert sel.state is SelectionState.EMPTY


def test_selection_never_exceeds_limit():
    rng = random.Random(7)
    sel = Selection()
    for _ in range(500):
        sel.toggle(f"p{rng.randrange(12)}")
        assert len(sel) <= 5
        assert len(set(sel.ids)) == len(sel)


def test_bill_selection_is_unbounded():
    bill = BillSelection()
    for i in range(20):
        bill.toggle(str(i))
    assert len(bill) == 20
    assert bill.state is SelectionState.PARTIAL


def test_selection_discard_and_replace():
    sel = Selection(limit=3)
    sel.replace(["a", "b", "a", "c", "d"])
    assert sel.ids == ["a", "b", "c"]
    sel.discard(["b", "zzz"])
    assert sel.ids == ["a", "c"]


def test_selected_products_keep_category_order():
    products = [make_product(pid, 1) for pid in "wxyz"]
    assert [p.id for p in selected_products(products, ["z", "x"])] == ["x", "z"]


def test_best_value_id():
    products = [make_product("a", 0.016), make_product("b", 0.02), make_product("c", 0.014)]
    assert best_value_id(products) == "c"
    assert best_value_id([]) is None
    assert best_value_id([make_product("a", 1), make_product("b", 1)]) == "a"


def test_compare_badges_and_savings():
    products = [make_product("a", 0.016), make_product("b", 0.02), make_product("c", 0.014)]
    result = compare("cat", products)
    rows = {row.product.id: row for row in result.rows}
    assert result.best_value_product_id == "c"
    assert rows["c"].is_best_value
    assert not rows["a"].is_best_value
    assert rows["a"].savings == pytest.approx(0.004)
    assert rows["a"].savings_percent == 20
    assert rows["c"].savings_percent == 30
    assert rows["b"].most_expensive
    assert rows["b"].savings == 0
    assert rows["b"].savings_percent == 0
    assert not rows["a"].most_expensive
    assert rows["a"].formatted_unit_price == "$0.0160/g"


def test_compare_single_product_is_most_expensive():
    result = compare("cat", [make_product("only", 0.5)])
    assert result.rows[0].is_best_value
    assert result.rows[0].most_expensive


def test_compare_empty():
    result = compare("cat", [])
    assert result.rows == []
    assert result.best_value_product_id is None


def test_savings_percent_rounds_half_up():
    result = compare("cat", [make_product("a", 1.0), make_product("b", 0.995)])
    rows = {row.product.id: row for row in result.rows}
    assert rows["b"].savings_percent == 1


def test_bill_totals():
    a = make_product("a", 1, price=10.0, discount=10, final_price=9.0)
    b = make_product("b", 1, price=5.0)
    assert bill_total([a, b]) == pytest.approx(14.0)
    assert bill_savings([a, b]) == pytest.approx(1.0)
    assert bill_total([]) == 0


def test_summarize_bill_across_categories():
    a = make_product("a", 1, price=10.0, discount=10, final_price=9.0)
    b = make_product("b", 1, price=5.0)
    c = make_product("c", 1, price=3.0, discount=50, final_price=1.5)
    categories = [
        Category(id="c1", name="Coffee", products=[a, c]),
        Category(id="c2", name="Milk", products=[b]),
    ]
    summary = summarize_bill(categories, ["b", "a", "gone"])
    assert [item.product.id for item in summary.items] == ["a", "c", "b"]
    assert [item.category_name for item in summary.items] == ["Coffee", "Coffee", "Milk"]
    assert [item.selected for item in summary.items] == [True, False, True]
    assert summary.selected_ids == ["b", "a"]
    assert summary.total == pytest.approx(14.0)
    assert summary.total_savings == pytest.approx(1.0)
