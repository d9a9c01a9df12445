#!/usr/bin/env python
from pricecheck.config import get_settings
from pricecheck.pricing import format_price
from sdk.pricecheck_client import PriceCheckClient


def main():
    c = PriceCheckClient(base_url=get_settings().api_url)

    # -----------------------------
    # Reset everything for demo
    # -----------------------------
    print("Resetting catalog...")
    c.reset()

    # -----------------------------
    # Categories
    # -----------------------------
    print("\nAdding categories...")
    coffee = c.add_category("Coffee")["category"]
    milk = c.add_category("Milk")["category"]
    c.toggle_pin(milk["id"])
    for cat in c.list_categories():
        print(cat["name"], "(pinned)" if cat["pinned"] else "")

    # -----------------------------
    # Products
    # -----------------------------
    print("\nPreviewing a unit price...")
    print(c.preview(10.00, 500, "g", discount=20)["preview"])

    print("\nAdding products...")
    a = c.add_product(coffee["id"], 10.00, 500, "g", brand="Arabica Gold", discount=20)["product"]
    b = c.add_product(coffee["id"], 20.00, 1, "kg", brand="House Blend")["product"]
    d = c.add_product(coffee["id"], 3.50, 250, "g", brand="Budget Roast")["product"]
    m = c.add_product(milk["id"], 5.00, 1, "L", brand="Farm Fresh")["product"]
    for p in c.list_products(coffee["id"]):
        print(p["brand"], p["unitPrice"])

    print("\nBest value in Coffee:", c.best_value(coffee["id"]))

    # -----------------------------
    # Compare a selection
    # -----------------------------
    print("\nComparing selected coffee...")
    for p in (a, b, d):
        c.toggle_selection(p["id"])
    for row in c.comparison(coffee["id"])["rows"]:
        badge = "BEST VALUE" if row["isBestValue"] else ""
        savings = "most expensive" if row["mostExpensive"] else f"-{row['savingsPercent']}%"
        print(row["product"]["brand"], row["formattedUnitPrice"], savings, badge)

    # -----------------------------
    # Bill
    # -----------------------------
    print("\nBuilding a bill...")
    c.toggle_bill_item(a["id"])
    bill = c.toggle_bill_item(m["id"])
    print("Total:", format_price(bill["total"]), "Savings:", format_price(bill["totalSavings"]))

    # -----------------------------
    # Delete cascades into the selection
    # -----------------------------
    print("\nDeleting Coffee...")
    c.delete_category(coffee["id"])
    print("Selection after delete:", c.selection())


if __name__ == "__main__":
    main()
