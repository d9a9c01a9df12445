# cli.py
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.text import Text
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from pricecheck.config import get_settings
from pricecheck.pricing import format_price, format_unit_price
from pricecheck.units import Unit
from sdk.pricecheck_client import PriceCheckClient

console = Console()
settings = get_settings()
c = PriceCheckClient(base_url=settings.api_url)
CURRENCY = settings.currency_symbol

# Global state for status messages and caching
status_message = "Ready"
category_cache: List[Dict[str, Any]] = []

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})

UNIT_COMPLETER = WordCompleter([u.value for u in Unit], ignore_case=True)


# ---------------------------
# Display helpers
# ---------------------------
def _label(product: Dict[str, Any]) -> str:
    return product.get("brand") or f"Product {product.get('id', '?')[:8]}"


def show_categories(categories: List[Dict[str, Any]]):
    if not categories:
        console.print("[italic yellow]No categories yet[/italic yellow]")
        return

    table = Table(
        title="🗂️ Categories",
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=12)
    table.add_column("Name", style="bold", width=24)
    table.add_column("Products", justify="right", width=9)
    table.add_column("Best value", width=24)
    table.add_column("Pinned", justify="center", width=7)

    for cat in categories:
        products = cat.get("products", [])
        best = next((p for p in products if p["id"] == cat.get("bestValueProductId")), None)
        best_text = "-"
        if best:
            best_text = f"{_label(best)} ({format_unit_price(best['unitPrice'], best['unit'], CURRENCY)})"
        table.add_row(
            cat.get("id", "N/A")[:12],
            cat.get("name", "N/A"),
            str(len(products)),
            best_text,
            "📌" if cat.get("pinned") else ""
        )
    console.print(table)


def show_products(products: List[Dict[str, Any]], best_id: Optional[str] = None, selected: Optional[List[str]] = None):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    selected = selected or []
    table = Table(
        title="📦 Products",
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=12)
    table.add_column("Brand", style="bold", width=18)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Disc.", justify="right", width=6)
    table.add_column("Final", justify="right", width=10)
    table.add_column("Qty", justify="right", width=10)
    table.add_column("Unit price", justify="right", width=16)
    table.add_column("", width=14)

    for p in products:
        badges = []
        if p["id"] == best_id:
            badges.append("[green]✓ BEST VALUE[/green]")
        if p["id"] in selected:
            badges.append("[cyan]selected[/cyan]")
        table.add_row(
            p["id"][:12],
            p.get("brand") or "-",
            format_price(p["price"], CURRENCY),
            f"{p.get('discount', 0):g}%" if p.get("discount") else "",
            format_price(p["finalPrice"], CURRENCY),
            f"{p['quantity']:g} {p['unit']}",
            format_unit_price(p["unitPrice"], p["unit"], CURRENCY),
            "\n".join(badges)
        )
    console.print(table)


def show_comparison(comparison: Dict[str, Any]):
    rows = comparison.get("rows", [])
    if not rows:
        console.print("[italic yellow]Select products in this category to compare them[/italic yellow]")
        return

    table = Table(
        title="⚖️ Comparison",
        box=box.ROUNDED,
        header_style="bold yellow",
        title_style="bold yellow",
        show_lines=True
    )
    table.add_column("Product", style="bold", width=20)
    table.add_column("Final price", justify="right", width=12)
    table.add_column("Quantity", justify="right", width=10)
    table.add_column("Unit price", justify="right", width=18)
    table.add_column("Savings", width=24)

    for row in rows:
        p = row["product"]
        unit_text = row["formattedUnitPrice"]
        if row["isBestValue"]:
            unit_text = f"[bold green]{unit_text} ✓[/bold green]"
        if row["mostExpensive"]:
            savings = "[dim]Most expensive[/dim]"
        else:
            savings = (f"[green]-{row['savingsPercent']}%[/green]\n"
                       f"[dim]Save {format_price(row['savings'], CURRENCY)}/unit[/dim]")
        table.add_row(
            _label(p),
            format_price(p["finalPrice"], CURRENCY),
            f"{p['quantity']:g} {p['unit']}",
            unit_text,
            savings
        )
    console.print(table)


def show_bill(bill: Dict[str, Any]):
    items = bill.get("items", [])
    title = Text()
    title.append("🧾 Bill - Total: ", style="bold")
    title.append(format_price(bill.get("total", 0), CURRENCY), style="bold green")

    if not items:
        console.print(Panel("No products in any category yet", title=title, style="blue"))
        return

    table = Table(box=box.ROUNDED, header_style="bold blue", show_lines=True)
    table.add_column("", width=3)
    table.add_column("Category", width=16)
    table.add_column("Product", style="bold", width=20)
    table.add_column("Price", justify="right", width=12)
    table.add_column("ID", style="dim", width=12)

    for it in items:
        p = it["product"]
        price_text = format_price(p["finalPrice"], CURRENCY)
        if p.get("discount"):
            price_text = f"{price_text}\n[dim strike]{format_price(p['price'], CURRENCY)}[/dim strike]"
        table.add_row(
            "☑" if it["selected"] else "☐",
            it["categoryName"],
            _label(p),
            price_text,
            p["id"][:12]
        )

    footer = f"{len(bill.get('selectedIds', []))} selected"
    if bill.get("totalSavings", 0) > 0:
        footer += f" · [green]you save {format_price(bill['totalSavings'], CURRENCY)}[/green]"
    console.print(Panel(table, title=title, subtitle=footer, border_style="blue"))


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


# ---------------------------
# API wrapper
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner.
    Returns the result, or None after printing the error.
    """
    global status_message
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)

        if success_msg:
            status_message = success_msg
            console.print(show_status(success_msg, True))
        return result
    except Exception as e:
        detail = getattr(getattr(e, "response", None), "text", "") or str(e)
        status_message = f"Error: {detail}"
        console.print(show_status(status_message, False))
        return None


# ---------------------------
# Autocompletion helpers
# ---------------------------
def refresh_categories():
    global category_cache
    category_cache = try_api(c.list_categories) or []
    return category_cache


def get_category_completer():
    if not category_cache:
        refresh_categories()
    words = [cat["name"] for cat in category_cache] + [cat["id"] for cat in category_cache]
    return WordCompleter(words, ignore_case=True)


def get_product_completer(products: List[Dict[str, Any]]):
    return WordCompleter([p["id"] for p in products], ignore_case=True)


def resolve_category(term: str) -> Optional[Dict[str, Any]]:
    term = term.strip()
    for cat in category_cache:
        if cat["id"] == term or cat["name"].lower() == term.lower():
            return cat
    console.print(f"[red]No category matches '{term}'[/red]")
    return None


def resolve_product(products: List[Dict[str, Any]], term: str) -> Optional[Dict[str, Any]]:
    term = term.strip()
    for p in products:
        if p["id"] == term or p["id"].startswith(term):
            return p
    console.print(f"[red]No product matches '{term}'[/red]")
    return None


def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🛒 pricecheck",
        "[bold blue]Unit Price Comparison CLI[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def pick_category() -> Optional[Dict[str, Any]]:
    refresh_categories()
    term = prompt_with_autocomplete("Category (name or ID)", completer=get_category_completer())
    return resolve_category(term)


def pick_product(cat: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    products = cat.get("products", [])
    if not products:
        console.print("[italic yellow]This category has no products[/italic yellow]")
        return None
    show_products(products, cat.get("bestValueProductId"))
    term = prompt_with_autocomplete("Product ID", completer=get_product_completer(products))
    return resolve_product(products, term)


def ask_product_fields(existing: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    existing = existing or {}
    brand = prompt_with_autocomplete("🏷️ Brand (optional)", default=existing.get("brand", ""))
    price = Prompt.ask(f"💰 Price ({CURRENCY})", default=str(existing.get("price", "")))
    quantity = Prompt.ask("📦 Quantity", default=str(existing.get("quantity", "")))
    unit = prompt_with_autocomplete("📏 Unit (g, kg, ml, L, pcs)", completer=UNIT_COMPLETER,
                                    default=existing.get("unit", "g"))
    discount = Prompt.ask("🏷️ Discount %", default=str(existing.get("discount", 0)))
    notes = prompt_with_autocomplete("📝 Notes (optional)", default=existing.get("notes", ""))

    preview = try_api(c.preview, price, quantity, unit, discount, CURRENCY)
    if preview:
        console.print(Panel.fit(preview["preview"] or preview["message"], title="Unit price"))
    return {"brand": brand.strip(), "price": price, "quantity": quantity,
            "unit": unit.strip(), "discount": discount, "notes": notes}


# ---------------------------
# Main menu
# ---------------------------
def menu():
    global status_message, category_cache

    console.clear()
    console.print(create_header())
    refresh_categories()

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "🗂️ List categories", "9", "🗑️ Delete product"),
            ("2", "➕ Add category", "10", "☑️ Toggle compare"),
            ("3", "✏️ Rename category", "11", "⚖️ Compare selected"),
            ("4", "➖ Delete category", "12", "🧹 Clear comparison"),
            ("5", "📌 Pin / unpin category", "13", "🧾 View bill"),
            ("6", "📦 List products", "14", "☑️ Toggle bill item"),
            ("7", "➕ Add product", "15", "✅ Select all for bill"),
            ("8", "✏️ Edit product", "16", "🧹 Clear bill"),
            ("", "", "17", "🔄 Reset catalog"),
            ("", "", "q", "👋 Quit"),
        ]

        for row in options:
            menu_table.add_row(*row)

        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 18)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            cats = try_api(c.list_categories, success_msg="Categories loaded")
            if cats is not None:
                category_cache = cats
                show_categories(cats)

        elif choice == "2":
            name = prompt_with_autocomplete("Category name").strip()
            if not name:
                console.print("[red]Please enter a category name[/red]")
                continue
            resp = try_api(c.add_category, name, success_msg=f"Category '{name}' added")
            if resp:
                refresh_categories()

        elif choice == "3":
            cat = pick_category()
            if cat:
                name = prompt_with_autocomplete("New name", default=cat["name"]).strip()
                try_api(c.rename_category, cat["id"], name, success_msg=f"Renamed to '{name}'")

        elif choice == "4":
            cat = pick_category()
            if cat and Confirm.ask(f"[red]Delete '{cat['name']}' and its {len(cat['products'])} products?[/red]"):
                try_api(c.delete_category, cat["id"], success_msg=f"Category '{cat['name']}' deleted")
                refresh_categories()

        elif choice == "5":
            cat = pick_category()
            if cat:
                resp = try_api(c.toggle_pin, cat["id"])
                if resp and resp.get("category"):
                    pinned = resp["category"]["pinned"]
                    status_message = f"'{cat['name']}' {'pinned' if pinned else 'unpinned'}"

        elif choice == "6":
            cat = pick_category()
            if cat:
                selected = (try_api(c.selection) or {}).get("selected", [])
                show_products(cat["products"], cat.get("bestValueProductId"), selected)

        elif choice == "7":
            cat = pick_category()
            if cat:
                fields = ask_product_fields()
                try_api(c.add_product, cat["id"], success_msg=f"Product added to '{cat['name']}'", **fields)

        elif choice == "8":
            cat = pick_category()
            product = pick_product(cat) if cat else None
            if product:
                fields = ask_product_fields(product)
                try_api(c.update_product, cat["id"], product["id"], success_msg="Product updated", **fields)

        elif choice == "9":
            cat = pick_category()
            product = pick_product(cat) if cat else None
            if product and Confirm.ask(f"Delete {_label(product)}?"):
                try_api(c.delete_product, cat["id"], product["id"], success_msg="Product deleted")

        elif choice == "10":
            cat = pick_category()
            product = pick_product(cat) if cat else None
            if product:
                resp = try_api(c.toggle_selection, product["id"])
                if resp is not None:
                    if resp["selected"]:
                        status_message = f"{_label(product)} added to comparison"
                    elif resp["state"] == "full" and product["id"] not in resp["selection"]:
                        status_message = "Error: you can compare up to 5 products"
                    else:
                        status_message = f"{_label(product)} removed from comparison"

        elif choice == "11":
            cat = pick_category()
            if cat:
                comparison = try_api(c.comparison, cat["id"], success_msg=f"Comparing in '{cat['name']}'")
                if comparison is not None:
                    show_comparison(comparison)

        elif choice == "12":
            try_api(c.clear_selection, success_msg="Comparison cleared")

        elif choice == "13":
            bill = try_api(c.view_bill, success_msg="Bill loaded")
            if bill:
                show_bill(bill)

        elif choice == "14":
            bill = try_api(c.view_bill) or {}
            products = [it["product"] for it in bill.get("items", [])]
            if not products:
                console.print("[italic yellow]No products in any category yet[/italic yellow]")
                continue
            show_bill(bill)
            term = prompt_with_autocomplete("Product ID", completer=get_product_completer(products))
            product = resolve_product(products, term)
            if product:
                bill = try_api(c.toggle_bill_item, product["id"])
                if bill:
                    show_bill(bill)

        elif choice == "15":
            bill = try_api(c.select_all_bill_items, success_msg="All products selected")
            if bill:
                show_bill(bill)

        elif choice == "16":
            bill = try_api(c.clear_bill, success_msg="Bill cleared")
            if bill:
                show_bill(bill)

        elif choice == "17":
            if Confirm.ask("[red]This will delete every category and product. Continue?[/red]"):
                resp = try_api(c.reset, success_msg="Catalog reset")
                console.print(resp)
                category_cache = []

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Happy shopping! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n\n[bold red]Unexpected error: {e}[/bold red]")
        sys.exit(1)
