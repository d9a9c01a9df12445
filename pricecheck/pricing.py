# pricecheck/pricing.py
import math
from typing import Any, NamedTuple, Optional

from .errors import InvalidDiscount, InvalidPrice, InvalidQuantity, ValidationFailed
from .units import UnitFamily, UnitLike, normalize, parse_unit, unit_family

UNIT_PRICE_DECIMALS = 4

_SUFFIXES = {
    UnitFamily.MASS: "/g",
    UnitFamily.VOLUME: "/ml",
    UnitFamily.COUNT: "/pcs",
}


class Pricing(NamedTuple):
    final_price: float
    unit_price: float


class PricedInput(NamedTuple):
    """Validated product input together with its derived prices."""
    price: float
    discount: float
    quantity: float
    unit: str
    final_price: float
    unit_price: float


def compute_pricing(price: float, discount_percent: float, quantity: float, unit: UnitLike) -> Pricing:
    if price < 0:
        raise InvalidPrice("price must be >= 0")
    if quantity <= 0:
        raise InvalidQuantity("quantity must be > 0")
    final_price = price - price * discount_percent / 100
    unit_price = final_price / normalize(quantity, unit)
    return Pricing(final_price, unit_price)


def _to_number(raw: Any) -> Optional[float]:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def parse_price(raw: Any) -> float:
    value = _to_number(raw)
    if value is None or value <= 0:
        raise InvalidPrice(f"price must be a positive number, got {raw!r}")
    return value


def parse_quantity(raw: Any) -> float:
    value = _to_number(raw)
    if value is None or value <= 0:
        raise InvalidQuantity(f"quantity must be a positive number, got {raw!r}")
    return value


def parse_discount(raw: Any) -> float:
    # blank discount means no discount
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return 0.0
    value = _to_number(raw)
    if value is None or not 0 <= value <= 100:
        raise InvalidDiscount(f"discount must be a percentage between 0 and 100, got {raw!r}")
    return value


def price_product(price: Any, quantity: Any, unit: Any, discount: Any = 0) -> PricedInput:
    """
    Validate raw product input and compute its derived prices.

    This is the only path from user input to stored prices; the live
    preview goes through it too, so both always agree.
    """
    num_price = parse_price(price)
    num_quantity = parse_quantity(quantity)
    parsed_unit = parse_unit(unit)
    num_discount = parse_discount(discount)
    pricing = compute_pricing(num_price, num_discount, num_quantity, parsed_unit)
    return PricedInput(
        price=num_price,
        discount=num_discount,
        quantity=num_quantity,
        unit=parsed_unit.value,
        final_price=pricing.final_price,
        unit_price=pricing.unit_price,
    )


def format_price(amount: float, currency_symbol: str = "$", decimals: int = 2) -> str:
    return f"{currency_symbol}{amount:.{decimals}f}"


def format_unit_price(unit_price: float, unit: UnitLike, currency_symbol: str = "$") -> str:
    suffix = _SUFFIXES.get(unit_family(unit), "/unit")
    return f"{format_price(unit_price, currency_symbol, UNIT_PRICE_DECIMALS)}{suffix}"


def preview_unit_price(price: Any, quantity: Any, unit: Any, discount: Any = 0,
                       currency_symbol: str = "$") -> Optional[str]:
    """Formatted unit price for half-filled input, or None while it does not parse."""
    try:
        priced = price_product(price, quantity, unit, discount)
    except ValidationFailed:
        return None
    return format_unit_price(priced.unit_price, priced.unit, currency_symbol)
