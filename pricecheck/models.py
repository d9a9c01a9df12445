# pricecheck/models.py
from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .pricing import compute_pricing


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    # python attributes are snake_case, JSON (wire and storage) is camelCase
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Product(CamelModel):
    id: str
    brand: str = ""
    price: float
    discount: float = 0.0
    final_price: float
    quantity: float
    unit: str
    unit_price: float
    notes: str = ""
    created_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="before")
    @classmethod
    def _fill_derived_prices(cls, data: Any) -> Any:
        # older saved records may lack discount and the derived prices
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("discount") is None:
            data.pop("discount", None)
        missing = [name for name in ("final_price", "unit_price")
                   if data.get(name) is None and data.get(to_camel(name)) is None]
        if not missing:
            return data
        try:
            pricing = compute_pricing(
                float(data["price"]),
                float(data.get("discount") or 0),
                float(data["quantity"]),
                data["unit"],
            )
        except (KeyError, TypeError, ValueError):
            # leave it to field validation to report what is wrong
            return data
        for name in missing:
            data[name] = getattr(pricing, name)
        return data


class Category(CamelModel):
    id: str
    name: str
    products: List[Product] = Field(default_factory=list)
    pinned: bool = False
    created_at: datetime = Field(default_factory=utcnow)


class ComparisonRow(CamelModel):
    product: Product
    is_best_value: bool = False
    most_expensive: bool = False
    savings: float = 0.0
    savings_percent: int = 0
    formatted_unit_price: str = ""


class Comparison(CamelModel):
    category_id: str
    best_value_product_id: Optional[str] = None
    rows: List[ComparisonRow] = Field(default_factory=list)


class BillItem(CamelModel):
    product: Product
    category_id: str
    category_name: str
    selected: bool = False


class BillSummary(CamelModel):
    items: List[BillItem] = Field(default_factory=list)
    selected_ids: List[str] = Field(default_factory=list)
    total: float = 0.0
    total_savings: float = 0.0
