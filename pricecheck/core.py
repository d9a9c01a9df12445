from typing import Any, Dict, Optional, Union

from pydantic import BaseModel

from .catalog import CatalogStore
from .models import Category

# Raw numbers are accepted as strings too; the pricing boundary parses them.
RawNumber = Union[float, str]


class CategoryIn(BaseModel):
    name: str


class ProductIn(BaseModel):
    brand: Optional[str] = ""
    price: Optional[RawNumber] = None
    quantity: Optional[RawNumber] = None
    unit: Optional[str] = None
    discount: Optional[RawNumber] = 0
    notes: Optional[str] = ""


class PreviewIn(BaseModel):
    price: Optional[RawNumber] = None
    quantity: Optional[RawNumber] = None
    unit: str = "g"
    discount: Optional[RawNumber] = 0
    currency_symbol: Optional[str] = None


class ToggleIn(BaseModel):
    product_id: str


def _category_view(store: CatalogStore, category: Category) -> Dict[str, Any]:
    view = category.model_dump(mode="json", by_alias=True)
    view["bestValueProductId"] = store.get_best_value_product_id(category.id)
    return view
