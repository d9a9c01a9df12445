# pricecheck/main.py
import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .catalog import CatalogStore
from .config import get_settings
from .core import CategoryIn, PreviewIn, ProductIn, ToggleIn, _category_view
from .database import get_storage
from .errors import NotFound, ValidationFailed
from .pricing import preview_unit_price

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# saves run on one worker so they land in mutation order
executor = ThreadPoolExecutor(max_workers=1) if settings.persist_in_background else None

store = CatalogStore(
    storage=get_storage(settings),
    key=settings.categories_key,
    selection_limit=settings.selection_limit,
    executor=executor,
    currency_symbol=settings.currency_symbol,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store.load()
    yield
    if executor is not None:
        executor.shutdown(wait=True)


app = FastAPI(title="pricecheck (unit price comparison)", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------
# Category endpoints
# ---------------------------
@app.get("/categories")
async def list_categories():
    return [_category_view(store, c) for c in store.list_categories()]


@app.post("/categories", status_code=201)
async def add_category(payload: CategoryIn):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="category name is required")
    category = store.add_category(name)
    return {"category_id": category.id, "category": category}


@app.get("/categories/{category_id}")
async def get_category(category_id: str):
    try:
        category = store.require_category(category_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _category_view(store, category)


@app.put("/categories/{category_id}")
async def update_category(category_id: str, payload: CategoryIn):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="category name is required")
    category = store.update_category(category_id, name)
    return {"updated": category is not None, "category": category}


@app.delete("/categories/{category_id}")
async def delete_category(category_id: str):
    return {"deleted": store.delete_category(category_id)}


@app.post("/categories/{category_id}/pin")
async def toggle_pin(category_id: str):
    category = store.toggle_pin_category(category_id)
    return {"updated": category is not None, "category": category}


# ---------------------------
# Product endpoints
# ---------------------------
@app.get("/categories/{category_id}/products")
async def list_products(category_id: str):
    return store.get_category_products(category_id)


@app.post("/categories/{category_id}/products", status_code=201)
async def add_product(category_id: str, payload: ProductIn):
    try:
        product = store.add_product(
            category_id, payload.brand, payload.price, payload.quantity,
            payload.unit, payload.discount, payload.notes,
        )
    except ValidationFailed as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"product_id": product.id if product else None, "product": product}


@app.put("/categories/{category_id}/products/{product_id}")
async def update_product(category_id: str, product_id: str, payload: ProductIn):
    try:
        product = store.update_product(
            category_id, product_id, payload.brand, payload.price,
            payload.quantity, payload.unit, payload.discount, payload.notes,
        )
    except ValidationFailed as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"updated": product is not None, "product": product}


@app.delete("/categories/{category_id}/products/{product_id}")
async def delete_product(category_id: str, product_id: str):
    return {"deleted": store.delete_product(category_id, product_id)}


@app.get("/categories/{category_id}/best-value")
async def best_value(category_id: str):
    return {"category_id": category_id, "product_id": store.get_best_value_product_id(category_id)}


@app.post("/preview")
async def preview(payload: PreviewIn):
    symbol = payload.currency_symbol or settings.currency_symbol
    text = preview_unit_price(payload.price, payload.quantity, payload.unit, payload.discount, symbol)
    if text is None:
        return {"preview": None, "message": "Enter values to see unit price"}
    return {"preview": text, "message": None}


# ---------------------------
# Comparison selection
# ---------------------------
@app.get("/selection")
async def get_selection():
    return {"selected": store.selection.ids, "state": store.selection.state.value}


@app.post("/selection/toggle")
async def toggle_selection(payload: ToggleIn):
    selected = store.toggle_selection(payload.product_id)
    return {
        "product_id": payload.product_id,
        "selected": selected,
        "selection": store.selection.ids,
        "state": store.selection.state.value,
    }


@app.post("/selection/clear")
async def clear_selection():
    store.clear_selection()
    return {"selection": [], "state": store.selection.state.value}


@app.get("/categories/{category_id}/comparison")
async def comparison(category_id: str):
    return store.compare_selected(category_id)


# ---------------------------
# Bill
# ---------------------------
@app.get("/bill")
async def view_bill():
    return store.bill_summary()


@app.post("/bill/toggle")
async def toggle_bill_item(payload: ToggleIn):
    store.toggle_bill_item(payload.product_id)
    return store.bill_summary()


@app.post("/bill/select-all")
async def select_all_bill_items():
    store.select_all_bill_items()
    return store.bill_summary()


@app.post("/bill/clear")
async def clear_bill():
    store.clear_bill()
    return store.bill_summary()


# ---------------------------
# Utility: reset (for tests/demo)
# ---------------------------
@app.post("/reset")
async def reset_all():
    store.reset()
    return {"status": "reset"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
