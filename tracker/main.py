import locale
import logging
from contextlib import asynccontextmanager, contextmanager

from fastapi import FastAPI, HTTPException

from tracker import config
from tracker.dashboard import RecordNotFound, dashboard
from tracker.models import (
    EditStart,
    EditValue,
    OrderCreate,
    OrderUpdate,
    SaleCreate,
    SaleUpdate,
    SelectAll,
    SelectionToggle,
    SortRequest,
    ViewQuery,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        logger.warning("system locale unavailable, sorting text by code point")

    if config.SEED_ON_STARTUP and not dashboard.orders.list_records() and not dashboard.sales.list_records():
        from scripts.seed_data import seed
        seed(dashboard.orders, dashboard.sales)
        logger.info("seeded empty data files in %s", config.DATA_DIR)
    yield


app = FastAPI(
    title="Resale Tracker",
    version="1.0.0",
    description="Purchase orders and resale transactions for a collectible toy reselling hobby",
    lifespan=lifespan,
)


def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True)


@contextmanager
def _domain_errors():
    try:
        yield
    except RecordNotFound as exc:
        raise HTTPException(404, str(exc))
    except ValueError as exc:
        raise HTTPException(400, str(exc))


# ── Orders ───────────────────────────────────────────────────────────────────

@app.get("/api/orders", summary="List all orders, newest first")
def list_orders():
    return [_dump(o) for o in dashboard.orders.list_records()]


@app.post("/api/orders", summary="Create an order")
def create_order(body: OrderCreate):
    return _dump(dashboard.orders.create(body.model_dump()))


@app.get("/api/orders/{order_id}", summary="Get one order")
def get_order(order_id: str):
    order = dashboard.orders.get(order_id)
    if not order:
        raise HTTPException(404, f"Order '{order_id}' not found")
    return _dump(order)


@app.put("/api/orders/{order_id}", summary="Update some fields of an order")
def update_order(order_id: str, body: OrderUpdate):
    order = dashboard.orders.update(order_id, body.model_dump(exclude_unset=True))
    if not order:
        raise HTTPException(404, f"Order '{order_id}' not found")
    return _dump(order)


@app.delete("/api/orders/{order_id}", summary="Delete an order")
def delete_order(order_id: str):
    if not dashboard.delete("orders", order_id):
        raise HTTPException(404, f"Order '{order_id}' not found")
    return {"success": True}


# ── Sales ────────────────────────────────────────────────────────────────────

@app.get("/api/sales", summary="List all sales, newest first")
def list_sales():
    return [_dump(s) for s in dashboard.sales.list_records()]


@app.post("/api/sales", summary="Create a sale")
def create_sale(body: SaleCreate):
    return _dump(dashboard.sales.create(body.model_dump()))


@app.get("/api/sales/{sale_id}", summary="Get one sale")
def get_sale(sale_id: str):
    sale = dashboard.sales.get(sale_id)
    if not sale:
        raise HTTPException(404, f"Sale '{sale_id}' not found")
    return _dump(sale)


@app.put("/api/sales/{sale_id}", summary="Update some fields of a sale")
def update_sale(sale_id: str, body: SaleUpdate):
    sale = dashboard.sales.update(sale_id, body.model_dump(exclude_unset=True))
    if not sale:
        raise HTTPException(404, f"Sale '{sale_id}' not found")
    return _dump(sale)


@app.delete("/api/sales/{sale_id}", summary="Delete a sale")
def delete_sale(sale_id: str):
    if not dashboard.delete("sales", sale_id):
        raise HTTPException(404, f"Sale '{sale_id}' not found")
    return {"success": True}


# ── Table views ──────────────────────────────────────────────────────────────

@app.get("/api/{table}/views/{view}", summary="Filtered, sorted rows and their total")
def get_view(table: str, view: str):
    with _domain_errors():
        return _dump(dashboard.view(table, view))


@app.put("/api/{table}/views/{view}/query", summary="Set the search text and status filter")
def set_query(table: str, view: str, body: ViewQuery):
    with _domain_errors():
        dashboard.set_query(table, view, body.search, body.status)
        return _dump(dashboard.view(table, view))


@app.post("/api/{table}/views/{view}/sort", summary="Sort by a column, toggling direction on repeat")
def sort_view(table: str, view: str, body: SortRequest):
    with _domain_errors():
        dashboard.sort(table, view, body.field)
        return _dump(dashboard.view(table, view))


@app.post("/api/{table}/views/{view}/edit", summary="Start editing one cell")
def begin_edit(table: str, view: str, body: EditStart):
    with _domain_errors():
        dashboard.begin_edit(table, view, body.id, body.field)
        return _dump(dashboard.edit_info())


@app.post("/api/{table}/views/{view}/selection", summary="Check or uncheck one history row")
def toggle_selection(table: str, view: str, body: SelectionToggle):
    with _domain_errors():
        ids = dashboard.toggle_selected(table, view, body.id, body.checked)
        return {"selectedIds": sorted(ids)}


@app.post("/api/{table}/views/{view}/selection/all", summary="Check every visible history row, or none")
def select_all(table: str, view: str, body: SelectAll):
    with _domain_errors():
        ids = dashboard.select_all(table, view, body.checked)
        return {"selectedIds": sorted(ids)}


@app.delete("/api/{table}/views/{view}/selection", summary="Delete every checked history row")
def delete_selected(table: str, view: str):
    with _domain_errors():
        return {"success": True, "deleted": dashboard.delete_selected(table, view)}


# ── Edit buffer ──────────────────────────────────────────────────────────────

@app.get("/api/edit", summary="The cell currently under edit, if any")
def get_edit():
    return _dump(dashboard.edit_info())


@app.put("/api/edit", summary="Replace the pending text of the open edit")
def set_edit_value(body: EditValue):
    with _domain_errors():
        dashboard.set_pending(body.value)
        return _dump(dashboard.edit_info())


@app.post("/api/edit/commit", summary="Write the pending value to its record")
def commit_edit():
    with _domain_errors():
        record = dashboard.commit_edit()
    if record is None:
        return {"committed": False}
    return {"committed": True, "record": _dump(record)}


@app.post("/api/edit/cancel", summary="Discard the open edit")
def cancel_edit():
    dashboard.cancel_edit()
    return _dump(dashboard.edit_info())


# ── Dashboard ────────────────────────────────────────────────────────────────

@app.get("/api/stats", summary="Counts and totals for the header cards")
def get_stats():
    return _dump(dashboard.stats())


# ── Admin ─────────────────────────────────────────────────────────────────────

@app.post("/api/admin/seed", summary="Replace all data with sample records")
def reseed():
    from scripts.seed_data import seed
    dashboard.orders.clear()
    dashboard.sales.clear()
    dashboard.reset()
    seed(dashboard.orders, dashboard.sales)
    return {
        "status": "seeded",
        "orders": len(dashboard.orders.list_records()),
        "sales": len(dashboard.sales.list_records()),
    }
