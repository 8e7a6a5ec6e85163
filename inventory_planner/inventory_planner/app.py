from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from . import config, data, loader
from .analytics import low_stock_products, order_profit
from .documents import purchase_order_pdf
from .engine import InventoryEngine
from .errors import InsufficientStockError, InvalidArgumentError, InvalidStatusTransitionError, NotFoundError
from .forecasting import project_stock, utcnow
from .logging_config import configure_logging
from .models import OrderItem, SalesOrder
from .purchasing import receive_purchase_order
from .serialize import (
    advice_to_dict,
    fulfillment_to_dict,
    packing_item_to_dict,
    po_to_dict,
    product_to_dict,
    report_to_dict,
)

configure_logging()

app = FastAPI(title="Inventory Planner", version="0.3.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Simple in-memory state to reuse data across requests
engine: InventoryEngine = InventoryEngine.sample()


def _set_engine(new_engine: InventoryEngine) -> None:
    global engine
    engine = new_engine


def _read_bytes(file: Optional[UploadFile]) -> Optional[bytes]:
    if file is None:
        return None
    return file.file.read()


async def _json_object(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError as exc:
        raise InvalidArgumentError("request body must be JSON") from exc
    if not isinstance(body, dict):
        raise InvalidArgumentError("request body must be a JSON object")
    return body


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse({"error": str(exc), "type": type(exc).__name__}, status_code=status_code)


@app.exception_handler(NotFoundError)
async def _not_found(request: Request, exc: NotFoundError):
    return _error(404, exc)


@app.exception_handler(InvalidArgumentError)
async def _invalid(request: Request, exc: InvalidArgumentError):
    return _error(422, exc)


@app.exception_handler(InsufficientStockError)
async def _insufficient(request: Request, exc: InsufficientStockError):
    return _error(409, exc)


@app.exception_handler(InvalidStatusTransitionError)
async def _transition(request: Request, exc: InvalidStatusTransitionError):
    return _error(409, exc)


@app.get("/api/state")
async def api_state():
    return {
        "warehouses": [vars(w) for w in engine.catalog.warehouses()],
        "products": [product_to_dict(p) for p in engine.catalog.products()],
        "purchase_orders": [po_to_dict(po) for po in engine.purchase_orders.all()],
        "pending_packing": len(engine.packing.pending()),
    }


@app.post("/api/load")
async def load_data(
    products: UploadFile | None = File(default=None),
    warehouses: UploadFile | None = File(default=None),
    stock: UploadFile | None = File(default=None),
    suppliers: UploadFile | None = File(default=None),
    sales: UploadFile | None = File(default=None),
):
    # Load user-provided or sample data
    try:
        product_list = loader.load_products(_read_bytes(products)) or data.sample_products()
        loader.apply_stock(product_list, loader.load_stock(_read_bytes(stock)))
        new_engine = InventoryEngine(
            products=product_list,
            warehouses=loader.load_warehouses(_read_bytes(warehouses)) or data.sample_warehouses(),
            supplier_info=loader.load_supplier_info(_read_bytes(suppliers)) or data.sample_supplier_info(),
            sales=loader.load_sales(_read_bytes(sales)) or data.sample_sales(),
        )
    except InvalidArgumentError:
        raise
    except (KeyError, ValueError) as exc:
        return JSONResponse({"error": f"invalid upload: {exc}"}, status_code=400)
    _set_engine(new_engine)
    return {"products": len(engine.catalog.list_skus()), "warehouses": len(engine.catalog.warehouses())}


@app.get("/api/reorder/{sku}")
async def reorder_advice(sku: str, forecast_period_days: int = config.FORECAST_PERIOD_DAYS):
    advice = engine.advisor.advise(sku, forecast_period_days)
    if advice is None:
        raise NotFoundError("product", sku)
    return advice_to_dict(advice)


@app.post("/api/replenishment/run")
async def run_replenishment(forecast_period_days: int = config.FORECAST_PERIOD_DAYS):
    report = await engine.scheduler.run_async(forecast_period_days)
    return report_to_dict(report)


@app.get("/api/purchase-orders")
async def list_purchase_orders():
    return [po_to_dict(po) for po in engine.purchase_orders.all()]


@app.get("/api/purchase-orders/{po_id}/po.pdf")
async def purchase_order_document(po_id: str):
    po = engine.purchase_orders.get(po_id)
    if po is None:
        raise NotFoundError("purchase order", po_id)
    names = {}
    for line in po.items:
        product = engine.catalog.get(line.sku)
        names[line.sku] = product.name if product else ""
    pdf_bytes = purchase_order_pdf(po, engine.supplier_name(po.supplier_id), names)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{po_id}.pdf"'},
    )


@app.post("/api/purchase-orders/{po_id}/receive")
async def receive_purchase_order_endpoint(po_id: str, request: Request):
    body = await _json_object(request)
    warehouse_id = body.get("warehouse_id")
    if not warehouse_id:
        raise InvalidArgumentError("warehouse_id is required")
    quantities = body.get("quantities")
    if quantities is not None:
        try:
            quantities = {sku: int(qty) for sku, qty in quantities.items()}
        except (AttributeError, TypeError, ValueError) as exc:
            raise InvalidArgumentError(f"invalid quantities: {quantities!r}") from exc
    po = receive_purchase_order(engine.purchase_orders, engine.catalog, po_id, warehouse_id, quantities)
    return po_to_dict(po)


@app.post("/api/orders")
async def order_intake(request: Request):
    body = await _json_object(request)
    items = []
    for item in body.get("items") or []:
        try:
            items.append(
                OrderItem(
                    sku=item["sku"],
                    quantity=int(item["quantity"]),
                    product_name=item.get("product_name", ""),
                    unit_price=float(item["unit_price"]) if item.get("unit_price") is not None else None,
                )
            )
        except (AttributeError, KeyError, TypeError, ValueError):
            return JSONResponse({"error": f"invalid order item: {item}"}, status_code=422)
        if items[-1].quantity <= 0:
            return JSONResponse({"error": f"quantity must be > 0: {item}"}, status_code=422)
    if not body.get("order_id") or not items:
        return JSONResponse({"error": "order_id and items are required"}, status_code=422)
    order = SalesOrder(
        order_id=body["order_id"],
        order_date=loader.parse_datetime(body["order_date"]) if body.get("order_date") else utcnow(),
        items=items,
        customer_name=body.get("customer_name", ""),
        delivery_address=body.get("delivery_address", ""),
    )
    result = engine.place_order(order)
    return fulfillment_to_dict(result)


@app.get("/api/orders/{order_id}/profit")
async def order_profit_endpoint(order_id: str):
    order = engine.sales.get(order_id)
    if order is None:
        raise NotFoundError("order", order_id)
    return order_profit(order, engine.catalog)


@app.get("/api/packing")
async def packing_items(status: Optional[str] = None):
    if status == "pending":
        items = engine.packing.pending()
    else:
        items = [i for i in engine.packing.all() if status is None or i.status == status]
    return [packing_item_to_dict(i) for i in items]


@app.post("/api/packing/{item_id}/status")
async def packing_status(item_id: str, request: Request):
    body = await _json_object(request)
    item = engine.packing.update_status(item_id, body.get("status", ""))
    return packing_item_to_dict(item)


@app.get("/api/products/low-stock")
async def low_stock(threshold: int = config.LOW_STOCK_THRESHOLD):
    return [product_to_dict(p) for p in low_stock_products(engine.catalog, threshold)]


@app.get("/api/products/{sku}/projection")
async def stock_projection(sku: str, days: int = config.PROJECTION_DAYS):
    advice = engine.advisor.advise(sku)
    if advice is None:
        raise NotFoundError("product", sku)
    points = project_stock(advice.current_stock, advice.sales_velocity_per_day, days)
    return {
        "sku": sku,
        "sales_velocity_per_day": advice.sales_velocity_per_day,
        "projection": [{"date": p.date.date().isoformat(), "predicted_stock": p.predicted_stock} for p in points],
    }
