from __future__ import annotations

import csv
import io
import json
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Dict, List

from .errors import InvalidArgumentError
from .models import OrderItem, Product, SalesOrder, SupplierProductInfo, Warehouse


def parse_datetime(value) -> datetime:
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError as exc:
            raise InvalidArgumentError(f"invalid date: {value!r}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _float_or_inf(value) -> float:
    if value is None or value == "":
        return float("inf")
    return float(value)


def _sold_quantity(sku, value) -> int:
    qty = int(value)
    if qty < 0:
        raise InvalidArgumentError(f"negative sold quantity for {sku}: {qty}")
    return qty


def _is_json_array(text: str) -> bool:
    return text.strip().startswith("[")


def load_warehouses(data: bytes | None) -> List[Warehouse]:
    if not data:
        return []
    payload = json.loads(data.decode("utf-8"))
    out = []
    for item in payload:
        out.append(
            Warehouse(
                warehouse_id=item["warehouse_id"],
                location_name=item.get("location_name", item["warehouse_id"]),
                address=item.get("address", ""),
            )
        )
    return out


def load_products(data: bytes | None) -> List[Product]:
    if not data:
        return []
    payload = json.loads(data.decode("utf-8"))
    out = []
    for item in payload:
        cost_price = item.get("cost_price")
        out.append(
            Product(
                sku=item["sku"],
                name=item.get("name", item["sku"]),
                current_stock={k: int(v) for k, v in item.get("current_stock", {}).items()},
                safety_stock_quantity=int(item.get("safety_stock_quantity", 0)),
                preferred_supplier_id=item.get("preferred_supplier_id") or None,
                price=float(item.get("price", 0.0)),
                cost_price=float(cost_price) if cost_price is not None else None,
            )
        )
    return out


def load_stock(data: bytes | None) -> Dict[str, Dict[str, int]]:
    """Stock rows ``sku, warehouse_id, quantity`` as JSON array or CSV."""
    if not data:
        return {}
    text = data.decode("utf-8")
    if _is_json_array(text):
        rows = json.loads(text)
    else:
        rows = list(csv.DictReader(io.StringIO(text)))
    out: Dict[str, Dict[str, int]] = OrderedDict()
    for row in rows:
        out.setdefault(row["sku"], OrderedDict())[row["warehouse_id"]] = int(row.get("quantity", 0))
    return out


def apply_stock(products: List[Product], stock: Dict[str, Dict[str, int]]) -> List[Product]:
    for product in products:
        if product.sku in stock:
            product.current_stock = dict(stock[product.sku])
    return products


def load_supplier_info(data: bytes | None) -> List[SupplierProductInfo]:
    if not data:
        return []
    payload = json.loads(data.decode("utf-8"))
    out = []
    for item in payload:
        out.append(
            SupplierProductInfo(
                sku=item["sku"],
                supplier_id=item["supplier_id"],
                lead_time_days=_float_or_inf(item.get("lead_time_days")),
                unit_cost=_float_or_inf(item.get("unit_cost")),
                minimum_order_quantity=int(item.get("minimum_order_quantity", 0)),
                supplier_name=item.get("supplier_name", ""),
            )
        )
    return out


def _load_sales_json(payload) -> List[SalesOrder]:
    out = []
    for order in payload:
        out.append(
            SalesOrder(
                order_id=order["order_id"],
                order_date=parse_datetime(order["order_date"]),
                items=[
                    OrderItem(
                        sku=item["sku"],
                        quantity=_sold_quantity(item["sku"], item["quantity"]),
                        product_name=item.get("product_name", ""),
                        unit_price=float(item["unit_price"]) if item.get("unit_price") is not None else None,
                    )
                    for item in order.get("items", [])
                ],
                customer_name=order.get("customer_name", ""),
                delivery_address=order.get("delivery_address", ""),
            )
        )
    return out


def load_sales(data: bytes | None) -> List[SalesOrder]:
    if not data:
        return []
    text = data.decode("utf-8")
    if _is_json_array(text):
        return _load_sales_json(json.loads(text))
    # one CSV row per line item, grouped by order_id
    reader = csv.DictReader(io.StringIO(text))
    orders: Dict[str, SalesOrder] = OrderedDict()
    for row in reader:
        order = orders.get(row["order_id"])
        if order is None:
            order = SalesOrder(order_id=row["order_id"], order_date=parse_datetime(row["order_date"]), items=[])
            orders[row["order_id"]] = order
        order.items.append(OrderItem(sku=row["sku"], quantity=_sold_quantity(row["sku"], row.get("quantity", 0))))
    return list(orders.values())
