from __future__ import annotations

from collections import OrderedDict
from typing import Dict, Iterable, List

from .models import Product, SalesOrder
from .stores import InMemoryProductCatalog


def _margin(profit: float, revenue: float) -> float:
    return round(profit / revenue * 100, 2) if revenue else 0.0


def order_profit(order: SalesOrder, catalog: InMemoryProductCatalog) -> dict:
    """Revenue, cost of goods and gross profit for one order.

    Line price falls back to the catalog selling price; cost uses the latest
    known cost price (0 when never recorded).
    """
    items = []
    revenue = cogs = 0.0
    for item in order.items:
        product = catalog.get(item.sku)
        price = item.unit_price if item.unit_price is not None else (product.price if product else 0.0)
        cost = product.cost_price if product and product.cost_price is not None else 0.0
        item_revenue = price * item.quantity
        item_cost = cost * item.quantity
        revenue += item_revenue
        cogs += item_cost
        items.append(
            {
                "sku": item.sku,
                "product_name": item.product_name or (product.name if product else ""),
                "quantity": item.quantity,
                "selling_price_per_unit": price,
                "cost_price_per_unit": cost,
                "gross_profit_per_unit": price - cost,
                "profit_margin_percentage": _margin(price - cost, price),
                "total_revenue": item_revenue,
                "total_cost": item_cost,
                "total_profit": item_revenue - item_cost,
            }
        )
    return {
        "order_id": order.order_id,
        "order_date": order.order_date.isoformat(),
        "customer_name": order.customer_name,
        "total_revenue": revenue,
        "total_cogs": cogs,
        "total_gross_profit": revenue - cogs,
        "profit_margin_percentage": _margin(revenue - cogs, revenue),
        "items": items,
    }


def monthly_profit_summary(orders: Iterable[SalesOrder], catalog: InMemoryProductCatalog) -> List[dict]:
    months: Dict[str, dict] = OrderedDict()
    for order in sorted(orders, key=lambda o: o.order_date):
        detail = order_profit(order, catalog)
        key = order.order_date.strftime("%Y-%m")
        entry = months.setdefault(
            key,
            {"month": key, "total_revenue": 0.0, "total_cogs": 0.0, "total_gross_profit": 0.0, "total_orders": 0},
        )
        entry["total_revenue"] += detail["total_revenue"]
        entry["total_cogs"] += detail["total_cogs"]
        entry["total_gross_profit"] += detail["total_gross_profit"]
        entry["total_orders"] += 1
    for entry in months.values():
        entry["profit_margin_percentage"] = _margin(entry["total_gross_profit"], entry["total_revenue"])
    return list(months.values())


def low_stock_products(catalog: InMemoryProductCatalog, threshold: int) -> List[Product]:
    return [p for p in catalog.products() if p.total_stock <= threshold]
