from __future__ import annotations

import math
from dataclasses import asdict
from datetime import datetime
from typing import Optional

from .models import (
    FulfillmentResult,
    PackingItem,
    Product,
    PurchaseOrder,
    ReorderAdvice,
    ReplenishmentReport,
)


def number(value) -> Optional[float]:
    """JSON has no infinity: unknown/unbounded values go out as null."""
    if value is None:
        return None
    if isinstance(value, float) and (math.isinf(value) or math.isnan(value)):
        return None
    return value


def _ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def advice_to_dict(advice: ReorderAdvice) -> dict:
    out = asdict(advice)
    for key in ("sales_velocity_per_day", "days_until_stockout", "lead_time_days", "estimated_cost"):
        out[key] = number(out[key])
    out["warnings"] = [asdict(w) for w in advice.warnings]
    return out


def po_to_dict(po: PurchaseOrder) -> dict:
    return {
        "po_id": po.po_id,
        "creation_date": _ts(po.creation_date),
        "supplier_id": po.supplier_id,
        "status": po.status,
        "expected_delivery_date": _ts(po.expected_delivery_date),
        "items": [vars(line) for line in po.items],
        "total_cost": po.total_cost,
    }


def packing_item_to_dict(item: PackingItem) -> dict:
    out = asdict(item)
    for key in ("created_at", "updated_at", "packed_at", "shipped_at"):
        out[key] = _ts(out[key])
    return out


def fulfillment_to_dict(result: FulfillmentResult) -> dict:
    return {
        "order_id": result.order_id,
        "packing_items": [packing_item_to_dict(i) for i in result.packing_items],
        "unfulfilled": [asdict(u) for u in result.unfulfilled],
        "failures": [asdict(f) for f in result.failures],
    }


def report_to_dict(report: ReplenishmentReport) -> dict:
    return {
        "purchase_orders": [po_to_dict(po) for po in report.purchase_orders],
        "advice": [advice_to_dict(a) for a in report.advice],
        "skipped": list(report.skipped),
        "failures": [asdict(f) for f in report.failures],
        "warnings": [asdict(w) for w in report.warnings],
    }


def product_to_dict(product: Product) -> dict:
    out = asdict(product)
    out["total_stock"] = product.total_stock
    return out
