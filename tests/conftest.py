"""Shared fixtures: a fixed clock and a small, fully wired engine."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from inventory_planner.engine import InventoryEngine
from inventory_planner.models import OrderItem, Product, SalesOrder, SupplierProductInfo, Warehouse

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def sale(order_id: str, days_ago: float, *items, now: datetime = NOW) -> SalesOrder:
    return SalesOrder(
        order_id=order_id,
        order_date=now - timedelta(days=days_ago),
        items=[OrderItem(sku, qty) for sku, qty in items],
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def engine():
    """Tea sells 0.5/day; 12 units on hand against a safety stock of 10."""
    return InventoryEngine(
        products=[
            Product("SKU-TEA", "Tea", {"WHS-A": 12}, 10, "SUP-1", price=4.0, cost_price=1.0),
            Product("SKU-RICE", "Rice", {"WHS-A": 40, "WHS-B": 30, "WHS-C": 5}, 5, "SUP-1", price=10.0, cost_price=6.0),
            Product("SKU-SALT", "Salt", {"WHS-B": 3}, 2, None),
        ],
        warehouses=[Warehouse("WHS-A", "A"), Warehouse("WHS-B", "B"), Warehouse("WHS-C", "C")],
        supplier_info=[
            SupplierProductInfo("SKU-TEA", "SUP-1", lead_time_days=10, unit_cost=2.5, minimum_order_quantity=20),
            SupplierProductInfo("SKU-RICE", "SUP-1", lead_time_days=3, unit_cost=6.0, minimum_order_quantity=0),
        ],
        sales=[sale("SO-1", 5, ("SKU-TEA", 15)), sale("SO-2", 45, ("SKU-TEA", 100))],
    )
