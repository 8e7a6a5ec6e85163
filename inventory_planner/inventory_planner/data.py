from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from .forecasting import utcnow
from .models import OrderItem, Product, SalesOrder, SupplierProductInfo, Warehouse


def sample_warehouses() -> list[Warehouse]:
    return [
        Warehouse("WHS-EAST", "East Distribution Centre", "12 Harbour Road, Newark"),
        Warehouse("WHS-WEST", "West Fulfilment Hub", "400 Bay Street, Oakland"),
        Warehouse("WHS-CENTRAL", "Central Overflow", "9 Rail Yard, Columbus"),
    ]


def sample_products() -> list[Product]:
    return [
        Product(
            sku="SKU-RED-TEA",
            name="Red Label Tea 500g",
            current_stock={"WHS-EAST": 20, "WHS-WEST": 12, "WHS-CENTRAL": 5},
            safety_stock_quantity=20,
            preferred_supplier_id="SUP-RED",
            price=4.5,
            cost_price=1.1,
        ),
        Product(
            sku="SKU-MASALA",
            name="Garam Masala 100g",
            current_stock={"WHS-EAST": 220},
            safety_stock_quantity=30,
            preferred_supplier_id="SUP-RED",
            price=3.2,
            cost_price=1.5,
        ),
        Product(
            sku="SKU-RICE",
            name="Basmati Rice 5kg",
            current_stock={"WHS-EAST": 12, "WHS-WEST": 8},
            safety_stock_quantity=15,
            preferred_supplier_id="SUP-GROC",
            price=11.0,
            cost_price=0.9,
        ),
        Product(
            sku="SKU-PULSES",
            name="Toor Dal 1kg",
            current_stock={"WHS-WEST": 6},
            safety_stock_quantity=10,
            preferred_supplier_id=None,
            price=3.8,
        ),
    ]


def sample_supplier_info() -> list[SupplierProductInfo]:
    return [
        SupplierProductInfo("SKU-RED-TEA", "SUP-RED", lead_time_days=5, unit_cost=1.1, minimum_order_quantity=50, supplier_name="Red Label Supplier"),
        SupplierProductInfo("SKU-MASALA", "SUP-RED", lead_time_days=5, unit_cost=1.5, minimum_order_quantity=50, supplier_name="Red Label Supplier"),
        SupplierProductInfo("SKU-RICE", "SUP-GROC", lead_time_days=7, unit_cost=0.9, minimum_order_quantity=100, supplier_name="Grocer Partner"),
    ]


def sample_sales(now: Optional[datetime] = None) -> list[SalesOrder]:
    # qty sold over the last few weeks
    now = now or utcnow()
    return [
        SalesOrder("SO-1001", now - timedelta(days=20), [OrderItem("SKU-RED-TEA", 60), OrderItem("SKU-RICE", 30)], "Asha Rao", "5 Elm St"),
        SalesOrder("SO-1002", now - timedelta(days=12), [OrderItem("SKU-RED-TEA", 45), OrderItem("SKU-MASALA", 20)], "Ben Ortiz", "77 Pine Ave"),
        SalesOrder("SO-1003", now - timedelta(days=6), [OrderItem("SKU-RED-TEA", 30), OrderItem("SKU-RICE", 25)], "Chen Li", "3 Lake Rd"),
        SalesOrder("SO-1004", now - timedelta(days=2), [OrderItem("SKU-PULSES", 9), OrderItem("SKU-MASALA", 10)], "Dana Kim", "18 Hill Ct"),
        SalesOrder("SO-0950", now - timedelta(days=55), [OrderItem("SKU-MASALA", 200)], "Old Order", ""),
    ]
