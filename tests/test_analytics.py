from datetime import datetime, timezone

import pytest

from inventory_planner.analytics import low_stock_products, monthly_profit_summary, order_profit
from inventory_planner.models import OrderItem, SalesOrder


def test_order_profit_uses_line_price_then_catalog_price(engine):
    order = SalesOrder(
        "SO-5",
        datetime(2024, 5, 3, tzinfo=timezone.utc),
        [OrderItem("SKU-TEA", 2, unit_price=5.0), OrderItem("SKU-RICE", 1)],
    )
    detail = order_profit(order, engine.catalog)

    assert detail["total_revenue"] == pytest.approx(20.0)
    assert detail["total_cogs"] == pytest.approx(8.0)
    assert detail["total_gross_profit"] == pytest.approx(12.0)
    assert detail["profit_margin_percentage"] == 60.0
    assert detail["items"][0]["gross_profit_per_unit"] == pytest.approx(4.0)
    assert detail["items"][1]["selling_price_per_unit"] == 10.0


def test_unknown_cost_counts_as_zero(engine):
    order = SalesOrder("SO-6", datetime(2024, 5, 3, tzinfo=timezone.utc), [OrderItem("SKU-SALT", 1, unit_price=2.0)])
    assert order_profit(order, engine.catalog)["total_gross_profit"] == pytest.approx(2.0)


def test_monthly_summary(engine):
    orders = [
        SalesOrder("SO-1", datetime(2024, 4, 30, tzinfo=timezone.utc), [OrderItem("SKU-TEA", 1)]),
        SalesOrder("SO-2", datetime(2024, 5, 1, tzinfo=timezone.utc), [OrderItem("SKU-TEA", 2)]),
        SalesOrder("SO-3", datetime(2024, 5, 9, tzinfo=timezone.utc), [OrderItem("SKU-RICE", 1)]),
    ]
    summary = monthly_profit_summary(orders, engine.catalog)

    assert [m["month"] for m in summary] == ["2024-04", "2024-05"]
    assert summary[1]["total_orders"] == 2
    assert summary[1]["total_revenue"] == pytest.approx(18.0)
    assert summary[1]["total_gross_profit"] == pytest.approx(10.0)


def test_low_stock(engine):
    assert [p.sku for p in low_stock_products(engine.catalog, 12)] == ["SKU-TEA", "SKU-SALT"]
