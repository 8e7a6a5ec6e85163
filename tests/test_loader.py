import json
import math
from datetime import timezone

import pytest

from inventory_planner import loader
from inventory_planner.errors import InvalidArgumentError


def test_products_and_stock_rows():
    products = loader.load_products(
        json.dumps(
            [
                {"sku": "A", "name": "Apple", "current_stock": {"W1": "5"}, "safety_stock_quantity": 2, "preferred_supplier_id": "S"},
                {"sku": "B"},
            ]
        ).encode()
    )
    assert products[0].current_stock == {"W1": 5}
    assert products[1].name == "B"
    assert products[1].preferred_supplier_id is None

    stock = loader.load_stock(b"sku,warehouse_id,quantity\nA,W1,7\nA,W2,3\n")
    loader.apply_stock(products, stock)
    assert products[0].current_stock == {"W1": 7, "W2": 3}
    assert products[1].current_stock == {}


def test_stock_json_rows():
    stock = loader.load_stock(b'[{"sku": "A", "warehouse_id": "W1", "quantity": 4}]')
    assert stock == {"A": {"W1": 4}}


def test_supplier_info_missing_terms_are_unknown():
    infos = loader.load_supplier_info(b'[{"sku": "A", "supplier_id": "S", "minimum_order_quantity": 10}]')
    assert math.isinf(infos[0].lead_time_days)
    assert math.isinf(infos[0].unit_cost)
    assert infos[0].minimum_order_quantity == 10


def test_sales_csv_grouped_by_order():
    orders = loader.load_sales(
        b"order_id,order_date,sku,quantity\n"
        b"SO-1,2024-05-20,A,3\n"
        b"SO-1,2024-05-20,B,1\n"
        b"SO-2,2024-05-21T10:00:00Z,A,2\n"
    )
    assert [o.order_id for o in orders] == ["SO-1", "SO-2"]
    assert [(i.sku, i.quantity) for i in orders[0].items] == [("A", 3), ("B", 1)]
    assert orders[0].order_date.tzinfo == timezone.utc
    assert orders[1].order_date.hour == 10


def test_sales_json():
    orders = loader.load_sales(
        b'[{"order_id": "SO-1", "order_date": "2024-05-20T08:00:00+00:00", "customer_name": "Ann",'
        b' "items": [{"sku": "A", "quantity": 2, "unit_price": 4.5}]}]'
    )
    assert orders[0].customer_name == "Ann"
    assert orders[0].items[0].unit_price == 4.5


def test_empty_input():
    assert loader.load_products(None) == []
    assert loader.load_sales(b"") == []
    assert loader.load_stock(None) == {}


def test_bad_date():
    with pytest.raises(InvalidArgumentError):
        loader.parse_datetime("yesterday")


def test_negative_sold_quantity_rejected():
    with pytest.raises(InvalidArgumentError):
        loader.load_sales(b"order_id,order_date,sku,quantity\nSO-1,2024-05-01,SKU-A,-4\n")
