import json
from datetime import timedelta

from inventory_planner import run
from inventory_planner.forecasting import utcnow


def test_cli_writes_report_for_sample_data(tmp_path):
    out_file = run.main(["--output-dir", str(tmp_path), "--forecast-days", "30"])

    report = json.loads(out_file.read_text())
    assert out_file.name == "replenishment_run.json"
    assert {a["sku"] for a in report["advice"]} == {"SKU-RED-TEA", "SKU-MASALA", "SKU-RICE", "SKU-PULSES"}
    assert [w["code"] for w in report["warnings"]] == ["no_preferred_supplier"]
    assert {po["items"][0]["sku"] for po in report["purchase_orders"]} == {"SKU-RED-TEA", "SKU-RICE"}


def test_cli_reads_data_files(tmp_path):
    products = tmp_path / "products.json"
    products.write_text(
        json.dumps([{"sku": "X", "current_stock": {"W": 1}, "safety_stock_quantity": 5, "preferred_supplier_id": "S"}])
    )
    suppliers = tmp_path / "suppliers.json"
    suppliers.write_text(
        json.dumps([{"sku": "X", "supplier_id": "S", "lead_time_days": 2, "unit_cost": 1.5, "minimum_order_quantity": 10}])
    )
    sales = tmp_path / "sales.csv"
    yesterday = (utcnow() - timedelta(days=1)).isoformat()
    sales.write_text(f"order_id,order_date,sku,quantity\nSO-1,{yesterday},X,3\n")

    out_file = run.main(
        [
            "--products", str(products),
            "--suppliers", str(suppliers),
            "--sales", str(sales),
            "--output-dir", str(tmp_path),
        ]
    )
    report = json.loads(out_file.read_text())

    assert report["purchase_orders"][0]["items"] == [{"sku": "X", "quantity": 10, "unit_cost": 1.5, "received_quantity": 0}]
