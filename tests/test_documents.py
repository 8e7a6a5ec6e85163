from inventory_planner.documents import purchase_order_pdf
from inventory_planner.models import PurchaseOrder, PurchaseOrderLine

from conftest import NOW


def test_pdf_renders_names_outside_latin1():
    po = PurchaseOrder("PO-0001", NOW, "SUP-1", [PurchaseOrderLine("SKU-TEA", 20, 2.5)], NOW)

    pdf = purchase_order_pdf(po, "Supplier ☕", {"SKU-TEA": "Chai – masala"})

    assert pdf.startswith(b"%PDF")
