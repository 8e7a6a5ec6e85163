from __future__ import annotations

from fpdf import FPDF

from .models import PurchaseOrder


def _latin1(text: str) -> str:
    # core fonts only cover latin-1
    return text.encode("latin-1", "replace").decode("latin-1")


def purchase_order_pdf(po: PurchaseOrder, supplier_name: str = "", product_names: dict | None = None) -> bytes:
    product_names = product_names or {}
    pdf = FPDF(orientation="P", unit="mm", format="A4")
    pdf.add_page()
    pdf.set_font("Helvetica", "B", 16)
    pdf.cell(0, 10, _latin1(f"Purchase Order {po.po_id}"), new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", "", 12)
    pdf.cell(0, 8, _latin1(f"Supplier: {supplier_name or po.supplier_id} ({po.supplier_id})"), new_x="LMARGIN", new_y="NEXT")
    pdf.cell(0, 8, f"Created: {po.creation_date:%Y-%m-%d}", new_x="LMARGIN", new_y="NEXT")
    pdf.cell(0, 8, f"Expected delivery: {po.expected_delivery_date:%Y-%m-%d}", new_x="LMARGIN", new_y="NEXT")
    pdf.cell(0, 8, f"Status: {po.status}", new_x="LMARGIN", new_y="NEXT")
    pdf.ln(4)
    pdf.set_font("Helvetica", "B", 12)
    pdf.cell(40, 8, "SKU", border=1)
    pdf.cell(60, 8, "Product", border=1)
    pdf.cell(20, 8, "Qty", border=1)
    pdf.cell(30, 8, "Unit cost", border=1)
    pdf.cell(40, 8, "Line total", border=1, new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", "", 12)
    for line in po.items:
        pdf.cell(40, 8, _latin1(line.sku), border=1)
        pdf.cell(60, 8, _latin1(product_names.get(line.sku, "")[:28]), border=1)
        pdf.cell(20, 8, str(line.quantity), border=1)
        pdf.cell(30, 8, f"{line.unit_cost:.2f}", border=1)
        pdf.cell(40, 8, f"{line.quantity * line.unit_cost:.2f}", border=1, new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", "B", 12)
    pdf.cell(150, 8, "Total", border=1)
    pdf.cell(40, 8, f"{po.total_cost:.2f}", border=1, new_x="LMARGIN", new_y="NEXT")
    out = pdf.output()
    if isinstance(out, (bytes, bytearray)):
        return bytes(out)
    return str(out).encode("latin1")
