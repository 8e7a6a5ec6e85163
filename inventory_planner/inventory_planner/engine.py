from __future__ import annotations

from typing import Iterable, Optional

from . import config, data
from .advisor import ReorderAdvisor
from .errors import require_positive
from .fulfillment import OrderFulfillmentOrchestrator
from .models import FulfillmentResult, Product, SalesOrder, SupplierProductInfo, Warehouse
from .packing import InMemoryPackingQueue
from .purchasing import PurchaseOrderGenerator, ReplenishmentScheduler
from .stores import (
    InMemoryProductCatalog,
    InMemoryPurchaseOrderStore,
    InMemorySalesHistory,
    InMemorySupplierCatalog,
)


class InventoryEngine:
    """Wires the stores to the replenishment and fulfilment components."""

    def __init__(
        self,
        products: Iterable[Product] = (),
        warehouses: Iterable[Warehouse] = (),
        supplier_info: Iterable[SupplierProductInfo] = (),
        sales: Iterable[SalesOrder] = (),
        lookback_days: int = config.LOOKBACK_DAYS,
        suppress_open_orders: bool = config.SUPPRESS_OPEN_PO,
    ):
        self.catalog = InMemoryProductCatalog(products, warehouses)
        self.suppliers = InMemorySupplierCatalog(supplier_info)
        self.sales = InMemorySalesHistory(sales)
        self.purchase_orders = InMemoryPurchaseOrderStore()
        self.packing = InMemoryPackingQueue(self.catalog)
        self.advisor = ReorderAdvisor(self.catalog, self.sales, self.suppliers, lookback_days)
        self.generator = PurchaseOrderGenerator(self.suppliers, self.purchase_orders)
        self.scheduler = ReplenishmentScheduler(
            self.catalog, self.advisor, self.generator, suppress_open_orders=suppress_open_orders
        )
        self.orchestrator = OrderFulfillmentOrchestrator(self.catalog, self.packing)

    @classmethod
    def sample(cls) -> "InventoryEngine":
        return cls(
            products=data.sample_products(),
            warehouses=data.sample_warehouses(),
            supplier_info=data.sample_supplier_info(),
            sales=data.sample_sales(),
        )

    def place_order(self, order: SalesOrder, record_sale: bool = True) -> FulfillmentResult:
        """Order intake: plan packing tasks and keep the order as sales history."""
        for item in order.items:
            require_positive(f"quantity of {item.sku}", item.quantity)
        result = self.orchestrator.fulfil(order)
        if record_sale:
            self.sales.add(order)
        return result

    def supplier_name(self, supplier_id: Optional[str]) -> str:
        return self.suppliers.supplier_name(supplier_id) if supplier_id else ""
