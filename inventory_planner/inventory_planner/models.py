from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple


# Packing task states
PACKING_PENDING = "pending"
PACKING_PACKED = "packed"
PACKING_SHIPPED = "shipped"
PACKING_ON_HOLD = "on_hold"
PACKING_CANCELLED = "cancelled"
PACKING_STATUSES = (
    PACKING_PENDING,
    PACKING_PACKED,
    PACKING_SHIPPED,
    PACKING_ON_HOLD,
    PACKING_CANCELLED,
)

# Purchase order states
PO_PENDING = "pending"
PO_ORDERED = "ordered"
PO_PARTIALLY_RECEIVED = "partially_received"
PO_RECEIVED = "received"
PO_CANCELLED = "cancelled"
PO_STATUSES = (PO_PENDING, PO_ORDERED, PO_PARTIALLY_RECEIVED, PO_RECEIVED, PO_CANCELLED)
PO_OPEN_STATUSES = (PO_PENDING, PO_ORDERED, PO_PARTIALLY_RECEIVED)


@dataclass
class Warehouse:
    warehouse_id: str
    location_name: str
    address: str = ""


@dataclass
class Product:
    sku: str
    name: str
    current_stock: Dict[str, int] = field(default_factory=dict)  # warehouse_id -> qty
    safety_stock_quantity: int = 0
    preferred_supplier_id: Optional[str] = None
    price: float = 0.0
    cost_price: Optional[float] = None

    @property
    def total_stock(self) -> int:
        return sum(self.current_stock.values())


@dataclass
class SupplierProductInfo:
    sku: str
    supplier_id: str
    lead_time_days: float
    unit_cost: float
    minimum_order_quantity: int = 0
    supplier_name: str = ""


@dataclass
class OrderItem:
    sku: str
    quantity: int
    product_name: str = ""
    unit_price: Optional[float] = None


@dataclass
class SalesOrder:
    order_id: str
    order_date: datetime
    items: List[OrderItem]
    customer_name: str = ""
    delivery_address: str = ""


@dataclass(frozen=True)
class DataQualityWarning:
    sku: str
    code: str
    message: str


@dataclass(frozen=True)
class ReorderAdvice:
    sku: str
    should_reorder: bool
    current_stock: int
    safety_stock: int
    sales_velocity_per_day: float
    days_until_stockout: float
    lead_time_days: float
    reorder_quantity: int
    preferred_supplier_id: Optional[str]
    minimum_order_quantity: int
    final_order_quantity: int
    estimated_cost: float
    warnings: Tuple[DataQualityWarning, ...] = ()


@dataclass
class PurchaseOrderLine:
    sku: str
    quantity: int
    unit_cost: float
    received_quantity: int = 0


@dataclass
class PurchaseOrder:
    po_id: str
    creation_date: datetime
    supplier_id: str
    items: List[PurchaseOrderLine]
    expected_delivery_date: datetime
    status: str = PO_PENDING

    @property
    def total_cost(self) -> float:
        return sum(line.quantity * line.unit_cost for line in self.items)

    def covers(self, sku: str) -> bool:
        return any(line.sku == sku for line in self.items)


@dataclass(frozen=True)
class Allocation:
    warehouse_id: str
    quantity: int


@dataclass(frozen=True)
class SplitResult:
    sku: str
    quantity_ordered: int
    allocations: Tuple[Allocation, ...]
    remainder: int

    @property
    def allocated_quantity(self) -> int:
        return sum(a.quantity for a in self.allocations)

    @property
    def is_fully_allocated(self) -> bool:
        return self.remainder == 0

    @property
    def is_unfulfillable(self) -> bool:
        return self.remainder == self.quantity_ordered


@dataclass
class PackingItem:
    order_id: str
    sku: str
    product_name: str
    quantity_to_pack: int
    warehouse_id: str
    status: str = PACKING_PENDING
    customer_name: str = ""
    delivery_address: str = ""
    item_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    packed_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    notes: str = ""


@dataclass(frozen=True)
class UnfulfilledLine:
    sku: str
    unallocated_quantity: int
    quantity_ordered: int


@dataclass(frozen=True)
class ProcessingFailure:
    key: str  # SKU, or order line reference
    error: str


@dataclass
class FulfillmentResult:
    order_id: str
    packing_items: List[PackingItem]
    unfulfilled: List[UnfulfilledLine]
    failures: List[ProcessingFailure]

    @property
    def is_complete(self) -> bool:
        return not self.unfulfilled and not self.failures


@dataclass
class ReplenishmentReport:
    advice: List[ReorderAdvice]
    purchase_orders: List[PurchaseOrder]
    skipped: List[str]  # SKUs already covered by an open purchase order
    failures: List[ProcessingFailure]
    warnings: List[DataQualityWarning]


@dataclass(frozen=True)
class StockProjection:
    date: datetime
    predicted_stock: int
