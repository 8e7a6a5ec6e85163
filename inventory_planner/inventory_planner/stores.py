"""Data-access interfaces and their in-memory implementations.

The planner only talks to these interfaces. The in-memory versions keep
insertion order, which is also the warehouse iteration order used when
splitting order lines.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from copy import deepcopy
from dataclasses import fields
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from .errors import InsufficientStockError, NotFoundError, require_non_negative, require_positive
from .models import (
    PO_OPEN_STATUSES,
    Product,
    PurchaseOrder,
    SalesOrder,
    SupplierProductInfo,
    Warehouse,
)


class ProductCatalog(Protocol):
    def get(self, sku: str) -> Optional[Product]: ...

    def list_skus(self) -> List[str]: ...

    def warehouse_order(self) -> List[str]: ...

    def get_stock_by_warehouse(self, sku: str) -> Dict[str, int]: ...

    def decrement_stock(self, sku: str, warehouse_id: str, quantity: int) -> int: ...

    def increment_stock(self, sku: str, warehouse_id: str, quantity: int) -> int: ...


class SalesHistoryStore(Protocol):
    def orders(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> List[SalesOrder]: ...


class SupplierCatalog(Protocol):
    def get(self, sku: str, supplier_id: str) -> Optional[SupplierProductInfo]: ...


class PurchaseOrderStore(Protocol):
    def add(self, po: PurchaseOrder) -> None: ...

    def get(self, po_id: str) -> Optional[PurchaseOrder]: ...

    def all(self) -> List[PurchaseOrder]: ...

    def open_for_sku(self, sku: str) -> List[PurchaseOrder]: ...


class InMemoryProductCatalog:
    def __init__(self, products: Iterable[Product] = (), warehouses: Iterable[Warehouse] = ()):
        self._products: Dict[str, Product] = {}
        self._warehouses: Dict[str, Warehouse] = {w.warehouse_id: w for w in warehouses}
        self._guard = threading.Lock()
        self._locks: Dict[Tuple[str, str], threading.Lock] = defaultdict(threading.Lock)
        for product in products:
            self.upsert(product)

    def upsert(self, product: Product) -> None:
        for warehouse_id, qty in product.current_stock.items():
            require_non_negative(f"stock[{product.sku}/{warehouse_id}]", qty)
        require_non_negative("safety_stock_quantity", product.safety_stock_quantity)
        new = deepcopy(product)
        with self._guard:
            existing = self._products.setdefault(product.sku, new)
        if existing is not new:
            # stock moves hold a reference to the stored record; it is updated in place
            for warehouse_id in list(dict.fromkeys([*existing.current_stock, *new.current_stock])):
                with self._lock_for(product.sku, warehouse_id):
                    if warehouse_id in new.current_stock:
                        existing.current_stock[warehouse_id] = new.current_stock[warehouse_id]
                    else:
                        existing.current_stock.pop(warehouse_id, None)
            for field in fields(Product):
                if field.name != "current_stock":
                    setattr(existing, field.name, getattr(new, field.name))
        with self._guard:
            for warehouse_id in product.current_stock:
                self._warehouses.setdefault(warehouse_id, Warehouse(warehouse_id, warehouse_id))

    def get(self, sku: str) -> Optional[Product]:
        product = self._products.get(sku)
        return deepcopy(product) if product else None

    def list_skus(self) -> List[str]:
        return list(self._products)

    def products(self) -> List[Product]:
        return [deepcopy(p) for p in self._products.values()]

    def warehouses(self) -> List[Warehouse]:
        return list(self._warehouses.values())

    def warehouse_order(self) -> List[str]:
        return list(self._warehouses)

    def get_stock_by_warehouse(self, sku: str) -> Dict[str, int]:
        product = self._products.get(sku)
        if product is None:
            return {}
        return dict(product.current_stock)

    def _lock_for(self, sku: str, warehouse_id: str) -> threading.Lock:
        with self._guard:
            return self._locks[(sku, warehouse_id)]

    def decrement_stock(self, sku: str, warehouse_id: str, quantity: int) -> int:
        require_positive("quantity", quantity)
        product = self._products.get(sku)
        if product is None:
            raise NotFoundError("product", sku)
        with self._lock_for(sku, warehouse_id):
            available = product.current_stock.get(warehouse_id, 0)
            if available < quantity:
                raise InsufficientStockError(sku, warehouse_id, quantity, available)
            product.current_stock[warehouse_id] = available - quantity
            return product.current_stock[warehouse_id]

    def increment_stock(self, sku: str, warehouse_id: str, quantity: int) -> int:
        require_positive("quantity", quantity)
        product = self._products.get(sku)
        if product is None:
            raise NotFoundError("product", sku)
        with self._lock_for(sku, warehouse_id):
            product.current_stock[warehouse_id] = product.current_stock.get(warehouse_id, 0) + quantity
        with self._guard:
            self._warehouses.setdefault(warehouse_id, Warehouse(warehouse_id, warehouse_id))
        return product.current_stock[warehouse_id]

    def set_cost_price(self, sku: str, cost_price: float) -> None:
        product = self._products.get(sku)
        if product is None:
            raise NotFoundError("product", sku)
        product.cost_price = cost_price


class InMemorySalesHistory:
    def __init__(self, orders: Iterable[SalesOrder] = ()):
        self._orders: List[SalesOrder] = list(orders)

    def add(self, order: SalesOrder) -> None:
        self._orders.append(order)

    def get(self, order_id: str) -> Optional[SalesOrder]:
        for order in self._orders:
            if order.order_id == order_id:
                return order
        return None

    def orders(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> List[SalesOrder]:
        out = []
        for order in self._orders:
            if since is not None and order.order_date < since:
                continue
            if until is not None and order.order_date > until:
                continue
            out.append(order)
        return out


class InMemorySupplierCatalog:
    def __init__(self, infos: Iterable[SupplierProductInfo] = ()):
        self._infos: Dict[Tuple[str, str], SupplierProductInfo] = {}
        for info in infos:
            self.add(info)

    def add(self, info: SupplierProductInfo) -> None:
        require_non_negative("lead_time_days", info.lead_time_days)
        require_non_negative("unit_cost", info.unit_cost)
        require_non_negative("minimum_order_quantity", info.minimum_order_quantity)
        self._infos[(info.sku, info.supplier_id)] = info

    def get(self, sku: str, supplier_id: str) -> Optional[SupplierProductInfo]:
        return self._infos.get((sku, supplier_id))

    def all(self) -> List[SupplierProductInfo]:
        return list(self._infos.values())

    def supplier_name(self, supplier_id: str) -> str:
        for info in self._infos.values():
            if info.supplier_id == supplier_id and info.supplier_name:
                return info.supplier_name
        return supplier_id


class InMemoryPurchaseOrderStore:
    def __init__(self):
        self._orders: Dict[str, PurchaseOrder] = {}
        self._lock = threading.Lock()

    def add(self, po: PurchaseOrder) -> None:
        with self._lock:
            self._orders[po.po_id] = po

    def get(self, po_id: str) -> Optional[PurchaseOrder]:
        return self._orders.get(po_id)

    def all(self) -> List[PurchaseOrder]:
        return list(self._orders.values())

    def open_for_sku(self, sku: str) -> List[PurchaseOrder]:
        return [po for po in self._orders.values() if po.status in PO_OPEN_STATUSES and po.covers(sku)]
