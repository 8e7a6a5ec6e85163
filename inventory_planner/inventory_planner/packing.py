from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional
from uuid import uuid4

from .errors import InsufficientStockError, InvalidArgumentError, InvalidStatusTransitionError, NotFoundError
from .forecasting import utcnow
from .models import (
    PACKING_CANCELLED,
    PACKING_ON_HOLD,
    PACKING_PACKED,
    PACKING_PENDING,
    PACKING_SHIPPED,
    PACKING_STATUSES,
    PackingItem,
)
from .stores import ProductCatalog

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    PACKING_PENDING: (PACKING_PACKED, PACKING_ON_HOLD, PACKING_CANCELLED),
    PACKING_ON_HOLD: (PACKING_PENDING, PACKING_CANCELLED),
    PACKING_PACKED: (PACKING_SHIPPED,),
    PACKING_SHIPPED: (),
    PACKING_CANCELLED: (),
}


class InMemoryPackingQueue:
    """Packing tasks plus the pack confirmation step.

    Confirming a task as packed is the one place stock is decremented. If the
    warehouse no longer holds enough, the task goes on hold for an operator
    instead of driving stock negative.
    """

    def __init__(self, products: ProductCatalog):
        self.products = products
        self._items: Dict[str, PackingItem] = {}
        self._lock = threading.Lock()

    def add(self, item: PackingItem, now: Optional[datetime] = None) -> PackingItem:
        now = now or utcnow()
        stored = replace(
            item,
            item_id=item.item_id or f"PK-{uuid4().hex[:12].upper()}",
            status=item.status or PACKING_PENDING,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._items[stored.item_id] = stored
        return stored

    def get(self, item_id: str) -> PackingItem:
        item = self._items.get(item_id)
        if item is None:
            raise NotFoundError("packing item", item_id)
        return item

    def pending(self) -> List[PackingItem]:
        items = [i for i in self._items.values() if i.status == PACKING_PENDING]
        return sorted(items, key=lambda i: i.created_at)

    def all(self) -> List[PackingItem]:
        return sorted(self._items.values(), key=lambda i: i.created_at, reverse=True)

    def for_order(self, order_id: str) -> List[PackingItem]:
        return [i for i in self._items.values() if i.order_id == order_id]

    def update_status(self, item_id: str, status: str, now: Optional[datetime] = None) -> PackingItem:
        if status not in PACKING_STATUSES:
            raise InvalidArgumentError(f"unknown packing status: {status}")
        now = now or utcnow()
        with self._lock:
            item = self.get(item_id)
            if status not in ALLOWED_TRANSITIONS[item.status]:
                raise InvalidStatusTransitionError("packing item", item_id, item.status, status)

            if status == PACKING_PACKED:
                try:
                    self.products.decrement_stock(item.sku, item.warehouse_id, item.quantity_to_pack)
                except InsufficientStockError as exc:
                    logger.warning("pack_on_hold item=%s order=%s %s", item_id, item.order_id, exc)
                    item.status = PACKING_ON_HOLD
                    item.notes = f"insufficient stock at pack time: available={exc.available}"
                    item.updated_at = now
                    return item
                item.packed_at = now
            elif status == PACKING_SHIPPED:
                item.shipped_at = now

            item.status = status
            item.updated_at = now
        logger.info("packing_status item=%s order=%s status=%s", item_id, item.order_id, status)
        return item
