"""Order line allocation across warehouses.

Allocation produces a plan only. Stock is decremented later, when a packing
task is confirmed as packed, so nothing here touches the catalog.
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from . import config
from .errors import InvalidArgumentError, require_positive
from .models import (
    PACKING_PENDING,
    Allocation,
    FulfillmentResult,
    PackingItem,
    ProcessingFailure,
    SalesOrder,
    SplitResult,
    UnfulfilledLine,
)
from .stores import ProductCatalog

logger = logging.getLogger(__name__)


def _iteration_order(stock: Mapping[str, int], warehouse_order: Optional[Sequence[str]]) -> List[str]:
    if warehouse_order is None:
        return list(stock)
    # repeated ids would hand out the same stock twice
    order = list(dict.fromkeys(warehouse_order))
    seen = set(order)
    order.extend(w for w in stock if w not in seen)
    return order


def split_line(
    sku: str,
    quantity_ordered: int,
    stock: Mapping[str, int],
    warehouse_order: Optional[Sequence[str]] = None,
) -> SplitResult:
    """Allocate one order line: a single warehouse if any can cover it, else split.

    Warehouses missing from ``stock`` count as empty. The allocated
    quantities plus the remainder always equal ``quantity_ordered``.
    """
    require_positive("quantity_ordered", quantity_ordered)
    for warehouse_id, qty in stock.items():
        if qty < 0:
            raise InvalidArgumentError(f"negative stock for {sku} at {warehouse_id}: {qty}")
    order = _iteration_order(stock, warehouse_order)

    for warehouse_id in order:
        if stock.get(warehouse_id, 0) >= quantity_ordered:
            return SplitResult(sku, quantity_ordered, (Allocation(warehouse_id, quantity_ordered),), 0)

    remaining = quantity_ordered
    allocations: List[Allocation] = []
    for warehouse_id in order:
        if remaining <= 0:
            break
        available = stock.get(warehouse_id, 0)
        if available <= 0:
            continue
        take = min(remaining, available)
        allocations.append(Allocation(warehouse_id, take))
        remaining -= take
    return SplitResult(sku, quantity_ordered, tuple(allocations), remaining)


class OrderFulfillmentOrchestrator:
    """Turns an accepted order into pending packing tasks, one per warehouse allocation.

    Lines are isolated: a failing line is reported and the others still get
    planned. Lines for the same SKU share a working copy of the stock snapshot
    so they never plan the same units twice.
    """

    def __init__(self, products: ProductCatalog, packing_queue=None, max_workers: int = config.MAX_WORKERS):
        self.products = products
        self.packing_queue = packing_queue
        self.max_workers = max(1, max_workers)

    def fulfil(self, order: SalesOrder) -> FulfillmentResult:
        groups = self._group_lines(order)
        outcomes: Dict[int, tuple] = {}
        for sku, lines in groups.items():
            outcomes.update(self._plan_group(order, sku, lines))
        return self._finish(order, outcomes)

    async def fulfil_async(self, order: SalesOrder) -> FulfillmentResult:
        groups = self._group_lines(order)
        limit = asyncio.Semaphore(self.max_workers)

        async def one(sku, lines):
            async with limit:
                return await asyncio.to_thread(self._plan_group, order, sku, lines)

        outcomes: Dict[int, tuple] = {}
        for part in await asyncio.gather(*(one(sku, lines) for sku, lines in groups.items())):
            outcomes.update(part)
        return self._finish(order, outcomes)

    @staticmethod
    def _group_lines(order: SalesOrder) -> "OrderedDict[str, List[Tuple[int, object]]]":
        groups: "OrderedDict[str, List[Tuple[int, object]]]" = OrderedDict()
        for index, item in enumerate(order.items):
            groups.setdefault(item.sku, []).append((index, item))
        return groups

    def _plan_group(self, order: SalesOrder, sku: str, lines) -> Dict[int, tuple]:
        out: Dict[int, tuple] = {}
        try:
            working = dict(self.products.get_stock_by_warehouse(sku))
            warehouse_order = self.products.warehouse_order()
            product = self.products.get(sku)
        except Exception as exc:
            logger.exception("stock_snapshot_failed order=%s sku=%s", order.order_id, sku)
            for index, _ in lines:
                out[index] = (None, f"{type(exc).__name__}: {exc}")
            return out

        for index, item in lines:
            try:
                split = split_line(sku, item.quantity, working, warehouse_order)
            except Exception as exc:
                logger.exception("line_allocation_failed order=%s line=%s sku=%s", order.order_id, index, sku)
                out[index] = (None, f"{type(exc).__name__}: {exc}")
                continue
            for allocation in split.allocations:
                working[allocation.warehouse_id] -= allocation.quantity
            name = item.product_name or (product.name if product else "") or "N/A"
            out[index] = (split, name)
        return out

    def _finish(self, order: SalesOrder, outcomes: Dict[int, tuple]) -> FulfillmentResult:
        result = FulfillmentResult(order_id=order.order_id, packing_items=[], unfulfilled=[], failures=[])
        for index, item in enumerate(order.items):
            split, detail = outcomes[index]
            if split is None:
                result.failures.append(ProcessingFailure(key=f"{order.order_id}#{index}:{item.sku}", error=detail))
                continue
            for allocation in split.allocations:
                packing_item = PackingItem(
                    order_id=order.order_id,
                    sku=item.sku,
                    product_name=detail,
                    quantity_to_pack=allocation.quantity,
                    warehouse_id=allocation.warehouse_id,
                    status=PACKING_PENDING,
                    customer_name=order.customer_name,
                    delivery_address=order.delivery_address,
                )
                if self.packing_queue is not None:
                    try:
                        packing_item = self.packing_queue.add(packing_item)
                    except Exception as exc:
                        logger.exception(
                            "packing_queue_add_failed order=%s sku=%s warehouse=%s",
                            order.order_id,
                            item.sku,
                            allocation.warehouse_id,
                        )
                        result.failures.append(
                            ProcessingFailure(
                                key=f"{order.order_id}#{index}:{item.sku}@{allocation.warehouse_id}",
                                error=f"{type(exc).__name__}: {exc}",
                            )
                        )
                        continue
                result.packing_items.append(packing_item)
            if split.remainder > 0:
                logger.warning(
                    "unfulfilled order=%s sku=%s ordered=%s unallocated=%s",
                    order.order_id,
                    item.sku,
                    item.quantity,
                    split.remainder,
                )
                result.unfulfilled.append(UnfulfilledLine(item.sku, split.remainder, item.quantity))
        logger.info(
            "order_fulfilment order=%s lines=%s tasks=%s unfulfilled=%s failures=%s",
            order.order_id,
            len(order.items),
            len(result.packing_items),
            len(result.unfulfilled),
            len(result.failures),
        )
        return result
