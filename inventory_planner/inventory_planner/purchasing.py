from __future__ import annotations

import asyncio
import logging
import math
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple
from uuid import uuid4

from . import config
from .advisor import ReorderAdvisor
from .errors import InvalidArgumentError, InvalidStatusTransitionError, NotFoundError, require_positive
from .forecasting import utcnow
from .models import (
    PO_CANCELLED,
    PO_PARTIALLY_RECEIVED,
    PO_PENDING,
    PO_RECEIVED,
    ProcessingFailure,
    PurchaseOrder,
    PurchaseOrderLine,
    ReorderAdvice,
    ReplenishmentReport,
)
from .stores import InMemoryProductCatalog, ProductCatalog, PurchaseOrderStore, SupplierCatalog

logger = logging.getLogger(__name__)


def new_po_id() -> str:
    return f"PO-{uuid4().hex[:12].upper()}"


class PurchaseOrderGenerator:
    """Turns accepted reorder advice into pending purchase orders.

    The unit cost is always looked up again from the supplier catalog when the
    order is written, never back-computed from the advice.
    """

    def __init__(
        self,
        suppliers: SupplierCatalog,
        store: PurchaseOrderStore,
        id_factory: Callable[[], str] = new_po_id,
        unknown_lead_time_horizon_days: int = config.UNKNOWN_LEAD_TIME_HORIZON_DAYS,
    ):
        self.suppliers = suppliers
        self.store = store
        self.id_factory = id_factory
        self.unknown_lead_time_horizon_days = unknown_lead_time_horizon_days

    def generate(self, advice: ReorderAdvice, now: Optional[datetime] = None) -> Optional[PurchaseOrder]:
        if not advice.should_reorder or advice.final_order_quantity <= 0:
            return None
        if not advice.preferred_supplier_id:
            logger.warning("po_refused sku=%s reason=no_supplier", advice.sku)
            return None
        if math.isinf(advice.estimated_cost) or math.isnan(advice.estimated_cost):
            logger.warning("po_refused sku=%s reason=unpriced cost=%s", advice.sku, advice.estimated_cost)
            return None
        info = self.suppliers.get(advice.sku, advice.preferred_supplier_id)
        if info is None or math.isinf(info.unit_cost) or math.isnan(info.unit_cost):
            logger.warning("po_refused sku=%s reason=supplier_terms_missing", advice.sku)
            return None

        now = now or utcnow()
        lead_time = advice.lead_time_days
        if math.isinf(lead_time):
            delivery = now + timedelta(days=self.unknown_lead_time_horizon_days)
        else:
            delivery = now + timedelta(days=lead_time)
        po = PurchaseOrder(
            po_id=self.id_factory(),
            creation_date=now,
            supplier_id=advice.preferred_supplier_id,
            items=[
                PurchaseOrderLine(sku=advice.sku, quantity=advice.final_order_quantity, unit_cost=info.unit_cost)
            ],
            expected_delivery_date=delivery,
            status=PO_PENDING,
        )
        self.store.add(po)
        logger.info(
            "po_created po_id=%s sku=%s supplier=%s qty=%s total=%.2f",
            po.po_id,
            advice.sku,
            po.supplier_id,
            advice.final_order_quantity,
            po.total_cost,
        )
        return po


class ReplenishmentScheduler:
    """Runs the advisor over the whole catalog and writes purchase orders.

    A failure on one SKU is recorded in the report and the run continues.
    With ``suppress_open_orders`` a SKU already covered by an open purchase
    order gets advice but no new order.
    """

    def __init__(
        self,
        products: ProductCatalog,
        advisor: ReorderAdvisor,
        generator: PurchaseOrderGenerator,
        suppress_open_orders: bool = config.SUPPRESS_OPEN_PO,
        max_workers: int = config.MAX_WORKERS,
    ):
        self.products = products
        self.advisor = advisor
        self.generator = generator
        self.suppress_open_orders = suppress_open_orders
        self.max_workers = max(1, max_workers)

    def run(self, forecast_period_days: int = config.FORECAST_PERIOD_DAYS, now: Optional[datetime] = None) -> ReplenishmentReport:
        now = now or utcnow()
        outcomes = [self._advise(sku, forecast_period_days, now) for sku in self.products.list_skus()]
        return self._finish(outcomes, now)

    async def run_async(
        self, forecast_period_days: int = config.FORECAST_PERIOD_DAYS, now: Optional[datetime] = None
    ) -> ReplenishmentReport:
        now = now or utcnow()
        limit = asyncio.Semaphore(self.max_workers)

        async def one(sku: str):
            async with limit:
                return await asyncio.to_thread(self._advise, sku, forecast_period_days, now)

        outcomes = await asyncio.gather(*(one(sku) for sku in self.products.list_skus()))
        return self._finish(list(outcomes), now)

    def run_replenishment(self, forecast_period_days: int = config.FORECAST_PERIOD_DAYS) -> List[PurchaseOrder]:
        return self.run(forecast_period_days).purchase_orders

    def _advise(self, sku: str, forecast_period_days: int, now: datetime) -> Tuple[str, Optional[ReorderAdvice], Optional[str]]:
        try:
            return sku, self.advisor.advise(sku, forecast_period_days, now=now), None
        except Exception as exc:
            logger.exception("replenishment_sku_failed sku=%s", sku)
            return sku, None, f"{type(exc).__name__}: {exc}"

    def _finish(self, outcomes, now: datetime) -> ReplenishmentReport:
        report = ReplenishmentReport(advice=[], purchase_orders=[], skipped=[], failures=[], warnings=[])
        # purchase orders are written in catalog order
        for sku, advice, error in outcomes:
            if error is not None:
                report.failures.append(ProcessingFailure(key=sku, error=error))
                continue
            if advice is None:
                continue
            report.advice.append(advice)
            report.warnings.extend(advice.warnings)
            if not advice.should_reorder:
                continue
            if self.suppress_open_orders and self.generator.store.open_for_sku(sku):
                logger.info("po_skipped sku=%s reason=open_purchase_order", sku)
                report.skipped.append(sku)
                continue
            try:
                po = self.generator.generate(advice, now=now)
            except Exception as exc:
                logger.exception("po_generation_failed sku=%s", sku)
                report.failures.append(ProcessingFailure(key=sku, error=f"{type(exc).__name__}: {exc}"))
                continue
            if po is not None:
                report.purchase_orders.append(po)
        logger.info(
            "replenishment_run skus=%s advised=%s pos=%s skipped=%s failures=%s warnings=%s",
            len(outcomes),
            len(report.advice),
            len(report.purchase_orders),
            len(report.skipped),
            len(report.failures),
            len(report.warnings),
        )
        return report


def receive_purchase_order(
    store: PurchaseOrderStore,
    catalog: InMemoryProductCatalog,
    po_id: str,
    warehouse_id: str,
    quantities: Optional[dict] = None,
) -> PurchaseOrder:
    """Book a (partial) delivery into stock.

    ``quantities`` maps SKU to received units; omitted means the full
    outstanding quantity of every line.
    """
    po = store.get(po_id)
    if po is None:
        raise NotFoundError("purchase order", po_id)
    if po.status in (PO_RECEIVED, PO_CANCELLED):
        raise InvalidStatusTransitionError("purchase order", po_id, po.status, PO_RECEIVED)
    if quantities is None:
        quantities = {line.sku: line.quantity - line.received_quantity for line in po.items}
    if not any(quantities.values()):
        raise InvalidArgumentError(f"nothing to receive on purchase order {po_id}")
    for sku in quantities:
        if not po.covers(sku):
            raise InvalidArgumentError(f"purchase order {po_id} has no line for {sku}")

    for line in po.items:
        qty = quantities.get(line.sku, 0)
        if qty == 0:
            continue
        require_positive("received quantity", qty)
        outstanding = line.quantity - line.received_quantity
        if qty > outstanding:
            raise InvalidArgumentError(f"received {qty} of {line.sku} but only {outstanding} outstanding")

    for line in po.items:
        qty = quantities.get(line.sku, 0)
        if qty == 0:
            continue
        catalog.increment_stock(line.sku, warehouse_id, qty)
        catalog.set_cost_price(line.sku, line.unit_cost)
        line.received_quantity += qty

    if all(line.received_quantity >= line.quantity for line in po.items):
        po.status = PO_RECEIVED
    else:
        po.status = PO_PARTIALLY_RECEIVED
    logger.info("po_received po_id=%s warehouse=%s status=%s", po_id, warehouse_id, po.status)
    return po
