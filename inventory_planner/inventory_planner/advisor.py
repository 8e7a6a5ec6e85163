from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import List, Optional

from . import config
from .forecasting import days_until_stockout, reorder_quantity, sales_velocity, utcnow
from .models import DataQualityWarning, ReorderAdvice
from .stores import ProductCatalog, SalesHistoryStore, SupplierCatalog

logger = logging.getLogger(__name__)

NO_PREFERRED_SUPPLIER = "no_preferred_supplier"
NO_SUPPLIER_PRODUCT_INFO = "no_supplier_product_info"
UNKNOWN_UNIT_COST = "unknown_unit_cost"


class ReorderAdvisor:
    """Per-SKU reorder recommendation from stock, sales history and supplier terms.

    Always returns a fully populated ``ReorderAdvice`` (or ``None`` for an
    unknown SKU), so callers can branch on ``should_reorder`` alone.
    Data-quality problems are logged and attached to the advice, never raised.
    """

    def __init__(
        self,
        products: ProductCatalog,
        sales: SalesHistoryStore,
        suppliers: SupplierCatalog,
        lookback_days: int = config.LOOKBACK_DAYS,
    ):
        self.products = products
        self.sales = sales
        self.suppliers = suppliers
        self.lookback_days = lookback_days

    def advise(
        self,
        sku: str,
        forecast_period_days: int = config.FORECAST_PERIOD_DAYS,
        now: Optional[datetime] = None,
    ) -> Optional[ReorderAdvice]:
        product = self.products.get(sku)
        if product is None:
            return None
        now = now or utcnow()

        current_stock = product.total_stock
        safety_stock = product.safety_stock_quantity
        history = self.sales.orders(since=now - timedelta(days=self.lookback_days), until=now)
        velocity = sales_velocity(sku, history, self.lookback_days, now=now)
        days_left = days_until_stockout(current_stock, safety_stock, velocity)
        warnings: List[DataQualityWarning] = []

        supplier_id = product.preferred_supplier_id
        if not supplier_id:
            warnings.append(self._warn(sku, NO_PREFERRED_SUPPLIER, "product has no preferred supplier"))
            return ReorderAdvice(
                sku=sku,
                should_reorder=False,
                current_stock=current_stock,
                safety_stock=safety_stock,
                sales_velocity_per_day=velocity,
                days_until_stockout=days_left,
                lead_time_days=math.inf,
                reorder_quantity=0,
                preferred_supplier_id=None,
                minimum_order_quantity=0,
                final_order_quantity=0,
                estimated_cost=0.0,
                warnings=tuple(warnings),
            )

        info = self.suppliers.get(sku, supplier_id)
        if info is None:
            warnings.append(
                self._warn(sku, NO_SUPPLIER_PRODUCT_INFO, f"no supplier terms for supplier {supplier_id}")
            )
            lead_time, unit_cost, moq = math.inf, math.inf, 0
        else:
            lead_time, unit_cost, moq = info.lead_time_days, info.unit_cost, info.minimum_order_quantity

        should_reorder = days_left <= lead_time
        quantity = final_quantity = 0
        cost = 0.0
        if should_reorder:
            quantity = reorder_quantity(current_stock, safety_stock, velocity, forecast_period_days)
            final_quantity = max(quantity, moq)
            if final_quantity <= 0:
                should_reorder = False
                quantity = final_quantity = 0
            elif math.isinf(unit_cost):
                cost = math.inf
                warnings.append(
                    self._warn(sku, UNKNOWN_UNIT_COST, "unit cost unknown, purchase order cannot be priced")
                )
            else:
                cost = final_quantity * unit_cost

        advice = ReorderAdvice(
            sku=sku,
            should_reorder=should_reorder,
            current_stock=current_stock,
            safety_stock=safety_stock,
            sales_velocity_per_day=velocity,
            days_until_stockout=days_left,
            lead_time_days=lead_time,
            reorder_quantity=quantity,
            preferred_supplier_id=supplier_id,
            minimum_order_quantity=moq,
            final_order_quantity=final_quantity,
            estimated_cost=cost,
            warnings=tuple(warnings),
        )
        logger.debug(
            "advice sku=%s reorder=%s stock=%s velocity=%.3f days_left=%s qty=%s",
            sku,
            advice.should_reorder,
            current_stock,
            velocity,
            days_left,
            final_quantity,
        )
        return advice

    @staticmethod
    def _warn(sku: str, code: str, message: str) -> DataQualityWarning:
        logger.warning("data_quality sku=%s code=%s %s", sku, code, message)
        return DataQualityWarning(sku=sku, code=code, message=message)
