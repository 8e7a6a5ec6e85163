from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from . import config
from .errors import InvalidArgumentError, require_non_negative, require_positive
from .models import SalesOrder, StockProjection


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def sales_velocity(
    sku: str,
    orders: Iterable[SalesOrder],
    lookback_days: int = config.LOOKBACK_DAYS,
    now: Optional[datetime] = None,
) -> float:
    """Average units sold per day over the last ``lookback_days``.

    The denominator is always the full window, so sparse sales dilute the
    average. Orders dated in ``[now - lookback_days, now]`` are counted.
    """
    require_positive("lookback_days", lookback_days)
    now = now or utcnow()
    start = now - timedelta(days=lookback_days)
    total = 0
    for order in orders:
        if order.order_date < start or order.order_date > now:
            continue
        for item in order.items:
            if item.sku != sku:
                continue
            if item.quantity < 0:
                raise InvalidArgumentError(f"negative quantity {item.quantity} for {sku} in order {order.order_id}")
            total += item.quantity
    return total / lookback_days


def days_until_stockout(current_stock: int, safety_stock: int, velocity_per_day: float) -> float:
    require_non_negative("current_stock", current_stock)
    require_non_negative("safety_stock", safety_stock)
    if velocity_per_day <= 0:
        return math.inf
    available = current_stock - safety_stock
    if available <= 0:
        return 0.0
    return available / velocity_per_day


def reorder_quantity(
    current_stock: int,
    safety_stock: int,
    velocity_per_day: float,
    forecast_period_days: int = config.FORECAST_PERIOD_DAYS,
) -> int:
    """Units needed to reach forecast demand plus safety stock, never negative.

    Fractional needs round up to whole units.
    """
    require_non_negative("current_stock", current_stock)
    require_non_negative("safety_stock", safety_stock)
    require_non_negative("forecast_period_days", forecast_period_days)
    target = max(0.0, velocity_per_day) * forecast_period_days + safety_stock
    need = target - current_stock
    if need <= 0:
        return 0
    # float noise such as 3.0000000000000004 must not add a unit
    return int(math.ceil(round(need, 9)))


def project_stock(
    current_stock: int,
    velocity_per_day: float,
    days: int = config.PROJECTION_DAYS,
    start: Optional[datetime] = None,
) -> List[StockProjection]:
    """Day-by-day stock outlook: day 0 is today, later days subtract the velocity."""
    require_positive("days", days)
    require_non_negative("current_stock", current_stock)
    start = (start or utcnow()).replace(hour=0, minute=0, second=0, microsecond=0)
    out: List[StockProjection] = []
    predicted = float(current_stock)
    for i in range(days):
        if i > 0:
            predicted -= velocity_per_day
        out.append(StockProjection(date=start + timedelta(days=i), predicted_stock=max(0, int(round(predicted)))))
    return out
