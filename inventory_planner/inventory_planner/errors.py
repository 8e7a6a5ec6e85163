from __future__ import annotations


class PlannerError(Exception):
    """Base class for inventory planner errors."""


class InvalidArgumentError(PlannerError, ValueError):
    """Malformed input: non-positive windows, negative quantities."""


class NotFoundError(PlannerError, LookupError):
    def __init__(self, kind: str, key: str):
        super().__init__(f"{kind} not found: {key}")
        self.kind = kind
        self.key = key


class InsufficientStockError(PlannerError):
    def __init__(self, sku: str, warehouse_id: str, requested: int, available: int):
        super().__init__(
            f"insufficient stock for {sku} at {warehouse_id}: "
            f"requested={requested} available={available}"
        )
        self.sku = sku
        self.warehouse_id = warehouse_id
        self.requested = requested
        self.available = available


class InvalidStatusTransitionError(PlannerError):
    def __init__(self, kind: str, key: str, current: str, target: str):
        super().__init__(f"{kind} {key} cannot move from {current} to {target}")
        self.current = current
        self.target = target


def require_non_negative(name: str, value) -> None:
    if value < 0:
        raise InvalidArgumentError(f"{name} must be >= 0, got {value}")


def require_positive(name: str, value) -> None:
    if value <= 0:
        raise InvalidArgumentError(f"{name} must be > 0, got {value}")
