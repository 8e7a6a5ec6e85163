from .advisor import ReorderAdvisor
from .engine import InventoryEngine
from .fulfillment import OrderFulfillmentOrchestrator, split_line
from .purchasing import PurchaseOrderGenerator, ReplenishmentScheduler

__all__ = [
    "InventoryEngine",
    "OrderFulfillmentOrchestrator",
    "PurchaseOrderGenerator",
    "ReorderAdvisor",
    "ReplenishmentScheduler",
    "split_line",
]
