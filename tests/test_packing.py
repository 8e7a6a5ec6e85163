"""Tests for the packing queue and pack-time stock decrement."""

import threading
from datetime import timedelta

import pytest

from inventory_planner.errors import InsufficientStockError, InvalidArgumentError, InvalidStatusTransitionError, NotFoundError
from inventory_planner.models import (
    PACKING_CANCELLED,
    PACKING_ON_HOLD,
    PACKING_PACKED,
    PACKING_PENDING,
    PACKING_SHIPPED,
    PackingItem,
    Product,
)

from conftest import NOW


def task(sku="SKU-RICE", warehouse="WHS-A", qty=10, order_id="SO-1"):
    return PackingItem(order_id, sku, sku.title(), qty, warehouse)


class TestPackingQueue:
    def test_add_assigns_id_and_timestamps(self, engine):
        item = engine.packing.add(task(), now=NOW)
        assert item.item_id.startswith("PK-")
        assert item.created_at == NOW
        assert item.status == PACKING_PENDING

    def test_pending_oldest_first_all_newest_first(self, engine):
        first = engine.packing.add(task(order_id="SO-1"), now=NOW)
        second = engine.packing.add(task(order_id="SO-2"), now=NOW + timedelta(minutes=5))
        engine.packing.update_status(first.item_id, PACKING_CANCELLED)

        assert [i.order_id for i in engine.packing.pending()] == ["SO-2"]
        assert [i.item_id for i in engine.packing.all()] == [second.item_id, first.item_id]

    def test_pack_decrements_stock(self, engine):
        item = engine.packing.add(task(qty=15), now=NOW)
        packed = engine.packing.update_status(item.item_id, PACKING_PACKED, now=NOW)

        assert packed.status == PACKING_PACKED
        assert packed.packed_at == NOW
        assert engine.catalog.get_stock_by_warehouse("SKU-RICE")["WHS-A"] == 25

    def test_ship_after_pack(self, engine):
        item = engine.packing.add(task(), now=NOW)
        engine.packing.update_status(item.item_id, PACKING_PACKED)
        shipped = engine.packing.update_status(item.item_id, PACKING_SHIPPED, now=NOW)
        assert shipped.shipped_at == NOW

    def test_insufficient_stock_puts_item_on_hold(self, engine):
        item = engine.packing.add(task(qty=41), now=NOW)
        held = engine.packing.update_status(item.item_id, PACKING_PACKED)

        assert held.status == PACKING_ON_HOLD
        assert "available=40" in held.notes
        assert engine.catalog.get_stock_by_warehouse("SKU-RICE")["WHS-A"] == 40

    def test_concurrent_packs_never_drive_stock_negative(self, engine):
        items = [engine.packing.add(task(qty=7)) for _ in range(10)]
        threads = [
            threading.Thread(target=engine.packing.update_status, args=(i.item_id, PACKING_PACKED)) for i in items
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        statuses = [engine.packing.get(i.item_id).status for i in items]
        assert statuses.count(PACKING_PACKED) == 5
        assert statuses.count(PACKING_ON_HOLD) == 5
        assert engine.catalog.get_stock_by_warehouse("SKU-RICE")["WHS-A"] == 5

    @pytest.mark.parametrize(
        "path",
        [
            (PACKING_SHIPPED,),
            (PACKING_CANCELLED, PACKING_PENDING),
            (PACKING_PACKED, PACKING_PENDING),
        ],
    )
    def test_invalid_transitions(self, engine, path):
        item = engine.packing.add(task())
        for status in path[:-1]:
            engine.packing.update_status(item.item_id, status)
        with pytest.raises(InvalidStatusTransitionError):
            engine.packing.update_status(item.item_id, path[-1])

    def test_on_hold_can_return_to_pending(self, engine):
        item = engine.packing.add(task())
        engine.packing.update_status(item.item_id, PACKING_ON_HOLD)
        assert engine.packing.update_status(item.item_id, PACKING_PENDING).status == PACKING_PENDING

    def test_unknown_status_and_item(self, engine):
        item = engine.packing.add(task())
        with pytest.raises(InvalidArgumentError):
            engine.packing.update_status(item.item_id, "lost")
        with pytest.raises(NotFoundError):
            engine.packing.update_status("PK-NOPE", PACKING_PACKED)


class TestCatalogStockUpdates:
    def test_decrement_guards_non_negative(self, engine):
        with pytest.raises(InsufficientStockError):
            engine.catalog.decrement_stock("SKU-RICE", "WHS-C", 6)
        assert engine.catalog.decrement_stock("SKU-RICE", "WHS-C", 5) == 0

    def test_decrement_unknown_product(self, engine):
        with pytest.raises(NotFoundError):
            engine.catalog.decrement_stock("SKU-NOPE", "WHS-A", 1)

    def test_snapshot_is_a_copy(self, engine):
        snapshot = engine.catalog.get_stock_by_warehouse("SKU-RICE")
        snapshot["WHS-A"] = 0
        assert engine.catalog.get_stock_by_warehouse("SKU-RICE")["WHS-A"] == 40

    def test_upsert_updates_stored_record_in_place(self, engine):
        record = engine.catalog._products["SKU-RICE"]
        engine.catalog.upsert(Product("SKU-RICE", "Rice 5kg", {"WHS-A": 50, "WHS-D": 2}, 5, "SUP-1"))

        assert engine.catalog._products["SKU-RICE"] is record
        assert engine.catalog.get("SKU-RICE").name == "Rice 5kg"
        assert engine.catalog.get_stock_by_warehouse("SKU-RICE") == {"WHS-A": 50, "WHS-D": 2}
        assert engine.catalog.decrement_stock("SKU-RICE", "WHS-A", 5) == 45
        assert engine.catalog.get_stock_by_warehouse("SKU-RICE")["WHS-A"] == 45
