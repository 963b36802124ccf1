import pytest
from unittest.mock import AsyncMock

from restopos.consumers.kitchen_feed import (
    KEEP_ALIVE,
    KitchenFeed,
    fetch_active_orders,
    snapshot_key,
    stream_kitchen_events,
)
from restopos.models.order import OrderStatus, OrderType
from restopos.services.closing_service import close_order
from restopos.services.order_service import create_order, update_order_status


def _orders(*pairs, notes=None):
    return [{"id": oid, "status": status, "notes": notes} for oid, status in pairs]


class ScriptedFetch:
    """Returns the given snapshots in turn, repeating the last one."""

    def __init__(self, *snapshots):
        self.snapshots = list(snapshots)
        self.calls = 0

    async def __call__(self):
        snapshot = self.snapshots[min(self.calls, len(self.snapshots) - 1)]
        self.calls += 1
        if isinstance(snapshot, Exception):
            raise snapshot
        return snapshot


def _disconnect_after(n):
    state = {"checks": 0}

    async def is_disconnected():
        state["checks"] += 1
        return state["checks"] > n
    return is_disconnected


# --- CHANGE DETECTION ---

def test_snapshot_key_is_ordered_id_status_pairs():
    assert snapshot_key(_orders(("a", "PENDING"), ("b", "READY"))) == (("a", "PENDING"), ("b", "READY"))
    assert snapshot_key([]) == ()


@pytest.mark.asyncio
async def test_feed_emits_first_snapshot_then_only_changes():
    fetch = ScriptedFetch(
        _orders(("a", "PENDING")),
        _orders(("a", "PENDING")),
        _orders(("a", "PREPARING")),
        _orders(("a", "PREPARING"), ("b", "PENDING")),
        _orders(("b", "PENDING")),
    )
    feed = KitchenFeed(fetch=fetch)

    emitted = [await feed.poll() for _ in range(5)]

    assert emitted[0] == _orders(("a", "PENDING"))
    assert emitted[1] is None
    assert emitted[2] == _orders(("a", "PREPARING"))
    assert [o["id"] for o in emitted[3]] == ["a", "b"]
    assert [o["id"] for o in emitted[4]] == ["b"]


@pytest.mark.asyncio
async def test_feed_emits_empty_set_once():
    feed = KitchenFeed(fetch=ScriptedFetch([]))
    assert await feed.poll() == []
    assert await feed.poll() is None


# --- SSE STREAM ---

@pytest.mark.asyncio
async def test_stream_pushes_changes_and_stops_on_disconnect():
    fetch = ScriptedFetch(_orders(("a", "PENDING")), _orders(("a", "PENDING")), _orders(("a", "READY")))
    sleep = AsyncMock()

    frames = [
        frame async for frame in stream_kitchen_events(
            _disconnect_after(3), feed=KitchenFeed(fetch=fetch), poll_interval=2, keepalive_interval=3600, sleep=sleep
        )
    ]

    assert len(frames) == 2
    assert frames[0].startswith("event: orders\ndata: ")
    assert '"status": "READY"' in frames[1]
    assert sleep.await_count == 3
    sleep.assert_awaited_with(2)


@pytest.mark.asyncio
async def test_stream_sends_keep_alive_when_idle():
    fetch = ScriptedFetch(_orders(("a", "PENDING")))

    frames = [
        frame async for frame in stream_kitchen_events(
            _disconnect_after(3), feed=KitchenFeed(fetch=fetch), keepalive_interval=0, sleep=AsyncMock()
        )
    ]

    assert frames[0].startswith("event: orders")
    assert frames[1:] == [KEEP_ALIVE, KEEP_ALIVE]


@pytest.mark.asyncio
async def test_stream_gives_up_after_repeated_failures():
    fetch = ScriptedFetch(RuntimeError("db down"))

    frames = [
        frame async for frame in stream_kitchen_events(
            _disconnect_after(100), feed=KitchenFeed(fetch=fetch), max_retries=3,
            keepalive_interval=3600, sleep=AsyncMock()
        )
    ]

    assert fetch.calls == 3
    assert frames == ['event: error\ndata: {"error": "Connection error"}\n\n']


@pytest.mark.asyncio
async def test_stream_recovers_after_a_transient_failure():
    fetch = ScriptedFetch(RuntimeError("blip"), _orders(("a", "PENDING")))

    frames = [
        frame async for frame in stream_kitchen_events(
            _disconnect_after(2), feed=KitchenFeed(fetch=fetch), max_retries=2,
            keepalive_interval=3600, sleep=AsyncMock()
        )
    ]

    assert len(frames) == 1
    assert frames[0].startswith("event: orders")


# --- PROJECTION OVER THE DATABASE ---

@pytest.mark.asyncio
async def test_active_orders_projection(cafe, make_request):
    dine_in = await create_order(make_request([("latte", 1, ["Leche Oat"])], table_id=cafe.table.id))
    delivery = await create_order(make_request(
        [("espresso", 2)],
        order_type=OrderType.DELIVERY,
        delivery={"customer_name": "Ana", "customer_phone": "+561111", "customer_address": "A"},
    ))
    served = await create_order(make_request([("water-bottle", 1)]))
    await update_order_status(served.id, OrderStatus.DELIVERED)

    orders = await fetch_active_orders()

    assert [o["id"] for o in orders] == [str(dine_in.id), str(delivery.id)]
    assert orders[0]["table_number"] == 1
    assert orders[0]["items"][0]["name"] == "Latte"
    assert orders[0]["delivery"] is None
    assert orders[1]["delivery"]["customer_name"] == "Ana"
    assert orders[1]["delivery"]["status"] == "PENDING"


@pytest.mark.asyncio
async def test_feed_notices_status_change_and_close(cafe, make_request):
    order = await create_order(make_request([("espresso", 1)]))
    feed = KitchenFeed()

    assert len(await feed.poll()) == 1
    assert await feed.poll() is None

    await update_order_status(order.id, OrderStatus.PREPARING)
    changed = await feed.poll()
    assert changed[0]["status"] == "PREPARING"

    await close_order(order.id)
    assert await feed.poll() == []
