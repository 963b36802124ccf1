import asyncio
import json
import logging
import time
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Tuple

from restopos.core.config import KDS_KEEPALIVE_INTERVAL, KDS_MAX_RETRIES, KDS_POLL_INTERVAL
from restopos.models.delivery import DeliveryOrder
from restopos.models.order import KITCHEN_STATUSES, Order
from restopos.models.table import Table
from restopos.schemas.order import build_order_detail

log = logging.getLogger("restopos.kitchen_feed")

KEEP_ALIVE = ": keep-alive\n\n"


async def fetch_active_orders() -> List[Dict[str, Any]]:
    """
    Orders the kitchen still has to work on (PENDING, PREPARING, READY),
    oldest first, with lines, table number and delivery summary.
    """
    orders = await Order.filter(status__in=KITCHEN_STATUSES).order_by("created_at").prefetch_related(
        'items', 'items__product'
    )
    if not orders:
        return []

    order_ids = [o.id for o in orders]
    deliveries = {str(d.order_id): d for d in await DeliveryOrder.filter(order_id__in=order_ids)}
    table_ids = {o.table_id for o in orders if o.table_id}
    table_numbers = {}
    if table_ids:
        table_numbers = {str(t.id): t.number for t in await Table.filter(id__in=list(table_ids))}

    return [
        build_order_detail(
            o,
            delivery=deliveries.get(str(o.id)),
            table_number=table_numbers.get(str(o.table_id)) if o.table_id else None,
        ).model_dump(mode="json")
        for o in orders
    ]


def snapshot_key(orders: List[Dict[str, Any]]) -> Tuple[Tuple[str, str], ...]:
    """What a subscriber must see change: membership, order and each order's status."""
    return tuple((str(o["id"]), str(o["status"])) for o in orders)


class KitchenFeed:
    """
    Poll-and-diff projection of the active order set for one subscriber.
    `poll()` returns a fresh snapshot only when its key differs from the last
    one handed out; the first poll always yields a snapshot.
    """

    def __init__(self, fetch: Callable[[], Awaitable[List[Dict[str, Any]]]] = fetch_active_orders):
        self._fetch = fetch
        self._last_key: Optional[Tuple] = None

    async def poll(self) -> Optional[List[Dict[str, Any]]]:
        orders = await self._fetch()
        key = snapshot_key(orders)
        if key == self._last_key:
            return None
        self._last_key = key
        return orders


def format_sse(data: Any, event: str = "message") -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


async def stream_kitchen_events(
    is_disconnected: Callable[[], Awaitable[bool]],
    feed: Optional[KitchenFeed] = None,
    poll_interval: float = KDS_POLL_INTERVAL,
    keepalive_interval: float = KDS_KEEPALIVE_INTERVAL,
    max_retries: int = KDS_MAX_RETRIES,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> AsyncIterator[str]:
    """
    Server-sent event stream for the kitchen display. Pushes an `orders`
    event whenever the active set changes, keep-alive comments while idle,
    and gives up with an `error` event after `max_retries` consecutive
    failed fetches. Ends when the client disconnects.
    """
    feed = feed or KitchenFeed()
    failures = 0
    last_sent = time.monotonic()

    while True:
        if await is_disconnected():
            log.info("Kitchen feed subscriber disconnected.")
            return

        orders = None
        try:
            orders = await feed.poll()
            failures = 0
        except Exception:
            failures += 1
            log.exception(f"Error fetching kitchen orders (attempt {failures}/{max_retries}).")
            if failures >= max_retries:
                yield format_sse({"error": "Connection error"}, event="error")
                return

        if orders is not None:
            yield format_sse({"orders": orders}, event="orders")
            last_sent = time.monotonic()
        elif time.monotonic() - last_sent >= keepalive_interval:
            yield KEEP_ALIVE
            last_sent = time.monotonic()

        await sleep(poll_interval)
