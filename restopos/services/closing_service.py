"""
Closing an order: the one place where the order total, physical stock and
table turnover have to agree.

The close is all-or-nothing across every line of the order. A read-only
pre-flight pass rejects orders that would overdraw any ingredient; the
deduction transaction then locks the order and inventory rows and checks
again against the locked values, so two concurrent closes sharing an
ingredient can never drive its stock below zero.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional
from uuid import UUID

from tortoise import timezone
from tortoise.transactions import in_transaction

from restopos.core.config import LOW_STOCK_ALERTS
from restopos.core.errors import AlreadyClosedError, InsufficientStockError, NotFoundError, translate_db_errors
from restopos.models.catalog import Recipe
from restopos.models.delivery import DeliveryOrder, DeliveryStatus
from restopos.models.inventory import InventoryItem
from restopos.models.order import Order, OrderItem, OrderStatus
from restopos.services.inventory_service import report_low_stock
from restopos.services.table_service import mark_table_dirty

log = logging.getLogger("restopos.closing")


@dataclass
class StockRequirement:
    """Total amount of one ingredient an order consumes."""
    inventory_item_id: UUID
    name: str
    unit: Optional[str]
    required: Decimal


def compute_requirements(lines: Iterable, recipes: Iterable) -> Dict[UUID, StockRequirement]:
    """
    Aggregates recipe consumption per inventory item over all preparable lines.

    `lines` need `product_id`, `quantity` and a loaded `product`; `recipes`
    need `product_id`, `quantity` and a loaded `inventory_item`. Lines
    sharing an ingredient add up, so the check runs against the order's whole
    demand for it.
    """
    recipes_by_product: Dict[str, List] = {}
    for recipe in recipes:
        recipes_by_product.setdefault(recipe.product_id, []).append(recipe)

    requirements: Dict[UUID, StockRequirement] = {}
    for line in lines:
        if not line.product.is_preparable:
            continue
        for recipe in recipes_by_product.get(line.product_id, []):
            amount = Decimal(recipe.quantity) * line.quantity
            item = recipe.inventory_item
            req = requirements.get(item.id)
            if req is None:
                req = requirements[item.id] = StockRequirement(
                    inventory_item_id=item.id,
                    name=item.name,
                    unit=getattr(item.unit, "value", item.unit),
                    required=Decimal("0"),
                )
            req.required += amount
    return requirements


def find_shortage(requirements: Mapping[UUID, StockRequirement],
                  available: Mapping[UUID, Decimal]) -> Optional[InsufficientStockError]:
    """
    First ingredient (by name) whose requirement exceeds what is available.
    Requiring exactly the stock on hand is allowed and leaves it at zero.
    """
    for req in sorted(requirements.values(), key=lambda r: r.name):
        have = Decimal(available.get(req.inventory_item_id, Decimal("0")))
        if req.required > have:
            return InsufficientStockError(req.name, req.required, have, req.unit)
    return None


async def load_requirements(order: Order) -> Dict[UUID, StockRequirement]:
    lines = await OrderItem.filter(order_id=order.id).prefetch_related("product")
    preparable = sorted({line.product_id for line in lines if line.product.is_preparable})
    recipes = []
    if preparable:
        recipes = await Recipe.filter(product_id__in=preparable).prefetch_related("inventory_item")
    return compute_requirements(lines, recipes)


async def close_order(order_id: UUID) -> Order:
    """
    Deducts recipe stock for every preparable line, marks the order CLOSED
    and its delivery DELIVERED, then frees the table for cleaning.

    Raises NotFoundError, AlreadyClosedError or InsufficientStockError; in
    every failure case stock, order status and delivery status are untouched.
    """
    order = await Order.get_or_none(id=order_id)
    if not order:
        raise NotFoundError("Order", order_id)
    # Only CLOSED is rejected; a CANCELLED order can still be settled
    if order.status == OrderStatus.CLOSED:
        raise AlreadyClosedError(order_id)

    # --- 1. PRE-FLIGHT (read only) ---
    requirements = await load_requirements(order)
    snapshot = await InventoryItem.filter(id__in=list(requirements))
    shortage = find_shortage(requirements, {item.id: item.current_stock for item in snapshot})
    if shortage:
        log.warning(f"Close of order {order_id} rejected: {shortage.message}")
        raise shortage

    # --- 2. DEDUCTION TRANSACTION ---
    now = timezone.now()
    with translate_db_errors("closing order"):
        async with in_transaction() as conn:
            # Lock the order first so a concurrent close of the same order waits here
            locked = await Order.filter(id=order_id).using_db(conn).select_for_update().first()
            if not locked:
                raise NotFoundError("Order", order_id)
            if locked.status == OrderStatus.CLOSED:
                raise AlreadyClosedError(order_id)

            # Stable lock order across concurrent closes
            inventory = await InventoryItem.filter(id__in=list(requirements)).using_db(conn).order_by(
                "id"
            ).select_for_update()
            inv_map = {item.id: item for item in inventory}

            shortage = find_shortage(requirements, {item.id: item.current_stock for item in inventory})
            if shortage:
                log.warning(f"Close of order {order_id} lost a stock race: {shortage.message}")
                raise shortage

            for item_id, req in requirements.items():
                item = inv_map[item_id]
                item.current_stock = Decimal(item.current_stock) - req.required
                await item.save(using_db=conn, update_fields=["current_stock", "updated_at"])

            locked.status = OrderStatus.CLOSED
            locked.closed_at = now
            await locked.save(using_db=conn, update_fields=["status", "closed_at", "updated_at"])

            delivery = await DeliveryOrder.filter(order_id=order_id).using_db(conn).select_for_update().first()
            if delivery and delivery.apply_status(DeliveryStatus.DELIVERED, now):
                await delivery.save(using_db=conn, update_fields=["status", "delivered_at"])

    log.info(f"Order {order_id} closed; {len(requirements)} ingredients deducted.")

    # --- 3. AFTER COMMIT (best effort) ---
    if locked.table_id:
        await mark_table_dirty(locked.table_id)
    if LOW_STOCK_ALERTS and inventory:
        report_low_stock(inventory, triggered_by=order_id)

    return locked
