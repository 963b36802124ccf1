import logging
from typing import Iterable, List, Optional
from uuid import UUID

from restopos.core.errors import OrderValidationError, translate_db_errors
from restopos.models.inventory import InventoryItem
from restopos.schemas.inventory import InventoryItemRequest

log = logging.getLogger("restopos.inventory")


def report_low_stock(items: Iterable[InventoryItem], triggered_by: Optional[UUID] = None) -> List[InventoryItem]:
    """Logs an alert for each item at or below its minimum and returns them."""
    low = [item for item in items if item.is_low_stock]
    for item in low:
        log.warning(
            f"ALERT: Low stock for {item.name}: {item.current_stock} {item.unit.value} "
            f"(minimum {item.min_stock}, triggered by order {triggered_by})"
        )
    return low


async def list_inventory() -> List[InventoryItem]:
    return await InventoryItem.all().order_by("name")


async def list_low_stock() -> List[InventoryItem]:
    # Compared in Python: decimal columns are not comparable column-to-column on every backend
    return [item for item in await list_inventory() if item.is_low_stock]


async def create_inventory_item(data: InventoryItemRequest) -> InventoryItem:
    if await InventoryItem.filter(name=data.name).exists():
        raise OrderValidationError(f"Inventory item '{data.name}' already exists.", {"name": data.name})
    with translate_db_errors("creating inventory item"):
        item = await InventoryItem.create(
            name=data.name,
            current_stock=data.current_stock,
            min_stock=data.min_stock,
            unit=data.unit,
            cost_per_unit=data.cost_per_unit,
        )
    log.info(f"Inventory item '{item.name}' created with {item.current_stock} {item.unit.value}.")
    return item
