import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from tortoise import timezone
from tortoise.transactions import in_transaction

from restopos.core.errors import NotFoundError, translate_db_errors
from restopos.models.delivery import DeliveryOrder, DeliveryStatus

log = logging.getLogger("restopos.delivery")


async def update_delivery_status(delivery_id: UUID, new_status: DeliveryStatus,
                                 driver_id: Optional[str] = None) -> DeliveryOrder:
    """
    Moves a delivery to `new_status`. A driver id is stored whenever given,
    whatever the status. PICKED_UP and DELIVERED stamp their timestamp on
    entry only; repeating the current status leaves timestamps alone.
    """
    new_status = DeliveryStatus(new_status)
    with translate_db_errors("updating delivery status"):
        async with in_transaction() as conn:
            delivery = await DeliveryOrder.filter(id=delivery_id).using_db(conn).select_for_update().first()
            if not delivery:
                raise NotFoundError("Delivery", delivery_id)

            update_fields = []
            if driver_id:
                delivery.driver_id = driver_id
                update_fields.append("driver_id")
            if delivery.apply_status(new_status, timezone.now()):
                update_fields += ["status", "pickup_time", "delivered_at"]
            if update_fields:
                await delivery.save(using_db=conn, update_fields=update_fields)

    log.info(f"Delivery {delivery_id} -> {new_status.value} (driver {delivery.driver_id}).")
    return delivery


async def get_delivery_for_order(order_id: UUID) -> Optional[DeliveryOrder]:
    return await DeliveryOrder.get_or_none(order_id=order_id)


async def list_deliveries(
    status: Optional[DeliveryStatus] = None,
    driver_id: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> List[DeliveryOrder]:
    """Newest first."""
    filters = {}
    if status is not None:
        filters["status"] = status
    if driver_id:
        filters["driver_id"] = driver_id
    if date_from is not None:
        filters["created_at__gte"] = date_from
    if date_to is not None:
        filters["created_at__lte"] = date_to
    return await DeliveryOrder.filter(**filters).order_by("-created_at")
