from pydantic import BaseModel
from typing import Optional
from datetime import datetime
import uuid

from restopos.models.delivery import DeliveryOrder, DeliveryStatus
from restopos.schemas.response import DecimalStr


class DeliveryStatusUpdate(BaseModel):
    """Status change for a delivery; `driver_id` is stored whenever present."""
    status: DeliveryStatus
    driver_id: Optional[str] = None


class DeliveryResponse(BaseModel):
    id: uuid.UUID
    order_id: uuid.UUID
    customer_name: str
    customer_phone: str
    customer_address: str
    delivery_fee: DecimalStr
    estimated_time: Optional[int] = None
    status: DeliveryStatus
    driver_id: Optional[str] = None
    pickup_time: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_model(cls, delivery: DeliveryOrder) -> "DeliveryResponse":
        return cls(
            id=delivery.id,
            order_id=delivery.order_id,
            customer_name=delivery.customer_name,
            customer_phone=delivery.customer_phone,
            customer_address=delivery.customer_address,
            delivery_fee=delivery.delivery_fee,
            estimated_time=delivery.estimated_time,
            status=delivery.status,
            driver_id=delivery.driver_id,
            pickup_time=delivery.pickup_time,
            delivered_at=delivery.delivered_at,
            created_at=delivery.created_at,
        )
