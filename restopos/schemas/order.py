from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
import uuid

from restopos.models.order import Order, OrderStatus, OrderType
from restopos.models.delivery import DeliveryOrder, DeliveryStatus
from restopos.schemas.response import DecimalStr


class OrderItemRequest(BaseModel):
    """Schema for a single cart line in the order request."""
    product_id: str
    quantity: int = Field(..., gt=0)
    modifiers: List[str] = Field(default_factory=list, description="Modifier names selected for this line.")
    notes: Optional[str] = None


class DeliveryInfo(BaseModel):
    """Customer and dispatch data for DELIVERY orders."""
    customer_name: str = Field(..., min_length=1)
    customer_phone: str = Field(..., min_length=1)
    customer_address: str = Field(..., min_length=1)
    delivery_fee: Optional[Decimal] = Field(None, ge=0, description="Falls back to the configured default fee.")
    estimated_time: Optional[int] = Field(None, gt=0, description="Minutes.")


class OrderRequest(BaseModel):
    """Schema for the full order placement request body."""
    table_id: Optional[uuid.UUID] = None
    type: Optional[OrderType] = None
    items: List[OrderItemRequest]
    notes: Optional[str] = None
    delivery_info: Optional[DeliveryInfo] = None


class OrderStatusUpdate(BaseModel):
    """Schema for updating an order status."""
    status: OrderStatus


class OrderItemResponse(BaseModel):
    id: uuid.UUID
    product_id: str
    name: str
    quantity: int
    unit_price: DecimalStr
    line_total: DecimalStr
    modifiers: List[str]
    notes: Optional[str] = None


class DeliverySummary(BaseModel):
    id: uuid.UUID
    customer_name: str
    customer_address: str
    status: DeliveryStatus
    estimated_time: Optional[int] = None
    driver_id: Optional[str] = None


class OrderDetailResponse(BaseModel):
    """Schema for fetching detailed order information."""
    id: uuid.UUID
    status: OrderStatus
    type: OrderType
    table_id: Optional[uuid.UUID] = None
    table_number: Optional[int] = None
    customer_id: Optional[uuid.UUID] = None
    total: DecimalStr
    notes: Optional[str] = None
    items: List[OrderItemResponse]
    delivery: Optional[DeliverySummary] = None
    created_at: datetime
    closed_at: Optional[datetime] = None


class OrderCloseResponse(BaseModel):
    order_id: uuid.UUID
    status: OrderStatus
    closed_at: Optional[datetime] = None
    message: str


def build_order_detail(order: Order, delivery: Optional[DeliveryOrder] = None,
                       table_number: Optional[int] = None) -> OrderDetailResponse:
    """Expects `order.items` prefetched together with each item's product."""
    items = [
        OrderItemResponse(
            id=i.id,
            product_id=i.product_id,
            name=i.product.name,
            quantity=i.quantity,
            unit_price=i.unit_price,
            line_total=i.line_total,
            modifiers=list(i.modifiers or []),
            notes=i.notes,
        )
        for i in order.items
    ]
    summary = None
    if delivery is not None:
        summary = DeliverySummary(
            id=delivery.id,
            customer_name=delivery.customer_name,
            customer_address=delivery.customer_address,
            status=delivery.status,
            estimated_time=delivery.estimated_time,
            driver_id=delivery.driver_id,
        )
    return OrderDetailResponse(
        id=order.id,
        status=order.status,
        type=order.type,
        table_id=order.table_id,
        table_number=table_number,
        customer_id=order.customer_id,
        total=order.total,
        notes=order.notes,
        items=items,
        delivery=summary,
        created_at=order.created_at,
        closed_at=order.closed_at,
    )
