import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, status

from restopos.models.order import Order, OrderStatus, OrderType
from restopos.models.table import Table
from restopos.schemas.order import (
    OrderCloseResponse,
    OrderRequest,
    OrderStatusUpdate,
    build_order_detail,
)
from restopos.schemas.response import SuccessResponse
from restopos.services.closing_service import close_order
from restopos.services.delivery_service import get_delivery_for_order
from restopos.services.order_service import (
    advance_order,
    create_order,
    get_order,
    list_orders,
    update_order_status,
)

router = APIRouter()
log = logging.getLogger("restopos.api.orders")


async def _order_payload(order: Order) -> dict:
    delivery = await get_delivery_for_order(order.id)
    table_number = None
    if order.table_id:
        table = await Table.get_or_none(id=order.table_id)
        table_number = table.number if table else None
    return build_order_detail(order, delivery=delivery, table_number=table_number).model_dump(mode="json")


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_order_endpoint(request_data: OrderRequest):
    """
    Prices the cart and creates the order (plus delivery record, customer
    upsert and table occupation) atomically.
    """
    order = await create_order(request_data)
    log.info(f"Order {order.id} placed successfully.")
    return SuccessResponse(data=await _order_payload(order))


@router.get("/", response_model=SuccessResponse)
async def list_orders_endpoint(
    status: Optional[OrderStatus] = None,
    type: Optional[OrderType] = None,
    table_id: Optional[UUID] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
):
    orders = await list_orders(status=status, order_type=type, table_id=table_id,
                               date_from=date_from, date_to=date_to)
    return SuccessResponse(data=[build_order_detail(o).model_dump(mode="json") for o in orders])


@router.get("/{order_id}", response_model=SuccessResponse)
async def get_order_endpoint(order_id: UUID):
    """Fetches details for a specific order."""
    order = await get_order(order_id)
    return SuccessResponse(data=await _order_payload(order))


@router.patch("/{order_id}/status", response_model=SuccessResponse)
async def update_status_endpoint(order_id: UUID, payload: OrderStatusUpdate):
    """
    Sets the kitchen status (e.g. 'PREPARING', 'READY', 'DELIVERED', 'CANCELLED').
    """
    order = await update_order_status(order_id, payload.status)
    return SuccessResponse(data=await _order_payload(order))


@router.post("/{order_id}/advance", response_model=SuccessResponse)
async def advance_order_endpoint(order_id: UUID):
    """Moves the order to its next kitchen status."""
    order = await advance_order(order_id)
    return SuccessResponse(data=await _order_payload(order))


@router.post("/{order_id}/close", response_model=SuccessResponse)
async def close_order_endpoint(order_id: UUID):
    """
    Deducts recipe stock and closes the order. Fails as a whole on
    insufficient stock or when the order is already closed.
    """
    order = await close_order(order_id)
    data = OrderCloseResponse(
        order_id=order.id,
        status=order.status,
        closed_at=order.closed_at,
        message="Order closed. Stock deducted.",
    ).model_dump(mode="json")
    return SuccessResponse(data=data)
