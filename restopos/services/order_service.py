import logging
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from tortoise import timezone
from tortoise.transactions import in_transaction

from restopos.core.config import ORDER_DEFAULTS, OrderDefaults
from restopos.core.errors import NotFoundError, OrderValidationError, translate_db_errors
from restopos.models.catalog import Product
from restopos.models.delivery import DeliveryOrder, DeliveryStatus
from restopos.models.order import Order, OrderItem, OrderStatus, OrderType, next_order_status
from restopos.schemas.order import OrderRequest
from restopos.services.closing_service import close_order
from restopos.services.customer_service import upsert_customer
from restopos.services.pricing import price_cart
from restopos.services.table_service import occupy_table

log = logging.getLogger("restopos.orders")


def resolve_order_type(request: OrderRequest) -> OrderType:
    """Explicit type wins; otherwise a table means DINE_IN and no table means TAKEAWAY."""
    if request.type is not None:
        return request.type
    return OrderType.DINE_IN if request.table_id else OrderType.TAKEAWAY


def validate_order_request(request: OrderRequest, order_type: OrderType) -> None:
    if not request.items:
        raise OrderValidationError("Order must contain items.")
    for item in request.items:
        if item.quantity <= 0:
            raise OrderValidationError(
                f"Quantity for product {item.product_id} must be positive.",
                {"product_id": item.product_id, "quantity": item.quantity},
            )
    info = request.delivery_info
    if order_type == OrderType.DELIVERY and info is None:
        raise OrderValidationError("Delivery orders require delivery_info.")
    if info is not None:
        missing = [
            name for name in ("customer_name", "customer_phone", "customer_address")
            if not (getattr(info, name) or "").strip()
        ]
        if missing:
            raise OrderValidationError("Delivery info is incomplete.", {"missing": missing})
        if info.delivery_fee is not None and info.delivery_fee < 0:
            raise OrderValidationError("Delivery fee cannot be negative.")


async def load_products(product_ids) -> Dict[str, Product]:
    """Batch-resolves active products with their modifiers; any unknown id fails the whole cart."""
    wanted = set(product_ids)
    products = await Product.filter(id__in=list(wanted), is_active=True).prefetch_related("modifiers")
    product_map = {p.id: p for p in products}
    missing = sorted(wanted - set(product_map))
    if missing:
        raise NotFoundError("Product", missing[0])
    return product_map


async def create_order(request: OrderRequest, defaults: OrderDefaults = ORDER_DEFAULTS) -> Order:
    """
    Prices the cart and persists the order in one transaction, together with
    the customer upsert, the delivery record and the table occupation.
    Any failure leaves no trace of the order.
    """
    order_type = resolve_order_type(request)
    validate_order_request(request, order_type)

    product_map = await load_products(item.product_id for item in request.items)
    lines, total = price_cart(request.items, product_map)

    info = request.delivery_info
    delivery_fee = None
    estimated_time = None
    if info is not None:
        delivery_fee = info.delivery_fee if info.delivery_fee is not None else defaults.delivery_fee
        estimated_time = info.estimated_time or defaults.delivery_time
        total += delivery_fee

    with translate_db_errors("creating order"):
        async with in_transaction() as conn:
            # Table first: an unknown table aborts before anything is written
            if request.table_id:
                await occupy_table(request.table_id, conn)

            customer = None
            if info is not None:
                customer = await upsert_customer(
                    name=info.customer_name.strip(),
                    phone=info.customer_phone.strip(),
                    address=info.customer_address.strip(),
                    conn=conn,
                )

            order = await Order.create(
                status=OrderStatus.PENDING,
                type=order_type,
                table_id=request.table_id,
                customer_id=customer.id if customer else None,
                total=total,
                notes=request.notes,
                using_db=conn,
            )

            for line in lines:
                await OrderItem.create(
                    order=order,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    modifiers=line.modifiers,
                    notes=line.notes,
                    using_db=conn,
                )

            if info is not None and customer is not None:
                await DeliveryOrder.create(
                    order=order,
                    customer_name=customer.name,
                    customer_phone=customer.phone,
                    customer_address=info.customer_address.strip(),
                    delivery_fee=delivery_fee,
                    estimated_time=estimated_time,
                    status=DeliveryStatus.PENDING,
                    using_db=conn,
                )

    log.info(f"Order {order.id} created ({order_type.value}, {len(lines)} lines, total {total}).")
    return await get_order(order.id)


async def get_order_by_id(order_id: UUID) -> Optional[Order]:
    """Fetches order details with items, including each item's product."""
    return await Order.get_or_none(id=order_id).prefetch_related('items', 'items__product')


async def get_order(order_id: UUID) -> Order:
    order = await get_order_by_id(order_id)
    if not order:
        raise NotFoundError("Order", order_id)
    return order


async def list_orders(
    status: Optional[OrderStatus] = None,
    order_type: Optional[OrderType] = None,
    table_id: Optional[UUID] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> List[Order]:
    """Newest first, filtered by any combination of the arguments."""
    filters = {}
    if status is not None:
        filters["status"] = status
    if order_type is not None:
        filters["type"] = order_type
    if table_id is not None:
        filters["table_id"] = table_id
    if date_from is not None:
        filters["created_at__gte"] = date_from
    if date_to is not None:
        filters["created_at__lte"] = date_to
    return await Order.filter(**filters).order_by("-created_at").prefetch_related('items', 'items__product')


async def update_order_status(order_id: UUID, new_status: OrderStatus) -> Order:
    """
    Operator-driven status change. Only existence is checked: any jump,
    including straight to CLOSED, is accepted. Closing this way does not
    deduct stock; use close_order for that.
    """
    new_status = OrderStatus(new_status)
    with translate_db_errors("updating order status"):
        async with in_transaction() as conn:
            order = await Order.filter(id=order_id).using_db(conn).select_for_update().first()
            if not order:
                raise NotFoundError("Order", order_id)

            old_status = order.status
            order.status = new_status
            update_fields = ["status", "updated_at"]
            if new_status == OrderStatus.CLOSED and order.closed_at is None:
                order.closed_at = timezone.now()
                update_fields.append("closed_at")
            await order.save(using_db=conn, update_fields=update_fields)

    log.info(f"Order {order_id} status {OrderStatus(old_status).value} -> {new_status.value}.")
    return await get_order(order_id)


async def advance_order(order_id: UUID) -> Order:
    """Moves an order one step forward (PENDING -> PREPARING -> READY -> DELIVERED -> CLOSED)."""
    order = await Order.get_or_none(id=order_id)
    if not order:
        raise NotFoundError("Order", order_id)
    target = next_order_status(order.status)
    if target is None:
        raise OrderValidationError(
            f"Order is already in a final state: {OrderStatus(order.status).value}.",
            {"order_id": str(order_id), "status": OrderStatus(order.status).value},
        )
    if target == OrderStatus.CLOSED:
        # The last step goes through the stock-deducting close
        await close_order(order_id)
        return await get_order(order_id)
    return await update_order_status(order_id, target)
