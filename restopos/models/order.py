from enum import Enum
from typing import Optional
from tortoise import fields, models
import uuid


class OrderStatus(str, Enum):
    PENDING = "PENDING"  # Created, waiting for the kitchen
    PREPARING = "PREPARING"
    READY = "READY"
    DELIVERED = "DELIVERED"  # Served to the table / handed to the customer
    CLOSED = "CLOSED"  # Paid, stock deducted
    CANCELLED = "CANCELLED"


class OrderType(str, Enum):
    DINE_IN = "DINE_IN"
    TAKEAWAY = "TAKEAWAY"
    DELIVERY = "DELIVERY"


# Forward step for every status. Terminal states map to None.
NEXT_ORDER_STATUS = {
    OrderStatus.PENDING: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.READY,
    OrderStatus.READY: OrderStatus.DELIVERED,
    OrderStatus.DELIVERED: OrderStatus.CLOSED,
    OrderStatus.CLOSED: None,
    OrderStatus.CANCELLED: None,
}

# Statuses shown on the kitchen display
KITCHEN_STATUSES = (OrderStatus.PENDING, OrderStatus.PREPARING, OrderStatus.READY)


def next_order_status(status: OrderStatus) -> Optional[OrderStatus]:
    return NEXT_ORDER_STATUS[OrderStatus(status)]


class Order(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    status = fields.CharEnumField(OrderStatus, default=OrderStatus.PENDING)
    type = fields.CharEnumField(OrderType, default=OrderType.TAKEAWAY)
    table = fields.ForeignKeyField("models.Table", related_name="orders", null=True)
    customer = fields.ForeignKeyField("models.Customer", related_name="orders", null=True)
    # Fixed at creation: sum of line totals plus delivery fee
    total = fields.DecimalField(max_digits=14, decimal_places=2, default=0)
    notes = fields.TextField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)
    closed_at = fields.DatetimeField(null=True)

    class Meta:
        table = "orders"
        indexes = [
            ("status",),
            ("table_id",),
            ("customer_id",),
            ("created_at",),
            ("status", "created_at"),  # Kitchen feed query
        ]


class OrderItem(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    order = fields.ForeignKeyField("models.Order", related_name="items")
    product = fields.ForeignKeyField("models.Product", related_name="order_items")
    quantity = fields.IntField()
    # Product price plus selected modifiers, frozen at order creation
    unit_price = fields.DecimalField(max_digits=12, decimal_places=2)
    modifiers = fields.JSONField(default=list)
    notes = fields.TextField(null=True)

    class Meta:
        table = "order_items"
        indexes = [
            ("order_id",),
            ("product_id",),
        ]

    @property
    def line_total(self):
        return self.unit_price * self.quantity
