from enum import Enum
from tortoise import fields, models
import uuid


class DeliveryStatus(str, Enum):
    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"  # Driver chosen
    PICKED_UP = "PICKED_UP"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


# Timestamp column stamped when a delivery enters the status
DELIVERY_STATUS_TIMESTAMPS = {
    DeliveryStatus.PENDING: None,
    DeliveryStatus.ASSIGNED: None,
    DeliveryStatus.PICKED_UP: "pickup_time",
    DeliveryStatus.IN_TRANSIT: None,
    DeliveryStatus.DELIVERED: "delivered_at",
    DeliveryStatus.CANCELLED: None,
}


class DeliveryOrder(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    order = fields.OneToOneField("models.Order", related_name="delivery")
    # Snapshot of the customer at order time, kept even if the Customer row changes
    customer_name = fields.CharField(max_length=255)
    customer_phone = fields.CharField(max_length=32)
    customer_address = fields.TextField()
    delivery_fee = fields.DecimalField(max_digits=12, decimal_places=2, default=0)
    estimated_time = fields.IntField(null=True)  # Minutes
    status = fields.CharEnumField(DeliveryStatus, default=DeliveryStatus.PENDING)
    driver_id = fields.CharField(max_length=64, null=True)
    pickup_time = fields.DatetimeField(null=True)
    delivered_at = fields.DatetimeField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "delivery_orders"
        indexes = [
            ("status",),
            ("driver_id",),
            ("created_at",),
        ]

    def apply_status(self, status: DeliveryStatus, now) -> bool:
        """
        Moves the delivery into `status`, stamping its timestamp column the
        first time the status is entered. Later re-entries, directly or after
        moving away and back, keep the original stamp.
        Returns True when the status actually changed.
        """
        status = DeliveryStatus(status)
        if self.status == status:
            return False
        self.status = status
        stamp = DELIVERY_STATUS_TIMESTAMPS[status]
        if stamp and getattr(self, stamp) is None:
            setattr(self, stamp, now)
        return True
