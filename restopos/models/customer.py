from tortoise import fields, models
import uuid


class Customer(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    phone = fields.CharField(max_length=32, unique=True)
    name = fields.CharField(max_length=255)
    default_address = fields.TextField(null=True)
    address_history = fields.JSONField(default=list)  # Distinct addresses, oldest first
    order_count = fields.IntField(default=0)
    last_order_date = fields.DatetimeField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "customers"
        indexes = [
            ("order_count", "last_order_date"),
        ]
