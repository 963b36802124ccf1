from enum import Enum
from tortoise import fields, models
import uuid


class TableStatus(str, Enum):
    FREE = "FREE"
    OCCUPIED = "OCCUPIED"  # Set when an order is created for the table
    DIRTY = "DIRTY"  # Set when the table's order is closed


class Table(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    number = fields.IntField(unique=True)
    capacity = fields.IntField(default=2)
    status = fields.CharEnumField(TableStatus, default=TableStatus.FREE)
    position_x = fields.FloatField(null=True)
    position_y = fields.FloatField(null=True)

    class Meta:
        table = "tables"
