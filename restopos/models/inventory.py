from enum import Enum
from tortoise import fields, models
import uuid


class StockUnit(str, Enum):
    GRAM = "GRAM"
    KILOGRAM = "KILOGRAM"
    MILLILITER = "MILLILITER"
    LITER = "LITER"
    UNIT = "UNIT"


class InventoryItem(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    name = fields.CharField(max_length=255, unique=True)
    # Never driven below zero by order closing
    current_stock = fields.DecimalField(max_digits=14, decimal_places=3, default=0)
    min_stock = fields.DecimalField(max_digits=14, decimal_places=3, default=0)  # Low stock threshold
    unit = fields.CharEnumField(StockUnit, default=StockUnit.UNIT)
    cost_per_unit = fields.DecimalField(max_digits=12, decimal_places=4, null=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "inventory_items"

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.min_stock
