import uuid
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from restopos.models.inventory import InventoryItem, StockUnit
from restopos.schemas.response import DecimalStr


class InventoryResponse(BaseModel):
    """Schema for fetching inventory stock."""
    id: uuid.UUID
    name: str
    current_stock: DecimalStr
    min_stock: DecimalStr
    unit: StockUnit
    cost_per_unit: Optional[DecimalStr] = None
    is_low_stock: bool
    updated_at: str

    @classmethod
    def from_model(cls, item: InventoryItem) -> "InventoryResponse":
        return cls(
            id=item.id,
            name=item.name,
            current_stock=item.current_stock,
            min_stock=item.min_stock,
            unit=item.unit,
            cost_per_unit=item.cost_per_unit,
            is_low_stock=item.is_low_stock,
            updated_at=str(item.updated_at),
        )


class InventoryItemRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Name of the ingredient (e.g., Ground coffee).")
    current_stock: Decimal = Field(..., ge=0, description="Initial stock quantity.")
    min_stock: Decimal = Field(Decimal("0"), ge=0, description="Minimum stock level before an alert is triggered.")
    unit: StockUnit = Field(StockUnit.UNIT, description="Unit of measure for stock and recipes.")
    cost_per_unit: Optional[Decimal] = Field(None, ge=0)
