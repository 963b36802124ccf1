import uuid
from typing import Optional
from pydantic import BaseModel

from restopos.models.table import TableStatus


class TableStatusUpdate(BaseModel):
    status: TableStatus


class TableResponse(BaseModel):
    id: uuid.UUID
    number: int
    capacity: int
    status: TableStatus
    position_x: Optional[float] = None
    position_y: Optional[float] = None
    active_orders: int = 0
