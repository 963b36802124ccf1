import uuid
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from restopos.models.customer import Customer


class CustomerResponse(BaseModel):
    id: uuid.UUID
    phone: str
    name: str
    default_address: Optional[str] = None
    address_history: List[str]
    order_count: int
    last_order_date: Optional[datetime] = None

    @classmethod
    def from_model(cls, customer: Customer) -> "CustomerResponse":
        return cls(
            id=customer.id,
            phone=customer.phone,
            name=customer.name,
            default_address=customer.default_address,
            address_history=list(customer.address_history or []),
            order_count=customer.order_count,
            last_order_date=customer.last_order_date,
        )
