from typing import Optional
from fastapi import APIRouter

from restopos.schemas.customer import CustomerResponse
from restopos.schemas.response import SuccessResponse
from restopos.services.customer_service import list_customers

router = APIRouter()


@router.get("/", response_model=SuccessResponse)
async def list_customers_endpoint(search: Optional[str] = None):
    """Delivery customers, most frequent first (max 50)."""
    customers = await list_customers(search)
    return SuccessResponse(data=[CustomerResponse.from_model(c).model_dump(mode="json") for c in customers])
