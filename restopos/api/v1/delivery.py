import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter

from restopos.models.delivery import DeliveryStatus
from restopos.schemas.delivery import DeliveryResponse, DeliveryStatusUpdate
from restopos.schemas.response import SuccessResponse
from restopos.services.delivery_service import list_deliveries, update_delivery_status

router = APIRouter()
log = logging.getLogger("restopos.api.delivery")


@router.get("/", response_model=SuccessResponse)
async def list_deliveries_endpoint(
    status: Optional[DeliveryStatus] = None,
    driver_id: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
):
    deliveries = await list_deliveries(status=status, driver_id=driver_id, date_from=date_from, date_to=date_to)
    return SuccessResponse(data=[DeliveryResponse.from_model(d).model_dump(mode="json") for d in deliveries])


@router.patch("/{delivery_id}", response_model=SuccessResponse)
async def update_delivery_endpoint(delivery_id: UUID, payload: DeliveryStatusUpdate):
    """Advances a delivery (e.g. 'ASSIGNED' with a driver_id, 'PICKED_UP', 'DELIVERED')."""
    delivery = await update_delivery_status(delivery_id, payload.status, payload.driver_id)
    return SuccessResponse(data=DeliveryResponse.from_model(delivery).model_dump(mode="json"))
