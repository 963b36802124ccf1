import logging
from fastapi import APIRouter, status

from restopos.schemas.inventory import InventoryItemRequest, InventoryResponse
from restopos.schemas.response import SuccessResponse
from restopos.services.inventory_service import create_inventory_item, list_inventory, list_low_stock

log = logging.getLogger("restopos.api.inventory")

router = APIRouter()


@router.get("/", response_model=SuccessResponse)
async def list_inventory_endpoint():
    """All ingredients with their current stock."""
    items = await list_inventory()
    return SuccessResponse(data=[InventoryResponse.from_model(i).model_dump(mode="json") for i in items])


@router.get("/low-stock", response_model=SuccessResponse)
async def low_stock_endpoint():
    """Ingredients at or below their minimum stock."""
    items = await list_low_stock()
    return SuccessResponse(data=[InventoryResponse.from_model(i).model_dump(mode="json") for i in items])


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def add_inventory_item(item_data: InventoryItemRequest):
    """Adds a new ingredient with its initial stock."""
    item = await create_inventory_item(item_data)
    return SuccessResponse(data=InventoryResponse.from_model(item).model_dump(mode="json"))
