from uuid import UUID
from fastapi import APIRouter

from restopos.schemas.response import SuccessResponse
from restopos.schemas.table import TableResponse, TableStatusUpdate
from restopos.services.table_service import list_tables, set_table_status

router = APIRouter()


def _table_payload(table, active_orders: int = 0) -> dict:
    return TableResponse(
        id=table.id,
        number=table.number,
        capacity=table.capacity,
        status=table.status,
        position_x=table.position_x,
        position_y=table.position_y,
        active_orders=active_orders,
    ).model_dump(mode="json")


@router.get("/", response_model=SuccessResponse)
async def list_tables_endpoint():
    return SuccessResponse(data=[_table_payload(t, n) for t, n in await list_tables()])


@router.patch("/{table_id}/status", response_model=SuccessResponse)
async def update_table_status_endpoint(table_id: UUID, payload: TableStatusUpdate):
    """Manual table status change, e.g. marking a cleaned table FREE."""
    table = await set_table_status(table_id, payload.status)
    return SuccessResponse(data=_table_payload(table))
