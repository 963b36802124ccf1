from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from restopos.consumers.kitchen_feed import fetch_active_orders, stream_kitchen_events
from restopos.schemas.response import SuccessResponse

router = APIRouter()


@router.get("/orders", response_model=SuccessResponse)
async def kitchen_orders_endpoint():
    """One-off snapshot of the orders on the kitchen display."""
    return SuccessResponse(data={"orders": await fetch_active_orders()})


@router.get("/events")
async def kitchen_events_endpoint(request: Request):
    """Server-sent events stream of kitchen snapshots, pushed on change."""
    return StreamingResponse(
        stream_kitchen_events(request.is_disconnected),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )
