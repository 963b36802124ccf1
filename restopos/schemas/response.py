from pydantic import BaseModel, Field, PlainSerializer
from typing import Annotated, Any, Optional
from decimal import Decimal
import uuid


def _rid():
    return uuid.uuid4().hex


# Decimals leave the API as plain strings ("10.00" style, never exponent notation)
DecimalStr = Annotated[Decimal, PlainSerializer(lambda v: format(v, "f"), return_type=str, when_used="json")]


class SuccessResponse(BaseModel):
    """Simple success response wrapper with just data, success, and request_id"""
    success: Optional[bool] = Field(default=True)
    request_id: str = Field(default_factory=_rid)
    data: Optional[Any] = None
