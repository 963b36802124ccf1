import logging
from contextlib import contextmanager
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from tortoise.exceptions import DBConnectionError, OperationalError

log = logging.getLogger("restopos.errors")


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    INSUFFICIENT_STOCK = "insufficient_stock"
    ALREADY_CLOSED = "already_closed"
    VALIDATION_ERROR = "validation_error"
    PERSISTENCE_ERROR = "persistence_error"


class EngineError(Exception):
    """Base class for every failure the order engine reports to its callers."""
    kind: ErrorKind
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(EngineError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} {entity_id} not found", {"entity": entity, "id": str(entity_id)})
        self.entity = entity
        self.entity_id = entity_id


class InsufficientStockError(EngineError):
    kind = ErrorKind.INSUFFICIENT_STOCK
    status_code = 409

    def __init__(self, ingredient: str, required: Decimal, available: Decimal, unit: Optional[str] = None):
        unit_txt = f" {unit}" if unit else ""
        super().__init__(
            f"Insufficient stock: {ingredient} (required: {required}{unit_txt}, available: {available}{unit_txt})",
            {
                "ingredient": ingredient,
                "required": str(required),
                "available": str(available),
                "unit": unit,
            },
        )
        self.ingredient = ingredient
        self.required = required
        self.available = available


class AlreadyClosedError(EngineError):
    kind = ErrorKind.ALREADY_CLOSED
    status_code = 409

    def __init__(self, order_id: Any):
        super().__init__(f"Order {order_id} is already closed", {"order_id": str(order_id)})


class OrderValidationError(EngineError):
    kind = ErrorKind.VALIDATION_ERROR
    status_code = 400


class PersistenceError(EngineError):
    """Transaction or connection failure. The only retryable kind."""
    kind = ErrorKind.PERSISTENCE_ERROR
    status_code = 503

    def __init__(self, message: str):
        super().__init__(message, {"retryable": True})


@contextmanager
def translate_db_errors(action: str):
    """
    Re-raises ORM level failures raised inside the block as PersistenceError.
    Business errors pass through untouched.
    """
    try:
        yield
    except EngineError:
        raise
    except (OperationalError, DBConnectionError) as e:
        log.exception(f"Database failure while {action}")
        raise PersistenceError(f"Database failure while {action}") from e
