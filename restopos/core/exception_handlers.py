import uuid
import logging
from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder

from restopos.core.errors import EngineError, ErrorKind

log = logging.getLogger("restopos.api")


# Generate a clean request id for every response
def _rid():
    """Generates a unique request ID for tracing."""
    return uuid.uuid4().hex


def error_body(code: str, message, details=None):
    body = {
        "success": False,
        "error": {
            "code": code,
            "message": message,
        },
        "request_id": _rid(),
    }
    if details:
        body["error"]["details"] = details
    return body


# ----------- Exception Handlers (called by FastAPI) -----------

def engine_exception_handler(request: Request, exc: EngineError):
    """Turns business failures (not found, stock, closed, validation) into the failure envelope."""
    if exc.kind == ErrorKind.PERSISTENCE_ERROR:
        log.error(f"Persistence failure on path {request.url.path}: {exc.message}")
    else:
        log.info(f"{exc.kind.value} on path {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.kind.value, exc.message, exc.details),
    )


def http_exception_handler(request: Request, exc: HTTPException):
    """Handles exceptions raised by HTTPException (e.g., 404, 400)."""
    return JSONResponse(status_code=exc.status_code, content=error_body("http_error", exc.detail))


def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handles Pydantic validation errors (422 Unprocessable Entity)."""
    return JSONResponse(
        status_code=422,
        content=error_body(
            ErrorKind.VALIDATION_ERROR.value,
            "Invalid input data",
            jsonable_encoder(exc.errors()),
        ),
    )


def generic_exception_handler(request: Request, exc: Exception):
    """Handles all unhandled exceptions (500 Internal Server Error)."""
    log.error(f"Unhandled exception on path: {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content=error_body("server_error", "Internal Server Error"))


# ----------- Registration Function -----------

def setup_exception_handlers(app: FastAPI):
    """Registers all custom exception handlers with the FastAPI application."""
    app.add_exception_handler(EngineError, engine_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    return app
