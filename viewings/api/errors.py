"""Translate domain errors into JSON HTTP responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from viewings.errors import MeetingError, StoreError, ValidationError

logger = structlog.get_logger()


async def meeting_error_handler(request: Request, exc: MeetingError) -> JSONResponse:
    """Render a MeetingError with its mapped status code."""
    if isinstance(exc, StoreError):
        logger.error("store failure", path=request.url.path, error=exc.message)
        body = {"status": "error", "message": "Internal storage error", "field": None}
    else:
        body = {"status": "error", "message": exc.message, "field": exc.field}
    return JSONResponse(status_code=exc.status_code, content=body)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request schema failures in the same envelope as ValidationError."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [part for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    body = {
        "status": "error",
        "message": first.get("msg", "Invalid request"),
        "field": str(loc[-1]) if loc else None,
    }
    return JSONResponse(status_code=ValidationError.status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Install domain error handlers on an application."""
    app.add_exception_handler(MeetingError, meeting_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
