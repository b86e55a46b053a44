"""Exception handlers mapping storefront error kinds to HTTP responses.

Client errors (4xx) carry their code and message. Server-side kinds and
unexpected exceptions are logged in full and answered with a generic message
and the request's correlation id, never the internal detail.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.errors import BadRequest, NotFound, StorefrontError, validation_message

logger = structlog.get_logger(__name__)

_GENERIC_MESSAGES = {
    502: "The payment gateway could not complete the request",
}


def _correlation_id() -> str | None:
    return structlog.contextvars.get_contextvars().get("correlation_id")


def error_response(exc: StorefrontError) -> JSONResponse:
    if exc.is_client_error:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": {"code": exc.code, "message": exc.message}},
        )

    logger.error(
        "Request failed",
        code=exc.code,
        operation=exc.operation,
        error=exc.message,
        cause=repr(exc.__cause__) if exc.__cause__ else None,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.code,
                "message": _GENERIC_MESSAGES.get(exc.status_code, "An internal error occurred"),
                "correlation_id": _correlation_id(),
            }
        },
    )


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    return error_response(exc)


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return error_response(BadRequest(validation_message(exc)))


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return error_response(NotFound(str(exc)))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An internal error occurred",
                "correlation_id": _correlation_id(),
            }
        },
    )


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
