"""Translate domain failures into JSON error responses.

Every error body carries an ``error`` message. StorefrontErrors add their
``code`` and details; validation failures list offending fields under
``details``.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

from storefront.errors import StorefrontError

logger = structlog.get_logger(__name__)


async def _storefront_error(request: Request, exc: StorefrontError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.info
    log("Request rejected", path=request.url.path, code=exc.code, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "code": "validation_error", "details": exc.messages},
    )


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details: dict[str, list[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body") or "body"
        details.setdefault(field, []).append(error.get("msg", "invalid"))
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "code": "validation_error", "details": details},
    )


async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "Not found", "code": "not_found"})


async def _invalid_operation(request: Request, exc: InvalidOperationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc), "code": "invalid_operation"})


async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path, method=request.method)
    return JSONResponse(status_code=500, content={"error": "Internal server error", "code": "internal_error"})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, _storefront_error)
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(InvalidOperationError, _invalid_operation)
    app.add_exception_handler(Exception, _unhandled)
