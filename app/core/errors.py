# app/core/errors.py
import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("app.requests")


def _field_path(loc: tuple) -> str:
    """
    ("body", "products", 0, "quantity") -> "products.0.quantity"

    The leading location kind (body/query/path) is dropped.
    """
    parts = [str(p) for p in loc]
    if parts and parts[0] in {"body", "query", "path", "header", "cookie"}:
        parts = parts[1:]
    return ".".join(parts)


def format_validation_errors(exc: RequestValidationError) -> list[dict]:
    """
    Flatten pydantic errors into [{field, message, value}, ...].
    """
    errors = []
    for err in exc.errors():
        errors.append(
            {
                "field": _field_path(tuple(err.get("loc", ()))),
                "message": err.get("msg", "Invalid value"),
                "value": err.get("input"),
            }
        )
    return errors


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = format_validation_errors(exc)
    logger.info(
        "Validation failed: %s %s (%d errors)",
        request.method,
        request.url.path,
        len(errors),
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder(
            {"success": False, "message": "Validation failed", "errors": errors}
        ),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


def register_request_logging(app: FastAPI) -> None:
    """
    Access log: METHOD path status duration.
    4xx are logged at WARNING, 5xx at ERROR.
    """

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        logger.log(
            level,
            "%s %s %d %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response
