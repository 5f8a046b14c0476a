from __future__ import annotations

from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from orderbot.api.middleware.request_id import get_request_id
from orderbot.application.errors import (
    EmptyOrderError,
    InsufficientStockError,
    InvalidInputError,
    InventoryMissingError,
    MissingAddressError,
    MissingContactError,
    MissingPaymentError,
    MissingShippingError,
    NotFoundError,
    OrderConflictError,
    OrderingError,
    OrderNotEditableError,
)


def _error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            },
            "requestId": get_request_id(),
        },
    )


def _exception_handler(status_code: int):
    async def handler(_: Request, exc: Exception) -> JSONResponse:
        ordering_exc = cast(OrderingError, exc)
        return _error_response(
            status_code=status_code,
            code=ordering_exc.code,
            message=str(ordering_exc),
            details=ordering_exc.details,
        )

    return handler


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    message = str(http_exc.detail) if http_exc.detail else "request failed"
    code = "HTTP_ERROR"
    if http_exc.status_code == 404:
        code = "NOT_FOUND"
    elif http_exc.status_code == 400:
        code = "BAD_REQUEST"
    elif http_exc.status_code == 409:
        code = "CONFLICT"
    return _error_response(
        status_code=http_exc.status_code,
        code=code,
        message=message,
    )


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    return _error_response(
        status_code=400,
        code="INVALID_REQUEST",
        message="request validation failed",
        # ctx may hold exception instances that are not JSON serializable
        details={
            "errors": [
                {key: value for key, value in error.items() if key != "ctx"}
                for error in validation_exc.errors()
            ]
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    mappings: list[tuple[type[OrderingError], int]] = [
        (InvalidInputError, 400),
        (NotFoundError, 404),
        (InsufficientStockError, 409),
        (InventoryMissingError, 409),
        (EmptyOrderError, 400),
        (MissingContactError, 400),
        (MissingShippingError, 400),
        (MissingAddressError, 400),
        (MissingPaymentError, 400),
        (OrderNotEditableError, 409),
        (OrderConflictError, 409),
        (OrderingError, 400),
    ]

    for exc_cls, status_code in mappings:
        app.add_exception_handler(exc_cls, _exception_handler(status_code))

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
