"""Rendering of ``Err`` results as HTTP responses."""

from fastapi.responses import JSONResponse
from protean.exceptions import ValidationError

from mustore.checkout.errors import (
    EmptyCart,
    InsufficientStock,
    InvalidTransition,
    NotFound,
    ProductUnavailable,
    StoreFailure,
)
from mustore.checkout.result import Err

_STATUS_CODES = {
    EmptyCart: 400,
    InsufficientStock: 400,
    ProductUnavailable: 400,
    InvalidTransition: 409,
    NotFound: 404,
    StoreFailure: 500,
}


def error_response(result: Err) -> JSONResponse:
    error = result.error
    if isinstance(error, ValidationError):
        return JSONResponse(status_code=400, content={"error": error.messages})
    return JSONResponse(status_code=_STATUS_CODES.get(type(error), 500), content={"error": error.to_dict()})
