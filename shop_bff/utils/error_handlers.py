"""
Global exception handlers for FastAPI application.
"""

from typing import Union
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError

from shop_bff.utils.exceptions import ShopBFFException

STATUS_BY_ERROR_CODE = {
    "VALIDATION_ERROR": 422,
    "NOT_FOUND": 404,
    "EXTERNAL_SERVICE_ERROR": 502,
    "CACHE_UNAVAILABLE": 503,
}


async def shop_bff_exception_handler(
    request: Request, exc: ShopBFFException
) -> JSONResponse:
    """Handle application exceptions."""
    logger.error(
        f"{exc.error_code}: {exc.message} ({request.method} {request.url.path})"
    )

    return JSONResponse(
        status_code=STATUS_BY_ERROR_CODE.get(exc.error_code, 500),
        content={
            "message": exc.message,
            "error_code": exc.error_code,
            "details": exc.details,
            "type": "shop_bff_error",
        }
    )


async def http_exception_handler(
    request: Request, exc: Union[HTTPException, StarletteHTTPException]
) -> JSONResponse:
    """Handle HTTP exceptions."""
    logger.warning(f"HTTP {exc.status_code}: {exc.detail} ({request.method} {request.url.path})")

    detail = exc.detail
    if isinstance(detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "message": detail.get("message", str(exc.detail)),
                "error_code": detail.get("error_code"),
                "details": detail.get("details", {}),
                "type": "http_error",
            }
        )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "message": str(exc.detail),
            "error_code": f"HTTP_{exc.status_code}",
            "details": {},
            "type": "http_error",
        }
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation exceptions."""
    logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")

    formatted_errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        formatted_errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })

    return JSONResponse(
        status_code=422,
        content={
            "message": "Validation failed",
            "error_code": "VALIDATION_ERROR",
            "details": {"errors": formatted_errors},
            "type": "validation_error",
        }
    )


async def database_exception_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """Handle database exceptions."""
    logger.error(f"Database error ({type(exc).__name__}) on {request.method} {request.url.path}: {exc}")

    message = "Database operation failed"
    if isinstance(exc, IntegrityError):
        message = "Database integrity constraint violated"

    return JSONResponse(
        status_code=500,
        content={
            "message": message,
            "error_code": "DATABASE_ERROR",
            "details": {"exception_type": type(exc).__name__},
            "type": "database_error",
        }
    )


async def general_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Handle general exceptions."""
    logger.opt(exception=exc).error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}"
    )

    return JSONResponse(
        status_code=500,
        content={
            "message": "Internal server error",
            "error_code": "INTERNAL_SERVER_ERROR",
            "details": {
                "exception_type": type(exc).__name__,
                "debug_message": str(exc) if request.app.debug else None,
            },
            "type": "internal_error",
        }
    )
