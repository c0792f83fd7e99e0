"""
Shop BFF - Main FastAPI application entry point.
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from shop_bff.api.v1.router import api_router
from shop_bff.core.config import settings
from shop_bff.core.logging import setup_logging
from shop_bff.db import session as db_session
from shop_bff.utils.error_handlers import (
    shop_bff_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    database_exception_handler,
    general_exception_handler,
)
from shop_bff.utils.exceptions import ShopBFFException

setup_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(f"Starting {settings.PROJECT_NAME} {settings.VERSION}")
    if not settings.CACHE_ENABLED:
        logger.warning("Local cache disabled; every read goes to Shopify")
    yield
    if db_session.engine is not None:
        await db_session.engine.dispose()
    logger.info(f"Shutting down {settings.PROJECT_NAME}")


# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Cache-first backend for Shopify customers and draft orders",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
    debug=settings.DEBUG,
)

# Add exception handlers
app.add_exception_handler(ShopBFFException, shop_bff_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(SQLAlchemyError, database_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_hosts_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.middleware("http")
async def add_request_id_header(request: Request, call_next):
    """Add request ID header for tracing."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    with logger.contextualize(request_id=request_id):
        response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "shop_bff.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
