"""
Health check endpoint.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shop_bff.core.config import settings
from shop_bff.core.dependencies import get_shopify_config
from shop_bff.db.session import get_db
from shop_bff.integrations.shopify.client import ShopifyClient
from shop_bff.integrations.shopify.models import ShopifyConfig, ShopifyError

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    upstream: bool = Query(False, description="Also call the Shopify Admin API"),
    db: Optional[AsyncSession] = Depends(get_db),
    config: ShopifyConfig = Depends(get_shopify_config),
) -> Dict[str, Any]:
    """
    Report service health.

    The cache check runs a trivial query; the Shopify check is opt-in since
    it spends API budget.
    """
    checks: Dict[str, str] = {}

    if db is None:
        checks["cache"] = "disabled"
    else:
        try:
            await db.execute(text("SELECT 1"))
            checks["cache"] = "healthy"
        except SQLAlchemyError as e:
            logger.error(f"Cache health check failed: {e}")
            checks["cache"] = "unhealthy"

    if upstream:
        try:
            async with ShopifyClient(config) as client:
                checks["shopify"] = "healthy" if await client.health_check() else "unhealthy"
        except ShopifyError as e:
            logger.error(f"Shopify client unavailable: {e}")
            checks["shopify"] = "unhealthy"

    status = "unhealthy" if "unhealthy" in checks.values() else "healthy"
    return {"status": status, "version": settings.VERSION, "checks": checks}
