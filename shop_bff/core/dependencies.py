"""
FastAPI dependency functions.
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from shop_bff.core.config import settings
from shop_bff.db import session as db_session
from shop_bff.db.session import get_db
from shop_bff.integrations.shopify.client import ShopifyClient
from shop_bff.integrations.shopify.models import ShopifyConfig, ShopifyError
from shop_bff.integrations.shopify.webhooks import WebhookProcessor
from shop_bff.repositories import CustomerRepository, DraftOrderRepository
from shop_bff.services.query import QueryService
from shop_bff.utils.exceptions import CacheUnavailableError, UpstreamServiceError


async def get_shopify_config() -> ShopifyConfig:
    """
    Dependency to get Shopify configuration.

    Returns the current Shopify configuration from settings.
    """
    return ShopifyConfig(
        shop_domain=settings.SHOPIFY_SHOP_DOMAIN,
        access_token=settings.SHOPIFY_ACCESS_TOKEN,
        api_version=settings.SHOPIFY_API_VERSION,
        webhook_secret=settings.SHOPIFY_WEBHOOK_SECRET,
        timeout=settings.SHOPIFY_TIMEOUT,
    )


async def get_shopify_client(
    config: ShopifyConfig = Depends(get_shopify_config),
) -> AsyncGenerator[ShopifyClient, None]:
    """
    Dependency to get a Shopify client.

    The client is closed when the request finishes. Missing Shopify
    configuration is reported as an upstream error.
    """
    try:
        client = ShopifyClient(config)
    except ShopifyError as e:
        logger.error(f"Shopify client unavailable: {e}")
        raise UpstreamServiceError(f"Shopify is not configured: {e}")
    async with client:
        yield client


async def get_optional_shopify_client(
    config: ShopifyConfig = Depends(get_shopify_config),
) -> AsyncGenerator[Optional[ShopifyClient], None]:
    """Shopify client, or None when Shopify is not configured."""
    if not config.shop_domain or not config.access_token:
        yield None
        return
    async with ShopifyClient(config) as client:
        yield client


def get_customer_repository(
    db: Optional[AsyncSession] = Depends(get_db),
) -> Optional[CustomerRepository]:
    """Customer repository, or None when the cache is disabled."""
    return CustomerRepository(db) if db is not None else None


def get_draft_order_repository(
    db: Optional[AsyncSession] = Depends(get_db),
) -> Optional[DraftOrderRepository]:
    """Draft order repository, or None when the cache is disabled."""
    return DraftOrderRepository(db) if db is not None else None


def require_customer_repository(
    repository: Optional[CustomerRepository] = Depends(get_customer_repository),
) -> CustomerRepository:
    if repository is None:
        raise CacheUnavailableError()
    return repository


def require_draft_order_repository(
    repository: Optional[DraftOrderRepository] = Depends(get_draft_order_repository),
) -> DraftOrderRepository:
    if repository is None:
        raise CacheUnavailableError()
    return repository


def get_query_service(
    client: Optional[ShopifyClient] = Depends(get_optional_shopify_client),
    customers: Optional[CustomerRepository] = Depends(get_customer_repository),
    draft_orders: Optional[DraftOrderRepository] = Depends(get_draft_order_repository),
) -> QueryService:
    """Dependency to get the cache-first query service."""
    return QueryService(
        client,
        customers=customers,
        draft_orders=draft_orders,
        session_factory=db_session.SessionLocal,
        page_size=settings.sync_page_size,
    )


def get_webhook_processor(
    config: ShopifyConfig = Depends(get_shopify_config),
    customers: Optional[CustomerRepository] = Depends(get_customer_repository),
    draft_orders: Optional[DraftOrderRepository] = Depends(get_draft_order_repository),
) -> WebhookProcessor:
    """Dependency to get the webhook processor bound to this request's session."""
    return WebhookProcessor(config.webhook_secret, customers=customers, draft_orders=draft_orders)
