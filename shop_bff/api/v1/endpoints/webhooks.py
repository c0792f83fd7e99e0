"""
Shopify webhook endpoints.

Every request is acknowledged with 200 {"ok": true}, whether or not it was
verified and applied.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request

from shop_bff.core.dependencies import get_webhook_processor
from shop_bff.integrations.shopify.webhooks import WebhookProcessor, WebhookTopic

router = APIRouter(prefix="/webhooks/shopify", tags=["webhooks"])

ACK = {"ok": True}


@router.post("/customers/update")
async def customers_update(
    request: Request,
    x_shopify_hmac_sha256: Optional[str] = Header(None),
    processor: WebhookProcessor = Depends(get_webhook_processor),
):
    """Receive customers/update."""
    await processor.handle_customer_update(await request.body(), x_shopify_hmac_sha256)
    return ACK


@router.post("/draft_orders/create")
async def draft_orders_create(
    request: Request,
    x_shopify_hmac_sha256: Optional[str] = Header(None),
    processor: WebhookProcessor = Depends(get_webhook_processor),
):
    """Receive draft_orders/create."""
    await processor.handle_draft_order_upsert(
        await request.body(), x_shopify_hmac_sha256, topic=WebhookTopic.DRAFT_ORDERS_CREATE
    )
    return ACK


@router.post("/draft_orders/update")
async def draft_orders_update(
    request: Request,
    x_shopify_hmac_sha256: Optional[str] = Header(None),
    processor: WebhookProcessor = Depends(get_webhook_processor),
):
    """Receive draft_orders/update."""
    await processor.handle_draft_order_upsert(
        await request.body(), x_shopify_hmac_sha256, topic=WebhookTopic.DRAFT_ORDERS_UPDATE
    )
    return ACK


@router.post("/draft_orders/delete")
async def draft_orders_delete(
    request: Request,
    x_shopify_hmac_sha256: Optional[str] = Header(None),
    processor: WebhookProcessor = Depends(get_webhook_processor),
):
    """Receive draft_orders/delete."""
    await processor.handle_draft_order_delete(await request.body(), x_shopify_hmac_sha256)
    return ACK
