"""
Backfill endpoints.

A run pages through the whole entity family before responding, so these
are meant for operators and schedulers rather than interactive clients.
"""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from shop_bff.core.config import settings
from shop_bff.core.dependencies import (
    get_shopify_client, require_customer_repository, require_draft_order_repository
)
from shop_bff.integrations.shopify.client import ShopifyClient
from shop_bff.repositories import CustomerRepository, DraftOrderRepository
from shop_bff.services.sync import SyncResult, backfill_customers, backfill_draft_orders

router = APIRouter(prefix="/sync", tags=["sync"])


class SyncResponse(BaseModel):
    """Backfill run summary."""
    entity: str
    total: int
    failed: int
    pages: int
    failed_ids: List[str] = []
    duration_seconds: float

    @classmethod
    def from_result(cls, result: SyncResult) -> "SyncResponse":
        return cls(
            entity=result.entity,
            total=result.total,
            failed=result.failed,
            pages=result.pages,
            failed_ids=result.failed_ids,
            duration_seconds=round(result.duration_seconds, 3),
        )


@router.post("/customers", response_model=SyncResponse)
async def sync_customers(
    client: ShopifyClient = Depends(get_shopify_client),
    repository: CustomerRepository = Depends(require_customer_repository),
):
    """Backfill every customer from Shopify into the cache."""
    result = await backfill_customers(client, repository, page_size=settings.sync_page_size)
    return SyncResponse.from_result(result)


@router.post("/draft-orders", response_model=SyncResponse)
async def sync_draft_orders(
    client: ShopifyClient = Depends(get_shopify_client),
    repository: DraftOrderRepository = Depends(require_draft_order_repository),
):
    """Backfill every draft order from Shopify into the cache."""
    result = await backfill_draft_orders(client, repository, page_size=settings.sync_page_size)
    return SyncResponse.from_result(result)
