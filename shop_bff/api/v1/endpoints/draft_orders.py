"""
Draft order endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from shop_bff.core.dependencies import get_query_service
from shop_bff.integrations.shopify.parsers import to_gid
from shop_bff.schemas.commerce import DraftOrderOut
from shop_bff.services.query import QueryService

router = APIRouter(prefix="/draft-orders", tags=["draft-orders"])


class DraftOrderCompletionResponse(BaseModel):
    """Draft order completion status."""
    id: str
    completed: bool


class AddTagsRequest(BaseModel):
    """Tags to add to a draft order."""
    tags: List[str] = Field(..., min_length=1, description="Tags to add")


@router.get("", response_model=List[DraftOrderOut])
async def list_draft_orders(
    include_tags: Optional[List[str]] = Query(None, description="Keep draft orders carrying all of these tags"),
    exclude_tags: Optional[List[str]] = Query(None, description="Drop draft orders with any of these tags"),
    service: QueryService = Depends(get_query_service),
):
    """
    List draft orders.

    Without tag filters this is the plain cache-first listing.
    """
    if include_tags or exclude_tags:
        return await service.filter_draft_orders(include_tags=include_tags, exclude_tags=exclude_tags)
    return await service.list_draft_orders()


@router.get("/{draft_order_id}", response_model=DraftOrderOut)
async def get_draft_order(draft_order_id: str, service: QueryService = Depends(get_query_service)):
    """Get a draft order by id."""
    return await service.get_draft_order(to_gid("DraftOrder", draft_order_id))


@router.get("/{draft_order_id}/completed", response_model=DraftOrderCompletionResponse)
async def get_draft_order_completion(draft_order_id: str, service: QueryService = Depends(get_query_service)):
    """Check with Shopify whether an order was created from the draft order."""
    gid = to_gid("DraftOrder", draft_order_id)
    completed = await service.is_draft_order_completed(gid)
    return DraftOrderCompletionResponse(id=gid, completed=completed)


@router.post("/{draft_order_id}/tags", response_model=DraftOrderOut)
async def add_draft_order_tags(
    draft_order_id: str,
    request: AddTagsRequest,
    service: QueryService = Depends(get_query_service),
):
    """Add tags to a draft order on Shopify and refresh the cached copy."""
    return await service.add_draft_order_tags(to_gid("DraftOrder", draft_order_id), request.tags)
