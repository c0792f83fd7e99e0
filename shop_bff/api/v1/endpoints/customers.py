"""
Customer read endpoints.

Path ids accept either a numeric Shopify id or a full gid.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from shop_bff.core.dependencies import get_query_service
from shop_bff.integrations.shopify.parsers import to_gid
from shop_bff.schemas.commerce import CustomerCompanyOut, CustomerOut, DraftOrderOut
from shop_bff.services.query import QueryService

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("", response_model=List[CustomerOut])
async def list_customers(service: QueryService = Depends(get_query_service)):
    """
    List customers.

    Served from the local cache when it holds any customers, otherwise
    fetched from Shopify.
    """
    return await service.list_customers()


@router.get("/companies", response_model=List[CustomerCompanyOut])
async def list_customers_with_companies(service: QueryService = Depends(get_query_service)):
    """List customers with their company and price level."""
    return await service.customers_with_companies()


@router.get("/{customer_id}", response_model=CustomerOut)
async def get_customer(customer_id: str, service: QueryService = Depends(get_query_service)):
    """Get a customer by id."""
    return await service.get_customer(to_gid("Customer", customer_id))


@router.get("/{customer_id}/draft-orders", response_model=List[DraftOrderOut])
async def list_customer_draft_orders(
    customer_id: str,
    include_tags: Optional[List[str]] = Query(None, description="Keep draft orders with any of these tags"),
    exclude_tags: Optional[List[str]] = Query(None, description="Drop draft orders with any of these tags"),
    service: QueryService = Depends(get_query_service),
):
    """List a customer's draft orders, optionally filtered by tag."""
    return await service.draft_orders_for_customer(
        to_gid("Customer", customer_id), include_tags=include_tags, exclude_tags=exclude_tags
    )
