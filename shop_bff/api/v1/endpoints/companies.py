"""
Company endpoints.
"""

from typing import Dict, Optional

from fastapi import APIRouter, Depends

from shop_bff.core.dependencies import get_query_service
from shop_bff.services.query import QueryService

router = APIRouter(prefix="/companies", tags=["companies"])


@router.get("/price-levels", response_model=Dict[str, Optional[str]])
async def get_company_price_levels(service: QueryService = Depends(get_query_service)):
    """Map of company name to price level, from the local cache."""
    return await service.company_price_levels()
