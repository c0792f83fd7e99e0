"""
Main API router for version 1.
"""

from fastapi import APIRouter

from shop_bff.api.v1.endpoints import companies, customers, draft_orders, health, sync, webhooks

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(customers.router)
api_router.include_router(draft_orders.router)
api_router.include_router(companies.router)
api_router.include_router(sync.router)
api_router.include_router(webhooks.router)
