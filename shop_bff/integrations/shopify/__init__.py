"""
Shopify integration package.
"""

from .client import ShopifyClient
from .models import (
    AddressRecord,
    CustomerRecord,
    DraftOrderRecord,
    LineItemSnapshot,
    ShippingLineSnapshot,
    ShopifyError,
    ShopifyConfig,
)
from .graphql_queries import GraphQLQueryBuilder
from .webhooks import WebhookTopic, WebhookProcessor, verify_webhook

__all__ = [
    "ShopifyClient",
    "AddressRecord",
    "CustomerRecord",
    "DraftOrderRecord",
    "LineItemSnapshot",
    "ShippingLineSnapshot",
    "ShopifyError",
    "ShopifyConfig",
    "GraphQLQueryBuilder",
    "WebhookTopic",
    "WebhookProcessor",
    "verify_webhook",
]
