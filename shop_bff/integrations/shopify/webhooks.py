"""
Shopify webhook handlers for keeping the local cache in step with the store.
"""

import base64
import hashlib
import hmac
import json
from enum import Enum
from typing import Any, Dict, Optional, TYPE_CHECKING

from loguru import logger

from .parsers import (
    draft_order_gid_from_payload, parse_customer_payload, parse_draft_order_payload
)

if TYPE_CHECKING:
    from shop_bff.repositories import CustomerRepository, DraftOrderRepository

HMAC_HEADER = "X-Shopify-Hmac-Sha256"


class WebhookTopic(Enum):
    """Shopify webhook topics mirrored into the cache."""
    CUSTOMERS_UPDATE = "customers/update"
    DRAFT_ORDERS_CREATE = "draft_orders/create"
    DRAFT_ORDERS_UPDATE = "draft_orders/update"
    DRAFT_ORDERS_DELETE = "draft_orders/delete"


def compute_hmac(secret: str, body: bytes) -> str:
    """Base64 HMAC-SHA256 digest of the raw body, the form Shopify sends."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def verify_webhook(secret: Optional[str], body: bytes, received_hmac: Optional[str]) -> bool:
    """Verify a webhook body against the header-supplied digest."""
    if not secret:
        logger.warning("No webhook secret configured")
        return False
    if not received_hmac:
        logger.warning("Missing Shopify HMAC header")
        return False
    # Starlette decodes header values as latin-1
    expected = compute_hmac(secret, body).encode("utf-8")
    return hmac.compare_digest(expected, received_hmac.encode("latin-1", errors="replace"))


class WebhookProcessor:
    """
    Applies verified webhook events to the cache.

    Every handler returns whether the cache changed. Unverified or malformed
    requests are dropped silently: no exception leaves a handler, so the
    endpoint can always acknowledge with 200. Event ordering is not checked;
    a late update can roll a row back until the next backfill.
    """

    def __init__(
        self,
        secret: Optional[str],
        customers: Optional["CustomerRepository"] = None,
        draft_orders: Optional["DraftOrderRepository"] = None,
    ):
        self.secret = secret
        self.customers = customers
        self.draft_orders = draft_orders

    def _load(self, topic: WebhookTopic, body: bytes, received_hmac: Optional[str]) -> Optional[Dict[str, Any]]:
        if not verify_webhook(self.secret, body, received_hmac):
            logger.warning(f"Rejected {topic.value} webhook: signature mismatch")
            return None
        try:
            payload = json.loads(body)
        except ValueError as e:
            logger.warning(f"Rejected {topic.value} webhook: invalid JSON ({e})")
            return None
        if not isinstance(payload, dict):
            logger.warning(f"Rejected {topic.value} webhook: payload is not an object")
            return None
        return payload

    async def handle_customer_update(self, body: bytes, received_hmac: Optional[str]) -> bool:
        """Handle customers/update."""
        topic = WebhookTopic.CUSTOMERS_UPDATE
        payload = self._load(topic, body, received_hmac)
        if payload is None or self.customers is None:
            return False

        try:
            record = parse_customer_payload(payload)
            if record is None:
                logger.info(f"Ignoring {topic.value} webhook without a customer id")
                return False
            await self.customers.upsert_from_upstream(record)
        except Exception as e:
            logger.error(f"Error applying {topic.value} webhook: {e}")
            return False

        logger.info(f"Applied {topic.value} webhook for {record.id}")
        return True

    async def handle_draft_order_upsert(
        self,
        body: bytes,
        received_hmac: Optional[str],
        topic: WebhookTopic = WebhookTopic.DRAFT_ORDERS_UPDATE,
    ) -> bool:
        """Handle draft_orders/create and draft_orders/update; both upsert the latest snapshot."""
        payload = self._load(topic, body, received_hmac)
        if payload is None or self.draft_orders is None:
            return False

        try:
            record = parse_draft_order_payload(payload)
            if record is None:
                logger.info(f"Ignoring {topic.value} webhook without a draft order id")
                return False
            await self.draft_orders.upsert_from_upstream(record)
        except Exception as e:
            logger.error(f"Error applying {topic.value} webhook: {e}")
            return False

        logger.info(f"Applied {topic.value} webhook for {record.id}")
        return True

    async def handle_draft_order_delete(self, body: bytes, received_hmac: Optional[str]) -> bool:
        """Handle draft_orders/delete."""
        topic = WebhookTopic.DRAFT_ORDERS_DELETE
        payload = self._load(topic, body, received_hmac)
        if payload is None or self.draft_orders is None:
            return False

        try:
            gid = draft_order_gid_from_payload(payload)
            if not gid:
                logger.info(f"Ignoring {topic.value} webhook without a draft order id")
                return False
            deleted = await self.draft_orders.delete_by_external_id(gid)
        except Exception as e:
            logger.error(f"Error applying {topic.value} webhook: {e}")
            return False

        logger.info(f"Applied {topic.value} webhook for {gid} (deleted: {deleted})")
        return deleted
