"""
Tests for webhook verification and the webhook processor.
"""

import pytest
from sqlalchemy import func, select

from shop_bff.db.models import Customer, DraftOrder, DraftOrderTag
from shop_bff.integrations.shopify.parsers import parse_customer_node
from shop_bff.integrations.shopify.webhooks import WebhookProcessor, WebhookTopic, compute_hmac, verify_webhook
from tests.factories import WEBHOOK_SECRET, customer_node, signed

CUSTOMER_PAYLOAD = {
    "id": 1,
    "admin_graphql_api_id": "gid://shopify/Customer/1",
    "first_name": "Grace",
    "last_name": "Hopper",
    "email": "grace@example.com",
    "tags": "Platinum, navy",
}

DRAFT_ORDER_PAYLOAD = {
    "id": 10,
    "admin_graphql_api_id": "gid://shopify/DraftOrder/10",
    "name": "#D10",
    "status": "open",
    "tags": "rush, b2b",
    "customer": {"id": 1, "admin_graphql_api_id": "gid://shopify/Customer/1"},
    "line_items": [{"title": "Widget", "quantity": 1}],
}


@pytest.fixture
def processor(customer_repo, draft_order_repo):
    return WebhookProcessor(WEBHOOK_SECRET, customers=customer_repo, draft_orders=draft_order_repo)


async def count(session, model) -> int:
    return await session.scalar(select(func.count()).select_from(model))


def test_verify_webhook():
    body = b'{"id": 1}'
    digest = compute_hmac(WEBHOOK_SECRET, body)

    assert verify_webhook(WEBHOOK_SECRET, body, digest) is True
    assert verify_webhook(WEBHOOK_SECRET, body + b" ", digest) is False
    assert verify_webhook(WEBHOOK_SECRET, body, None) is False
    assert verify_webhook("", body, digest) is False
    assert verify_webhook("other-secret", body, digest) is False
    assert verify_webhook(WEBHOOK_SECRET, body, "\xe9forged") is False
    assert verify_webhook(WEBHOOK_SECRET, body, "\u2603") is False


def test_topics():
    assert {topic.value for topic in WebhookTopic} == {
        "customers/update", "draft_orders/create", "draft_orders/update", "draft_orders/delete",
    }


@pytest.mark.asyncio
async def test_customer_update_upserts(processor, customer_repo):
    body, digest = signed(CUSTOMER_PAYLOAD)

    assert await processor.handle_customer_update(body, digest) is True

    customer = await customer_repo.find_by_external_id("gid://shopify/Customer/1")
    assert customer.first_name == "Grace"
    assert customer.price_level == "Platinum"


@pytest.mark.asyncio
async def test_customer_update_keeps_company_link(processor, customer_repo):
    await customer_repo.upsert_from_upstream(parse_customer_node(customer_node(1)))
    body, digest = signed(CUSTOMER_PAYLOAD)

    await processor.handle_customer_update(body, digest)

    customer = await customer_repo.find_by_external_id("gid://shopify/Customer/1")
    assert customer.first_name == "Grace"
    assert customer.company.name == "Acme"
    assert customer.default_address is not None


@pytest.mark.asyncio
async def test_bad_signature_leaves_store_untouched(processor, db_session):
    body, _ = signed(CUSTOMER_PAYLOAD)
    forged = compute_hmac("not-the-secret", body)

    assert await processor.handle_customer_update(body, forged) is False
    assert await processor.handle_draft_order_upsert(body, None) is False
    assert await count(db_session, Customer) == 0
    assert await count(db_session, DraftOrder) == 0


@pytest.mark.asyncio
async def test_invalid_json_is_ignored(processor):
    body = b"not json"
    assert await processor.handle_customer_update(body, compute_hmac(WEBHOOK_SECRET, body)) is False


@pytest.mark.asyncio
async def test_payload_without_id_is_ignored(processor, db_session):
    body, digest = signed({"email": "nobody@example.com"})

    assert await processor.handle_customer_update(body, digest) is False
    assert await count(db_session, Customer) == 0


@pytest.mark.asyncio
async def test_draft_order_create_links_cached_customer(processor, draft_order_repo):
    body, digest = signed(CUSTOMER_PAYLOAD)
    await processor.handle_customer_update(body, digest)

    body, digest = signed({"draft_order": DRAFT_ORDER_PAYLOAD})
    assert await processor.handle_draft_order_upsert(body, digest, topic=WebhookTopic.DRAFT_ORDERS_CREATE)

    draft_order = await draft_order_repo.find_by_external_id("gid://shopify/DraftOrder/10")
    assert draft_order.customer.shopify_gid == "gid://shopify/Customer/1"
    assert sorted(t.tag for t in draft_order.tags) == ["b2b", "rush"]


@pytest.mark.asyncio
async def test_draft_order_update_replaces_tags(processor, draft_order_repo):
    body, digest = signed(DRAFT_ORDER_PAYLOAD)
    await processor.handle_draft_order_upsert(body, digest)

    body, digest = signed({**DRAFT_ORDER_PAYLOAD, "tags": "rush, approved", "status": "invoice_sent"})
    await processor.handle_draft_order_upsert(body, digest)

    draft_order = await draft_order_repo.find_by_external_id("gid://shopify/DraftOrder/10")
    assert draft_order.status == "invoice_sent"
    assert sorted(t.tag for t in draft_order.tags) == ["approved", "rush"]
    # unknown customer is left unlinked
    assert draft_order.customer is None


@pytest.mark.asyncio
async def test_draft_order_delete(processor, db_session):
    body, digest = signed(DRAFT_ORDER_PAYLOAD)
    await processor.handle_draft_order_upsert(body, digest)

    body, digest = signed({"id": 10})
    assert await processor.handle_draft_order_delete(body, digest) is True
    assert await count(db_session, DraftOrder) == 0
    assert await count(db_session, DraftOrderTag) == 0

    assert await processor.handle_draft_order_delete(body, digest) is False


@pytest.mark.asyncio
async def test_repository_failure_is_swallowed():
    class FailingRepository:
        async def upsert_from_upstream(self, record):
            raise RuntimeError("database is gone")

    processor = WebhookProcessor(WEBHOOK_SECRET, customers=FailingRepository())
    body, digest = signed(CUSTOMER_PAYLOAD)

    assert await processor.handle_customer_update(body, digest) is False


@pytest.mark.asyncio
async def test_malformed_delete_payload_is_ignored(processor):
    body, digest = signed({"draft_order": "x"})

    assert await processor.handle_draft_order_delete(body, digest) is False
