"""
Tests for the draft order cache repository.
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from shop_bff.db.models import DraftOrder, DraftOrderTag, new_uuid
from shop_bff.integrations.shopify.parsers import parse_customer_node, parse_draft_order_node
from tests.factories import customer_node, draft_order_node


async def count(session, model) -> int:
    return await session.scalar(select(func.count()).select_from(model))


@pytest.mark.asyncio
async def test_upsert_stores_snapshots(draft_order_repo):
    draft_order = await draft_order_repo.upsert_from_upstream(parse_draft_order_node(draft_order_node(1)))

    assert draft_order.name == "#D1"
    assert draft_order.line_items[0]["title"] == "Widget"
    assert draft_order.line_items[0]["quantity"] == 3
    assert draft_order.shipping_line["price"] == "25.00"
    assert draft_order.shipping_address.city == "Halifax"
    assert sorted(t.tag for t in draft_order.tags) == ["b2b", "priority"]


@pytest.mark.asyncio
async def test_customer_link_requires_cached_customer(customer_repo, draft_order_repo):
    orphan = await draft_order_repo.upsert_from_upstream(parse_draft_order_node(draft_order_node(1)))
    assert orphan.customer is None

    await customer_repo.upsert_from_upstream(parse_customer_node(customer_node(1)))
    linked = await draft_order_repo.upsert_from_upstream(parse_draft_order_node(draft_order_node(1)))

    assert linked.customer.shopify_gid == "gid://shopify/Customer/1"


@pytest.mark.asyncio
async def test_customer_gid_kept_without_cached_customer(draft_order_repo):
    draft_order = await draft_order_repo.upsert_from_upstream(
        parse_draft_order_node(draft_order_node(1, customer_number=7))
    )

    assert draft_order.customer is None
    assert draft_order.customer_shopify_gid == "gid://shopify/Customer/7"
    found = await draft_order_repo.find_by_customer_external_id("gid://shopify/Customer/7")
    assert [d.shopify_gid for d in found] == ["gid://shopify/DraftOrder/1"]


@pytest.mark.asyncio
async def test_upsert_is_idempotent(draft_order_repo, db_session):
    record = parse_draft_order_node(draft_order_node(1))

    await draft_order_repo.upsert_from_upstream(record)
    await draft_order_repo.upsert_from_upstream(record)

    assert await count(db_session, DraftOrder) == 1
    assert await count(db_session, DraftOrderTag) == 2


@pytest.mark.asyncio
async def test_add_tag_never_duplicates(draft_order_repo, db_session):
    await draft_order_repo.upsert_from_upstream(parse_draft_order_node(draft_order_node(1, tags=[])))

    assert await draft_order_repo.add_tag("gid://shopify/DraftOrder/1", "rush") is True
    assert await draft_order_repo.add_tag("gid://shopify/DraftOrder/1", "rush") is False
    assert await draft_order_repo.add_tag("gid://shopify/DraftOrder/404", "rush") is False
    assert await count(db_session, DraftOrderTag) == 1


@pytest.mark.asyncio
async def test_tag_pair_is_unique_at_the_store(draft_order_repo, db_session):
    draft_order = await draft_order_repo.upsert_from_upstream(
        parse_draft_order_node(draft_order_node(1, tags=["rush"]))
    )

    db_session.add(DraftOrderTag(id=new_uuid(), draft_order_id=draft_order.id, tag="rush"))
    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()

    assert await count(db_session, DraftOrderTag) == 1


@pytest.mark.asyncio
async def test_find_by_customer_external_id(customer_repo, draft_order_repo):
    await customer_repo.upsert_from_upstream(parse_customer_node(customer_node(1)))
    await customer_repo.upsert_from_upstream(parse_customer_node(customer_node(2)))
    await draft_order_repo.upsert_from_upstream(parse_draft_order_node(draft_order_node(1, customer_number=1)))
    await draft_order_repo.upsert_from_upstream(parse_draft_order_node(draft_order_node(2, customer_number=1)))
    await draft_order_repo.upsert_from_upstream(parse_draft_order_node(draft_order_node(3, customer_number=2)))

    draft_orders = await draft_order_repo.find_by_customer_external_id("gid://shopify/Customer/1")

    assert [d.shopify_gid for d in draft_orders] == [
        "gid://shopify/DraftOrder/2", "gid://shopify/DraftOrder/1",
    ]


@pytest.mark.asyncio
async def test_delete_removes_tags(draft_order_repo, db_session):
    await draft_order_repo.upsert_from_upstream(parse_draft_order_node(draft_order_node(1)))

    assert await draft_order_repo.delete_by_external_id("gid://shopify/DraftOrder/1") is True
    assert await count(db_session, DraftOrder) == 0
    assert await count(db_session, DraftOrderTag) == 0
    assert await draft_order_repo.delete_by_external_id("gid://shopify/DraftOrder/1") is False
