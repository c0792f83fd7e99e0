"""
Tests for the customer cache repository.
"""

import pytest
from sqlalchemy import func, select

from shop_bff.db.models import Address, Company, Country, Customer
from shop_bff.integrations.shopify.models import AddressRecord, CustomerRecord
from shop_bff.integrations.shopify.parsers import parse_customer_node
from tests.factories import customer_node


async def count(session, model) -> int:
    return await session.scalar(select(func.count()).select_from(model))


@pytest.mark.asyncio
async def test_upsert_inserts_with_relations(customer_repo):
    customer = await customer_repo.upsert_from_upstream(parse_customer_node(customer_node(1)))

    assert customer.shopify_gid == "gid://shopify/Customer/1"
    assert customer.price_level == "Gold"
    assert customer.tags == ["Gold", "wholesale"]
    assert customer.company.name == "Acme"
    assert customer.default_address.city == "Ottawa"
    assert customer.default_address.country.country_code == "CA"
    assert customer.last_synced_at is not None


@pytest.mark.asyncio
async def test_upsert_is_idempotent(customer_repo, db_session):
    record = parse_customer_node(customer_node(1))

    first = await customer_repo.upsert_from_upstream(record)
    second = await customer_repo.upsert_from_upstream(record)

    assert first.id == second.id
    assert await count(db_session, Customer) == 1
    assert await count(db_session, Address) == 1
    assert await count(db_session, Company) == 1
    assert await count(db_session, Country) == 1


@pytest.mark.asyncio
async def test_upsert_overwrites_mutable_fields(customer_repo):
    created = await customer_repo.upsert_from_upstream(parse_customer_node(customer_node(1)))
    created_at = created.created_at

    updated = await customer_repo.upsert_from_upstream(parse_customer_node(customer_node(
        1,
        firstName="Renamed",
        tags=["Silver"],
        defaultAddress={"address1": "9 New Rd", "city": "Toronto", "countryCodeV2": "CA"},
    )))

    assert updated.id == created.id
    assert updated.created_at == created_at
    assert updated.first_name == "Renamed"
    assert updated.price_level == "Silver"
    assert updated.default_address.city == "Toronto"


@pytest.mark.asyncio
async def test_address_is_updated_in_place(customer_repo, db_session):
    first = await customer_repo.upsert_from_upstream(parse_customer_node(customer_node(1)))
    address_id = first.default_address.id

    record = CustomerRecord(
        id="gid://shopify/Customer/1",
        default_address=AddressRecord(city="Montreal", country_code="ca"),
    )
    second = await customer_repo.upsert_from_upstream(record)

    assert second.default_address.id == address_id
    assert second.default_address.city == "Montreal"
    assert await count(db_session, Address) == 1


@pytest.mark.asyncio
async def test_company_price_level_is_not_cleared(customer_repo):
    await customer_repo.upsert_from_upstream(parse_customer_node(customer_node(1)))
    await customer_repo.upsert_from_upstream(parse_customer_node(customer_node(2, tags=[])))

    assert await customer_repo.company_price_levels() == {"Acme": "Gold"}


@pytest.mark.asyncio
async def test_find_all_and_missing_lookup(customer_repo):
    for number in (1, 2, 3):
        await customer_repo.upsert_from_upstream(parse_customer_node(customer_node(number)))

    customers = await customer_repo.find_all()

    assert {c.shopify_gid for c in customers} == {f"gid://shopify/Customer/{n}" for n in (1, 2, 3)}
    assert await customer_repo.find_by_external_id("gid://shopify/Customer/99") is None


@pytest.mark.asyncio
async def test_delete_by_external_id(customer_repo):
    await customer_repo.upsert_from_upstream(parse_customer_node(customer_node(1)))

    assert await customer_repo.delete_by_external_id("gid://shopify/Customer/1") is True
    assert await customer_repo.delete_by_external_id("gid://shopify/Customer/1") is False
    assert await customer_repo.find_all() == []
