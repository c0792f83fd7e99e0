"""
Tests for Shopify node and webhook payload parsers.
"""

from datetime import datetime, timezone

from shop_bff.integrations.shopify.models import CustomerRecord, split_tags
from shop_bff.integrations.shopify.parsers import (
    draft_order_gid_from_payload,
    parse_customer_node,
    parse_customer_payload,
    parse_draft_order_node,
    parse_draft_order_payload,
    parse_datetime,
    to_gid,
)
from tests.factories import customer_node, draft_order_node


def test_to_gid_accepts_numeric_and_gid():
    assert to_gid("Customer", 42) == "gid://shopify/Customer/42"
    assert to_gid("Customer", "gid://shopify/Customer/42") == "gid://shopify/Customer/42"


def test_parse_datetime_handles_trailing_z():
    assert parse_datetime("2024-01-02T03:04:05Z") == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert parse_datetime(None) is None


def test_split_tags_strips_and_dedupes():
    assert split_tags(" Gold, wholesale ,Gold,, ") == ["Gold", "wholesale"]
    assert split_tags(["a", " a", "b"]) == ["a", "b"]
    assert split_tags(None) == []


def test_price_level_is_first_tag():
    assert CustomerRecord(id="gid://shopify/Customer/1", tags="Silver, retail").price_level == "Silver"
    assert CustomerRecord(id="gid://shopify/Customer/1").price_level is None


def test_parse_customer_node():
    record = parse_customer_node(customer_node(7))

    assert record.id == "gid://shopify/Customer/7"
    assert record.first_name == "First7"
    assert record.company == "Acme"
    assert record.price_level == "Gold"
    assert record.default_address.city == "Ottawa"
    assert record.default_address.country_code == "CA"


def test_parse_customer_node_without_company():
    record = parse_customer_node(customer_node(7, companyContactProfiles=[], defaultAddress=None))

    assert record.company is None
    assert record.default_address is None


def test_parse_draft_order_node():
    record = parse_draft_order_node(draft_order_node(3, customer_number=9))

    assert record.id == "gid://shopify/DraftOrder/3"
    assert record.note == "Deliver before noon"
    assert record.customer_id == "gid://shopify/Customer/9"
    assert record.shipping_line.price == "25.00"
    assert record.line_items[0].title == "Widget"
    assert record.line_items[0].quantity == 3
    assert record.line_items[0].variant["price"] == "10.00"
    assert record.tags == ["priority", "b2b"]
    assert record.created_at.tzinfo is not None


def test_parse_customer_payload_unwraps_and_builds_gid():
    record = parse_customer_payload({
        "customer": {
            "id": 555,
            "first_name": "Ada",
            "last_name": "Lovelace",
            "email": "ada@example.com",
            "tags": "Platinum, vip",
            "default_address": {"city": "London", "country_code": "gb", "country_name": "United Kingdom"},
        }
    })

    assert record.id == "gid://shopify/Customer/555"
    assert record.tags == ["Platinum", "vip"]
    assert record.default_address.country == "United Kingdom"


def test_parse_customer_payload_without_id_returns_none():
    assert parse_customer_payload({"email": "nobody@example.com"}) is None


def test_parse_draft_order_payload():
    record = parse_draft_order_payload({
        "id": 101,
        "admin_graphql_api_id": "gid://shopify/DraftOrder/101",
        "name": "#D101",
        "tags": "rush, b2b",
        "status": "open",
        "customer": {"id": 555},
        "line_items": [{"title": "Widget", "quantity": 2, "variant_id": 9, "price": "10.00"}],
        "shipping_line": {"title": "Freight", "price": "25.00"},
        "created_at": "2024-03-01T12:00:00-05:00",
    })

    assert record.id == "gid://shopify/DraftOrder/101"
    assert record.customer_id == "gid://shopify/Customer/555"
    assert record.tags == ["rush", "b2b"]
    assert record.line_items[0].variant["id"] == "gid://shopify/ProductVariant/9"
    assert record.shipping_line.price == "25.00"


def test_draft_order_gid_from_delete_payload():
    assert draft_order_gid_from_payload({"id": 101}) == "gid://shopify/DraftOrder/101"
    assert draft_order_gid_from_payload({}) is None
