"""
Parsers turning Shopify responses into upstream records.

GraphQL nodes use camelCase and connection-wrapped lists; webhook payloads
use the REST snake_case shape. Both end up as the same record types.
"""

from datetime import datetime
from typing import Dict, Any, Optional, List

from .models import (
    AddressRecord, CustomerRecord, DraftOrderRecord, LineItemSnapshot, ShippingLineSnapshot
)

GID_PREFIX = "gid://shopify/"


def to_gid(resource: str, identifier: Any) -> str:
    """Return a Shopify global id, accepting either a numeric id or a gid."""
    value = str(identifier).strip()
    if value.startswith(GID_PREFIX):
        return value
    return f"{GID_PREFIX}{resource}/{value}"


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse Shopify ISO-8601 timestamps, including the trailing Z form."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _edges(connection: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    if not connection:
        return []
    return [edge["node"] for edge in connection.get("edges", []) if edge.get("node") is not None]


def _money_amount(money_set: Optional[Dict[str, Any]]) -> Optional[str]:
    if not money_set:
        return None
    shop_money = money_set.get("shopMoney") or {}
    return shop_money.get("amount")


# GraphQL nodes

def parse_address_node(address_data: Optional[Dict[str, Any]]) -> Optional[AddressRecord]:
    """Parse a MailingAddress node."""
    if not address_data:
        return None
    return AddressRecord(
        address1=address_data.get("address1"),
        address2=address_data.get("address2"),
        city=address_data.get("city"),
        province=address_data.get("province"),
        zip=address_data.get("zip"),
        country=address_data.get("country"),
        country_code=address_data.get("countryCodeV2") or address_data.get("countryCode"),
    )


def parse_customer_node(customer_data: Dict[str, Any]) -> CustomerRecord:
    """Parse a Customer node from the Admin GraphQL API."""
    company = None
    for profile in customer_data.get("companyContactProfiles") or []:
        company_data = profile.get("company") or {}
        if company_data.get("name"):
            company = company_data["name"]
            break

    return CustomerRecord(
        id=customer_data["id"],
        first_name=customer_data.get("firstName"),
        last_name=customer_data.get("lastName"),
        email=customer_data.get("email"),
        tags=customer_data.get("tags") or [],
        company=company,
        default_address=parse_address_node(customer_data.get("defaultAddress")),
    )


def parse_line_item_node(item_data: Dict[str, Any]) -> LineItemSnapshot:
    """Parse a DraftOrderLineItem node into a snapshot."""
    variant = item_data.get("variant")
    if variant is not None:
        variant = {
            "id": variant.get("id"),
            "title": variant.get("title") or item_data.get("variantTitle"),
            "price": variant.get("price"),
        }
    elif item_data.get("variantTitle"):
        variant = {"title": item_data.get("variantTitle")}

    discount = item_data.get("appliedDiscount")
    if discount is not None:
        discount = {
            "title": discount.get("title"),
            "value": discount.get("value"),
            "value_type": discount.get("valueType"),
            "amount": discount.get("amount") or _money_amount(discount.get("amountSet")),
        }

    return LineItemSnapshot(
        title=item_data.get("title"),
        quantity=item_data.get("quantity") or 0,
        applied_discount=discount,
        variant=variant,
    )


def parse_draft_order_node(order_data: Dict[str, Any]) -> DraftOrderRecord:
    """Parse a DraftOrder node from the Admin GraphQL API."""
    shipping_line = None
    shipping_line_data = order_data.get("shippingLine")
    if shipping_line_data:
        shipping_line = ShippingLineSnapshot(
            title=shipping_line_data.get("title"),
            code=shipping_line_data.get("code"),
            price=_money_amount(shipping_line_data.get("originalPriceSet")),
        )

    customer = order_data.get("customer") or {}

    return DraftOrderRecord(
        id=order_data["id"],
        name=order_data.get("name"),
        note=order_data.get("note2") or order_data.get("note"),
        customer_id=customer.get("id"),
        shipping_address=parse_address_node(order_data.get("shippingAddress")),
        shipping_line=shipping_line,
        line_items=[parse_line_item_node(node) for node in _edges(order_data.get("lineItems"))],
        status=order_data.get("status"),
        invoice_url=order_data.get("invoiceUrl"),
        created_at=parse_datetime(order_data.get("createdAt")),
        completed_at=parse_datetime(order_data.get("completedAt")),
        tags=order_data.get("tags") or [],
    )


# Webhook (REST-shaped) payloads

def parse_address_payload(address_data: Optional[Dict[str, Any]]) -> Optional[AddressRecord]:
    """Parse a REST address object."""
    if not address_data:
        return None
    return AddressRecord(
        address1=address_data.get("address1"),
        address2=address_data.get("address2"),
        city=address_data.get("city"),
        province=address_data.get("province"),
        zip=address_data.get("zip"),
        country=address_data.get("country_name") or address_data.get("country"),
        country_code=address_data.get("country_code"),
    )


def parse_customer_payload(payload: Dict[str, Any]) -> Optional[CustomerRecord]:
    """
    Parse a customers/* webhook payload.

    Returns None when the payload carries no id. The GraphQL gid is used as
    the key so webhook rows line up with backfilled rows.
    """
    customer_data = payload.get("customer") or payload
    gid = customer_data.get("admin_graphql_api_id")
    if not gid and customer_data.get("id"):
        gid = to_gid("Customer", customer_data["id"])
    if not gid:
        return None

    return CustomerRecord(
        id=gid,
        first_name=customer_data.get("first_name"),
        last_name=customer_data.get("last_name"),
        email=customer_data.get("email"),
        tags=customer_data.get("tags"),
        default_address=parse_address_payload(customer_data.get("default_address")),
    )


def parse_draft_order_payload(payload: Dict[str, Any]) -> Optional[DraftOrderRecord]:
    """Parse a draft_orders/create or draft_orders/update webhook payload."""
    order_data = payload.get("draft_order") or payload
    gid = order_data.get("admin_graphql_api_id")
    if not gid and order_data.get("id"):
        gid = to_gid("DraftOrder", order_data["id"])
    if not gid:
        return None

    line_items = []
    for item in order_data.get("line_items") or []:
        line_items.append(LineItemSnapshot(
            title=item.get("title"),
            quantity=item.get("quantity") or 0,
            applied_discount=item.get("applied_discount"),
            variant={
                "id": to_gid("ProductVariant", item["variant_id"]) if item.get("variant_id") else None,
                "title": item.get("variant_title"),
                "price": item.get("price"),
            },
        ))

    shipping_line = None
    if order_data.get("shipping_line"):
        shipping_line_data = order_data["shipping_line"]
        shipping_line = ShippingLineSnapshot(
            title=shipping_line_data.get("title"),
            code=shipping_line_data.get("code"),
            price=shipping_line_data.get("price"),
        )

    customer_id = None
    customer = order_data.get("customer") or {}
    if customer.get("admin_graphql_api_id"):
        customer_id = customer["admin_graphql_api_id"]
    elif customer.get("id"):
        customer_id = to_gid("Customer", customer["id"])

    return DraftOrderRecord(
        id=gid,
        name=order_data.get("name"),
        note=order_data.get("note"),
        customer_id=customer_id,
        shipping_address=parse_address_payload(order_data.get("shipping_address")),
        shipping_line=shipping_line,
        line_items=line_items,
        status=order_data.get("status"),
        invoice_url=order_data.get("invoice_url"),
        created_at=parse_datetime(order_data.get("created_at")),
        completed_at=parse_datetime(order_data.get("completed_at")),
        tags=order_data.get("tags"),
    )


def draft_order_gid_from_payload(payload: Dict[str, Any]) -> Optional[str]:
    """Extract the draft order gid from a draft_orders/delete payload."""
    order_data = payload.get("draft_order") or payload
    if order_data.get("admin_graphql_api_id"):
        return order_data["admin_graphql_api_id"]
    if order_data.get("id"):
        return to_gid("DraftOrder", order_data["id"])
    return None
