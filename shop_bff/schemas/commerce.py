"""
Response contracts for customer and draft order reads.

Each contract can be built from a cached row or from an upstream record so
callers see one shape whichever path served the read.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from shop_bff.db.models import Address, Customer, DraftOrder
from shop_bff.integrations.shopify.models import (
    AddressRecord, CustomerRecord, DraftOrderRecord, LineItemSnapshot, ShippingLineSnapshot
)

NOT_AVAILABLE = "N/A"


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands timestamps back without tzinfo; everything stored is UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AddressOut(BaseModel):
    """Postal address."""
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None

    @classmethod
    def from_entity(cls, address: Optional[Address]) -> Optional["AddressOut"]:
        if address is None:
            return None
        return cls(
            address1=address.address1,
            address2=address.address2,
            city=address.city,
            province=address.province,
            zip=address.zip_code,
            country=address.country.country_name if address.country else None,
            country_code=address.country.country_code if address.country else None,
        )

    @classmethod
    def from_record(cls, record: Optional[AddressRecord]) -> Optional["AddressOut"]:
        if record is None:
            return None
        return cls(
            address1=record.address1,
            address2=record.address2,
            city=record.city,
            province=record.province,
            zip=record.zip,
            country=record.country or record.country_code,
            country_code=record.country_code.upper() if record.country_code else None,
        )


class CustomerOut(BaseModel):
    """Customer as returned to the frontend."""
    id: str = Field(..., description="Shopify customer gid")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    price_level: Optional[str] = None
    tags: List[str] = []
    default_address: Optional[AddressOut] = None
    last_synced_at: Optional[datetime] = Field(None, description="Set when served from the local cache")

    @classmethod
    def from_entity(cls, customer: Customer) -> "CustomerOut":
        return cls(
            id=customer.shopify_gid,
            first_name=customer.first_name,
            last_name=customer.last_name,
            email=customer.email,
            company=customer.company.name if customer.company else None,
            price_level=customer.price_level,
            tags=list(customer.tags or []),
            default_address=AddressOut.from_entity(customer.default_address),
            last_synced_at=_aware(customer.last_synced_at),
        )

    @classmethod
    def from_record(cls, record: CustomerRecord) -> "CustomerOut":
        return cls(
            id=record.id,
            first_name=record.first_name,
            last_name=record.last_name,
            email=record.email,
            company=record.company,
            price_level=record.price_level,
            tags=list(record.tags),
            default_address=AddressOut.from_record(record.default_address),
        )


class CustomerCompanyOut(BaseModel):
    """Customer with company and price level, placeholders filled in."""
    id: str
    first_name: str
    last_name: str
    company: str
    price_level: str

    @classmethod
    def from_customer(cls, customer: CustomerOut) -> "CustomerCompanyOut":
        return cls(
            id=customer.id,
            first_name=customer.first_name or NOT_AVAILABLE,
            last_name=customer.last_name or NOT_AVAILABLE,
            company=customer.company or NOT_AVAILABLE,
            price_level=customer.price_level or NOT_AVAILABLE,
        )


class DraftOrderOut(BaseModel):
    """Draft order as returned to the frontend."""
    id: str = Field(..., description="Shopify draft order gid")
    name: Optional[str] = None
    note: Optional[str] = None
    customer_id: Optional[str] = None
    shipping_address: Optional[AddressOut] = None
    shipping_line: Optional[ShippingLineSnapshot] = None
    line_items: List[LineItemSnapshot] = []
    status: Optional[str] = None
    invoice_url: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    tags: List[str] = []
    last_synced_at: Optional[datetime] = Field(None, description="Set when served from the local cache")

    @classmethod
    def from_entity(cls, draft_order: DraftOrder) -> "DraftOrderOut":
        return cls(
            id=draft_order.shopify_gid,
            name=draft_order.name,
            note=draft_order.note,
            customer_id=(
                draft_order.customer.shopify_gid if draft_order.customer else draft_order.customer_shopify_gid
            ),
            shipping_address=AddressOut.from_entity(draft_order.shipping_address),
            shipping_line=draft_order.shipping_line,
            line_items=draft_order.line_items or [],
            status=draft_order.status,
            invoice_url=draft_order.invoice_url,
            created_at=_aware(draft_order.date_created),
            completed_at=_aware(draft_order.completed_at),
            tags=sorted(t.tag for t in draft_order.tags),
            last_synced_at=_aware(draft_order.last_synced_at),
        )

    @classmethod
    def from_record(cls, record: DraftOrderRecord) -> "DraftOrderOut":
        return cls(
            id=record.id,
            name=record.name,
            note=record.note,
            customer_id=record.customer_id,
            shipping_address=AddressOut.from_record(record.shipping_address),
            shipping_line=record.shipping_line,
            line_items=record.line_items,
            status=record.status,
            invoice_url=record.invoice_url,
            created_at=record.created_at,
            completed_at=record.completed_at,
            tags=sorted(record.tags),
        )
