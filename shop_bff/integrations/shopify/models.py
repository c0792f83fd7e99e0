"""
Shopify data models.

Records here are the upstream-shaped inputs the repositories upsert from.
They are produced by the parsers from either GraphQL nodes (backfill and
fallback reads) or REST-shaped webhook payloads.
"""

from datetime import datetime
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, field_validator


class ShopifyError(Exception):
    """Custom exception for Shopify API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None, response: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class ShopifyConfig(BaseModel):
    """Shopify configuration settings."""
    shop_domain: str
    access_token: str
    api_version: str = "2024-01"
    webhook_secret: Optional[str] = None
    timeout: float = 30.0

    @property
    def admin_base_url(self) -> str:
        """Admin API base URL, accepting domains with or without the myshopify suffix."""
        domain = self.shop_domain
        if not domain.endswith(".myshopify.com"):
            domain = f"{domain}.myshopify.com"
        return f"https://{domain}/admin/api/{self.api_version}"


def split_tags(value: Any) -> List[str]:
    """Normalise tags given as a list or a comma-separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)
    tags = []
    for item in items:
        tag = str(item).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


class AddressRecord(BaseModel):
    """Postal address as sent by Shopify."""
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None


class CustomerRecord(BaseModel):
    """Customer snapshot keyed by its Shopify global id."""
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    tags: List[str] = []
    # None means the source did not carry the relation, not that it was removed
    company: Optional[str] = None
    default_address: Optional[AddressRecord] = None

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v):
        return split_tags(v)

    @property
    def price_level(self) -> Optional[str]:
        """Price tier is carried by the customer's first tag."""
        if self.tags:
            return self.tags[0].strip() or None
        return None


class LineItemSnapshot(BaseModel):
    """Line item as captured at sync time; unknown upstream fields are kept."""
    model_config = ConfigDict(extra="allow")

    title: Optional[str] = None
    quantity: int = 0
    applied_discount: Optional[Dict[str, Any]] = None
    variant: Optional[Dict[str, Any]] = None


class ShippingLineSnapshot(BaseModel):
    """Shipping line as captured at sync time; unknown upstream fields are kept."""
    model_config = ConfigDict(extra="allow")

    title: Optional[str] = None
    code: Optional[str] = None
    price: Optional[str] = None


class DraftOrderRecord(BaseModel):
    """Draft order snapshot keyed by its Shopify global id."""
    id: str
    name: Optional[str] = None
    note: Optional[str] = None
    customer_id: Optional[str] = None
    shipping_address: Optional[AddressRecord] = None
    shipping_line: Optional[ShippingLineSnapshot] = None
    line_items: List[LineItemSnapshot] = []
    status: Optional[str] = None
    invoice_url: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    tags: List[str] = []

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v):
        return split_tags(v)

    @field_validator("line_items", mode="before")
    @classmethod
    def parse_line_items(cls, v):
        return v or []
