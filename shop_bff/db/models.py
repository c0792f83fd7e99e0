"""
ORM models for the local cache of Shopify data.

Rows are only ever written by upserts keyed on the Shopify global id; the
platform stays the source of truth.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON, DateTime, ForeignKey, Index, String, Text, UniqueConstraint, func
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

JSONDocument = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Declarative base for all cache tables."""


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False
    )


class Country(Base):
    __tablename__ = "countries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    country_code: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    country_name: Mapped[str] = mapped_column(Text, nullable=False)


class Company(TimestampMixin, Base):
    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    price_level: Mapped[Optional[str]] = mapped_column(Text)


class Address(TimestampMixin, Base):
    __tablename__ = "addresses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    address1: Mapped[Optional[str]] = mapped_column(Text)
    address2: Mapped[Optional[str]] = mapped_column(Text)
    city: Mapped[Optional[str]] = mapped_column(Text)
    province: Mapped[Optional[str]] = mapped_column(Text)
    zip_code: Mapped[Optional[str]] = mapped_column(Text)
    country_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("countries.id", ondelete="SET NULL"), index=True
    )

    country: Mapped[Optional[Country]] = relationship(lazy="joined")


class Customer(TimestampMixin, Base):
    __tablename__ = "customers"
    __table_args__ = (
        Index("ix_customers_price_level", "price_level"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    shopify_gid: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    first_name: Mapped[Optional[str]] = mapped_column(Text)
    last_name: Mapped[Optional[str]] = mapped_column(Text)
    email: Mapped[Optional[str]] = mapped_column(Text)
    company_id: Mapped[Optional[str]] = mapped_column(ForeignKey("companies.id", ondelete="SET NULL"))
    default_address_id: Mapped[Optional[str]] = mapped_column(ForeignKey("addresses.id", ondelete="SET NULL"))
    price_level: Mapped[Optional[str]] = mapped_column(Text)
    tags: Mapped[List[str]] = mapped_column(JSONDocument, default=list, nullable=False)
    last_synced_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    company: Mapped[Optional[Company]] = relationship()
    default_address: Mapped[Optional[Address]] = relationship()


class DraftOrder(TimestampMixin, Base):
    __tablename__ = "draft_orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    shopify_gid: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(Text)
    note: Mapped[Optional[str]] = mapped_column(Text)
    customer_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("customers.id", ondelete="SET NULL"), index=True
    )
    customer_shopify_gid: Mapped[Optional[str]] = mapped_column(Text, index=True)
    shipping_address_id: Mapped[Optional[str]] = mapped_column(ForeignKey("addresses.id", ondelete="SET NULL"))
    shipping_line: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONDocument)
    line_items: Mapped[Optional[List[Dict[str, Any]]]] = mapped_column(JSONDocument)
    status: Mapped[Optional[str]] = mapped_column(Text, index=True)
    invoice_url: Mapped[Optional[str]] = mapped_column(Text)
    date_created: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), index=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    last_synced_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    customer: Mapped[Optional[Customer]] = relationship()
    shipping_address: Mapped[Optional[Address]] = relationship()
    tags: Mapped[List["DraftOrderTag"]] = relationship(
        back_populates="draft_order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="DraftOrderTag.tag",
    )


class DraftOrderTag(Base):
    __tablename__ = "draft_order_tags"
    __table_args__ = (
        UniqueConstraint("draft_order_id", "tag", name="uq_draft_order_tags_draft_order_tag"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    draft_order_id: Mapped[str] = mapped_column(
        ForeignKey("draft_orders.id", ondelete="CASCADE"), nullable=False
    )
    tag: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    draft_order: Mapped[DraftOrder] = relationship(back_populates="tags")
