"""
Draft order cache repository.
"""

from typing import List, Optional

from loguru import logger
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload, selectinload

from shop_bff.db.models import Customer, DraftOrder, DraftOrderTag, new_uuid, utcnow
from shop_bff.integrations.shopify.models import DraftOrderRecord
from shop_bff.repositories.base import CacheRepository, dialect_insert


class DraftOrderRepository(CacheRepository):
    """Read/write access to cached draft orders and their tags."""

    def _select(self):
        return (
            select(DraftOrder)
            .options(
                joinedload(DraftOrder.customer),
                joinedload(DraftOrder.shipping_address),
                selectinload(DraftOrder.tags),
            )
            .execution_options(populate_existing=True)
        )

    async def find_all(self) -> List[DraftOrder]:
        """All cached draft orders with customer, shipping address and tags loaded."""
        result = await self.session.scalars(
            self._select().order_by(DraftOrder.date_created.desc(), DraftOrder.shopify_gid)
        )
        return list(result.unique())

    async def find_by_external_id(self, shopify_gid: str) -> Optional[DraftOrder]:
        """Point lookup by Shopify gid."""
        result = await self.session.scalars(self._select().where(DraftOrder.shopify_gid == shopify_gid))
        return result.unique().first()

    async def find_by_customer_external_id(self, customer_gid: str) -> List[DraftOrder]:
        """Draft orders of one customer, newest first."""
        result = await self.session.scalars(
            self._select()
            .outerjoin(Customer, DraftOrder.customer_id == Customer.id)
            .where(or_(DraftOrder.customer_shopify_gid == customer_gid, Customer.shopify_gid == customer_gid))
            .order_by(DraftOrder.date_created.desc())
        )
        return list(result.unique())

    async def _insert_tag(self, draft_order_id: str, tag: str) -> bool:
        stmt = dialect_insert(self.session, DraftOrderTag).values(
            id=new_uuid(), draft_order_id=draft_order_id, tag=tag, created_at=utcnow()
        ).on_conflict_do_nothing(index_elements=[DraftOrderTag.draft_order_id, DraftOrderTag.tag])
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def _replace_tags(self, draft_order_id: str, tags: List[str]) -> None:
        await self.session.execute(
            delete(DraftOrderTag).where(
                DraftOrderTag.draft_order_id == draft_order_id,
                DraftOrderTag.tag.not_in(tags),
            )
        )
        for tag in tags:
            await self._insert_tag(draft_order_id, tag)

    async def upsert_from_upstream(self, record: DraftOrderRecord) -> DraftOrder:
        """
        Insert or update a draft order keyed on its Shopify gid.

        The customer gid is always stored; the customer link is resolved
        through it and is only set when that customer is cached. Tags are replaced so the stored set
        matches the record.
        """
        now = utcnow()
        try:
            existing = (await self.session.execute(
                select(DraftOrder.id, DraftOrder.shipping_address_id).where(DraftOrder.shopify_gid == record.id)
            )).first()

            customer_id = None
            if record.customer_id:
                customer_id = await self.session.scalar(
                    select(Customer.id).where(Customer.shopify_gid == record.customer_id)
                )

            shipping_address_id = await self._save_address(
                existing.shipping_address_id if existing else None, record.shipping_address
            )

            values = {
                "name": record.name,
                "note": record.note,
                "customer_id": customer_id,
                "customer_shopify_gid": record.customer_id,
                "shipping_address_id": shipping_address_id,
                "shipping_line": record.shipping_line.model_dump(mode="json") if record.shipping_line else None,
                "line_items": [item.model_dump(mode="json") for item in record.line_items],
                "status": record.status,
                "invoice_url": record.invoice_url,
                "date_created": record.created_at,
                "completed_at": record.completed_at,
                "last_synced_at": now,
            }

            stmt = dialect_insert(self.session, DraftOrder).values(
                id=new_uuid(), shopify_gid=record.id, created_at=now, updated_at=now, **values
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[DraftOrder.shopify_gid],
                set_={**values, "updated_at": now},
            )
            await self.session.execute(stmt)

            draft_order_id = await self.session.scalar(
                select(DraftOrder.id).where(DraftOrder.shopify_gid == record.id)
            )
            await self._replace_tags(draft_order_id, list(record.tags))
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise

        logger.debug(f"Upserted draft order {record.id} with {len(record.tags)} tag(s)")
        return await self.find_by_external_id(record.id)

    async def add_tag(self, shopify_gid: str, tag: str) -> bool:
        """
        Attach a tag to a cached draft order.

        Returns False when the draft order is not cached or already carries
        the tag; the (draft order, tag) pair is never duplicated.
        """
        tag = tag.strip()
        try:
            draft_order_id = await self.session.scalar(
                select(DraftOrder.id).where(DraftOrder.shopify_gid == shopify_gid)
            )
            if draft_order_id is None or not tag:
                return False
            created = await self._insert_tag(draft_order_id, tag)
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise
        return created

    async def delete_by_external_id(self, shopify_gid: str) -> bool:
        """Delete a cached draft order and its tags; returns whether a row was removed."""
        try:
            draft_order = await self.find_by_external_id(shopify_gid)
            if draft_order is None:
                return False
            await self.session.delete(draft_order)
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise
        return True
