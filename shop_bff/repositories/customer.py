"""
Customer cache repository.
"""

from typing import Dict, List, Optional

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from shop_bff.db.models import Company, Customer, new_uuid, utcnow
from shop_bff.integrations.shopify.models import CustomerRecord
from shop_bff.repositories.base import CacheRepository, dialect_insert


class CustomerRepository(CacheRepository):
    """Read/write access to cached customers."""

    def _select(self):
        return (
            select(Customer)
            .options(joinedload(Customer.company), joinedload(Customer.default_address))
            .execution_options(populate_existing=True)
        )

    async def find_all(self) -> List[Customer]:
        """All cached customers with company and default address loaded."""
        result = await self.session.scalars(
            self._select().order_by(Customer.created_at, Customer.shopify_gid)
        )
        return list(result.unique())

    async def find_by_external_id(self, shopify_gid: str) -> Optional[Customer]:
        """Point lookup by Shopify gid."""
        result = await self.session.scalars(self._select().where(Customer.shopify_gid == shopify_gid))
        return result.unique().first()

    async def upsert_from_upstream(self, record: CustomerRecord) -> Customer:
        """
        Insert or update a customer keyed on its Shopify gid.

        Names, email, tags and the derived price level are overwritten. The
        company and default address links only change when the record
        carries them. The row id and creation time are never touched.
        """
        now = utcnow()
        try:
            existing = (await self.session.execute(
                select(Customer.id, Customer.default_address_id).where(Customer.shopify_gid == record.id)
            )).first()

            values = {
                "first_name": record.first_name,
                "last_name": record.last_name,
                "email": record.email,
                "price_level": record.price_level,
                "tags": list(record.tags),
                "last_synced_at": now,
            }

            company_id = await self._upsert_company(record.company, record.price_level)
            if company_id:
                values["company_id"] = company_id

            address_id = await self._save_address(
                existing.default_address_id if existing else None, record.default_address
            )
            if address_id:
                values["default_address_id"] = address_id

            stmt = dialect_insert(self.session, Customer).values(
                id=new_uuid(), shopify_gid=record.id, created_at=now, updated_at=now, **values
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[Customer.shopify_gid],
                set_={**values, "updated_at": now},
            )
            await self.session.execute(stmt)
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise

        logger.debug(f"Upserted customer {record.id}")
        return await self.find_by_external_id(record.id)

    async def delete_by_external_id(self, shopify_gid: str) -> bool:
        """Delete a cached customer; returns whether a row was removed."""
        try:
            result = await self.session.execute(delete(Customer).where(Customer.shopify_gid == shopify_gid))
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise
        return result.rowcount > 0

    async def company_price_levels(self) -> Dict[str, Optional[str]]:
        """Map of cached company name to its price level."""
        rows = await self.session.execute(select(Company.name, Company.price_level).order_by(Company.name))
        return {name: price_level for name, price_level in rows}
