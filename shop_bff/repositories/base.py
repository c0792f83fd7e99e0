"""
Shared helpers for cache repositories.
"""

from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from shop_bff.db.models import Address, Company, Country, new_uuid
from shop_bff.integrations.shopify.models import AddressRecord


def dialect_insert(session: AsyncSession, model):
    """
    Return an INSERT construct supporting ON CONFLICT for the session's dialect.

    Only Postgres and SQLite are supported as cache stores.
    """
    dialect = session.bind.dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"Upserts are not supported on dialect: {dialect}")


class CacheRepository:
    """Base class holding the session and the related-row upserts both repositories need."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _upsert_country(self, code: Optional[str], name: Optional[str]) -> Optional[str]:
        """Upsert a country by its unique code and return its id."""
        if not code:
            return None
        code = code.strip().upper()
        stmt = dialect_insert(self.session, Country).values(
            id=new_uuid(), country_code=code, country_name=name or code
        )
        if name:
            stmt = stmt.on_conflict_do_update(
                index_elements=[Country.country_code],
                set_={"country_name": stmt.excluded.country_name},
            )
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=[Country.country_code])
        await self.session.execute(stmt)
        return await self.session.scalar(select(Country.id).where(Country.country_code == code))

    async def _upsert_company(self, name: Optional[str], price_level: Optional[str]) -> Optional[str]:
        """Upsert a company by its unique name and return its id."""
        if not name:
            return None
        name = name.strip()
        stmt = dialect_insert(self.session, Company).values(
            id=new_uuid(), name=name, price_level=price_level
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Company.name],
            set_={"price_level": func.coalesce(stmt.excluded.price_level, Company.price_level)},
        )
        await self.session.execute(stmt)
        return await self.session.scalar(select(Company.id).where(Company.name == name))

    async def _save_address(self, address_id: Optional[str], record: Optional[AddressRecord]) -> Optional[str]:
        """
        Write an address snapshot, updating the linked row in place when one exists.

        Addresses have no natural key, so the owning row's link is what keeps
        repeated upserts from piling up duplicates.
        """
        if record is None:
            return address_id

        values: Dict[str, Any] = {
            "address1": record.address1,
            "address2": record.address2,
            "city": record.city,
            "province": record.province,
            "zip_code": record.zip,
            "country_id": await self._upsert_country(record.country_code, record.country),
        }

        address = await self.session.get(Address, address_id) if address_id else None
        if address is None:
            address = Address(id=new_uuid(), **values)
            self.session.add(address)
        else:
            for key, value in values.items():
                setattr(address, key, value)
        await self.session.flush()
        return address.id
