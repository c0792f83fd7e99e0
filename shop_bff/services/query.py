"""
Cache-first read service.

Every read is an explicit two-step function: read the local cache, and on a
miss call Shopify and shape the upstream record into the same response
contract. Point lookups served from Shopify also schedule a background
upsert so the next read is local. A store error is treated like a miss, so
callers cannot tell an unsynced cache from a failing one.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Set

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shop_bff.integrations.shopify.client import ShopifyClient
from shop_bff.integrations.shopify.exceptions import ShopifyUserError
from shop_bff.integrations.shopify.models import CustomerRecord, DraftOrderRecord, ShopifyError
from shop_bff.integrations.shopify.parsers import parse_customer_node, parse_draft_order_node
from shop_bff.repositories import CustomerRepository, DraftOrderRepository
from shop_bff.schemas.commerce import CustomerCompanyOut, CustomerOut, DraftOrderOut
from shop_bff.utils.exceptions import (
    CacheUnavailableError, NotFoundError, UpstreamServiceError, ValidationError
)

# Repopulate tasks outlive the request-scoped service that scheduled them.
_background_tasks: Set[asyncio.Task] = set()


def _normalize_tags(tags: Optional[Iterable[str]]) -> Set[str]:
    return {t.strip() for t in tags or [] if t and t.strip()}


def _filter_by_tags(
    draft_orders: List[DraftOrderOut],
    include_tags: Optional[Iterable[str]] = None,
    exclude_tags: Optional[Iterable[str]] = None,
    match_all: bool = False,
) -> List[DraftOrderOut]:
    """Keep draft orders carrying the included tags and none of the excluded ones."""
    include = _normalize_tags(include_tags)
    exclude = _normalize_tags(exclude_tags)

    selected = []
    for draft_order in draft_orders:
        tags = set(draft_order.tags)
        if exclude & tags:
            continue
        if include:
            matched = include <= tags if match_all else bool(include & tags)
            if not matched:
                continue
        selected.append(draft_order)
    return selected


class QueryService:
    """Read path for customers and draft orders."""

    def __init__(
        self,
        client: Optional[ShopifyClient],
        customers: Optional[CustomerRepository] = None,
        draft_orders: Optional[DraftOrderRepository] = None,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        page_size: int = 50,
    ):
        self.client = client
        self.customers = customers
        self.draft_orders = draft_orders
        self.session_factory = session_factory
        self.page_size = page_size

    @property
    def shopify(self) -> ShopifyClient:
        if self.client is None:
            raise UpstreamServiceError("Shopify is not configured.")
        return self.client

    # Two-step read plumbing

    async def _read_local(self, label: str, read: Callable[[], Awaitable[Any]]) -> Any:
        """Run a store read; errors are logged and reported as a miss (None)."""
        try:
            return await read()
        except SQLAlchemyError as e:
            logger.warning(f"Cache read for {label} failed, falling back to Shopify: {e}")
            return None

    async def _read_remote(self, label: str, call: Callable[[], Awaitable[Any]]) -> Any:
        try:
            return await call()
        except ShopifyError as e:
            logger.error(f"Shopify call for {label} failed: {e}")
            raise UpstreamServiceError(f"Failed to fetch {label} from Shopify.", details={
                "status_code": e.status_code,
            })

    async def _fetch_all(self, label: str, fetch_page) -> List[Dict[str, Any]]:
        nodes: List[Dict[str, Any]] = []
        cursor = None
        while True:
            connection = await self._read_remote(
                label, lambda: fetch_page(first=self.page_size, after=cursor)
            )
            nodes.extend(edge["node"] for edge in connection.get("edges", []) if edge.get("node"))
            page_info = connection.get("pageInfo") or {}
            cursor = page_info.get("endCursor")
            if not page_info.get("hasNextPage") or cursor is None:
                return nodes

    def _schedule_repopulate(self, record: Any) -> Optional[asyncio.Task]:
        """
        Persist an upstream record in the background.

        Runs on its own session so it outlives the request. Failures are
        logged and never reach the caller.
        """
        if self.session_factory is None:
            return None

        async def _repopulate():
            try:
                async with self.session_factory() as session:
                    if isinstance(record, CustomerRecord):
                        await CustomerRepository(session).upsert_from_upstream(record)
                    else:
                        await DraftOrderRepository(session).upsert_from_upstream(record)
                logger.debug(f"Repopulated cache with {record.id}")
            except Exception as e:
                logger.exception(f"Background cache repopulate for {record.id} failed: {e}")

        task = asyncio.create_task(_repopulate())
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)
        return task

    # Customers

    async def list_customers(self) -> List[CustomerOut]:
        """All customers, from the cache when it holds any."""
        if self.customers is not None:
            rows = await self._read_local("customers", self.customers.find_all)
            if rows:
                return [CustomerOut.from_entity(row) for row in rows]

        nodes = await self._fetch_all("customers", self.shopify.get_customers_page)
        return [CustomerOut.from_record(parse_customer_node(node)) for node in nodes]

    async def get_customer(self, customer_id: str) -> CustomerOut:
        """One customer by gid."""
        if self.customers is not None:
            row = await self._read_local(
                f"customer {customer_id}", lambda: self.customers.find_by_external_id(customer_id)
            )
            if row is not None:
                return CustomerOut.from_entity(row)

        node = await self._read_remote(
            f"customer {customer_id}", lambda: self.shopify.get_customer(customer_id)
        )
        if node is None:
            raise NotFoundError(f"Customer not found: {customer_id}")

        record = parse_customer_node(node)
        self._schedule_repopulate(record)
        return CustomerOut.from_record(record)

    async def customers_with_companies(self) -> List[CustomerCompanyOut]:
        """Customers with their company and price level, placeholders for missing values."""
        return [CustomerCompanyOut.from_customer(c) for c in await self.list_customers()]

    async def company_price_levels(self) -> Dict[str, Optional[str]]:
        """Company name to price level, from the cache only."""
        if self.customers is None:
            raise CacheUnavailableError()
        return await self.customers.company_price_levels()

    # Draft orders

    async def list_draft_orders(self) -> List[DraftOrderOut]:
        """All draft orders, from the cache when it holds any."""
        if self.draft_orders is not None:
            rows = await self._read_local("draft orders", self.draft_orders.find_all)
            if rows:
                return [DraftOrderOut.from_entity(row) for row in rows]

        nodes = await self._fetch_all("draft orders", self.shopify.get_draft_orders_page)
        return [DraftOrderOut.from_record(parse_draft_order_node(node)) for node in nodes]

    async def get_draft_order(self, draft_order_id: str) -> DraftOrderOut:
        """One draft order by gid."""
        if self.draft_orders is not None:
            row = await self._read_local(
                f"draft order {draft_order_id}",
                lambda: self.draft_orders.find_by_external_id(draft_order_id),
            )
            if row is not None:
                return DraftOrderOut.from_entity(row)

        node = await self._read_remote(
            f"draft order {draft_order_id}", lambda: self.shopify.get_draft_order(draft_order_id)
        )
        if node is None:
            raise NotFoundError(f"Draft order not found: {draft_order_id}")

        record = parse_draft_order_node(node)
        self._schedule_repopulate(record)
        return DraftOrderOut.from_record(record)

    async def draft_orders_for_customer(
        self,
        customer_id: str,
        include_tags: Optional[List[str]] = None,
        exclude_tags: Optional[List[str]] = None,
    ) -> List[DraftOrderOut]:
        """A customer's draft orders; include matches any tag, exclude drops any match."""
        draft_orders: List[DraftOrderOut] = []
        if self.draft_orders is not None:
            rows = await self._read_local(
                f"draft orders of {customer_id}",
                lambda: self.draft_orders.find_by_customer_external_id(customer_id),
            )
            draft_orders = [DraftOrderOut.from_entity(row) for row in rows or []]

        if not draft_orders:
            nodes = await self._fetch_all("draft orders", self.shopify.get_draft_orders_page)
            records = [parse_draft_order_node(node) for node in nodes]
            draft_orders = [DraftOrderOut.from_record(r) for r in records if r.customer_id == customer_id]

        return _filter_by_tags(draft_orders, include_tags, exclude_tags)

    async def filter_draft_orders(
        self,
        include_tags: Optional[List[str]] = None,
        exclude_tags: Optional[List[str]] = None,
    ) -> List[DraftOrderOut]:
        """All draft orders carrying every included tag and none of the excluded ones."""
        return _filter_by_tags(await self.list_draft_orders(), include_tags, exclude_tags, match_all=True)

    async def is_draft_order_completed(self, draft_order_id: str) -> bool:
        """Whether an order has been created from the draft order; always asks Shopify."""
        try:
            return await self.shopify.is_draft_order_completed(draft_order_id)
        except ShopifyError as e:
            if e.status_code == 404:
                raise NotFoundError(f"Draft order not found: {draft_order_id}")
            logger.error(f"Shopify completion check for {draft_order_id} failed: {e}")
            raise UpstreamServiceError("Failed to check draft order completion.")

    async def add_draft_order_tags(self, draft_order_id: str, tags: List[str]) -> DraftOrderOut:
        """
        Tag a draft order on Shopify and refresh the cached copy.

        The cache refresh is best-effort; the returned contract reflects the
        draft order as Shopify reports it after the mutation.
        """
        tags = sorted(_normalize_tags(tags))
        if not tags:
            raise ValidationError("At least one non-empty tag is required.", field="tags")

        try:
            await self.shopify.add_tags(draft_order_id, tags)
        except ShopifyUserError as e:
            raise ValidationError(str(e), field="tags", details={"user_errors": e.user_errors})
        except ShopifyError as e:
            logger.error(f"Tagging draft order {draft_order_id} failed: {e}")
            raise UpstreamServiceError("Failed to tag draft order.")

        node = await self._read_remote(
            f"draft order {draft_order_id}", lambda: self.shopify.get_draft_order(draft_order_id)
        )
        if node is None:
            raise NotFoundError(f"Draft order not found: {draft_order_id}")
        record: DraftOrderRecord = parse_draft_order_node(node)

        if self.draft_orders is not None:
            try:
                await self.draft_orders.upsert_from_upstream(record)
            except SQLAlchemyError as e:
                logger.warning(f"Cache refresh after tagging {draft_order_id} failed: {e}")

        logger.info(f"Tagged draft order {draft_order_id} with {', '.join(tags)}")
        return DraftOrderOut.from_record(record)
