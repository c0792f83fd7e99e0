"""
Backfill routines: full paginated re-syncs from Shopify into the local cache.

Each run pages through a connection sequentially, upserting every record of
a page before asking for the next one. Re-running is safe because upserts
are keyed on the Shopify gid; rows that vanished upstream are left in place.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from loguru import logger

from shop_bff.integrations.shopify.client import ShopifyClient
from shop_bff.integrations.shopify.models import ShopifyError
from shop_bff.integrations.shopify.parsers import parse_customer_node, parse_draft_order_node
from shop_bff.repositories import CustomerRepository, DraftOrderRepository
from shop_bff.utils.exceptions import UpstreamServiceError

FetchPage = Callable[[int, Optional[str]], Awaitable[Dict[str, Any]]]


@dataclass
class SyncResult:
    """Outcome of one backfill run."""
    entity: str
    processed: int = 0
    failed: int = 0
    pages: int = 0
    failed_ids: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def total(self) -> int:
        """Records successfully written to the cache."""
        return self.processed


async def _backfill(
    entity: str,
    fetch_page: FetchPage,
    map_node: Callable[[Dict[str, Any]], Any],
    upsert: Callable[[Any], Awaitable[Any]],
    page_size: int,
) -> SyncResult:
    result = SyncResult(entity=entity)
    started = time.monotonic()
    cursor: Optional[str] = None

    logger.info(f"Starting {entity} backfill (page size {page_size})")
    while True:
        try:
            connection = await fetch_page(page_size, cursor)
        except ShopifyError as e:
            logger.error(f"{entity} backfill aborted on page {result.pages + 1}: {e}")
            raise UpstreamServiceError(f"Failed to fetch {entity} from Shopify.", details={
                "pages": result.pages, "processed": result.processed,
            })
        result.pages += 1

        for edge in connection.get("edges", []):
            node = edge.get("node") or {}
            try:
                await upsert(map_node(node))
                result.processed += 1
            except Exception as e:
                result.failed += 1
                result.failed_ids.append(str(node.get("id")))
                logger.warning(f"Skipping {entity} record {node.get('id')}: {e}")

        page_info = connection.get("pageInfo") or {}
        if not page_info.get("hasNextPage"):
            break
        cursor = page_info.get("endCursor")
        if cursor is None:
            logger.warning(f"{entity} backfill: hasNextPage without endCursor, stopping")
            break

    result.duration_seconds = time.monotonic() - started
    logger.info(
        f"Finished {entity} backfill: {result.processed} processed, "
        f"{result.failed} failed, {result.pages} page(s) in {result.duration_seconds:.2f}s"
    )
    return result


async def backfill_customers(
    client: ShopifyClient,
    repository: CustomerRepository,
    page_size: int = 50,
) -> SyncResult:
    """Page through all customers and upsert each into the cache."""
    return await _backfill(
        "customers",
        lambda first, after: client.get_customers_page(first=first, after=after),
        parse_customer_node,
        repository.upsert_from_upstream,
        page_size,
    )


async def backfill_draft_orders(
    client: ShopifyClient,
    repository: DraftOrderRepository,
    page_size: int = 50,
) -> SyncResult:
    """Page through all draft orders and upsert each into the cache.

    Run the customer backfill first so draft orders can link to their customers.
    """
    return await _backfill(
        "draft_orders",
        lambda first, after: client.get_draft_orders_page(first=first, after=after),
        parse_draft_order_node,
        repository.upsert_from_upstream,
        page_size,
    )
