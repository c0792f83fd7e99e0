#!/usr/bin/env python3
"""
Backfill the local cache from Shopify.

Usage:
    python scripts/backfill.py customers
    python scripts/backfill.py draft-orders
    python scripts/backfill.py all --create-tables

Customers are synced before draft orders so draft orders can be linked to
their customers.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from shop_bff.core.config import settings  # noqa: E402
from shop_bff.core.logging import setup_logging  # noqa: E402
from shop_bff.db.session import create_engine_from_url, create_session_factory, init_models  # noqa: E402
from shop_bff.integrations.shopify.client import ShopifyClient  # noqa: E402
from shop_bff.integrations.shopify.models import ShopifyConfig  # noqa: E402
from shop_bff.repositories import CustomerRepository, DraftOrderRepository  # noqa: E402
from shop_bff.services.sync import backfill_customers, backfill_draft_orders  # noqa: E402
from shop_bff.utils.exceptions import UpstreamServiceError  # noqa: E402

ENTITIES = ("customers", "draft-orders", "all")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Backfill the local cache from Shopify.")
    parser.add_argument("entity", choices=ENTITIES, help="Entity family to backfill")
    parser.add_argument("--page-size", type=int, default=settings.sync_page_size,
                        help="Records per Shopify page (1-250)")
    parser.add_argument("--create-tables", action="store_true",
                        help="Create cache tables before syncing (development only)")
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    """Main function"""
    args = parse_args(argv)
    setup_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
    page_size = max(1, min(args.page_size, settings.SYNC_MAX_PAGE_SIZE))

    engine = create_engine_from_url(settings.DATABASE_URL, echo=settings.DB_ECHO)
    session_factory = create_session_factory(engine)
    config = ShopifyConfig(
        shop_domain=settings.SHOPIFY_SHOP_DOMAIN,
        access_token=settings.SHOPIFY_ACCESS_TOKEN,
        api_version=settings.SHOPIFY_API_VERSION,
        webhook_secret=settings.SHOPIFY_WEBHOOK_SECRET,
        timeout=settings.SHOPIFY_TIMEOUT,
    )

    exit_code = 0
    try:
        if args.create_tables:
            await init_models(engine)

        async with ShopifyClient(config) as client, session_factory() as session:
            results = []
            if args.entity in ("customers", "all"):
                results.append(await backfill_customers(client, CustomerRepository(session), page_size))
            if args.entity in ("draft-orders", "all"):
                results.append(await backfill_draft_orders(client, DraftOrderRepository(session), page_size))

        for result in results:
            logger.info(f"{result.entity}: total={result.total} failed={result.failed} pages={result.pages}")
            if result.failed:
                exit_code = 1
    except UpstreamServiceError as e:
        logger.error(f"Backfill aborted: {e.message}")
        exit_code = 2
    finally:
        await engine.dispose()

    return exit_code


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
