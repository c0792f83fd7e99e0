"""
Tests for settings and the error response mapping.
"""

import json

import pytest

from shop_bff.core.config import Settings
from shop_bff.utils.error_handlers import shop_bff_exception_handler
from shop_bff.utils.exceptions import CacheUnavailableError, NotFoundError, UpstreamServiceError


def test_sync_page_size_is_clamped():
    assert Settings(SYNC_PAGE_SIZE=1000).sync_page_size == 250
    assert Settings(SYNC_PAGE_SIZE=0).sync_page_size == 1
    assert Settings(SYNC_PAGE_SIZE=75).sync_page_size == 75


def test_allowed_hosts_list():
    assert Settings(ALLOWED_HOSTS="*").allowed_hosts_list == ["*"]
    assert Settings(ALLOWED_HOSTS="https://a.test, https://b.test").allowed_hosts_list == [
        "https://a.test", "https://b.test",
    ]


class _Request:
    method = "GET"

    class url:
        path = "/api/v1/customers/1"


@pytest.mark.asyncio
@pytest.mark.parametrize("exc, status", [
    (NotFoundError("Customer not found"), 404),
    (UpstreamServiceError("Shopify is down"), 502),
    (CacheUnavailableError(), 503),
])
async def test_domain_errors_map_to_status(exc, status):
    response = await shop_bff_exception_handler(_Request(), exc)

    assert response.status_code == status
    assert json.loads(response.body)["error_code"] == exc.error_code
