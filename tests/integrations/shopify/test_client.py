"""
Tests for the Shopify client against a mocked transport.
"""

import json

import httpx
import pytest

from shop_bff.integrations.shopify.client import ShopifyClient
from shop_bff.integrations.shopify.exceptions import (
    ShopifyAuthenticationError,
    ShopifyConnectionError,
    ShopifyGraphQLError,
    ShopifyRateLimitError,
    ShopifyUserError,
)
from shop_bff.integrations.shopify.models import ShopifyConfig, ShopifyError
from tests.factories import connection, customer_node


@pytest.fixture
def config():
    return ShopifyConfig(shop_domain="test-shop", access_token="shpat_test", api_version="2024-01")


def make_client(config, handler) -> ShopifyClient:
    return ShopifyClient(config, transport=httpx.MockTransport(handler))


def test_config_builds_admin_url(config):
    assert config.admin_base_url == "https://test-shop.myshopify.com/admin/api/2024-01"
    assert ShopifyConfig(shop_domain="x.myshopify.com", access_token="t").admin_base_url.startswith(
        "https://x.myshopify.com/"
    )


def test_client_requires_credentials():
    with pytest.raises(ShopifyError):
        ShopifyClient(ShopifyConfig(shop_domain="", access_token="t"))
    with pytest.raises(ShopifyError):
        ShopifyClient(ShopifyConfig(shop_domain="test-shop", access_token=""))


@pytest.mark.asyncio
async def test_get_customers_page_sends_token_and_variables(config):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["token"] = request.headers["X-Shopify-Access-Token"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"data": {"customers": connection([customer_node(1)], True, "cur1")}})

    async with make_client(config, handler) as client:
        page = await client.get_customers_page(first=5, after="cur0")

    assert seen["url"] == "https://test-shop.myshopify.com/admin/api/2024-01/graphql.json"
    assert seen["token"] == "shpat_test"
    assert seen["body"]["variables"] == {"first": 5, "after": "cur0"}
    assert page["pageInfo"] == {"hasNextPage": True, "endCursor": "cur1"}
    assert page["edges"][0]["node"]["id"] == "gid://shopify/Customer/1"


@pytest.mark.asyncio
async def test_missing_node_returns_none(config):
    def handler(request):
        return httpx.Response(200, json={"data": {"draftOrder": None}})

    async with make_client(config, handler) as client:
        assert await client.get_draft_order("gid://shopify/DraftOrder/404") is None


@pytest.mark.asyncio
async def test_http_errors_map_to_typed_errors(config):
    def handler(request):
        return httpx.Response(401, json={"errors": "Invalid API key or access token"})

    async with make_client(config, handler) as client:
        with pytest.raises(ShopifyAuthenticationError) as exc_info:
            await client.get_customer("gid://shopify/Customer/1")

    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_rate_limit_carries_retry_after(config):
    def handler(request):
        return httpx.Response(429, headers={"Retry-After": "2.0"}, json={"errors": "Throttled"})

    async with make_client(config, handler) as client:
        with pytest.raises(ShopifyRateLimitError) as exc_info:
            await client.get_customers_page()

    assert exc_info.value.retry_after == 2.0


@pytest.mark.asyncio
async def test_graphql_errors(config):
    def handler(request):
        return httpx.Response(200, json={"errors": [{"message": "Field 'x' doesn't exist"}]})

    async with make_client(config, handler) as client:
        with pytest.raises(ShopifyGraphQLError):
            await client.get_draft_orders_page()


@pytest.mark.asyncio
async def test_throttled_graphql_error_is_rate_limit(config):
    def handler(request):
        return httpx.Response(200, json={"errors": [{"message": "Throttled", "extensions": {"code": "THROTTLED"}}]})

    async with make_client(config, handler) as client:
        with pytest.raises(ShopifyRateLimitError):
            await client.get_draft_orders_page()


@pytest.mark.asyncio
async def test_connection_failure(config):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    async with make_client(config, handler) as client:
        with pytest.raises(ShopifyConnectionError):
            await client.get_customers_page()


@pytest.mark.asyncio
async def test_is_draft_order_completed(config):
    responses = iter([
        {"data": {"draftOrder": {"id": "gid://shopify/DraftOrder/1", "order": {"id": "gid://shopify/Order/5"}}}},
        {"data": {"draftOrder": {"id": "gid://shopify/DraftOrder/2", "order": None}}},
        {"data": {"draftOrder": None}},
    ])

    def handler(request):
        return httpx.Response(200, json=next(responses))

    async with make_client(config, handler) as client:
        assert await client.is_draft_order_completed("gid://shopify/DraftOrder/1") is True
        assert await client.is_draft_order_completed("gid://shopify/DraftOrder/2") is False
        with pytest.raises(ShopifyError) as exc_info:
            await client.is_draft_order_completed("gid://shopify/DraftOrder/3")

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_add_tags_user_errors(config):
    def handler(request):
        return httpx.Response(200, json={"data": {"tagsAdd": {
            "node": None,
            "userErrors": [{"field": ["id"], "message": "Resource not found"}],
        }}})

    async with make_client(config, handler) as client:
        with pytest.raises(ShopifyUserError) as exc_info:
            await client.add_tags("gid://shopify/DraftOrder/1", ["rush"])

    assert "id: Resource not found" in str(exc_info.value)


@pytest.mark.asyncio
async def test_health_check(config):
    def handler(request):
        if request.url.path.endswith("shop.json"):
            return httpx.Response(200, json={"shop": {"name": "Test Shop"}})
        return httpx.Response(404)

    async with make_client(config, handler) as client:
        assert await client.health_check() is True
