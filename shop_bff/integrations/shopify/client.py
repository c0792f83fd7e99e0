"""
Shopify API client for making GraphQL and REST API calls.
"""

from typing import Dict, Any, Optional, List

import httpx
from loguru import logger

from .models import ShopifyConfig, ShopifyError
from .graphql_queries import GraphQLQueryBuilder
from .exceptions import (
    shopify_error_from_response,
    shopify_graphql_error_from_response,
    shopify_user_error_from_payload,
    ShopifyTimeoutError,
    ShopifyConnectionError
)


class ShopifyClient:
    """Client for interacting with Shopify's Admin GraphQL and REST APIs.

    The client is an explicit value: callers build a ShopifyConfig and pass
    it in, and own the client's lifetime (``async with`` or ``close()``).
    """

    def __init__(self, config: ShopifyConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize the Shopify client."""
        if not config.shop_domain:
            raise ShopifyError("Shop domain is required")
        if not config.access_token:
            raise ShopifyError("Access token is required")

        self.config = config
        self.rest_url = config.admin_base_url
        self.graphql_url = f"{self.rest_url}/graphql.json"

        self.client = httpx.AsyncClient(
            base_url=self.rest_url,
            headers={
                "X-Shopify-Access-Token": config.access_token,
                "Content-Type": "application/json",
                "User-Agent": "ShopBFF/1.0"
            },
            timeout=config.timeout,
            transport=transport,
        )

        logger.info(f"Initialized Shopify client for domain: {config.shop_domain}")

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    @staticmethod
    def _retry_after(response: httpx.Response) -> Optional[float]:
        value = response.headers.get("Retry-After")
        try:
            return float(value) if value is not None else None
        except ValueError:
            return None

    @staticmethod
    def _error_body(response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            return {"response": response.text}
        return data if isinstance(data, dict) else {"response": data}

    async def graphql(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Make a GraphQL request to Shopify.

        Returns the ``data`` member of the response. HTTP failures, transport
        failures and top-level GraphQL ``errors`` raise ShopifyError subclasses.
        """
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        try:
            logger.debug(f"Making GraphQL request to {self.graphql_url}")
            response = await self.client.post(self.graphql_url, json=payload)
        except httpx.TimeoutException as e:
            logger.error(f"Timeout during GraphQL request: {e}")
            raise ShopifyTimeoutError(f"Request timeout: {str(e)}", timeout=self.config.timeout)
        except httpx.ConnectError as e:
            logger.error(f"Connection error during GraphQL request: {e}")
            raise ShopifyConnectionError(f"Connection failed: {str(e)}")
        except httpx.RequestError as e:
            logger.error(f"Network error during GraphQL request: {e}")
            raise ShopifyError(f"Network error: {str(e)}")

        if response.status_code != 200:
            logger.error(f"GraphQL request failed: {response.status_code} - {response.text}")
            raise shopify_error_from_response(
                response.status_code, self._error_body(response), self._retry_after(response)
            )

        data = response.json()
        if data.get("errors"):
            logger.error(f"GraphQL errors: {data['errors']}")
            raise shopify_graphql_error_from_response(data["errors"])
        return data.get("data") or {}

    async def rest(self, method: str, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Make a REST API request to Shopify."""
        url = f"{self.rest_url}/{endpoint.lstrip('/')}"

        try:
            logger.debug(f"Making {method} request to {url}")
            response = await self.client.request(method, url, json=data)
        except httpx.TimeoutException as e:
            logger.error(f"Timeout during REST request: {e}")
            raise ShopifyTimeoutError(f"Request timeout: {str(e)}", timeout=self.config.timeout)
        except httpx.ConnectError as e:
            logger.error(f"Connection error during REST request: {e}")
            raise ShopifyConnectionError(f"Connection failed: {str(e)}")
        except httpx.RequestError as e:
            logger.error(f"Network error during REST request: {e}")
            raise ShopifyError(f"Network error: {str(e)}")

        if response.status_code == 204:
            return {}
        if response.status_code in (200, 201):
            return response.json()

        logger.error(f"REST request failed: {response.status_code} - {response.text}")
        raise shopify_error_from_response(
            response.status_code, self._error_body(response), self._retry_after(response)
        )

    # Customer Methods

    async def get_customers_page(self, first: int = 50, after: Optional[str] = None) -> Dict[str, Any]:
        """Get one page of the customers connection."""
        query, variables = GraphQLQueryBuilder.get_customers_query(first=first, after=after)
        data = await self.graphql(query, variables)
        return data.get("customers") or {"edges": [], "pageInfo": {"hasNextPage": False, "endCursor": None}}

    async def get_customer(self, customer_id: str) -> Optional[Dict[str, Any]]:
        """Get a customer node by gid, or None when it does not exist."""
        query, variables = GraphQLQueryBuilder.get_customer_by_id_query(customer_id)
        data = await self.graphql(query, variables)
        return data.get("customer")

    # Draft Order Methods

    async def get_draft_orders_page(self, first: int = 50, after: Optional[str] = None) -> Dict[str, Any]:
        """Get one page of the draft orders connection."""
        query, variables = GraphQLQueryBuilder.get_draft_orders_query(first=first, after=after)
        data = await self.graphql(query, variables)
        return data.get("draftOrders") or {"edges": [], "pageInfo": {"hasNextPage": False, "endCursor": None}}

    async def get_draft_order(self, draft_order_id: str) -> Optional[Dict[str, Any]]:
        """Get a draft order node by gid, or None when it does not exist."""
        query, variables = GraphQLQueryBuilder.get_draft_order_by_id_query(draft_order_id)
        data = await self.graphql(query, variables)
        return data.get("draftOrder")

    async def is_draft_order_completed(self, draft_order_id: str) -> bool:
        """Check whether an order has been created from the draft order."""
        query, variables = GraphQLQueryBuilder.get_draft_order_completion_query(draft_order_id)
        data = await self.graphql(query, variables)
        draft_order = data.get("draftOrder")
        if draft_order is None:
            raise ShopifyError(f"Draft order not found: {draft_order_id}", 404)
        return draft_order.get("order") is not None

    async def add_tags(self, resource_id: str, tags: List[str]) -> None:
        """Add tags to a resource, raising ShopifyUserError on userErrors."""
        query, variables = GraphQLQueryBuilder.add_tags_mutation(resource_id, tags)
        data = await self.graphql(query, variables)
        result = data.get("tagsAdd") or {}
        if result.get("userErrors"):
            raise shopify_user_error_from_payload(result["userErrors"])

    # Shop Information

    async def get_shop_info(self) -> Dict[str, Any]:
        """Get general shop information."""
        return await self.rest("GET", "shop.json")

    async def health_check(self) -> bool:
        """Check if the Shopify API is accessible."""
        try:
            await self.get_shop_info()
            return True
        except ShopifyError as e:
            logger.error(f"Shopify health check failed: {e}")
            return False
