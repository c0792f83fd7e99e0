"""
Tests for the GraphQL query builder.
"""

import pytest

from shop_bff.integrations.shopify.graphql_queries import GraphQLQueryBuilder


def test_customers_query_declares_pagination_variables():
    query, variables = GraphQLQueryBuilder.get_customers_query(first=25)

    assert query.startswith("query GetCustomers($first: Int!, $after: String)")
    assert "customers(first: $first, after: $after)" in query
    assert "hasNextPage" in query and "endCursor" in query
    assert variables == {"first": 25, "after": None}


def test_draft_orders_query_passes_cursor():
    query, variables = GraphQLQueryBuilder.get_draft_orders_query(first=10, after="abc")

    assert "draftOrders(first: $first, after: $after)" in query
    assert "lineItems(first: 50)" in query
    assert variables == {"first": 10, "after": "abc"}


def test_add_tags_mutation():
    query, variables = GraphQLQueryBuilder.add_tags_mutation("gid://shopify/DraftOrder/1", ["rush"])

    assert query.startswith("mutation AddTags($id: ID!, $tags: [String!]!)")
    assert "tagsAdd(id: $id, tags: $tags)" in query
    assert "userErrors" in query
    assert variables == {"id": "gid://shopify/DraftOrder/1", "tags": ["rush"]}


def test_literal_arguments_are_escaped():
    builder = GraphQLQueryBuilder().query()
    builder.nested("products", query='title:"x"').field("id").end_nested()

    assert 'products(query: "title:\\"x\\"")' in builder.build()


def test_unbalanced_blocks_are_rejected():
    builder = GraphQLQueryBuilder().query()
    builder.nested("customers")
    with pytest.raises(ValueError):
        builder.build()
    with pytest.raises(ValueError):
        GraphQLQueryBuilder().end_nested()
