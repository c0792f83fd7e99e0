"""
GraphQL query builder for Shopify API.

Values always travel as variables; only structural arguments such as nested
connection sizes are inlined.
"""

from typing import List, Optional, Dict, Any, Tuple
from enum import Enum

CONNECTION_LINE_ITEMS = 50


class QueryType(Enum):
    """GraphQL query types."""
    QUERY = "query"
    MUTATION = "mutation"


class GraphQLQueryBuilder:
    """Builder for creating GraphQL queries for Shopify API."""

    def __init__(self):
        self._query_parts: List[str] = []
        self._variables: Dict[str, Any] = {}
        self._variable_types: Dict[str, str] = {}
        self._current_query_type = QueryType.QUERY
        self._query_name: Optional[str] = None
        self._depth = 0

    def query(self, name: str = None) -> 'GraphQLQueryBuilder':
        """Start a new query."""
        self._current_query_type = QueryType.QUERY
        self._query_name = name
        return self

    def mutation(self, name: str = None) -> 'GraphQLQueryBuilder':
        """Start a new mutation."""
        self._current_query_type = QueryType.MUTATION
        self._query_name = name
        return self

    def field(self, name: str, alias: str = None, **kwargs) -> 'GraphQLQueryBuilder':
        """
        Add a field to the current selection.

        Keyword arguments become field arguments. Strings starting with ``$``
        reference declared variables; ``None`` arguments are dropped.
        """
        field_str = f"{alias}: {name}" if alias else name

        args = []
        for key, value in kwargs.items():
            if value is None:
                continue
            if isinstance(value, str) and value.startswith("$"):
                args.append(f"{key}: {value}")
            else:
                args.append(f"{key}: {self._format_value(value)}")
        if args:
            field_str += f"({', '.join(args)})"

        self._query_parts.append(field_str)
        return self

    def fields(self, *field_names: str) -> 'GraphQLQueryBuilder':
        """Add multiple fields to the current selection."""
        for field_name in field_names:
            self.field(field_name)
        return self

    def nested(self, name: str, alias: str = None, **kwargs) -> 'GraphQLQueryBuilder':
        """Start a nested field block."""
        self.field(name, alias, **kwargs)
        self._query_parts.append("{")
        self._depth += 1
        return self

    def end_nested(self) -> 'GraphQLQueryBuilder':
        """End a nested field block."""
        if self._depth == 0:
            raise ValueError("end_nested() called without an open block")
        self._query_parts.append("}")
        self._depth -= 1
        return self

    def page_info(self) -> 'GraphQLQueryBuilder':
        """Add the cursor pagination block."""
        return self.nested("pageInfo").fields("hasNextPage", "endCursor").end_nested()

    def variable(self, name: str, value: Any, type_hint: str = None) -> 'GraphQLQueryBuilder':
        """Add a variable to the query."""
        self._variables[name] = value
        if type_hint:
            self._variable_types[name] = type_hint
        elif isinstance(value, bool):
            self._variable_types[name] = "Boolean!"
        elif isinstance(value, int):
            self._variable_types[name] = "Int!"
        elif isinstance(value, list):
            self._variable_types[name] = "[String!]!"
        else:
            self._variable_types[name] = "String!"
        return self

    def build(self) -> str:
        """Build the final GraphQL query string."""
        if self._depth != 0:
            raise ValueError(f"{self._depth} nested block(s) left open")

        query_str = self._current_query_type.value
        if self._query_name:
            query_str += f" {self._query_name}"

        if self._variables:
            var_declarations = [
                f"${name}: {self._variable_types.get(name, 'String!')}"
                for name in self._variables
            ]
            query_str += f"({', '.join(var_declarations)})"

        query_str += " {\n    "
        query_str += "\n    ".join(self._query_parts)
        query_str += "\n}"
        return query_str

    def get_variables(self) -> Dict[str, Any]:
        """Get the variables dictionary for this query."""
        return self._variables.copy()

    def _format_value(self, value: Any) -> str:
        """Format a literal value for a GraphQL query."""
        if isinstance(value, str):
            escaped = value.replace("\\", "\\\\").replace('"', '\\"')
            return f'"{escaped}"'
        elif isinstance(value, bool):
            return "true" if value else "false"
        elif isinstance(value, (int, float)):
            return str(value)
        elif isinstance(value, list):
            return f"[{', '.join(self._format_value(item) for item in value)}]"
        elif isinstance(value, dict):
            formatted_items = [f"{k}: {self._format_value(v)}" for k, v in value.items()]
            return f"{{{', '.join(formatted_items)}}}"
        elif value is None:
            return "null"
        return self._format_value(str(value))

    # Selection sets

    def _address_fields(self, name: str) -> 'GraphQLQueryBuilder':
        return self.nested(name).fields(
            "address1", "address2", "city", "province", "zip", "country", "countryCodeV2"
        ).end_nested()

    def _customer_fields(self) -> 'GraphQLQueryBuilder':
        self.fields("id", "firstName", "lastName", "email", "tags")
        self._address_fields("defaultAddress")
        self.nested("companyContactProfiles")
        self.nested("company").fields("id", "name").end_nested()
        self.end_nested()  # companyContactProfiles
        return self

    def _draft_order_fields(self) -> 'GraphQLQueryBuilder':
        self.fields(
            "id", "name", "note2", "status", "invoiceUrl", "createdAt", "completedAt", "tags"
        )
        self.nested("customer").field("id").end_nested()
        self._address_fields("shippingAddress")

        self.nested("shippingLine").fields("title", "code")
        self.nested("originalPriceSet").nested("shopMoney").fields("amount", "currencyCode").end_nested().end_nested()
        self.end_nested()  # shippingLine

        self.nested("lineItems", first=CONNECTION_LINE_ITEMS)
        self.nested("edges").nested("node")
        self.fields("title", "quantity", "variantTitle")
        self.nested("appliedDiscount").fields("title", "value", "valueType")
        self.nested("amountSet").nested("shopMoney").fields("amount", "currencyCode").end_nested().end_nested()
        self.end_nested()  # appliedDiscount
        self.nested("variant").fields("id", "title", "price").end_nested()
        self.end_nested()  # node
        self.end_nested()  # edges
        self.end_nested()  # lineItems
        return self

    # Queries

    @classmethod
    def get_customers_query(cls, first: int = 50, after: Optional[str] = None) -> Tuple[str, Dict[str, Any]]:
        """Get a page of customers."""
        builder = cls()
        builder.query("GetCustomers")
        builder.variable("first", first, "Int!")
        builder.variable("after", after, "String")

        builder.nested("customers", first="$first", after="$after")
        builder.nested("edges").field("cursor").nested("node")
        builder._customer_fields()
        builder.end_nested()  # node
        builder.end_nested()  # edges
        builder.page_info()
        builder.end_nested()  # customers

        return builder.build(), builder.get_variables()

    @classmethod
    def get_customer_by_id_query(cls, customer_id: str) -> Tuple[str, Dict[str, Any]]:
        """Get a single customer."""
        builder = cls()
        builder.query("GetCustomer")
        builder.variable("id", customer_id, "ID!")
        builder.nested("customer", id="$id")
        builder._customer_fields()
        builder.end_nested()
        return builder.build(), builder.get_variables()

    @classmethod
    def get_draft_orders_query(cls, first: int = 50, after: Optional[str] = None) -> Tuple[str, Dict[str, Any]]:
        """Get a page of draft orders."""
        builder = cls()
        builder.query("GetDraftOrders")
        builder.variable("first", first, "Int!")
        builder.variable("after", after, "String")

        builder.nested("draftOrders", first="$first", after="$after")
        builder.nested("edges").field("cursor").nested("node")
        builder._draft_order_fields()
        builder.end_nested()  # node
        builder.end_nested()  # edges
        builder.page_info()
        builder.end_nested()  # draftOrders

        return builder.build(), builder.get_variables()

    @classmethod
    def get_draft_order_by_id_query(cls, draft_order_id: str) -> Tuple[str, Dict[str, Any]]:
        """Get a single draft order."""
        builder = cls()
        builder.query("GetDraftOrder")
        builder.variable("id", draft_order_id, "ID!")
        builder.nested("draftOrder", id="$id")
        builder._draft_order_fields()
        builder.end_nested()
        return builder.build(), builder.get_variables()

    @classmethod
    def get_draft_order_completion_query(cls, draft_order_id: str) -> Tuple[str, Dict[str, Any]]:
        """A draft order is completed once an order has been created from it."""
        builder = cls()
        builder.query("GetDraftOrderCompletion")
        builder.variable("id", draft_order_id, "ID!")
        builder.nested("draftOrder", id="$id")
        builder.field("id")
        builder.nested("order").field("id").end_nested()
        builder.end_nested()
        return builder.build(), builder.get_variables()

    @classmethod
    def add_tags_mutation(cls, resource_id: str, tags: List[str]) -> Tuple[str, Dict[str, Any]]:
        """Add tags to any taggable resource."""
        builder = cls()
        builder.mutation("AddTags")
        builder.variable("id", resource_id, "ID!")
        builder.variable("tags", tags, "[String!]!")
        builder.nested("tagsAdd", id="$id", tags="$tags")
        builder.nested("node").field("id").end_nested()
        builder.nested("userErrors").fields("field", "message").end_nested()
        builder.end_nested()
        return builder.build(), builder.get_variables()
