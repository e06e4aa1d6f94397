"""
GraphQL schema definition using Ariadne.
"""
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from uuid import UUID

from ariadne import (
    MutationType,
    ObjectType,
    QueryType,
    ScalarType,
    load_schema_from_path,
    make_executable_schema,
)
from django.utils import timezone

from shop.api.access import (
    get_caller,
    require_admin,
    require_owner_or_admin,
)
from shop.domain.exceptions import PermissionDenied
from shop.services import (
    CatalogService,
    OrderService,
    ReportingService,
)
from shop.services.orders import clamp_page

# Load schema from .graphql files
SCHEMAS_DIR = Path(__file__).parent / "schemas"
type_defs = "\n".join([
    load_schema_from_path(SCHEMAS_DIR / "common"),
    load_schema_from_path(SCHEMAS_DIR / "query"),
    load_schema_from_path(SCHEMAS_DIR / "mutation"),
])

query = QueryType()
mutation = MutationType()
order = ObjectType("Order")
order_statistics = ObjectType("OrderStatistics")


@query.field("me")
def resolve_me(_, info):
    return get_caller(info)


@query.field("order")
def resolve_order(_, info, id):
    """Resolve order query."""
    get_caller(info)
    found = OrderService().get_order(id)
    require_owner_or_admin(info, found.customer_id)
    return found


@query.field("orders")
def resolve_orders(_, info, limit=None, offset=None):
    require_admin(info)
    return OrderService().list_orders(limit=limit, offset=offset)


@query.field("ordersByCustomer")
def resolve_orders_by_customer(_, info, customer_id, limit=None, offset=None):
    """Resolve orders by customer query with pagination."""
    require_owner_or_admin(info, customer_id)
    return OrderService().get_orders_by_customer(customer_id, limit=limit, offset=offset)


@query.field("ordersByStatus")
def resolve_orders_by_status(_, info, status, limit=None, offset=None):
    require_admin(info)
    return OrderService().get_orders_by_status(status, limit=limit, offset=offset)


@query.field("ordersByDateRange")
def resolve_orders_by_date_range(_, info, start, end, limit=None, offset=None):
    require_admin(info)
    return OrderService().get_orders_by_date_range(start, end, limit=limit, offset=offset)


@query.field("orderStatistics")
def resolve_order_statistics(_, info):
    require_admin(info)
    return ReportingService().order_statistics()


@query.field("product")
def resolve_product(_, info, id):
    return CatalogService().get_product(id)


@query.field("products")
def resolve_products(_, info, category=None, search=None, limit=None, offset=None):
    limit, offset = clamp_page(limit, offset)
    products, total_count = CatalogService().list_products(
        category=category,
        search=search,
        limit=limit,
        offset=offset,
    )
    return {
        "items": products,
        "total_count": total_count,
        "limit": limit,
        "offset": offset,
    }


@query.field("lowStockProducts")
def resolve_low_stock_products(_, info, threshold=None):
    require_admin(info)
    return CatalogService().low_stock_products(threshold)


@mutation.field("createOrder")
def resolve_create_order(_, info, input: dict):
    """Resolve create order mutation.

    Customers order for themselves; administrators may name any customer.
    """
    caller = get_caller(info)
    customer_id = input.get("customer_id") or caller.id
    if customer_id != caller.id and not caller.is_admin:
        raise PermissionDenied("Customers can only place orders for themselves")

    items = [
        {"product_id": item["product_id"], "quantity": item["quantity"]}
        for item in input["items"]
    ]
    return OrderService().create_order(customer_id, items)


@mutation.field("updateOrderStatus")
def resolve_update_order_status(_, info, order_id, status):
    require_admin(info)
    return OrderService().update_order_status(order_id, status)


@mutation.field("cancelOrder")
def resolve_cancel_order(_, info, order_id):
    """Resolve cancel order mutation."""
    get_caller(info)
    service = OrderService()
    found = service.get_order(order_id)
    require_owner_or_admin(info, found.customer_id)
    cancelled = service.cancel_order(order_id)
    return {"order_id": cancelled.id, "status": cancelled.status.value}


@order.field("status")
def resolve_order_status(order_obj, info):
    return order_obj.status.value


@order_statistics.field("byStatus")
def resolve_by_status(stats, info):
    return [
        {"status": status.value, "count": count}
        for status, count in stats.by_status.items()
    ]


# Define custom scalars
decimal_scalar = ScalarType("Decimal")
uuid_scalar = ScalarType("UUID")
datetime_scalar = ScalarType("DateTime")


@decimal_scalar.serializer
def serialize_decimal(value):
    """Serialize Decimal to string."""
    return str(value)


@decimal_scalar.value_parser
def parse_decimal_value(value):
    """Parse Decimal from string."""
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid decimal: {value}") from None


@uuid_scalar.serializer
def serialize_uuid(value):
    """Serialize UUID to string."""
    return str(value)


@uuid_scalar.value_parser
def parse_uuid_value(value):
    """Parse UUID from string."""
    if isinstance(value, UUID):
        return value
    return UUID(str(value))


@datetime_scalar.serializer
def serialize_datetime(value):
    """Serialize DateTime to ISO format string."""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


@datetime_scalar.value_parser
def parse_datetime_value(value):
    """Parse DateTime from an ISO 8601 string; naive values use the default zone."""
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


# Create executable schema
schema = make_executable_schema(
    type_defs,
    query,
    mutation,
    order,
    order_statistics,
    datetime_scalar,
    decimal_scalar,
    uuid_scalar,
    convert_names_case=True,
)
