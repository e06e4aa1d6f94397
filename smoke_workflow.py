#!/usr/bin/env python3
"""
Smoke script to exercise the order workflow against a running server.

Usage:
    python smoke_workflow.py <customer_id> <product_id> [admin_id]

Customers and products are created through the Django admin or shell.
"""
import json
import os
import sys

import requests

BASE_URL = os.environ.get("STOREFRONT_GRAPHQL_URL", "http://localhost:8000/graphql/")


def graphql(query, variables=None, user_id=None):
    """Execute GraphQL query."""
    payload = {"query": query}
    if variables:
        payload["variables"] = variables

    headers = {"X-User-ID": user_id} if user_id else {}
    response = requests.post(BASE_URL, json=payload, headers=headers, timeout=10)

    print(f"Status: {response.status_code}")
    print(f"Response: {json.dumps(response.json(), indent=2)}")
    return response.json()


def main():
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(2)

    customer_id, product_id = sys.argv[1], sys.argv[2]
    admin_id = sys.argv[3] if len(sys.argv) > 3 else None

    print("=" * 60)
    print("Storefront order workflow")
    print("=" * 60)

    print("\n[1] Product before ordering")
    graphql(
        "query Product($id: UUID!) { product(id: $id) { name price stockQuantity } }",
        {"id": product_id},
    )

    print("\n[2] Create order")
    result = graphql(
        """
        mutation CreateOrder($input: CreateOrderInput!) {
            createOrder(input: $input) { id status totalAmount }
        }
        """,
        {"input": {"items": [{"productId": product_id, "quantity": 1}]}},
        user_id=customer_id,
    )
    created = (result.get("data") or {}).get("createOrder")
    if not created:
        print("Order was not created, stopping")
        sys.exit(1)
    order_id = created["id"]

    if admin_id:
        print("\n[3] Confirm order as administrator")
        graphql(
            """
            mutation Update($orderId: UUID!, $status: String!) {
                updateOrderStatus(orderId: $orderId, status: $status) { id status }
            }
            """,
            {"orderId": order_id, "status": "CONFIRMED"},
            user_id=admin_id,
        )

    print("\n[4] Cancel order")
    graphql(
        "mutation Cancel($orderId: UUID!) { cancelOrder(orderId: $orderId) { orderId status } }",
        {"orderId": order_id},
        user_id=customer_id,
    )

    print("\n[5] Product after cancellation")
    graphql(
        "query Product($id: UUID!) { product(id: $id) { name stockQuantity } }",
        {"id": product_id},
    )

    if admin_id:
        print("\n[6] Order statistics")
        graphql(
            "{ orderStatistics { totalOrders totalRevenue byStatus { status count } } }",
            user_id=admin_id,
        )

    print("\n" + "=" * 60)
    print("Workflow completed")
    print("=" * 60)


if __name__ == "__main__":
    main()
