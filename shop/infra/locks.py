"""
Row-level locks for inventory and order updates.
"""
from __future__ import annotations

from typing import Iterable
from uuid import UUID

from django.db import transaction

from shop.infra.models import OrderORM, ProductORM


def lock_products(product_ids: Iterable[UUID]) -> dict[UUID, ProductORM]:
    """
    Lock product rows for the rest of the current transaction.

    Rows are locked in primary-key order so two orders touching the same
    products in a different sequence cannot deadlock. Must run inside
    ``transaction.atomic``; the locks are released on commit or rollback.

    Usage:
        with transaction.atomic():
            products = lock_products(ids)
            # read-modify-write stock_quantity
    """
    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError("lock_products() requires an active transaction")

    ids = sorted(set(product_ids), key=str)
    rows = ProductORM.objects.select_for_update().filter(id__in=ids).order_by("id")
    return {row.id: row for row in rows}


def lock_order(order_id: UUID) -> OrderORM | None:
    """Lock a single order row; returns None when it does not exist."""
    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError("lock_order() requires an active transaction")

    return OrderORM.objects.select_for_update().filter(id=order_id).first()
