"""
Read-only order reporting.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from shop.domain.order import OrderStatus
from shop.infra.repositories import OrderRepository

# Statuses whose totals never count as revenue.
NON_REVENUE_STATUSES = (OrderStatus.CANCELLED,)


@dataclass(frozen=True)
class OrderStatistics:
    total_orders: int
    by_status: dict[OrderStatus, int]
    total_revenue: Decimal


class ReportingService:
    """Aggregates over the order store."""

    def __init__(self, order_repo: OrderRepository | None = None):
        self.order_repo = order_repo or OrderRepository()

    def total_revenue(self) -> Decimal:
        """Sum of ``total_amount`` over every order that is not cancelled."""
        return self.order_repo.sum_total_amount(exclude=NON_REVENUE_STATUSES)

    def count_by_status(self) -> dict[OrderStatus, int]:
        return self.order_repo.count_by_status()

    def order_statistics(self) -> OrderStatistics:
        by_status = self.count_by_status()
        return OrderStatistics(
            total_orders=sum(by_status.values()),
            by_status=by_status,
            total_revenue=self.total_revenue(),
        )
