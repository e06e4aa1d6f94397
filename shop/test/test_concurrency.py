"""
Concurrency tests: competing orders and cancellations on shared stock.

These run in real transactions from several threads, so they use
TransactionTestCase and every worker closes its own connection.
"""
import threading

from django.db import connection
from django.test import TransactionTestCase

from shop.domain.exceptions import InsufficientStock, NotCancellable
from shop.infra.models import OrderORM
from shop.services import OrderService
from shop.test.helpers import make_customer, make_product, stock_of


def run_concurrently(target, arguments):
    """Run ``target`` once per argument on its own thread, released together."""
    barrier = threading.Barrier(len(arguments))
    results = []
    lock = threading.Lock()

    def worker(argument):
        try:
            barrier.wait()
            try:
                outcome = target(argument)
            except Exception as exc:
                outcome = exc
            with lock:
                results.append(outcome)
        finally:
            connection.close()

    threads = [threading.Thread(target=worker, args=(argument,)) for argument in arguments]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return results


class ConcurrentOrderTest(TransactionTestCase):
    """No oversell when orders race for the same product."""

    def test_parallel_orders_never_oversell(self):
        service = OrderService()
        product = make_product(name="Limited", price="20.00", stock=5)
        customers = [make_customer() for _ in range(10)]

        results = run_concurrently(
            lambda customer_id: service.create_order(
                customer_id, [{"product_id": product.id, "quantity": 1}]
            ),
            customers,
        )

        failures = [result for result in results if isinstance(result, Exception)]
        successes = [result for result in results if not isinstance(result, Exception)]
        self.assertEqual(len(successes), 5)
        self.assertEqual(len(failures), 5)
        for failure in failures:
            self.assertIsInstance(failure, InsufficientStock)
        self.assertEqual(stock_of(product), 0)
        self.assertEqual(OrderORM.objects.count(), 5)

    def test_parallel_orders_on_overlapping_products(self):
        service = OrderService()
        first = make_product(name="First", stock=6)
        second = make_product(name="Second", stock=6)
        customer_id = make_customer()
        # opposite line order on purpose: locking must not deadlock
        baskets = [
            [{"product_id": first.id, "quantity": 1}, {"product_id": second.id, "quantity": 1}],
            [{"product_id": second.id, "quantity": 1}, {"product_id": first.id, "quantity": 1}],
        ] * 4

        results = run_concurrently(
            lambda items: service.create_order(customer_id, items),
            baskets,
        )

        failures = [result for result in results if isinstance(result, Exception)]
        self.assertEqual(len(results) - len(failures), 6)
        for failure in failures:
            self.assertIsInstance(failure, InsufficientStock)
        self.assertEqual(stock_of(first), 0)
        self.assertEqual(stock_of(second), 0)


class ConcurrentCancelTest(TransactionTestCase):
    """Stock is restored exactly once when cancellations race."""

    def test_parallel_cancellations_restore_stock_once(self):
        service = OrderService()
        product = make_product(stock=10)
        order = service.create_order(make_customer(), [{"product_id": product.id, "quantity": 4}])

        results = run_concurrently(lambda _: service.cancel_order(order.id), range(4))

        failures = [result for result in results if isinstance(result, Exception)]
        self.assertEqual(len(results) - len(failures), 1)
        for failure in failures:
            self.assertIsInstance(failure, NotCancellable)
        self.assertEqual(stock_of(product), 10)
        self.assertEqual(OrderORM.objects.get(id=order.id).status, "CANCELLED")
