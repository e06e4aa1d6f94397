"""
Tests for storage invariants and validation.
"""
from decimal import Decimal
from uuid import uuid4

from django.db import IntegrityError, transaction
from django.test import TestCase
from django.utils import timezone

from shop.domain.order import Order
from shop.infra.locks import lock_products
from shop.infra.models import OrderItemORM, OrderORM, ProductORM
from shop.infra.repositories import OrderRepository, ProductRepository
from shop.test.helpers import make_customer, make_product


class OrderStorageInvariantTest(TestCase):
    """Tests for order persistence invariants."""

    def setUp(self):
        self.repo = OrderRepository()
        self.customer_id = make_customer()
        self.product = make_product(price="4.20", stock=10)

    def test_empty_order_cannot_be_saved(self):
        """Test that an order without items is rejected."""
        with self.assertRaises(ValueError) as context:
            self.repo.save(Order(customer_id=self.customer_id))
        self.assertIn("no items", str(context.exception))

    def test_unplaced_order_cannot_be_saved(self):
        order = Order(customer_id=self.customer_id)
        order.add_item(self.product.id, self.product.name, quantity=1, unit_price=self.product.price)

        with self.assertRaises(ValueError) as context:
            self.repo.save(order)
        self.assertIn("has not been placed", str(context.exception))

    def test_saved_order_round_trips_its_lines(self):
        order = Order(customer_id=self.customer_id)
        order.add_item(self.product.id, self.product.name, quantity=3, unit_price=Decimal("4.20"))
        order.place(timezone.now())
        self.repo.save(order)

        loaded = self.repo.get_by_id(order.id)
        self.assertEqual(loaded.total_amount, Decimal("12.60"))
        self.assertEqual(loaded.items[0].id, order.items[0].id)
        self.assertTrue(loaded.is_placed)

    def test_status_change_does_not_rewrite_lines(self):
        order = Order(customer_id=self.customer_id)
        order.add_item(self.product.id, self.product.name, quantity=1, unit_price=Decimal("4.20"))
        order.place(timezone.now())
        self.repo.save(order)

        order.confirm()
        self.repo.save(order)

        self.assertEqual(OrderItemORM.objects.filter(order_id=order.id).count(), 1)
        self.assertEqual(OrderORM.objects.get(id=order.id).status, "CONFIRMED")

    def test_item_subtotal_follows_quantity_and_price(self):
        order = Order(customer_id=self.customer_id)
        order.add_item(self.product.id, self.product.name, quantity=1, unit_price=Decimal("4.20"))
        order.place(timezone.now())
        self.repo.save(order)

        item = OrderItemORM.objects.get(order_id=order.id)
        item.quantity = 5
        item.subtotal = Decimal("0.01")
        item.save()

        item.refresh_from_db()
        self.assertEqual(item.subtotal, Decimal("21.00"))

    def test_database_rejects_zero_quantity_lines(self):
        order = Order(customer_id=self.customer_id)
        order.add_item(self.product.id, self.product.name, quantity=1, unit_price=Decimal("4.20"))
        order.place(timezone.now())
        self.repo.save(order)

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                OrderItemORM.objects.filter(order_id=order.id).update(quantity=0)


class StockInvariantTest(TestCase):
    """Tests for stock invariants."""

    def setUp(self):
        self.repo = ProductRepository()
        self.product = make_product(stock=3)

    def test_negative_stock_cannot_be_saved(self):
        """Test that stock cannot go negative through the repository."""
        self.product.stock_quantity = -1
        with self.assertRaises(ValueError) as context:
            self.repo.save_stock(self.product)
        self.assertIn("cannot be negative", str(context.exception))
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 3)

    def test_database_rejects_negative_stock(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                ProductORM.objects.filter(id=self.product.id).update(stock_quantity=-5)

    def test_lock_skips_unknown_products(self):
        missing = uuid4()
        with transaction.atomic():
            locked = lock_products([self.product.id, missing, self.product.id])
        self.assertEqual(list(locked), [self.product.id])
