"""
Tests for the shop management commands.
"""
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from shop.services import OrderService
from shop.test.helpers import make_customer, make_product, stock_of


class OrderReportCommandTest(TestCase):

    def run_command(self, *args):
        out = StringIO()
        call_command("order_report", *args, stdout=out)
        return out.getvalue()

    def test_report_on_empty_store(self):
        output = self.run_command()

        self.assertIn("Total orders: 0", output)
        self.assertIn("Revenue (excluding cancelled): 0.00", output)
        self.assertIn("No low-stock products", output)

    def test_report_lists_counts_and_low_stock(self):
        service = OrderService()
        product = make_product(name="Kettle", price="30.00", stock=4, category="kitchen")
        customer_id = make_customer()
        service.create_order(customer_id, [{"product_id": product.id, "quantity": 1}])
        cancelled = service.create_order(customer_id, [{"product_id": product.id, "quantity": 2}])
        service.cancel_order(cancelled.id)

        output = self.run_command("--low-stock-threshold", "5")

        self.assertIn("Total orders: 2", output)
        self.assertIn("PENDING", output)
        self.assertIn("Revenue (excluding cancelled): 30", output)
        self.assertIn("Low-stock products: 1", output)
        self.assertIn("Kettle (kitchen): 3", output)

    def test_skip_stock(self):
        make_product(stock=0)
        output = self.run_command("--skip-stock")
        self.assertNotIn("Low-stock", output)
        self.assertNotIn("No low-stock", output)


class RestockProductCommandTest(TestCase):

    def test_restock_adds_units(self):
        product = make_product(name="Kettle", stock=4)
        out = StringIO()

        call_command("restock_product", str(product.id), "6", stdout=out)

        self.assertIn("Kettle: stock is now 10", out.getvalue())
        self.assertEqual(stock_of(product), 10)

    def test_restock_rejects_bad_quantity(self):
        product = make_product(stock=4)

        with self.assertRaises(CommandError):
            call_command("restock_product", str(product.id), "0", stdout=StringIO())
        self.assertEqual(stock_of(product), 4)
