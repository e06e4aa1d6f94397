"""
Tests for the catalog admin.
"""
from django.contrib.auth.models import User
from django.test import TestCase

from shop.services import OrderService
from shop.test.helpers import make_customer, make_product, stock_of


class ProductAdminTest(TestCase):

    def setUp(self):
        self.staff = User.objects.create_superuser("admin", "admin@example.com", "admin-password")
        self.client.force_login(self.staff)
        self.product = make_product(name="Mug", price="9.99", stock=10, category="kitchen")

    def change_url(self):
        return f"/admin/shop/productorm/{self.product.id}/change/"

    def test_change_form_cannot_overwrite_reserved_stock(self):
        """A stale stock value posted from the change form is ignored."""
        OrderService().create_order(make_customer(), [{"product_id": self.product.id, "quantity": 3}])
        self.assertEqual(stock_of(self.product), 7)

        response = self.client.post(
            self.change_url(),
            data={
                "name": "Mug",
                "description": "Now dishwasher safe",
                "price": "9.99",
                "category": "kitchen",
                "stock_quantity": "10",
            },
        )

        self.assertEqual(response.status_code, 302)
        self.product.refresh_from_db()
        self.assertEqual(self.product.description, "Now dishwasher safe")
        self.assertEqual(self.product.stock_quantity, 7)

    def test_stock_is_read_only_on_change_form(self):
        response = self.client.get(self.change_url())

        self.assertEqual(response.status_code, 200)
        self.assertNotIn("stock_quantity", response.context["adminform"].form.fields)

    def test_stock_can_be_set_when_adding_a_product(self):
        response = self.client.get("/admin/shop/productorm/add/")

        self.assertEqual(response.status_code, 200)
        self.assertIn("stock_quantity", response.context["adminform"].form.fields)
