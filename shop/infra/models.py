from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

from django.db import models


ROLE_CHOICES = (
    ("USER", "Customer"),
    ("ADMIN", "Administrator"),
)

OPERATION_TYPE = (
    ("CREATE_ORDER", "Create order"),
    ("UPDATE_ORDER_STATUS", "Update order status"),
    ("CANCEL_ORDER", "Cancel order"),
)


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class CustomerORM(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(unique=True)
    password = models.CharField(max_length=128)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default="USER")

    class Meta:
        indexes = [
            models.Index(fields=("role",), name="customer_role_idx"),
        ]

    def __str__(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"


class ProductORM(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(max_digits=12, decimal_places=2)
    category = models.CharField(max_length=100)
    stock_quantity = models.IntegerField(default=0)

    class Meta:
        indexes = [
            models.Index(fields=("category",), name="product_category_idx"),
            models.Index(fields=("stock_quantity",), name="product_stock_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(stock_quantity__gte=0),
                name="product_stock_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(price__gte=Decimal("0")),
                name="product_price_non_negative",
            ),
        ]

    def __str__(self):
        return self.name


class OrderORM(TimeStampedModel):

    STATUS_CHOICES = (
        ("PENDING", "Pending"),
        ("CONFIRMED", "Confirmed"),
        ("SHIPPED", "Shipped"),
        ("DELIVERED", "Delivered"),
        ("CANCELLED", "Cancelled"),
    )

    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    customer = models.ForeignKey(
        CustomerORM,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    order_date = models.DateTimeField()
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES)

    class Meta:
        indexes = [
            models.Index(fields=("customer", "status"), name="order_customer_status_idx"),
            models.Index(fields=("customer", "-order_date"), name="order_customer_date_idx"),
            models.Index(fields=("status",), name="order_status_idx"),
            models.Index(fields=("order_date",), name="order_date_idx"),
        ]


class OrderItemORM(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    order = models.ForeignKey(
        OrderORM,
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        ProductORM,
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    position = models.PositiveIntegerField(default=0)
    product_name = models.CharField(max_length=255)
    quantity = models.IntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        ordering = ["position"]
        indexes = [
            models.Index(fields=("order", "position"), name="order_item_position_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_item_quantity_positive",
            ),
        ]

    def save(self, *args, **kwargs):
        # subtotal always follows quantity and unit_price
        self.subtotal = self.unit_price * self.quantity
        super().save(*args, **kwargs)


class IdempotencyKey(TimeStampedModel):
    key = models.CharField(max_length=255)
    user_id = models.UUIDField()
    operation = models.CharField(max_length=30, choices=OPERATION_TYPE)
    request_hash = models.CharField(max_length=255)
    response_payload = models.JSONField()

    class Meta:
        unique_together = [("key", "user_id", "operation")]
        indexes = [
            models.Index(fields=("request_hash",), name="idempotency_hash_idx"),
            models.Index(fields=("key", "user_id", "operation"), name="idempotency_lookup_idx"),
        ]
