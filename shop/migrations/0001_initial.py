import uuid
from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CustomerORM",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("first_name", models.CharField(max_length=100)),
                ("last_name", models.CharField(max_length=100)),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("password", models.CharField(max_length=128)),
                ("role", models.CharField(choices=[("USER", "Customer"), ("ADMIN", "Administrator")], default="USER", max_length=10)),
            ],
        ),
        migrations.CreateModel(
            name="ProductORM",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("category", models.CharField(max_length=100)),
                ("stock_quantity", models.IntegerField(default=0)),
            ],
        ),
        migrations.CreateModel(
            name="OrderORM",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("order_date", models.DateTimeField()),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("status", models.CharField(choices=[("PENDING", "Pending"), ("CONFIRMED", "Confirmed"), ("SHIPPED", "Shipped"), ("DELIVERED", "Delivered"), ("CANCELLED", "Cancelled")], max_length=20)),
                ("customer", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="orders", to="shop.customerorm")),
            ],
        ),
        migrations.CreateModel(
            name="OrderItemORM",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("position", models.PositiveIntegerField(default=0)),
                ("product_name", models.CharField(max_length=255)),
                ("quantity", models.IntegerField()),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("subtotal", models.DecimalField(decimal_places=2, max_digits=12)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="shop.orderorm")),
                ("product", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="order_items", to="shop.productorm")),
            ],
            options={
                "ordering": ["position"],
            },
        ),
        migrations.CreateModel(
            name="IdempotencyKey",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("key", models.CharField(max_length=255)),
                ("user_id", models.UUIDField()),
                ("operation", models.CharField(choices=[("CREATE_ORDER", "Create order"), ("UPDATE_ORDER_STATUS", "Update order status"), ("CANCEL_ORDER", "Cancel order")], max_length=30)),
                ("request_hash", models.CharField(max_length=255)),
                ("response_payload", models.JSONField()),
            ],
            options={
                "unique_together": {("key", "user_id", "operation")},
            },
        ),
        migrations.AddIndex(
            model_name="customerorm",
            index=models.Index(fields=["role"], name="customer_role_idx"),
        ),
        migrations.AddIndex(
            model_name="productorm",
            index=models.Index(fields=["category"], name="product_category_idx"),
        ),
        migrations.AddIndex(
            model_name="productorm",
            index=models.Index(fields=["stock_quantity"], name="product_stock_idx"),
        ),
        migrations.AddConstraint(
            model_name="productorm",
            constraint=models.CheckConstraint(condition=models.Q(("stock_quantity__gte", 0)), name="product_stock_non_negative"),
        ),
        migrations.AddConstraint(
            model_name="productorm",
            constraint=models.CheckConstraint(condition=models.Q(("price__gte", Decimal("0"))), name="product_price_non_negative"),
        ),
        migrations.AddIndex(
            model_name="orderorm",
            index=models.Index(fields=["customer", "status"], name="order_customer_status_idx"),
        ),
        migrations.AddIndex(
            model_name="orderorm",
            index=models.Index(fields=["customer", "-order_date"], name="order_customer_date_idx"),
        ),
        migrations.AddIndex(
            model_name="orderorm",
            index=models.Index(fields=["status"], name="order_status_idx"),
        ),
        migrations.AddIndex(
            model_name="orderorm",
            index=models.Index(fields=["order_date"], name="order_date_idx"),
        ),
        migrations.AddIndex(
            model_name="orderitemorm",
            index=models.Index(fields=["order", "position"], name="order_item_position_idx"),
        ),
        migrations.AddConstraint(
            model_name="orderitemorm",
            constraint=models.CheckConstraint(condition=models.Q(("quantity__gte", 1)), name="order_item_quantity_positive"),
        ),
        migrations.AddIndex(
            model_name="idempotencykey",
            index=models.Index(fields=["request_hash"], name="idempotency_hash_idx"),
        ),
        migrations.AddIndex(
            model_name="idempotencykey",
            index=models.Index(fields=["key", "user_id", "operation"], name="idempotency_lookup_idx"),
        ),
    ]
