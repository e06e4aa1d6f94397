from django.contrib import admin

from shop.infra.models import (
    CustomerORM,
    IdempotencyKey,
    OrderItemORM,
    OrderORM,
    ProductORM,
)


@admin.register(CustomerORM)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("id", "first_name", "last_name", "email", "role", "created_at")
    list_filter = ("role",)
    search_fields = ("first_name", "last_name", "email")
    exclude = ("password",)


@admin.register(ProductORM)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "category", "price", "stock_quantity", "updated_at")
    list_filter = ("category",)
    search_fields = ("name", "description")

    def get_readonly_fields(self, request, obj=None):
        # stock moves only through order services and CatalogService.restock
        if obj is not None:
            return ("stock_quantity",)
        return ()


class OrderItemInline(admin.TabularInline):
    model = OrderItemORM
    extra = 0
    can_delete = False
    fields = ("position", "product", "product_name", "quantity", "unit_price", "subtotal")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(OrderORM)
class OrderAdmin(admin.ModelAdmin):
    """Read-only: status changes must go through the order services."""
    list_display = ("id", "customer", "status", "total_amount", "order_date")
    list_filter = ("status", "order_date")
    search_fields = ("id", "customer__email", "customer__last_name")
    readonly_fields = ("id", "customer", "status", "total_amount", "order_date", "created_at", "updated_at")
    inlines = (OrderItemInline,)

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(IdempotencyKey)
class IdempotencyAdmin(admin.ModelAdmin):
    list_display = ("key", "user_id", "operation", "created_at")
    list_filter = ("operation", "created_at")
    search_fields = ("key", "user_id")
