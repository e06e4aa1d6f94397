"""
Shared fixtures for database-backed tests.
"""
from decimal import Decimal
from itertools import count

from shop.infra.models import ProductORM
from shop.infra.repositories import CustomerRepository

_sequence = count(1)


def make_customer(role="USER", **overrides):
    number = next(_sequence)
    data = {
        "first_name": "Test",
        "last_name": f"Customer{number}",
        "email": f"customer{number}@example.com",
        "password": "secret-password",
        "role": role,
    }
    data.update(overrides)
    return CustomerRepository().create(**data)


def make_product(name="Widget", price="9.99", stock=10, category="gadgets", **overrides):
    return ProductORM.objects.create(
        name=name,
        description=overrides.pop("description", f"{name} description"),
        price=Decimal(price),
        category=category,
        stock_quantity=stock,
        **overrides,
    )


def stock_of(product):
    return ProductORM.objects.get(id=product.id).stock_quantity
