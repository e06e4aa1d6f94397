"""
Catalog and customer services.
"""
from __future__ import annotations

import logging
from uuid import UUID

from django.conf import settings
from django.db import IntegrityError, OperationalError, transaction

from shop.domain.exceptions import Conflict, NotFound, ValidationError
from shop.infra.models import ROLE_CHOICES, CustomerORM, ProductORM
from shop.infra.repositories import CustomerRepository, ProductRepository
from shop.infra.retry import retry_with_backoff
from shop.services.orders import _parse_uuid, clamp_page


logger = logging.getLogger(__name__)

VALID_ROLES = tuple(role for role, _ in ROLE_CHOICES)


class CatalogService:
    """Product lookups used by order placement and the storefront."""

    def __init__(self, product_repo: ProductRepository | None = None):
        self.product_repo = product_repo or ProductRepository()

    def get_product(self, product_id: UUID | str) -> ProductORM:
        product = self.product_repo.get_by_id(product_id)
        if not product:
            raise NotFound("Product", product_id)
        return product

    def list_products(
        self,
        category: str | None = None,
        search: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> tuple[list[ProductORM], int]:
        limit, offset = clamp_page(limit, offset)
        return self.product_repo.search(
            category=category,
            search=search.strip() if search else None,
            limit=limit,
            offset=offset,
        )

    @retry_with_backoff(max_retries=3, initial_delay=0.05, max_delay=1.0, exceptions=(OperationalError,))
    @transaction.atomic
    def restock(self, product_id: UUID | str, quantity: int) -> ProductORM:
        """Add ``quantity`` units to the current stock under a row lock."""
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError("Quantity must be a positive integer", quantity=str(quantity))

        product_id = _parse_uuid(product_id, "product_id")
        product = self.product_repo.lock_many([product_id]).get(product_id)
        if product is None:
            raise NotFound("Product", product_id)

        product.stock_quantity += quantity
        self.product_repo.save_stock(product)

        logger.info(
            "product_restocked",
            extra={
                "product_id": str(product.id),
                "quantity": quantity,
                "stock_quantity": product.stock_quantity,
            },
        )
        return product

    def low_stock_products(self, threshold: int | None = None) -> list[ProductORM]:
        """Products whose stock is strictly below ``threshold``."""
        if threshold is None:
            threshold = settings.SHOP_LOW_STOCK_THRESHOLD
        if threshold < 0:
            raise ValidationError("threshold must not be negative", threshold=threshold)
        return self.product_repo.below_stock(threshold)


class CustomerService:
    """Customer lookups and registration."""

    def __init__(self, customer_repo: CustomerRepository | None = None):
        self.customer_repo = customer_repo or CustomerRepository()

    def get_customer(self, customer_id: UUID | str) -> CustomerORM:
        customer = self.customer_repo.get_by_id(customer_id)
        if not customer:
            raise NotFound("Customer", customer_id)
        return customer

    def get_by_email(self, email: str) -> CustomerORM | None:
        return self.customer_repo.get_by_email(email)

    def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str | None = None,
        role: str = "USER",
    ) -> CustomerORM:
        if role not in VALID_ROLES:
            raise ValidationError(
                f"Invalid role '{role}'. Valid values: {', '.join(VALID_ROLES)}",
                role=role,
            )
        if not email or "@" not in email:
            raise ValidationError("A valid email is required", email=email)
        if self.customer_repo.email_exists(email):
            raise Conflict(f"Email {email} is already registered", email=email)

        try:
            with transaction.atomic():
                customer_id = self.customer_repo.create(
                    first_name=first_name,
                    last_name=last_name,
                    email=email,
                    password=password,
                    role=role,
                )
        except IntegrityError:
            # lost a race with a concurrent registration of the same email
            raise Conflict(f"Email {email} is already registered", email=email) from None

        logger.info("customer_registered", extra={"customer_id": str(customer_id)})
        return self.customer_repo.get_by_id(customer_id)
