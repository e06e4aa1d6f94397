"""
Management command to add stock to a product under a row lock.
"""
from django.core.management.base import BaseCommand, CommandError

from shop.domain.exceptions import ShopError
from shop.services import CatalogService


class Command(BaseCommand):
    help = 'Add units to a product\'s stock'

    def add_arguments(self, parser):
        parser.add_argument('product_id', help='Product UUID')
        parser.add_argument('quantity', type=int, help='Units to add (positive)')

    def handle(self, *args, **options):
        try:
            product = CatalogService().restock(options['product_id'], options['quantity'])
        except ShopError as e:
            raise CommandError(e.message) from e

        self.stdout.write(
            self.style.SUCCESS(f'{product.name}: stock is now {product.stock_quantity}')
        )
