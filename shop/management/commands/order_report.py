"""
Management command to print order statistics and low-stock products.
"""
from django.core.management.base import BaseCommand

from shop.services import CatalogService, ReportingService


class Command(BaseCommand):
    help = 'Print order counts per status, revenue and low-stock products'

    def add_arguments(self, parser):
        parser.add_argument(
            '--low-stock-threshold',
            type=int,
            default=None,
            help='List products with stock below this value (defaults to SHOP_LOW_STOCK_THRESHOLD)',
        )
        parser.add_argument(
            '--skip-stock',
            action='store_true',
            help='Only print order statistics',
        )

    def handle(self, *args, **options):
        stats = ReportingService().order_statistics()

        self.stdout.write(f'Total orders: {stats.total_orders}')
        for status, count in stats.by_status.items():
            self.stdout.write(f'  {status.value:<10} {count}')
        self.stdout.write(
            self.style.SUCCESS(f'Revenue (excluding cancelled): {stats.total_revenue}')
        )

        if options['skip_stock']:
            return

        products = CatalogService().low_stock_products(options['low_stock_threshold'])
        if not products:
            self.stdout.write('No low-stock products')
            return

        self.stdout.write(self.style.WARNING(f'Low-stock products: {len(products)}'))
        for product in products:
            self.stdout.write(f'  {product.name} ({product.category}): {product.stock_quantity}')
