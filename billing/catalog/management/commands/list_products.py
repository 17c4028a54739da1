"""
Django management command to list the product catalog with GST split prices
"""
from django.core.management.base import BaseCommand, CommandError

from billing.catalog.services import list_products
from billing.core.exceptions import ApiError
from billing.pricing.calculations import get_base_price


class Command(BaseCommand):
    help = 'List products with base price (before GST) and stock'

    def add_arguments(self, parser):
        parser.add_argument(
            '--search',
            default='',
            help='Only show products whose name or barcode contains this text',
        )
        parser.add_argument(
            '--refresh',
            action='store_true',
            help='Bypass the cached catalog',
        )

    def handle(self, *args, **options):
        search = (options.get('search') or '').lower()
        try:
            products = list_products(use_cache=not options.get('refresh'))
        except ApiError as e:
            raise CommandError(e.message)

        if search:
            products = [
                p for p in products
                if search in (p.get('name') or '').lower() or search in (p.get('barcode') or '').lower()
            ]

        self.stdout.write(f"{'Barcode':<12} {'Name':<30} {'Type':<11} {'Price':>9} {'Base':>9} {'Stock':>8}")
        self.stdout.write("-" * 84)
        for product in products:
            base_price = get_base_price(product.get('type'), product.get('price'))
            name = (product.get('name') or '')[:30]
            self.stdout.write(
                f"{product.get('barcode') or '':<12} {name:<30} "
                f"{product.get('type') or '':<11} {str(product.get('price', 0)):>9} {str(base_price):>9} "
                f"{str(product.get('quantity', 0)):>8}"
            )
        self.stdout.write(self.style.SUCCESS(f"{len(products)} products"))
