"""
Django management command to compute the barcode for an increased-price label
"""
from django.core.management.base import BaseCommand, CommandError

from billing.catalog.barcodes import markup_label
from billing.catalog.services import get_product_by_barcode
from billing.core.exceptions import ApiError


class Command(BaseCommand):
    help = 'Show the markup barcode and label price for selling a product above catalog price'

    def add_arguments(self, parser):
        parser.add_argument('barcode', help='Base barcode of the product, e.g. 1000A')
        parser.add_argument(
            'increase',
            help='Price increase in rupees; only whole hundreds are encoded',
        )

    def handle(self, *args, **options):
        try:
            product = get_product_by_barcode(options['barcode'])
        except ApiError as e:
            raise CommandError(e.message)
        if product is None:
            raise CommandError(f"Product not found for barcode: {options['barcode']}")

        try:
            label = markup_label(product, options['increase'])
        except ValueError as e:
            raise CommandError(str(e))

        self.stdout.write(f"Product: {product.get('name')}")
        self.stdout.write(f"Catalog price: {product.get('price')}")
        self.stdout.write(self.style.SUCCESS(f"Label barcode: {label['barcode']}  price: {label['price']}"))
