"""
Django management command to add a product to the catalog
"""
from django.core.management.base import BaseCommand, CommandError
from rest_framework import serializers

from billing.catalog.services import create_product
from billing.core.exceptions import ApiError


class Command(BaseCommand):
    help = 'Add a product; a base barcode is generated when none is given'

    def add_arguments(self, parser):
        parser.add_argument('--name', required=True)
        parser.add_argument('--type', required=True, help='Saree, Cloth or Handicraft')
        parser.add_argument('--unit', default=None, help='pieces, meters or grams (default: per type)')
        parser.add_argument('--cost', required=True)
        parser.add_argument('--price', required=True, help='Tax-inclusive selling price')
        parser.add_argument('--quantity', required=True)
        parser.add_argument('--buyer-id', required=True)
        parser.add_argument('--barcode', default='')

    def handle(self, *args, **options):
        data = {
            'name': options['name'],
            'type': options['type'],
            'cost': options['cost'],
            'price': options['price'],
            'quantity': options['quantity'],
            'buyerId': options['buyer_id'],
            'barcode': options.get('barcode') or '',
        }
        if options.get('unit'):
            data['unit'] = options['unit']

        try:
            product = create_product(data)
        except serializers.ValidationError as e:
            raise CommandError(f"Invalid product: {e.detail}")
        except ApiError as e:
            raise CommandError(e.message)

        self.stdout.write(self.style.SUCCESS(
            f"Added {product.get('name')} with barcode {product.get('barcode')}"
        ))
