"""
Django management command to verify the cache the cashier desk relies on.

Usage:
    python manage.py check_cache
"""
from django.conf import settings
from django.core.cache import cache
from django.core.management.base import BaseCommand

from billing.catalog.barcode_cache import (
    cache_products_list, get_cached_product, get_products_list_cache_key,
    invalidate_product_cache,
)

CHECK_COMPANY_ID = '__check_cache__'


class Command(BaseCommand):
    help = 'Check the cache backend and the barcode index round trip'

    def handle(self, *args, **options):
        self.stdout.write("=" * 60)
        self.stdout.write(self.style.SUCCESS("Cache Configuration Check"))
        self.stdout.write("=" * 60)

        self.stdout.write(f"Cache Backend: {settings.CACHES['default']['BACKEND']}")
        self.stdout.write(f"Cache Location: {settings.CACHES['default'].get('LOCATION', 'N/A')}")
        if not settings.REDIS_URL:
            self.stdout.write(self.style.WARNING(
                "REDIS_URL not set, using the per-process memory cache"
            ))

        product = {'id': 0, 'name': 'Cache check', 'barcode': 'CHECK-0A', 'price': 0}
        try:
            cache_products_list([product], CHECK_COMPANY_ID, ttl=60)
            cached = get_cached_product(product['barcode'], CHECK_COMPANY_ID)
            if cached and cached.get('barcode') == product['barcode']:
                self.stdout.write(self.style.SUCCESS("Barcode cache retrieval: OK"))
            else:
                self.stdout.write(self.style.ERROR(f"Barcode cache retrieval failed (got: {cached})"))

            invalidate_product_cache(product, CHECK_COMPANY_ID)
            if cache.get(get_products_list_cache_key(CHECK_COMPANY_ID)) is None:
                self.stdout.write(self.style.SUCCESS("Cache invalidation: OK"))
            else:
                self.stdout.write(self.style.ERROR("Cache invalidation failed"))
        except Exception as e:
            self.stdout.write(self.style.ERROR(f"ERROR: {e}"))
            self.stdout.write(self.style.WARNING("Check REDIS_URL in the .env file and that Redis is reachable"))
            raise
