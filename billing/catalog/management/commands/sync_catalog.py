"""
Django management command to prefetch products and salesmen into the cache
so the first scans of the day do not wait on the API
"""
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from billing.catalog.services import list_products
from billing.core.api_client import get_api_client
from billing.core.exceptions import ApiError
from billing.parties.services import list_salesmen


class Command(BaseCommand):
    help = 'Prefetch the product catalog and salesmen into the cache'

    def add_arguments(self, parser):
        parser.add_argument(
            '--company-id',
            default=None,
            help='Company to sync (default: BILLING_COMPANY_ID)',
        )

    def handle(self, *args, **options):
        company_id = options.get('company_id') or settings.BILLING_COMPANY_ID
        client = get_api_client()

        try:
            products = list_products(client=client, company_id=company_id, use_cache=False)
            salesmen = list_salesmen(client=client, company_id=company_id, use_cache=False)
        except ApiError as e:
            raise CommandError(e.message)

        self.stdout.write(self.style.SUCCESS(
            f"Cached {len(products)} products and {len(salesmen)} salesmen "
            f"for company {company_id or '-'}"
        ))
