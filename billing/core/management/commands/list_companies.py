"""
Django management command to list companies registered on the billing API
"""
from django.core.management.base import BaseCommand, CommandError

from billing.core.api_client import list_companies
from billing.core.exceptions import ApiError


class Command(BaseCommand):
    help = 'List companies registered on the billing API'

    def handle(self, *args, **options):
        try:
            companies = list_companies()
        except ApiError as e:
            raise CommandError(e.message)

        if not companies:
            self.stdout.write(self.style.WARNING('No companies found'))
            return

        for company in companies:
            self.stdout.write(f"{str(company.get('id', '-')):>12}  {company.get('companyName', '')}")
        self.stdout.write(self.style.SUCCESS(f"{len(companies)} companies"))
