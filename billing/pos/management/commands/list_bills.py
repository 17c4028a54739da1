"""
Django management command to list saved bills, optionally for one day
and filtered by customer name or bill number
"""
from django.core.management.base import BaseCommand, CommandError

from billing.core.exceptions import ApiError
from billing.pos.services import list_bills, list_bills_by_date, search_bills


class Command(BaseCommand):
    help = 'List bills with customer, salesman and final total'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            default=None,
            help='Only bills of this day YYYY-MM-DD for the configured company',
        )
        parser.add_argument(
            '--company-id',
            default=None,
            help='Company for --date (default: BILLING_COMPANY_ID)',
        )
        parser.add_argument(
            '--search',
            default='',
            help='Only show bills whose customer name or bill number contains this text',
        )

    def handle(self, *args, **options):
        try:
            if options.get('date'):
                bills = list_bills_by_date(options['date'], company_id=options.get('company_id'))
            else:
                bills = list_bills()
        except ApiError as e:
            raise CommandError(e.message)

        bills = search_bills(bills, options.get('search'))

        self.stdout.write(f"{'Bill No':<12} {'Date':<20} {'Customer':<25} {'Salesman':<20} {'Total':>10}")
        self.stdout.write("-" * 91)
        for bill in bills:
            customer = (bill.get('customerName') or '')[:25]
            salesman = (bill.get('salesmanName') or '')[:20]
            self.stdout.write(
                f"{bill.get('billNo') or '':<12} {str(bill.get('date') or '')[:19]:<20} "
                f"{customer:<25} {salesman:<20} {str(bill.get('finalTotal', 0)):>10}"
            )
        self.stdout.write(self.style.SUCCESS(f"{len(bills)} bills"))
