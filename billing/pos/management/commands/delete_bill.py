"""
Django management command to delete a bill by its number
"""
from django.core.management.base import BaseCommand, CommandError

from billing.core.exceptions import ApiError
from billing.pos.services import delete_bill


class Command(BaseCommand):
    help = 'Delete a bill by bill number'

    def add_arguments(self, parser):
        parser.add_argument('bill_no', help='Bill number, e.g. BILL-4821')
        parser.add_argument(
            '--yes',
            action='store_true',
            help='Do not ask for confirmation',
        )

    def handle(self, *args, **options):
        bill_no = options['bill_no']
        if not options.get('yes'):
            answer = input(f"Delete bill {bill_no}? [y/N] ")
            if answer.strip().lower() not in ('y', 'yes'):
                self.stdout.write(self.style.WARNING('Cancelled'))
                return

        try:
            delete_bill(bill_no)
        except ApiError as e:
            raise CommandError(e.message)

        self.stdout.write(self.style.SUCCESS(f"Deleted bill {bill_no}"))
