"""
Django management command to print the daily sales report, salesman
commissions and the cash closing for a day
"""
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from billing.core.exceptions import ApiError
from billing.reports.services import build_daily_report, generate_report


def parse_expense(value):
    """'Tea:120' -> {'label': 'Tea', 'amount': '120'}"""
    label, sep, amount = value.rpartition(':')
    if not sep:
        raise CommandError(f"Invalid expense '{value}', expected LABEL:AMOUNT")
    return {'label': label, 'amount': amount}


class Command(BaseCommand):
    help = 'Daily sales report with payment breakdown, commissions, expenses and net cash'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            default=None,
            help='Report date YYYY-MM-DD (default: today)',
        )
        parser.add_argument(
            '--company-id',
            default=None,
            help='Company to report on (default: BILLING_COMPANY_ID)',
        )
        parser.add_argument(
            '--expense',
            action='append',
            default=[],
            help='Cash expense as LABEL:AMOUNT; repeat for each expense',
        )
        parser.add_argument(
            '--generate',
            action='store_true',
            help='Also ask the API to generate the stored report for the day',
        )

    def handle(self, *args, **options):
        date = options.get('date') or timezone.localdate().isoformat()
        expenses = [parse_expense(e) for e in options.get('expense') or []]

        try:
            report = build_daily_report(date, company_id=options.get('company_id'), expenses=expenses)
            if options.get('generate'):
                generate_report(date)
        except ValueError as e:
            raise CommandError(str(e))
        except ApiError as e:
            raise CommandError(e.message)

        closing = report['closing']
        self.stdout.write("=" * 60)
        self.stdout.write(self.style.SUCCESS(f"DAILY REPORT {report['date']}"))
        self.stdout.write("=" * 60)
        self.stdout.write(f"Total Sales:    {closing['total_sales']}")
        self.stdout.write(f"  Cash:         {closing['cash']}")
        self.stdout.write(f"  UPI:          {closing['upi']}")
        self.stdout.write(f"  Card:         {closing['card']}")
        self.stdout.write(f"  Other:        {closing['other']}")
        self.stdout.write("")

        self.stdout.write("Salesman commissions:")
        if not report['commissions']:
            self.stdout.write("  none")
        for row in report['commissions']:
            salesman = row.get('salesman') or {}
            self.stdout.write(
                f"  {salesman.get('name') or '-':<20} {salesman.get('commissionRate', 0)}%  "
                f"{row.get('totalCommission1', 0)} + {row.get('totalCommission2', 0)} = {row.get('totalCommission', 0)}"
            )
        self.stdout.write("")

        for expense in expenses:
            self.stdout.write(f"  Expense {expense['label']}: {expense['amount']}")
        self.stdout.write(f"Total Expenses: {closing['total_expenses']}")
        self.stdout.write(self.style.SUCCESS(f"Net Cash:       {closing['net_cash']}"))
